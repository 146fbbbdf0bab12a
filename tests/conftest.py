"""Shared fixtures for RentalDesk tests."""
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from rentaldesk.utils.settings import get_settings

API_URL = 'http://localhost:5000'
TODAY = date(2024, 6, 15)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Make every test read settings from a clean environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def mock_client():
    """Create a mock client with async methods."""
    client = MagicMock()
    client.get = AsyncMock()
    client.post = AsyncMock()
    client.put = AsyncMock()
    client.delete = AsyncMock()
    client.base_url = API_URL
    return client


@pytest.fixture
def sample_document_data():
    return {
        'name': 'carte-grise.pdf',
        'url': 'C:\\rental\\backend\\uploads\\1717171717-carte-grise.pdf',
        'type': 'application/pdf',
        'size': 20480,
    }


@pytest.fixture
def sample_customer_data(sample_document_data):
    return {
        '_id': 'cust-1',
        'civilite': 'M.',
        'nationalite': 'Marocaine',
        'type': 'Particulier',
        'listeNoire': False,
        'nomFr': 'Alaoui',
        'prenomFr': 'Karim',
        'dateNaissance': '1990-03-20T00:00:00.000Z',
        'age': 34,
        'lieuNaissance': 'Rabat',
        'cin': 'AB123456',
        'cinDelivreLe': '2015-01-10',
        'cinDelivreA': 'Rabat',
        'cinValidite': '2030-01-10',
        'numeroPermis': 'P-998877',
        'permisDelivreLe': '2012-05-02',
        'permisDelivreA': 'Rabat',
        'permisValidite': '2032-05-02',
        'telephone': '0612345678',
        'ville': 'Rabat',
        'documents': [sample_document_data],
        'createdAt': '2024-01-01T10:00:00.000Z',
    }


@pytest.fixture
def sample_vehicle_data():
    return {
        '_id': 'veh-1',
        'chassisNumber': 'VF1RFB00123456789',
        'licensePlate': '12345-A-6',
        'brand': 'Dacia',
        'model': 'Logan',
        'fuelType': 'diesel',
        'fuelLevel': 'plein',
        'mileage': 45000,
        'rentalPrice': 250,
        'transmission': 'Manuelle',
        'statut': 'En parc',
        'documents': [],
    }


@pytest.fixture
def sample_charge_data():
    return {
        '_id': 'chg-1',
        'motif': 'Loyer agence',
        'date': '2024-05-01T00:00:00.000Z',
        'montant': 4500,
        'attachments': ['/srv/rental/uploads/1714-quittance.pdf', '/srv/rental/uploads/1714-recu.jpg'],
    }


@pytest.fixture
def sample_traite_data():
    return {
        '_id': 'tr-1',
        'vehicle': {'_id': 'veh-1', 'licensePlate': '12345-A-6', 'brand': 'Dacia', 'model': 'Logan'},
        'mois': 3,
        'annee': 2024,
        'montant': 3200,
        'reference': 'TR-2024-03',
        'documents': [],
    }


@pytest.fixture
def sample_inspection_data():
    return {
        'id': 'insp-1',
        'vehicle': 'veh-1',
        'center': 'Dekra Rabat',
        'inspectionDate': '2024-01-31',
        'duration': 12,
        'endDate': '2025-01-31',
        'price': 350,
        'documents': [
            {'name': 'pv.pdf', 'url': 'uploads/vehicleinspections/pv.pdf', 'type': 'application/pdf', 'size': 100},
        ],
    }
