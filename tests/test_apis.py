"""Tests for API classes."""
import json

import pytest

from rentaldesk.api.entity_api import EntityApi
from rentaldesk.exceptions import APIError, ConfigurationError, ValidationError
from rentaldesk.models.attachment import LocalFile
from rentaldesk.models.customer import Customer
from rentaldesk.models.document import Document
from rentaldesk.models.vehicle import Vehicle
from rentaldesk.schemas import SCHEMAS


class TestEntityApiRead:
    """Tests for listing and fetching records."""

    @pytest.fixture
    def vehicle_api(self, mock_client):
        return EntityApi(mock_client, SCHEMAS['vehicles'])

    @pytest.mark.asyncio
    async def test_list_returns_models(self, vehicle_api, mock_client, sample_vehicle_data):
        """list should parse every record with the schema's model."""
        mock_client.get.return_value = [sample_vehicle_data]

        vehicles = await vehicle_api.list()

        assert len(vehicles) == 1
        assert isinstance(vehicles[0], Vehicle)
        assert vehicles[0].license_plate == '12345-A-6'
        mock_client.get.assert_called_once_with('/api/vehicles', query_params=None)

    @pytest.mark.asyncio
    async def test_list_accepts_wrapped_payload(self, vehicle_api, mock_client, sample_vehicle_data):
        mock_client.get.return_value = {'data': [sample_vehicle_data]}

        vehicles = await vehicle_api.list()

        assert vehicles[0].id == 'veh-1'

    @pytest.mark.asyncio
    async def test_list_rejects_unexpected_payload(self, vehicle_api, mock_client):
        mock_client.get.return_value = {'data': 'oops'}

        with pytest.raises(APIError):
            await vehicle_api.list()

    @pytest.mark.asyncio
    async def test_get_returns_model(self, vehicle_api, mock_client, sample_vehicle_data):
        mock_client.get.return_value = sample_vehicle_data

        vehicle = await vehicle_api.get('veh-1')

        assert vehicle.id == 'veh-1'
        mock_client.get.assert_called_once_with('/api/vehicles/veh-1')

    @pytest.mark.asyncio
    async def test_get_rejects_empty_id(self, vehicle_api, mock_client):
        with pytest.raises(ValidationError, match='ID cannot be empty'):
            await vehicle_api.get('  ')

        mock_client.get.assert_not_called()


class TestEntityApiWrite:
    """Tests for create, update and delete."""

    @pytest.fixture
    def upload(self, tmp_path):
        path = tmp_path / 'recu.pdf'
        path.write_bytes(b'%PDF-1.4')
        return LocalFile.from_path(str(path))

    @pytest.mark.asyncio
    async def test_create_sends_form_and_files(self, mock_client, sample_charge_data, upload):
        """Charges upload their files under the attachments field."""
        api = EntityApi(mock_client, SCHEMAS['charges'])
        mock_client.post.return_value = sample_charge_data

        charge = await api.create({'motif': 'Loyer agence', 'montant': 4500.0}, [upload])

        assert charge.id == 'chg-1'
        kwargs = mock_client.post.call_args.kwargs
        assert mock_client.post.call_args.args == ('/api/charges',)
        assert kwargs['form'] == {'motif': 'Loyer agence', 'montant': '4500.0'}
        assert kwargs['files'] == [('attachments', ('recu.pdf', b'%PDF-1.4', 'application/pdf'))]

    @pytest.mark.asyncio
    async def test_create_serializes_booleans(self, mock_client, sample_customer_data):
        api = EntityApi(mock_client, SCHEMAS['customers'])
        mock_client.post.return_value = sample_customer_data

        await api.create({'listeNoire': False, 'nomFr': 'Alaoui'})

        assert mock_client.post.call_args.kwargs['form']['listeNoire'] == 'false'
        assert mock_client.post.call_args.kwargs['files'] == []

    @pytest.mark.asyncio
    async def test_update_sends_kept_documents(self, mock_client, sample_vehicle_data, sample_document_data):
        api = EntityApi(mock_client, SCHEMAS['vehicles'])
        mock_client.put.return_value = sample_vehicle_data
        kept = Document(**sample_document_data)

        await api.update('veh-1', {'brand': 'Dacia'}, keep=[kept])

        form = mock_client.put.call_args.kwargs['form']
        assert mock_client.put.call_args.args == ('/api/vehicles/veh-1',)
        assert json.loads(form['existingDocuments']) == [kept.model_dump(mode='json')]
        assert 'documentsToDelete' not in form

    @pytest.mark.asyncio
    async def test_update_sends_staged_deletions(self, mock_client, sample_customer_data, sample_document_data):
        """Customers delete documents with the save, by URL."""
        api = EntityApi(mock_client, SCHEMAS['customers'])
        mock_client.put.return_value = sample_customer_data
        removed = Document(**sample_document_data)

        customer = await api.update('cust-1', {'nomFr': 'Alaoui'}, to_delete=[removed])

        assert isinstance(customer, Customer)
        form = mock_client.put.call_args.kwargs['form']
        assert json.loads(form['documentsToDelete']) == [removed.url]
        assert json.loads(form['existingDocuments']) == []

    @pytest.mark.asyncio
    async def test_delete(self, mock_client):
        api = EntityApi(mock_client, SCHEMAS['traites'])
        mock_client.delete.return_value = {'message': 'Traite removed'}

        result = await api.delete('tr-1')

        assert result == {'message': 'Traite removed'}
        mock_client.delete.assert_called_once_with('/api/traites/tr-1')


class TestEntityApiDocuments:
    """Tests for immediate document deletion."""

    @pytest.fixture
    def document(self, sample_document_data):
        return Document(**sample_document_data)

    @pytest.mark.asyncio
    async def test_delete_by_name(self, mock_client, document):
        api = EntityApi(mock_client, SCHEMAS['vehicleinsurances'])

        await api.delete_document('ins-1', document)

        mock_client.delete.assert_called_once_with(
            '/api/vehicleinsurances/ins-1/documents', data={'documentName': 'carte-grise.pdf'}
        )

    @pytest.mark.asyncio
    async def test_delete_by_url(self, mock_client, document):
        api = EntityApi(mock_client, SCHEMAS['vehicleinspections'])

        await api.delete_document('insp-1', document)

        mock_client.delete.assert_called_once_with(
            '/api/vehicleinspections/insp-1/documents', data={'documentUrl': document.url}
        )

    @pytest.mark.asyncio
    async def test_staged_entities_refuse_immediate_deletion(self, mock_client, document):
        api = EntityApi(mock_client, SCHEMAS['interventions'])

        with pytest.raises(ConfigurationError):
            await api.delete_document('int-1', document)

        mock_client.delete.assert_not_called()
