"""RentalDesk admin console.

A client for a vehicle-rental back office: customers, vehicles, charges,
loan payments, interventions, technical inspections and insurance policies,
each with its attached documents.

Example usage:
    from rentaldesk import RentalDesk

    async with RentalDesk() as desk:
        customers = desk.panel("customers")
        await customers.load()
        for customer in customers.visible("dupont"):
            print(customer.label)
"""

from rentaldesk.console import RentalDesk
from rentaldesk.client import Client
from rentaldesk.exceptions import (
    RentalDeskError,
    APIError,
    ConfigurationError,
    ValidationError,
    NetworkError,
)

# Models
from rentaldesk.models.attachment import Attachment, LocalFile, Origin
from rentaldesk.models.document import Document
from rentaldesk.models.customer import Customer
from rentaldesk.models.vehicle import Vehicle
from rentaldesk.models.charge import Charge
from rentaldesk.models.traite import Traite
from rentaldesk.models.intervention import Intervention
from rentaldesk.models.inspection import VehicleInspection
from rentaldesk.models.insurance import VehicleInsurance

# Services
from rentaldesk.documents.uploader import Uploader
from rentaldesk.services.entity_panel import EntityPanel
from rentaldesk.services.form_draft import FormDraft, FormState

__version__ = "0.1.0"

__all__ = [
    # Main entry point
    "RentalDesk",
    "Client",
    # Exceptions
    "RentalDeskError",
    "APIError",
    "ConfigurationError",
    "ValidationError",
    "NetworkError",
    # Models
    "Attachment",
    "LocalFile",
    "Origin",
    "Document",
    "Customer",
    "Vehicle",
    "Charge",
    "Traite",
    "Intervention",
    "VehicleInspection",
    "VehicleInsurance",
    # Services
    "Uploader",
    "EntityPanel",
    "FormDraft",
    "FormState",
]
