"""
Declarative description of every entity managed by the console.

Panels, forms and the API layer are generic; everything entity specific
(endpoint, fields, validation floors, derived fields, document handling)
lives in the schemas below.
"""
from __future__ import annotations

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict

from rentaldesk.exceptions import ValidationError
from rentaldesk.models.charge import Charge
from rentaldesk.models.customer import Customer
from rentaldesk.models.inspection import VehicleInspection
from rentaldesk.models.insurance import VehicleInsurance
from rentaldesk.models.intervention import INTERVENTION_STATUSES, INTERVENTION_TYPES, Intervention
from rentaldesk.models.record import Record
from rentaldesk.models.traite import MONTH_NAMES, Traite
from rentaldesk.models.vehicle import FUEL_LEVELS, FUEL_TYPES, TRANSMISSIONS, VEHICLE_STATUSES, Vehicle
from rentaldesk.utils.dt import add_months, compute_age, format_date, parse_date
from rentaldesk.utils.settings import get_settings
from rentaldesk.utils.validation import validate_date_not_within_last, validate_minimum_age


class FieldKind(str, Enum):
    TEXT = 'text'
    NUMBER = 'number'
    INTEGER = 'integer'
    DATE = 'date'
    CHOICE = 'choice'
    BOOL = 'bool'
    REFERENCE = 'reference'


class DocumentRemoval(str, Enum):
    BY_NAME = 'by_name'  # DELETE /:id/documents {"documentName": ...}
    BY_URL = 'by_url'  # DELETE /:id/documents {"documentUrl": ...}
    STAGED = 'staged'  # sent as documentsToDelete with the next update


class FieldSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    minimum: float | None = None
    choices: tuple[str, ...] = ()
    reference: str | None = None
    default: str = ''
    read_only: bool = False


class DerivedField(BaseModel):
    """A field recomputed from other fields of the same form."""
    model_config = ConfigDict(frozen=True)

    target: str

    @property
    def sources(self) -> tuple[str, ...]:
        return ()

    def compute(self, values: dict[str, str], today: date) -> str | None:
        """New value for ``target``, or None to leave it untouched."""
        return None

    def check(self, values: dict[str, str], today: date) -> dict[str, str]:
        return {}


class AgeFromBirthDate(DerivedField):
    source: str
    target: str = 'age'
    minimum: int | None = None

    @property
    def sources(self) -> tuple[str, ...]:
        return (self.source,)

    @property
    def minimum_age(self) -> int:
        return self.minimum if self.minimum is not None else get_settings().min_driver_age

    def compute(self, values: dict[str, str], today: date) -> str | None:
        try:
            birth = parse_date(values.get(self.source))
        except ValueError:
            return ''
        return str(compute_age(birth, today)) if birth else ''

    def check(self, values: dict[str, str], today: date) -> dict[str, str]:
        age = values.get(self.target, '')
        if not age.lstrip('-').isdigit():
            return {}
        try:
            validate_minimum_age(int(age), self.minimum_age)
        except ValidationError as e:
            return {self.target: str(e)}
        return {}


class EndDateFromDuration(DerivedField):
    start: str
    duration: str
    target: str = 'endDate'

    @property
    def sources(self) -> tuple[str, ...]:
        return (self.start, self.duration)

    def compute(self, values: dict[str, str], today: date) -> str | None:
        try:
            start = parse_date(values.get(self.start))
            months = int(float(values.get(self.duration) or ''))
        except ValueError:
            return None
        except OverflowError:
            return ''
        if start is None:
            return None
        try:
            return format_date(add_months(start, months))
        except (ValueError, OverflowError):
            # end date falls outside the calendar
            return ''


class DateNotWithinLast(BaseModel):
    """A date field that must be more than ``years`` years old."""
    model_config = ConfigDict(frozen=True)

    target: str
    label: str
    years: int | None = None

    def check(self, values: dict[str, str], today: date) -> dict[str, str]:
        years = self.years if self.years is not None else get_settings().min_permit_years
        try:
            validate_date_not_within_last(values.get(self.target), years, self.label, today=today)
        except ValidationError as e:
            return {self.target: str(e)}
        return {}


class EntitySchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    title: str
    endpoint: str
    model: type[Record]
    fields: tuple[FieldSpec, ...]
    columns: tuple[str, ...]
    search_fields: tuple[str, ...]
    filters: tuple[str, ...] = ()
    upload_field: str = 'documents'
    document_removal: DocumentRemoval = DocumentRemoval.BY_NAME
    multiple_documents: bool = True
    derived: tuple[DerivedField, ...] = ()
    rules: tuple[DateNotWithinLast, ...] = ()

    def field(self, name: str) -> FieldSpec:
        for field_spec in self.fields:
            if field_spec.name == name:
                return field_spec
        raise KeyError(f'{self.key} has no field {name!r}')

    @property
    def reference_fields(self) -> list[FieldSpec]:
        return [field_spec for field_spec in self.fields if field_spec.kind == FieldKind.REFERENCE]


def _text(name: str, label: str, required: bool = False) -> FieldSpec:
    return FieldSpec(name=name, label=label, required=required)


def _date(name: str, label: str, required: bool = False) -> FieldSpec:
    return FieldSpec(name=name, label=label, kind=FieldKind.DATE, required=required)


def _choice(name: str, label: str, choices: tuple[str, ...], required: bool = True, default: str = '') -> FieldSpec:
    return FieldSpec(name=name, label=label, kind=FieldKind.CHOICE, choices=choices, required=required,
                     default=default)


def _vehicle() -> FieldSpec:
    return FieldSpec(name='vehicle', label='Vehicle', kind=FieldKind.REFERENCE, reference='vehicles', required=True)


CUSTOMERS = EntitySchema(
    key='customers',
    title='Customers',
    endpoint='/api/customers',
    model=Customer,
    fields=(
        _choice('civilite', 'Title', ('M.', 'Mme', 'Mlle')),
        _text('nationalite', 'Nationality', required=True),
        _choice('type', 'Type', ('Particulier', 'Professionel'), default='Particulier'),
        FieldSpec(name='listeNoire', label='Blacklisted', kind=FieldKind.BOOL, default='false'),
        _text('nomFr', 'Last name', required=True),
        _text('nomAr', 'Last name (Arabic)'),
        _text('prenomFr', 'First name', required=True),
        _text('prenomAr', 'First name (Arabic)'),
        _date('dateNaissance', 'Birth date', required=True),
        FieldSpec(name='age', label='Age', kind=FieldKind.INTEGER, read_only=True),
        _text('lieuNaissance', 'Birth place', required=True),
        _text('ice', 'ICE'),
        _text('cin', 'CIN', required=True),
        _date('cinDelivreLe', 'CIN issued on', required=True),
        _text('cinDelivreA', 'CIN issued at', required=True),
        _date('cinValidite', 'CIN valid until', required=True),
        _text('numeroPermis', 'Driving permit', required=True),
        _date('permisDelivreLe', 'Permit issued on', required=True),
        _text('permisDelivreA', 'Permit issued at', required=True),
        _date('permisValidite', 'Permit valid until', required=True),
        _text('numeroPasseport', 'Passport'),
        _date('passportDelivreLe', 'Passport issued on'),
        _text('passportDelivreA', 'Passport issued at'),
        _date('passportValidite', 'Passport valid until'),
        _text('email', 'Email'),
        _text('adresseFr', 'Address'),
        _text('ville', 'City'),
        _text('adresseAr', 'Address (Arabic)'),
        _text('codePostal', 'Postal code'),
        _text('telephone', 'Phone'),
        _text('telephone2', 'Phone 2'),
        _text('fix', 'Landline'),
        _text('fax', 'Fax'),
        _text('remarque', 'Remark'),
    ),
    columns=('nomFr', 'prenomFr', 'cin', 'telephone', 'ville'),
    search_fields=('nomFr', 'prenomFr', 'cin', 'numeroPermis', 'telephone', 'email'),
    filters=('type',),
    document_removal=DocumentRemoval.STAGED,
    derived=(AgeFromBirthDate(source='dateNaissance'),),
    rules=(DateNotWithinLast(target='permisDelivreLe', label='Permit issued on'),),
)

VEHICLES = EntitySchema(
    key='vehicles',
    title='Vehicles',
    endpoint='/api/vehicles',
    model=Vehicle,
    fields=(
        _text('chassisNumber', 'Chassis number', required=True),
        _text('licensePlate', 'License plate', required=True),
        _text('temporaryPlate', 'Temporary plate (WW)'),
        _text('brand', 'Brand', required=True),
        _text('model', 'Model', required=True),
        _date('circulationDate', 'First registration'),
        _choice('fuelType', 'Fuel', FUEL_TYPES, default='essence'),
        _choice('fuelLevel', 'Fuel level', FUEL_LEVELS, default='plein'),
        FieldSpec(name='mileage', label='Mileage', kind=FieldKind.INTEGER, minimum=0, default='0'),
        _text('color', 'Color'),
        _text('colorCode', 'Color code'),
        FieldSpec(name='rentalPrice', label='Daily price (DH)', kind=FieldKind.NUMBER, minimum=0, default='0'),
        FieldSpec(name='nombreDePlaces', label='Seats', kind=FieldKind.INTEGER, minimum=0),
        FieldSpec(name='nombreDeVitesses', label='Gears', kind=FieldKind.INTEGER, minimum=0),
        _choice('transmission', 'Transmission', TRANSMISSIONS, default='Manuelle'),
        _choice('statut', 'Status', VEHICLE_STATUSES, default='En parc'),
        _text('observation', 'Observation'),
    ),
    columns=('licensePlate', 'brand', 'model', 'mileage', 'statut'),
    search_fields=('licensePlate', 'temporaryPlate', 'brand', 'model', 'chassisNumber'),
    filters=('statut', 'fuelType'),
)

CHARGES = EntitySchema(
    key='charges',
    title='Charges',
    endpoint='/api/charges',
    model=Charge,
    fields=(
        _text('motif', 'Reason', required=True),
        _date('date', 'Date', required=True),
        FieldSpec(name='montant', label='Amount (DH)', kind=FieldKind.NUMBER, minimum=0, required=True),
        _text('observation', 'Observation'),
    ),
    columns=('motif', 'date', 'montant'),
    search_fields=('motif', 'observation', 'montant'),
    upload_field='attachments',
)

TRAITES = EntitySchema(
    key='traites',
    title='Loan payments',
    endpoint='/api/traites',
    model=Traite,
    fields=(
        _vehicle(),
        FieldSpec(name='mois', label='Month', kind=FieldKind.INTEGER, required=True,
                  choices=tuple(str(month) for month in MONTH_NAMES)),
        FieldSpec(name='annee', label='Year', kind=FieldKind.INTEGER, required=True),
        FieldSpec(name='montant', label='Amount (DH)', kind=FieldKind.NUMBER, minimum=1, required=True),
        _date('datePaiement', 'Paid on'),
        _text('reference', 'Reference'),
        _text('notes', 'Notes'),
    ),
    columns=('vehicle', 'mois', 'annee', 'montant', 'datePaiement'),
    search_fields=('vehicle', 'annee', 'montant', 'reference'),
    filters=('mois', 'annee'),
)

INTERVENTIONS = EntitySchema(
    key='interventions',
    title='Interventions',
    endpoint='/api/interventions',
    model=Intervention,
    fields=(
        _vehicle(),
        _choice('type', 'Type', INTERVENTION_TYPES, default='vidange'),
        _text('description', 'Description', required=True),
        _date('date', 'Date', required=True),
        FieldSpec(name='cost', label='Cost (DH)', kind=FieldKind.NUMBER, minimum=0, required=True),
        _choice('status', 'Status', INTERVENTION_STATUSES, default='Pending'),
        FieldSpec(name='currentMileage', label='Current mileage', kind=FieldKind.INTEGER, minimum=0),
        FieldSpec(name='nextMileage', label='Next service mileage', kind=FieldKind.INTEGER, minimum=0),
        _text('observation', 'Observation'),
    ),
    columns=('vehicle', 'type', 'date', 'cost', 'status'),
    search_fields=('vehicle', 'description', 'type', 'observation'),
    filters=('status', 'type'),
    document_removal=DocumentRemoval.STAGED,
)

VEHICLE_INSPECTIONS = EntitySchema(
    key='vehicleinspections',
    title='Technical inspections',
    endpoint='/api/vehicleinspections',
    model=VehicleInspection,
    fields=(
        _vehicle(),
        _text('center', 'Center', required=True),
        _text('controlId', 'Control id'),
        _text('authorizationNumber', 'Authorization number'),
        _date('inspectionDate', 'Inspection date', required=True),
        FieldSpec(name='duration', label='Duration (months)', kind=FieldKind.INTEGER, minimum=1, required=True),
        FieldSpec(name='endDate', label='End date', kind=FieldKind.DATE, read_only=True),
        FieldSpec(name='price', label='Price (DH)', kind=FieldKind.NUMBER, minimum=0),
        _text('centerContact', 'Center contact'),
        _text('observation', 'Observation'),
    ),
    columns=('vehicle', 'center', 'inspectionDate', 'endDate', 'price'),
    search_fields=('vehicle', 'center', 'controlId'),
    document_removal=DocumentRemoval.BY_URL,
    derived=(EndDateFromDuration(start='inspectionDate', duration='duration'),),
)

VEHICLE_INSURANCES = EntitySchema(
    key='vehicleinsurances',
    title='Insurance policies',
    endpoint='/api/vehicleinsurances',
    model=VehicleInsurance,
    fields=(
        _vehicle(),
        _text('company', 'Company', required=True),
        _text('policyNumber', 'Policy number', required=True),
        _date('operationDate', 'Operation date', required=True),
        _date('startDate', 'Start date', required=True),
        FieldSpec(name='duration', label='Duration (months)', kind=FieldKind.INTEGER, minimum=1, required=True),
        FieldSpec(name='endDate', label='End date', kind=FieldKind.DATE, read_only=True),
        FieldSpec(name='price', label='Price (DH)', kind=FieldKind.NUMBER, minimum=0, required=True),
        _text('contactInfo', 'Insurer contact'),
        _text('observation', 'Observation'),
    ),
    columns=('vehicle', 'company', 'policyNumber', 'startDate', 'endDate', 'price'),
    search_fields=('vehicle', 'company', 'policyNumber'),
    upload_field='attachments',
    derived=(EndDateFromDuration(start='startDate', duration='duration'),),
)

SCHEMAS: dict[str, EntitySchema] = {
    schema.key: schema
    for schema in (
        CUSTOMERS, VEHICLES, CHARGES, TRAITES, INTERVENTIONS, VEHICLE_INSPECTIONS, VEHICLE_INSURANCES,
    )
}


def get_schema(key: str) -> EntitySchema:
    try:
        return SCHEMAS[key]
    except KeyError:
        raise KeyError(f'Unknown entity {key!r}; expected one of {", ".join(SCHEMAS)}') from None
