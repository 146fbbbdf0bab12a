from __future__ import annotations

from pydantic import Field

from rentaldesk.models.record import Record

FUEL_TYPES = ('diesel', 'essence', 'electrique', 'hybride')
FUEL_LEVELS = ('reserve', '1/4', '1/2', '3/4', 'plein')
TRANSMISSIONS = ('Manuelle', 'Automatique')
VEHICLE_STATUSES = ('En parc', 'En circulation')


class Vehicle(Record):
    chassis_number: str = ''
    image_url: str | None = None
    temporary_plate: str | None = None  # Matricule WW
    license_plate: str = ''
    brand: str = ''
    model: str = ''
    circulation_date: str | None = None
    fuel_type: str = 'essence'
    fuel_level: str = 'plein'
    mileage: int = 0
    color: str | None = None
    color_code: str | None = None
    rental_price: float = 0
    nombre_de_places: int = 0
    nombre_de_vitesses: int = 0
    transmission: str = 'Manuelle'
    observation: str | None = None
    equipment: dict[str, bool] = Field(default_factory=dict)
    statut: str = 'En parc'

    @property
    def label(self) -> str:
        return f'{self.license_plate} - {self.model}'.strip(' -') or self.id
