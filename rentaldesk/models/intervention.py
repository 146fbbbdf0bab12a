from __future__ import annotations

from rentaldesk.models.record import VehicleBound

INTERVENTION_TYPES = ('vidange', 'lavage', 'chaine')
INTERVENTION_STATUSES = ('Pending', 'Completed', 'Cancelled')


class Intervention(VehicleBound):
    """A maintenance intervention on a vehicle."""
    description: str = ''
    date: str | None = None
    cost: float = 0
    status: str = 'Pending'
    type: str = 'vidange'
    observation: str | None = None
    current_mileage: int | None = None
    next_mileage: int | None = None

    @property
    def label(self) -> str:
        return self.description or self.id
