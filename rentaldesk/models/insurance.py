from __future__ import annotations

from rentaldesk.models.record import VehicleBound


class VehicleInsurance(VehicleBound):
    """An insurance policy covering a vehicle."""
    company: str = ''
    policy_number: str = ''
    operation_date: str | None = None
    start_date: str | None = None
    duration: int | None = None  # months
    end_date: str | None = None
    price: float | None = None
    contact_info: str | None = None
    observation: str | None = None

    @property
    def label(self) -> str:
        return f'{self.company} {self.policy_number}'.strip() or self.id
