from __future__ import annotations

from rentaldesk.models.record import VehicleBound


class VehicleInspection(VehicleBound):
    """A periodic technical inspection."""
    center: str | None = None
    control_id: str | None = None
    authorization_number: str | None = None
    inspection_date: str | None = None
    inspector_name: str | None = None
    results: str | None = None
    duration: int | None = None  # months
    end_date: str | None = None
    price: float | None = None
    center_contact: str | None = None
    observation: str | None = None

    @property
    def label(self) -> str:
        return self.control_id or self.center or self.id
