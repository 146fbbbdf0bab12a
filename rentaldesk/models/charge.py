from __future__ import annotations

from rentaldesk.models.record import Record


class Charge(Record):
    """A miscellaneous business expense."""
    motif: str = ''
    date: str | None = None
    montant: float = 0
    observation: str | None = None

    @property
    def label(self) -> str:
        return self.motif or self.id
