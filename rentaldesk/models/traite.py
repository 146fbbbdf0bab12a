from __future__ import annotations

from rentaldesk.models.record import VehicleBound

MONTH_NAMES = {
    1: 'Janvier', 2: 'Février', 3: 'Mars', 4: 'Avril', 5: 'Mai', 6: 'Juin',
    7: 'Juillet', 8: 'Août', 9: 'Septembre', 10: 'Octobre', 11: 'Novembre', 12: 'Décembre',
}


class Traite(VehicleBound):
    """A monthly loan payment on a vehicle."""
    mois: int
    annee: int
    montant: float
    date_paiement: str | None = None
    reference: str | None = None
    notes: str | None = None

    @property
    def month_name(self) -> str:
        return MONTH_NAMES.get(self.mois, '')

    @property
    def label(self) -> str:
        return f'{self.month_name} {self.annee}'.strip()
