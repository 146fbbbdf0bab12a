from __future__ import annotations

from typing import Any

from pydantic import field_validator

from rentaldesk.models.record import Record


class Customer(Record):
    civilite: str | None = None
    nationalite: str | None = None
    type: str = 'Particulier'  # 'Particulier' or 'Professionel'
    liste_noire: bool = False
    nom_fr: str = ''
    nom_ar: str | None = None
    prenom_fr: str = ''
    prenom_ar: str | None = None
    date_naissance: str | None = None
    age: str | None = None
    lieu_naissance: str | None = None
    ice: str | None = None
    cin: str | None = None
    cin_delivre_le: str | None = None
    cin_delivre_a: str | None = None
    cin_validite: str | None = None
    numero_permis: str | None = None
    permis_delivre_le: str | None = None
    permis_delivre_a: str | None = None
    permis_validite: str | None = None
    numero_passeport: str | None = None
    passport_delivre_le: str | None = None
    passport_delivre_a: str | None = None
    passport_validite: str | None = None
    email: str | None = None
    adresse_fr: str | None = None
    ville: str | None = None
    adresse_ar: str | None = None
    code_postal: str | None = None
    telephone: str | None = None
    telephone2: str | None = None
    fix: str | None = None
    fax: str | None = None
    remarque: str | None = None
    total_rentals: int = 0
    status: str = 'Actif'

    @field_validator('age', mode='before')
    @classmethod
    def age_as_text(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @property
    def full_name(self) -> str:
        return f'{self.prenom_fr} {self.nom_fr}'.strip()

    @property
    def label(self) -> str:
        return self.full_name or self.id
