from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from rentaldesk.models.document import Document


def reference_id(value: Any) -> Any:
    """Collapse a populated reference (``{"_id": ..., ...}``) to its id."""
    if isinstance(value, dict):
        return value.get('_id') or value.get('id')
    return value


class Record(BaseModel):
    """
    Base for every parent record served by the rental backend.

    Accepts camelCase keys, either ``_id`` or ``id``, and documents given as
    objects or bare storage paths under ``documents`` or ``attachments``.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')

    id: str = Field(validation_alias=AliasChoices('_id', 'id'))
    documents: list[Document] = Field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None

    @model_validator(mode='before')
    @classmethod
    def use_attachment_paths(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get('documents') and data.get('attachments'):
            data = {**data, 'documents': data['attachments']}
        return data

    @field_validator('id', mode='before')
    @classmethod
    def stringify_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator('documents', mode='before')
    @classmethod
    def coerce_documents(cls, value: Any) -> list[Document]:
        return [Document.coerce(item) for item in value or []]

    @property
    def label(self) -> str:
        return self.id

    def wire_values(self) -> dict[str, Any]:
        """Field values keyed by their API (camelCase) names."""
        return self.model_dump(by_alias=True, mode='json')


class VehicleBound(Record):
    """A record attached to a vehicle, referenced by id or populated inline."""
    vehicle: str | None = Field(default=None, validation_alias=AliasChoices('vehicle', 'vehicleId'))

    @field_validator('vehicle', mode='before')
    @classmethod
    def vehicle_id(cls, value: Any) -> Any:
        return reference_id(value)
