from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any

from rentaldesk.documents.uploader import Uploader
from rentaldesk.exceptions import ValidationError
from rentaldesk.models.record import Record
from rentaldesk.schemas import EntitySchema, FieldKind, FieldSpec
from rentaldesk.utils.dt import format_date, get_today, parse_date
from rentaldesk.utils.validation import (
    validate_choice,
    validate_date,
    validate_numeric_at_least,
    validate_optional_non_blank,
    validate_required_non_blank,
)


class FormState(str, Enum):
    PRISTINE = 'pristine'
    DIRTY = 'dirty'
    VALID = 'valid'
    INVALID = 'invalid'


def _raw_value(field_spec: FieldSpec, value: Any) -> str:
    """Render a wire value the way it is typed in a form."""
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if field_spec.kind == FieldKind.DATE:
        try:
            return format_date(parse_date(value))
        except ValueError:
            return str(value)
    return str(value)


def _number(raw: str) -> float:
    return float(raw.strip().replace(',', '.'))


def check_field(field_spec: FieldSpec, raw: str) -> str | None:
    """
    Run the rules of one field against its raw value.

    :return: The error message, or None when the value is acceptable
    """
    if field_spec.read_only:
        return None
    try:
        if field_spec.required:
            validate_required_non_blank(raw, field_spec.label)
        else:
            validate_optional_non_blank(raw, field_spec.label)
            if raw == '':
                return None

        if field_spec.kind in (FieldKind.NUMBER, FieldKind.INTEGER):
            minimum = field_spec.minimum if field_spec.minimum is not None else float('-inf')
            number = validate_numeric_at_least(raw, minimum, field_spec.label)
            if field_spec.kind == FieldKind.INTEGER and not number.is_integer():
                raise ValidationError(f"{field_spec.label} must be a whole number")
            if field_spec.choices:
                validate_choice(str(int(number)), field_spec.choices, field_spec.label)
        elif field_spec.kind == FieldKind.DATE:
            validate_date(raw, field_spec.label)
        elif field_spec.kind == FieldKind.BOOL:
            validate_choice(raw, ('true', 'false'), field_spec.label)
        elif field_spec.choices:
            validate_choice(raw.strip(), field_spec.choices, field_spec.label)
    except ValidationError as e:
        return str(e)
    return None


class FormDraft:
    """
    In-progress create or edit of one record.

    Values are kept as typed (strings); they are only converted to wire types by
    :meth:`to_payload`.
    """

    def __init__(
        self,
        schema: EntitySchema,
        values: dict[str, str],
        record: Record | None = None,
        uploader: Uploader | None = None,
        today: date | None = None
    ):
        self.schema = schema
        self.values = values
        self.record = record
        self.uploader = uploader
        self.today = today
        self.errors: dict[str, str] = {}
        self.state = FormState.PRISTINE
        self._recompute(None)

    @classmethod
    def for_create(cls, schema: EntitySchema, uploader: Uploader | None = None,
                   today: date | None = None) -> FormDraft:
        defaults = {field_spec.name: field_spec.default for field_spec in schema.fields}
        return cls(schema, defaults, uploader=uploader, today=today)

    @classmethod
    def for_edit(cls, schema: EntitySchema, record: Record, uploader: Uploader | None = None,
                 today: date | None = None) -> FormDraft:
        wire = record.wire_values()
        values = {field_spec.name: _raw_value(field_spec, wire.get(field_spec.name)) for field_spec in schema.fields}
        return cls(schema, values, record=record, uploader=uploader, today=today)

    @property
    def is_new(self) -> bool:
        return self.record is None

    @property
    def record_id(self) -> str | None:
        return self.record.id if self.record else None

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def _today(self) -> date:
        return self.today or get_today()

    def _recompute(self, changed: str | None) -> set[str]:
        """Recompute derived fields fed by ``changed`` (all of them when None)."""
        touched = set()
        for rule in self.schema.derived:
            if changed is not None and changed not in rule.sources:
                continue
            value = rule.compute(self.values, self._today())
            if value is not None:
                self.values[rule.target] = value
                touched.add(rule.target)
        return touched

    def _check(self, names: set[str]) -> None:
        for name in names:
            self.errors.pop(name, None)
            error = check_field(self.schema.field(name), self.values.get(name, ''))
            if error:
                self.errors[name] = error
        today = self._today()
        for rule in (*self.schema.derived, *self.schema.rules):
            if rule.target in names and rule.target not in self.errors:
                self.errors.update(rule.check(self.values, today))

    def get(self, name: str) -> str:
        return self.values.get(name, '')

    def set(self, name: str, value: str) -> str | None:
        """
        Change one field and validate it right away.

        Derived fields fed by ``name`` are recomputed and revalidated too.

        :param name: Field name
        :param value: Raw value as typed
        :return: The error message for the field, or None
        :raises KeyError: If the schema has no such field
        :raises ValidationError: If the field is computed
        """
        field_spec = self.schema.field(name)
        if field_spec.read_only:
            raise ValidationError(f"{field_spec.label} is computed and cannot be edited")
        self.values[name] = value
        self.state = FormState.DIRTY
        self._check({name} | self._recompute(name))
        return self.errors.get(name)

    def validate(self) -> dict[str, str]:
        """
        Validate every field.

        :return: Field name to message for every failing field
        """
        self.errors = {}
        self._check({field_spec.name for field_spec in self.schema.fields})
        self.state = FormState.INVALID if self.errors else FormState.VALID
        return dict(self.errors)

    def to_payload(self) -> dict[str, Any]:
        """
        Convert the values to the types the backend expects.

        Empty optional values are left out.

        :raises ValidationError: If the form does not validate
        """
        errors = self.validate()
        if errors:
            raise ValidationError(f"{len(errors)} field(s) need attention", errors)

        payload: dict[str, Any] = {}
        for field_spec in self.schema.fields:
            raw = self.values.get(field_spec.name, '')
            if field_spec.kind == FieldKind.BOOL:
                payload[field_spec.name] = raw == 'true'
                continue
            if not raw.strip():
                continue
            if field_spec.kind == FieldKind.NUMBER:
                payload[field_spec.name] = _number(raw)
            elif field_spec.kind == FieldKind.INTEGER:
                payload[field_spec.name] = int(_number(raw))
            elif field_spec.kind == FieldKind.DATE:
                payload[field_spec.name] = format_date(parse_date(raw))
            else:
                payload[field_spec.name] = raw.strip()
        return payload

    def close(self) -> None:
        if self.uploader:
            self.uploader.close()
