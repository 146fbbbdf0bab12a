"""Shared field validation rules for every RentalDesk form."""
import math
from collections.abc import Iterable
from datetime import date

from rentaldesk.exceptions import ValidationError
from rentaldesk.utils.dt import get_today, parse_date, subtract_years


def is_blank(value: object) -> bool:
    """True for None, the empty string, and strings made only of whitespace."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def validate_non_empty(value: str, field_name: str) -> None:
    """
    Validate that a string value is non-empty.

    :param value: Value to validate
    :param field_name: Name of the field for error messages
    :raises ValidationError: If value is empty or whitespace-only
    """
    if not value or not value.strip():
        raise ValidationError(f"{field_name} cannot be empty")


def validate_id(value: str, field_name: str = "ID") -> None:
    """
    Validate that an ID is non-empty.

    :param value: ID value to validate
    :param field_name: Name of the field for error messages (default "ID")
    :raises ValidationError: If ID is empty
    """
    validate_non_empty(value, field_name)


def validate_required_non_blank(value: object, field_name: str) -> None:
    """
    Validate a required field.

    :param value: Raw field value
    :param field_name: Name of the field for error messages
    :raises ValidationError: If the value is missing, empty, or only whitespace
    """
    if value is None or value == '':
        raise ValidationError(f"{field_name} is required")
    if is_blank(value):
        raise ValidationError(f"{field_name} cannot contain only spaces")


def validate_optional_non_blank(value: object, field_name: str) -> None:
    """
    Validate an optional text field: it may be empty, but not spaces only.

    :param value: Raw field value
    :param field_name: Name of the field for error messages
    :raises ValidationError: If the value is non-empty and only whitespace
    """
    if isinstance(value, str) and value and not value.strip():
        raise ValidationError(f"{field_name} cannot contain only spaces")


def validate_numeric_at_least(value: object, minimum: float, field_name: str) -> float:
    """
    Validate a numeric field against a floor.

    :param value: Raw field value (number or numeric string)
    :param minimum: Smallest accepted value
    :param field_name: Name of the field for error messages
    :return: The parsed number
    :raises ValidationError: If the value is not a number or is below ``minimum``
    """
    try:
        number = float(str(value).strip().replace(',', '.'))
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not math.isfinite(number):
        raise ValidationError(f"{field_name} must be a number")
    if number < minimum:
        raise ValidationError(f"{field_name} cannot be less than {minimum:g}")
    return number


def validate_date(value: object, field_name: str) -> date | None:
    """
    Validate that a value parses as a date.

    :return: The parsed date, or None for an empty value
    :raises ValidationError: If the value is not a valid date
    """
    try:
        return parse_date(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a valid date (YYYY-MM-DD)")


def validate_date_not_within_last(
    value: object,
    years: int,
    field_name: str,
    today: date | None = None
) -> None:
    """
    Validate that a date lies more than ``years`` years in the past.

    Used for the driving permit issue date.

    :param value: Raw date value
    :param years: Number of years the date must predate today
    :param field_name: Name of the field for error messages
    :param today: Reference date (defaults to the current date)
    :raises ValidationError: If the date is after ``today - years``
    """
    issued = validate_date(value, field_name)
    if issued is None:
        return
    limit = subtract_years(today or get_today(), years)
    if issued > limit:
        raise ValidationError(f"{field_name} must be more than {years} years ago")


def validate_minimum_age(age: int, minimum: int, field_name: str = "Age") -> None:
    """
    :raises ValidationError: If ``age`` is below ``minimum``
    """
    if age < minimum:
        raise ValidationError(f"{field_name} must be at least {minimum} years")


def validate_choice(value: str, choices: Iterable[str], field_name: str) -> None:
    """
    :raises ValidationError: If ``value`` is not one of ``choices``
    """
    allowed = list(choices)
    if value not in allowed:
        raise ValidationError(f"{field_name} must be one of: {', '.join(allowed)}")
