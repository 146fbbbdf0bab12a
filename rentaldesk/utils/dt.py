"""Date helpers for form fields and derived values."""
import calendar
from datetime import date, datetime

ISO_DATE_FORMAT = '%Y-%m-%d'
FR_DATE_FORMAT = '%d/%m/%Y'


def get_today() -> date:
    return date.today()


def parse_date(value: str | date | datetime | None) -> date | None:
    """
    Parse a form or API date value.

    Accepts ISO dates (``2024-05-09``) and ISO datetimes as returned by the backend
    (``2024-05-09T00:00:00.000Z``). Empty values parse to None.

    :param value: Value to parse
    :return: The parsed date, or None if the value is empty
    :raises ValueError: If the value is not a recognisable date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    value = value.strip()
    if not value:
        return None
    return datetime.strptime(value[:10], ISO_DATE_FORMAT).date()


def format_date(value: date | None) -> str:
    return value.strftime(ISO_DATE_FORMAT) if value else ''


def format_date_fr(value: str | date | None) -> str:
    """Format a date for display in tables (DD/MM/YYYY). Unparseable values render empty."""
    try:
        parsed = parse_date(value)
    except ValueError:
        return ''
    return parsed.strftime(FR_DATE_FORMAT) if parsed else ''


def add_months(start: date, months: int) -> date:
    """
    Add a number of months to a date.

    When the day does not exist in the target month the result is the last day of
    that month, so 2024-01-31 plus one month is 2024-02-29.

    :param start: Start date
    :param months: Number of months to add (may be negative)
    :return: The shifted date
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def subtract_years(value: date, years: int) -> date:
    return add_months(value, -12 * years)


def compute_age(birth: date, today: date | None = None) -> int:
    """
    Compute an age in whole years from a birth date.

    Uses calendar-year subtraction, minus one when the birthday has not yet
    happened this year.
    """
    today = today or get_today()
    age = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        age -= 1
    return age
