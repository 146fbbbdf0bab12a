"""Tests for date utilities."""
from datetime import date, datetime

import pytest

from rentaldesk.utils.dt import (
    add_months,
    compute_age,
    format_date,
    format_date_fr,
    parse_date,
    subtract_years,
)


class TestParseDate:
    """Tests for parse_date."""

    def test_parse_iso_date(self):
        assert parse_date('2024-05-09') == date(2024, 5, 9)

    def test_parse_backend_datetime(self):
        assert parse_date('2024-05-09T00:00:00.000Z') == date(2024, 5, 9)

    def test_parse_date_objects(self):
        assert parse_date(datetime(2024, 5, 9, 13, 0)) == date(2024, 5, 9)
        assert parse_date(date(2024, 5, 9)) == date(2024, 5, 9)

    def test_empty_values_are_none(self):
        assert parse_date('') is None
        assert parse_date('   ') is None
        assert parse_date(None) is None

    def test_invalid_string(self):
        with pytest.raises(ValueError):
            parse_date('09/05/2024')


class TestFormatting:
    """Tests for date formatting."""

    def test_format_date(self):
        assert format_date(date(2024, 1, 5)) == '2024-01-05'
        assert format_date(None) == ''

    def test_format_date_fr(self):
        assert format_date_fr('2024-01-05T00:00:00.000Z') == '05/01/2024'

    def test_format_date_fr_invalid(self):
        assert format_date_fr('garbage') == ''


class TestAddMonths:
    """Tests for add_months."""

    def test_simple(self):
        assert add_months(date(2024, 3, 15), 12) == date(2025, 3, 15)

    def test_end_of_month_clamps(self):
        """Jan 31 plus one month is the last day of February."""
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)

    def test_crosses_year(self):
        assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)

    def test_negative(self):
        assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)

    def test_subtract_years_on_leap_day(self):
        assert subtract_years(date(2024, 2, 29), 2) == date(2022, 2, 28)


class TestComputeAge:
    """Tests for compute_age."""

    def test_birthday_today(self):
        assert compute_age(date(2006, 6, 15), today=date(2024, 6, 15)) == 18

    def test_day_before_birthday(self):
        assert compute_age(date(2006, 6, 16), today=date(2024, 6, 15)) == 17

    def test_later_month(self):
        assert compute_age(date(2006, 7, 1), today=date(2024, 6, 15)) == 17
