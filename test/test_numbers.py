from datetime import date
from decimal import Decimal

import pytest

from fliptracker.domain.errors import InvalidNumberError, ValidationError
from fliptracker.domain.numbers import as_decimal, as_int, parse_iso_date, parse_number, parse_quantity


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, Decimal("0")),
        ("", Decimal("0")),
        ("abc", Decimal("0")),
        ("nan", Decimal("0")),
        ("12,5", Decimal("12.5")),
        (" 3 ", Decimal("3")),
        (2.5, Decimal("2.5")),
        (Decimal("-7"), Decimal("-7")),
    ],
)
def test_as_decimal_is_lenient(raw, expected):
    assert as_decimal(raw) == expected


def test_as_int_truncates():
    assert as_int("4.9") == 4
    assert as_int(None) == 0


def test_parse_number_is_strict():
    assert parse_number("1234,5", "Value") == Decimal("1234.5")
    with pytest.raises(InvalidNumberError, match="Value is required"):
        parse_number("  ", "Value")
    with pytest.raises(InvalidNumberError, match="must be a number"):
        parse_number("12abc", "Value")
    with pytest.raises(InvalidNumberError):
        parse_number("inf", "Value")


def test_parse_quantity_requires_whole_number():
    assert parse_quantity("3.0", "Quantity") == 3
    with pytest.raises(ValidationError, match="whole number"):
        parse_quantity("2.5", "Quantity")


def test_parse_iso_date():
    assert parse_iso_date("2024-02-01") == "2024-02-01"
    assert parse_iso_date(date(2024, 3, 4)) == "2024-03-04"
    assert parse_iso_date("") == date.today().isoformat()
    with pytest.raises(ValidationError):
        parse_iso_date("2024-13-01")


def test_magnitudes_beyond_range_are_rejected_or_zeroed():
    assert as_decimal("9999999999999999") == Decimal("9999999999999999")
    assert as_decimal("1e999999") == 0
    assert as_decimal(1e300) == 0
    assert as_int("1e20") == 0
    assert as_int("1e999999999") == 0
    with pytest.raises(InvalidNumberError, match="out of range"):
        parse_number("1e999999", "Purchase price")
    with pytest.raises(InvalidNumberError, match="out of range"):
        parse_quantity("1e20", "Quantity")
