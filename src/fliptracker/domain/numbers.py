from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from fliptracker.domain.errors import InvalidNumberError, ValidationError

ZERO = Decimal("0")

# largest accepted magnitude is below 10**16; keeps ledger arithmetic in range
# and quantities inside a sqlite INTEGER
MAX_EXPONENT = 15


def today_iso() -> str:
    return date.today().isoformat()


def _to_decimal(value: object) -> Decimal:
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, (int, float)):
        d = Decimal(str(value))
    else:
        # "12,5" is accepted, only the first comma is treated as a separator
        text = str(value).strip().replace(",", ".", 1)
        d = Decimal(text)
    if not d.is_finite():
        raise InvalidOperation(f"non-finite value: {value!r}")
    if d and d.adjusted() > MAX_EXPONENT:
        raise OverflowError(f"value out of range: {value!r}")
    return d


def as_decimal(value: object) -> Decimal:
    """Lenient read used by the ledger: anything unreadable or out of range counts as zero."""
    if value is None or value == "":
        return ZERO
    try:
        return _to_decimal(value)
    except (InvalidOperation, ValueError, TypeError, OverflowError):
        return ZERO


def as_int(value: object) -> int:
    return int(as_decimal(value))


def parse_number(value: object, label: str) -> Decimal:
    """Strict read used when validating user input."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidNumberError(f"{label} is required.")
    try:
        return _to_decimal(value)
    except OverflowError as e:
        raise InvalidNumberError(f"{label} is out of range. Received: {value!r}") from e
    except (InvalidOperation, ValueError, TypeError) as e:
        raise InvalidNumberError(f"{label} must be a number. Received: {value!r}") from e


def parse_quantity(value: object, label: str) -> int:
    n = parse_number(value, label)
    if n != n.to_integral_value():
        raise ValidationError(f"{label} must be a whole number.")
    return int(n)


def parse_iso_date(value: object, label: str = "Date") -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        return today_iso()
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    try:
        return date.fromisoformat(str(value).strip()).isoformat()
    except ValueError as e:
        raise ValidationError(f"{label} must be a YYYY-MM-DD date. Received: {value!r}") from e
