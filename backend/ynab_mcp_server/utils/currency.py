"""
Currency & Normalization Utilities

YNAB stores every amount as an integer number of milliunits
(1/1000 of the budget currency unit), e.g. $1.23 is 1230 milliunits.

Provides:
- milliunit <-> display unit conversion
- YNAB calendar date formatting (YYYY-MM-DD)
- Free-text sanitizing
- Transaction amount bounds
"""

import math
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from dateutil import parser as date_parser

from .validators import ValidationError

MILLIUNITS_PER_UNIT = 1000

# YNAB has practical limits on transaction amounts (~1B units)
MAX_TRANSACTION_AMOUNT = 999_999_999
MIN_TRANSACTION_AMOUNT = -999_999_999

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def milliunits_to_units(milliunits: int) -> float:
    """
    Convert YNAB milliunits to display units.

    Plain division, no rounding: 1230 -> 1.23, -3333 -> -3.333
    """
    return milliunits / MILLIUNITS_PER_UNIT


def units_to_milliunits(units: float) -> int:
    """
    Convert display units to YNAB milliunits, rounding to the nearest integer.

    Works on the shortest decimal representation of the float so that
    values produced by milliunits_to_units() convert back exactly. Halves
    round away from zero, so negative halves go down (-0.0005 -> -1) rather
    than toward positive infinity.

    Example:
        >>> units_to_milliunits(10.5)
        10500
        >>> units_to_milliunits(-3.333)
        -3333
    """
    scaled = Decimal(repr(float(units))).scaleb(3)
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_date_for_ynab(value: str | date | None = None) -> str:
    """
    Format a date for the YNAB API (YYYY-MM-DD).

    Accepts a date/datetime, a string, or None (defaults to today).

    Raises:
        ValidationError: If a string cannot be parsed as a date
    """
    if value is None:
        return date.today().isoformat()

    if isinstance(value, datetime):
        return value.date().isoformat()

    if isinstance(value, date):
        return value.isoformat()

    text = value.strip()
    if _ISO_DATE.match(text):
        return text

    try:
        return date_parser.parse(text).date().isoformat()
    except (ValueError, OverflowError):
        raise ValidationError(
            message=f"Invalid date: {value}. Use YYYY-MM-DD.",
            field="date",
            provided_value=value,
            expected="YYYY-MM-DD",
        ) from None


def sanitize_string(value: Any) -> str | None:
    """
    Trim free text for the YNAB API.

    Non-strings and strings that are empty after trimming become None.
    """
    if not isinstance(value, str):
        return None

    trimmed = value.strip()
    return trimmed or None


def format_currency(milliunits: int, currency_symbol: str = "$") -> str:
    """
    Format a milliunit amount for display.

    Example:
        >>> format_currency(-1234567)
        '-$1,234.57'
    """
    units = milliunits_to_units(milliunits)
    formatted = f"{abs(units):,.2f}"

    if units < 0:
        return f"-{currency_symbol}{formatted}"
    return f"{currency_symbol}{formatted}"


def validate_transaction_amount(amount: Any) -> float:
    """
    Ensure amount is a finite number within YNAB's practical bounds.

    Raises:
        ValidationError: If amount is not a number or is out of range
    """
    if (
        isinstance(amount, bool)
        or not isinstance(amount, (int, float))
        or not math.isfinite(amount)
    ):
        raise ValidationError(
            message="Transaction amount must be a valid number",
            field="amount",
            provided_value=amount,
            expected="number",
        )

    if not MIN_TRANSACTION_AMOUNT <= amount <= MAX_TRANSACTION_AMOUNT:
        raise ValidationError(
            message=(
                f"Transaction amount must be between {MIN_TRANSACTION_AMOUNT} "
                f"and {MAX_TRANSACTION_AMOUNT}"
            ),
            field="amount",
            provided_value=amount,
            expected=f"{MIN_TRANSACTION_AMOUNT}..{MAX_TRANSACTION_AMOUNT}",
        )

    return amount
