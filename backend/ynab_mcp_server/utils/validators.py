"""
Input Validation

Validation functions for MCP tool parameters.

All validators raise ValidationError (a ValueError) with clear error messages
on invalid input, before any upstream call is made.
"""

from datetime import date
from typing import Any

CLEARED_STATUSES = ["cleared", "uncleared", "reconciled"]
FLAG_COLORS = ["red", "orange", "yellow", "green", "blue", "purple"]


class ValidationError(ValueError):
    """Custom exception for validation errors with structured data."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        provided_value: Any | None = None,
        expected: str | None = None,
    ):
        self.message = message
        self.field = field
        self.provided_value = provided_value
        self.expected = expected
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert error to dict for MCP error responses."""
        result = {"error": "validation_error", "message": self.message}

        if self.field:
            result["field"] = self.field

        if self.provided_value is not None:
            result["provided"] = str(self.provided_value)

        if self.expected:
            result["expected"] = self.expected

        return result


def validate_date_string(date_str: str, field_name: str = "date"):
    """
    Validate ISO calendar date string (YYYY-MM-DD).

    Args:
        date_str: Date string to validate
        field_name: Name of the field (for error messages)

    Raises:
        ValidationError: If date_str is invalid
    """
    if not isinstance(date_str, str):
        raise ValidationError(
            message=f"{field_name} must be a string",
            field=field_name,
            provided_value=date_str,
            expected="string in ISO format (YYYY-MM-DD)",
        )

    try:
        date.fromisoformat(date_str)
    except ValueError:
        raise ValidationError(
            message=f"{field_name} must be valid ISO date (YYYY-MM-DD)",
            field=field_name,
            provided_value=date_str,
            expected="ISO format (YYYY-MM-DD)",
        ) from None


def validate_limit(limit: int, max_limit: int, field_name: str = "limit"):
    """
    Validate a page size.

    Raises:
        ValidationError: If limit is not an integer in 1..max_limit
    """
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValidationError(
            message=f"{field_name} must be an integer",
            field=field_name,
            provided_value=limit,
            expected="integer",
        )

    if not 1 <= limit <= max_limit:
        raise ValidationError(
            message=f"{field_name} must be between 1 and {max_limit}",
            field=field_name,
            provided_value=limit,
            expected=f"1..{max_limit}",
        )


def validate_choice(value: str | None, choices: list[str], field_name: str):
    """Validate an optional enumerated string value."""
    if value is None:
        return

    if value not in choices:
        raise ValidationError(
            message=f"{field_name} must be one of: {', '.join(choices)}",
            field=field_name,
            provided_value=value,
            expected=" | ".join(choices),
        )


def validate_currency_code(currency: str | None, excluded: str | None = None) -> str:
    """
    Validate and normalize a 3-letter ISO 4217 currency code.

    Args:
        currency: Code to validate (any case)
        excluded: Code that is not allowed (e.g. the target currency)

    Returns:
        Upper-cased currency code

    Raises:
        ValidationError: If the code is missing, malformed or excluded
    """
    code = currency.strip().upper() if isinstance(currency, str) else ""

    if len(code) != 3 or not code.isalpha() or code == excluded:
        not_clause = f" other than {excluded}" if excluded else ""
        raise ValidationError(
            message=(
                f"Please provide a valid 3-letter currency code{not_clause} "
                "as `currency`."
            ),
            field="currency",
            provided_value=currency,
            expected=f"ISO 4217 code{not_clause}",
        )

    return code


def validate_milliunits(amount: Any, field_name: str = "amount") -> int:
    """
    Validate an integer milliunit amount (10500 == 10.5 units).

    Raises:
        ValidationError: If amount is not an integer
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationError(
            message=(
                f"`{field_name}` must be an integer number of milliunits "
                "(e.g. 10500)."
            ),
            field=field_name,
            provided_value=amount,
            expected="integer milliunits",
        )

    return amount
