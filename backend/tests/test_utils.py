"""Tests for currency, date, formatting and validation helpers."""

from datetime import date, datetime

import pytest

from ynab_mcp_server.auth.identity import Identity
from ynab_mcp_server.utils.currency import (
    format_currency,
    format_date_for_ynab,
    milliunits_to_units,
    sanitize_string,
    units_to_milliunits,
    validate_transaction_amount,
)
from ynab_mcp_server.utils.defaults import (
    apply_approved_default,
    apply_cleared_default,
    apply_limit_default,
)
from ynab_mcp_server.utils.formatters import (
    format_created_by,
    format_error_response,
    format_success_response,
    tool_result,
)
from ynab_mcp_server.utils.validators import (
    ValidationError,
    validate_currency_code,
    validate_date_string,
    validate_milliunits,
)

# ============================================================================
# MILLIUNITS
# ============================================================================


@pytest.mark.parametrize(
    "units, expected",
    [
        (10.5, 10500),
        (-3.333, -3333),
        (0.0005, 1),
        (-0.0005, -1),
        (1.005, 1005),
        (0, 0),
        (25, 25000),
    ],
)
def test_units_to_milliunits(units, expected):
    assert units_to_milliunits(units) == expected


def test_milliunits_to_units_is_plain_division():
    assert milliunits_to_units(1230) == 1.23
    assert milliunits_to_units(-3333) == -3.333


def test_display_amounts_convert_back_exactly():
    for milliunits in (-82300, -4500, 1, 999, 2500000):
        assert units_to_milliunits(milliunits_to_units(milliunits)) == milliunits


def test_format_currency():
    assert format_currency(-1234567) == "-$1,234.57"
    assert format_currency(4500, "R") == "R4.50"


# ============================================================================
# DATES AND TEXT
# ============================================================================


def test_format_date_defaults_to_today():
    assert format_date_for_ynab() == date.today().isoformat()


def test_format_date_variants():
    assert format_date_for_ynab("2025-03-04") == "2025-03-04"
    assert format_date_for_ynab("March 4, 2025") == "2025-03-04"
    assert format_date_for_ynab(date(2025, 3, 4)) == "2025-03-04"
    assert format_date_for_ynab(datetime(2025, 3, 4, 12, 30)) == "2025-03-04"


def test_format_date_rejects_garbage():
    with pytest.raises(ValidationError, match="Invalid date"):
        format_date_for_ynab("not a date")


def test_sanitize_string():
    assert sanitize_string("  Bakery ") == "Bakery"
    assert sanitize_string("   ") is None
    assert sanitize_string(None) is None
    assert sanitize_string(42) is None


# ============================================================================
# VALIDATORS
# ============================================================================


@pytest.mark.parametrize("amount", [True, "12", float("inf"), 1_000_000_000])
def test_validate_transaction_amount_rejects(amount):
    with pytest.raises(ValidationError):
        validate_transaction_amount(amount)


def test_validate_date_string():
    validate_date_string("2024-02-29", "sinceDate")

    with pytest.raises(ValidationError) as exc_info:
        validate_date_string("2023-02-29", "sinceDate")

    assert exc_info.value.to_dict() == {
        "error": "validation_error",
        "message": "sinceDate must be valid ISO date (YYYY-MM-DD)",
        "field": "sinceDate",
        "provided": "2023-02-29",
        "expected": "ISO format (YYYY-MM-DD)",
    }


def test_validate_currency_code():
    assert validate_currency_code(" usd ", excluded="ZAR") == "USD"

    for bad in ("zar", "US", "EURO", "", None, "U5D"):
        with pytest.raises(ValidationError, match="3-letter currency code"):
            validate_currency_code(bad, excluded="ZAR")


def test_validate_milliunits():
    assert validate_milliunits(10500) == 10500

    for bad in (10.5, "10500", True):
        with pytest.raises(ValidationError, match="integer number of milliunits"):
            validate_milliunits(bad)


# ============================================================================
# DEFAULTS AND FORMATTING
# ============================================================================


def test_defaults():
    assert apply_limit_default(None) == 10
    assert apply_limit_default(None, 25) == 25
    assert apply_limit_default(3, 25) == 3
    assert apply_cleared_default(None) == "uncleared"
    assert apply_cleared_default("cleared") == "cleared"
    assert apply_approved_default(None) is True
    assert apply_approved_default(False) is False


def test_format_success_response():
    text = format_success_response("Budget Payees", {"payees": []}, "**Total payees:** 0")

    assert text.startswith("**Budget Payees**\n\n**Results:**\n```json\n")
    assert '"payees": []' in text
    assert text.endswith("**Total payees:** 0")


def test_format_error_response():
    assert format_error_response(ValueError("boom")) == "**Error**\n\nboom"
    assert format_error_response("plain") == "**Error**\n\nplain"


def test_tool_result_flags_errors():
    ok = tool_result("**Budget Summary**")
    failed = tool_result("**Error**\n\nboom", is_error=True)

    assert ok.isError is False
    assert ok.content[0].text == "**Budget Summary**"
    assert failed.isError is True
    assert failed.content[0].text == "**Error**\n\nboom"


def test_format_created_by():
    identity = Identity(
        login="alice", display_name="Alice A", email="a@x.test", access_token="t"
    )

    assert format_created_by(identity) == "alice (Alice A)"
    assert format_created_by(None) == "local"
