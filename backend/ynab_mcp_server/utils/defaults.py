"""
Smart Default Values

Provides default values for ledger operation parameters:
- Transaction page size
- Cleared status / approval of new transactions

Goal: every tool works with only its required parameters.
"""

DEFAULT_TRANSACTION_LIMIT = 10
DEFAULT_CLEARED_STATUS = "uncleared"
DEFAULT_APPROVED = True


def apply_limit_default(limit: int | None = None, default: int | None = None) -> int:
    """
    Apply default page size if not provided.

    Args:
        limit: Page size or None
        default: Configured default (falls back to DEFAULT_TRANSACTION_LIMIT)

    Returns:
        Page size (provided or default)
    """
    if limit is not None:
        return limit
    return default if default is not None else DEFAULT_TRANSACTION_LIMIT


def apply_cleared_default(cleared: str | None = None) -> str:
    """New transactions are uncleared unless stated otherwise."""
    return cleared or DEFAULT_CLEARED_STATUS


def apply_approved_default(approved: bool | None = None) -> bool:
    """New transactions are approved unless stated otherwise."""
    return approved if approved is not None else DEFAULT_APPROVED
