"""Service layer: business logic between MCP tools and the YNAB client."""

from .ledger_service import LedgerService, LedgerServiceError

__all__ = ["LedgerService", "LedgerServiceError"]
