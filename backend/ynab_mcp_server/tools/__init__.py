"""
MCP Tools Package

Tool families:
- ledger: YNAB budget tools (6 tools)
- currency: convertToZAR
"""

import logging
from dataclasses import dataclass

from mcp.server.fastmcp import FastMCP

from .currency import CurrencyTools, register_currency_tools
from .ledger import LedgerTools, register_ledger_tools

logger = logging.getLogger(__name__)


@dataclass
class RegisteredTools:
    """Tool families registered on a server (None when skipped)."""

    ledger: LedgerTools | None = None
    currency: CurrencyTools | None = None

    def close(self) -> None:
        if self.ledger is not None:
            self.ledger.service.client.close()


def register_all_tools(mcp: FastMCP, config) -> RegisteredTools:
    """Register every enabled tool family on the server."""
    registered = RegisteredTools()

    if config.ENABLE_LEDGER_TOOLS:
        registered.ledger = register_ledger_tools(mcp, config)
    else:
        logger.info("Ledger tools disabled (ENABLE_LEDGER_TOOLS=false)")

    if config.ENABLE_CURRENCY_TOOLS:
        registered.currency = register_currency_tools(mcp, config)
    else:
        logger.info("Currency tools disabled (ENABLE_CURRENCY_TOOLS=false)")

    return registered


__all__ = [
    "CurrencyTools",
    "LedgerTools",
    "RegisteredTools",
    "register_all_tools",
]
