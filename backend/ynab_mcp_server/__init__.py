"""
MCP Server for YNAB Budget Operations

Provides a Model Context Protocol (MCP) server that lets AI assistants read
and write a YNAB budget (accounts, categories, payees, transactions).

Key Features:
- Ledger tools (transactions, categories, accounts, payees, budget summary)
- Currency conversion helper tool
- Dual-mode access: shared API key for machines, delegated OAuth for people

Architecture:
- ASGI application served by uvicorn (or stdio for desktop clients)
- HTTP client to the YNAB API (https://api.ynab.com/v1)
"""

__version__ = "1.0.0"
