"""
HTTP Client Package

YNAB API HTTP client for the MCP server.
"""

from .ynab_client import YNABAPIError, YNABClient

__all__ = ["YNABAPIError", "YNABClient"]
