"""
MCP Server Configuration

Centralized configuration for the MCP server including:
- Machine access secrets
- YNAB API connection settings
- Delegated OAuth (authorization server) settings
- Tool enablement flags
- Logging configuration
"""

import os
from collections.abc import Mapping

from dotenv import load_dotenv

# Load .env (real environment variables take precedence)
load_dotenv(override=False)

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _as_bool(value: str | None, default: str = "true") -> bool:
    return (value if value is not None else default).strip().lower() == "true"


class MCPServerConfig:
    """Configuration for MCP server operations."""

    def __init__(self, environ: Mapping[str, str] | None = None):
        env = os.environ if environ is None else environ

        # ========================================================================
        # Machine Access
        # ========================================================================

        # Shared secret presented by machine clients (X-API-Key or Bearer)
        self.API_KEY: str | None = env.get("API_KEY") or None

        # Access token carried by the synthesized service identity
        self.SERVICE_ACCESS_TOKEN: str = env.get("SERVICE_ACCESS_TOKEN", "")

        # ========================================================================
        # YNAB API Connection
        # ========================================================================

        self.YNAB_API_TOKEN: str | None = env.get("YNAB_API_TOKEN") or None
        self.YNAB_BUDGET_ID: str | None = env.get("YNAB_BUDGET_ID") or None
        self.YNAB_API_URL: str = env.get("YNAB_API_URL", "https://api.ynab.com/v1")

        # Request timeout in seconds
        self.YNAB_API_TIMEOUT: int = int(env.get("YNAB_API_TIMEOUT", "30"))

        # ========================================================================
        # Currency Conversion
        # ========================================================================

        self.FREECURRENCY_API_KEY: str | None = env.get("FREECURRENCY_API_KEY") or None
        self.FREECURRENCY_API_URL: str = env.get(
            "FREECURRENCY_API_URL", "https://api.freecurrencyapi.com/v1"
        )

        # ========================================================================
        # Delegated OAuth
        # ========================================================================

        # Authorization server that owns /authorize, /register and /token
        self.OAUTH_ISSUER_URL: str | None = env.get("OAUTH_ISSUER_URL") or None

        # RFC 7662 token introspection endpoint for delegated bearer tokens
        self.OAUTH_INTROSPECTION_URL: str | None = (
            env.get("OAUTH_INTROSPECTION_URL") or None
        )
        self.OAUTH_CLIENT_ID: str | None = env.get("OAUTH_CLIENT_ID") or None
        self.OAUTH_CLIENT_SECRET: str | None = env.get("OAUTH_CLIENT_SECRET") or None

        # Public URL of this server (used in 401 challenges and metadata)
        self.RESOURCE_SERVER_URL: str = env.get(
            "RESOURCE_SERVER_URL", "http://localhost:8000"
        )

        # ========================================================================
        # HTTP Server
        # ========================================================================

        self.HOST: str = env.get("HOST", "0.0.0.0")
        self.PORT: int = int(env.get("PORT", "8000"))

        # ========================================================================
        # Tool Settings
        # ========================================================================

        self.ENABLE_LEDGER_TOOLS: bool = _as_bool(env.get("ENABLE_LEDGER_TOOLS"))
        self.ENABLE_CURRENCY_TOOLS: bool = _as_bool(env.get("ENABLE_CURRENCY_TOOLS"))

        # Page size for getTransactions
        self.DEFAULT_TRANSACTION_LIMIT: int = int(
            env.get("DEFAULT_TRANSACTION_LIMIT", "10")
        )
        self.MAX_TRANSACTION_LIMIT: int = int(env.get("MAX_TRANSACTION_LIMIT", "100"))

        # ========================================================================
        # Logging
        # ========================================================================

        # Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        self.LOG_LEVEL: str = env.get("LOG_LEVEL", "INFO").upper()

        # Log file path (optional - if not set, logs to stderr only)
        self.LOG_FILE: str | None = env.get("LOG_FILE") or None

        # Enable detailed API request/response logging
        self.LOG_API_REQUESTS: bool = _as_bool(env.get("LOG_API_REQUESTS"), "false")

    # ============================================================================
    # Derived Flags
    # ============================================================================

    @property
    def ledger_configured(self) -> bool:
        """True when both the YNAB token and budget id are present."""
        return bool(self.YNAB_API_TOKEN and self.YNAB_BUDGET_ID)

    @property
    def machine_access_enabled(self) -> bool:
        return bool(self.API_KEY)

    # ============================================================================
    # Helper Methods
    # ============================================================================

    def get_summary(self) -> dict:
        """Get configuration summary as dict (secrets reported as set/unset)."""
        return {
            "ynab_api_url": self.YNAB_API_URL,
            "ynab_api_timeout": self.YNAB_API_TIMEOUT,
            "ynab_budget_id": self.YNAB_BUDGET_ID,
            "secrets": {
                "api_key": self.machine_access_enabled,
                "service_access_token": bool(self.SERVICE_ACCESS_TOKEN),
                "ynab_api_token": bool(self.YNAB_API_TOKEN),
                "freecurrency_api_key": bool(self.FREECURRENCY_API_KEY),
                "oauth_client_secret": bool(self.OAUTH_CLIENT_SECRET),
            },
            "oauth": {
                "issuer_url": self.OAUTH_ISSUER_URL,
                "introspection_url": self.OAUTH_INTROSPECTION_URL,
                "resource_server_url": self.RESOURCE_SERVER_URL,
            },
            "http": {"host": self.HOST, "port": self.PORT},
            "tools_enabled": {
                "ledger": self.ENABLE_LEDGER_TOOLS,
                "currency": self.ENABLE_CURRENCY_TOOLS,
            },
            "transaction_limit": {
                "default": self.DEFAULT_TRANSACTION_LIMIT,
                "max": self.MAX_TRANSACTION_LIMIT,
            },
            "logging": {
                "level": self.LOG_LEVEL,
                "file": self.LOG_FILE,
                "api_requests": self.LOG_API_REQUESTS,
            },
        }

    def validate(self) -> tuple[bool, str | None]:
        """
        Validate configuration settings.

        Missing secrets are not errors: they disable the features that need
        them and are reported as warnings at startup.

        Returns:
            (is_valid, error_message)
        """
        urls = {
            "YNAB_API_URL": self.YNAB_API_URL,
            "FREECURRENCY_API_URL": self.FREECURRENCY_API_URL,
            "RESOURCE_SERVER_URL": self.RESOURCE_SERVER_URL,
            "OAUTH_ISSUER_URL": self.OAUTH_ISSUER_URL,
            "OAUTH_INTROSPECTION_URL": self.OAUTH_INTROSPECTION_URL,
        }
        for name, value in urls.items():
            if value and not value.startswith(("http://", "https://")):
                return False, f"{name} must start with http:// or https://"

        if self.YNAB_API_TIMEOUT <= 0:
            return False, "YNAB_API_TIMEOUT must be positive"

        if not 0 < self.PORT < 65536:
            return False, "PORT must be between 1 and 65535"

        if self.MAX_TRANSACTION_LIMIT <= 0:
            return False, "MAX_TRANSACTION_LIMIT must be positive"

        if not 1 <= self.DEFAULT_TRANSACTION_LIMIT <= self.MAX_TRANSACTION_LIMIT:
            return (
                False,
                "DEFAULT_TRANSACTION_LIMIT must be between 1 and MAX_TRANSACTION_LIMIT",
            )

        if self.LOG_LEVEL not in VALID_LOG_LEVELS:
            return False, f"LOG_LEVEL must be one of: {VALID_LOG_LEVELS}"

        return True, None


# Singleton instance
config = MCPServerConfig()
