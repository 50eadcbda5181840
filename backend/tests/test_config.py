"""Tests for MCPServerConfig."""

import logging

import pytest

from ynab_mcp_server.config import MCPServerConfig
from ynab_mcp_server.logging_config import StructuredFormatter


def test_defaults_from_empty_environment():
    config = MCPServerConfig(environ={})

    assert config.API_KEY is None
    assert config.YNAB_API_URL == "https://api.ynab.com/v1"
    assert config.YNAB_API_TIMEOUT == 30
    assert config.PORT == 8000
    assert config.ENABLE_LEDGER_TOOLS is True
    assert config.LOG_API_REQUESTS is False
    assert not config.ledger_configured
    assert not config.machine_access_enabled
    assert config.validate() == (True, None)


def test_ledger_needs_token_and_budget():
    assert not MCPServerConfig(environ={"YNAB_API_TOKEN": "t"}).ledger_configured
    assert MCPServerConfig(
        environ={"YNAB_API_TOKEN": "t", "YNAB_BUDGET_ID": "b"}
    ).ledger_configured


def test_empty_api_key_disables_machine_access():
    assert not MCPServerConfig(environ={"API_KEY": ""}).machine_access_enabled


def test_summary_never_contains_secrets(test_config):
    summary = test_config.get_summary()

    assert summary["secrets"]["api_key"] is True
    assert summary["secrets"]["ynab_api_token"] is True
    assert "test-api-key" not in str(summary)
    assert "ynab-token" not in str(summary)


@pytest.mark.parametrize(
    "environ, message",
    [
        ({"YNAB_API_URL": "ftp://ynab"}, "YNAB_API_URL"),
        ({"OAUTH_ISSUER_URL": "issuer.test"}, "OAUTH_ISSUER_URL"),
        ({"YNAB_API_TIMEOUT": "0"}, "YNAB_API_TIMEOUT"),
        ({"PORT": "70000"}, "PORT"),
        ({"DEFAULT_TRANSACTION_LIMIT": "200"}, "DEFAULT_TRANSACTION_LIMIT"),
        ({"LOG_LEVEL": "chatty"}, "LOG_LEVEL"),
    ],
)
def test_validate_rejects(environ, message):
    is_valid, error = MCPServerConfig(environ=environ).validate()

    assert not is_valid
    assert message in error


def test_structured_formatter_fills_context_fields():
    formatter = StructuredFormatter("%(auth_mode)s %(request_path)s %(message)s")
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)

    assert formatter.format(record) == "- - hello"

    record.auth_mode = "machine"
    record.request_path = "/mcp"
    assert formatter.format(record) == "machine /mcp hello"
