"""Tests for the YNAB API client.

Covers:
- `data` envelope unwrapping and server_knowledge pass-through
- Query parameters and request bodies
- Error envelope -> YNABAPIError mapping
- Transport failures
"""

import json

import pytest
import requests
import responses

from ynab_mcp_server.client.ynab_client import YNABAPIError

BUDGET_URL = "https://api.ynab.test/v1/budgets/budget-123"

# ============================================================================
# SUCCESSFUL REQUESTS
# ============================================================================


@responses.activate
def test_get_transactions_passes_since_date(ynab_client, transactions_payload):
    responses.add(
        responses.GET, f"{BUDGET_URL}/transactions", json=transactions_payload
    )

    result = ynab_client.get_transactions("2025-01-01")

    assert len(result["transactions"]) == 4
    assert result["server_knowledge"] == 33
    assert "since_date=2025-01-01" in responses.calls[0].request.url


@responses.activate
def test_get_transactions_without_since_date(ynab_client, transactions_payload):
    responses.add(
        responses.GET, f"{BUDGET_URL}/transactions", json=transactions_payload
    )

    ynab_client.get_transactions()

    assert "since_date" not in responses.calls[0].request.url


@responses.activate
def test_requests_carry_bearer_token(ynab_client, accounts_payload):
    responses.add(responses.GET, f"{BUDGET_URL}/accounts", json=accounts_payload)

    ynab_client.get_accounts()

    assert responses.calls[0].request.headers["Authorization"] == "Bearer ynab-token"


@responses.activate
def test_create_transaction_wraps_body(ynab_client):
    responses.add(
        responses.POST,
        f"{BUDGET_URL}/transactions",
        json={"data": {"transaction": {"id": "txn-9"}, "server_knowledge": 40}},
        status=201,
    )

    result = ynab_client.create_transaction({"account_id": "acc-1", "amount": -1000})

    body = json.loads(responses.calls[0].request.body)
    assert body == {"transaction": {"account_id": "acc-1", "amount": -1000}}
    assert result == {"transaction": {"id": "txn-9"}, "server_knowledge": 40}


@responses.activate
def test_get_budget_uses_budget_path(ynab_client):
    responses.add(
        responses.GET,
        BUDGET_URL,
        json={"data": {"budget": {"id": "budget-123", "name": "Home"}, "server_knowledge": 1}},
    )

    result = ynab_client.get_budget()

    assert result["budget"]["name"] == "Home"


# ============================================================================
# ERROR HANDLING
# ============================================================================


@responses.activate
def test_error_envelope_becomes_api_error(ynab_client):
    responses.add(
        responses.GET,
        f"{BUDGET_URL}/payees",
        json={"error": {"id": "401", "name": "unauthorized", "detail": "Unauthorized"}},
        status=401,
    )

    with pytest.raises(YNABAPIError) as exc_info:
        ynab_client.get_payees()

    error = exc_info.value
    assert error.message == "YNAB API error (401): Unauthorized"
    assert error.status_code == 401
    assert error.error_name == "unauthorized"
    assert error.to_dict()["endpoint"] == "/budgets/budget-123/payees"


@responses.activate
def test_non_json_error_uses_body_text(ynab_client):
    responses.add(
        responses.GET, f"{BUDGET_URL}/accounts", body="Bad gateway", status=502
    )

    with pytest.raises(YNABAPIError, match=r"\(502\): Bad gateway"):
        ynab_client.get_accounts()


@responses.activate
def test_connection_error_becomes_api_error(ynab_client):
    responses.add(
        responses.GET,
        f"{BUDGET_URL}/categories",
        body=requests.ConnectionError("connection refused"),
    )

    with pytest.raises(YNABAPIError, match="Connection error") as exc_info:
        ynab_client.get_categories()

    assert exc_info.value.status_code is None


@responses.activate
def test_no_retry_on_server_error(ynab_client):
    responses.add(responses.GET, f"{BUDGET_URL}/accounts", json={}, status=500)

    with pytest.raises(YNABAPIError):
        ynab_client.get_accounts()

    assert len(responses.calls) == 1
