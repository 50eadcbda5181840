"""Core test fixtures.

Provides a test configuration, YNAB client/service instances pointed at a
fake base URL, canned YNAB payloads, and a `responses` mock preloaded with
the lookup endpoints (accounts, categories) every enrichment call makes.

No test touches the network.
"""

import pytest
import responses

from ynab_mcp_server.client.ynab_client import YNABClient
from ynab_mcp_server.config import MCPServerConfig
from ynab_mcp_server.services.ledger_service import LedgerService

YNAB_BASE_URL = "https://api.ynab.test/v1"
BUDGET_ID = "budget-123"
BUDGET_URL = f"{YNAB_BASE_URL}/budgets/{BUDGET_ID}"
RATES_URL = "https://rates.test/v1"
API_KEY = "test-api-key"


# ============================================================================
# CONFIGURATION
# ============================================================================


@pytest.fixture
def test_environ():
    """Environment mapping for a fully configured server."""
    return {
        "API_KEY": API_KEY,
        "SERVICE_ACCESS_TOKEN": "service-token",
        "YNAB_API_TOKEN": "ynab-token",
        "YNAB_BUDGET_ID": BUDGET_ID,
        "YNAB_API_URL": YNAB_BASE_URL,
        "FREECURRENCY_API_KEY": "rates-key",
        "FREECURRENCY_API_URL": RATES_URL,
        "RESOURCE_SERVER_URL": "https://mcp.test",
    }


@pytest.fixture
def test_config(test_environ):
    return MCPServerConfig(environ=test_environ)


# ============================================================================
# YNAB PAYLOADS
# ============================================================================


@pytest.fixture
def accounts_payload():
    return {
        "data": {
            "accounts": [
                {
                    "id": "acc-1",
                    "name": "Checking",
                    "type": "checking",
                    "balance": 150000,
                    "cleared_balance": 100000,
                    "uncleared_balance": 50000,
                    "note": None,
                    "closed": False,
                    "deleted": False,
                },
                {
                    "id": "acc-2",
                    "name": "Old Savings",
                    "type": "savings",
                    "balance": 0,
                    "cleared_balance": 0,
                    "uncleared_balance": 0,
                    "note": "closed in 2023",
                    "closed": True,
                    "deleted": True,
                },
            ],
            "server_knowledge": 11,
        }
    }


@pytest.fixture
def categories_payload():
    return {
        "data": {
            "category_groups": [
                {
                    "id": "grp-1",
                    "name": "Everyday",
                    "hidden": False,
                    "deleted": False,
                    "categories": [
                        {
                            "id": "cat-1",
                            "name": "Groceries",
                            "hidden": False,
                            "deleted": False,
                            "budgeted": 400000,
                            "activity": -123450,
                            "balance": 276550,
                            "goal_type": "TB",
                            "goal_target": 500000,
                        },
                        {
                            "id": "cat-2",
                            "name": "Dining Out",
                            "hidden": True,
                            "deleted": False,
                            "budgeted": 0,
                            "activity": -12000,
                            "balance": -12000,
                            "goal_type": None,
                            "goal_target": 0,
                        },
                    ],
                },
                {
                    "id": "grp-2",
                    "name": "Archived",
                    "hidden": True,
                    "deleted": False,
                    "categories": [
                        {
                            "id": "cat-3",
                            "name": "Old Hobby",
                            "hidden": False,
                            "deleted": True,
                            "budgeted": 0,
                            "activity": 0,
                            "balance": 0,
                            "goal_type": None,
                            "goal_target": None,
                        }
                    ],
                },
            ],
            "server_knowledge": 22,
        }
    }


@pytest.fixture
def transactions_payload():
    return {
        "data": {
            "transactions": [
                {
                    "id": "txn-1",
                    "date": "2025-01-02",
                    "amount": -4500,
                    "payee_name": "Corner Cafe",
                    "memo": "Morning coffee",
                    "cleared": "cleared",
                    "approved": True,
                    "flag_color": None,
                    "account_id": "acc-1",
                    "category_id": "cat-1",
                    "deleted": False,
                },
                {
                    "id": "txn-2",
                    "date": "2025-01-03",
                    "amount": -82300,
                    "payee_name": "Supermarket",
                    "memo": None,
                    "cleared": "uncleared",
                    "approved": True,
                    "flag_color": "red",
                    "account_id": "acc-1",
                    "category_id": "cat-missing",
                    "deleted": False,
                },
                {
                    "id": "txn-3",
                    "date": "2025-01-04",
                    "amount": 2500000,
                    "payee_name": "Employer",
                    "memo": "Salary",
                    "cleared": "cleared",
                    "approved": True,
                    "flag_color": None,
                    "account_id": "acc-unknown",
                    "category_id": None,
                    "deleted": False,
                },
                {
                    "id": "txn-4",
                    "date": "2025-01-05",
                    "amount": -12000,
                    "payee_name": "Coffee Roasters",
                    "memo": None,
                    "cleared": "uncleared",
                    "approved": False,
                    "flag_color": None,
                    "account_id": "acc-1",
                    "category_id": "cat-2",
                    "deleted": False,
                },
            ],
            "server_knowledge": 33,
        }
    }


# ============================================================================
# CLIENT / SERVICE
# ============================================================================


@pytest.fixture
def ynab_client():
    client = YNABClient(
        api_token="ynab-token",
        budget_id=BUDGET_ID,
        base_url=YNAB_BASE_URL,
        timeout=5,
        log_requests=True,
    )
    yield client
    client.close()


@pytest.fixture
def ledger_service(ynab_client):
    return LedgerService(ynab_client, max_limit=100)


@pytest.fixture
def mock_ynab(accounts_payload, categories_payload):
    """Mock YNAB API with the accounts and categories endpoints registered."""
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add(responses.GET, f"{BUDGET_URL}/accounts", json=accounts_payload)
        rsps.add(responses.GET, f"{BUDGET_URL}/categories", json=categories_payload)
        yield rsps
