"""
YNAB API HTTP Client

Provides the HTTP client the MCP server uses to read and write a YNAB budget.

Features:
- Typed GET/POST helpers for the budget endpoints
- Detailed error reporting (YNAB error envelope -> YNABAPIError)
- Request/response logging (optional)
- Session management for connection pooling

No automatic retries: callers own retry policy.
"""

import logging
import time
from typing import Any

import requests
from requests.exceptions import RequestException

from ..config import config as default_config
from .models import (
    Account,
    BudgetDetail,
    CategoryGroup,
    Payee,
    SaveTransaction,
    TransactionDetail,
)

logger = logging.getLogger(__name__)


class YNABAPIError(Exception):
    """Exception raised when the YNAB API call fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        endpoint: str | None = None,
        error_name: str | None = None,
        details: str | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.endpoint = endpoint
        self.error_name = error_name
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert error to dict for MCP error responses."""
        return {
            "error": "api_error",
            "message": self.message,
            "endpoint": self.endpoint,
            "status_code": self.status_code,
            "error_name": self.error_name,
            "details": self.details,
        }


class YNABClient:
    """
    HTTP client for the YNAB API, bound to one budget.

    Every method returns the `data` object of the YNAB response, which
    carries the entities plus `server_knowledge`.
    """

    def __init__(
        self,
        api_token: str,
        budget_id: str,
        base_url: str | None = None,
        timeout: int | None = None,
        log_requests: bool | None = None,
    ):
        """
        Initialize YNAB API client.

        Args:
            api_token: YNAB personal access token
            budget_id: Budget to operate on
            base_url: API base URL (defaults to config.YNAB_API_URL)
            timeout: Request timeout in seconds (defaults to config.YNAB_API_TIMEOUT)
            log_requests: Debug-log requests (defaults to config.LOG_API_REQUESTS)
        """
        self.budget_id = budget_id
        self.base_url = (base_url or default_config.YNAB_API_URL).rstrip("/")
        self.timeout = timeout or default_config.YNAB_API_TIMEOUT
        self.log_requests = (
            default_config.LOG_API_REQUESTS if log_requests is None else log_requests
        )
        self.session = requests.Session()

        # Configure session
        self.session.headers.update(
            {
                "Authorization": f"Bearer {api_token}",
                "Accept": "application/json",
                "User-Agent": "YNAB-MCP-Server/1.0",
            }
        )

        logger.info(f"YNABClient initialized: {self.base_url} (budget {budget_id})")

    def _log_request(
        self,
        method: str,
        endpoint: str,
        params: dict | None = None,
        json_data: dict | None = None,
    ):
        """Log API request (if enabled)."""
        if self.log_requests:
            logger.debug(f"API Request: {method} {endpoint}")
            if params:
                logger.debug(f"  Params: {params}")
            if json_data:
                logger.debug(f"  JSON: {json_data}")

    def _log_response(
        self, method: str, endpoint: str, status_code: int, response_time: float
    ):
        """Log API response (if enabled)."""
        if self.log_requests:
            logger.debug(
                f"API Response: {method} {endpoint} - {status_code} ({response_time:.2f}s)"
            )

    def _make_request(
        self,
        method: str,
        endpoint: str,
        params: dict | None = None,
        json_data: dict | None = None,
    ) -> dict[str, Any]:
        """
        Make HTTP request and unwrap the YNAB `data` envelope.

        Args:
            method: HTTP method (GET, POST)
            endpoint: API endpoint (e.g., '/budgets/<id>/accounts')
            params: Query parameters
            json_data: JSON request body

        Returns:
            The response's `data` object

        Raises:
            YNABAPIError: If the request fails or YNAB returns an error
        """
        url = f"{self.base_url}{endpoint}"

        self._log_request(method, endpoint, params, json_data)

        try:
            start_time = time.time()
            response = self.session.request(
                method, url, params=params, json=json_data, timeout=self.timeout
            )
            response_time = time.time() - start_time
        except RequestException as e:
            raise YNABAPIError(
                message=f"Connection error: {e}", endpoint=endpoint, details=str(e)
            ) from e

        self._log_response(method, endpoint, response.status_code, response_time)

        if response.status_code >= 400:
            # YNAB error envelope: {"error": {"id", "name", "detail"}}
            error_name = None
            try:
                error = response.json().get("error", {})
                error_name = error.get("name")
                error_message = error.get("detail") or error_name or response.text[:200]
            except (ValueError, AttributeError):
                error_message = response.text[:200]

            raise YNABAPIError(
                message=f"YNAB API error ({response.status_code}): {error_message}",
                status_code=response.status_code,
                endpoint=endpoint,
                error_name=error_name,
                details=response.text[:1000],
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise YNABAPIError(
                message="YNAB API returned a non-JSON response",
                status_code=response.status_code,
                endpoint=endpoint,
                details=response.text[:1000],
            ) from e

        return payload.get("data", {})

    def _budget_path(self, suffix: str = "") -> str:
        return f"/budgets/{self.budget_id}{suffix}"

    # ============================================================================
    # Budget Endpoints
    # ============================================================================

    def get_transactions(self, since_date: str | None = None) -> dict[str, Any]:
        """
        GET /budgets/{id}/transactions

        Args:
            since_date: Only return transactions on or after this date (YYYY-MM-DD)

        Returns:
            {"transactions": [TransactionDetail], "server_knowledge": int}
        """
        params = {"since_date": since_date} if since_date else None
        data = self._make_request("GET", self._budget_path("/transactions"), params)
        transactions: list[TransactionDetail] = data.get("transactions", [])
        return {
            "transactions": transactions,
            "server_knowledge": data.get("server_knowledge"),
        }

    def create_transaction(self, transaction: SaveTransaction) -> dict[str, Any]:
        """
        POST /budgets/{id}/transactions

        Returns:
            {"transaction": TransactionDetail | None, "server_knowledge": int}
        """
        data = self._make_request(
            "POST",
            self._budget_path("/transactions"),
            json_data={"transaction": transaction},
        )
        return {
            "transaction": data.get("transaction"),
            "server_knowledge": data.get("server_knowledge"),
        }

    def get_accounts(self) -> dict[str, Any]:
        """GET /budgets/{id}/accounts -> {"accounts", "server_knowledge"}"""
        data = self._make_request("GET", self._budget_path("/accounts"))
        accounts: list[Account] = data.get("accounts", [])
        return {"accounts": accounts, "server_knowledge": data.get("server_knowledge")}

    def get_categories(self) -> dict[str, Any]:
        """GET /budgets/{id}/categories -> {"category_groups", "server_knowledge"}"""
        data = self._make_request("GET", self._budget_path("/categories"))
        groups: list[CategoryGroup] = data.get("category_groups", [])
        return {
            "category_groups": groups,
            "server_knowledge": data.get("server_knowledge"),
        }

    def get_budget(self) -> dict[str, Any]:
        """GET /budgets/{id} -> {"budget", "server_knowledge"}"""
        data = self._make_request("GET", self._budget_path())
        budget: BudgetDetail = data.get("budget", {})
        return {"budget": budget, "server_knowledge": data.get("server_knowledge")}

    def get_payees(self) -> dict[str, Any]:
        """GET /budgets/{id}/payees -> {"payees", "server_knowledge"}"""
        data = self._make_request("GET", self._budget_path("/payees"))
        payees: list[Payee] = data.get("payees", [])
        return {"payees": payees, "server_knowledge": data.get("server_knowledge")}

    def close(self):
        """Close the session and cleanup resources."""
        self.session.close()
        logger.info("YNABClient session closed")
