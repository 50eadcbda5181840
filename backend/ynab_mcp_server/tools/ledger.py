"""
YNAB Ledger Tools

Provides 6 MCP tools backed by the configured YNAB budget:
1. getTransactions - Filtered, enriched transaction listing
2. createTransaction - Create a transaction (amount in display units)
3. getCategories - Category groups and categories
4. getAccounts - Accounts with balances
5. getBudgetSummary - Budget metadata
6. getPayees - Payees, optionally filtered by name

Tool and argument names are part of the published tool schema, hence the
camelCase parameters.

Each tool answers with a short text plus the JSON envelope. Failures come back
in-band as "**Error**\n\n<message>" with isError set.
"""

import functools
import inspect
import logging
from typing import Annotated, Literal

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult
from pydantic import Field

from ..auth.identity import get_current_identity
from ..client.ynab_client import YNABClient
from ..services.ledger_service import LedgerService, LedgerServiceError
from ..utils.currency import format_currency
from ..utils.defaults import DEFAULT_TRANSACTION_LIMIT, apply_limit_default
from ..utils.formatters import (
    format_created_by,
    format_error_response,
    format_success_response,
    tool_result,
)
from ..utils.validators import ValidationError

logger = logging.getLogger(__name__)

LEDGER_TOOL_NAMES = [
    "getTransactions",
    "createTransaction",
    "getCategories",
    "getAccounts",
    "getBudgetSummary",
    "getPayees",
]

ClearedStatus = Literal["cleared", "uncleared", "reconciled"]
FlagColor = Literal["red", "orange", "yellow", "green", "blue", "purple"]


def _tool_error(tool: str, error: Exception, fallback_prefix: str) -> CallToolResult:
    """Log a tool failure and build the in-band error result."""
    if isinstance(error, (ValidationError, LedgerServiceError)):
        logger.error(f"{tool} error: {error.to_dict()}")
        return tool_result(format_error_response(error), is_error=True)

    logger.exception(f"Unexpected error in {tool}: {error}")
    return tool_result(
        format_error_response(f"{fallback_prefix}: {error}"), is_error=True
    )


class LedgerTools:
    """The ledger tool implementations, bound to one LedgerService."""

    def __init__(
        self,
        service: LedgerService,
        default_limit: int = DEFAULT_TRANSACTION_LIMIT,
    ):
        self.service = service
        self.default_limit = default_limit

    def _with_limit_bound(self, method):
        """Publish `limit` with the service page-size bounds in its schema."""
        max_limit = self.service.max_limit
        bounded = Annotated[
            int | None,
            Field(
                ge=1,
                le=max_limit,
                description=(
                    "Maximum number of transactions to return "
                    f"(default {self.default_limit}, max {max_limit})"
                ),
            ),
        ]
        signature = inspect.signature(method)
        parameters = [
            param.replace(annotation=bounded) if param.name == "limit" else param
            for param in signature.parameters.values()
        ]

        @functools.wraps(method)
        async def tool(**kwargs):
            return await method(**kwargs)

        tool.__signature__ = signature.replace(parameters=parameters)
        return tool

    def register(self, mcp: FastMCP) -> None:
        mcp.add_tool(
            self._with_limit_bound(self.get_transactions),
            name="getTransactions",
            description=(
                "Fetch transactions with optional filtering by search text, "
                "date range, account, or category"
            ),
        )
        mcp.add_tool(
            self.create_transaction,
            name="createTransaction",
            description="Create a new transaction in YNAB",
        )
        mcp.add_tool(
            self.get_categories,
            name="getCategories",
            description="Get all budget categories organized by category groups",
        )
        mcp.add_tool(
            self.get_accounts,
            name="getAccounts",
            description="Get all accounts in the budget",
        )
        mcp.add_tool(
            self.get_budget_summary,
            name="getBudgetSummary",
            description="Get overall budget information and summary",
        )
        mcp.add_tool(
            self.get_payees,
            name="getPayees",
            description="Get all payees in the budget",
        )

    async def get_transactions(
        self,
        searchText: Annotated[
            str | None, Field(description="Text to search for in payee names or memos")
        ] = None,
        accountId: Annotated[
            str | None, Field(description="Filter by specific account ID")
        ] = None,
        categoryId: Annotated[
            str | None, Field(description="Filter by specific category ID")
        ] = None,
        sinceDate: Annotated[
            str | None,
            Field(description="Start date for transaction range (YYYY-MM-DD format)"),
        ] = None,
        limit: Annotated[
            int | None,
            Field(ge=1, description="Maximum number of transactions to return"),
        ] = None,
    ) -> CallToolResult:
        """
        Search transactions and resolve their account and category names.

        Examples:
            getTransactions(searchText="coffee")
            getTransactions(sinceDate="2025-01-01", limit=50)
        """
        try:
            result = await self.service.get_transactions(
                search_text=searchText,
                account_id=accountId,
                category_id=categoryId,
                since_date=sinceDate,
                limit=apply_limit_default(limit, self.default_limit),
            )
        except Exception as e:
            return _tool_error("getTransactions", e, "Failed to fetch transactions")

        text = format_success_response(
            "Transactions Retrieved",
            result,
            f"**Summary:** Retrieved {result['returned_count']} of "
            f"{result['total_count']} transactions",
        )
        return tool_result(text)

    async def create_transaction(
        self,
        account_id: Annotated[
            str, Field(description="ID of the account for the transaction")
        ],
        amount: Annotated[
            float,
            Field(
                description=(
                    "Transaction amount in currency units (positive for inflow, "
                    "negative for outflow), e.g. -12.5"
                )
            ),
        ],
        payee_name: Annotated[
            str | None, Field(description="Name of the payee")
        ] = None,
        category_id: Annotated[
            str | None,
            Field(description="ID of the category (optional for transfer transactions)"),
        ] = None,
        memo: Annotated[str | None, Field(description="Transaction memo/note")] = None,
        date: Annotated[
            str | None,
            Field(description="Transaction date in YYYY-MM-DD format (defaults to today)"),
        ] = None,
        cleared: Annotated[
            ClearedStatus | None, Field(description="Transaction cleared status")
        ] = None,
        approved: Annotated[
            bool | None, Field(description="Whether the transaction is approved")
        ] = None,
        flag_color: Annotated[
            FlagColor | None, Field(description="Flag color for the transaction")
        ] = None,
    ) -> CallToolResult:
        """Create a transaction; the amount is converted to milliunits."""
        try:
            result = await self.service.create_transaction(
                account_id=account_id,
                amount=amount,
                payee_name=payee_name,
                category_id=category_id,
                memo=memo,
                date=date,
                cleared=cleared,
                approved=approved,
                flag_color=flag_color,
            )
        except Exception as e:
            return _tool_error("createTransaction", e, "Failed to create transaction")

        transaction = result["transaction"]
        text = format_success_response(
            "Transaction Created Successfully",
            result,
            f"**Amount:** {format_currency(transaction['amount_milliunits'])}\n\n"
            f"**Created by:** {format_created_by(get_current_identity())}",
        )
        return tool_result(text)

    async def get_categories(
        self,
        includeHidden: Annotated[
            bool, Field(description="Include hidden/deleted categories")
        ] = False,
        includeDetails: Annotated[
            bool,
            Field(description="Include budgeted/activity/balance and goal details"),
        ] = False,
    ) -> CallToolResult:
        """List category groups and their categories."""
        try:
            result = await self.service.get_categories(
                include_hidden=includeHidden, include_details=includeDetails
            )
        except Exception as e:
            return _tool_error("getCategories", e, "Failed to fetch categories")

        text = format_success_response(
            "Budget Categories",
            result,
            f"**Total category groups:** {len(result['category_groups'])}",
        )
        return tool_result(text)

    async def get_accounts(
        self,
        includeDeleted: Annotated[
            bool, Field(description="Include deleted/closed accounts")
        ] = False,
    ) -> CallToolResult:
        """List accounts with balances in currency units."""
        try:
            result = await self.service.get_accounts(include_deleted=includeDeleted)
        except Exception as e:
            return _tool_error("getAccounts", e, "Failed to fetch accounts")

        text = format_success_response(
            "Budget Accounts",
            result,
            f"**Total accounts:** {len(result['accounts'])}",
        )
        return tool_result(text)

    async def get_budget_summary(self) -> CallToolResult:
        """Budget name, month range and currency format."""
        try:
            result = await self.service.get_budget_summary()
        except Exception as e:
            return _tool_error(
                "getBudgetSummary", e, "Failed to fetch budget summary"
            )

        return tool_result(format_success_response("Budget Summary", result))

    async def get_payees(
        self,
        searchText: Annotated[
            str | None, Field(description="Filter payees by name")
        ] = None,
        includeDeleted: Annotated[
            bool, Field(description="Include deleted payees")
        ] = False,
    ) -> CallToolResult:
        """List payees."""
        try:
            result = await self.service.get_payees(
                search_text=searchText, include_deleted=includeDeleted
            )
        except Exception as e:
            return _tool_error("getPayees", e, "Failed to fetch payees")

        text = format_success_response(
            "Budget Payees",
            result,
            f"**Total payees:** {len(result['payees'])}",
        )
        return tool_result(text)


def register_ledger_tools(mcp: FastMCP, config) -> LedgerTools | None:
    """
    Register the YNAB tools when the ledger is configured.

    Missing YNAB_API_TOKEN or YNAB_BUDGET_ID skips registration with a
    warning; the rest of the server keeps working.
    """
    if not config.ledger_configured:
        logger.warning(
            "YNAB_API_TOKEN or YNAB_BUDGET_ID not found in environment variables. "
            "YNAB tools will not be registered."
        )
        return None

    client = YNABClient(
        api_token=config.YNAB_API_TOKEN,
        budget_id=config.YNAB_BUDGET_ID,
        base_url=config.YNAB_API_URL,
        timeout=config.YNAB_API_TIMEOUT,
        log_requests=config.LOG_API_REQUESTS,
    )
    tools = LedgerTools(
        LedgerService(client, max_limit=config.MAX_TRANSACTION_LIMIT),
        default_limit=config.DEFAULT_TRANSACTION_LIMIT,
    )
    tools.register(mcp)

    logger.info(f"Registered {len(LEDGER_TOOL_NAMES)} YNAB tools")
    return tools
