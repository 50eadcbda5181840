"""
Ledger Service - Business Logic

Orchestrates YNAB budget operations for the MCP tools:
- Transaction retrieval with account/category enrichment and filtering
- Transaction creation (display units -> milliunits, text sanitizing)
- Category, account, payee and budget projections in display units

Every call builds fresh lookup maps from the upstream API; nothing is
cached between requests. Upstream failures are re-raised as
LedgerServiceError tagged with the failing operation.
"""

import asyncio
import logging
from typing import Any

from ..client.models import Account, Category, CategoryGroup, TransactionDetail
from ..client.ynab_client import YNABClient
from ..utils.currency import (
    format_date_for_ynab,
    milliunits_to_units,
    sanitize_string,
    units_to_milliunits,
    validate_transaction_amount,
)
from ..utils.defaults import (
    apply_approved_default,
    apply_cleared_default,
    apply_limit_default,
)
from ..utils.validators import (
    CLEARED_STATUSES,
    FLAG_COLORS,
    ValidationError,
    validate_choice,
    validate_date_string,
    validate_limit,
)

logger = logging.getLogger(__name__)

UNKNOWN_ACCOUNT = "Unknown Account"
UNKNOWN_CATEGORY = "Unknown Category"


class LedgerServiceError(Exception):
    """An upstream ledger operation failed."""

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        detail = getattr(cause, "message", None) or str(cause) or type(cause).__name__
        self.message = f"{operation}: {detail}"
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert error to dict for logging, with the upstream failure nested."""
        result = {
            "error": "ledger_error",
            "operation": self.operation,
            "message": self.message,
        }
        if hasattr(self.cause, "to_dict"):
            result["cause"] = self.cause.to_dict()
        return result


# ============================================================================
# Helper Functions
# ============================================================================


def build_account_map(accounts: list[Account]) -> dict[str, Account]:
    """Index accounts by id."""
    return {account["id"]: account for account in accounts}


def build_category_map(category_groups: list[CategoryGroup]) -> dict[str, Category]:
    """Index every category of every group by id."""
    return {
        category["id"]: category
        for group in category_groups
        for category in group.get("categories", [])
    }


def filter_transactions(
    transactions: list[TransactionDetail],
    search_text: str | None = None,
    account_id: str | None = None,
    category_id: str | None = None,
) -> list[TransactionDetail]:
    """
    Apply the transaction filters in order: text, account, category.

    Text is a case-insensitive substring match on payee name or memo.
    """
    filtered = transactions

    if search_text:
        needle = search_text.lower()
        filtered = [
            tx
            for tx in filtered
            if needle in (tx.get("payee_name") or "").lower()
            or needle in (tx.get("memo") or "").lower()
        ]

    if account_id:
        filtered = [tx for tx in filtered if tx.get("account_id") == account_id]

    if category_id:
        filtered = [tx for tx in filtered if tx.get("category_id") == category_id]

    return filtered


def enrich_transaction(
    tx: TransactionDetail,
    accounts: dict[str, Account],
    categories: dict[str, Category],
) -> dict[str, Any]:
    """
    Join a transaction against the account and category lookup maps.

    Unknown ids resolve to a sentinel name instead of failing.
    """
    account_id = tx.get("account_id")
    category_id = tx.get("category_id")

    account = accounts.get(account_id)
    category = categories.get(category_id) if category_id else None

    return {
        "id": tx.get("id"),
        "date": tx.get("date"),
        "amount": milliunits_to_units(tx.get("amount", 0)),
        "amount_milliunits": tx.get("amount", 0),
        "payee_name": tx.get("payee_name"),
        "memo": tx.get("memo"),
        "cleared": tx.get("cleared"),
        "approved": tx.get("approved"),
        "flag_color": tx.get("flag_color"),
        "account": {
            "id": account_id,
            "name": account.get("name") if account else UNKNOWN_ACCOUNT,
        },
        "category": (
            {
                "id": category_id,
                "name": category.get("name") if category else UNKNOWN_CATEGORY,
            }
            if category_id
            else None
        ),
        "deleted": tx.get("deleted", False),
    }


def project_category(category: Category, include_details: bool) -> dict[str, Any]:
    """Category projection: id+name, plus amounts and flags with details."""
    projected = {"id": category.get("id"), "name": category.get("name")}

    if include_details:
        goal_target = category.get("goal_target")
        projected.update(
            {
                "budgeted": milliunits_to_units(category.get("budgeted", 0)),
                "activity": milliunits_to_units(category.get("activity", 0)),
                "balance": milliunits_to_units(category.get("balance", 0)),
                "hidden": category.get("hidden", False),
                "deleted": category.get("deleted", False),
                "goal_type": category.get("goal_type"),
                "goal_target": milliunits_to_units(goal_target) if goal_target else None,
            }
        )

    return projected


def is_visible(entity: dict, include_hidden: bool) -> bool:
    """Deleted or hidden entities are only shown when asked for."""
    if include_hidden:
        return True
    return not entity.get("deleted", False) and not entity.get("hidden", False)


# ============================================================================
# Service
# ============================================================================


class LedgerService:
    """
    Read/write operations against one YNAB budget.

    The YNAB client is synchronous (requests); calls run in worker threads
    so independent reads can proceed concurrently.
    """

    def __init__(self, client: YNABClient, max_limit: int = 100):
        self.client = client
        self.max_limit = max_limit

    async def _call(self, operation: str, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except Exception as e:
            logger.error(f"{operation}: {e}")
            raise LedgerServiceError(operation, e) from e

    async def _fetch_lookup_maps(
        self, operation: str
    ) -> tuple[dict[str, Account], dict[str, Category]]:
        """Fetch accounts and categories concurrently and index them by id."""
        accounts_result, categories_result = await asyncio.gather(
            self._call(operation, self.client.get_accounts),
            self._call(operation, self.client.get_categories),
        )
        return (
            build_account_map(accounts_result["accounts"]),
            build_category_map(categories_result["category_groups"]),
        )

    async def get_transactions(
        self,
        search_text: str | None = None,
        account_id: str | None = None,
        category_id: str | None = None,
        since_date: str | None = None,
        limit: int | None = None,
    ) -> dict[str, Any]:
        """
        List transactions, filtered and enriched with account/category names.

        Returns:
            {
                "transactions": [...],      # at most `limit` items
                "server_knowledge": int,    # passed through from YNAB
                "total_count": int,         # filtered, before truncation
                "returned_count": int,
            }
        """
        operation = "Failed to fetch transactions"
        limit = apply_limit_default(limit)
        validate_limit(limit, self.max_limit)
        if since_date:
            validate_date_string(since_date, "sinceDate")

        # The transaction list and the lookup maps are independent reads
        result, (accounts, categories) = await asyncio.gather(
            self._call(operation, self.client.get_transactions, since_date),
            self._fetch_lookup_maps(operation),
        )

        filtered = filter_transactions(
            result["transactions"],
            search_text=search_text,
            account_id=account_id,
            category_id=category_id,
        )

        enriched = [
            enrich_transaction(tx, accounts, categories) for tx in filtered[:limit]
        ]

        logger.info(
            f"Found {len(filtered)} matching transactions (returning {len(enriched)})"
        )

        return {
            "transactions": enriched,
            "server_knowledge": result["server_knowledge"],
            "total_count": len(filtered),
            "returned_count": len(enriched),
        }

    async def create_transaction(
        self,
        account_id: str,
        amount: float,
        payee_name: str | None = None,
        category_id: str | None = None,
        memo: str | None = None,
        date: str | None = None,
        cleared: str | None = None,
        approved: bool | None = None,
        flag_color: str | None = None,
    ) -> dict[str, Any]:
        """
        Create a transaction from a display-unit amount.

        Returns:
            {"transaction": {...enriched...}, "server_knowledge": int}
        """
        operation = "Failed to create transaction"

        if not sanitize_string(account_id):
            raise ValidationError(
                message="account_id is required", field="account_id", expected="id"
            )
        validate_transaction_amount(amount)
        validate_choice(cleared, CLEARED_STATUSES, "cleared")
        validate_choice(flag_color, FLAG_COLORS, "flag_color")

        transaction = {
            "account_id": account_id,
            "category_id": category_id or None,
            "payee_name": sanitize_string(payee_name),
            "amount": units_to_milliunits(amount),
            "memo": sanitize_string(memo),
            "date": format_date_for_ynab(date),
            "cleared": apply_cleared_default(cleared),
            "approved": apply_approved_default(approved),
            "flag_color": flag_color or None,
        }

        result = await self._call(
            operation, self.client.create_transaction, transaction
        )

        created = result.get("transaction")
        if not created:
            raise LedgerServiceError(
                operation,
                RuntimeError("Transaction creation failed - no transaction returned"),
            )

        logger.info(
            f"Created transaction {created.get('id')} "
            f"({transaction['amount']} milliunits)"
        )

        # TODO: report the committed transaction id when this re-fetch fails
        accounts, categories = await self._fetch_lookup_maps(operation)

        enriched = enrich_transaction(created, accounts, categories)
        enriched.pop("deleted", None)

        return {
            "transaction": enriched,
            "server_knowledge": result["server_knowledge"],
        }

    async def get_categories(
        self, include_hidden: bool = False, include_details: bool = False
    ) -> dict[str, Any]:
        """
        List category groups and their categories.

        Returns:
            {"category_groups": [...], "server_knowledge": int}
        """
        result = await self._call(
            "Failed to fetch categories", self.client.get_categories
        )

        category_groups = []
        for group in result["category_groups"]:
            if not is_visible(group, include_hidden):
                continue

            projected = {
                "id": group.get("id"),
                "name": group.get("name"),
                "categories": [
                    project_category(category, include_details)
                    for category in group.get("categories", [])
                    if is_visible(category, include_hidden)
                ],
            }

            if include_details:
                projected["hidden"] = group.get("hidden", False)
                projected["deleted"] = group.get("deleted", False)

            category_groups.append(projected)

        return {
            "category_groups": category_groups,
            "server_knowledge": result["server_knowledge"],
        }

    async def get_accounts(self, include_deleted: bool = False) -> dict[str, Any]:
        """
        List accounts with balances in display units.

        Returns:
            {"accounts": [...], "server_knowledge": int}
        """
        result = await self._call("Failed to fetch accounts", self.client.get_accounts)

        accounts = [
            {
                "id": account.get("id"),
                "name": account.get("name"),
                "type": account.get("type"),
                "balance": milliunits_to_units(account.get("balance", 0)),
                "cleared_balance": milliunits_to_units(
                    account.get("cleared_balance", 0)
                ),
                "uncleared_balance": milliunits_to_units(
                    account.get("uncleared_balance", 0)
                ),
                "note": account.get("note"),
                "closed": account.get("closed", False),
                "deleted": account.get("deleted", False),
            }
            for account in result["accounts"]
            if include_deleted or not account.get("deleted", False)
        ]

        return {"accounts": accounts, "server_knowledge": result["server_knowledge"]}

    async def get_budget_summary(self) -> dict[str, Any]:
        """Budget metadata: id, name, last modified, month range, currency format."""
        result = await self._call(
            "Failed to fetch budget summary", self.client.get_budget
        )
        budget = result["budget"]

        return {
            "budget": {
                "id": budget.get("id"),
                "name": budget.get("name"),
                "last_modified_on": budget.get("last_modified_on"),
                "first_month": budget.get("first_month"),
                "last_month": budget.get("last_month"),
                "currency_format": budget.get("currency_format"),
            },
            "server_knowledge": result["server_knowledge"],
        }

    async def get_payees(
        self, search_text: str | None = None, include_deleted: bool = False
    ) -> dict[str, Any]:
        """
        List payees, optionally filtered by case-insensitive name match.

        Returns:
            {"payees": [...], "server_knowledge": int}
        """
        result = await self._call("Failed to fetch payees", self.client.get_payees)

        payees = result["payees"]
        if not include_deleted:
            payees = [payee for payee in payees if not payee.get("deleted", False)]

        if search_text:
            needle = search_text.lower()
            payees = [p for p in payees if needle in (p.get("name") or "").lower()]

        return {
            "payees": [
                {
                    "id": payee.get("id"),
                    "name": payee.get("name"),
                    "transfer_account_id": payee.get("transfer_account_id"),
                    "deleted": payee.get("deleted", False),
                }
                for payee in payees
            ],
            "server_knowledge": result["server_knowledge"],
        }
