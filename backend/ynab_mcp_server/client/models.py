"""
YNAB API entity shapes.

Typed views of the JSON returned by https://api.ynab.com/v1. Amounts are
integer milliunits. Only the fields this server reads are listed.
"""

from typing import Any, TypedDict


class TransactionDetail(TypedDict, total=False):
    id: str
    date: str
    amount: int
    memo: str | None
    cleared: str
    approved: bool
    flag_color: str | None
    account_id: str
    payee_id: str | None
    payee_name: str | None
    category_id: str | None
    category_name: str | None
    transfer_account_id: str | None
    deleted: bool


class Account(TypedDict, total=False):
    id: str
    name: str
    type: str
    on_budget: bool
    closed: bool
    note: str | None
    balance: int
    cleared_balance: int
    uncleared_balance: int
    deleted: bool


class Category(TypedDict, total=False):
    id: str
    category_group_id: str
    name: str
    hidden: bool
    budgeted: int
    activity: int
    balance: int
    goal_type: str | None
    goal_target: int | None
    deleted: bool


class CategoryGroup(TypedDict, total=False):
    id: str
    name: str
    hidden: bool
    deleted: bool
    categories: list[Category]


class Payee(TypedDict, total=False):
    id: str
    name: str
    transfer_account_id: str | None
    deleted: bool


class BudgetDetail(TypedDict, total=False):
    id: str
    name: str
    last_modified_on: str
    first_month: str
    last_month: str
    currency_format: dict[str, Any]


class SaveTransaction(TypedDict, total=False):
    account_id: str
    date: str
    amount: int
    payee_name: str | None
    category_id: str | None
    memo: str | None
    cleared: str
    approved: bool
    flag_color: str | None
