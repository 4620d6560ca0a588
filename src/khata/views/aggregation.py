"""
Derived views over a screen snapshot.

Everything here is a pure function of its inputs and "now": nothing is
accumulated between calls, so views can be recomputed after every snapshot
change.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel

from khata.schema.cache import ResourceKey, SyncSnapshot
from khata.schema.ledger import (
    Customer,
    Product,
    Transaction,
    TransactionType,
    parse_records,
)

OWED_CUSTOMERS_LIMIT = 5
RECENT_TRANSACTIONS_LIMIT = 10
DEFAULT_LOW_STOCK_THRESHOLD = 5
DEFAULT_BUSINESS_NAME = "Business Account"
ALL_CATEGORIES = "All"


class Period(str, Enum):
    TODAY = "today"
    MONTH = "month"


class PeriodStats(BaseModel):
    """Credit and payment totals for one period."""

    credits: float = 0.0
    payments: float = 0.0
    count: int = 0

    model_config = {"frozen": True}


class InventoryStats(BaseModel):
    total: int = 0
    total_value: float = 0.0
    low_stock: int = 0

    model_config = {"frozen": True}


def _in_period(created_at: datetime, period: Period, now: datetime) -> bool:
    if period == Period.TODAY:
        start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return start <= created_at < start + timedelta(hours=24)
    return created_at.year == now.year and created_at.month == now.month


def period_stats(
    transactions: Iterable[Transaction | dict[str, Any]],
    period: Period | str,
    now: datetime | None = None,
) -> PeriodStats:
    """
    Sum credits and payments created in the current day or month.

    Days and months are calendar periods in local time. ``count`` includes
    entries of any type; only credits and payments are summed.
    """
    period = Period(period)
    now = now or datetime.now()
    if now.tzinfo is not None:
        now = now.astimezone().replace(tzinfo=None)

    credits = 0.0
    payments = 0.0
    count = 0
    for txn in parse_records(Transaction, transactions):
        if not _in_period(txn.local_created_at, period, now):
            continue
        count += 1
        if txn.transaction_type == TransactionType.CREDIT:
            credits += txn.amount
        elif txn.transaction_type == TransactionType.PAYMENT:
            payments += txn.amount

    return PeriodStats(credits=credits, payments=payments, count=count)


def today_stats(transactions: Iterable[Any], now: datetime | None = None) -> PeriodStats:
    return period_stats(transactions, Period.TODAY, now)


def month_stats(transactions: Iterable[Any], now: datetime | None = None) -> PeriodStats:
    return period_stats(transactions, Period.MONTH, now)


def customers_who_owe(
    customers: Iterable[Customer | dict[str, Any]],
    limit: int = OWED_CUSTOMERS_LIMIT,
) -> list[Customer]:
    """Customers with a positive balance, largest first. Ties keep input order."""
    owing = [c for c in parse_records(Customer, customers) if c.balance > 0]
    # sorted() is stable, so equal balances keep their relative order
    owing = sorted(owing, key=lambda c: c.balance, reverse=True)
    return owing[:limit]


def filter_customers(
    customers: Iterable[Customer | dict[str, Any]],
    query: str | None,
) -> list[Customer]:
    """
    Search customers by name (case-insensitive) or phone number (raw substring).

    A blank query shows the customers who owe instead of everyone.
    """
    records = parse_records(Customer, customers)
    if not query or not query.strip():
        return customers_who_owe(records)

    needle = query.lower()
    return [
        c
        for c in records
        if needle in c.name.lower() or (c.phone_number is not None and query in c.phone_number)
    ]


def recent_transactions(
    transactions: Iterable[Transaction | dict[str, Any]],
    limit: int = RECENT_TRANSACTIONS_LIMIT,
) -> list[Transaction]:
    """The first ``limit`` transactions in server order (newest first)."""
    return parse_records(Transaction, transactions)[:limit]


def inventory_stats(products: Iterable[Product | dict[str, Any]]) -> InventoryStats:
    """Product count, stock value and how many products are running low."""
    records = parse_records(Product, products)
    total_value = sum(p.price * p.stock_quantity for p in records)
    low_stock = sum(
        1
        for p in records
        if p.stock_quantity <= (p.low_stock_threshold or DEFAULT_LOW_STOCK_THRESHOLD)
    )
    return InventoryStats(total=len(records), total_value=total_value, low_stock=low_stock)


def product_categories(products: Iterable[Product | dict[str, Any]]) -> list[str]:
    """``"All"`` followed by each distinct category in first-seen order."""
    categories = [ALL_CATEGORIES]
    for product in parse_records(Product, products):
        if product.category and product.category not in categories:
            categories.append(product.category)
    return categories


def filter_products(
    products: Iterable[Product | dict[str, Any]],
    query: str | None = None,
    category: str = ALL_CATEGORIES,
) -> list[Product]:
    filtered = parse_records(Product, products)
    if category and category != ALL_CATEGORIES:
        filtered = [p for p in filtered if p.category.lower() == category.lower()]
    if query and query.strip():
        needle = query.lower()
        filtered = [p for p in filtered if needle in p.name.lower()]
    return filtered


class KhataView(BaseModel):
    """Everything the khata screen derives from its snapshot."""

    business_name: str = DEFAULT_BUSINESS_NAME
    to_receive: float = 0.0
    to_give: float = 0.0
    customers_count: int = 0
    today: PeriodStats = PeriodStats()
    month: PeriodStats = PeriodStats()
    customers_who_owe: list[Customer] = []
    recent_transactions: list[Transaction] = []

    @property
    def net_balance(self) -> float:
        return self.to_receive - self.to_give

    @classmethod
    def from_snapshot(cls, snapshot: SyncSnapshot, now: datetime | None = None) -> KhataView:
        now = now or datetime.now()
        dashboard = _as_dict(snapshot.value(ResourceKey.DASHBOARD))
        transactions = _as_list(snapshot.value(ResourceKey.TRANSACTIONS))
        customers = _as_list(snapshot.value(ResourceKey.CUSTOMERS))
        profile = _as_dict(snapshot.value(ResourceKey.PROFILE))

        # Older backends return the totals at the top level
        summary = _as_dict(dashboard.get("summary")) or dashboard

        return cls(
            business_name=business_name(dashboard, profile),
            to_receive=float(summary.get("total_credit") or 0),
            to_give=float(summary.get("total_payment") or 0),
            customers_count=len(customers),
            today=today_stats(transactions, now),
            month=month_stats(transactions, now),
            customers_who_owe=customers_who_owe(customers),
            recent_transactions=recent_transactions(transactions),
        )


def business_name(dashboard: dict[str, Any] | None, profile: dict[str, Any] | None) -> str:
    """Dashboard business name, else the profile's, else a placeholder."""
    business = (dashboard or {}).get("business") or {}
    if isinstance(business, dict) and business.get("name"):
        return business["name"]
    profile = profile or {}
    return profile.get("business_name") or profile.get("name") or DEFAULT_BUSINESS_NAME


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []
