"""Pure views derived from sync snapshots."""

from khata.views.aggregation import (
    InventoryStats,
    KhataView,
    Period,
    PeriodStats,
    business_name,
    customers_who_owe,
    filter_customers,
    filter_products,
    inventory_stats,
    month_stats,
    period_stats,
    product_categories,
    recent_transactions,
    today_stats,
)

__all__ = [
    "Period",
    "PeriodStats",
    "InventoryStats",
    "KhataView",
    "period_stats",
    "today_stats",
    "month_stats",
    "customers_who_owe",
    "filter_customers",
    "recent_transactions",
    "inventory_stats",
    "product_categories",
    "filter_products",
    "business_name",
]
