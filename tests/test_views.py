"""Tests for the aggregation views."""

import random
from datetime import datetime, timezone

from khata.schema.cache import CacheEntry, ResourceKey, SyncSnapshot
from khata.views import (
    KhataView,
    Period,
    customers_who_owe,
    filter_customers,
    filter_products,
    inventory_stats,
    month_stats,
    period_stats,
    product_categories,
    today_stats,
)

NOW = datetime(2024, 5, 15, 18, 30)


class TestPeriodStats:
    """Tests for today/month transaction totals."""

    def test_today_stats(self, sample_transactions):
        """Test only today's entries are counted."""
        stats = today_stats(sample_transactions, now=NOW)

        assert stats.credits == 100
        assert stats.payments == 40
        assert stats.count == 2

    def test_month_stats(self, sample_transactions):
        """Test the whole calendar month is counted."""
        stats = month_stats(sample_transactions, now=NOW)

        assert stats.credits == 100 + 9999
        assert stats.payments == 40
        assert stats.count == 3

    def test_day_boundaries(self):
        """Test midnight belongs to the new day."""
        txns = [
            {"transaction_type": "credit", "amount": 1, "created_at": "2024-05-15T00:00:00"},
            {"transaction_type": "credit", "amount": 2, "created_at": "2024-05-14T23:59:59"},
            {"transaction_type": "credit", "amount": 4, "created_at": "2024-05-16T00:00:00"},
        ]
        assert today_stats(txns, now=NOW).credits == 1

    def test_month_excludes_other_years(self):
        """Test the same month of another year is excluded."""
        txns = [{"transaction_type": "payment", "amount": 10, "created_at": "2023-05-15T10:00:00"}]
        assert month_stats(txns, now=NOW).count == 0

    def test_order_independent(self, sample_transactions):
        """Test shuffling the input does not change the result."""
        shuffled = list(sample_transactions)
        random.Random(7).shuffle(shuffled)

        assert period_stats(shuffled, Period.MONTH, NOW) == period_stats(sample_transactions, "month", NOW)

    def test_idempotent(self, sample_transactions):
        """Test repeated computation gives the same answer."""
        assert today_stats(sample_transactions, NOW) == today_stats(sample_transactions, NOW)

    def test_alternate_field_names(self):
        """Test ``$createdAt`` and ``type`` payload fields are understood."""
        txns = [{"type": "credit", "amount": 25, "$createdAt": "2024-05-15T09:00:00"}]
        assert today_stats(txns, now=NOW).credits == 25

    def test_aware_timestamps_are_localized(self):
        """Test UTC timestamps are compared in local time."""
        local_noon = datetime(2024, 5, 15, 12, 0).astimezone()
        utc = local_noon.astimezone(timezone.utc).isoformat()
        txns = [{"transaction_type": "payment", "amount": 5, "created_at": utc}]

        assert today_stats(txns, now=NOW).payments == 5

    def test_aware_now(self, sample_transactions):
        """Test a timezone-aware "now" is compared in local time."""
        local_now = datetime(2024, 5, 15, 18, 30).astimezone()

        assert today_stats(sample_transactions, now=local_now) == today_stats(sample_transactions, now=NOW)
        assert month_stats(sample_transactions, now=local_now.astimezone(timezone.utc)).count == 3

    def test_other_types_counted_not_summed(self):
        """Test entries that are neither credit nor payment still count."""
        txns = [
            {"transaction_type": "credit", "amount": 100, "created_at": "2024-05-15T09:00:00"},
            {"transaction_type": "adjustment", "amount": 30, "created_at": "2024-05-15T10:00:00"},
        ]
        stats = today_stats(txns, now=NOW)

        assert stats.count == 2
        assert stats.credits == 100
        assert stats.payments == 0

    def test_malformed_records_skipped(self):
        """Test records without a type or date are ignored."""
        txns = [
            {"amount": 10, "created_at": "2024-05-15T09:00:00"},
            {"transaction_type": "credit", "amount": 10},
            {"transaction_type": "credit", "amount": None, "created_at": "2024-05-15T09:00:00"},
        ]
        stats = today_stats(txns, now=NOW)

        assert stats.count == 1
        assert stats.credits == 0

    def test_empty(self):
        """Test no transactions gives zeros."""
        stats = today_stats([], now=NOW)
        assert (stats.credits, stats.payments, stats.count) == (0, 0, 0)


class TestCustomersWhoOwe:
    """Tests for the owed customers list."""

    def test_ordering_and_ties(self, sample_customers):
        """Test descending balance with stable ties and zero balances excluded."""
        owed = customers_who_owe(sample_customers)

        assert [c.name for c in owed] == ["Bharat", "Deepak", "Asha"]

    def test_limit(self):
        """Test only the top five are returned."""
        customers = [{"name": f"C{i}", "balance": i} for i in range(1, 9)]

        owed = customers_who_owe(customers)

        assert [c.balance for c in owed] == [8, 7, 6, 5, 4]

    def test_negative_balances_excluded(self):
        """Test customers we owe are not listed."""
        owed = customers_who_owe([{"name": "A", "balance": -100}, {"name": "B", "balance": None}])
        assert owed == []


class TestFilterCustomers:
    """Tests for customer search."""

    def test_blank_query_shows_owed(self, sample_customers):
        """Test an empty query falls back to customers who owe."""
        assert [c.name for c in filter_customers(sample_customers, "   ")] == ["Bharat", "Deepak", "Asha"]
        assert [c.name for c in filter_customers(sample_customers, None)] == ["Bharat", "Deepak", "Asha"]

    def test_name_match_is_case_insensitive(self, sample_customers):
        """Test names match regardless of case."""
        assert [c.name for c in filter_customers(sample_customers, "CHIT")] == ["Chitra"]

    def test_phone_match(self, sample_customers):
        """Test phone numbers match as raw substrings."""
        assert [c.name for c in filter_customers(sample_customers, "500004")] == ["Deepak"]

    def test_includes_zero_balance(self, sample_customers):
        """Test search covers every customer, not just those who owe."""
        assert len(filter_customers(sample_customers, "98765")) == 4


class TestInventoryViews:
    """Tests for product views."""

    def test_inventory_stats(self, sample_products):
        """Test totals, stock value and low stock count."""
        stats = inventory_stats(sample_products)

        assert stats.total == 3
        assert stats.total_value == 80 * 50 + 120 * 4 + 35 * 12
        assert stats.low_stock == 2

    def test_categories(self, sample_products):
        """Test the category list keeps first-seen order."""
        assert product_categories(sample_products) == ["All", "Grocery", "Personal Care"]

    def test_filter_products(self, sample_products):
        """Test category and name filters combine."""
        assert [p.name for p in filter_products(sample_products, category="grocery")] == [
            "Basmati Rice",
            "Toor Dal",
        ]
        assert [p.name for p in filter_products(sample_products, query="dal")] == ["Toor Dal"]
        assert filter_products(sample_products, query="soap", category="Grocery") == []


class TestKhataView:
    """Tests for the khata screen view."""

    def _snapshot(self, values):
        return SyncSnapshot({key: CacheEntry.from_cache(key, value) for key, value in values.items()})

    def test_from_snapshot(self, khata_payloads):
        """Test all derived values."""
        view = KhataView.from_snapshot(self._snapshot(khata_payloads), now=NOW)

        assert view.business_name == "Sharma General Store"
        assert view.to_receive == 5000
        assert view.to_give == 1200
        assert view.net_balance == 3800
        assert view.customers_count == 4
        assert view.today.count == 2
        assert [c.name for c in view.customers_who_owe] == ["Bharat", "Deepak", "Asha"]
        assert len(view.recent_transactions) == 3

    def test_empty_snapshot(self):
        """Test an unloaded screen renders placeholders."""
        snapshot = SyncSnapshot({key: CacheEntry.empty(key) for key in ResourceKey})

        view = KhataView.from_snapshot(snapshot, now=NOW)

        assert view.business_name == "Business Account"
        assert view.net_balance == 0
        assert view.customers_who_owe == []

    def test_flat_summary_and_profile_name(self, sample_profile):
        """Test totals at the top level and a name from the profile."""
        snapshot = self._snapshot(
            {
                ResourceKey.DASHBOARD: {"total_credit": 300, "total_payment": 100},
                ResourceKey.PROFILE: sample_profile,
            }
        )

        view = KhataView.from_snapshot(snapshot, now=NOW)

        assert view.to_receive == 300
        assert view.business_name == "Sharma Store"
