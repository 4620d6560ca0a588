"""
Pytest configuration and shared fixtures for khata tests.
"""

import asyncio
import itertools
import tempfile
from collections.abc import AsyncGenerator, Generator
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

from khata.remote.base import RemoteResourceClient
from khata.schema.cache import ResourceKey


class FakeRemote(RemoteResourceClient):
    """
    Scriptable remote client.

    Each resource returns its payload, raises its error, or hangs forever.
    """

    def __init__(
        self,
        payloads: dict[ResourceKey, Any] | None = None,
        errors: dict[ResourceKey, Exception] | None = None,
        hang: set[ResourceKey] | None = None,
    ):
        self.payloads = dict(payloads or {})
        self.errors = dict(errors or {})
        self.hang = set(hang or ())
        self.calls: list[ResourceKey] = []

    async def _fetch(self, key: ResourceKey) -> Any:
        self.calls.append(key)
        if key in self.hang:
            await asyncio.Event().wait()
        if key in self.errors:
            raise self.errors[key]
        return self.payloads[key]

    async def get_dashboard(self):
        return await self._fetch(ResourceKey.DASHBOARD)

    async def get_transactions(self):
        return await self._fetch(ResourceKey.TRANSACTIONS)

    async def get_customers(self):
        return await self._fetch(ResourceKey.CUSTOMERS)

    async def get_profile(self):
        return await self._fetch(ResourceKey.PROFILE)

    async def get_products(self):
        return await self._fetch(ResourceKey.PRODUCTS)


class ControlledRemote(FakeRemote):
    """Remote whose calls resolve only when the test completes their futures."""

    def __init__(self):
        super().__init__()
        self.pending: dict[ResourceKey, list[asyncio.Future]] = {}

    async def _fetch(self, key: ResourceKey) -> Any:
        self.calls.append(key)
        future = asyncio.get_running_loop().create_future()
        self.pending.setdefault(key, []).append(future)
        return await future


def make_clock(start: datetime = datetime(2024, 5, 15, 12, 0)):
    """A clock that advances one second per reading."""
    counter = itertools.count()
    return lambda: start + timedelta(seconds=next(counter))


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def dict_store():
    """Create a DictStore instance for testing."""
    from khata.storage import DictStore

    return DictStore()


@pytest.fixture
async def sqlite_store(temp_dir: Path) -> AsyncGenerator:
    """Create a SQLiteStore instance for testing."""
    from khata.storage import SQLiteStore

    store = SQLiteStore(temp_dir / "cache.sqlite")
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def clock():
    return make_clock()


@pytest.fixture
def sample_dashboard():
    return {
        "summary": {"total_credit": 5000, "total_payment": 1200},
        "business": {"name": "Sharma General Store"},
    }


@pytest.fixture
def sample_transactions():
    return [
        {"id": "t1", "transaction_type": "credit", "amount": 100, "created_at": "2024-05-15T10:00:00"},
        {"id": "t2", "transaction_type": "payment", "amount": 40, "created_at": "2024-05-15T11:00:00"},
        {"id": "t3", "transaction_type": "credit", "amount": 9999, "created_at": "2024-05-14T09:00:00"},
    ]


@pytest.fixture
def sample_customers():
    return [
        {"id": "c1", "name": "Asha", "phone_number": "9876500001", "balance": 50},
        {"id": "c2", "name": "Bharat", "phone_number": "9876500002", "balance": 200},
        {"id": "c3", "name": "Chitra", "phone_number": "9876500003", "balance": 0},
        {"id": "c4", "name": "Deepak", "phone_number": "9876500004", "balance": 200},
    ]


@pytest.fixture
def sample_profile():
    return {"name": "Ravi Sharma", "business_name": "Sharma Store", "phone_number": "9876543210"}


@pytest.fixture
def sample_products():
    return [
        {"id": "p1", "name": "Basmati Rice", "category": "Grocery", "price": 80, "stock_quantity": 50},
        {"id": "p2", "name": "Toor Dal", "category": "Grocery", "price": 120, "stock_quantity": 4},
        {"id": "p3", "name": "Bath Soap", "category": "Personal Care", "price": 35, "stock_quantity": 12, "low_stock_threshold": 15},
    ]


@pytest.fixture
def khata_payloads(sample_dashboard, sample_transactions, sample_customers, sample_profile):
    return {
        ResourceKey.DASHBOARD: sample_dashboard,
        ResourceKey.TRANSACTIONS: sample_transactions,
        ResourceKey.CUSTOMERS: sample_customers,
        ResourceKey.PROFILE: sample_profile,
    }


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
