"""
Remote resource contract.

One independent asynchronous call per logical resource. No batching is
assumed: each call may be a separate round trip.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from khata.schema.cache import ResourceKey


class RemoteResourceClient(ABC):
    """Fetches resource-shaped payloads from the business backend."""

    @abstractmethod
    async def get_dashboard(self) -> dict[str, Any]:
        """Dashboard summary (totals, business info)."""
        pass

    @abstractmethod
    async def get_transactions(self) -> list[dict[str, Any]]:
        """Recent transactions, newest first."""
        pass

    @abstractmethod
    async def get_customers(self) -> list[dict[str, Any]]:
        """All customers with their balances."""
        pass

    @abstractmethod
    async def get_profile(self) -> dict[str, Any]:
        """Signed-in user and business profile."""
        pass

    @abstractmethod
    async def get_products(self) -> list[dict[str, Any]]:
        """Inventory products."""
        pass

    def fetcher_for(self, resource_key: ResourceKey) -> Callable[[], Awaitable[Any]]:
        """Return the fetch coroutine function for ``resource_key``."""
        fetchers: dict[ResourceKey, Callable[[], Awaitable[Any]]] = {
            ResourceKey.DASHBOARD: self.get_dashboard,
            ResourceKey.TRANSACTIONS: self.get_transactions,
            ResourceKey.CUSTOMERS: self.get_customers,
            ResourceKey.PROFILE: self.get_profile,
            ResourceKey.PRODUCTS: self.get_products,
        }
        return fetchers[ResourceKey(resource_key)]
