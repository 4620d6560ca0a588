"""
Cache entry schema - the unit of cached state for one screen resource.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel


class ResourceKey(str, Enum):
    """Independently cacheable and fetchable data slices."""

    DASHBOARD = "dashboard"
    TRANSACTIONS = "transactions"
    CUSTOMERS = "customers"
    PROFILE = "profile"
    PRODUCTS = "products"

    @property
    def cache_key(self) -> str:
        """Durable store key for this resource."""
        return CACHE_KEYS[self]


# One store key per resource. "userData" is shared with the login flow,
# which writes the profile under the same key.
CACHE_KEYS: dict[ResourceKey, str] = {
    ResourceKey.DASHBOARD: "dashboard_cache",
    ResourceKey.TRANSACTIONS: "transactions_cache",
    ResourceKey.CUSTOMERS: "customers_cache",
    ResourceKey.PROFILE: "userData",
    ResourceKey.PRODUCTS: "products_cache",
}

AUTH_TOKEN_KEY = "authToken"


class CacheSource(str, Enum):
    """Origin of the value currently held by a cache entry."""

    CACHE = "cache"
    NETWORK = "network"


class CacheEntry(BaseModel):
    """
    Last-known value of one resource.

    ``value`` is None only before any cache hit or accepted fetch. ``source``
    describes the value held now, not the history of the entry.
    """

    resource_key: ResourceKey
    value: Any = None
    source: CacheSource | None = None
    fetched_at: datetime | None = None

    model_config = {"frozen": True}

    @classmethod
    def empty(cls, resource_key: ResourceKey) -> CacheEntry:
        return cls(resource_key=resource_key)

    @classmethod
    def from_cache(cls, resource_key: ResourceKey, value: Any) -> CacheEntry:
        return cls(resource_key=resource_key, value=value, source=CacheSource.CACHE)

    @classmethod
    def from_network(cls, resource_key: ResourceKey, value: Any, fetched_at: datetime) -> CacheEntry:
        return cls(
            resource_key=resource_key,
            value=value,
            source=CacheSource.NETWORK,
            fetched_at=fetched_at,
        )

    @property
    def is_empty(self) -> bool:
        return self.source is None

    @property
    def is_fresh(self) -> bool:
        """True when the held value came from the network in this session."""
        return self.source == CacheSource.NETWORK

    def age(self, now: datetime | None = None) -> timedelta | None:
        if self.fetched_at is None:
            return None
        return (now or datetime.now()) - self.fetched_at

    def is_stale(self, max_age: timedelta, now: datetime | None = None) -> bool:
        """
        Whether this entry should be re-fetched.

        Empty and cache-sourced entries are always stale; network entries
        become stale once older than ``max_age``.
        """
        if not self.is_fresh:
            return True
        age = self.age(now)
        return age is None or age > max_age


class SyncSnapshot(Mapping[ResourceKey, CacheEntry]):
    """
    Immutable view of every resource entry a screen declares.

    Snapshots are copies: updates applied after a snapshot is taken are
    not visible through it.
    """

    def __init__(self, entries: Mapping[ResourceKey, CacheEntry]):
        self._entries = dict(entries)

    def __getitem__(self, key: ResourceKey) -> CacheEntry:
        return self._entries[ResourceKey(key)]

    def __iter__(self) -> Iterator[ResourceKey]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        parts = ", ".join(
            f"{key.value}={entry.source.value if entry.source else 'empty'}"
            for key, entry in self._entries.items()
        )
        return f"SyncSnapshot({parts})"

    def value(self, key: ResourceKey, default: Any = None) -> Any:
        """Return the held value for ``key``, or ``default`` when empty."""
        entry = self._entries.get(ResourceKey(key))
        if entry is None or entry.value is None:
            return default
        return entry.value

    def to_dict(self) -> dict[str, Any]:
        return {
            key.value: {
                "source": entry.source.value if entry.source else None,
                "fetched_at": entry.fetched_at.isoformat() if entry.fetched_at else None,
                "has_value": entry.value is not None,
            }
            for key, entry in self._entries.items()
        }
