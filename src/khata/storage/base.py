"""
Base interface for durable key/value stores.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseKeyValueStore(ABC):
    """
    Abstract durable key -> serialized blob store.

    Values are opaque strings; callers serialize and deserialize. Every
    operation is asynchronous and may raise.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the backend (open files, create tables)."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release backend resources."""
        pass

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the blob stored under ``key``, or None when absent."""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous blob."""
        pass

    @abstractmethod
    async def remove(self, key: str) -> bool:
        """Delete ``key``. Returns True if it existed."""
        pass

    @abstractmethod
    async def keys(self) -> list[str]:
        """List stored keys."""
        pass

    async def get_many(self, keys: list[str]) -> dict[str, str | None]:
        """Fetch several keys. Default implementation calls get() in a loop."""
        return {key: await self.get(key) for key in keys}

    async def remove_many(self, keys: list[str]) -> int:
        """Delete several keys. Returns the count that existed."""
        count = 0
        for key in keys:
            if await self.remove(key):
                count += 1
        return count
