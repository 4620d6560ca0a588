"""
In-memory dictionary store.

Ephemeral backend for tests and sessions that should not touch disk.
"""

from __future__ import annotations

from collections.abc import Mapping

from khata.storage.base import BaseKeyValueStore


class DictStore(BaseKeyValueStore):
    """Key/value store backed by a plain dict. Nothing survives the process."""

    def __init__(self, initial: Mapping[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    async def initialize(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"DictStore values must be str, got {type(value).__name__}")
        self._data[key] = value

    async def remove(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    async def keys(self) -> list[str]:
        return sorted(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data
