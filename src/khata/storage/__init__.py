"""Durable key/value stores for cached screen data."""

from khata.storage.base import BaseKeyValueStore
from khata.storage.dict_store import DictStore
from khata.storage.sqlite_store import SQLiteStore

__all__ = [
    "BaseKeyValueStore",
    "DictStore",
    "SQLiteStore",
]
