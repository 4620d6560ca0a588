"""Khata schema definitions."""

from khata.schema.cache import (
    AUTH_TOKEN_KEY,
    CACHE_KEYS,
    CacheEntry,
    CacheSource,
    ResourceKey,
    SyncSnapshot,
)
from khata.schema.ledger import Customer, Product, Transaction, TransactionType, parse_records
from khata.schema.member import ROLE_INFO, BusinessMember, PermissionSet, Role, RoleInfo

__all__ = [
    # Cache
    "AUTH_TOKEN_KEY",
    "CACHE_KEYS",
    "CacheEntry",
    "CacheSource",
    "ResourceKey",
    "SyncSnapshot",
    # Ledger
    "Customer",
    "Product",
    "Transaction",
    "TransactionType",
    "parse_records",
    # Team
    "BusinessMember",
    "PermissionSet",
    "Role",
    "RoleInfo",
    "ROLE_INFO",
]
