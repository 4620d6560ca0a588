"""
Khata client core

Cache-first data sync and team permissions for the Khata business app.

The package provides:
- A per-screen sync coordinator that shows cached data at once and
  reconciles it with independent remote fetches
- Durable key/value stores for the cache (SQLite, in-memory)
- The role-based permission model and team roster
- Pure views (period stats, customers who owe, search) over a snapshot

Quick Start:
    from khata import KHATA_SCREEN, KhataAPIClient, KhataView, SQLiteStore, SyncCoordinator

    store = SQLiteStore("~/.khata/cache.sqlite")
    await store.initialize()

    async with KhataAPIClient(store) as remote:
        coordinator = SyncCoordinator.for_screen(KHATA_SCREEN, store, remote)

        # Cached data, available before any network round trip
        view = KhataView.from_snapshot(await coordinator.load())

        # Wait for the fresh data
        report = await coordinator.refresh()
"""

__version__ = "0.1.0"

# Errors
from khata.errors import (
    CacheReadFailure,
    InvariantViolation,
    KhataError,
    PermissionDenied,
    PersistenceWriteFailure,
    RemoteRequestError,
    SerializationFailure,
    TransientFetchFailure,
    ValidationError,
)

# Permissions
from khata.permissions import (
    TeamRoster,
    apply_removal,
    apply_role_change,
    can_change_role,
    can_remove,
    permissions_for,
    validate_roster,
)

# Remote
from khata.remote import KhataAPIClient, RemoteResourceClient

# Schema
from khata.schema import (
    BusinessMember,
    CacheEntry,
    CacheSource,
    PermissionSet,
    ResourceKey,
    Role,
    SyncSnapshot,
)

# Storage
from khata.storage import BaseKeyValueStore, DictStore, SQLiteStore

# Sync
from khata.sync import (
    INVENTORY_SCREEN,
    KHATA_SCREEN,
    PROFILE_SCREEN,
    ScreenDefinition,
    SyncCoordinator,
    SyncReport,
)

# Views
from khata.views import KhataView, customers_who_owe, filter_customers, period_stats

__all__ = [
    # Version
    "__version__",
    # Errors
    "KhataError",
    "TransientFetchFailure",
    "SerializationFailure",
    "CacheReadFailure",
    "PersistenceWriteFailure",
    "InvariantViolation",
    "PermissionDenied",
    "ValidationError",
    "RemoteRequestError",
    # Schema
    "CacheEntry",
    "CacheSource",
    "ResourceKey",
    "SyncSnapshot",
    "BusinessMember",
    "PermissionSet",
    "Role",
    # Storage
    "BaseKeyValueStore",
    "DictStore",
    "SQLiteStore",
    # Remote
    "RemoteResourceClient",
    "KhataAPIClient",
    # Sync
    "SyncCoordinator",
    "SyncReport",
    "ScreenDefinition",
    "KHATA_SCREEN",
    "INVENTORY_SCREEN",
    "PROFILE_SCREEN",
    # Permissions
    "TeamRoster",
    "permissions_for",
    "can_change_role",
    "can_remove",
    "apply_role_change",
    "apply_removal",
    "validate_roster",
    # Views
    "KhataView",
    "period_stats",
    "customers_who_owe",
    "filter_customers",
]
