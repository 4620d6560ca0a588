"""
Cache-first synchronization for screen data.

Each screen owns a SyncCoordinator that publishes cached data at once and
reconciles it with independent remote fetches.
"""

from khata.sync.coordinator import (
    FailureKind,
    ResourceOutcome,
    SyncCoordinator,
    SyncFailure,
    SyncReport,
    SyncState,
    SyncStatus,
)
from khata.sync.screens import INVENTORY_SCREEN, KHATA_SCREEN, PROFILE_SCREEN, SCREENS, ScreenDefinition

__all__ = [
    # Coordinator
    "SyncCoordinator",
    "SyncReport",
    "SyncStatus",
    "SyncState",
    "SyncFailure",
    "FailureKind",
    "ResourceOutcome",
    # Screens
    "ScreenDefinition",
    "KHATA_SCREEN",
    "INVENTORY_SCREEN",
    "PROFILE_SCREEN",
    "SCREENS",
]
