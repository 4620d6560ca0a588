"""
Cache-first sync coordinator for one screen.

Implements the load protocol every data-bearing screen follows:
- Read every resource's persisted blob and publish it immediately
- Fire one independent remote fetch per resource
- Apply and persist each fetch as it resolves, ignoring failed siblings
"""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from khata.errors import (
    CacheReadFailure,
    KhataError,
    PersistenceWriteFailure,
    SerializationFailure,
    TransientFetchFailure,
)
from khata.remote.base import RemoteResourceClient
from khata.schema.cache import CacheEntry, CacheSource, ResourceKey, SyncSnapshot
from khata.storage.base import BaseKeyValueStore
from khata.sync.screens import ScreenDefinition

logger = logging.getLogger(__name__)

Listener = Callable[[SyncSnapshot, ResourceKey | None], None]

_MISSING = object()


class SyncState(Enum):
    """State of a coordinator."""

    IDLE = "idle"
    LOADING_CACHE = "loading_cache"
    SYNCING = "syncing"
    CLOSED = "closed"


class FailureKind(Enum):
    """Where in the protocol a per-resource failure happened."""

    FETCH = "fetch"
    CACHE_READ = "cache_read"
    SERIALIZATION = "serialization"
    PERSISTENCE = "persistence"


class ResourceOutcome(Enum):
    """How one resource's fetch settled."""

    UPDATED = "updated"  # Applied to the snapshot
    FAILED = "failed"  # Remote call raised, entry left untouched
    SUPERSEDED = "superseded"  # A later-issued fetch already won
    ABANDONED = "abandoned"  # Coordinator closed before it resolved


@dataclass
class SyncFailure:
    """A recovered per-resource failure, kept for observability."""

    resource_key: ResourceKey
    kind: FailureKind
    error: KhataError
    occurred_at: datetime = field(default_factory=datetime.now)

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass
class SyncReport:
    """Per-resource result of one refresh, returned once every fetch settled."""

    snapshot: SyncSnapshot
    outcomes: dict[ResourceKey, ResourceOutcome] = field(default_factory=dict)
    failures: list[SyncFailure] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: datetime | None = None

    @property
    def updated(self) -> list[ResourceKey]:
        return [k for k, o in self.outcomes.items() if o == ResourceOutcome.UPDATED]

    @property
    def failed(self) -> list[ResourceKey]:
        return [k for k, o in self.outcomes.items() if o == ResourceOutcome.FAILED]

    @property
    def all_updated(self) -> bool:
        return bool(self.outcomes) and all(
            o == ResourceOutcome.UPDATED for o in self.outcomes.values()
        )


@dataclass
class SyncStatus:
    """Current coordinator status."""

    state: SyncState = SyncState.IDLE
    last_sync: datetime | None = None
    in_flight: int = 0
    recent_failures: deque[SyncFailure] = field(default_factory=lambda: deque(maxlen=50))


@dataclass
class _LoadRound:
    started_at: datetime
    tasks: dict[ResourceKey, asyncio.Task[ResourceOutcome]] = field(default_factory=dict)
    failures: list[SyncFailure] = field(default_factory=list)


class SyncCoordinator:
    """
    Owns the cached/fresh view of a screen's resources.

    Per-resource failures never escape ``load`` or ``refresh``: fetch
    failures keep the last known value, unreadable cache blobs count as
    misses, and failed write-backs are only logged. Within one resource the
    fetch issued last wins, whatever order fetches resolve in.
    """

    def __init__(
        self,
        store: BaseKeyValueStore,
        remote: RemoteResourceClient,
        resource_keys: Iterable[ResourceKey] = (),
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.remote = remote
        self._clock = clock

        self._entries: dict[ResourceKey, CacheEntry] = {}
        for key in resource_keys:
            self._declare(ResourceKey(key))

        # (fetched_at, issue sequence) of the value each entry holds
        self._versions: dict[ResourceKey, tuple[datetime, int]] = {}
        self._sequence = itertools.count()

        self._tasks: set[asyncio.Task[ResourceOutcome]] = set()
        self._listeners: list[Listener] = []
        self._closed = False

        self.status = SyncStatus()

    @classmethod
    def for_screen(
        cls,
        screen: ScreenDefinition,
        store: BaseKeyValueStore,
        remote: RemoteResourceClient,
        clock: Callable[[], datetime] = datetime.now,
    ) -> SyncCoordinator:
        """Create a coordinator declaring every resource the screen shows."""
        return cls(store, remote, resource_keys=screen.resource_keys, clock=clock)

    @property
    def resource_keys(self) -> list[ResourceKey]:
        return list(self._entries)

    @property
    def closed(self) -> bool:
        return self._closed

    def snapshot(self) -> SyncSnapshot:
        """Return a copy of the current entries."""
        return SyncSnapshot(self._entries)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback run after every snapshot change.

        The callback receives the new snapshot and the resource that changed
        (None after the cache phase). Returns a function that unsubscribes.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Load protocol
    async def load(self, resource_keys: Iterable[ResourceKey] | None = None) -> SyncSnapshot:
        """
        Populate from cache, then start background fetches.

        Returns as soon as the cache phase finishes; it never waits on the
        network. Use ``refresh`` to wait for the fetches.
        """
        snapshot, _ = await self._start(resource_keys)
        return snapshot

    async def refresh(self, resource_keys: Iterable[ResourceKey] | None = None) -> SyncReport:
        """Run ``load`` and wait until every fetch it issued has settled."""
        started_at = self._clock()
        _, load_round = await self._start(resource_keys)

        keys = list(load_round.tasks)
        results = await asyncio.gather(*load_round.tasks.values(), return_exceptions=True)

        outcomes: dict[ResourceKey, ResourceOutcome] = {}
        for key, result in zip(keys, results):
            if isinstance(result, ResourceOutcome):
                outcomes[key] = result
            else:
                outcomes[key] = ResourceOutcome.ABANDONED

        return SyncReport(
            snapshot=self.snapshot(),
            outcomes=outcomes,
            failures=list(load_round.failures),
            started_at=started_at,
            finished_at=self._clock(),
        )

    async def refresh_if_stale(
        self,
        max_age: timedelta,
        resource_keys: Iterable[ResourceKey] | None = None,
    ) -> SyncReport:
        """Refresh only resources that are empty, cache-backed, or older than ``max_age``."""
        now = self._clock()
        keys = self._resolve_keys(resource_keys)
        stale = [k for k in keys if self._entries[k].is_stale(max_age, now=now)]
        if not stale:
            return SyncReport(snapshot=self.snapshot(), started_at=now, finished_at=now)
        return await self.refresh(stale)

    async def settle(self) -> None:
        """Wait for every in-flight fetch, including ones from earlier loads."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """
        Stop applying updates.

        In-flight fetches are cancelled; anything that still resolves is
        neither applied nor persisted.
        """
        if self._closed:
            return
        self._closed = True
        self.status.state = SyncState.CLOSED
        self._listeners.clear()

        pending = list(self._tasks)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def get_status(self) -> dict[str, Any]:
        """Get current sync status."""
        return {
            "state": self.status.state.value,
            "last_sync": self.status.last_sync.isoformat() if self.status.last_sync else None,
            "in_flight": self.status.in_flight,
            "recent_failures": [
                {
                    "resource": f.resource_key.value,
                    "kind": f.kind.value,
                    "message": f.message,
                    "occurred_at": f.occurred_at.isoformat(),
                }
                for f in self.status.recent_failures
            ],
            "resources": self.snapshot().to_dict(),
        }

    # Internals
    def _declare(self, key: ResourceKey) -> None:
        if key not in self._entries:
            self._entries[key] = CacheEntry.empty(key)

    def _resolve_keys(self, resource_keys: Iterable[ResourceKey] | None) -> list[ResourceKey]:
        if resource_keys is None:
            return list(self._entries)
        keys = []
        for key in resource_keys:
            key = ResourceKey(key)
            self._declare(key)
            if key not in keys:
                keys.append(key)
        return keys

    async def _start(
        self, resource_keys: Iterable[ResourceKey] | None
    ) -> tuple[SyncSnapshot, _LoadRound]:
        keys = self._resolve_keys(resource_keys)
        load_round = _LoadRound(started_at=self._clock())

        if self._closed:
            logger.debug("load() on a closed coordinator, returning current snapshot")
            return self.snapshot(), load_round

        self.status.state = SyncState.LOADING_CACHE
        await self._load_cached(keys, load_round)
        if self._closed:
            return self.snapshot(), load_round
        self._notify(None)

        self.status.state = SyncState.SYNCING
        for key in keys:
            # Stamped at issue time so a later request always carries the newer version
            version = (self._clock(), next(self._sequence))
            task = asyncio.create_task(self._fetch(key, version, load_round))
            load_round.tasks[key] = task
            self._tasks.add(task)
            task.add_done_callback(self._task_done)
        self.status.in_flight = len(self._tasks)

        return self.snapshot(), load_round

    def _task_done(self, task: asyncio.Task[ResourceOutcome]) -> None:
        self._tasks.discard(task)
        self.status.in_flight = len(self._tasks)
        if not self._tasks and not self._closed:
            self.status.state = SyncState.IDLE

    async def _load_cached(self, keys: list[ResourceKey], load_round: _LoadRound) -> None:
        values = await asyncio.gather(*(self._read_cached(k, load_round) for k in keys))
        for key, value in zip(keys, values):
            if value is _MISSING:
                continue
            # Never let a cache read replace a value that came from the network
            if self._entries[key].source == CacheSource.NETWORK:
                continue
            self._entries[key] = CacheEntry.from_cache(key, value)

    async def _read_cached(self, key: ResourceKey, load_round: _LoadRound) -> Any:
        cache_key = key.cache_key
        try:
            blob = await self.store.get(cache_key)
        except Exception as e:
            logger.warning("Reading %s from store failed, treating as miss: %s", cache_key, e)
            self._record(
                load_round,
                SyncFailure(key, FailureKind.CACHE_READ, CacheReadFailure(cache_key, e)),
            )
            return _MISSING

        if blob is None:
            return _MISSING

        try:
            value = json.loads(blob)
        except (TypeError, ValueError) as e:
            logger.info("Discarding corrupt cache blob %s: %s", cache_key, e)
            self._record(
                load_round,
                SyncFailure(key, FailureKind.SERIALIZATION, SerializationFailure(cache_key, e)),
            )
            return _MISSING

        return _MISSING if value is None else value

    async def _fetch(
        self,
        key: ResourceKey,
        version: tuple[datetime, int],
        load_round: _LoadRound,
    ) -> ResourceOutcome:
        fetch = self.remote.fetcher_for(key)
        try:
            payload = await fetch()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            failure = TransientFetchFailure(key.value, e)
            logger.warning("%s", failure)
            self._record(load_round, SyncFailure(key, FailureKind.FETCH, failure))
            return ResourceOutcome.FAILED

        if self._closed:
            return ResourceOutcome.ABANDONED

        current = self._versions.get(key)
        if current is not None and current > version:
            logger.debug("Dropping superseded %s fetch issued at %s", key.value, version[0])
            return ResourceOutcome.SUPERSEDED

        fetched_at = version[0]
        self._versions[key] = version
        self._entries[key] = CacheEntry.from_network(key, payload, fetched_at)
        self.status.last_sync = self._clock()
        self._notify(key)

        await self._persist(key, payload, load_round)
        return ResourceOutcome.UPDATED

    async def _persist(self, key: ResourceKey, payload: Any, load_round: _LoadRound) -> None:
        cache_key = key.cache_key
        try:
            blob = json.dumps(payload)
        except (TypeError, ValueError) as e:
            logger.warning("Cannot serialize %s for the cache: %s", cache_key, e)
            self._record(
                load_round,
                SyncFailure(key, FailureKind.SERIALIZATION, SerializationFailure(cache_key, e)),
            )
            return

        try:
            await self.store.set(cache_key, blob)
        except Exception as e:
            failure = PersistenceWriteFailure(cache_key, e)
            logger.warning("%s", failure)
            self._record(load_round, SyncFailure(key, FailureKind.PERSISTENCE, failure))

    def _record(self, load_round: _LoadRound, failure: SyncFailure) -> None:
        load_round.failures.append(failure)
        self.status.recent_failures.append(failure)

    def _notify(self, key: ResourceKey | None) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot, key)
            except Exception:
                logger.exception("Snapshot listener failed")
