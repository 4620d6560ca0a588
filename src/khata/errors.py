"""
Error taxonomy for the khata client core.

Per-resource failures (fetch, serialization, persistence) are recovered
locally by the sync layer and surface only as records. Invariant violations
are raised to the caller before any state changes.
"""

from __future__ import annotations


class KhataError(Exception):
    """Base class for all khata errors."""


class TransientFetchFailure(KhataError):
    """A single resource's remote fetch failed."""

    def __init__(self, resource_key: str, cause: BaseException | None = None):
        self.resource_key = resource_key
        self.cause = cause
        super().__init__(f"Fetch failed for {resource_key}: {cause}")


class SerializationFailure(KhataError):
    """A cached blob could not be decoded or encoded."""

    def __init__(self, cache_key: str, cause: BaseException | None = None):
        self.cache_key = cache_key
        self.cause = cause
        super().__init__(f"Cannot (de)serialize cache entry {cache_key}: {cause}")


class CacheReadFailure(KhataError):
    """The durable store raised while reading a cached blob."""

    def __init__(self, cache_key: str, cause: BaseException | None = None):
        self.cache_key = cache_key
        self.cause = cause
        super().__init__(f"Cannot read cache entry {cache_key}: {cause}")


class PersistenceWriteFailure(KhataError):
    """Writing a fetched value back to the durable store failed."""

    def __init__(self, cache_key: str, cause: BaseException | None = None):
        self.cache_key = cache_key
        self.cause = cause
        super().__init__(f"Cannot persist {cache_key}: {cause}")


class InvariantViolation(KhataError):
    """A team mutation would break the single-owner or role/permission invariants."""


class ValidationError(KhataError):
    """Invalid user input, e.g. a malformed phone number on invite."""


class RemoteRequestError(KhataError):
    """The remote API returned an error response or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class PermissionDenied(KhataError):
    """The acting member lacks the capability required for an operation."""

    def __init__(self, member_id: str, permission: str):
        self.member_id = member_id
        self.permission = permission
        super().__init__(f"Member {member_id} lacks {permission}")
