# app/services/sync/errors.py
"""
Exceptions raised by the sync engine.

Per-record problems (unsyncable entity, untranslatable field, tenant mismatch)
are caught by the batch processor and reported in the response. Request-level
problems propagate to the router, which maps them to HTTP status codes.
"""


class SyncError(Exception):
    """Base class for sync engine errors."""


class BatchTooLargeError(SyncError):
    """Raised when a push batch exceeds the configured size ceiling."""

    def __init__(self, size: int, max_size: int):
        self.size = size
        self.max_size = max_size
        super().__init__(f"Batch size {size} exceeds maximum of {max_size} records")


class UnsyncableEntityError(SyncError):
    """Raised when an entity name is not in the sync allow-list."""

    def __init__(self, entity_name: str, canonical_name: str = None):
        self.entity_name = entity_name
        self.canonical_name = canonical_name or entity_name
        if self.canonical_name != entity_name:
            message = f"Entity {entity_name} ({self.canonical_name}) is not syncable"
        else:
            message = f"Entity {entity_name} is not syncable"
        super().__init__(message)


class FieldTranslationError(SyncError):
    """Raised when a device field cannot be converted to its column type."""


class TenantMismatchError(SyncError):
    """Raised when a record id is already owned by another tenant."""


class RecordNotFoundError(SyncError):
    """Raised when a record does not exist within the tenant."""


class InvalidResolutionError(SyncError):
    """Raised when a conflict resolution request is incomplete."""
