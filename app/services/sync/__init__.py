# app/services/sync/__init__.py
"""
Offline-first sync engine for POS devices.

Push batches, incremental pulls, explicit conflict resolution and diagnostics,
all driven by a SchemaRegistry of syncable entities.
"""

from app.services.sync.batch_processor import BatchSyncProcessor
from app.services.sync.change_puller import ChangePuller
from app.services.sync.conflict_resolver import ConflictResolver
from app.services.sync.diagnostics import SyncDiagnostics
from app.services.sync.errors import (
    SyncError,
    BatchTooLargeError,
    UnsyncableEntityError,
    FieldTranslationError,
    TenantMismatchError,
    RecordNotFoundError,
    InvalidResolutionError,
)
from app.services.sync.registry import SchemaRegistry, SyncEntity, build_default_registry
from app.services.sync.translator import FieldTranslator, RegistryFieldTranslator

__all__ = [
    "BatchSyncProcessor",
    "ChangePuller",
    "ConflictResolver",
    "SyncDiagnostics",
    "SyncError",
    "BatchTooLargeError",
    "UnsyncableEntityError",
    "FieldTranslationError",
    "TenantMismatchError",
    "RecordNotFoundError",
    "InvalidResolutionError",
    "SchemaRegistry",
    "SyncEntity",
    "build_default_registry",
    "FieldTranslator",
    "RegistryFieldTranslator",
]
