# app/services/__init__.py
"""
Shared services layer.
"""

from app.services.sync import (
    BatchSyncProcessor,
    ChangePuller,
    ConflictResolver,
    SyncDiagnostics,
    build_default_registry,
)

__all__ = [
    "BatchSyncProcessor",
    "ChangePuller",
    "ConflictResolver",
    "SyncDiagnostics",
    "build_default_registry",
]
