# app/core/deps.py
from functools import lru_cache

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.auth import verify_token
from app.database.engine import get_db
from app.schemas.auth import TokenData
from app.services.sync import (
    BatchSyncProcessor,
    ChangePuller,
    ConflictResolver,
    RegistryFieldTranslator,
    SchemaRegistry,
    SyncDiagnostics,
    build_default_registry,
)

security = HTTPBearer()

__all__ = [
    "get_db",
    "get_current_tenant",
    "get_sync_registry",
    "get_field_translator",
    "get_batch_processor",
    "get_change_puller",
    "get_conflict_resolver",
    "get_sync_diagnostics",
]


def get_current_tenant(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> TokenData:
    """Tenant (client_id, branch_id) of the authenticated till."""
    token_data = verify_token(credentials.credentials)
    if token_data is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token_data


@lru_cache()
def get_sync_registry() -> SchemaRegistry:
    return build_default_registry()


def get_field_translator(
    registry: SchemaRegistry = Depends(get_sync_registry)
) -> RegistryFieldTranslator:
    return RegistryFieldTranslator(registry)


def get_batch_processor(
    registry: SchemaRegistry = Depends(get_sync_registry),
    translator: RegistryFieldTranslator = Depends(get_field_translator)
) -> BatchSyncProcessor:
    return BatchSyncProcessor(registry, translator)


def get_change_puller(
    registry: SchemaRegistry = Depends(get_sync_registry)
) -> ChangePuller:
    return ChangePuller(registry)


def get_conflict_resolver(
    registry: SchemaRegistry = Depends(get_sync_registry),
    translator: RegistryFieldTranslator = Depends(get_field_translator)
) -> ConflictResolver:
    return ConflictResolver(registry, translator)


def get_sync_diagnostics(
    registry: SchemaRegistry = Depends(get_sync_registry)
) -> SyncDiagnostics:
    return SyncDiagnostics(registry)
