"""
Sync router for offline-first POS devices
Tills push local changes in batches and pull what other tills changed
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session

from app.core.deps import (
    get_batch_processor,
    get_change_puller,
    get_conflict_resolver,
    get_current_tenant,
    get_db,
    get_sync_diagnostics,
)
from app.schemas.auth import TokenData
from app.schemas.sync import (
    BatchPushBody,
    PullChangesBody,
    PullChangesRequest,
    PullChangesResponse,
    ResolveConflictBody,
    ResolveConflictResponse,
    SyncBatchRequest,
    SyncBatchResponse,
    SyncStatsResponse,
)
from app.services.sync import (
    BatchSyncProcessor,
    ChangePuller,
    ConflictResolver,
    SyncDiagnostics,
)
from app.services.sync.errors import (
    BatchTooLargeError,
    InvalidResolutionError,
    RecordNotFoundError,
    SyncError,
    UnsyncableEntityError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sync", tags=["Sync & Offline"])


# ===========================
# Sync Push (Client → Server)
# ===========================

@router.post("/batch-push", response_model=SyncBatchResponse)
def batch_push(
    body: BatchPushBody,
    tenant: TokenData = Depends(get_current_tenant),
    db: Session = Depends(get_db),
    processor: BatchSyncProcessor = Depends(get_batch_processor)
):
    """
    Push a batch of local changes.

    The batch is applied in one transaction. Records that lose against a newer
    server version come back in 'conflicts'; records that cannot be applied
    come back in 'errors'. Neither prevents the rest of the batch from syncing.
    """
    request = SyncBatchRequest(
        client_id=tenant.client_id,
        branch_id=tenant.branch_id,
        device_id=body.device_id,
        records=body.records
    )

    try:
        return processor.process_batch(db, request)
    except BatchTooLargeError as e:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Batch push failed for client={tenant.client_id} branch={tenant.branch_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Batch sync failed: {str(e)}"
        )


# ===========================
# Sync Pull (Server → Client)
# ===========================

def _pull(
    db: Session,
    puller: ChangePuller,
    tenant: TokenData,
    since: datetime,
    entities: Optional[list]
) -> PullChangesResponse:
    request = PullChangesRequest(
        client_id=tenant.client_id,
        branch_id=tenant.branch_id,
        since=since,
        entities=entities
    )

    try:
        return puller.pull_changes(db, request)
    except Exception as e:
        logger.error(f"Pull failed for client={tenant.client_id} branch={tenant.branch_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to pull changes: {str(e)}"
        )


@router.post("/pull", response_model=PullChangesResponse)
def pull_changes(
    body: PullChangesBody,
    tenant: TokenData = Depends(get_current_tenant),
    db: Session = Depends(get_db),
    puller: ChangePuller = Depends(get_change_puller)
):
    """
    Pull changes accepted by the server since a point in time.

    Clients should:
    1. Apply the returned changes locally
    2. While has_more is true, pull again with since=next_cursor
    """
    return _pull(db, puller, tenant, body.since, body.entities)


@router.get("/pull-changes", response_model=PullChangesResponse)
def pull_changes_query(
    since: datetime = Query(..., description="Only changes accepted after this timestamp"),
    tables: Optional[str] = Query(None, description="Comma separated entity names"),
    tenant: TokenData = Depends(get_current_tenant),
    db: Session = Depends(get_db),
    puller: ChangePuller = Depends(get_change_puller)
):
    """Query-string form of /sync/pull for older tills."""
    entities = [name.strip() for name in tables.split(",") if name.strip()] if tables else None
    return _pull(db, puller, tenant, since, entities)


# ===========================
# Conflict Resolution
# ===========================

@router.post("/resolve-conflict", response_model=ResolveConflictResponse)
def resolve_conflict(
    body: ResolveConflictBody,
    tenant: TokenData = Depends(get_current_tenant),
    db: Session = Depends(get_db),
    resolver: ConflictResolver = Depends(get_conflict_resolver)
):
    """
    Finalize a conflict reported by a previous push.

    - accept_server: keep the stored version; the till re-pulls it
    - accept_client: overwrite the stored version with client_data
    """
    try:
        resolver.resolve_conflict(
            db,
            client_id=tenant.client_id,
            branch_id=tenant.branch_id,
            entity_name=body.entity_name,
            record_id=body.record_id,
            resolution=body.resolution,
            client_data=body.client_data,
            device_id=body.device_id or tenant.device_id,
            is_deleted=body.is_deleted
        )
    except (UnsyncableEntityError, InvalidResolutionError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except RecordNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Conflict resolution failed for {body.entity_name}/{body.record_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to resolve conflict: {str(e)}"
        )

    return ResolveConflictResponse(
        success=True,
        message=f"Conflict resolved with {body.resolution.value}"
    )


# ===========================
# Diagnostics
# ===========================

@router.get("/stats", response_model=SyncStatsResponse)
def sync_stats(
    tenant: TokenData = Depends(get_current_tenant),
    db: Session = Depends(get_db),
    diagnostics: SyncDiagnostics = Depends(get_sync_diagnostics)
):
    """Pending outbound notifications and live record counts for the tenant."""
    try:
        return diagnostics.get_sync_stats(db, tenant.client_id, tenant.branch_id)
    except SyncError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Failed to collect sync stats for client={tenant.client_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to get sync stats: {str(e)}"
        )
