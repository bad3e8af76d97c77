"""
Sync schemas for offline-first POS devices
Push batches, incremental pulls, conflict resolution and diagnostics
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import List, Optional, Dict, Any, Union
from enum import Enum


def _tenant_id(value: Union[str, int]) -> str:
    # Older tills send numeric tenant ids
    if isinstance(value, bool):
        raise ValueError("tenant id must be a string or an integer")
    if isinstance(value, int):
        return str(value)
    return value


# ===========================
# Enums
# ===========================

class ConflictResolutionStrategy(str, Enum):
    """How a reported conflict is finalized"""
    ACCEPT_SERVER = "accept_server"
    ACCEPT_CLIENT = "accept_client"


# ===========================
# Push (Device → Server)
# ===========================

class SyncRecord(BaseModel):
    """One change a device wants to apply"""
    entity_name: str = Field(..., min_length=1, max_length=100, description="Entity (table) name, canonical or alias")
    record_id: str = Field(..., min_length=1, max_length=100, description="Identifier of the record")
    data: Dict[str, Any] = Field(default_factory=dict, description="Record fields in the device's naming convention")
    local_updated_at: datetime = Field(..., description="When the device last changed the record")
    is_deleted: bool = Field(False, description="Soft delete flag")

    class Config:
        json_schema_extra = {
            "example": {
                "entity_name": "customers",
                "record_id": "3f1c2a9e-6b0d-4f43-9a57-1c8f0e2d7b11",
                "data": {"name": "Mona Adel", "phone": "+201001234567", "creditLimit": 500},
                "local_updated_at": "2025-11-02T09:15:00Z",
                "is_deleted": False
            }
        }


class SyncBatchRequest(BaseModel):
    """A batch of changes pushed by one device of one tenant"""
    client_id: str = Field(..., min_length=1, max_length=64)
    branch_id: str = Field(..., min_length=1, max_length=64)
    device_id: str = Field(..., min_length=1, max_length=255)
    records: List[SyncRecord] = Field(default_factory=list)

    @field_validator("client_id", "branch_id", mode="before")
    @classmethod
    def coerce_tenant_id(cls, v):
        return _tenant_id(v)


class BatchPushBody(BaseModel):
    """HTTP body of a push; the tenant comes from the access token"""
    device_id: str = Field(..., min_length=1, max_length=255, description="Device pushing changes")
    records: List[SyncRecord] = Field(..., description="Changes to apply")


class SyncConflict(BaseModel):
    """A pushed record that lost against a newer server version"""
    entity_name: str
    record_id: str
    local_data: Dict[str, Any]
    server_data: Dict[str, Any]
    local_updated_at: datetime
    server_updated_at: datetime


class SyncRecordError(BaseModel):
    """A pushed record that could not be applied"""
    entity_name: str
    record_id: str
    error: str


class SyncBatchResponse(BaseModel):
    """Outcome of a committed push batch"""
    success: bool = Field(True, description="True whenever the batch transaction committed")
    synced_count: int = Field(0, description="Records applied or recognised as already synced")
    conflicts: List[SyncConflict] = Field(default_factory=list)
    errors: List[SyncRecordError] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "success": True,
                "synced_count": 2,
                "conflicts": [],
                "errors": [
                    {
                        "entity_name": "loyaltyCards",
                        "record_id": "lc-1",
                        "error": "Entity loyaltyCards is not syncable"
                    }
                ]
            }
        }


# ===========================
# Pull (Server → Device)
# ===========================

class PullChangesRequest(BaseModel):
    """Incremental pull for one tenant"""
    client_id: str = Field(..., min_length=1, max_length=64)
    branch_id: str = Field(..., min_length=1, max_length=64)
    since: datetime = Field(..., description="Only changes accepted after this timestamp")
    entities: Optional[List[str]] = Field(None, description="Subset of entities (default: all syncable)")

    @field_validator("client_id", "branch_id", mode="before")
    @classmethod
    def coerce_tenant_id(cls, v):
        return _tenant_id(v)


class PullChangesBody(BaseModel):
    """HTTP body of a pull; the tenant comes from the access token"""
    since: datetime = Field(..., description="Resume point, e.g. the previous next_cursor")
    entities: Optional[List[str]] = Field(None, description="Subset of entities (default: all syncable)")

    class Config:
        json_schema_extra = {
            "example": {
                "since": "2025-11-02T00:00:00Z",
                "entities": ["customers", "invoiceItems"]
            }
        }


class EntityChange(BaseModel):
    """One changed row as seen by a pulling device"""
    entity_name: str
    record_id: str
    data: Dict[str, Any] = Field(default_factory=dict, description="Row without server bookkeeping")
    server_updated_at: datetime
    is_deleted: bool = False


class PullChangesResponse(BaseModel):
    """One page of changes"""
    changes: List[EntityChange] = Field(default_factory=list)
    has_more: bool = Field(False, description="Whether another page is available")
    next_cursor: Optional[datetime] = Field(None, description="Use as 'since' for the next page")


# ===========================
# Conflict Resolution
# ===========================

class ResolveConflictBody(BaseModel):
    """Request to finalize a previously reported conflict"""
    entity_name: str = Field(..., min_length=1, max_length=100)
    record_id: str = Field(..., min_length=1, max_length=100)
    resolution: ConflictResolutionStrategy
    client_data: Optional[Dict[str, Any]] = Field(None, description="Required for accept_client")
    device_id: Optional[str] = Field(None, max_length=255, description="Device applying the resolution")
    is_deleted: bool = Field(False, description="Soft delete flag of the client version")

    class Config:
        json_schema_extra = {
            "example": {
                "entity_name": "customers",
                "record_id": "3f1c2a9e-6b0d-4f43-9a57-1c8f0e2d7b11",
                "resolution": "accept_client",
                "client_data": {"name": "Mona Adel", "phone": "+201001234567"}
            }
        }


class ResolveConflictResponse(BaseModel):
    success: bool = True
    message: str


# ===========================
# Diagnostics
# ===========================

class TableStats(BaseModel):
    entity_name: str
    record_count: int


class SyncStatsResponse(BaseModel):
    """Operational view of a tenant's sync state"""
    pending_queue_count: int = Field(0, description="Outbound notifications not yet delivered")
    last_sync_at: Optional[datetime] = Field(None, description="Most recent outbound notification")
    tables_stats: List[TableStats] = Field(default_factory=list, description="Live rows per entity (non-zero only)")
