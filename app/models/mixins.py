"""
Base mixins for models.

This module provides the sync metadata shared by every table that devices
replicate offline (tills, back-office dashboard, desktop app).
"""

from sqlmodel import SQLModel, Field, DateTime
from datetime import datetime


# Columns owned by the sync engine. Devices never write these directly.
SYNC_METADATA_COLUMNS = (
    "id",
    "client_id",
    "branch_id",
    "is_deleted",
    "server_updated_at",
    "sync_version",
)


class SyncMixin(SQLModel):
    """
    Mixin to add sync metadata to POS models.

    Every syncable row belongs to exactly one tenant (client_id, branch_id) and
    carries the bookkeeping used for Last-Write-Wins (LWW) conflict detection
    and soft deletes.

    Fields:
        id: Primary key generated on the device (UUID or compound id)
        client_id: Tenant (business) the row belongs to
        branch_id: Branch of the tenant the row belongs to
        is_deleted: Soft delete flag (deleted rows stay addressable)
        server_updated_at: Server clock timestamp of the last accepted mutation
        sync_version: Incremented on every accepted mutation, starts at 1

    Usage:
        class Customer(SyncMixin, table=True):
            __tablename__ = "customers"
            name: str = Field(max_length=200)
    """

    id: str = Field(primary_key=True, max_length=100, description="Device-generated identifier")

    # Tenant scope
    client_id: str = Field(max_length=64, index=True, description="Tenant identifier")
    branch_id: str = Field(max_length=64, index=True, description="Branch identifier")

    # Soft delete
    is_deleted: bool = Field(default=False, description="Soft delete flag")

    # Server-managed sync bookkeeping
    # Stored as naive UTC
    server_updated_at: datetime = Field(
        sa_type=DateTime,
        default_factory=datetime.utcnow,
        index=True,  # Indexed for incremental pulls
        description="Server timestamp of the last accepted mutation"
    )
    sync_version: int = Field(default=1, description="Mutation counter for this row")
