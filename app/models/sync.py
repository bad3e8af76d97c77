"""
Sync models for the outbound notification ledger.

Every accepted mutation pushed by a device appends one entry to the sync queue.
An external fan-out transport reads unprocessed entries, delivers them to the
other devices of the tenant and stamps processed_at. The sync engine itself
never updates or deletes an entry once written.
"""

from sqlmodel import SQLModel, Field, Column, JSON, DateTime
from typing import Optional, Dict, Any
from datetime import datetime
from enum import Enum
import uuid


class SyncOperation(str, Enum):
    """Operations recorded in the outbound ledger."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


def generate_queue_id() -> str:
    return f"queue-{uuid.uuid4().hex}"


class SyncQueueEntry(SQLModel, table=True):
    """
    One outbound notification for the fan-out transport.

    Attributes:
        id: Unique entry identifier
        client_id: Tenant the change belongs to
        branch_id: Branch the change belongs to
        device_id: Originating device (excluded from fan-out)
        entity_type: Canonical entity name (e.g., 'customers', 'invoice_items')
        entity_id: Stored id of the changed row
        operation: create / update / delete
        payload: Reserved for the transport, always written empty
        created_at: When the change was accepted
        processed_at: Set by the transport once delivered
    """
    __tablename__ = "sync_queue"

    id: str = Field(default_factory=generate_queue_id, primary_key=True, max_length=64)

    # Tenant scope
    client_id: str = Field(max_length=64, index=True)
    branch_id: str = Field(max_length=64, index=True)

    # Origin
    device_id: str = Field(max_length=255, description="Device that made the change")

    # Change description
    entity_type: str = Field(max_length=100, index=True, description="Canonical entity name")
    entity_id: str = Field(max_length=100, description="Id of the changed row")
    operation: SyncOperation = Field(description="Operation performed")
    payload: Optional[Dict[str, Any]] = Field(
        default_factory=dict,
        sa_column=Column(JSON),
        description="Reserved for the fan-out transport"
    )

    # Timestamps
    created_at: datetime = Field(
        sa_type=DateTime,
        default_factory=datetime.utcnow,
        index=True,
        description="When the change was accepted"
    )
    processed_at: Optional[datetime] = Field(
        sa_type=DateTime,
        default=None,
        index=True,
        description="When the transport delivered the change"
    )
