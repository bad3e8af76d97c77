import pytest
from pydantic import ValidationError
from datetime import datetime, timezone

from app.schemas.auth import TokenData
from app.schemas.sync import (
    BatchPushBody, ConflictResolutionStrategy, PullChangesRequest,
    ResolveConflictBody, SyncBatchRequest, SyncBatchResponse, SyncRecord,
)

class TestTokenData:
    def test_token_data_valid(self):
        data = TokenData(user_id="user-1", client_id="client-a", branch_id="branch-1")
        assert data.user_id == "user-1"
        assert data.client_id == "client-a"
        assert data.device_id is None

    def test_token_data_requires_tenant(self):
        with pytest.raises(ValidationError):
            TokenData(user_id="user-1")

class TestSyncRecord:
    def test_sync_record_valid(self):
        record = SyncRecord(
            entity_name="customers",
            record_id="c1",
            data={"name": "Mona"},
            local_updated_at="2025-11-02T09:15:00Z"
        )
        assert record.local_updated_at == datetime(2025, 11, 2, 9, 15, tzinfo=timezone.utc)
        assert record.is_deleted is False

    def test_sync_record_defaults_data(self):
        record = SyncRecord(entity_name="customers", record_id="c1", local_updated_at=datetime.now(timezone.utc))
        assert record.data == {}

    def test_sync_record_empty_entity(self):
        with pytest.raises(ValidationError):
            SyncRecord(entity_name="", record_id="c1", local_updated_at=datetime.now(timezone.utc))

    def test_sync_record_requires_timestamp(self):
        with pytest.raises(ValidationError):
            SyncRecord(entity_name="customers", record_id="c1")

class TestSyncBatchRequest:
    def test_numeric_tenant_ids_are_coerced(self):
        request = SyncBatchRequest(client_id=42, branch_id=7, device_id="till-01")
        assert request.client_id == "42"
        assert request.branch_id == "7"
        assert request.records == []

    def test_boolean_tenant_id_is_rejected(self):
        with pytest.raises(ValidationError):
            SyncBatchRequest(client_id=True, branch_id="1", device_id="till-01")

    def test_pull_request_coerces_tenant_ids(self):
        request = PullChangesRequest(client_id=42, branch_id=7, since="2025-11-02T00:00:00Z")
        assert request.client_id == "42"
        assert request.entities is None

class TestBatchPushBody:
    def test_requires_records(self):
        with pytest.raises(ValidationError):
            BatchPushBody(device_id="till-01")

    def test_requires_device(self):
        with pytest.raises(ValidationError):
            BatchPushBody(records=[])

class TestSyncBatchResponse:
    def test_defaults(self):
        response = SyncBatchResponse()
        assert response.success is True
        assert response.synced_count == 0
        assert response.conflicts == []
        assert response.errors == []

class TestResolveConflictBody:
    def test_valid(self):
        body = ResolveConflictBody(
            entity_name="customers",
            record_id="c1",
            resolution="accept_client",
            client_data={"name": "Mona"}
        )
        assert body.resolution == ConflictResolutionStrategy.ACCEPT_CLIENT
        assert body.is_deleted is False

    def test_unknown_resolution(self):
        with pytest.raises(ValidationError):
            ResolveConflictBody(entity_name="customers", record_id="c1", resolution="merge")
