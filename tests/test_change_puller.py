import pytest
from datetime import datetime, timedelta, timezone
from sqlmodel import Session

from app.models.catalog import ProductCategory, Warehouse
from app.models.sales import Customer
from app.schemas.sync import PullChangesRequest, SyncBatchRequest, SyncRecord
from app.services.sync import BatchSyncProcessor, ChangePuller

CLIENT_ID = "client-a"
BRANCH_ID = "branch-1"
EPOCH = datetime(2000, 1, 1, tzinfo=timezone.utc)


def pull_request(since=EPOCH, entities=None, client_id=CLIENT_ID, branch_id=BRANCH_ID):
    return PullChangesRequest(client_id=client_id, branch_id=branch_id, since=since, entities=entities)


def add_customers(session: Session, timestamps, client_id=CLIENT_ID, branch_id=BRANCH_ID, prefix="c"):
    for index, server_updated_at in enumerate(timestamps):
        session.add(Customer(
            id=f"{prefix}{index:03d}",
            client_id=client_id,
            branch_id=branch_id,
            name=f"Customer {index}",
            server_updated_at=server_updated_at
        ))
    session.commit()


class TestPullChanges:
    def test_pull_returns_pushed_record(self, session: Session, processor: BatchSyncProcessor, puller: ChangePuller):
        processor.process_batch(session, SyncBatchRequest(
            client_id=CLIENT_ID,
            branch_id=BRANCH_ID,
            device_id="till-01",
            records=[SyncRecord(
                entity_name="customers",
                record_id="c1",
                data={"name": "Mona Adel"},
                local_updated_at=datetime.now(timezone.utc) - timedelta(minutes=1)
            )]
        ))

        response = puller.pull_changes(session, pull_request(entities=["customers"]))

        assert response.has_more is False
        assert response.next_cursor is None
        assert len(response.changes) == 1
        change = response.changes[0]
        assert change.entity_name == "customers"
        assert change.record_id == "c1"
        assert change.is_deleted is False
        assert change.data["name"] == "Mona Adel"
        assert change.data["client_id"] == CLIENT_ID
        assert "server_updated_at" not in change.data
        assert "sync_version" not in change.data

    def test_only_changes_after_since(self, session: Session, puller: ChangePuller):
        base = datetime(2025, 11, 2, 9, 0, 0)
        add_customers(session, [base, base + timedelta(seconds=1), base + timedelta(seconds=2)])

        response = puller.pull_changes(session, pull_request(since=base + timedelta(seconds=1)))

        assert [change.record_id for change in response.changes] == ["c002"]

    def test_aware_since_is_compared_in_utc(self, session: Session, puller: ChangePuller):
        base = datetime(2025, 11, 2, 9, 0, 0)
        add_customers(session, [base, base + timedelta(hours=1)])

        cairo = timezone(timedelta(hours=2))
        since = (base + timedelta(minutes=30)).replace(tzinfo=timezone.utc).astimezone(cairo)
        response = puller.pull_changes(session, pull_request(since=since))

        assert [change.record_id for change in response.changes] == ["c001"]

    def test_soft_deleted_rows_are_pulled(self, session: Session, puller: ChangePuller):
        session.add(Customer(id="gone", client_id=CLIENT_ID, branch_id=BRANCH_ID, name="Old", is_deleted=True))
        session.commit()

        response = puller.pull_changes(session, pull_request())

        assert response.changes[0].is_deleted is True

    def test_other_tenants_are_invisible(self, session: Session, puller: ChangePuller):
        base = datetime(2025, 11, 2, 9, 0, 0)
        add_customers(session, [base], prefix="mine-")
        add_customers(session, [base], client_id="client-b", prefix="theirs-")
        add_customers(session, [base], branch_id="branch-2", prefix="branch-")

        response = puller.pull_changes(session, pull_request())

        assert [change.record_id for change in response.changes] == ["mine-000"]

    def test_entities_accept_aliases_and_ignore_unknown(self, session: Session, puller: ChangePuller):
        base = datetime(2025, 11, 2, 9, 0, 0)
        add_customers(session, [base])
        session.add(ProductCategory(
            id="cat-1", client_id=CLIENT_ID, branch_id=BRANCH_ID, name="Drinks", server_updated_at=base
        ))
        session.commit()

        response = puller.pull_changes(session, pull_request(entities=["productCategories", "loyaltyCards"]))

        assert [(change.entity_name, change.record_id) for change in response.changes] == [
            ("product_categories", "cat-1")
        ]

    def test_changes_are_ordered_by_timestamp_across_entities(self, session: Session, puller: ChangePuller):
        base = datetime(2025, 11, 2, 9, 0, 0)
        session.add(Warehouse(id="wh-1", client_id=CLIENT_ID, branch_id=BRANCH_ID, name="Main",
                              server_updated_at=base + timedelta(seconds=2)))
        session.add(Customer(id="c1", client_id=CLIENT_ID, branch_id=BRANCH_ID, name="Mona",
                             server_updated_at=base + timedelta(seconds=3)))
        session.add(ProductCategory(id="cat-1", client_id=CLIENT_ID, branch_id=BRANCH_ID, name="Drinks",
                                    server_updated_at=base + timedelta(seconds=1)))
        session.commit()

        response = puller.pull_changes(session, pull_request())

        assert [change.record_id for change in response.changes] == ["cat-1", "wh-1", "c1"]
        timestamps = [change.server_updated_at for change in response.changes]
        assert timestamps == sorted(timestamps)

    def test_alias_push_is_pulled_under_canonical_name(
        self, session: Session, processor: BatchSyncProcessor, puller: ChangePuller
    ):
        processor.process_batch(session, SyncBatchRequest(
            client_id=CLIENT_ID,
            branch_id=BRANCH_ID,
            device_id="till-01",
            records=[SyncRecord(
                entity_name="productCategories",
                record_id="cat-1",
                data={"nameAr": "مشروبات", "nameEn": "Drinks"},
                local_updated_at=datetime.now(timezone.utc) - timedelta(minutes=1)
            )]
        ))

        for entities in (["productCategories"], ["product_categories"], None):
            response = puller.pull_changes(session, pull_request(entities=entities))

            assert [(change.entity_name, change.record_id) for change in response.changes] == [
                ("product_categories", "cat-1")
            ]
            assert response.changes[0].data["name"] == "مشروبات"
            assert response.changes[0].data["name_en"] == "Drinks"

    def test_failing_entity_is_skipped(self, session: Session, engine, puller: ChangePuller):
        base = datetime(2025, 11, 2, 9, 0, 0)
        add_customers(session, [base])
        session.add(Warehouse(id="wh-1", client_id=CLIENT_ID, branch_id=BRANCH_ID, name="Main",
                              server_updated_at=base))
        session.commit()
        session.close()

        with engine.begin() as connection:
            connection.exec_driver_sql("DROP TABLE warehouses")

        response = puller.pull_changes(session, pull_request())

        assert [change.record_id for change in response.changes] == ["c000"]


class TestPullPagination:
    def test_has_more_and_cursor(self, session: Session, registry):
        puller = ChangePuller(registry, max_pull_size=2)
        base = datetime(2025, 11, 2, 9, 0, 0)
        add_customers(session, [base + timedelta(seconds=i) for i in range(3)])

        first = puller.pull_changes(session, pull_request())

        assert [change.record_id for change in first.changes] == ["c000", "c001"]
        assert first.has_more is True
        assert first.next_cursor == base + timedelta(seconds=1)

        second = puller.pull_changes(session, pull_request(since=first.next_cursor))

        assert [change.record_id for change in second.changes] == ["c002"]
        assert second.has_more is False
        assert second.next_cursor is None

    def test_exactly_one_page_has_no_more(self, session: Session, registry):
        puller = ChangePuller(registry, max_pull_size=3)
        base = datetime(2025, 11, 2, 9, 0, 0)
        add_customers(session, [base + timedelta(seconds=i) for i in range(3)])

        response = puller.pull_changes(session, pull_request())

        assert len(response.changes) == 3
        assert response.has_more is False

    def test_page_cap_is_shared_across_entities(self, session: Session, registry):
        puller = ChangePuller(registry, max_pull_size=3)
        base = datetime(2025, 11, 2, 9, 0, 0)
        add_customers(session, [base + timedelta(seconds=2 * i) for i in range(3)])
        for i in range(3):
            session.add(Warehouse(id=f"wh-{i}", client_id=CLIENT_ID, branch_id=BRANCH_ID, name=f"W{i}",
                                  server_updated_at=base + timedelta(seconds=2 * i + 1)))
        session.commit()

        response = puller.pull_changes(session, pull_request())

        assert [change.record_id for change in response.changes] == ["c000", "wh-0", "c001"]
        assert response.has_more is True

    @pytest.mark.parametrize("max_pull_size", [3, 4, 5])
    def test_iterating_with_cursor_sees_every_change_once(self, session: Session, registry, max_pull_size):
        puller = ChangePuller(registry, max_pull_size=max_pull_size)
        base = datetime(2025, 11, 2, 9, 0, 0)
        # Several rows share a timestamp, across entities too; no tie group exceeds a page
        offsets = [0, 1, 2, 2, 3, 4, 4, 4, 5]
        add_customers(session, [base + timedelta(seconds=offset) for offset in offsets])
        session.add(Warehouse(id="wh-1", client_id=CLIENT_ID, branch_id=BRANCH_ID, name="Main",
                              server_updated_at=base + timedelta(seconds=2)))
        session.commit()

        seen = []
        since = EPOCH
        last_cursor = None
        for _ in range(20):
            response = puller.pull_changes(session, pull_request(since=since))
            seen.extend(change.record_id for change in response.changes)
            if not response.has_more:
                break
            assert last_cursor is None or response.next_cursor > last_cursor
            last_cursor = since = response.next_cursor

        assert len(seen) == len(set(seen))
        assert sorted(seen) == sorted([f"c{i:03d}" for i in range(len(offsets))] + ["wh-1"])
