# app/services/sync/change_puller.py
"""
Pull path of the sync engine (read-only).

Returns the changes a device is missing since a point in time, across every
syncable entity of its tenant, one page at a time.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlmodel import Session, select

from app.core.config import settings
from app.schemas.sync import EntityChange, PullChangesRequest, PullChangesResponse
from app.services.sync.clock import to_naive_utc
from app.services.sync.registry import SchemaRegistry, SyncEntity, serialize_row

logger = logging.getLogger(__name__)

# Reported next to the data, never inside it
SERVER_BOOKKEEPING_FIELDS = ("server_updated_at", "sync_version")


class ChangePuller:
    """Builds pages of changes for pulling devices."""

    def __init__(self, registry: SchemaRegistry, max_pull_size: int = settings.SYNC_MAX_PULL_SIZE):
        self.registry = registry
        self.max_pull_size = max_pull_size

    def entities_in_scope(self, requested: Optional[List[str]] = None) -> List[SyncEntity]:
        """Requested entities (aliases allowed) or all of them, in registry order."""
        if not requested:
            return self.registry.entities

        wanted = set()
        for name in requested:
            if self.registry.is_syncable(name):
                wanted.add(self.registry.canonicalize(name))
            else:
                logger.warning(f"Ignoring unknown entity in pull request: {name}")

        return [entity for entity in self.registry.entities if entity.name in wanted]

    def pull_changes(self, db: Session, request: PullChangesRequest) -> PullChangesResponse:
        """
        Return changes with server_updated_at > since, oldest first.

        Each entity contributes at most max_pull_size + 1 rows; the candidates
        are merged by timestamp and the first max_pull_size form the page.
        When more remain, has_more is set and next_cursor is the timestamp of
        the last change returned. Changes sharing their timestamp with the
        first change left out are held back too, so resuming with
        since=next_cursor neither skips nor repeats a change.

        An entity whose query fails is logged and skipped.
        """
        since = to_naive_utc(request.since)

        logger.info(
            f"Pulling changes: client={request.client_id} branch={request.branch_id} "
            f"since={since.isoformat()} entities={request.entities or 'all'}"
        )

        candidates: List[Tuple] = []
        for order, entity in enumerate(self.entities_in_scope(request.entities)):
            model = entity.model
            query = (
                select(model)
                .where(
                    model.client_id == request.client_id,
                    model.branch_id == request.branch_id,
                    model.server_updated_at > since
                )
                .order_by(model.server_updated_at, model.id)
                .limit(self.max_pull_size + 1)
            )

            try:
                with db.begin_nested():
                    rows = db.exec(query).all()
            except SQLAlchemyError as e:
                if isinstance(e, DBAPIError) and e.connection_invalidated:
                    raise
                logger.warning(f"Skipping {entity.name} during pull: {e}")
                continue

            for row in rows:
                change = EntityChange(
                    entity_name=entity.name,
                    record_id=row.id,
                    data=serialize_row(row, exclude=SERVER_BOOKKEEPING_FIELDS),
                    server_updated_at=row.server_updated_at,
                    is_deleted=bool(row.is_deleted)
                )
                candidates.append((row.server_updated_at, order, row.id, change))

        candidates.sort(key=lambda candidate: candidate[:3])

        response = PullChangesResponse()
        page = candidates[:self.max_pull_size]

        if len(candidates) > self.max_pull_size:
            boundary = candidates[self.max_pull_size][0]
            before_boundary = [candidate for candidate in page if candidate[0] < boundary]
            if before_boundary:
                page = before_boundary
            response.has_more = True

        response.changes = [candidate[3] for candidate in page]
        if response.has_more and response.changes:
            response.next_cursor = response.changes[-1].server_updated_at

        logger.info(
            f"Pull changes completed: changes={len(response.changes)} has_more={response.has_more}"
        )
        return response
