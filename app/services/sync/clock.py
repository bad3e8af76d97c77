# app/services/sync/clock.py
"""Server clock helpers. All sync timestamps are stored as naive UTC."""
import threading
from datetime import datetime, timedelta, timezone
from typing import Optional

_TICK = timedelta(microseconds=1)

# Last timestamp handed out by this process
_last_issued: Optional[datetime] = None
_issue_lock = threading.Lock()


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware timestamp to naive UTC; naive values are assumed UTC."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def next_server_timestamp(previous: Optional[datetime] = None) -> datetime:
    """
    Timestamp for an accepted mutation.

    Strictly later than every timestamp this process issued before and than
    the row's previous server_updated_at, even if the server clock has not
    advanced (coarse clocks, several writes in a row). Other processes sharing
    the database keep their own sequence, so ties across workers remain
    possible.
    """
    global _last_issued
    with _issue_lock:
        issued = utcnow()
        for floor in (previous, _last_issued):
            if floor is not None and issued <= floor:
                issued = floor + _TICK
        _last_issued = issued
        return issued
