"""Calendar-day helpers shared by the scheduler and the daily ledger.

Every day boundary in the service is computed in UTC.
"""
from __future__ import annotations

import datetime as dt

TZ = dt.timezone.utc


def utc_now() -> dt.datetime:
    return dt.datetime.now(TZ)


def utc_today(now: dt.datetime | None = None) -> dt.date:
    """Return the UTC calendar date for ``now`` (naive datetimes are taken as UTC)."""

    now = now or utc_now()
    if now.tzinfo is None:
        now = now.replace(tzinfo=TZ)
    return now.astimezone(TZ).date()
