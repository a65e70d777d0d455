"""Wall-clock helpers.

All day-bucketing (today, this week, work hours) is done in local wall-clock
time. Aware datetimes are converted to the target zone and made naive; naive
datetimes are assumed to already be local.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta, tzinfo


def to_local(value: datetime, tz: tzinfo | None = None) -> datetime:
    """Return ``value`` as a naive datetime in ``tz`` (server local when None)."""

    if value.tzinfo is None:
        return value
    return value.astimezone(tz).replace(tzinfo=None)


def local_now(tz: tzinfo | None = None) -> datetime:
    return datetime.now(tz).replace(tzinfo=None) if tz else datetime.now()


def resolve_now(now: datetime | None, tz: tzinfo | None = None) -> datetime:
    return local_now(tz) if now is None else to_local(now, tz)


def start_of_day(value: datetime) -> datetime:
    return datetime.combine(value.date(), time.min)


def day_window(value: datetime) -> tuple[datetime, datetime]:
    start = start_of_day(value)
    return start, start + timedelta(days=1)
