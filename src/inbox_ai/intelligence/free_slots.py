"""Free time slot finder.

A single gap sweep serves both the scheduling endpoint/chat assistant and the
calendar analytics card; the call sites differ only in the constants they
pass. All arithmetic happens in local wall-clock time.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, time, timedelta, tzinfo

from inbox_ai.models import FreeTimeSlot
from inbox_ai.utils.timeutil import resolve_now, to_local

BusyInterval = tuple[datetime, datetime]

DEFAULT_WORK_HOUR_START = 9
DEFAULT_WORK_HOUR_END = 17

# Scheduling / chat defaults.
SCHEDULING_MIN_GAP_MINUTES = 60
SCHEDULING_HORIZON_DAYS = 7
SCHEDULING_MAX_RESULTS = 10

# Calendar analytics defaults.
ANALYTICS_MIN_GAP_MINUTES = 30
ANALYTICS_HORIZON_DAYS = 3
ANALYTICS_MAX_RESULTS = 5

_SATURDAY = 5


def _minutes_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 60


def _slot(start: datetime, end: datetime) -> FreeTimeSlot:
    return FreeTimeSlot(
        date=start.date(),
        start_time=start.time().replace(second=0, microsecond=0),
        end_time=end.time().replace(second=0, microsecond=0),
        duration_minutes=int(_minutes_between(start, end)),
    )


def find_gaps(
    busy: Iterable[BusyInterval],
    *,
    min_gap_minutes: int,
    horizon_days: int,
    max_results: int,
    work_hour_start: int = DEFAULT_WORK_HOUR_START,
    work_hour_end: int = DEFAULT_WORK_HOUR_END,
    skip_weekends: bool = True,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> list[FreeTimeSlot]:
    """Sweep each work day in the horizon and collect the gaps between busy intervals.

    Args:
        busy: ``(start, end)`` pairs. Only intervals that start on a given
            day affect that day.
        min_gap_minutes: Shortest gap reported as a slot.
        horizon_days: Number of days to scan, starting with today.
        max_results: Cap on the number of slots returned.
        work_hour_start: First hour of the work window.
        work_hour_end: Hour at which the work window closes.
        skip_weekends: Ignore Saturdays and Sundays.
        now: Reference time; defaults to the current local time.
        tz: Zone used to localize aware datetimes; server local when None.

    Returns:
        Slots in chronological order, at most ``max_results`` of them.
    """

    today = resolve_now(now, tz).date()
    intervals = [(to_local(start, tz), to_local(end, tz)) for start, end in busy]

    slots: list[FreeTimeSlot] = []
    for offset in range(max(horizon_days, 0)):
        if len(slots) >= max_results:
            break

        day = today + timedelta(days=offset)
        if skip_weekends and day.weekday() >= _SATURDAY:
            continue

        day_start = datetime.combine(day, time(hour=work_hour_start))
        day_end = datetime.combine(day, time(hour=work_hour_end))

        day_busy = sorted(
            (interval for interval in intervals if interval[0].date() == day),
            key=lambda interval: interval[0],
        )

        cursor = day_start
        for start, end in day_busy:
            gap_end = min(start, day_end)
            if _minutes_between(cursor, gap_end) >= min_gap_minutes:
                slots.append(_slot(cursor, gap_end))
            cursor = max(cursor, end)

        if _minutes_between(cursor, day_end) >= min_gap_minutes:
            slots.append(_slot(cursor, day_end))

    return slots[:max_results]


def find_free_slots(
    busy: Iterable[BusyInterval],
    duration_minutes: int = SCHEDULING_MIN_GAP_MINUTES,
    days_ahead: int = SCHEDULING_HORIZON_DAYS,
    *,
    work_hour_start: int = DEFAULT_WORK_HOUR_START,
    work_hour_end: int = DEFAULT_WORK_HOUR_END,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> list[FreeTimeSlot]:
    """Find up to ten weekday work-hour slots of at least ``duration_minutes``."""

    return find_gaps(
        busy,
        min_gap_minutes=duration_minutes,
        horizon_days=days_ahead,
        max_results=SCHEDULING_MAX_RESULTS,
        work_hour_start=work_hour_start,
        work_hour_end=work_hour_end,
        now=now,
        tz=tz,
    )
