"""Convert Calendar API event resources into internal models."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any

from inbox_ai.models import CalendarEventCreate
from inbox_ai.models.calendar_event import EventStatus
from inbox_ai.utils.timeutil import to_local

NO_TITLE = "(No Title)"


def _parse_when(when: dict[str, Any] | None) -> tuple[datetime | None, bool]:
    """Return ``(instant, is_all_day)`` for an event ``start``/``end`` object.

    All-day values (``date``) become local midnight of that date.
    """

    if not when:
        return None, False
    if when.get("dateTime"):
        raw = str(when["dateTime"]).replace("Z", "+00:00")
        return datetime.fromisoformat(raw), False
    if when.get("date"):
        return datetime.combine(date.fromisoformat(str(when["date"])), time.min), True
    return None, False


def _status(value: Any) -> EventStatus:
    try:
        return EventStatus(str(value))
    except ValueError:
        return EventStatus.CONFIRMED


def item_to_calendar_event(item: dict[str, Any]) -> CalendarEventCreate:
    """Map one Calendar API event into a CalendarEventCreate.

    Raises:
        ValueError: If the event has no usable start or a malformed timestamp.
    """

    start, is_all_day = _parse_when(item.get("start"))
    if start is None:
        raise ValueError(f"Calendar event {item.get('id')!r} has no start")
    end, _ = _parse_when(item.get("end"))
    if end is None or to_local(end) < to_local(start):
        end = start

    attendees = [
        str(a.get("email") or "") for a in item.get("attendees") or [] if isinstance(a, dict)
    ]

    return CalendarEventCreate(
        event_id=str(item.get("id") or ""),
        summary=item.get("summary") or NO_TITLE,
        description=item.get("description") or "",
        location=item.get("location") or "",
        start_time=start,
        end_time=end,
        attendees=attendees,
        organizer=(item.get("organizer") or {}).get("email") or "",
        status=_status(item.get("status") or EventStatus.CONFIRMED.value),
        is_all_day=is_all_day,
        color_id=item.get("colorId") or "",
    )
