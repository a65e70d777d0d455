"""Analytics and dashboard aggregation over stored records.

Every function recomputes from scratch on every call; nothing is cached.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import datetime, timedelta, tzinfo

from inbox_ai.intelligence.free_slots import (
    ANALYTICS_HORIZON_DAYS,
    ANALYTICS_MAX_RESULTS,
    ANALYTICS_MIN_GAP_MINUTES,
    DEFAULT_WORK_HOUR_END,
    DEFAULT_WORK_HOUR_START,
    find_gaps,
)
from inbox_ai.models import (
    CalendarAnalytics,
    CalendarEvent,
    CategoryBreakdown,
    DailyActivity,
    DashboardData,
    DashboardEvent,
    DashboardSummary,
    Email,
    EmailAnalytics,
    ItemType,
    QuickAction,
    Task,
    TaskPriority,
    TaskStatus,
    UrgentItem,
)
from inbox_ai.utils.timeutil import day_window, resolve_now, start_of_day, to_local

ACTIVITY_DAYS = 7
UPCOMING_SCAN_LIMIT = 100
WEEK = timedelta(days=7)

DASHBOARD_URGENT_EMAILS = 3
DASHBOARD_TODAY_EVENTS = 2
DASHBOARD_URGENT_TASKS = 2
DASHBOARD_TOP_TASKS = 5
URGENT_INSIGHT_THRESHOLD = 5
UNREAD_INSIGHT_THRESHOLD = 10
ALL_CAUGHT_UP = "You're all caught up! Great work staying organized."

EMAIL_ACTIONS = (
    QuickAction(label="Mark Read", action="mark_read"),
    QuickAction(label="Reply", action="reply", variant="default"),
    QuickAction(label="Archive", action="archive", variant="outline"),
)
EVENT_ACTIONS = (
    QuickAction(label="View Details", action="view_event"),
    QuickAction(label="Join Meeting", action="join", variant="default"),
)
TASK_ACTIONS = (
    QuickAction(label="Complete", action="complete", variant="default"),
    QuickAction(label="View", action="view_task"),
)


def compute_email_analytics(
    emails: Sequence[Email],
    *,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> EmailAnalytics:
    current = resolve_now(now, tz)
    today = start_of_day(current)

    by_category = Counter(e.category.value for e in emails)
    local_dates = [to_local(e.date, tz) for e in emails]

    activity: list[DailyActivity] = []
    for days_back in range(ACTIVITY_DAYS - 1, -1, -1):
        start = today - timedelta(days=days_back)
        end = start + timedelta(days=1)
        count = sum(1 for d in local_dates if start <= d < end)
        activity.append(DailyActivity(date=start.date(), count=count))

    return EmailAnalytics(
        total_emails=len(emails),
        unread_count=sum(1 for e in emails if not e.is_read),
        urgent_count=sum(1 for e in emails if e.is_urgent),
        category_breakdown=CategoryBreakdown(**by_category),
        recent_activity=activity,
    )


def upcoming_events(
    events: Sequence[CalendarEvent],
    *,
    limit: int,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> list[CalendarEvent]:
    current = resolve_now(now, tz)
    upcoming = [e for e in events if to_local(e.start_time, tz) >= current]
    upcoming.sort(key=lambda e: to_local(e.start_time, tz))
    return upcoming[: max(limit, 0)]


def events_on_day(
    events: Sequence[CalendarEvent],
    *,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> list[CalendarEvent]:
    start, end = day_window(resolve_now(now, tz))
    return [e for e in events if start <= to_local(e.start_time, tz) < end]


def compute_calendar_analytics(
    events: Sequence[CalendarEvent],
    *,
    now: datetime | None = None,
    work_hour_start: int = DEFAULT_WORK_HOUR_START,
    work_hour_end: int = DEFAULT_WORK_HOUR_END,
    tz: tzinfo | None = None,
) -> CalendarAnalytics:
    current = resolve_now(now, tz)
    upcoming = upcoming_events(events, limit=UPCOMING_SCAN_LIMIT, now=current, tz=tz)
    today = events_on_day(events, now=current, tz=tz)
    week_end = current + WEEK
    week = [e for e in upcoming if to_local(e.start_time, tz) < week_end]

    free_slots = find_gaps(
        [(e.start_time, e.end_time) for e in upcoming],
        min_gap_minutes=ANALYTICS_MIN_GAP_MINUTES,
        horizon_days=ANALYTICS_HORIZON_DAYS,
        max_results=ANALYTICS_MAX_RESULTS,
        work_hour_start=work_hour_start,
        work_hour_end=work_hour_end,
        now=current,
        tz=tz,
    )

    return CalendarAnalytics(
        upcoming_events=len(upcoming),
        today_events=len(today),
        week_events=len(week),
        free_slots=free_slots,
    )


def greeting_for(value: datetime) -> str:
    if value.hour < 12:
        return "Good morning"
    if value.hour < 18:
        return "Good afternoon"
    return "Good evening"


def _clock(value: datetime, tz: tzinfo | None) -> str:
    # "9:05 AM"
    return to_local(value, tz).strftime("%I:%M %p").lstrip("0")


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def tasks_due_on_day(
    tasks: Sequence[Task],
    *,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> list[Task]:
    start, end = day_window(resolve_now(now, tz))
    return [t for t in tasks if t.due_date is not None and start <= to_local(t.due_date, tz) < end]


def dashboard_insights(
    *, urgent: int, today_meetings: int, unread: int, completed_tasks: int
) -> list[str]:
    insights: list[str] = []
    if urgent > URGENT_INSIGHT_THRESHOLD:
        insights.append(f"You have {urgent} urgent emails that need attention")
    if today_meetings > 0:
        insights.append(f"You have {_plural(today_meetings, 'meeting')} scheduled today")
    if unread > UNREAD_INSIGHT_THRESHOLD:
        insights.append(f"Your inbox has {unread} unread emails")
    if completed_tasks > 0:
        insights.append(
            f"Great job! You've completed {_plural(completed_tasks, 'task')} recently"
        )
    return insights or [ALL_CAUGHT_UP]


def build_dashboard(
    emails: Sequence[Email],
    events: Sequence[CalendarEvent],
    tasks: Sequence[Task],
    *,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> DashboardData:
    """Assemble the dashboard.

    ``emails`` are expected newest first and ``tasks`` in priority order, as
    the repository returns them.
    """

    current = resolve_now(now, tz)
    urgent = [e for e in emails if e.is_urgent]
    unread = [e for e in emails if not e.is_read]
    today = sorted(
        events_on_day(events, now=current, tz=tz), key=lambda e: to_local(e.start_time, tz)
    )
    pending = [t for t in tasks if t.is_open]
    high_pending = [t for t in pending if t.priority == TaskPriority.HIGH]
    completed = [t for t in tasks if t.status == TaskStatus.COMPLETED]

    items: list[UrgentItem] = []
    for email in urgent[:DASHBOARD_URGENT_EMAILS]:
        items.append(
            UrgentItem(
                id=email.id,
                type=ItemType.EMAIL,
                title=email.subject,
                description=email.snippet or "",
                priority=TaskPriority.HIGH,
                sender=email.sender,
                quick_actions=list(EMAIL_ACTIONS),
            )
        )
    for event in today[:DASHBOARD_TODAY_EVENTS]:
        starts = _clock(event.start_time, tz)
        items.append(
            UrgentItem(
                id=event.id,
                type=ItemType.EVENT,
                title=event.summary,
                description=f"{starts} - {event.location or 'No location'}",
                priority=TaskPriority.MEDIUM,
                time=starts,
                quick_actions=list(EVENT_ACTIONS),
            )
        )
    for task in high_pending[:DASHBOARD_URGENT_TASKS]:
        items.append(
            UrgentItem(
                id=task.id,
                type=ItemType.TASK,
                title=task.title,
                description=task.description or "",
                priority=TaskPriority.HIGH,
                quick_actions=list(TASK_ACTIONS),
            )
        )

    return DashboardData(
        greeting=greeting_for(current),
        date=f"{current:%A, %B} {current.day}, {current.year}",
        summary=DashboardSummary(
            urgent_emails=len(urgent),
            unread_emails=len(unread),
            today_meetings=len(today),
            pending_tasks=len(pending),
        ),
        urgent_items=items,
        upcoming_events=[
            DashboardEvent(
                id=e.id,
                title=e.summary,
                start_time=_clock(e.start_time, tz),
                end_time=_clock(e.end_time, tz),
                location=e.location,
                attendees=list(e.attendees),
            )
            for e in today
        ],
        top_priority_tasks=high_pending[:DASHBOARD_TOP_TASKS],
        insights=dashboard_insights(
            urgent=len(urgent),
            today_meetings=len(today),
            unread=len(unread),
            completed_tasks=len(completed),
        ),
    )
