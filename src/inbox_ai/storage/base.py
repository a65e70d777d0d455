"""Repository contract shared by the storage backends.

Backends implement the primitive CRUD operations; derived views (filters,
upcoming/today windows, analytics, the dashboard) are computed here from
those primitives so every backend answers them identically.

Contract:
    - ``create_*`` upserts on the natural key (Gmail message id, Calendar
      event id). Re-syncing a record keeps its surrogate ``id``. Tasks have
      no natural key; ``create_task`` always inserts.
    - ``get_*`` returns ``None`` for an unknown id, never raises.
    - ``update_*`` shallow-merges ``updates`` into the record and returns the
      new record, or ``None`` when the id is unknown. Changes to ``id`` and
      to the natural key are ignored.
    - ``delete_*`` returns whether a record existed.
    - Every returned record is a copy; mutating it does not touch storage.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import datetime, timezone, tzinfo
from typing import Any

from inbox_ai.intelligence.free_slots import DEFAULT_WORK_HOUR_END, DEFAULT_WORK_HOUR_START
from inbox_ai.models import (
    CalendarAnalytics,
    CalendarEvent,
    CalendarEventCreate,
    ChatMessage,
    ChatMessageCreate,
    DashboardData,
    Email,
    EmailAnalytics,
    EmailCategory,
    EmailCreate,
    PRIORITY_RANK,
    Task,
    TaskCreate,
    TaskPriority,
    TaskStatus,
)
from inbox_ai.storage.analytics import (
    build_dashboard,
    compute_calendar_analytics,
    compute_email_analytics,
    events_on_day,
    tasks_due_on_day,
    upcoming_events,
)
from inbox_ai.utils.timeutil import to_local

_FROZEN_FIELDS = frozenset({"id", "message_id", "event_id", "created_at", "completed_at"})


class Repository(ABC):
    """Storage for emails, calendar events, tasks and chat history."""

    def __init__(
        self,
        *,
        work_hour_start: int = DEFAULT_WORK_HOUR_START,
        work_hour_end: int = DEFAULT_WORK_HOUR_END,
        tz: tzinfo | None = None,
    ) -> None:
        self._work_hour_start = work_hour_start
        self._work_hour_end = work_hour_end
        self._tz = tz

    # Email primitives

    @abstractmethod
    def get_emails(self) -> list[Email]:
        """All emails, newest first."""

    @abstractmethod
    def get_email(self, email_id: str) -> Email | None: ...

    @abstractmethod
    def get_email_by_message_id(self, message_id: str) -> Email | None: ...

    @abstractmethod
    def create_email(self, data: EmailCreate) -> Email: ...

    @abstractmethod
    def update_email(self, email_id: str, updates: Mapping[str, Any]) -> Email | None: ...

    @abstractmethod
    def delete_email(self, email_id: str) -> bool: ...

    # Calendar primitives

    @abstractmethod
    def get_calendar_events(self) -> list[CalendarEvent]:
        """All events, earliest start first."""

    @abstractmethod
    def get_calendar_event(self, record_id: str) -> CalendarEvent | None: ...

    @abstractmethod
    def get_calendar_event_by_event_id(self, event_id: str) -> CalendarEvent | None: ...

    @abstractmethod
    def create_calendar_event(self, data: CalendarEventCreate) -> CalendarEvent: ...

    @abstractmethod
    def update_calendar_event(
        self, record_id: str, updates: Mapping[str, Any]
    ) -> CalendarEvent | None: ...

    @abstractmethod
    def delete_calendar_event(self, record_id: str) -> bool: ...

    # Chat primitives

    @abstractmethod
    def get_chat_messages(self) -> list[ChatMessage]:
        """Chat history in insertion order."""

    @abstractmethod
    def create_chat_message(self, data: ChatMessageCreate) -> ChatMessage: ...

    @abstractmethod
    def clear_chat_history(self) -> None: ...

    # Task primitives

    @abstractmethod
    def get_tasks(self) -> list[Task]:
        """All tasks, high priority first, oldest first within a priority."""

    @abstractmethod
    def get_task(self, task_id: str) -> Task | None: ...

    @abstractmethod
    def create_task(self, data: TaskCreate) -> Task: ...

    @abstractmethod
    def update_task(self, task_id: str, updates: Mapping[str, Any]) -> Task | None: ...

    @abstractmethod
    def delete_task(self, task_id: str) -> bool: ...

    @abstractmethod
    def clear_all_data(self) -> None:
        """Remove every email, event, task and chat message."""

    # Derived views

    def get_emails_by_category(self, category: EmailCategory | str) -> list[Email]:
        try:
            wanted = EmailCategory(category)
        except ValueError:
            return []
        return [e for e in self.get_emails() if e.category == wanted]

    def get_urgent_emails(self) -> list[Email]:
        return [e for e in self.get_emails() if e.is_urgent]

    def get_unread_emails(self) -> list[Email]:
        return [e for e in self.get_emails() if not e.is_read]

    def get_upcoming_events(
        self, limit: int = 10, *, now: datetime | None = None
    ) -> list[CalendarEvent]:
        return upcoming_events(self.get_calendar_events(), limit=limit, now=now, tz=self._tz)

    def get_today_events(self, *, now: datetime | None = None) -> list[CalendarEvent]:
        return events_on_day(self.get_calendar_events(), now=now, tz=self._tz)

    def get_email_analytics(self, *, now: datetime | None = None) -> EmailAnalytics:
        return compute_email_analytics(self.get_emails(), now=now, tz=self._tz)

    def get_calendar_analytics(self, *, now: datetime | None = None) -> CalendarAnalytics:
        return compute_calendar_analytics(
            self.get_calendar_events(),
            now=now,
            work_hour_start=self._work_hour_start,
            work_hour_end=self._work_hour_end,
            tz=self._tz,
        )

    def get_pending_tasks(self) -> list[Task]:
        return [t for t in self.get_tasks() if t.is_open]

    def get_tasks_by_priority(self, priority: TaskPriority | str) -> list[Task]:
        try:
            wanted = TaskPriority(priority)
        except ValueError:
            return []
        return [t for t in self.get_tasks() if t.priority == wanted]

    def get_tasks_due_today(self, *, now: datetime | None = None) -> list[Task]:
        return tasks_due_on_day(self.get_tasks(), now=now, tz=self._tz)

    def get_dashboard_data(self, *, now: datetime | None = None) -> DashboardData:
        return build_dashboard(
            self.get_emails(),
            self.get_calendar_events(),
            self.get_tasks(),
            now=now,
            tz=self._tz,
        )

    # Helpers for backends

    def _sort_emails(self, emails: list[Email]) -> list[Email]:
        return sorted(emails, key=lambda e: to_local(e.date, self._tz), reverse=True)

    def _sort_events(self, events: list[CalendarEvent]) -> list[CalendarEvent]:
        return sorted(events, key=lambda e: to_local(e.start_time, self._tz))

    @staticmethod
    def _merge(record: Any, updates: Mapping[str, Any]) -> Any:
        """Validate ``record`` with ``updates`` applied.

        The surrogate id, the natural key and server-assigned timestamps never
        change through an update.
        """

        data = record.model_dump()
        data.update({k: v for k, v in updates.items() if k not in _FROZEN_FIELDS})
        return type(record).model_validate(data)

    def _sort_tasks(self, tasks: list[Task]) -> list[Task]:
        return sorted(tasks, key=lambda t: (PRIORITY_RANK[t.priority], t.created_at))

    @staticmethod
    def _new_task(task_id: str, data: TaskCreate) -> Task:
        created = datetime.now(timezone.utc)
        completed = created if data.status == TaskStatus.COMPLETED else None
        return Task(id=task_id, created_at=created, completed_at=completed, **data.model_dump())

    @classmethod
    def _merge_task(cls, task: Task, updates: Mapping[str, Any]) -> Task:
        """Apply ``updates``; ``completed_at`` is stamped the first time the task completes."""

        updated = cls._merge(task, updates)
        if updated.status == TaskStatus.COMPLETED and task.completed_at is None:
            updated.completed_at = datetime.now(timezone.utc)
        return updated
