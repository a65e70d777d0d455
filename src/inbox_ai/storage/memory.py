"""Process-memory repository.

Records live in dicts keyed by surrogate id, with a secondary index from the
natural key to the surrogate id so repeated syncs update in place. Nothing
survives a restart.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any

import structlog

from inbox_ai.intelligence.free_slots import DEFAULT_WORK_HOUR_END, DEFAULT_WORK_HOUR_START
from inbox_ai.models import (
    CalendarEvent,
    CalendarEventCreate,
    ChatMessage,
    ChatMessageCreate,
    Email,
    EmailCreate,
    Task,
    TaskCreate,
)
from inbox_ai.storage.base import Repository

logger = structlog.get_logger()


def _new_id() -> str:
    return str(uuid.uuid4())


class InMemoryRepository(Repository):
    """Dict-backed repository. Create one per app (or per test)."""

    def __init__(
        self,
        *,
        work_hour_start: int = DEFAULT_WORK_HOUR_START,
        work_hour_end: int = DEFAULT_WORK_HOUR_END,
        tz: tzinfo | None = None,
    ) -> None:
        super().__init__(work_hour_start=work_hour_start, work_hour_end=work_hour_end, tz=tz)
        self._emails: dict[str, Email] = {}
        self._email_ids: dict[str, str] = {}
        self._events: dict[str, CalendarEvent] = {}
        self._event_ids: dict[str, str] = {}
        self._chat: list[ChatMessage] = []
        self._tasks: dict[str, Task] = {}

    # Emails

    def get_emails(self) -> list[Email]:
        return self._sort_emails([e.model_copy(deep=True) for e in self._emails.values()])

    def get_email(self, email_id: str) -> Email | None:
        email = self._emails.get(email_id)
        return email.model_copy(deep=True) if email else None

    def get_email_by_message_id(self, message_id: str) -> Email | None:
        email_id = self._email_ids.get(message_id)
        return self.get_email(email_id) if email_id else None

    def create_email(self, data: EmailCreate) -> Email:
        email_id = self._email_ids.get(data.message_id)
        if email_id is None:
            email_id = _new_id()
            logger.debug("email_created", id=email_id, message_id=data.message_id)
        else:
            logger.debug("email_upserted", id=email_id, message_id=data.message_id)

        email = Email(id=email_id, **data.model_dump())
        self._store_email(email)
        return email.model_copy(deep=True)

    def update_email(self, email_id: str, updates: Mapping[str, Any]) -> Email | None:
        current = self._emails.get(email_id)
        if current is None:
            return None

        updated = self._merge(current, updates)
        self._emails[email_id] = updated
        return updated.model_copy(deep=True)

    def delete_email(self, email_id: str) -> bool:
        email = self._emails.pop(email_id, None)
        if email is None:
            return False
        self._email_ids.pop(email.message_id, None)
        return True

    def _store_email(self, email: Email) -> None:
        self._email_ids[email.message_id] = email.id
        self._emails[email.id] = email

    # Calendar events

    def get_calendar_events(self) -> list[CalendarEvent]:
        return self._sort_events([e.model_copy(deep=True) for e in self._events.values()])

    def get_calendar_event(self, record_id: str) -> CalendarEvent | None:
        event = self._events.get(record_id)
        return event.model_copy(deep=True) if event else None

    def get_calendar_event_by_event_id(self, event_id: str) -> CalendarEvent | None:
        record_id = self._event_ids.get(event_id)
        return self.get_calendar_event(record_id) if record_id else None

    def create_calendar_event(self, data: CalendarEventCreate) -> CalendarEvent:
        record_id = self._event_ids.get(data.event_id) or _new_id()
        event = CalendarEvent(id=record_id, **data.model_dump())
        self._event_ids[event.event_id] = record_id
        self._events[record_id] = event
        return event.model_copy(deep=True)

    def update_calendar_event(
        self, record_id: str, updates: Mapping[str, Any]
    ) -> CalendarEvent | None:
        current = self._events.get(record_id)
        if current is None:
            return None

        updated = self._merge(current, updates)
        self._events[record_id] = updated
        return updated.model_copy(deep=True)

    def delete_calendar_event(self, record_id: str) -> bool:
        event = self._events.pop(record_id, None)
        if event is None:
            return False
        self._event_ids.pop(event.event_id, None)
        return True

    # Tasks

    def get_tasks(self) -> list[Task]:
        return self._sort_tasks([t.model_copy(deep=True) for t in self._tasks.values()])

    def get_task(self, task_id: str) -> Task | None:
        task = self._tasks.get(task_id)
        return task.model_copy(deep=True) if task else None

    def create_task(self, data: TaskCreate) -> Task:
        task = self._new_task(_new_id(), data)
        self._tasks[task.id] = task
        logger.debug("task_created", id=task.id, priority=task.priority.value)
        return task.model_copy(deep=True)

    def update_task(self, task_id: str, updates: Mapping[str, Any]) -> Task | None:
        current = self._tasks.get(task_id)
        if current is None:
            return None

        updated = self._merge_task(current, updates)
        self._tasks[task_id] = updated
        return updated.model_copy(deep=True)

    def delete_task(self, task_id: str) -> bool:
        return self._tasks.pop(task_id, None) is not None

    # Chat

    def get_chat_messages(self) -> list[ChatMessage]:
        return [m.model_copy(deep=True) for m in self._chat]

    def create_chat_message(self, data: ChatMessageCreate) -> ChatMessage:
        timestamp = datetime.now(timezone.utc)
        if self._chat and timestamp <= self._chat[-1].timestamp:
            timestamp = self._chat[-1].timestamp + timedelta(microseconds=1)

        message = ChatMessage(id=_new_id(), timestamp=timestamp, **data.model_dump())
        self._chat.append(message)
        return message.model_copy(deep=True)

    def clear_chat_history(self) -> None:
        self._chat.clear()

    def clear_all_data(self) -> None:
        self._emails.clear()
        self._email_ids.clear()
        self._events.clear()
        self._event_ids.clear()
        self._chat.clear()
        self._tasks.clear()
        logger.info("repository_cleared", backend="memory")
