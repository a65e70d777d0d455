"""SQLite-backed repository.

Durable alternative to the in-memory store, selected with
``INBOX_AI_DATABASE_PATH``. Natural keys carry UNIQUE constraints and writes
use ``ON CONFLICT ... DO UPDATE`` so repeated syncs update rows in place.
"""

from __future__ import annotations

import json
import sqlite3
import uuid
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone, tzinfo
from pathlib import Path
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


_SCHEMA_VERSION = 2

_EMAIL_COLUMNS = (
    "id",
    "message_id",
    "thread_id",
    "subject",
    "sender",
    "recipient",
    "snippet",
    "body",
    "date_iso",
    "is_read",
    "is_starred",
    "category",
    "is_urgent",
    "labels_json",
    "attachment_count",
)

_EVENT_COLUMNS = (
    "id",
    "event_id",
    "summary",
    "description",
    "location",
    "start_iso",
    "end_iso",
    "attendees_json",
    "organizer",
    "status",
    "is_all_day",
    "color_id",
)

_TASK_COLUMNS = (
    "id",
    "title",
    "description",
    "priority",
    "status",
    "due_iso",
    "category",
    "related_email_id",
    "related_event_id",
    "created_iso",
    "completed_iso",
)


def _upsert_sql(table: str, columns: tuple[str, ...], natural_key: str) -> str:
    placeholders = ", ".join(f":{c}" for c in columns)
    assignments = ",\n    ".join(
        f"{c}=excluded.{c}" for c in columns if c not in ("id", natural_key)
    )
    return (
        f"INSERT INTO {table} ({', '.join(columns)})\n"
        f"VALUES ({placeholders})\n"
        f"ON CONFLICT({natural_key}) DO UPDATE SET\n    {assignments}"
    )


def _update_sql(table: str, columns: tuple[str, ...]) -> str:
    assignments = ", ".join(f"{c}=:{c}" for c in columns if c != "id")
    return f"UPDATE {table} SET {assignments} WHERE id = :id"


_EMAIL_UPSERT = _upsert_sql("emails", _EMAIL_COLUMNS, "message_id")
_EMAIL_UPDATE = _update_sql("emails", _EMAIL_COLUMNS)
_EVENT_UPSERT = _upsert_sql("calendar_events", _EVENT_COLUMNS, "event_id")
_EVENT_UPDATE = _update_sql("calendar_events", _EVENT_COLUMNS)
_TASK_INSERT = (
    f"INSERT INTO tasks ({', '.join(_TASK_COLUMNS)})\n"
    f"VALUES ({', '.join(':' + c for c in _TASK_COLUMNS)})"
)
_TASK_UPDATE = _update_sql("tasks", _TASK_COLUMNS)


class SqliteRepository(Repository):
    """Repository persisting records to a local SQLite file."""

    def __init__(
        self,
        db_path: Path,
        *,
        work_hour_start: int = DEFAULT_WORK_HOUR_START,
        work_hour_end: int = DEFAULT_WORK_HOUR_END,
        tz: tzinfo | None = None,
    ) -> None:
        """Create a repository.

        Args:
            db_path: Path to the SQLite database file.
            work_hour_start: First hour of the analytics work window.
            work_hour_end: Closing hour of the analytics work window.
            tz: Zone used for day bucketing; server local when None.
        """

        super().__init__(work_hour_start=work_hour_start, work_hour_end=work_hour_end, tz=tz)
        self._db_path = db_path

    def initialize(self) -> None:
        """Create the schema, or upgrade an older one in place."""

        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        with self._connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS _schema_meta (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );
                """
            )

            current_version = self._get_schema_version(conn)
            if current_version is None:
                self._create_schema_v1(conn)
                self._migrate_v1_to_v2(conn)
                self._set_schema_version(conn, _SCHEMA_VERSION)
                conn.commit()
                logger.info("sqlite_schema_created", version=_SCHEMA_VERSION, path=str(self._db_path))
                return

            if current_version == 1:
                self._migrate_v1_to_v2(conn)
                self._set_schema_version(conn, 2)
                conn.commit()
                logger.info("sqlite_schema_migrated", version=2, path=str(self._db_path))
                current_version = 2

            if current_version != _SCHEMA_VERSION:
                raise RuntimeError(
                    f"Unsupported schema version {current_version}; expected {_SCHEMA_VERSION}"
                )

    # Emails

    def get_emails(self) -> list[Email]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM emails").fetchall()
        return self._sort_emails([self._row_to_email(r) for r in rows])

    def get_email(self, email_id: str) -> Email | None:
        return self._fetch_email("id", email_id)

    def get_email_by_message_id(self, message_id: str) -> Email | None:
        return self._fetch_email("message_id", message_id)

    def create_email(self, data: EmailCreate) -> Email:
        email = Email(id=str(uuid.uuid4()), **data.model_dump())
        with self._connect() as conn:
            conn.execute(_EMAIL_UPSERT, self._email_params(email))
            conn.commit()

        stored = self.get_email_by_message_id(data.message_id)
        assert stored is not None
        return stored

    def update_email(self, email_id: str, updates: Mapping[str, Any]) -> Email | None:
        current = self.get_email(email_id)
        if current is None:
            return None

        updated = self._merge(current, updates)
        with self._connect() as conn:
            conn.execute(_EMAIL_UPDATE, self._email_params(updated))
            conn.commit()
        return updated

    def delete_email(self, email_id: str) -> bool:
        return self._delete("emails", email_id)

    # Calendar events

    def get_calendar_events(self) -> list[CalendarEvent]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM calendar_events").fetchall()
        return self._sort_events([self._row_to_event(r) for r in rows])

    def get_calendar_event(self, record_id: str) -> CalendarEvent | None:
        return self._fetch_event("id", record_id)

    def get_calendar_event_by_event_id(self, event_id: str) -> CalendarEvent | None:
        return self._fetch_event("event_id", event_id)

    def create_calendar_event(self, data: CalendarEventCreate) -> CalendarEvent:
        event = CalendarEvent(id=str(uuid.uuid4()), **data.model_dump())
        with self._connect() as conn:
            conn.execute(_EVENT_UPSERT, self._event_params(event))
            conn.commit()

        stored = self.get_calendar_event_by_event_id(data.event_id)
        assert stored is not None
        return stored

    def update_calendar_event(
        self, record_id: str, updates: Mapping[str, Any]
    ) -> CalendarEvent | None:
        current = self.get_calendar_event(record_id)
        if current is None:
            return None

        updated = self._merge(current, updates)
        with self._connect() as conn:
            conn.execute(_EVENT_UPDATE, self._event_params(updated))
            conn.commit()
        return updated

    def delete_calendar_event(self, record_id: str) -> bool:
        return self._delete("calendar_events", record_id)

    # Tasks

    def get_tasks(self) -> list[Task]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM tasks").fetchall()
        return self._sort_tasks([self._row_to_task(r) for r in rows])

    def get_task(self, task_id: str) -> Task | None:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM tasks WHERE id = ?", (task_id,)).fetchone()
        return self._row_to_task(row) if row else None

    def create_task(self, data: TaskCreate) -> Task:
        task = self._new_task(str(uuid.uuid4()), data)
        with self._connect() as conn:
            conn.execute(_TASK_INSERT, self._task_params(task))
            conn.commit()
        logger.debug("task_created", id=task.id, priority=task.priority.value)
        return task

    def update_task(self, task_id: str, updates: Mapping[str, Any]) -> Task | None:
        current = self.get_task(task_id)
        if current is None:
            return None

        updated = self._merge_task(current, updates)
        with self._connect() as conn:
            conn.execute(_TASK_UPDATE, self._task_params(updated))
            conn.commit()
        return updated

    def delete_task(self, task_id: str) -> bool:
        return self._delete("tasks", task_id)

    # Chat

    def get_chat_messages(self) -> list[ChatMessage]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM chat_messages ORDER BY seq").fetchall()
        return [self._row_to_chat(r) for r in rows]

    def create_chat_message(self, data: ChatMessageCreate) -> ChatMessage:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT timestamp_iso FROM chat_messages ORDER BY seq DESC LIMIT 1"
            ).fetchone()

            timestamp = datetime.now(timezone.utc)
            if row is not None:
                last = datetime.fromisoformat(row["timestamp_iso"])
                if timestamp <= last:
                    timestamp = last + timedelta(microseconds=1)

            message = ChatMessage(id=str(uuid.uuid4()), timestamp=timestamp, **data.model_dump())
            conn.execute(
                """
                INSERT INTO chat_messages (id, role, content, timestamp_iso, metadata)
                VALUES (:id, :role, :content, :timestamp_iso, :metadata)
                """,
                {
                    "id": message.id,
                    "role": message.role.value,
                    "content": message.content,
                    "timestamp_iso": message.timestamp.isoformat(),
                    "metadata": message.metadata,
                },
            )
            conn.commit()
        return message

    def clear_chat_history(self) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM chat_messages")
            conn.commit()

    def clear_all_data(self) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM emails")
            conn.execute("DELETE FROM calendar_events")
            conn.execute("DELETE FROM chat_messages")
            conn.execute("DELETE FROM tasks")
            conn.commit()
        logger.info("repository_cleared", backend="sqlite")

    # Internals

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self._db_path)
        try:
            conn.row_factory = sqlite3.Row
            yield conn
        finally:
            conn.close()

    def _get_schema_version(self, conn: sqlite3.Connection) -> int | None:
        row = conn.execute(
            "SELECT value FROM _schema_meta WHERE key = 'schema_version'"
        ).fetchone()
        if row is None:
            return None
        return int(row[0])

    def _set_schema_version(self, conn: sqlite3.Connection, version: int) -> None:
        conn.execute(
            "INSERT OR REPLACE INTO _schema_meta(key, value) VALUES('schema_version', ?)",
            (str(version),),
        )

    def _create_schema_v1(self, conn: sqlite3.Connection) -> None:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS emails (
                id TEXT PRIMARY KEY,
                message_id TEXT NOT NULL UNIQUE,
                thread_id TEXT,
                subject TEXT NOT NULL,
                sender TEXT NOT NULL,
                recipient TEXT NOT NULL,
                snippet TEXT,
                body TEXT,
                date_iso TEXT NOT NULL,
                is_read INTEGER NOT NULL,
                is_starred INTEGER NOT NULL,
                category TEXT NOT NULL,
                is_urgent INTEGER NOT NULL,
                labels_json TEXT NOT NULL,
                attachment_count INTEGER NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_emails_category ON emails(category);

            CREATE TABLE IF NOT EXISTS calendar_events (
                id TEXT PRIMARY KEY,
                event_id TEXT NOT NULL UNIQUE,
                summary TEXT NOT NULL,
                description TEXT,
                location TEXT,
                start_iso TEXT NOT NULL,
                end_iso TEXT NOT NULL,
                attendees_json TEXT NOT NULL,
                organizer TEXT,
                status TEXT NOT NULL,
                is_all_day INTEGER NOT NULL,
                color_id TEXT
            );

            CREATE TABLE IF NOT EXISTS chat_messages (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                role TEXT NOT NULL,
                content TEXT NOT NULL,
                timestamp_iso TEXT NOT NULL,
                metadata TEXT
            );
            """
        )

    def _migrate_v1_to_v2(self, conn: sqlite3.Connection) -> None:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS tasks (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                description TEXT,
                priority TEXT NOT NULL,
                status TEXT NOT NULL,
                due_iso TEXT,
                category TEXT,
                related_email_id TEXT,
                related_event_id TEXT,
                created_iso TEXT NOT NULL,
                completed_iso TEXT
            );

            CREATE INDEX IF NOT EXISTS idx_tasks_status ON tasks(status);
            """
        )

    def _fetch_email(self, column: str, value: str) -> Email | None:
        with self._connect() as conn:
            row = conn.execute(f"SELECT * FROM emails WHERE {column} = ?", (value,)).fetchone()
        return self._row_to_email(row) if row else None

    def _fetch_event(self, column: str, value: str) -> CalendarEvent | None:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT * FROM calendar_events WHERE {column} = ?", (value,)
            ).fetchone()
        return self._row_to_event(row) if row else None

    def _delete(self, table: str, record_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(f"DELETE FROM {table} WHERE id = ?", (record_id,))
            conn.commit()
        return cursor.rowcount > 0

    @staticmethod
    def _email_params(email: Email) -> dict[str, Any]:
        return {
            "id": email.id,
            "message_id": email.message_id,
            "thread_id": email.thread_id,
            "subject": email.subject,
            "sender": email.sender,
            "recipient": email.recipient,
            "snippet": email.snippet,
            "body": email.body,
            "date_iso": email.date.isoformat(),
            "is_read": 1 if email.is_read else 0,
            "is_starred": 1 if email.is_starred else 0,
            "category": email.category.value,
            "is_urgent": 1 if email.is_urgent else 0,
            "labels_json": json.dumps(email.labels),
            "attachment_count": email.attachment_count,
        }

    @staticmethod
    def _event_params(event: CalendarEvent) -> dict[str, Any]:
        return {
            "id": event.id,
            "event_id": event.event_id,
            "summary": event.summary,
            "description": event.description,
            "location": event.location,
            "start_iso": event.start_time.isoformat(),
            "end_iso": event.end_time.isoformat(),
            "attendees_json": json.dumps(event.attendees),
            "organizer": event.organizer,
            "status": event.status.value,
            "is_all_day": 1 if event.is_all_day else 0,
            "color_id": event.color_id,
        }

    @staticmethod
    def _row_to_email(row: sqlite3.Row) -> Email:
        return Email(
            id=row["id"],
            message_id=row["message_id"],
            thread_id=row["thread_id"],
            subject=row["subject"],
            sender=row["sender"],
            recipient=row["recipient"],
            snippet=row["snippet"],
            body=row["body"],
            date=datetime.fromisoformat(row["date_iso"]),
            is_read=bool(row["is_read"]),
            is_starred=bool(row["is_starred"]),
            category=row["category"],
            is_urgent=bool(row["is_urgent"]),
            labels=json.loads(row["labels_json"]),
            attachment_count=row["attachment_count"],
        )

    @staticmethod
    def _row_to_event(row: sqlite3.Row) -> CalendarEvent:
        return CalendarEvent(
            id=row["id"],
            event_id=row["event_id"],
            summary=row["summary"],
            description=row["description"],
            location=row["location"],
            start_time=datetime.fromisoformat(row["start_iso"]),
            end_time=datetime.fromisoformat(row["end_iso"]),
            attendees=json.loads(row["attendees_json"]),
            organizer=row["organizer"],
            status=row["status"],
            is_all_day=bool(row["is_all_day"]),
            color_id=row["color_id"],
        )

    @staticmethod
    def _task_params(task: Task) -> dict[str, Any]:
        return {
            "id": task.id,
            "title": task.title,
            "description": task.description,
            "priority": task.priority.value,
            "status": task.status.value,
            "due_iso": task.due_date.isoformat() if task.due_date else None,
            "category": task.category,
            "related_email_id": task.related_email_id,
            "related_event_id": task.related_event_id,
            "created_iso": task.created_at.isoformat(),
            "completed_iso": task.completed_at.isoformat() if task.completed_at else None,
        }

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            priority=row["priority"],
            status=row["status"],
            due_date=datetime.fromisoformat(row["due_iso"]) if row["due_iso"] else None,
            category=row["category"],
            related_email_id=row["related_email_id"],
            related_event_id=row["related_event_id"],
            created_at=datetime.fromisoformat(row["created_iso"]),
            completed_at=(
                datetime.fromisoformat(row["completed_iso"]) if row["completed_iso"] else None
            ),
        )

    @staticmethod
    def _row_to_chat(row: sqlite3.Row) -> ChatMessage:
        return ChatMessage(
            id=row["id"],
            role=row["role"],
            content=row["content"],
            timestamp=datetime.fromisoformat(row["timestamp_iso"]),
            metadata=row["metadata"],
        )
