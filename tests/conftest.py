"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import base64
from datetime import datetime
from types import SimpleNamespace
from typing import Any

import pytest


def encode_body(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


class FakeRequest:
    """Stand-in for a googleapiclient HttpRequest."""

    def __init__(self, result: Any = None, error: Exception | None = None) -> None:
        self._result = result
        self._error = error

    def execute(self) -> Any:
        if self._error is not None:
            raise self._error
        return self._result


class FakeGmailMessages:
    def __init__(self, messages: dict[str, dict[str, Any]]) -> None:
        self.messages = messages
        self.failing_ids: set[str] = set()
        self.list_error: Exception | None = None
        self.sent: list[dict[str, Any]] = []
        self.modified: list[tuple[str, dict[str, Any]]] = []
        self.trashed: list[str] = []

    def list(self, userId: str, maxResults: int, pageToken: str | None = None) -> FakeRequest:
        refs = [{"id": mid, "threadId": m.get("threadId", mid)} for mid, m in self.messages.items()]
        return FakeRequest({"messages": refs[:maxResults]}, self.list_error)

    def get(self, userId: str, id: str, format: str = "full") -> FakeRequest:
        if id in self.failing_ids:
            return FakeRequest(error=RuntimeError(f"cannot fetch {id}"))
        return FakeRequest(self.messages[id])

    def send(self, userId: str, body: dict[str, Any]) -> FakeRequest:
        self.sent.append(body)
        return FakeRequest({"id": f"sent-{len(self.sent)}", "labelIds": ["SENT"]})

    def modify(self, userId: str, id: str, body: dict[str, Any]) -> FakeRequest:
        self.modified.append((id, body))
        return FakeRequest({"id": id})

    def trash(self, userId: str, id: str) -> FakeRequest:
        self.trashed.append(id)
        return FakeRequest({"id": id, "labelIds": ["TRASH"]})


class FakeGmailService:
    """Mimics ``build("gmail", "v1").users().messages()``."""

    def __init__(self, messages: dict[str, dict[str, Any]]) -> None:
        self._messages = FakeGmailMessages(messages)

    def users(self) -> FakeGmailService:
        return self

    def messages(self) -> FakeGmailMessages:
        return self._messages


class FakeCalendarEvents:
    def __init__(self, items: list[dict[str, Any]]) -> None:
        self.items = items
        self.error: Exception | None = None
        self.list_calls: list[dict[str, Any]] = []
        self.inserted: list[dict[str, Any]] = []
        self.patched: list[tuple[str, dict[str, Any]]] = []
        self.deleted: list[str] = []

    def list(self, **kwargs: Any) -> FakeRequest:
        self.list_calls.append(kwargs)
        return FakeRequest({"items": self.items[: kwargs.get("maxResults", 250)]}, self.error)

    def insert(self, calendarId: str, body: dict[str, Any]) -> FakeRequest:
        self.inserted.append(body)
        created = {"id": f"created-{len(self.inserted)}", "status": "confirmed", **body}
        return FakeRequest(created, self.error)

    def patch(self, calendarId: str, eventId: str, body: dict[str, Any]) -> FakeRequest:
        self.patched.append((eventId, body))
        current = next((i for i in self.items if i.get("id") == eventId), {"id": eventId})
        return FakeRequest({**current, **body}, self.error)

    def delete(self, calendarId: str, eventId: str) -> FakeRequest:
        self.deleted.append(eventId)
        return FakeRequest(None, self.error)


class FakeCalendarService:
    """Mimics ``build("calendar", "v3").events()``."""

    def __init__(self, items: list[dict[str, Any]]) -> None:
        self._events = FakeCalendarEvents(items)

    def events(self) -> FakeCalendarEvents:
        return self._events


class FakeGenerativeModel:
    """Mimics ``google.generativeai.GenerativeModel``; replies are queued by the test."""

    def __init__(self, owner: FakeGemini, model_name: str, system_instruction: str | None) -> None:
        self._owner = owner
        self.model_name = model_name
        self.system_instruction = system_instruction

    def generate_content(self, contents: Any, generation_config: Any = None) -> Any:
        self._owner.calls.append(
            {
                "contents": contents,
                "system_instruction": self.system_instruction,
                "generation_config": generation_config,
            }
        )
        if not self._owner.replies:
            raise RuntimeError("no reply queued")
        reply = self._owner.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(text=reply)


class FakeGemini:
    def __init__(self) -> None:
        self.replies: list[Any] = []
        self.calls: list[dict[str, Any]] = []

    def factory(self, model_name: str, system_instruction: str | None) -> FakeGenerativeModel:
        return FakeGenerativeModel(self, model_name, system_instruction)


@pytest.fixture
def mock_settings():
    """Provide mock settings for testing."""
    from inbox_ai.config import Settings

    return Settings(
        google_client_id="test-client-id",
        google_client_secret="test-client-secret",
        gemini_api_key=None,
        log_level="DEBUG",
        debug=True,
        max_retries=0,
    )


@pytest.fixture
def repository():
    """Provide an empty in-memory repository."""
    from inbox_ai.storage import InMemoryRepository

    return InMemoryRepository()


@pytest.fixture
def sample_gmail_message() -> dict[str, Any]:
    """Provide a Gmail API message in ``format=full``."""
    return {
        "id": "msg123456",
        "threadId": "thread789",
        "labelIds": ["INBOX", "UNREAD", "STARRED"],
        "payload": {
            "headers": [
                {"name": "Subject", "value": "Quarterly report review"},
                {"name": "From", "value": "Alice <alice@example.com>"},
                {"name": "To", "value": "user@example.com"},
                {"name": "Date", "value": "Mon, 01 Jan 2024 10:30:00 +0000"},
            ],
            "parts": [
                {
                    "mimeType": "text/plain",
                    "body": {
                        "data": encode_body(
                            "Hi,\nPlease review the quarterly report before Friday.\nThanks"
                        )
                    },
                },
                {"mimeType": "application/pdf", "filename": "report.pdf", "body": {}},
            ],
        },
    }


@pytest.fixture
def sample_calendar_item() -> dict[str, Any]:
    """Provide a Calendar API event resource."""
    return {
        "id": "evt-1",
        "summary": "Design review",
        "description": "Walk through the new layout",
        "location": "Room 4",
        "start": {"dateTime": "2024-01-01T10:00:00"},
        "end": {"dateTime": "2024-01-01T11:00:00"},
        "attendees": [{"email": "alice@example.com"}, {"email": "bob@example.com"}],
        "organizer": {"email": "alice@example.com"},
        "status": "confirmed",
        "colorId": "5",
    }


@pytest.fixture
def gmail_service(sample_gmail_message) -> FakeGmailService:
    return FakeGmailService({sample_gmail_message["id"]: sample_gmail_message})


@pytest.fixture
def calendar_service(sample_calendar_item) -> FakeCalendarService:
    return FakeCalendarService([sample_calendar_item])


@pytest.fixture
def gmail_client(mock_settings, gmail_service):
    from inbox_ai.gmail.client import GmailClient

    return GmailClient(mock_settings, service=gmail_service)


@pytest.fixture
def calendar_client(mock_settings, calendar_service):
    from inbox_ai.calendar.client import CalendarClient

    return CalendarClient(mock_settings, service=calendar_service)


@pytest.fixture
def fake_gemini() -> FakeGemini:
    return FakeGemini()


@pytest.fixture
def gemini_client(mock_settings, fake_gemini):
    from inbox_ai.gemini.client import GeminiClient

    return GeminiClient(mock_settings, model_factory=fake_gemini.factory, retry_delay=0)


@pytest.fixture
def make_email():
    """Return a builder for EmailCreate with overridable fields."""
    from inbox_ai.models import EmailCategory, EmailCreate

    def _make(message_id: str = "m1", **overrides: Any) -> EmailCreate:
        data: dict[str, Any] = {
            "message_id": message_id,
            "thread_id": f"t-{message_id}",
            "subject": "Project sync",
            "sender": "colleague@example.com",
            "date": datetime(2024, 1, 1, 9, 0),
            "category": EmailCategory.IMPORTANT,
        }
        data.update(overrides)
        return EmailCreate(**data)

    return _make


@pytest.fixture
def make_event():
    """Return a builder for CalendarEventCreate spanning ``start``..``end``."""
    from inbox_ai.models import CalendarEventCreate

    def _make(event_id: str, start: datetime, end: datetime, **overrides: Any) -> CalendarEventCreate:
        data: dict[str, Any] = {
            "event_id": event_id,
            "summary": f"Event {event_id}",
            "start_time": start,
            "end_time": end,
        }
        data.update(overrides)
        return CalendarEventCreate(**data)

    return _make
