"""Pull Gmail messages and Calendar events into the repository.

Records are upserted on their Google ids, so running a sync twice leaves one
stored record per message or event.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from pydantic import BaseModel, Field

from inbox_ai.calendar.client import CalendarClient
from inbox_ai.calendar.parsing import item_to_calendar_event
from inbox_ai.config import Settings
from inbox_ai.gmail.client import GmailClient
from inbox_ai.gmail.parsing import message_to_email
from inbox_ai.models import CalendarEvent, Email
from inbox_ai.storage.base import Repository

logger = structlog.get_logger()


class EmailSyncResult(BaseModel):
    success: bool = True
    count: int = Field(description="Number of messages stored")
    emails: list[Email] = Field(default_factory=list)


class CalendarSyncResult(BaseModel):
    success: bool = True
    count: int = Field(description="Number of events stored")
    events: list[CalendarEvent] = Field(default_factory=list)


class SyncAllResult(BaseModel):
    success: bool = True
    email_count: int
    event_count: int


class SyncService:
    """Coordinates the Google clients and the repository."""

    def __init__(
        self,
        repository: Repository,
        gmail: GmailClient,
        calendar: CalendarClient,
        settings: Optional[Settings] = None,
    ) -> None:
        from inbox_ai.config import get_settings

        self.repository = repository
        self.gmail = gmail
        self.calendar = calendar
        self.settings = settings or get_settings()

    async def sync_emails(self, limit: Optional[int] = None) -> EmailSyncResult:
        """Fetch, classify and store the most recent messages.

        A message that fails to fetch or parse is logged and skipped; a failure
        to list messages propagates.
        """

        resolved_limit = limit or self.settings.gmail_sync_limit
        refs = await self.gmail.list_messages(max_results=resolved_limit)
        logger.info("email_sync_started", listed=len(refs), limit=resolved_limit)

        stored: list[Email] = []
        for ref in refs[:resolved_limit]:
            message_id = ref.get("id")
            if not message_id:
                continue
            try:
                message = await self.gmail.get_message(message_id)
                data = message_to_email(message, max_body_chars=self.settings.email_body_max_chars)
            except Exception as exc:  # noqa: BLE001
                logger.warning("email_sync_message_skipped", message_id=message_id, error=str(exc))
                continue
            stored.append(self.repository.create_email(data))

        logger.info("email_sync_completed", count=len(stored))
        return EmailSyncResult(count=len(stored), emails=stored)

    async def sync_calendar(
        self,
        days: Optional[int] = None,
        max_results: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> CalendarSyncResult:
        """Fetch and store events between now and ``days`` ahead."""

        start = now or datetime.now(timezone.utc)
        end = start + timedelta(days=days or self.settings.calendar_sync_days)
        items = await self.calendar.list_events(
            start, end, max_results=max_results or self.settings.calendar_sync_max_results
        )
        logger.info("calendar_sync_started", listed=len(items))

        stored: list[CalendarEvent] = []
        for item in items:
            try:
                data = item_to_calendar_event(item)
            except (ValueError, TypeError) as exc:
                logger.warning("calendar_sync_event_skipped", event_id=item.get("id"), error=str(exc))
                continue
            stored.append(self.repository.create_calendar_event(data))

        logger.info("calendar_sync_completed", count=len(stored))
        return CalendarSyncResult(count=len(stored), events=stored)

    async def sync_all(self) -> SyncAllResult:
        emails = await self.sync_emails()
        events = await self.sync_calendar()
        return SyncAllResult(email_count=emails.count, event_count=events.count)
