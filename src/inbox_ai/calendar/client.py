"""Google Calendar API client.

Mirrors :class:`inbox_ai.gmail.client.GmailClient`: synchronous SDK calls run in
a worker thread and a fresh service is built per call.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import structlog

from inbox_ai.config import Settings
from inbox_ai.exceptions import AuthenticationError, CalendarAPIError
from inbox_ai.google.oauth import GoogleOAuth

logger = structlog.get_logger()


def _rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.astimezone()
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class CalendarClient:
    """Calendar API client for event listing and editing."""

    def __init__(
        self,
        settings: Settings | None = None,
        oauth: GoogleOAuth | None = None,
        service: Any | None = None,
    ) -> None:
        from inbox_ai.config import get_settings

        self.settings = settings or get_settings()
        self.oauth = oauth
        self._service = service
        logger.info("calendar_client_initialized", calendar_id=self.settings.calendar_id)

    async def list_events(
        self,
        time_min: datetime,
        time_max: datetime,
        max_results: int | None = None,
    ) -> list[dict[str, Any]]:
        """List single (expanded) events between two instants, ordered by start.

        Args:
            time_min: Inclusive lower bound.
            time_max: Exclusive upper bound.
            max_results: Maximum number of events. Defaults to
                ``calendar_sync_max_results``.

        Returns:
            Raw Calendar API event resources.

        Raises:
            AuthenticationError: If no Google account is signed in.
            CalendarAPIError: If the API request fails.
        """

        service = self._get_service()
        resolved_max = max_results or self.settings.calendar_sync_max_results
        logger.info(
            "listing_events",
            time_min=time_min.isoformat(),
            time_max=time_max.isoformat(),
            max_results=resolved_max,
        )

        response = await self._call(
            "calendar_list_events_failed",
            lambda: service.events()
            .list(
                calendarId=self.settings.calendar_id,
                timeMin=_rfc3339(time_min),
                timeMax=_rfc3339(time_max),
                maxResults=resolved_max,
                singleEvents=True,
                orderBy="startTime",
            )
            .execute(),
        )
        return list(response.get("items", []) or [])

    async def insert_event(self, body: dict[str, Any]) -> dict[str, Any]:
        service = self._get_service()
        logger.info("inserting_event", summary=body.get("summary"))

        return await self._call(
            "calendar_insert_event_failed",
            lambda: service.events()
            .insert(calendarId=self.settings.calendar_id, body=body)
            .execute(),
        )

    async def patch_event(self, event_id: str, body: dict[str, Any]) -> dict[str, Any]:
        service = self._get_service()
        logger.info("patching_event", event_id=event_id, fields=sorted(body))

        return await self._call(
            "calendar_patch_event_failed",
            lambda: service.events()
            .patch(calendarId=self.settings.calendar_id, eventId=event_id, body=body)
            .execute(),
            event_id=event_id,
        )

    async def delete_event(self, event_id: str) -> None:
        service = self._get_service()
        logger.info("deleting_event", event_id=event_id)

        await self._call(
            "calendar_delete_event_failed",
            lambda: service.events()
            .delete(calendarId=self.settings.calendar_id, eventId=event_id)
            .execute(),
            event_id=event_id,
        )

    async def _call(
        self, failure_event: str, func: Callable[[], Any], **context: Any
    ) -> Any:
        try:
            result = await asyncio.to_thread(func)
        except Exception as exc:  # noqa: BLE001
            logger.exception(failure_event, error=str(exc), **context)
            raise CalendarAPIError(str(exc)) from exc
        # events.delete returns an empty body.
        return result if result is not None else {}

    def _get_service(self) -> Any:
        if self._service is not None:
            return self._service
        if self.oauth is None:
            raise AuthenticationError(
                "Google Calendar not authenticated. Please authenticate first."
            )

        from googleapiclient.discovery import build

        return build("calendar", "v3", credentials=self.oauth.credentials(), cache_discovery=False)
