"""Gmail API client implementation.

This module provides a client for interacting with the Gmail API.

Notes:
    The Google API client is synchronous. This project wraps those calls using
    `asyncio.to_thread` so the rest of the codebase can remain async-friendly.
    A fresh service is built per call because access tokens expire.
"""

from __future__ import annotations

import asyncio
import base64
from collections.abc import Callable
from email.message import EmailMessage
from typing import Any

import structlog

from inbox_ai.config import Settings
from inbox_ai.exceptions import AuthenticationError, GmailAPIError
from inbox_ai.google.oauth import GoogleOAuth

logger = structlog.get_logger()


def build_raw_message(
    to: str,
    subject: str,
    body: str,
    cc: str | None = None,
    bcc: str | None = None,
) -> str:
    """Encode a plain-text message the way ``users.messages.send`` expects."""

    message = EmailMessage()
    message["To"] = to
    if cc:
        message["Cc"] = cc
    if bcc:
        message["Bcc"] = bcc
    message["Subject"] = subject
    message.set_content(body)
    return base64.urlsafe_b64encode(message.as_bytes()).decode("ascii").rstrip("=")


class GmailClient:
    """Gmail API client for email operations.

    This client handles message retrieval, sending and label changes on
    behalf of the signed-in user.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        oauth: GoogleOAuth | None = None,
        service: Any | None = None,
    ) -> None:
        """Initialize Gmail client.

        Args:
            settings: Application settings. If None, uses default settings.
            oauth: Credential holder used to build API services.
            service: Prebuilt Gmail service; skips OAuth entirely when given.
        """
        from inbox_ai.config import get_settings

        self.settings = settings or get_settings()
        self.oauth = oauth
        self._service = service
        logger.info("gmail_client_initialized")

    async def list_messages(self, max_results: int | None = None) -> list[dict[str, Any]]:
        """List the most recent messages.

        Args:
            max_results: Maximum number of messages to return.

        Returns:
            List of ``{"id", "threadId"}`` dictionaries.

        Raises:
            AuthenticationError: If no Google account is signed in.
            GmailAPIError: If the API request fails.
        """

        service = self._get_service()
        resolved_max = max_results or self.settings.gmail_sync_limit
        logger.info("listing_messages", max_results=resolved_max)

        try:
            return await asyncio.to_thread(self._list_messages_sync, service, resolved_max)
        except Exception as exc:  # noqa: BLE001
            logger.exception("gmail_list_messages_failed", error=str(exc))
            raise GmailAPIError(str(exc)) from exc

    async def get_message(self, message_id: str) -> dict[str, Any]:
        """Get a full message by ID.

        Raises:
            GmailAPIError: If the API request fails.
        """

        service = self._get_service()
        logger.info("getting_message", message_id=message_id)

        return await self._call(
            "gmail_get_message_failed",
            lambda: service.users()
            .messages()
            .get(userId=self.settings.gmail_user_id, id=message_id, format="full")
            .execute(),
            message_id=message_id,
        )

    async def send_message(
        self,
        to: str,
        subject: str,
        body: str,
        cc: str | None = None,
        bcc: str | None = None,
    ) -> dict[str, Any]:
        """Send a plain-text email and return the created message resource."""

        service = self._get_service()
        raw = build_raw_message(to, subject, body, cc=cc, bcc=bcc)
        logger.info("sending_message", to=to, subject=subject, body_length=len(body))

        return await self._call(
            "gmail_send_message_failed",
            lambda: service.users()
            .messages()
            .send(userId=self.settings.gmail_user_id, body={"raw": raw})
            .execute(),
        )

    async def modify_labels(
        self,
        message_id: str,
        add: list[str] | None = None,
        remove: list[str] | None = None,
    ) -> dict[str, Any]:
        """Add and/or remove label IDs on a message."""

        service = self._get_service()
        request_body: dict[str, list[str]] = {}
        if add:
            request_body["addLabelIds"] = add
        if remove:
            request_body["removeLabelIds"] = remove
        logger.info("modifying_labels", message_id=message_id, add=add, remove=remove)

        return await self._call(
            "gmail_modify_labels_failed",
            lambda: service.users()
            .messages()
            .modify(userId=self.settings.gmail_user_id, id=message_id, body=request_body)
            .execute(),
            message_id=message_id,
        )

    async def trash_message(self, message_id: str) -> dict[str, Any]:
        """Move a message to the trash."""

        service = self._get_service()
        logger.info("trashing_message", message_id=message_id)

        return await self._call(
            "gmail_trash_message_failed",
            lambda: service.users()
            .messages()
            .trash(userId=self.settings.gmail_user_id, id=message_id)
            .execute(),
            message_id=message_id,
        )

    async def _call(
        self, failure_event: str, func: Callable[[], dict[str, Any]], **context: Any
    ) -> dict[str, Any]:
        try:
            return await asyncio.to_thread(func)
        except Exception as exc:  # noqa: BLE001
            logger.exception(failure_event, error=str(exc), **context)
            raise GmailAPIError(str(exc)) from exc

    def _get_service(self) -> Any:
        if self._service is not None:
            return self._service
        if self.oauth is None:
            raise AuthenticationError("Gmail client has no credentials. Sign in with Google first.")

        # Imported lazily to keep import-time cost low and tests fast.
        from googleapiclient.discovery import build

        # cache_discovery=False prevents writing discovery docs to disk.
        return build("gmail", "v1", credentials=self.oauth.credentials(), cache_discovery=False)

    def _list_messages_sync(self, service: Any, max_results: int) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = []

        page_token: str | None = None
        while len(messages) < max_results:
            per_page = min(500, max_results - len(messages))
            response = (
                service.users()
                .messages()
                .list(userId=self.settings.gmail_user_id, maxResults=per_page, pageToken=page_token)
                .execute()
            )
            messages.extend(response.get("messages", []) or [])
            page_token = response.get("nextPageToken")
            if page_token is None:
                break

        return messages[:max_results]
