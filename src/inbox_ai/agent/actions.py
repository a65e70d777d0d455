"""Actions the assistant can carry out on the user's Google account.

Every action is applied to Google first and then mirrored into the local
repository so the dashboard reflects the change without another sync.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

import structlog
from pydantic import BaseModel, Field, TypeAdapter

from inbox_ai.calendar.client import CalendarClient
from inbox_ai.calendar.parsing import item_to_calendar_event
from inbox_ai.config import Settings
from inbox_ai.exceptions import CalendarAPIError, InboxAIError, InsufficientScopesError
from inbox_ai.gmail.client import GmailClient
from inbox_ai.google.oauth import GoogleOAuth
from inbox_ai.models import Email
from inbox_ai.storage.base import Repository

logger = structlog.get_logger()

EmailModifyType = Literal["mark_read", "mark_unread", "delete", "archive", "star", "unstar"]
CalendarActionType = Literal["create_event", "update_event", "delete_event"]

INSUFFICIENT_SCOPES_MESSAGE = (
    "Insufficient permissions. Please re-sync your Gmail and Calendar to grant all "
    "required permissions."
)

# Label changes per modify action: (add, remove).
_LABEL_CHANGES: dict[str, tuple[list[str], list[str]]] = {
    "mark_read": ([], ["UNREAD"]),
    "mark_unread": (["UNREAD"], []),
    "star": (["STARRED"], []),
    "unstar": ([], ["STARRED"]),
    "archive": ([], ["INBOX"]),
}


class SendEmailAction(BaseModel):
    """Send a new plain-text email."""

    type: Literal["send_email"] = "send_email"
    to: str = Field(min_length=1, description="Recipient address(es)")
    subject: str = Field(default="", description="Subject line")
    body: str = Field(default="", description="Plain-text body")
    cc: Optional[str] = None
    bcc: Optional[str] = None


class EmailModifyAction(BaseModel):
    """Change the state of an existing email."""

    type: EmailModifyType
    email_id: str = Field(description="Stored email id or Gmail message id")


class EventData(BaseModel):
    """Event fields for create and update; updates send only what is set."""

    summary: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    start_time: Optional[str] = Field(default=None, description="ISO 8601 start")
    end_time: Optional[str] = Field(default=None, description="ISO 8601 end")
    attendees: Optional[list[str]] = None


class CalendarAction(BaseModel):
    """Create, update or delete a calendar event."""

    type: CalendarActionType
    event_data: Optional[EventData] = None
    event_id: Optional[str] = Field(default=None, description="Google Calendar event id")


AIActionModel = Union[SendEmailAction, EmailModifyAction, CalendarAction]
AIAction = Annotated[AIActionModel, Field(discriminator="type")]

_action_adapter: TypeAdapter[Any] = TypeAdapter(AIAction)


def parse_action(data: Any) -> AIActionModel:
    """Validate a raw dict into one of the action models.

    Raises:
        pydantic.ValidationError: If ``type`` is unknown or fields are invalid.
    """

    return _action_adapter.validate_python(data)


class ActionResult(BaseModel):
    success: bool
    result: Optional[dict[str, Any]] = None
    error: Optional[str] = None


class ActionExecutor:
    """Runs assistant actions against Gmail/Calendar and the repository."""

    def __init__(
        self,
        repository: Repository,
        gmail: GmailClient,
        calendar: CalendarClient,
        oauth: Optional[GoogleOAuth] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        from inbox_ai.config import get_settings

        self.repository = repository
        self.gmail = gmail
        self.calendar = calendar
        self.oauth = oauth
        self.settings = settings or get_settings()

    async def execute(self, action: AIActionModel) -> ActionResult:
        """Execute ``action`` and report the outcome.

        Google and authentication failures are returned as unsuccessful
        results rather than raised.
        """

        logger.info("action_execute", type=action.type)
        try:
            if isinstance(action, SendEmailAction):
                return await self._send_email(action)
            if isinstance(action, EmailModifyAction):
                return await self._modify_email(action)
            return await self._calendar(action)
        except InsufficientScopesError as exc:
            if self.oauth is not None:
                self.oauth.clear()
            logger.warning("action_insufficient_scopes", type=action.type)
            return ActionResult(success=False, error=str(exc))
        except InboxAIError as exc:
            logger.warning("action_failed", type=action.type, error=str(exc))
            return ActionResult(success=False, error=str(exc) or f"Failed to execute {action.type}")

    async def _send_email(self, action: SendEmailAction) -> ActionResult:
        sent = await self.gmail.send_message(
            action.to, action.subject, action.body, cc=action.cc, bcc=action.bcc
        )
        logger.info("action_email_sent", message_id=sent.get("id"))
        return ActionResult(success=True, result={"message_id": sent.get("id")})

    async def _modify_email(self, action: EmailModifyAction) -> ActionResult:
        stored = self._find_email(action.email_id)
        message_id = stored.message_id if stored else action.email_id

        if action.type == "delete":
            await self.gmail.trash_message(message_id)
            if stored:
                self.repository.delete_email(stored.id)
            return ActionResult(success=True, result={"message_id": message_id})

        add, remove = _LABEL_CHANGES[action.type]
        await self.gmail.modify_labels(message_id, add=add, remove=remove)

        if stored:
            labels = [label for label in stored.labels if label not in remove]
            labels.extend(label for label in add if label not in labels)
            updates: dict[str, Any] = {"labels": labels}
            if action.type in ("mark_read", "mark_unread"):
                updates["is_read"] = action.type == "mark_read"
            elif action.type in ("star", "unstar"):
                updates["is_starred"] = action.type == "star"
            self.repository.update_email(stored.id, updates)
        return ActionResult(success=True, result={"message_id": message_id})

    def _find_email(self, email_id: str) -> Email | None:
        return self.repository.get_email(email_id) or self.repository.get_email_by_message_id(
            email_id
        )

    async def _calendar(self, action: CalendarAction) -> ActionResult:
        if self.oauth is not None and not self.oauth.has_required_scopes():
            raise InsufficientScopesError(INSUFFICIENT_SCOPES_MESSAGE)

        try:
            if action.type == "create_event" and action.event_data:
                return await self._create_event(action.event_data)
            if action.type == "update_event" and action.event_id and action.event_data:
                return await self._update_event(action.event_id, action.event_data)
            if action.type == "delete_event" and action.event_id:
                return await self._delete_event(action.event_id)
        except CalendarAPIError as exc:
            message = str(exc)
            if "insufficient" in message.lower() or "403" in message:
                raise InsufficientScopesError(
                    "Insufficient permissions detected. Please re-sync your account to grant "
                    "calendar access."
                ) from exc
            raise

        return ActionResult(success=False, error="Invalid action configuration")

    def _event_body(self, data: EventData) -> dict[str, Any]:
        body: dict[str, Any] = {}
        for field in ("summary", "description", "location"):
            value = getattr(data, field)
            if value:
                body[field] = value
        if data.start_time:
            body["start"] = {"dateTime": data.start_time, "timeZone": self.settings.calendar_time_zone}
        if data.end_time:
            body["end"] = {"dateTime": data.end_time, "timeZone": self.settings.calendar_time_zone}
        if data.attendees is not None:
            body["attendees"] = [{"email": email} for email in data.attendees]
        return body

    async def _create_event(self, data: EventData) -> ActionResult:
        if not (data.summary and data.start_time and data.end_time):
            return ActionResult(
                success=False, error="Creating an event needs a summary, start time and end time"
            )

        created = await self.calendar.insert_event(self._event_body(data))
        self._mirror_event(created)
        return ActionResult(success=True, result={"event_id": created.get("id")})

    async def _update_event(self, event_id: str, data: EventData) -> ActionResult:
        updated = await self.calendar.patch_event(event_id, self._event_body(data))
        self._mirror_event(updated)
        return ActionResult(success=True, result={"event_id": updated.get("id") or event_id})

    async def _delete_event(self, event_id: str) -> ActionResult:
        await self.calendar.delete_event(event_id)
        stored = self.repository.get_calendar_event_by_event_id(event_id)
        if stored:
            self.repository.delete_calendar_event(stored.id)
        return ActionResult(success=True, result={"event_id": event_id})

    def _mirror_event(self, item: dict[str, Any]) -> None:
        try:
            self.repository.create_calendar_event(item_to_calendar_event(item))
        except ValueError as exc:
            logger.warning("action_event_not_mirrored", event_id=item.get("id"), error=str(exc))
