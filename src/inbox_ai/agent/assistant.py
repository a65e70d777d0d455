"""Chat assistant.

This module provides the assistant behind ``/api/chat``. With a Gemini key it
answers from the user's synced data and can carry out actions; without one it
falls back to the rule-based answers in :mod:`inbox_ai.intelligence.chat_rules`.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from inbox_ai.agent.actions import ActionExecutor, ActionResult, AIActionModel, parse_action
from inbox_ai.config import Settings
from inbox_ai.exceptions import ConfigurationError, GeminiError, ValidationError
from inbox_ai.gemini.client import GeminiClient
from inbox_ai.intelligence.chat_rules import generate_suggestions, process_chat_query
from inbox_ai.intelligence.classifier import generate_draft_response
from inbox_ai.models import (
    ChatMessage,
    ChatMessageCreate,
    ChatRole,
    EmailCategory,
    ReplyTone,
)
from inbox_ai.storage.base import Repository
from inbox_ai.utils.timeutil import to_local

logger = structlog.get_logger()

SYSTEM_CONTEXT = """You are an intelligent AI assistant for "Inbox AI", a personal email and \
calendar management application. Your purpose is to help users manage their inbox, calendar, \
and improve their productivity.

Key capabilities you should help with:
- Summarizing emails and finding important messages
- Identifying urgent emails that need immediate attention
- Helping users find free time slots in their calendar
- Drafting professional email responses
- Providing insights about email patterns and calendar schedules
- Answering questions about their emails and upcoming meetings
- Suggesting ways to organize and prioritize their inbox

Be helpful, concise, and friendly. When users ask about their emails or calendar, provide \
specific, actionable insights. If you don't have access to their actual data yet (because they \
haven't synced), guide them to sync their Gmail and Calendar first."""

ACTION_PROMPT = """Decide whether this message asks you to perform an action on the user's \
account: "{message}"

Allowed actions (JSON shapes):
- {{"type": "send_email", "to": str, "subject": str, "body": str, "cc": str?, "bcc": str?}}
- {{"type": "mark_read" | "mark_unread" | "delete" | "archive" | "star" | "unstar", \
"email_id": str}}
- {{"type": "create_event", "event_data": {{"summary": str, "description": str?, \
"location": str?, "start_time": ISO 8601, "end_time": ISO 8601, "attendees": [str]?}}}}
- {{"type": "update_event", "event_id": str, "event_data": {{...fields to change}}}}
- {{"type": "delete_event", "event_id": str}}

Known emails (id, from, subject):
{emails}

Known events (event_id, summary, start):
{events}

Respond with JSON only: {{"action": <one object above>}} or {{"action": null}} when the \
message is a question or lacks the details an action needs."""

NO_RESPONSE = "I'm sorry, I couldn't generate a response. Please try again."


class ChatAssistant:
    """Answers chat messages and records the conversation in the repository."""

    def __init__(
        self,
        repository: Repository,
        gemini: Optional[GeminiClient] = None,
        executor: Optional[ActionExecutor] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        from inbox_ai.config import get_settings

        self.repository = repository
        self.gemini = gemini
        self.executor = executor
        self.settings = settings or get_settings()

    @property
    def uses_model(self) -> bool:
        return self.gemini is not None and self.gemini.is_configured

    async def respond(self, content: str) -> ChatMessage:
        """Store ``content`` as a user turn, answer it, and store the answer.

        Args:
            content: The user's message.

        Returns:
            The stored assistant message. Its ``metadata`` is a JSON object with
            ``suggestions`` and, when an action ran, ``action``.

        Raises:
            ValidationError: If ``content`` is blank.
            GeminiError: If the model fails to answer.
        """

        text = content.strip()
        if not text:
            raise ValidationError("Content is required")

        history = self.repository.get_chat_messages()
        self.repository.create_chat_message(ChatMessageCreate(role=ChatRole.USER, content=text))

        metadata: dict[str, Any] = {"suggestions": generate_suggestions(text)}

        if not self.uses_model:
            reply = process_chat_query(
                text,
                emails=self.repository.get_emails(),
                events=self.repository.get_calendar_events(),
                analytics=self.repository.get_email_analytics(),
            )
        else:
            action = await self.detect_action(text) if self.executor else None
            if action is not None and self.executor is not None:
                result = await self.executor.execute(action)
                metadata["action"] = {"type": action.type, **result.model_dump()}
                reply = _describe_action(action.type, result)
            else:
                reply = await self.generate_chat_response(text, history=history)

        logger.info("chat_replied", model=self.uses_model, action=metadata.get("action") is not None)
        return self.repository.create_chat_message(
            ChatMessageCreate(
                role=ChatRole.ASSISTANT,
                content=reply,
                metadata=json.dumps(metadata),
            )
        )

    async def generate_chat_response(
        self,
        message: str,
        include_context: bool = True,
        history: Optional[list[ChatMessage]] = None,
    ) -> str:
        """Ask Gemini for an answer with user-data context and recent turns."""

        gemini = self._require_model()
        instruction = SYSTEM_CONTEXT + (self._user_context() if include_context else "")

        turns = history if history is not None else self.repository.get_chat_messages()
        size = self.settings.chat_history_window
        window = turns[-size:] if size > 0 else []
        contents = [
            {
                "role": "user" if m.role == ChatRole.USER else "model",
                "parts": [m.content],
            }
            for m in window
        ]
        contents.append({"role": "user", "parts": [message]})

        response = await gemini.generate(contents, system_instruction=instruction)
        return response or NO_RESPONSE

    async def detect_action(self, message: str) -> Optional[AIActionModel]:
        """Return the action ``message`` asks for, or None for plain questions.

        Model failures and malformed output are logged and treated as "no action".
        """

        gemini = self._require_model()
        emails = "\n".join(
            f"- {e.id}, {e.sender}, {e.subject}" for e in self.repository.get_emails()[:20]
        )
        events = "\n".join(
            f"- {e.event_id}, {e.summary}, {e.start_time.isoformat()}"
            for e in self.repository.get_upcoming_events(10)
        )
        prompt = ACTION_PROMPT.format(
            message=message, emails=emails or "(none)", events=events or "(none)"
        )

        try:
            raw = await gemini.generate(prompt, json_output=True)
        except GeminiError as exc:
            logger.warning("action_detection_failed", error=str(exc))
            return None

        try:
            payload = json.loads(raw or "null")
        except json.JSONDecodeError:
            logger.warning("action_detection_invalid_json", response=raw[:200])
            return None

        candidate = payload.get("action") if isinstance(payload, dict) else None
        if not candidate:
            return None
        try:
            action = parse_action(candidate)
        except PydanticValidationError as exc:
            logger.warning("action_detection_rejected", error=str(exc))
            return None

        logger.info("action_detected", type=action.type)
        return action

    async def summarize_emails(self, category: EmailCategory | str | None = None) -> str:
        emails = (
            self.repository.get_emails_by_category(category)
            if category
            else self.repository.get_emails()
        )
        if not emails:
            return "No emails found to summarize."

        summaries = [
            {
                "from": e.sender,
                "subject": e.subject,
                "snippet": e.snippet or "",
                "urgent": e.is_urgent,
            }
            for e in emails[:20]
        ]
        prompt = (
            "Summarize these emails concisely, highlighting any urgent or important items:\n\n"
            + json.dumps(summaries, indent=2)
        )
        return await self._require_model().generate(prompt) or "Unable to generate summary."

    async def draft_reply(
        self, email_id: str, tone: ReplyTone = ReplyTone.PROFESSIONAL
    ) -> Optional[str]:
        """Draft a reply body for a stored email; None when the email is unknown.

        Without a model the canned category template is returned.
        """

        email = self.repository.get_email(email_id)
        if email is None:
            return None

        if not self.uses_model:
            return generate_draft_response(email).body

        prompt = (
            f"Draft a {ReplyTone(tone).value} reply to this email:\n"
            f"From: {email.sender}\n"
            f"Subject: {email.subject}\n"
            f"Body: {email.body or email.snippet}\n\n"
            "Please write a concise, appropriate response."
        )
        return await self._require_model().generate(prompt) or "Unable to generate draft."

    def _require_model(self) -> GeminiClient:
        if self.gemini is None:
            raise ConfigurationError("Gemini API key not configured. Set INBOX_AI_GEMINI_API_KEY.")
        return self.gemini

    def _user_context(self) -> str:
        analytics = self.repository.get_email_analytics()
        urgent = self.repository.get_urgent_emails()
        upcoming = self.repository.get_upcoming_events(5)

        lines = [
            "",
            "",
            "Current user context:",
            f"- Total emails: {analytics.total_emails}",
            f"- Unread emails: {analytics.unread_count}",
            f"- Urgent emails: {analytics.urgent_count}",
            f"- Upcoming events: {len(upcoming)}",
        ]
        if urgent:
            lines.append("\nMost urgent emails:")
            lines.extend(f"  - From: {e.sender}, Subject: {e.subject}" for e in urgent[:3])
        if upcoming:
            lines.append("\nUpcoming events:")
            lines.extend(
                f"  - {e.summary} at {to_local(e.start_time).strftime('%a %b %d %H:%M')}"
                for e in upcoming
            )
        return "\n".join(lines)


def _describe_action(action_type: str, result: ActionResult) -> str:
    if not result.success:
        return f"I couldn't complete that ({action_type}): {result.error}"

    messages = {
        "send_email": "Done! Your email has been sent.",
        "mark_read": "Done! I marked that email as read.",
        "mark_unread": "Done! I marked that email as unread.",
        "star": "Done! I starred that email.",
        "unstar": "Done! I removed the star from that email.",
        "archive": "Done! I archived that email.",
        "delete": "Done! I moved that email to the trash.",
        "create_event": "Done! The event is on your calendar.",
        "update_event": "Done! I updated the event.",
        "delete_event": "Done! I removed the event from your calendar.",
    }
    return messages.get(action_type, "Done!")
