"""Data models for Inbox AI.

This module contains Pydantic models for data validation and serialization.
Records handed out by the storage layer are always copies; mutate stored
state only through the repository's update methods.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from inbox_ai.models.analytics import (
    CalendarAnalytics,
    CategoryBreakdown,
    DailyActivity,
    EmailAnalytics,
    FreeTimeSlot,
)
from inbox_ai.models.calendar_event import CalendarEvent, CalendarEventCreate, EventStatus
from inbox_ai.models.dashboard import (
    DashboardData,
    DashboardEvent,
    DashboardSummary,
    ItemType,
    QuickAction,
    UrgentItem,
)
from inbox_ai.models.task import PRIORITY_RANK, Task, TaskCreate, TaskPriority, TaskStatus

MAX_BODY_CHARS = 5000


class EmailCategory(str, Enum):
    """Email category enumeration."""

    URGENT = "urgent"
    IMPORTANT = "important"
    PROMOTIONAL = "promotional"
    SOCIAL = "social"
    UPDATES = "updates"
    NEWSLETTER = "newsletter"


class ChatRole(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class ReplyTone(str, Enum):
    """Tone of a drafted reply."""

    PROFESSIONAL = "professional"
    CASUAL = "casual"
    FORMAL = "formal"


class EmailCreate(BaseModel):
    """Email fields supplied by the sync layer."""

    message_id: str = Field(description="Gmail message ID (natural key)")
    thread_id: Optional[str] = Field(default=None, description="Gmail thread ID")
    subject: str = Field(description="Email subject")
    sender: str = Field(description="Raw From header")
    recipient: str = Field(default="", description="Raw To header")
    snippet: Optional[str] = Field(default=None, description="Short summary line")
    body: Optional[str] = Field(default=None, description="Plain-text body")
    date: datetime = Field(description="Email date")
    is_read: bool = Field(default=False, description="Whether the message was read")
    is_starred: bool = Field(default=False, description="Whether the message is starred")
    category: EmailCategory = Field(description="Assigned category")
    is_urgent: bool = Field(default=False, description="Urgency flag")
    labels: list[str] = Field(default_factory=list, description="Gmail label IDs")
    attachment_count: int = Field(default=0, ge=0, description="Number of attachments")

    @field_validator("body")
    @classmethod
    def _cap_body(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v[:MAX_BODY_CHARS]


class Email(EmailCreate):
    """A stored email."""

    id: str = Field(description="Storage-assigned identifier")


class ChatMessageCreate(BaseModel):
    """Chat message fields supplied by the caller."""

    role: ChatRole = Field(description="Message author")
    content: str = Field(description="Message text")
    metadata: Optional[str] = Field(
        default=None,
        description="JSON-encoded auxiliary data such as suggested follow-ups",
    )


class ChatMessage(ChatMessageCreate):
    """A stored chat message."""

    id: str = Field(description="Storage-assigned identifier")
    timestamp: datetime = Field(description="Server-assigned creation time")


class DraftResponse(BaseModel):
    """Canned reply suggestion for an email."""

    subject: str
    body: str
    tone: ReplyTone


__all__ = [
    "CalendarAnalytics",
    "CalendarEvent",
    "CalendarEventCreate",
    "CategoryBreakdown",
    "ChatMessage",
    "ChatMessageCreate",
    "ChatRole",
    "DailyActivity",
    "DashboardData",
    "DashboardEvent",
    "DashboardSummary",
    "DraftResponse",
    "Email",
    "EmailAnalytics",
    "EmailCategory",
    "EmailCreate",
    "EventStatus",
    "FreeTimeSlot",
    "ItemType",
    "MAX_BODY_CHARS",
    "PRIORITY_RANK",
    "QuickAction",
    "ReplyTone",
    "Task",
    "TaskCreate",
    "TaskPriority",
    "TaskStatus",
    "UrgentItem",
]
