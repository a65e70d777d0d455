"""Request and response bodies for the HTTP API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from inbox_ai.models import ChatMessage, ReplyTone, TaskPriority, TaskStatus


class SuccessResponse(BaseModel):
    success: bool = True


class AuthStatusResponse(BaseModel):
    authenticated: bool
    has_required_scopes: bool
    gemini_configured: bool


class EmailPatch(BaseModel):
    """Local-only flag changes for a stored email."""

    is_read: Optional[bool] = None
    is_starred: Optional[bool] = None


class TaskPatch(BaseModel):
    """Editable task fields; omitted fields are left unchanged."""

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[datetime] = None
    category: Optional[str] = None


class DraftReplyRequest(BaseModel):
    tone: ReplyTone = ReplyTone.PROFESSIONAL


class DraftReplyResponse(BaseModel):
    email_id: str
    tone: ReplyTone
    body: str


class SummaryResponse(BaseModel):
    summary: str


class ChatSendRequest(BaseModel):
    content: str = Field(description="User message text")


class ChatSendResponse(BaseModel):
    success: bool = True
    message: ChatMessage
