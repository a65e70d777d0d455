"""Dashboard read model.

Recomputed on every request from stored emails, events and tasks.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from inbox_ai.models.task import Task, TaskPriority


class ItemType(str, Enum):
    EMAIL = "email"
    EVENT = "event"
    TASK = "task"


class QuickAction(BaseModel):
    label: str
    action: str
    variant: Optional[str] = None


class UrgentItem(BaseModel):
    """One card in the "needs attention" list."""

    id: str
    type: ItemType
    title: str
    description: str = ""
    priority: TaskPriority
    sender: Optional[str] = Field(default=None, description="From header, emails only")
    time: Optional[str] = Field(default=None, description="Clock time, events only")
    quick_actions: list[QuickAction] = Field(default_factory=list)


class DashboardSummary(BaseModel):
    urgent_emails: int
    unread_emails: int
    today_meetings: int
    pending_tasks: int


class DashboardEvent(BaseModel):
    id: str
    title: str
    start_time: str
    end_time: str
    location: Optional[str] = None
    attendees: list[str] = Field(default_factory=list)


class DashboardData(BaseModel):
    greeting: str
    date: str
    summary: DashboardSummary
    urgent_items: list[UrgentItem]
    upcoming_events: list[DashboardEvent]
    top_priority_tasks: list[Task]
    insights: list[str]
