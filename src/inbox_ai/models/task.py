"""Task models.

Tasks are local to Inbox AI; nothing is synced to or from Google.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class TaskPriority(str, Enum):
    """Task priority, also used to rank dashboard items."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TaskStatus(str, Enum):
    """Task lifecycle state."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# Sort rank for task listings; lower comes first.
PRIORITY_RANK = {TaskPriority.HIGH: 0, TaskPriority.MEDIUM: 1, TaskPriority.LOW: 2}


class TaskCreate(BaseModel):
    """Task fields supplied by the caller."""

    title: str = Field(min_length=1, description="Short task title")
    description: Optional[str] = Field(default=None, description="Task details")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Lifecycle state")
    due_date: Optional[datetime] = Field(default=None, description="When the task is due")
    category: Optional[str] = Field(default=None, description="Free-form grouping such as work")
    related_email_id: Optional[str] = Field(default=None, description="Linked stored email id")
    related_event_id: Optional[str] = Field(default=None, description="Linked stored event id")


class Task(TaskCreate):
    """A stored task."""

    id: str = Field(description="Storage-assigned identifier")
    created_at: datetime = Field(description="Server-assigned creation time")
    completed_at: Optional[datetime] = Field(
        default=None, description="Set once, when the task first becomes completed"
    )

    @property
    def is_open(self) -> bool:
        return self.status != TaskStatus.COMPLETED
