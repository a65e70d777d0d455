"""Calendar event models.

End time is expected to be at or after start time. The calendar parser
clamps malformed intervals before they reach storage; the models themselves
do not reject them.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class EventStatus(str, Enum):
    """Google Calendar event status."""

    CONFIRMED = "confirmed"
    TENTATIVE = "tentative"
    CANCELLED = "cancelled"


class CalendarEventCreate(BaseModel):
    """Event fields supplied by the sync layer."""

    event_id: str = Field(description="Google Calendar event ID (natural key)")
    summary: str = Field(description="Event title")
    description: str | None = Field(default=None, description="Event description")
    location: str | None = Field(default=None, description="Event location")
    start_time: datetime = Field(description="Start timestamp")
    end_time: datetime = Field(description="End timestamp")
    attendees: list[str] = Field(default_factory=list, description="Attendee emails")
    organizer: str | None = Field(default=None, description="Organizer email")
    status: EventStatus = Field(default=EventStatus.CONFIRMED, description="Event status")
    is_all_day: bool = Field(default=False, description="Whether the event spans whole days")
    color_id: str | None = Field(default=None, description="Calendar color tag")


class CalendarEvent(CalendarEventCreate):
    """A stored calendar event."""

    id: str = Field(description="Storage-assigned identifier")
