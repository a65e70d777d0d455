"""Derived read models.

Nothing in here is persisted; every instance is recomputed from stored
emails and events on request.
"""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field


class FreeTimeSlot(BaseModel):
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    duration_minutes: int = Field(ge=0)


class CategoryBreakdown(BaseModel):
    urgent: int = 0
    important: int = 0
    promotional: int = 0
    social: int = 0
    updates: int = 0
    newsletter: int = 0


class DailyActivity(BaseModel):
    date: dt.date
    count: int


class EmailAnalytics(BaseModel):
    total_emails: int
    unread_count: int
    urgent_count: int
    category_breakdown: CategoryBreakdown
    # Oldest day first, today last.
    recent_activity: list[DailyActivity]


class CalendarAnalytics(BaseModel):
    upcoming_events: int
    today_events: int
    week_events: int
    free_slots: list[FreeTimeSlot]
