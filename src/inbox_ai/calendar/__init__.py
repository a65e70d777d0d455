"""Google Calendar access and event parsing."""

from .client import CalendarClient
from .parsing import item_to_calendar_event

__all__ = ["CalendarClient", "item_to_calendar_event"]
