"""Chat assistant and the actions it can carry out."""

from .actions import (
    ActionExecutor,
    ActionResult,
    AIAction,
    CalendarAction,
    EmailModifyAction,
    SendEmailAction,
    parse_action,
)
from .assistant import ChatAssistant

__all__ = [
    "AIAction",
    "ActionExecutor",
    "ActionResult",
    "CalendarAction",
    "ChatAssistant",
    "EmailModifyAction",
    "SendEmailAction",
    "parse_action",
]
