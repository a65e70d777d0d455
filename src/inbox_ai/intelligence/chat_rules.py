"""Rule-based chat answers.

Used when no Gemini API key is configured, and for the follow-up prompt
suggestions attached to every assistant reply.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from inbox_ai.intelligence.free_slots import find_free_slots
from inbox_ai.models import CalendarEvent, Email, EmailAnalytics
from inbox_ai.utils.timeutil import day_window, resolve_now, to_local

HELP_TEXT = (
    "I can help you with:\n"
    "• Summarizing your emails\n"
    "• Finding urgent or unread messages\n"
    "• Checking your calendar and meetings\n"
    "• Finding free time slots\n"
    "• Viewing analytics and insights\n\n"
    "What would you like to know?"
)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def _has_any(text: str, words: tuple[str, ...]) -> bool:
    return any(w in text for w in words)


def _email_answer(query: str, emails: Sequence[Email]) -> str:
    urgent = sum(1 for e in emails if e.is_urgent)
    unread = sum(1 for e in emails if not e.is_read)

    if "urgent" in query:
        advice = (
            "I recommend reviewing them as soon as possible."
            if urgent
            else "Great job staying on top of your inbox!"
        )
        return f"You have {_plural(urgent, 'urgent email')} in your inbox. {advice}"

    if "unread" in query:
        return f"You have {_plural(unread, 'unread email')} waiting for you."

    if _has_any(query, ("summarize", "summary")):
        status = (
            "You have urgent emails that need attention!"
            if urgent
            else "Your inbox is under control."
        )
        return (
            "Here's your email summary:\n"
            f"• Total emails: {len(emails)}\n"
            f"• Unread: {unread}\n"
            f"• Urgent: {urgent}\n\n{status}"
        )

    return (
        f"You have {_plural(len(emails), 'email')} in your inbox. "
        "Would you like me to help you organize or summarize them?"
    )


def _calendar_answer(query: str, events: Sequence[CalendarEvent], now: datetime) -> str:
    if "today" in query:
        start, end = day_window(now)
        today = sorted(
            (e for e in events if start <= to_local(e.start_time) < end),
            key=lambda e: to_local(e.start_time),
        )
        if not today:
            return "You have no events scheduled for today. Your calendar is clear!"
        lines = "\n".join(
            f"• {to_local(e.start_time).strftime('%H:%M')} - {e.summary}" for e in today
        )
        return f"You have {_plural(len(today), 'event')} today:\n\n{lines}"

    upcoming = [e for e in events if to_local(e.start_time) > now]

    if _has_any(query, ("free", "available")):
        slots = find_free_slots(
            [(e.start_time, e.end_time) for e in upcoming],
            duration_minutes=60,
            days_ahead=5,
            now=now,
        )
        if not slots:
            return "Your calendar is quite busy! I couldn't find many free slots in the next few days."
        lines = "\n".join(
            f"• {s.date.strftime('%a, %b %d')} at {s.start_time.strftime('%H:%M')} "
            f"({s.duration_minutes} min available)"
            for s in slots[:3]
        )
        return f"Here are your next available time slots:\n\n{lines}"

    return (
        f"You have {_plural(len(upcoming), 'upcoming event')} on your calendar. "
        "Would you like to see them or find available time slots?"
    )


def process_chat_query(
    query: str,
    *,
    emails: Sequence[Email] = (),
    events: Sequence[CalendarEvent] = (),
    analytics: EmailAnalytics | None = None,
    now: datetime | None = None,
) -> str:
    """Answer ``query`` from local data using keyword routing."""

    q = query.lower()

    if _has_any(q, ("email", "inbox", "message")):
        return _email_answer(q, emails)

    if _has_any(q, ("calendar", "meeting", "event", "schedule")):
        return _calendar_answer(q, events, resolve_now(now))

    if _has_any(q, ("analytics", "stats", "report")):
        total = analytics.total_emails if analytics else 0
        unread = analytics.unread_count if analytics else 0
        urgent = analytics.urgent_count if analytics else 0
        return (
            "Here are your email analytics:\n"
            f"• Total emails: {total}\n"
            f"• Unread: {unread}\n"
            f"• Urgent: {urgent}\n\n"
            "Check the Analytics page for detailed visualizations!"
        )

    return HELP_TEXT


def generate_suggestions(message: str) -> list[str]:
    """Follow-up prompts shown under an assistant reply."""

    m = message.lower()

    if _has_any(m, ("email", "inbox")):
        return ["Show urgent emails", "Summarize today's emails", "Find unread messages"]

    if _has_any(m, ("calendar", "meeting", "schedule")):
        return [
            "Find free time this week",
            "What meetings do I have today?",
            "Show my calendar for tomorrow",
        ]

    if _has_any(m, ("draft", "reply", "write")):
        return [
            "Draft a professional reply",
            "Help me write a follow-up",
            "Compose a thank you email",
        ]

    return ["Summarize today's emails", "Show urgent emails", "Find free time this week"]
