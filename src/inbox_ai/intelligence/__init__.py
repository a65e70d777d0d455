"""Rule-based intelligence: categorization, summaries and free-time search."""

from .classifier import (
    Classification,
    categorize_email,
    classify_email,
    generate_draft_response,
    is_email_urgent,
    summarize_email,
)
from .free_slots import find_free_slots, find_gaps

__all__ = [
    "Classification",
    "categorize_email",
    "classify_email",
    "find_free_slots",
    "find_gaps",
    "generate_draft_response",
    "is_email_urgent",
    "summarize_email",
]
