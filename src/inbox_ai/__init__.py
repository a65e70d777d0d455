"""Inbox AI - personal email and calendar assistant.

This package aggregates Gmail messages and Google Calendar events, applies
rule-based categorization, finds free time, and answers natural-language
questions through a Gemini-backed chat assistant.
"""

__version__ = "0.1.0"

from inbox_ai.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]
