"""Gemini LLM access."""

from .client import GeminiClient

__all__ = ["GeminiClient"]
