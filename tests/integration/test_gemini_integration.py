"""Integration tests against the live Gemini API.

Set INBOX_AI_GEMINI_API_KEY to run them.
"""

import os

import pytest

from inbox_ai.config import Settings
from inbox_ai.gemini.client import GeminiClient

requires_key = pytest.mark.skipif(
    not os.environ.get("INBOX_AI_GEMINI_API_KEY"),
    reason="INBOX_AI_GEMINI_API_KEY not set",
)


@pytest.mark.integration
@requires_key
class TestGeminiIntegration:
    """Integration tests for Gemini."""

    @pytest.mark.asyncio
    async def test_generate_text(self) -> None:
        """Test a plain text round trip."""
        client = GeminiClient(Settings())

        text = await client.generate("Reply with the single word: pong")

        assert "pong" in text.lower()

    @pytest.mark.asyncio
    async def test_generate_json(self) -> None:
        """Test that JSON mode returns parseable output."""
        import json

        client = GeminiClient(Settings())

        text = await client.generate('Return {"action": null} and nothing else.', json_output=True)

        assert json.loads(text) == {"action": None}
