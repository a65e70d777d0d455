"""Gemini client implementation.

This module provides a thin async wrapper around google-generativeai.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, Optional

import structlog

from inbox_ai.config import Settings
from inbox_ai.exceptions import ConfigurationError, GeminiError
from inbox_ai.utils import retry_on_failure

logger = structlog.get_logger()

ModelFactory = Callable[[str, Optional[str]], Any]


class GeminiClient:
    """Gemini LLM client for chat, summaries and intent detection.

    The SDK is synchronous; calls run in a worker thread and are retried with
    exponential backoff before surfacing as :class:`GeminiError`.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        model_factory: Optional[ModelFactory] = None,
        retry_delay: float = 1.0,
    ) -> None:
        """Initialize Gemini client.

        Args:
            settings: Application settings. If None, uses default settings.
            model_factory: Callable ``(model_name, system_instruction)`` returning
                an object with ``generate_content``. Defaults to
                ``google.generativeai.GenerativeModel``.
            retry_delay: Initial delay between retries in seconds.
        """
        from inbox_ai.config import get_settings

        self.settings = settings or get_settings()
        self._model_factory = model_factory
        self._generate_with_retry = retry_on_failure(
            max_retries=self.settings.max_retries,
            delay=retry_delay,
        )(self._generate_once)
        logger.info(
            "gemini_client_initialized",
            model=self.settings.gemini_model,
            configured=self.is_configured,
        )

    @property
    def is_configured(self) -> bool:
        return self._model_factory is not None or bool(self.settings.gemini_api_key)

    async def generate(
        self,
        contents: str | list[dict[str, Any]],
        system_instruction: Optional[str] = None,
        json_output: bool = False,
    ) -> str:
        """Generate text with Gemini.

        Args:
            contents: A prompt string, or a list of ``{"role", "parts"}`` turns.
            system_instruction: Optional system prompt.
            json_output: Ask the model for an ``application/json`` response.

        Returns:
            The response text (may be empty).

        Raises:
            ConfigurationError: If no API key is configured.
            GeminiError: If generation fails after retries.
        """

        if not self.is_configured:
            raise ConfigurationError("Gemini API key not configured. Set INBOX_AI_GEMINI_API_KEY.")

        logger.info(
            "gemini_generate",
            model=self.settings.gemini_model,
            turns=1 if isinstance(contents, str) else len(contents),
            json_output=json_output,
        )

        try:
            return await asyncio.to_thread(
                self._generate_with_retry, contents, system_instruction, json_output
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("gemini_generate_failed", error=str(exc))
            raise GeminiError(str(exc)) from exc

    def _generate_once(
        self,
        contents: str | list[dict[str, Any]],
        system_instruction: Optional[str],
        json_output: bool,
    ) -> str:
        model = self._build_model(system_instruction)
        generation_config = {"response_mime_type": "application/json"} if json_output else None
        response = model.generate_content(contents, generation_config=generation_config)
        return (getattr(response, "text", None) or "").strip()

    def _build_model(self, system_instruction: Optional[str]) -> Any:
        if self._model_factory is not None:
            return self._model_factory(self.settings.gemini_model, system_instruction)

        # Imported lazily to keep import-time cost low and tests fast.
        import google.generativeai as genai

        genai.configure(api_key=self.settings.gemini_api_key)
        return genai.GenerativeModel(
            model_name=self.settings.gemini_model,
            system_instruction=system_instruction,
        )
