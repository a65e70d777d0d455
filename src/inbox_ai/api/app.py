"""FastAPI application factory.

Every service the routes need is built here (or injected by the caller) and
stored on ``app.state``; routes resolve them through
:mod:`inbox_ai.api.dependencies`.
"""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from inbox_ai import __version__
from inbox_ai.agent.actions import ActionExecutor
from inbox_ai.agent.assistant import ChatAssistant
from inbox_ai.api.routes import (
    actions_router,
    analytics_router,
    auth_router,
    calendar_router,
    chat_router,
    dashboard_router,
    emails_router,
    sync_router,
    tasks_router,
)
from inbox_ai.calendar.client import CalendarClient
from inbox_ai.config import Settings, get_settings
from inbox_ai.exceptions import (
    AuthenticationError,
    ConfigurationError,
    InboxAIError,
    ValidationError,
)
from inbox_ai.gemini.client import GeminiClient
from inbox_ai.gmail.client import GmailClient
from inbox_ai.google.oauth import GoogleOAuth
from inbox_ai.storage import Repository, create_repository
from inbox_ai.sync import SyncService
from inbox_ai.utils import configure_logging

logger = structlog.get_logger()


def _status_for(exc: InboxAIError) -> int:
    if isinstance(exc, AuthenticationError):
        return 401
    if isinstance(exc, ConfigurationError):
        return 503
    if isinstance(exc, ValidationError):
        return 400
    return 502


async def _handle_inbox_error(request: Request, exc: InboxAIError) -> JSONResponse:
    status = _status_for(exc)
    logger.warning(
        "request_failed",
        path=request.url.path,
        status=status,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return JSONResponse(status_code=status, content={"error": str(exc)})


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[Repository] = None,
    oauth: Optional[GoogleOAuth] = None,
    gmail: Optional[GmailClient] = None,
    calendar: Optional[CalendarClient] = None,
    gemini: Optional[GeminiClient] = None,
) -> FastAPI:
    """Build the Inbox AI API.

    Args:
        settings: Application settings. If None, uses default settings.
        repository: Storage backend. If None, one is built from ``settings``.
        oauth: Google credential holder shared by the Gmail and Calendar clients.
        gmail: Gmail client. If None, one is built over ``oauth``.
        calendar: Calendar client. If None, one is built over ``oauth``.
        gemini: Gemini client. If None, one is built from ``settings``.

    Returns:
        FastAPI: Configured application.
    """

    settings = settings or get_settings()
    configure_logging(settings.log_level)

    oauth = oauth or GoogleOAuth(settings)
    repository = repository or create_repository(settings)
    gmail = gmail or GmailClient(settings, oauth=oauth)
    calendar = calendar or CalendarClient(settings, oauth=oauth)
    gemini = gemini or GeminiClient(settings)
    executor = ActionExecutor(repository, gmail, calendar, oauth=oauth, settings=settings)

    app = FastAPI(title="Inbox AI", version=__version__, debug=settings.debug)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.repository = repository
    app.state.oauth = oauth
    app.state.sync = SyncService(repository, gmail, calendar, settings)
    app.state.executor = executor
    app.state.assistant = ChatAssistant(repository, gemini, executor, settings)

    app.add_exception_handler(InboxAIError, _handle_inbox_error)

    for router in (
        auth_router,
        emails_router,
        calendar_router,
        chat_router,
        actions_router,
        analytics_router,
        dashboard_router,
        tasks_router,
        sync_router,
    ):
        app.include_router(router)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    logger.info(
        "app_created",
        repository=type(repository).__name__,
        gemini_configured=gemini.is_configured,
    )
    return app
