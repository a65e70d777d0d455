"""Google sign-in API.

The browser is redirected to Google's consent page and back to the callback,
which stores credentials for this process and returns to the app root.
"""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from inbox_ai.agent.assistant import ChatAssistant
from inbox_ai.api.dependencies import get_assistant, get_oauth
from inbox_ai.api.models import AuthStatusResponse, SuccessResponse
from inbox_ai.exceptions import AuthenticationError
from inbox_ai.google.oauth import GoogleOAuth

logger = structlog.get_logger()

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.get("/google")
def start_google_auth(oauth: GoogleOAuth = Depends(get_oauth)) -> RedirectResponse:
    return RedirectResponse(oauth.authorization_url(), status_code=302)


@router.get("/google/callback")
def google_auth_callback(
    code: Optional[str] = None,
    error: Optional[str] = None,
    oauth: GoogleOAuth = Depends(get_oauth),
) -> RedirectResponse:
    if error or not code:
        logger.warning("oauth_callback_rejected", error=error or "missing_code")
        return RedirectResponse("/?auth=error", status_code=302)

    try:
        oauth.exchange_code(code)
    except AuthenticationError:
        return RedirectResponse("/?auth=error", status_code=302)
    return RedirectResponse("/?auth=success", status_code=302)


@router.get("/status", response_model=AuthStatusResponse)
def auth_status(
    oauth: GoogleOAuth = Depends(get_oauth),
    assistant: ChatAssistant = Depends(get_assistant),
) -> AuthStatusResponse:
    return AuthStatusResponse(
        authenticated=oauth.is_authenticated,
        has_required_scopes=oauth.has_required_scopes(),
        gemini_configured=assistant.uses_model,
    )


@router.post("/logout", response_model=SuccessResponse)
def logout(oauth: GoogleOAuth = Depends(get_oauth)) -> SuccessResponse:
    oauth.clear()
    return SuccessResponse()
