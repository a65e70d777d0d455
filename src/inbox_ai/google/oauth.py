"""Google OAuth web flow.

The token exchange itself is delegated to google-auth-oauthlib; this module
only keeps the resulting credentials for the process and hands them to the
Gmail and Calendar clients.
"""

from __future__ import annotations

from typing import Any

import structlog

from inbox_ai.config import Settings
from inbox_ai.exceptions import AuthenticationError, ConfigurationError

logger = structlog.get_logger()

GMAIL_SCOPES: tuple[str, ...] = (
    "https://www.googleapis.com/auth/gmail.modify",
    "https://www.googleapis.com/auth/gmail.send",
    "https://www.googleapis.com/auth/gmail.compose",
)
CALENDAR_SCOPES: tuple[str, ...] = ("https://www.googleapis.com/auth/calendar",)
ALL_SCOPES: tuple[str, ...] = GMAIL_SCOPES + CALENDAR_SCOPES


class GoogleOAuth:
    """Holds the signed-in user's Google credentials for this process."""

    def __init__(self, settings: Settings | None = None) -> None:
        from inbox_ai.config import get_settings

        self.settings = settings or get_settings()
        self._credentials: Any | None = None
        self._pending_flow: Any | None = None

    @property
    def is_authenticated(self) -> bool:
        return self._credentials is not None

    def authorization_url(self) -> str:
        """Return the Google consent URL the browser should be sent to."""

        flow = self._build_flow()
        url, _state = flow.authorization_url(access_type="offline", prompt="consent")
        self._pending_flow = flow
        logger.info("oauth_authorization_url_created", redirect_uri=self.settings.oauth_redirect_uri)
        return url

    def exchange_code(self, code: str) -> None:
        """Trade the callback ``code`` for credentials.

        Raises:
            AuthenticationError: If Google rejects the code.
        """

        flow = self._pending_flow or self._build_flow()
        try:
            flow.fetch_token(code=code)
        except Exception as exc:  # noqa: BLE001
            logger.exception("oauth_code_exchange_failed", error=str(exc))
            raise AuthenticationError(str(exc)) from exc

        self._pending_flow = None
        self.set_credentials(flow.credentials)
        logger.info("oauth_code_exchanged", has_all_scopes=self.has_required_scopes())

    def set_credentials(self, credentials: Any) -> None:
        self._credentials = credentials

    def credentials(self) -> Any:
        """Return valid credentials, refreshing an expired access token.

        Raises:
            AuthenticationError: If nobody has signed in yet or refresh fails.
        """

        creds = self._credentials
        if creds is None:
            raise AuthenticationError("Google account not authenticated. Please sign in first.")

        if getattr(creds, "expired", False) and getattr(creds, "refresh_token", None):
            from google.auth.transport.requests import Request

            try:
                creds.refresh(Request())
            except Exception as exc:  # noqa: BLE001
                logger.exception("oauth_refresh_failed", error=str(exc))
                raise AuthenticationError(str(exc)) from exc

        return creds

    def has_required_scopes(self) -> bool:
        creds = self._credentials
        if creds is None:
            return False
        granted = set(getattr(creds, "granted_scopes", None) or getattr(creds, "scopes", None) or [])
        return all(scope in granted for scope in ALL_SCOPES)

    def clear(self) -> None:
        self._credentials = None
        self._pending_flow = None
        logger.info("oauth_cleared")

    def _build_flow(self) -> Any:
        if not self.settings.google_client_id or not self.settings.google_client_secret:
            raise ConfigurationError(
                "Google OAuth credentials not configured. Set INBOX_AI_GOOGLE_CLIENT_ID "
                "and INBOX_AI_GOOGLE_CLIENT_SECRET."
            )

        # Imported lazily to keep import-time cost low and tests fast.
        from google_auth_oauthlib.flow import Flow

        client_config = {
            "web": {
                "client_id": self.settings.google_client_id,
                "client_secret": self.settings.google_client_secret,
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": "https://oauth2.googleapis.com/token",
                "redirect_uris": [self.settings.oauth_redirect_uri],
            }
        }
        return Flow.from_client_config(
            client_config,
            scopes=list(ALL_SCOPES),
            redirect_uri=self.settings.oauth_redirect_uri,
        )
