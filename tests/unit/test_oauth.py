"""Unit tests for the Google OAuth credential holder."""

from types import SimpleNamespace

import pytest

from inbox_ai.exceptions import AuthenticationError, ConfigurationError
from inbox_ai.google.oauth import ALL_SCOPES, GoogleOAuth


class TestGoogleOAuth:
    """Test suite for GoogleOAuth class."""

    def test_starts_unauthenticated(self, mock_settings) -> None:
        oauth = GoogleOAuth(mock_settings)

        assert oauth.is_authenticated is False
        assert oauth.has_required_scopes() is False

    def test_credentials_require_sign_in(self, mock_settings) -> None:
        with pytest.raises(AuthenticationError):
            GoogleOAuth(mock_settings).credentials()

    def test_authorization_url_requires_client_config(self, mock_settings) -> None:
        settings = mock_settings.model_copy(update={"google_client_id": None})

        with pytest.raises(ConfigurationError):
            GoogleOAuth(settings).authorization_url()

    def test_required_scopes(self, mock_settings) -> None:
        oauth = GoogleOAuth(mock_settings)
        oauth.set_credentials(SimpleNamespace(scopes=list(ALL_SCOPES), expired=False))

        assert oauth.is_authenticated is True
        assert oauth.has_required_scopes() is True

    def test_missing_calendar_scope(self, mock_settings) -> None:
        oauth = GoogleOAuth(mock_settings)
        oauth.set_credentials(SimpleNamespace(scopes=list(ALL_SCOPES[:-1]), expired=False))

        assert oauth.has_required_scopes() is False

    def test_clear_forgets_credentials(self, mock_settings) -> None:
        oauth = GoogleOAuth(mock_settings)
        creds = SimpleNamespace(scopes=list(ALL_SCOPES), expired=False)
        oauth.set_credentials(creds)

        assert oauth.credentials() is creds
        oauth.clear()

        assert oauth.is_authenticated is False
