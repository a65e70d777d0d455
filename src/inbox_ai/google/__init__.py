"""Google account plumbing shared by the Gmail and Calendar clients."""

from .oauth import ALL_SCOPES, GoogleOAuth

__all__ = ["ALL_SCOPES", "GoogleOAuth"]
