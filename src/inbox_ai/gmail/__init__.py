"""Gmail API access and message parsing."""

from .client import GmailClient
from .parsing import message_to_email

__all__ = ["GmailClient", "message_to_email"]
