"""HTTP API for Inbox AI."""

from .app import create_app

__all__ = ["create_app"]
