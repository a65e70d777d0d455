"""Storage backends for emails, calendar events, tasks and chat history."""

from __future__ import annotations

from inbox_ai.config import Settings

from .base import Repository
from .memory import InMemoryRepository
from .sqlite import SqliteRepository


def create_repository(settings: Settings) -> Repository:
    """Build the repository selected by ``settings.database_path``."""

    if settings.database_path is None:
        return InMemoryRepository(
            work_hour_start=settings.work_hour_start,
            work_hour_end=settings.work_hour_end,
        )

    repo = SqliteRepository(
        settings.database_path,
        work_hour_start=settings.work_hour_start,
        work_hour_end=settings.work_hour_end,
    )
    repo.initialize()
    return repo


__all__ = ["InMemoryRepository", "Repository", "SqliteRepository", "create_repository"]
