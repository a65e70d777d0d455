"""Calendar API."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from inbox_ai.api.dependencies import get_app_settings, get_repository, get_sync_service
from inbox_ai.config import Settings
from inbox_ai.intelligence.free_slots import find_free_slots
from inbox_ai.models import CalendarEvent, FreeTimeSlot
from inbox_ai.storage.base import Repository
from inbox_ai.sync import CalendarSyncResult, SyncService

router = APIRouter(prefix="/api/calendar", tags=["calendar"])


@router.post("/sync", response_model=CalendarSyncResult)
async def sync_calendar(
    days: Optional[int] = Query(default=None, ge=1, le=365),
    sync: SyncService = Depends(get_sync_service),
) -> CalendarSyncResult:
    return await sync.sync_calendar(days=days)


@router.get("/events", response_model=list[CalendarEvent])
def list_events(repo: Repository = Depends(get_repository)) -> list[CalendarEvent]:
    return repo.get_calendar_events()


@router.get("/upcoming", response_model=list[CalendarEvent])
def upcoming_events(
    limit: int = Query(default=10, ge=1, le=100),
    repo: Repository = Depends(get_repository),
) -> list[CalendarEvent]:
    return repo.get_upcoming_events(limit)


@router.get("/today", response_model=list[CalendarEvent])
def today_events(repo: Repository = Depends(get_repository)) -> list[CalendarEvent]:
    return repo.get_today_events()


@router.get("/free-slots", response_model=list[FreeTimeSlot])
def free_slots(
    duration: int = Query(default=60, ge=1, le=24 * 60),
    days: int = Query(default=7, ge=1, le=60),
    repo: Repository = Depends(get_repository),
    settings: Settings = Depends(get_app_settings),
) -> list[FreeTimeSlot]:
    busy = [(e.start_time, e.end_time) for e in repo.get_calendar_events()]
    return find_free_slots(
        busy,
        duration_minutes=duration,
        days_ahead=days,
        work_hour_start=settings.work_hour_start,
        work_hour_end=settings.work_hour_end,
    )
