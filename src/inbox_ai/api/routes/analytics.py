"""Analytics API."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from inbox_ai.api.dependencies import get_repository
from inbox_ai.models import CalendarAnalytics, EmailAnalytics
from inbox_ai.storage.base import Repository

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/email", response_model=EmailAnalytics)
def email_analytics(repo: Repository = Depends(get_repository)) -> EmailAnalytics:
    return repo.get_email_analytics()


@router.get("/calendar", response_model=CalendarAnalytics)
def calendar_analytics(repo: Repository = Depends(get_repository)) -> CalendarAnalytics:
    return repo.get_calendar_analytics()
