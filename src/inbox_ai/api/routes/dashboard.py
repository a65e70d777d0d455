"""Dashboard API."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from inbox_ai.api.dependencies import get_repository
from inbox_ai.models import DashboardData
from inbox_ai.storage.base import Repository

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardData)
def dashboard(repo: Repository = Depends(get_repository)) -> DashboardData:
    return repo.get_dashboard_data()
