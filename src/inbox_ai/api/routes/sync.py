"""Whole-account sync and reset API."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends

from inbox_ai.api.dependencies import get_repository, get_sync_service
from inbox_ai.api.models import SuccessResponse
from inbox_ai.storage.base import Repository
from inbox_ai.sync import SyncAllResult, SyncService

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["sync"])


@router.post("/sync-all", response_model=SyncAllResult)
async def sync_all(sync: SyncService = Depends(get_sync_service)) -> SyncAllResult:
    return await sync.sync_all()


@router.post("/data/clear", response_model=SuccessResponse)
def clear_data(repo: Repository = Depends(get_repository)) -> SuccessResponse:
    repo.clear_all_data()
    logger.info("data_cleared")
    return SuccessResponse()
