"""Emails API."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from inbox_ai.agent.assistant import ChatAssistant
from inbox_ai.api.dependencies import get_assistant, get_repository, get_sync_service
from inbox_ai.api.models import (
    DraftReplyRequest,
    DraftReplyResponse,
    EmailPatch,
    SuccessResponse,
    SummaryResponse,
)
from inbox_ai.intelligence.classifier import generate_draft_response
from inbox_ai.models import DraftResponse, Email, EmailCategory
from inbox_ai.storage.base import Repository
from inbox_ai.sync import EmailSyncResult, SyncService

router = APIRouter(prefix="/api/emails", tags=["emails"])

EMAIL_NOT_FOUND = "Email not found"


@router.get("", response_model=list[Email])
def list_emails(
    category: Optional[EmailCategory] = None,
    urgent: bool = False,
    unread: bool = False,
    repo: Repository = Depends(get_repository),
) -> list[Email]:
    if category is not None:
        emails = repo.get_emails_by_category(category)
    elif urgent:
        emails = repo.get_urgent_emails()
    elif unread:
        emails = repo.get_unread_emails()
    else:
        emails = repo.get_emails()
    return emails


@router.post("/sync", response_model=EmailSyncResult)
async def sync_emails(
    limit: Optional[int] = None,
    sync: SyncService = Depends(get_sync_service),
) -> EmailSyncResult:
    return await sync.sync_emails(limit=limit)


@router.get("/summary", response_model=SummaryResponse)
async def summarize_emails(
    category: Optional[EmailCategory] = None,
    assistant: ChatAssistant = Depends(get_assistant),
) -> SummaryResponse:
    return SummaryResponse(summary=await assistant.summarize_emails(category))


@router.get("/{email_id}", response_model=Email)
def get_email(email_id: str, repo: Repository = Depends(get_repository)) -> Email:
    email = repo.get_email(email_id)
    if email is None:
        raise HTTPException(status_code=404, detail=EMAIL_NOT_FOUND)
    return email


@router.patch("/{email_id}", response_model=Email)
def update_email(
    email_id: str,
    body: EmailPatch,
    repo: Repository = Depends(get_repository),
) -> Email:
    updated = repo.update_email(email_id, body.model_dump(exclude_none=True))
    if updated is None:
        raise HTTPException(status_code=404, detail=EMAIL_NOT_FOUND)
    return updated


@router.delete("/{email_id}", response_model=SuccessResponse)
def delete_email(email_id: str, repo: Repository = Depends(get_repository)) -> SuccessResponse:
    if not repo.delete_email(email_id):
        raise HTTPException(status_code=404, detail=EMAIL_NOT_FOUND)
    return SuccessResponse()


@router.get("/{email_id}/draft", response_model=DraftResponse)
def get_draft(email_id: str, repo: Repository = Depends(get_repository)) -> DraftResponse:
    email = repo.get_email(email_id)
    if email is None:
        raise HTTPException(status_code=404, detail=EMAIL_NOT_FOUND)
    return generate_draft_response(email)


@router.post("/{email_id}/draft-reply", response_model=DraftReplyResponse)
async def draft_reply(
    email_id: str,
    body: DraftReplyRequest,
    assistant: ChatAssistant = Depends(get_assistant),
) -> DraftReplyResponse:
    text = await assistant.draft_reply(email_id, body.tone)
    if text is None:
        raise HTTPException(status_code=404, detail=EMAIL_NOT_FOUND)
    return DraftReplyResponse(email_id=email_id, tone=body.tone, body=text)
