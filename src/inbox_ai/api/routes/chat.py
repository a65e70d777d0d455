"""Chat API."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from inbox_ai.agent.assistant import ChatAssistant
from inbox_ai.api.dependencies import get_assistant, get_repository
from inbox_ai.api.models import ChatSendRequest, ChatSendResponse, SuccessResponse
from inbox_ai.models import ChatMessage
from inbox_ai.storage.base import Repository

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.get("/messages", response_model=list[ChatMessage])
def list_messages(repo: Repository = Depends(get_repository)) -> list[ChatMessage]:
    return repo.get_chat_messages()


@router.delete("/messages", response_model=SuccessResponse)
def clear_messages(repo: Repository = Depends(get_repository)) -> SuccessResponse:
    repo.clear_chat_history()
    return SuccessResponse()


@router.post("/send", response_model=ChatSendResponse)
async def send_message(
    body: ChatSendRequest,
    assistant: ChatAssistant = Depends(get_assistant),
) -> ChatSendResponse:
    message = await assistant.respond(body.content)
    return ChatSendResponse(message=message)
