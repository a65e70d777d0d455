"""Actions API.

Lets the UI run the same actions the assistant can take from chat.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from inbox_ai.agent.actions import ActionExecutor, ActionResult, AIAction
from inbox_ai.api.dependencies import get_executor

router = APIRouter(prefix="/api/actions", tags=["actions"])


@router.post("/execute", response_model=ActionResult)
async def execute_action(
    action: AIAction,
    executor: ActionExecutor = Depends(get_executor),
) -> ActionResult:
    return await executor.execute(action)
