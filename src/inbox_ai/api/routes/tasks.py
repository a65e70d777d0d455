"""Tasks API."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from inbox_ai.api.dependencies import get_repository
from inbox_ai.api.models import SuccessResponse, TaskPatch
from inbox_ai.models import Task, TaskCreate, TaskPriority
from inbox_ai.storage.base import Repository

router = APIRouter(prefix="/api/tasks", tags=["tasks"])

TASK_NOT_FOUND = "Task not found"


@router.get("", response_model=list[Task])
def list_tasks(
    priority: Optional[TaskPriority] = None,
    pending: bool = False,
    due_today: bool = False,
    repo: Repository = Depends(get_repository),
) -> list[Task]:
    if priority is not None:
        return repo.get_tasks_by_priority(priority)
    if pending:
        return repo.get_pending_tasks()
    if due_today:
        return repo.get_tasks_due_today()
    return repo.get_tasks()


@router.post("", response_model=Task, status_code=201)
def create_task(body: TaskCreate, repo: Repository = Depends(get_repository)) -> Task:
    return repo.create_task(body)


@router.get("/{task_id}", response_model=Task)
def get_task(task_id: str, repo: Repository = Depends(get_repository)) -> Task:
    task = repo.get_task(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail=TASK_NOT_FOUND)
    return task


@router.patch("/{task_id}", response_model=Task)
def update_task(
    task_id: str,
    body: TaskPatch,
    repo: Repository = Depends(get_repository),
) -> Task:
    updated = repo.update_task(task_id, body.model_dump(exclude_none=True))
    if updated is None:
        raise HTTPException(status_code=404, detail=TASK_NOT_FOUND)
    return updated


@router.delete("/{task_id}", response_model=SuccessResponse)
def delete_task(task_id: str, repo: Repository = Depends(get_repository)) -> SuccessResponse:
    if not repo.delete_task(task_id):
        raise HTTPException(status_code=404, detail=TASK_NOT_FOUND)
    return SuccessResponse()
