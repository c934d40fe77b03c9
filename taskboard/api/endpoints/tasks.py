"""
Tasks API Endpoints

Board operations: list, create, move/update (PATCH) and delete tasks.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.api.dependencies import get_current_user, get_db
from taskboard.models.user import User
from taskboard.schemas.task import TaskCreate, TaskOut, TaskUpdate
from taskboard.services import tasks as task_service

router = APIRouter()


@router.get("/statuses", response_model=List[str])
async def list_statuses(current_user: User = Depends(get_current_user)):
    """Board columns, in display order."""
    return task_service.task_statuses()


@router.get("/", response_model=List[TaskOut])
async def list_tasks(
    project_id: Optional[int] = Query(None, alias="projectId", gt=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List the tasks of a project, or of all the user's projects."""
    return await task_service.list_tasks(db, current_user, project_id)


@router.post("/", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a task at the end of its status column."""
    return await task_service.create_task(
        db,
        current_user,
        task_data.project_id,
        task_data.title,
        status=task_data.status,
        priority=task_data.priority,
        description=task_data.description,
        assignee_id=task_data.assignee_id,
    )


@router.patch("/{task_id}", response_model=TaskOut)
async def update_task(
    task_id: int,
    task_update: TaskUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Update a task.

    Sending only `status` is the board's drag-and-drop move.
    """
    changes = task_update.model_dump(exclude_unset=True)
    return await task_service.update_task(db, current_user, task_id, changes)


@router.delete("/{task_id}")
async def delete_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await task_service.delete_task(db, current_user, task_id)
    return {"success": True}
