"""
Task workflow service.

Tasks live in the status columns configured by `settings.TASK_STATUSES`.
Every read and mutation requires membership in the owning project's team.
A task moved to another column is appended at the end of that column.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.config import settings
from taskboard.core.exceptions import BadRequestError, NotFoundError
from taskboard.core.logging import get_logger
from taskboard.core.permissions import Action, Resource
from taskboard.models.project import Project
from taskboard.models.task import Task, TaskPriority
from taskboard.models.team_member import TeamMember
from taskboard.models.user import User
from taskboard.services.projects import get_project
from taskboard.services.teams import get_membership, requires

logger = get_logger(__name__)

UPDATABLE_FIELDS = {"title", "description", "status", "priority", "assignee_id"}


# ==================== Validation ====================

def task_statuses() -> List[str]:
    """Board columns, in display order."""
    return list(settings.TASK_STATUSES)


def validate_status(status: Optional[str]) -> str:
    if status not in settings.TASK_STATUSES:
        raise BadRequestError(
            f"Invalid status '{status}'. Allowed: {', '.join(settings.TASK_STATUSES)}"
        )
    return status


def validate_priority(priority: Any) -> str:
    try:
        return TaskPriority(priority).value
    except ValueError:
        allowed = ", ".join(p.value for p in TaskPriority)
        raise BadRequestError(f"Invalid priority '{priority}'. Allowed: {allowed}")


def validate_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if not title:
        raise BadRequestError("Task title is required")
    return title


async def _validate_assignee(db: AsyncSession, team_id: int, assignee_id: Optional[int]) -> Optional[int]:
    if assignee_id is None:
        return None
    if await get_membership(db, team_id, assignee_id) is None:
        raise BadRequestError("Assignee must be a member of the project's team")
    return assignee_id


async def _next_order_index(db: AsyncSession, project_id: int, status: str) -> int:
    result = await db.execute(
        select(func.max(Task.order_index)).filter(
            Task.project_id == project_id,
            Task.status == status,
        )
    )
    return (result.scalar() or 0) + 1


# ==================== Queries ====================

async def get_task(
    db: AsyncSession,
    caller: User,
    task_id: int,
    resource: Resource = Resource.TASK,
    action: Action = Action.READ,
) -> Task:
    """
    Load a task the caller may act on.

    Raises:
        NotFoundError: unknown task id
        ForbiddenError: caller is not a member of the project's team
    """
    task = await db.get(Task, task_id)
    if task is None:
        raise NotFoundError("Task not found")
    project = await db.get(Project, task.project_id)
    await requires(db, caller, project.team_id, resource, action)
    return task


async def list_tasks(db: AsyncSession, caller: User, project_id: Optional[int] = None) -> List[Task]:
    """
    Tasks of one project, or of every project in the caller's teams.

    Ordered by order_index then id, so each status column keeps its order.
    """
    query = select(Task).order_by(Task.order_index, Task.id)

    if project_id is not None:
        await get_project(db, caller, project_id, Action.READ)
        query = query.filter(Task.project_id == project_id)
    else:
        my_team_ids = select(TeamMember.team_id).filter(TeamMember.user_id == caller.id)
        query = query.join(Project, Project.id == Task.project_id).filter(Project.team_id.in_(my_team_ids))

    result = await db.execute(query)
    return list(result.scalars().all())


# ==================== Mutations ====================

async def create_task(
    db: AsyncSession,
    caller: User,
    project_id: int,
    title: str,
    status: Optional[str] = None,
    priority: Any = TaskPriority.MEDIUM,
    description: Optional[str] = None,
    assignee_id: Optional[int] = None,
) -> Task:
    """Create a task at the end of its status column."""
    project = await db.get(Project, project_id)
    if project is None:
        raise NotFoundError("Project not found")
    await requires(db, caller, project.team_id, Resource.TASK, Action.CREATE)

    title = validate_title(title)
    status = validate_status(status or settings.DEFAULT_TASK_STATUS)
    priority = validate_priority(priority)
    assignee_id = await _validate_assignee(db, project.team_id, assignee_id)

    task = Task(
        project_id=project_id,
        title=title,
        description=description,
        status=status,
        priority=priority,
        assignee_id=assignee_id,
        order_index=await _next_order_index(db, project_id, status),
    )
    db.add(task)
    await db.commit()
    await db.refresh(task)

    logger.info(f"Task {task.id} created in project {project_id} ({status})")
    return task


async def _apply_status(db: AsyncSession, task: Task, new_status: str) -> None:
    new_status = validate_status(new_status)
    if new_status == task.status:
        return
    old_status = task.status
    task.order_index = await _next_order_index(db, task.project_id, new_status)
    task.status = new_status
    logger.info(f"Task {task.id} moved {old_status} -> {new_status}")


async def set_task_status(db: AsyncSession, caller: User, task_id: int, new_status: str) -> Task:
    """
    Move a task to another column.

    Raises:
        NotFoundError: unknown task
        BadRequestError: status is not one of the configured columns
    """
    task = await get_task(db, caller, task_id, action=Action.UPDATE)
    await _apply_status(db, task, new_status)
    await db.commit()
    await db.refresh(task)
    return task


async def update_task(db: AsyncSession, caller: User, task_id: int, changes: Dict[str, Any]) -> Task:
    """
    Partially update a task.

    `changes` holds only the fields the client sent. A status change follows
    the same rules as set_task_status.
    """
    task = await get_task(db, caller, task_id, action=Action.UPDATE)

    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise BadRequestError(f"Cannot update fields: {', '.join(sorted(unknown))}")

    if "title" in changes:
        task.title = validate_title(changes["title"])
    if "description" in changes:
        task.description = changes["description"]
    if "priority" in changes:
        task.priority = validate_priority(changes["priority"])
    if "assignee_id" in changes:
        project = await db.get(Project, task.project_id)
        task.assignee_id = await _validate_assignee(db, project.team_id, changes["assignee_id"])
    if "status" in changes:
        await _apply_status(db, task, changes["status"])

    await db.commit()
    await db.refresh(task)
    return task


async def delete_task(db: AsyncSession, caller: User, task_id: int) -> None:
    """Delete a task and its comments. Unknown ids raise NotFoundError."""
    task = await get_task(db, caller, task_id, action=Action.DELETE)
    await db.delete(task)
    await db.commit()
    logger.info(f"Task {task_id} deleted")
