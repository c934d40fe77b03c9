from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.exceptions import BadRequestError
from taskboard.core.permissions import Action, Resource
from taskboard.models.comment import Comment
from taskboard.models.user import User
from taskboard.services.tasks import get_task


async def list_comments(db: AsyncSession, caller: User, task_id: int) -> List[Comment]:
    """Comments on a task, oldest first."""
    await get_task(db, caller, task_id, resource=Resource.COMMENT, action=Action.READ)
    result = await db.execute(
        select(Comment)
        .filter(Comment.task_id == task_id)
        .order_by(Comment.created_at, Comment.id)
    )
    return list(result.scalars().all())


async def create_comment(db: AsyncSession, caller: User, task_id: int, body: str) -> Comment:
    await get_task(db, caller, task_id, resource=Resource.COMMENT, action=Action.CREATE)

    body = (body or "").strip()
    if not body:
        raise BadRequestError("Comment body is required")

    comment = Comment(task_id=task_id, author_id=caller.id, body=body)
    db.add(comment)
    await db.commit()
    await db.refresh(comment)
    return comment
