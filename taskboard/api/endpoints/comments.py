from typing import List
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.api.dependencies import get_current_user, get_db
from taskboard.models.user import User
from taskboard.schemas.comment import CommentCreate, CommentOut
from taskboard.services import comments as comment_service

router = APIRouter()


@router.get("/", response_model=List[CommentOut])
async def list_comments(
    task_id: int = Query(..., alias="taskId", gt=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await comment_service.list_comments(db, current_user, task_id)


@router.post("/", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
async def create_comment(
    comment_data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await comment_service.create_comment(db, current_user, comment_data.task_id, comment_data.body)
