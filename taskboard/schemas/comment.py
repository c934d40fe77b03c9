from datetime import datetime
from pydantic import BaseModel, Field


class CommentCreate(BaseModel):
    task_id: int = Field(..., gt=0, alias="taskId")
    body: str = Field(..., min_length=1)

    class Config:
        populate_by_name = True


class CommentOut(BaseModel):
    id: int
    task_id: int
    author_id: int
    body: str
    created_at: datetime

    class Config:
        from_attributes = True
