"""
Pydantic schemas for Tasks.

Status values are checked against the configured board columns by the
workflow service, not here, so the column set stays configurable.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from taskboard.models.task import TaskPriority


class TaskCreate(BaseModel):
    """Schema for creating a task; status defaults to the first column"""
    title: str = Field(..., min_length=1, max_length=200)
    project_id: int = Field(..., gt=0, alias="projectId")
    status: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    description: Optional[str] = None
    assignee_id: Optional[int] = Field(None, gt=0, alias="assigneeId")

    class Config:
        populate_by_name = True


class TaskUpdate(BaseModel):
    """Schema for PATCH /tasks/{id}; only the fields sent are changed"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[TaskPriority] = None
    assignee_id: Optional[int] = Field(None, gt=0, alias="assigneeId")

    class Config:
        populate_by_name = True


class TaskOut(BaseModel):
    id: int
    project_id: int
    title: str
    description: Optional[str] = None
    status: str
    priority: str
    assignee_id: Optional[int] = None
    order_index: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
