"""
Pydantic schemas for Projects.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    team_id: int = Field(..., gt=0, alias="teamId")
    description: Optional[str] = None

    class Config:
        populate_by_name = True


class ProjectOut(BaseModel):
    id: int
    team_id: int
    name: str
    description: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True
