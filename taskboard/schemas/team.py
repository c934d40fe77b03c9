"""
Pydantic schemas for Team entities.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class TeamBase(BaseModel):
    """Base schema for team with common fields"""
    name: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None


class TeamCreate(TeamBase):
    """Schema for creating a new team"""
    pass


class TeamOut(TeamBase):
    """Schema for team output"""
    id: int
    team_code: str
    created_by: int
    created_at: datetime

    class Config:
        from_attributes = True


class TeamWithMembers(TeamOut):
    """Team schema with member count"""
    member_count: int = 0

    class Config:
        from_attributes = True


class JoinByCode(BaseModel):
    code: str = Field(..., min_length=1, max_length=16)


class JoinByCodeOut(BaseModel):
    success: bool = True
    team_id: int
