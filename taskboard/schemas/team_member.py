"""
Pydantic schemas for Team Members.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from taskboard.core.permissions import TeamRole


class TeamMemberAdd(BaseModel):
    """Schema for adding a User to a team, by email or by id"""
    email: Optional[EmailStr] = None
    user_id: Optional[int] = Field(None, gt=0, alias="userId")
    role: TeamRole = TeamRole.MEMBER

    class Config:
        populate_by_name = True


class TeamMemberOut(BaseModel):
    """Schema for team member output"""
    id: int
    team_id: int
    user_id: int
    role: TeamRole
    joined_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TeamMemberWithDetails(BaseModel):
    """Team member with user details"""
    user_id: int
    name: str
    email: str
    role: TeamRole
    joined_at: Optional[datetime] = None
