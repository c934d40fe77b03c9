"""
Teams API Endpoints

Team creation, listing, joining by invite code and member management.
Authorization and uniqueness rules live in `taskboard.services.teams`.
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.api.dependencies import get_current_user, get_db
from taskboard.models.user import User
from taskboard.schemas.team import TeamCreate, TeamWithMembers, JoinByCode, JoinByCodeOut
from taskboard.schemas.team_member import TeamMemberAdd, TeamMemberOut, TeamMemberWithDetails
from taskboard.services import teams as team_service

router = APIRouter()


def _with_count(team, member_count: int) -> TeamWithMembers:
    team_data = TeamWithMembers.model_validate(team)
    team_data.member_count = member_count
    return team_data


# ==================== Team CRUD ====================

@router.get("/", response_model=List[TeamWithMembers])
async def list_teams(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List the teams the current user belongs to, newest first."""
    teams = await team_service.list_teams_for_user(db, current_user)
    return [_with_count(team, count) for team, count in teams]


@router.get("/available-to-join", response_model=List[TeamWithMembers])
async def list_available_teams(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List the teams the current user does not belong to."""
    teams = await team_service.list_available_teams(db, current_user)
    return [_with_count(team, count) for team, count in teams]


@router.post("/", response_model=TeamWithMembers, status_code=status.HTTP_201_CREATED)
async def create_team(
    team_data: TeamCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a new team.

    The creator becomes its owner and the team gets a fresh invite code.
    """
    team, member_count = await team_service.create_team(
        db, current_user, team_data.name, team_data.description
    )
    return _with_count(team, member_count)


@router.post("/join-by-code", response_model=JoinByCodeOut, status_code=status.HTTP_201_CREATED)
async def join_team_by_code(
    payload: JoinByCode,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Join a team as a member using its invite code."""
    team_id = await team_service.join_team_by_code(db, current_user, payload.code)
    return JoinByCodeOut(team_id=team_id)


# ==================== Team Member Management ====================

@router.get("/{team_id}/members", response_model=List[TeamMemberWithDetails])
async def list_team_members(
    team_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    List the members of a team, owner first.

    Only members of the team can view the list.
    """
    members = await team_service.get_team_members(db, current_user, team_id)
    return [
        TeamMemberWithDetails(
            user_id=user.id,
            name=user.name,
            email=user.email,
            role=member.role,
            joined_at=member.joined_at,
        )
        for member, user in members
    ]


@router.post("/{team_id}/members", response_model=TeamMemberOut, status_code=status.HTTP_201_CREATED)
async def add_member(
    team_id: int,
    member_data: TeamMemberAdd,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Add a user to the team by email or user id.

    Requires the owner or admin role.
    """
    return await team_service.add_member(
        db,
        current_user,
        team_id,
        email=member_data.email,
        user_id=member_data.user_id,
        role=member_data.role,
    )
