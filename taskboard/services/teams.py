"""
Membership & authorization service.

Owns team creation, invite codes, joins and role-gated membership changes.
All authorization goes through `requires()`; uniqueness of team codes and of
(team, user) memberships is decided by the database constraints.
"""

from typing import Callable, List, Optional, Tuple

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.config import settings
from taskboard.core.exceptions import (
    BadRequestError,
    CodeGenerationExhausted,
    ConflictError,
    ForbiddenError,
    NotFoundError,
)
from taskboard.core.logging import get_logger
from taskboard.core.permissions import (
    Action,
    GRANTABLE_ROLES,
    Resource,
    ROLE_RANK,
    TeamRole,
    PERMISSION_MIN_ROLE,
    has_permission,
)
from taskboard.models.team import Team
from taskboard.models.team_member import TeamMember
from taskboard.models.user import User
from taskboard.services.common import commit_or_conflict
from taskboard.services.team_codes import generate_team_code, normalize_team_code

logger = get_logger(__name__)

# SQL expression ordering members owner -> admin -> member
ROLE_RANK_ORDER = case(
    {role.value: rank for role, rank in ROLE_RANK.items()},
    value=TeamMember.role,
    else_=len(ROLE_RANK),
)


# ==================== Authorization ====================

async def get_membership(db: AsyncSession, team_id: int, user_id: int) -> Optional[TeamMember]:
    result = await db.execute(
        select(TeamMember).filter(
            TeamMember.team_id == team_id,
            TeamMember.user_id == user_id,
        )
    )
    return result.scalar_one_or_none()


async def requires(
    db: AsyncSession,
    caller: User,
    team_id: int,
    resource: Resource,
    action: Action,
) -> TeamMember:
    """
    Authorization predicate shared by every team-scoped operation.

    Args:
        db: Database session
        caller: Authenticated user
        team_id: Team being accessed
        resource, action: Permission being exercised (see PERMISSION_MIN_ROLE)

    Returns:
        The caller's membership

    Raises:
        ForbiddenError: caller is not a member, or holds a weaker role
    """
    membership = await get_membership(db, team_id, caller.id)
    if membership is None:
        raise ForbiddenError("You are not a member of this team")
    if not has_permission(membership.role, resource, action):
        min_role = PERMISSION_MIN_ROLE.get((resource, action))
        if min_role is None:
            raise ForbiddenError(f"Nobody may {action.value} a {resource.value}")
        raise ForbiddenError(f"This action requires the {min_role.value} role or higher")
    return membership


# ==================== Teams ====================

async def _team_code_taken(db: AsyncSession, code: str) -> bool:
    result = await db.execute(select(Team.id).filter(Team.team_code == code))
    return result.first() is not None


async def create_team(
    db: AsyncSession,
    caller: User,
    name: str,
    description: Optional[str] = None,
    code_generator: Callable[[], str] = None,
    max_attempts: int = None,
) -> Tuple[Team, int]:
    """
    Create a team with a fresh invite code and make the caller its owner.

    The team row and the owner membership are committed together. Code
    collisions, whether seen up front or reported by the unique constraint
    at commit time, are retried up to `max_attempts` times.

    Returns:
        (team, member_count) where member_count is always 1

    Raises:
        BadRequestError: empty name
        CodeGenerationExhausted: no unused code within the retry bound
    """
    name = (name or "").strip()
    if not name:
        raise BadRequestError("Team name is required")

    generate = code_generator or generate_team_code
    attempts = max_attempts or settings.TEAM_CODE_MAX_ATTEMPTS
    caller_id = caller.id

    for attempt in range(1, attempts + 1):
        code = generate()
        if await _team_code_taken(db, code):
            logger.debug(f"Team code collision on attempt {attempt}")
            continue

        team = Team(
            name=name,
            description=description,
            team_code=code,
            created_by=caller_id,
        )
        team.members.append(TeamMember(user_id=caller_id, role=TeamRole.OWNER.value))
        db.add(team)
        try:
            await commit_or_conflict(db, "Team code already in use")
        except ConflictError:
            logger.debug(f"Team code taken concurrently on attempt {attempt}")
            continue

        logger.info(f"Team {team.id} created by user {caller_id}")
        return team, 1

    logger.error(f"Gave up generating a team code after {attempts} attempts")
    raise CodeGenerationExhausted()


def _teams_with_member_count():
    return (
        select(Team, func.count(TeamMember.id))
        .outerjoin(TeamMember, TeamMember.team_id == Team.id)
        .group_by(Team.id)
        .order_by(Team.created_at.desc(), Team.id.desc())
    )


async def list_teams_for_user(db: AsyncSession, caller: User) -> List[Tuple[Team, int]]:
    """Teams the caller belongs to, newest first, with their member counts."""
    my_team_ids = select(TeamMember.team_id).filter(TeamMember.user_id == caller.id)
    result = await db.execute(_teams_with_member_count().filter(Team.id.in_(my_team_ids)))
    return [(team, count) for team, count in result.all()]


async def list_available_teams(db: AsyncSession, caller: User) -> List[Tuple[Team, int]]:
    """Teams the caller does not belong to; the complement of list_teams_for_user."""
    my_team_ids = select(TeamMember.team_id).filter(TeamMember.user_id == caller.id)
    result = await db.execute(_teams_with_member_count().filter(Team.id.not_in(my_team_ids)))
    return [(team, count) for team, count in result.all()]


# ==================== Members ====================

async def add_member(
    db: AsyncSession,
    caller: User,
    team_id: int,
    email: Optional[str] = None,
    user_id: Optional[int] = None,
    role: TeamRole = TeamRole.MEMBER,
) -> TeamMember:
    """
    Add a user to a team, identified by id or by email (id wins if both).

    Requires the owner or admin role. An existing membership is never
    updated: adding the same user twice raises ConflictError.
    """
    await requires(db, caller, team_id, Resource.TEAM_MEMBER, Action.INVITE)

    try:
        role = TeamRole(role)
    except ValueError:
        raise BadRequestError(f"Unknown role: {role}")
    if role not in GRANTABLE_ROLES:
        raise BadRequestError(f"Role '{role.value}' cannot be granted")

    if user_id is not None:
        target = await db.get(User, user_id)
    elif email:
        result = await db.execute(select(User).filter(User.email == email.strip().lower()))
        target = result.scalar_one_or_none()
    else:
        raise BadRequestError("email or userId required")

    if target is None:
        raise NotFoundError("User not found")

    caller_id = caller.id
    membership = TeamMember(team_id=team_id, user_id=target.id, role=role.value)
    db.add(membership)
    await commit_or_conflict(db, "User is already a member of this team")

    logger.info(f"User {membership.user_id} added to team {team_id} as {role.value} by user {caller_id}")
    return membership


async def get_team_members(db: AsyncSession, caller: User, team_id: int) -> List[Tuple[TeamMember, User]]:
    """
    Members of a team with their user rows.

    Ordered by role rank (owner, admin, member), then by membership id.
    """
    await requires(db, caller, team_id, Resource.TEAM_MEMBER, Action.READ)

    result = await db.execute(
        select(TeamMember, User)
        .join(User, User.id == TeamMember.user_id)
        .filter(TeamMember.team_id == team_id)
        .order_by(ROLE_RANK_ORDER, TeamMember.id)
    )
    return [(member, user) for member, user in result.all()]


async def join_team_by_code(db: AsyncSession, caller: User, code: str) -> int:
    """
    Join the team whose invite code matches, as a plain member.

    Returns:
        The joined team's id

    Raises:
        BadRequestError: empty code
        NotFoundError: no team has this code
        ConflictError: caller already belongs to the team
    """
    code = normalize_team_code(code)
    if not code:
        raise BadRequestError("code required")

    result = await db.execute(select(Team.id).filter(Team.team_code == code))
    team_id = result.scalar_one_or_none()
    if team_id is None:
        raise NotFoundError("Invalid team code")

    caller_id = caller.id
    db.add(TeamMember(team_id=team_id, user_id=caller_id, role=TeamRole.MEMBER.value))
    await commit_or_conflict(db, "You are already a member of this team")

    logger.info(f"User {caller_id} joined team {team_id} by code")
    return team_id
