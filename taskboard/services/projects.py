"""
Project service: projects are team-scoped and visible to every team member.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.exceptions import BadRequestError, NotFoundError
from taskboard.core.logging import get_logger
from taskboard.core.permissions import Action, Resource
from taskboard.models.project import Project
from taskboard.models.team_member import TeamMember
from taskboard.models.user import User
from taskboard.services.teams import requires

logger = get_logger(__name__)


async def get_project(
    db: AsyncSession,
    caller: User,
    project_id: int,
    action: Action = Action.READ,
) -> Project:
    """Load a project the caller may access; NotFoundError before ForbiddenError."""
    project = await db.get(Project, project_id)
    if project is None:
        raise NotFoundError("Project not found")
    await requires(db, caller, project.team_id, Resource.PROJECT, action)
    return project


async def list_projects(db: AsyncSession, caller: User, team_id: Optional[int] = None) -> List[Project]:
    """
    Projects of one team, or of every team the caller belongs to.

    Newest first.
    """
    query = select(Project).order_by(Project.created_at.desc(), Project.id.desc())

    if team_id is not None:
        await requires(db, caller, team_id, Resource.PROJECT, Action.READ)
        query = query.filter(Project.team_id == team_id)
    else:
        my_team_ids = select(TeamMember.team_id).filter(TeamMember.user_id == caller.id)
        query = query.filter(Project.team_id.in_(my_team_ids))

    result = await db.execute(query)
    return list(result.scalars().all())


async def create_project(
    db: AsyncSession,
    caller: User,
    team_id: int,
    name: str,
    description: Optional[str] = None,
) -> Project:
    """Create a project in a team; any member may do so."""
    await requires(db, caller, team_id, Resource.PROJECT, Action.CREATE)

    name = (name or "").strip()
    if not name:
        raise BadRequestError("Project name is required")

    project = Project(team_id=team_id, name=name, description=description, created_by=caller.id)
    db.add(project)
    await db.commit()
    await db.refresh(project)

    logger.info(f"Project {project.id} created in team {team_id}")
    return project
