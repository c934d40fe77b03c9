"""Seed demo data.

Creates two users, a team with both of them, a project and a few tasks.
Running it again leaves existing rows alone.

Usage:
    python -m taskboard.db.seed
"""

import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.logging import get_logger, setup_logging
from taskboard.core.permissions import TeamRole
from taskboard.core.security import get_password_hash
from taskboard.db.session import SessionAsync, init_db
from taskboard.models.project import Project
from taskboard.models.task import Task
from taskboard.models.team import Team
from taskboard.models.team_member import TeamMember
from taskboard.models.user import User
from taskboard.services.team_codes import generate_team_code

logger = get_logger(__name__)

DEMO_PASSWORD = "Password1!"
TEAM_NAME = "Core Team"
PROJECT_NAME = "Launch"


async def upsert_user(db: AsyncSession, name: str, email: str) -> User:
    result = await db.execute(select(User).filter(User.email == email))
    user = result.scalar_one_or_none()
    if user is None:
        user = User(name=name, email=email, password=get_password_hash(DEMO_PASSWORD))
        db.add(user)
        await db.flush()
    return user


async def ensure_member(db: AsyncSession, team_id: int, user_id: int, role: TeamRole):
    result = await db.execute(
        select(TeamMember).filter(TeamMember.team_id == team_id, TeamMember.user_id == user_id)
    )
    if result.scalar_one_or_none() is None:
        db.add(TeamMember(team_id=team_id, user_id=user_id, role=role.value))


async def seed(db: AsyncSession) -> Team:
    alice = await upsert_user(db, "Alice", "alice@example.com")
    bob = await upsert_user(db, "Bob", "bob@example.com")

    result = await db.execute(select(Team).filter(Team.name == TEAM_NAME))
    team = result.scalar_one_or_none()
    if team is None:
        code = generate_team_code()
        while (await db.execute(select(Team.id).filter(Team.team_code == code))).first():
            code = generate_team_code()
        team = Team(
            name=TEAM_NAME,
            description="Main team for project management",
            team_code=code,
            created_by=alice.id,
        )
        db.add(team)
        await db.flush()

    await ensure_member(db, team.id, alice.id, TeamRole.OWNER)
    await ensure_member(db, team.id, bob.id, TeamRole.MEMBER)

    result = await db.execute(
        select(Project).filter(Project.team_id == team.id, Project.name == PROJECT_NAME)
    )
    project = result.scalar_one_or_none()
    if project is None:
        project = Project(team_id=team.id, name=PROJECT_NAME, description="Product launch project", created_by=alice.id)
        db.add(project)
        await db.flush()

        db.add_all([
            Task(project_id=project.id, title="Plan campaign", description="Define channels and KPIs",
                 status="in_progress", priority="high", assignee_id=alice.id, order_index=1),
            Task(project_id=project.id, title="Design assets", description="Create visuals",
                 status="todo", priority="medium", assignee_id=bob.id, order_index=1),
            Task(project_id=project.id, title="Update landing page", description="Copy and layout",
                 status="todo", priority="low", order_index=2),
        ])

    await db.commit()
    return team


async def main():
    setup_logging()
    await init_db()
    async with SessionAsync() as db:
        team = await seed(db)
    logger.info(f"Seed completed. Users: alice@example.com / bob@example.com, password: {DEMO_PASSWORD}")
    logger.info(f"Team code: {team.team_code}")


if __name__ == "__main__":
    asyncio.run(main())
