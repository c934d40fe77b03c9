"""
Data factories for test data generation.

Factories use factory-boy to create realistic test data with sensible defaults.
All factories support async creation via create_async() method.

Usage:
    from tests.factories import UserFactory, TeamFactory

    # Create user
    user = await UserFactory.create_async(db_session, email="custom@example.com")

    # Create team (owner membership included)
    team = await TeamFactory.create_async(db_session, created_by=user.id)
"""

from tests.factories.user import UserFactory
from tests.factories.team import TeamFactory
from tests.factories.team_member import TeamMemberFactory
from tests.factories.project import ProjectFactory
from tests.factories.task import TaskFactory

__all__ = [
    "UserFactory",
    "TeamFactory",
    "TeamMemberFactory",
    "ProjectFactory",
    "TaskFactory",
]
