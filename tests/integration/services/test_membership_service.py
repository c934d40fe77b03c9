"""
Integration tests for the membership service (taskboard/services/teams.py).

Services are called directly against a real SQLite database.
"""

import itertools

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.exceptions import (
    BadRequestError,
    CodeGenerationExhausted,
    ConflictError,
    ForbiddenError,
    NotFoundError,
)
from taskboard.core.permissions import Action, Resource, TeamRole
from taskboard.models.team import Team
from taskboard.models.team_member import TeamMember
from taskboard.services import teams as team_service
from tests.factories import TeamFactory, TeamMemberFactory, UserFactory


async def count_rows(db: AsyncSession, column) -> int:
    return await db.scalar(select(func.count(column)))


@pytest.mark.asyncio
class TestRequires:

    async def test_admin_may_invite(self, db_session: AsyncSession, user, team):
        admin = await UserFactory.create_async(db_session)
        await TeamMemberFactory.create_async(db_session, team_id=team.id, user_id=admin.id, role="admin")
        await db_session.commit()

        membership = await team_service.requires(
            db_session, admin, team.id, Resource.TEAM_MEMBER, Action.INVITE
        )

        assert membership.role == "admin"

    async def test_member_may_not_invite(self, db_session: AsyncSession, team):
        member = await UserFactory.create_async(db_session)
        await TeamMemberFactory.create_async(db_session, team_id=team.id, user_id=member.id)
        await db_session.commit()

        with pytest.raises(ForbiddenError, match="admin role"):
            await team_service.requires(db_session, member, team.id, Resource.TEAM_MEMBER, Action.INVITE)

        membership = await team_service.requires(
            db_session, member, team.id, Resource.TASK, Action.UPDATE
        )
        assert membership.role == "member"

    async def test_pair_missing_from_matrix_denied_even_to_owner(self, db_session: AsyncSession, user, team):
        with pytest.raises(ForbiddenError):
            await team_service.requires(db_session, user, team.id, Resource.PROJECT, Action.DELETE)

    async def test_non_member_denied(self, db_session: AsyncSession, other_user, team):
        with pytest.raises(ForbiddenError, match="not a member"):
            await team_service.requires(db_session, other_user, team.id, Resource.PROJECT, Action.READ)


@pytest.mark.asyncio
class TestCreateTeam:

    async def test_creator_becomes_sole_owner(self, db_session: AsyncSession, user):
        team, member_count = await team_service.create_team(db_session, user, "Core Team", "Main team")

        assert member_count == 1
        assert team.created_by == user.id
        assert len(team.team_code) == 6

        result = await db_session.execute(select(TeamMember).filter(TeamMember.team_id == team.id))
        members = result.scalars().all()
        assert [(m.user_id, m.role) for m in members] == [(user.id, "owner")]

    async def test_blank_name_rejected(self, db_session: AsyncSession, user):
        with pytest.raises(BadRequestError):
            await team_service.create_team(db_session, user, "   ")

        assert await count_rows(db_session, Team.id) == 0

    async def test_retries_on_code_collision(self, db_session: AsyncSession, user):
        await TeamFactory.create_async(db_session, created_by=user.id, team_code="AAAAAA")
        await db_session.commit()
        codes = iter(["AAAAAA", "AAAAAA", "BBBBBB"])

        team, _ = await team_service.create_team(
            db_session, user, "Second", code_generator=lambda: next(codes)
        )

        assert team.team_code == "BBBBBB"

    async def test_gives_up_after_max_attempts(self, db_session: AsyncSession, user):
        await TeamFactory.create_async(db_session, created_by=user.id, team_code="AAAAAA")
        await db_session.commit()
        calls = itertools.count()

        def always_taken():
            next(calls)
            return "AAAAAA"

        with pytest.raises(CodeGenerationExhausted):
            await team_service.create_team(
                db_session, user, "Doomed", code_generator=always_taken, max_attempts=3
            )

        assert next(calls) == 3
        assert await count_rows(db_session, Team.id) == 1

    async def test_retries_when_unique_constraint_rejects_code(
        self, db_session: AsyncSession, user, monkeypatch
    ):
        user_id = user.id
        await TeamFactory.create_async(db_session, created_by=user_id, team_code="AAAAAA")
        await db_session.commit()

        async def never_taken(db, code):
            return False

        monkeypatch.setattr(team_service, "_team_code_taken", never_taken)
        codes = iter(["AAAAAA", "BBBBBB"])

        team, member_count = await team_service.create_team(
            db_session, user, "Second", code_generator=lambda: next(codes)
        )

        assert team.team_code == "BBBBBB"
        assert member_count == 1
        assert await count_rows(db_session, Team.id) == 2
        result = await db_session.execute(
            select(TeamMember.user_id, TeamMember.role).filter(TeamMember.team_id == team.id)
        )
        assert result.all() == [(user_id, "owner")]
        orphans = await db_session.execute(
            select(Team.id).filter(~Team.id.in_(select(TeamMember.team_id)))
        )
        assert orphans.all() == []

    async def test_constraint_collisions_exhaust_the_bound(
        self, db_session: AsyncSession, user, monkeypatch
    ):
        await TeamFactory.create_async(db_session, created_by=user.id, team_code="AAAAAA")
        await db_session.commit()

        async def never_taken(db, code):
            return False

        monkeypatch.setattr(team_service, "_team_code_taken", never_taken)

        with pytest.raises(CodeGenerationExhausted):
            await team_service.create_team(
                db_session, user, "Doomed", code_generator=lambda: "AAAAAA", max_attempts=2
            )

        assert await count_rows(db_session, Team.id) == 1
        assert await count_rows(db_session, TeamMember.id) == 1

    async def test_exhaustion_is_a_conflict(self):
        assert issubclass(CodeGenerationExhausted, ConflictError)


@pytest.mark.asyncio
class TestListTeams:

    async def test_mine_and_available_partition_all_teams(self, db_session: AsyncSession, user, other_user):
        mine = await TeamFactory.create_async(db_session, created_by=user.id)
        theirs = await TeamFactory.create_async(db_session, created_by=other_user.id)
        shared = await TeamFactory.create_async(db_session, created_by=other_user.id)
        await TeamMemberFactory.create_async(db_session, team_id=shared.id, user_id=user.id)
        await db_session.commit()

        my_ids = {t.id for t, _ in await team_service.list_teams_for_user(db_session, user)}
        available_ids = {t.id for t, _ in await team_service.list_available_teams(db_session, user)}

        assert my_ids == {mine.id, shared.id}
        assert available_ids == {theirs.id}
        assert my_ids.isdisjoint(available_ids)

    async def test_newest_first_with_member_counts(self, db_session: AsyncSession, user, other_user):
        first, _ = await team_service.create_team(db_session, user, "First")
        second, _ = await team_service.create_team(db_session, user, "Second")
        await TeamMemberFactory.create_async(db_session, team_id=second.id, user_id=other_user.id)
        await db_session.commit()

        teams = await team_service.list_teams_for_user(db_session, user)

        assert [(t.id, count) for t, count in teams] == [(second.id, 2), (first.id, 1)]

    async def test_user_without_teams(self, db_session: AsyncSession, user):
        assert await team_service.list_teams_for_user(db_session, user) == []


@pytest.mark.asyncio
class TestAddMember:

    async def test_owner_adds_member_by_email(self, db_session: AsyncSession, user, other_user, team):
        membership = await team_service.add_member(db_session, user, team.id, email="BOB@example.com")

        assert membership.user_id == other_user.id
        assert membership.role == "member"

    async def test_admin_adds_admin_by_id(self, db_session: AsyncSession, user, other_user, team):
        admin = await UserFactory.create_async(db_session)
        await TeamMemberFactory.create_async(db_session, team_id=team.id, user_id=admin.id, role="admin")
        await db_session.commit()

        membership = await team_service.add_member(
            db_session, admin, team.id, user_id=other_user.id, role=TeamRole.ADMIN
        )

        assert membership.role == "admin"

    async def test_member_cannot_add_and_nothing_changes(self, db_session: AsyncSession, user, other_user, team):
        member = await UserFactory.create_async(db_session)
        await TeamMemberFactory.create_async(db_session, team_id=team.id, user_id=member.id)
        await db_session.commit()

        with pytest.raises(ForbiddenError):
            await team_service.add_member(db_session, member, team.id, user_id=other_user.id)

        assert await team_service.get_membership(db_session, team.id, other_user.id) is None

    async def test_non_member_is_forbidden(self, db_session: AsyncSession, other_user, team):
        with pytest.raises(ForbiddenError):
            await team_service.add_member(db_session, other_user, team.id, user_id=other_user.id)

    async def test_unknown_email_not_found(self, db_session: AsyncSession, user, team):
        with pytest.raises(NotFoundError):
            await team_service.add_member(db_session, user, team.id, email="nobody@example.com")

    async def test_owner_role_cannot_be_granted(self, db_session: AsyncSession, user, other_user, team):
        with pytest.raises(BadRequestError):
            await team_service.add_member(db_session, user, team.id, user_id=other_user.id, role="owner")

    async def test_requires_email_or_id(self, db_session: AsyncSession, user, team):
        with pytest.raises(BadRequestError):
            await team_service.add_member(db_session, user, team.id)

    async def test_existing_member_conflicts_and_role_unchanged(self, db_session: AsyncSession, user, other_user, team):
        team_id, other_id = team.id, other_user.id
        await TeamMemberFactory.create_async(db_session, team_id=team_id, user_id=other_id, role="member")
        await db_session.commit()

        with pytest.raises(ConflictError):
            await team_service.add_member(db_session, user, team_id, user_id=other_id, role="admin")

        membership = await team_service.get_membership(db_session, team_id, other_id)
        assert membership.role == "member"


@pytest.mark.asyncio
class TestGetTeamMembers:

    async def test_ordered_owner_admin_member(self, db_session: AsyncSession, user, team):
        member = await UserFactory.create_async(db_session)
        admin = await UserFactory.create_async(db_session)
        await TeamMemberFactory.create_async(db_session, team_id=team.id, user_id=member.id, role="member")
        await TeamMemberFactory.create_async(db_session, team_id=team.id, user_id=admin.id, role="admin")
        await db_session.commit()

        members = await team_service.get_team_members(db_session, member, team.id)

        assert [(m.role, u.id) for m, u in members] == [
            ("owner", user.id),
            ("admin", admin.id),
            ("member", member.id),
        ]

    async def test_non_member_forbidden(self, db_session: AsyncSession, other_user, team):
        with pytest.raises(ForbiddenError):
            await team_service.get_team_members(db_session, other_user, team.id)

    async def test_unknown_team_forbidden(self, db_session: AsyncSession, user):
        with pytest.raises(ForbiddenError):
            await team_service.get_team_members(db_session, user, 9999)


@pytest.mark.asyncio
class TestJoinByCode:

    async def test_join_as_member(self, db_session: AsyncSession, other_user, team):
        team_id = await team_service.join_team_by_code(db_session, other_user, team.team_code)

        assert team_id == team.id
        membership = await team_service.get_membership(db_session, team.id, other_user.id)
        assert membership.role == "member"

    async def test_code_is_case_insensitive(self, db_session: AsyncSession, other_user, team):
        team_id = await team_service.join_team_by_code(db_session, other_user, f" {team.team_code.lower()} ")
        assert team_id == team.id

    async def test_unknown_code_creates_nothing(self, db_session: AsyncSession, other_user, team):
        before = await count_rows(db_session, TeamMember.id)

        with pytest.raises(NotFoundError):
            await team_service.join_team_by_code(db_session, other_user, "ZZZZZZ9")

        assert await count_rows(db_session, TeamMember.id) == before

    async def test_empty_code_rejected(self, db_session: AsyncSession, other_user):
        with pytest.raises(BadRequestError):
            await team_service.join_team_by_code(db_session, other_user, "  ")

    async def test_owner_joining_own_team_conflicts(self, db_session: AsyncSession, user, team):
        team_id, code, user_id = team.id, team.team_code, user.id

        with pytest.raises(ConflictError):
            await team_service.join_team_by_code(db_session, user, code)

        membership = await team_service.get_membership(db_session, team_id, user_id)
        assert membership.role == "owner"
