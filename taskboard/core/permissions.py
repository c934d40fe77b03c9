"""
Permission system for role-based access control (RBAC).

Team roles are ranked (owner < admin < member, lower rank = more power).
Every (resource, action) pair maps to the minimum role allowed to perform it,
so a single rank comparison answers every permission question.
"""

from enum import Enum
from typing import Dict, Set, Tuple


class TeamRole(str, Enum):
    """Roles a user can hold inside a team"""
    OWNER = "owner"      # Creator of the team
    ADMIN = "admin"      # Can add members
    MEMBER = "member"    # Standard access


# Explicit ordering used for gating and for member list display
ROLE_RANK: Dict[TeamRole, int] = {
    TeamRole.OWNER: 0,
    TeamRole.ADMIN: 1,
    TeamRole.MEMBER: 2,
}


class Resource(str, Enum):
    """Resources that can be accessed"""
    TEAM_MEMBER = "team_member"
    PROJECT = "project"
    TASK = "task"
    COMMENT = "comment"


class Action(str, Enum):
    """Actions that can be performed on resources"""
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    INVITE = "invite"


# Minimum role required for each permission
PERMISSION_MIN_ROLE: Dict[Tuple[Resource, Action], TeamRole] = {
    # Member management
    (Resource.TEAM_MEMBER, Action.READ): TeamRole.MEMBER,
    (Resource.TEAM_MEMBER, Action.INVITE): TeamRole.ADMIN,
    # Projects
    (Resource.PROJECT, Action.READ): TeamRole.MEMBER,
    (Resource.PROJECT, Action.CREATE): TeamRole.MEMBER,
    # Task board
    (Resource.TASK, Action.READ): TeamRole.MEMBER,
    (Resource.TASK, Action.CREATE): TeamRole.MEMBER,
    (Resource.TASK, Action.UPDATE): TeamRole.MEMBER,
    (Resource.TASK, Action.DELETE): TeamRole.MEMBER,
    # Comments
    (Resource.COMMENT, Action.READ): TeamRole.MEMBER,
    (Resource.COMMENT, Action.CREATE): TeamRole.MEMBER,
}

# Roles that may be granted through add_member (ownership comes only from creation)
GRANTABLE_ROLES: Set[TeamRole] = {TeamRole.ADMIN, TeamRole.MEMBER}


def role_satisfies(role: TeamRole, min_role: TeamRole) -> bool:
    """
    Check whether `role` is at least as powerful as `min_role`.

    Args:
        role: Role held by the caller
        min_role: Least powerful role that is still allowed

    Returns:
        True if role's rank is lower than or equal to min_role's rank
    """
    return ROLE_RANK[TeamRole(role)] <= ROLE_RANK[TeamRole(min_role)]


def has_permission(role: TeamRole, resource: Resource, action: Action) -> bool:
    """
    Check if a role has permission to perform an action on a resource.

    Unknown (resource, action) pairs are denied.
    """
    min_role = PERMISSION_MIN_ROLE.get((resource, action))
    if min_role is None:
        return False
    return role_satisfies(role, min_role)
