"""Role-based permissions and team management."""

from khata.permissions.model import (
    ASSIGNABLE_ROLES,
    apply_removal,
    apply_role_change,
    can_change_role,
    can_remove,
    has_permission,
    new_member,
    permissions_for,
    require_permission,
    validate_roster,
)
from khata.permissions.team import MemberWriter, TeamOperation, TeamRoster

__all__ = [
    # Model
    "ASSIGNABLE_ROLES",
    "permissions_for",
    "can_change_role",
    "can_remove",
    "has_permission",
    "require_permission",
    "new_member",
    "apply_role_change",
    "apply_removal",
    "validate_roster",
    # Team
    "TeamRoster",
    "TeamOperation",
    "MemberWriter",
]
