"""
Role-based permission model for business team members.

Single source of truth for Role -> PermissionSet, and gatekeeper for every
operation that changes a member's role or membership. The owner is unique
per business and can be neither demoted nor removed.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime

from khata.errors import InvariantViolation, PermissionDenied
from khata.schema.member import BusinessMember, PermissionSet, Role

logger = logging.getLogger(__name__)

_CANONICAL_PERMISSIONS: dict[Role, PermissionSet] = {
    Role.OWNER: PermissionSet(
        can_add_transaction=True,
        can_view_transactions=True,
        can_delete_transaction=True,
        can_add_customer=True,
        can_view_customers=True,
        can_edit_customer=True,
        can_add_product=True,
        can_edit_product=True,
        can_delete_product=True,
        can_manage_inventory=True,
        can_edit_business=True,
        can_view_reports=True,
        can_manage_members=True,
    ),
    Role.ADMIN: PermissionSet(
        can_add_transaction=True,
        can_view_transactions=True,
        can_delete_transaction=True,
        can_add_customer=True,
        can_view_customers=True,
        can_edit_customer=True,
        can_add_product=True,
        can_edit_product=True,
        can_delete_product=True,
        can_manage_inventory=True,
        can_view_reports=True,
    ),
    Role.WORKER: PermissionSet(
        can_add_transaction=True,
        can_view_transactions=True,
        can_add_customer=True,
        can_view_customers=True,
    ),
}

_unmapped = set(Role) - set(_CANONICAL_PERMISSIONS)
if _unmapped:
    raise RuntimeError(f"Roles without a permission set: {sorted(r.value for r in _unmapped)}")

# Roles a member may be invited as or moved between
ASSIGNABLE_ROLES: tuple[Role, ...] = (Role.WORKER, Role.ADMIN)


def permissions_for(role: Role | str) -> PermissionSet:
    """Return the canonical permission set for ``role``."""
    return _CANONICAL_PERMISSIONS[Role(role)]


def can_change_role(member: BusinessMember, proposed_role: Role | str) -> bool:
    """Whether ``member`` may be moved to ``proposed_role``."""
    if member.role == Role.OWNER:
        return False
    return Role(proposed_role) in ASSIGNABLE_ROLES


def can_remove(member: BusinessMember) -> bool:
    """Whether ``member`` may be removed from the team."""
    return member.role != Role.OWNER


def has_permission(member: BusinessMember, permission: str) -> bool:
    """Whether an active ``member`` holds the named capability flag."""
    if permission not in PermissionSet.model_fields:
        raise KeyError(f"Unknown permission: {permission}")
    return member.is_active and bool(getattr(member.permissions, permission))


def new_member(
    name: str,
    phone_number: str,
    role: Role | str,
    business_id: str = "",
    added_by: str = "",
    user_id: str = "",
    email: str | None = None,
    added_at: datetime | None = None,
) -> BusinessMember:
    """Build a member record whose permissions match its role."""
    role = Role(role)
    return BusinessMember(
        user_id=user_id,
        business_id=business_id,
        role=role,
        name=name,
        phone_number=phone_number,
        email=email,
        permissions=permissions_for(role),
        added_by=added_by,
        added_at=added_at or datetime.now(),
    )


def apply_role_change(member: BusinessMember, new_role: Role | str) -> BusinessMember:
    """
    Return a copy of ``member`` with ``new_role`` and its canonical permissions.

    Raises:
        InvariantViolation: if the member is the owner or ``new_role`` is owner.
    """
    new_role = Role(new_role)
    if not can_change_role(member, new_role):
        logger.warning("Rejected role change of %s (%s) to %s", member.id, member.role.value, new_role.value)
        if member.role == Role.OWNER:
            raise InvariantViolation("The owner role cannot be changed")
        raise InvariantViolation(f"Members cannot be given the {new_role.value} role")
    return member.model_copy(update={"role": new_role, "permissions": permissions_for(new_role)})


def apply_removal(member: BusinessMember) -> BusinessMember:
    """
    Return a deactivated copy of ``member``.

    Members are never hard-deleted because historical records reference them.

    Raises:
        InvariantViolation: if the member is the owner.
    """
    if not can_remove(member):
        logger.warning("Rejected removal of owner %s", member.id)
        raise InvariantViolation("The owner cannot be removed from the team")
    return member.model_copy(update={"is_active": False})


def validate_roster(
    members: Iterable[BusinessMember],
    business_ids: Iterable[str] = (),
) -> None:
    """
    Check the member list of one or more businesses.

    Each business must have exactly one owner, and every member's permissions
    must be the canonical set for its role. Businesses named in
    ``business_ids`` are checked even when no member belongs to them.

    Raises:
        InvariantViolation: on the first violation found.
    """
    owners: dict[str, int] = defaultdict(int)
    businesses: set[str] = set(business_ids)

    for member in members:
        businesses.add(member.business_id)
        if member.role == Role.OWNER:
            owners[member.business_id] += 1
        if member.permissions != permissions_for(member.role):
            raise InvariantViolation(
                f"Member {member.id} has permissions that do not match role {member.role.value}"
            )

    for business_id in sorted(businesses):
        count = owners.get(business_id, 0)
        if count != 1:
            raise InvariantViolation(
                f"Business {business_id or '<unset>'} has {count} owners, expected exactly one"
            )


def require_permission(member: BusinessMember, permission: str) -> None:
    """
    Raises:
        PermissionDenied: unless ``member`` is active and holds ``permission``.
    """
    if not has_permission(member, permission):
        raise PermissionDenied(member.id, permission)
