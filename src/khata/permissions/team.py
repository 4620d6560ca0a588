"""
Team roster for one business.

Invites, role changes and removals all go through the permission model, so
the single-owner and role/permission invariants hold for every state the
roster can reach.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from enum import Enum

from khata.errors import InvariantViolation, ValidationError
from khata.permissions.model import (
    ASSIGNABLE_ROLES,
    apply_removal,
    apply_role_change,
    new_member,
    require_permission,
    validate_roster,
)
from khata.schema.member import BusinessMember, Role
from khata.validation import format_phone, validate_email, validate_name

logger = logging.getLogger(__name__)


class TeamOperation(Enum):
    """Kind of roster mutation handed to a member writer."""

    INVITE = "invite"
    CHANGE_ROLE = "change_role"
    REMOVE = "remove"


# Confirms a mutation remotely before the roster commits it
MemberWriter = Callable[[TeamOperation, BusinessMember], Awaitable[None]]


class TeamRoster:
    """
    Members of one business.

    When a ``writer`` is configured, every mutation is awaited through it
    first and only committed locally once it returns. If it raises, the
    roster is left unchanged and the error propagates.
    """

    def __init__(
        self,
        business_id: str,
        members: Iterable[BusinessMember],
        writer: MemberWriter | None = None,
    ):
        self.business_id = business_id
        self._members: dict[str, BusinessMember] = {}
        for member in members:
            if member.business_id != business_id:
                raise ValidationError(
                    f"Member {member.id} belongs to business {member.business_id}, not {business_id}"
                )
            self._members[member.id] = member
        validate_roster(self._members.values(), business_ids=[business_id])
        self._writer = writer

    @classmethod
    def for_owner(
        cls,
        business_id: str,
        name: str,
        phone_number: str,
        user_id: str = "",
        writer: MemberWriter | None = None,
    ) -> TeamRoster:
        """Start a roster with its owner, as done at business registration."""
        owner = new_member(
            name=validate_name(name),
            phone_number=format_phone(phone_number),
            role=Role.OWNER,
            business_id=business_id,
            user_id=user_id,
            added_by=user_id,
        )
        return cls(business_id, [owner], writer=writer)

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, member_id: object) -> bool:
        return member_id in self._members

    @property
    def owner(self) -> BusinessMember:
        for member in self._members.values():
            if member.role == Role.OWNER:
                return member
        raise InvariantViolation(f"Business {self.business_id} has no owner")

    def members(self) -> list[BusinessMember]:
        """All members, including removed ones, in the order they joined."""
        return list(self._members.values())

    def active_members(self) -> list[BusinessMember]:
        return [m for m in self._members.values() if m.is_active]

    def get(self, member_id: str) -> BusinessMember:
        try:
            return self._members[member_id]
        except KeyError:
            raise KeyError(f"Member {member_id} not found") from None

    async def invite(
        self,
        name: str,
        phone_number: str,
        role: Role | str = Role.WORKER,
        added_by: BusinessMember | None = None,
        email: str | None = None,
    ) -> BusinessMember:
        """
        Add a new admin or worker.

        Raises:
            ValidationError: missing name, bad phone/email, or phone already on the team.
            InvariantViolation: if ``role`` is owner.
            PermissionDenied: if ``added_by`` cannot manage members.
        """
        if added_by is not None:
            require_permission(added_by, "can_manage_members")

        role = Role(role)
        if role not in ASSIGNABLE_ROLES:
            raise InvariantViolation("A business can only have one owner")

        name = validate_name(name)
        phone = format_phone(phone_number)
        email = validate_email(email)

        if any(m.phone_number == phone for m in self.active_members()):
            raise ValidationError(f"{phone} is already on the team")

        member = new_member(
            name=name,
            phone_number=phone,
            role=role,
            business_id=self.business_id,
            added_by=added_by.user_id if added_by else "",
            email=email,
        )
        await self._commit(TeamOperation.INVITE, member)
        logger.info("Invited %s as %s to business %s", member.id, role.value, self.business_id)
        return member

    async def change_role(
        self,
        member_id: str,
        new_role: Role | str,
        changed_by: BusinessMember | None = None,
    ) -> BusinessMember:
        """
        Move a member between admin and worker.

        Raises:
            InvariantViolation: for the owner, an inactive member, or ``new_role`` owner.
            PermissionDenied: if ``changed_by`` cannot manage members.
        """
        if changed_by is not None:
            require_permission(changed_by, "can_manage_members")

        member = self._require_active(member_id)
        updated = apply_role_change(member, new_role)
        await self._commit(TeamOperation.CHANGE_ROLE, updated)
        return updated

    async def remove(
        self,
        member_id: str,
        removed_by: BusinessMember | None = None,
    ) -> BusinessMember:
        """
        Deactivate a member. The record is kept for historical references.

        Raises:
            InvariantViolation: for the owner or an already removed member.
            PermissionDenied: if ``removed_by`` cannot manage members.
        """
        if removed_by is not None:
            require_permission(removed_by, "can_manage_members")

        member = self._require_active(member_id)
        updated = apply_removal(member)
        await self._commit(TeamOperation.REMOVE, updated)
        return updated

    def _require_active(self, member_id: str) -> BusinessMember:
        member = self.get(member_id)
        if not member.is_active:
            raise InvariantViolation(f"Member {member_id} has been removed")
        return member

    async def _commit(self, operation: TeamOperation, member: BusinessMember) -> None:
        if self._writer is not None:
            await self._writer(operation, member)
        self._members[member.id] = member
