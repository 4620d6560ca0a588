"""Team member schema: roles, capability flags and business members."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field


class Role(str, Enum):
    """Member role, ordered by capability: owner > admin > worker."""

    OWNER = "owner"
    ADMIN = "admin"
    WORKER = "worker"


class PermissionSet(BaseModel):
    """Capability flags granted to a member through its role."""

    # Transactions
    can_add_transaction: bool = False
    can_view_transactions: bool = False
    can_delete_transaction: bool = False

    # Customers
    can_add_customer: bool = False
    can_view_customers: bool = False
    can_edit_customer: bool = False

    # Products
    can_add_product: bool = False
    can_edit_product: bool = False
    can_delete_product: bool = False

    # Inventory
    can_manage_inventory: bool = False

    # Business
    can_edit_business: bool = False
    can_view_reports: bool = False
    can_manage_members: bool = False

    model_config = {"frozen": True}

    def granted(self) -> set[str]:
        """Names of the flags that are set."""
        return {name for name, value in self.model_dump().items() if value}

    def issubset(self, other: PermissionSet) -> bool:
        return self.granted() <= other.granted()


class RoleInfo(BaseModel):
    """Display metadata for a role."""

    label: str
    description: str
    color: str


ROLE_INFO: dict[Role, RoleInfo] = {
    Role.OWNER: RoleInfo(
        label="Owner",
        description="Full access to all features and settings",
        color="#f59e0b",
    ),
    Role.ADMIN: RoleInfo(
        label="Admin",
        description="Can manage daily operations",
        color="#3b82f6",
    ),
    Role.WORKER: RoleInfo(
        label="Worker",
        description="Can add transactions and view data",
        color="#10b981",
    ),
}


class BusinessMember(BaseModel):
    """
    A person with access to a business.

    Records are immutable; role changes and removals produce new records
    through the permission model so ``role`` and ``permissions`` never drift.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str = ""
    business_id: str = ""
    role: Role
    name: str
    phone_number: str
    email: str | None = None
    permissions: PermissionSet
    added_by: str = ""
    added_at: datetime = Field(default_factory=datetime.now)
    is_active: bool = True

    model_config = {"frozen": True}

    @property
    def is_owner(self) -> bool:
        return self.role == Role.OWNER
