"""
Role grant model for operator and courier membership.

A row present for (account, role) means the account holds the role.
Ownership is not a grant; it lives on RegistryState.
"""

import enum

from sqlalchemy import Column, Enum as SQLEnum, Integer, String, UniqueConstraint, Index

from .base import BaseModel


class Role(str, enum.Enum):
    """Roles that can be granted to accounts."""

    OPERATOR = "operator"
    COURIER = "courier"


class RoleGrant(BaseModel):
    """
    Membership of an account in the operator set or courier whitelist.

    Attributes:
        account: Account identity
        role: OPERATOR or COURIER
        granted_at: Unix seconds when the grant was made
    """

    __tablename__ = "role_grants"

    account = Column(String(128), nullable=False)
    role = Column(SQLEnum(Role), nullable=False)
    granted_at = Column(Integer, nullable=False)

    __table_args__ = (
        UniqueConstraint("account", "role", name="uq_role_grant_account_role"),
        Index("idx_role_grant_role", "role"),
    )

    def __repr__(self) -> str:
        """String representation of role grant."""
        return f"RoleGrant(account='{self.account}', role={self.role.value})"
