"""
Database models package.

This package contains all SQLAlchemy ORM models for the application.
"""

from .base import Base, BaseModel
from .package_status import PackageStatus, TERMINAL_STATUSES
from .registry_state import RegistryState
from .role_grant import Role, RoleGrant
from .package import Package
from .checkpoint import Checkpoint
from .notification import Notification

__all__ = [
    "Base",
    "BaseModel",
    "PackageStatus",
    "TERMINAL_STATUSES",
    "RegistryState",
    "Role",
    "RoleGrant",
    "Package",
    "Checkpoint",
    "Notification",
]
