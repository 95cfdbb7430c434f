"""
Registry state model.

This module contains:
- RegistryState: the single row holding ownership, the pause switch and
  the package id counter
"""

from sqlalchemy import Boolean, Column, Integer, String

from .base import BaseModel


class RegistryState(BaseModel):
    """
    Registry-wide state. Exactly one row exists once a registry is deployed.

    Attributes:
        owner: Account holding top-tier rights
        paused: When True, package mutations are rejected
        next_package_id: Id the next created package will receive (starts at 1)
        deployed_at: Unix seconds when the registry was deployed
    """

    __tablename__ = "registry_state"

    owner = Column(String(128), nullable=False)
    paused = Column(Boolean, nullable=False, default=False)
    next_package_id = Column(Integer, nullable=False, default=1)
    deployed_at = Column(Integer, nullable=False)

    def __repr__(self) -> str:
        """String representation of registry state."""
        paused = " (paused)" if self.paused else ""
        return f"RegistryState(owner='{self.owner}', next_package_id={self.next_package_id}{paused})"
