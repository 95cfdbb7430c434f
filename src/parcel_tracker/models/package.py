"""
Package model for delivery tracking.

This module contains:
- Package: A parcel moving from sender to recipient, optionally handled
  by an assigned courier
"""

from sqlalchemy import Column, Enum as SQLEnum, Integer, String, Text, Index
from sqlalchemy.orm import relationship

from .base import BaseModel
from .package_status import PackageStatus


class Package(BaseModel):
    """
    Package model representing one parcel in the registry.

    Ids come from RegistryState.next_package_id, not database autoincrement,
    so they start at 1 and are never reused.

    Attributes:
        sender: Account that created the package (immutable)
        recipient: Destination account (immutable, never null)
        courier: Assigned courier account, None until first assignment
        status: Current PackageStatus
        description: Free-form description (immutable)
        pickup: Free-form pickup location (immutable)
        created_at: Unix seconds at creation
        updated_at: Unix seconds at last mutation
    """

    __tablename__ = "packages"

    sender = Column(String(128), nullable=False)
    recipient = Column(String(128), nullable=False)
    courier = Column(String(128), nullable=True)
    status = Column(SQLEnum(PackageStatus), nullable=False, default=PackageStatus.CREATED)
    description = Column(Text, nullable=False, default="")
    pickup = Column(Text, nullable=False, default="")
    created_at = Column(Integer, nullable=False)
    updated_at = Column(Integer, nullable=False)

    checkpoints = relationship(
        "Checkpoint",
        back_populates="package",
        cascade="all, delete-orphan",
        order_by="Checkpoint.sequence",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_package_status", "status"),
        Index("idx_package_recipient", "recipient"),
        Index("idx_package_courier", "courier"),
        Index("idx_package_sender", "sender"),
    )

    @property
    def is_finalized(self) -> bool:
        """True once the package has reached a terminal status."""
        return self.status.is_terminal

    def __repr__(self) -> str:
        """String representation of package."""
        return f"Package(id={self.id}, status={self.status.value}, recipient='{self.recipient}')"

    def to_dict(self, include_relationships: bool = False) -> dict:
        """
        Convert package to dictionary.

        Args:
            include_relationships: If True, include the checkpoint history

        Returns:
            Dictionary representation with calculated fields
        """
        result = super().to_dict(include_relationships)
        result["is_finalized"] = self.is_finalized
        result["checkpoint_count"] = len(self.checkpoints) if self.checkpoints else 0
        return result
