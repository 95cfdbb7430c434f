"""
Checkpoint model for package location history.

Checkpoints are append-only. The reporting account is authorized at
write time but not stored.
"""

from sqlalchemy import Column, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel


class Checkpoint(BaseModel):
    """
    One entry in a package's ordered checkpoint history.

    Attributes:
        package_id: Foreign key to Package
        sequence: 0-based position in the package's history
        time: Unix seconds when the checkpoint was recorded
        location: Free-form location text
        note: Free-form note
    """

    __tablename__ = "checkpoints"

    package_id = Column(Integer, ForeignKey("packages.id", ondelete="CASCADE"), nullable=False)
    sequence = Column(Integer, nullable=False)
    time = Column(Integer, nullable=False)
    location = Column(Text, nullable=False, default="")
    note = Column(Text, nullable=False, default="")

    package = relationship("Package", back_populates="checkpoints")

    __table_args__ = (
        UniqueConstraint("package_id", "sequence", name="uq_checkpoint_package_sequence"),
    )

    def __repr__(self) -> str:
        """String representation of checkpoint."""
        return (
            f"Checkpoint(package_id={self.package_id}, sequence={self.sequence}, "
            f"location='{self.location}')"
        )
