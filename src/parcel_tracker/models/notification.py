"""
Notification model - the append-only event log.

Every successful mutation writes one or more notifications in the same
transaction. Ids follow emission order, so observers can rebuild history
by reading notifications with id greater than the last one they saw.
"""

from sqlalchemy import JSON, Column, Integer, String, Index

from .base import BaseModel


class Notification(BaseModel):
    """
    A notification emitted by a registry operation.

    Attributes:
        name: Notification name (e.g. "PackageCreated", "StatusUpdated")
        package_id: Package the notification concerns, None for admin events
        payload: Notification fields as a JSON object
        emitted_at: Unix seconds of the emitting operation
    """

    __tablename__ = "notifications"

    name = Column(String(64), nullable=False)
    package_id = Column(Integer, nullable=True)
    payload = Column(JSON, nullable=False, default=dict)
    emitted_at = Column(Integer, nullable=False)

    __table_args__ = (
        Index("idx_notification_name", "name"),
        Index("idx_notification_package", "package_id"),
    )

    def __repr__(self) -> str:
        """String representation of notification."""
        return f"Notification(id={self.id}, name='{self.name}', package_id={self.package_id})"
