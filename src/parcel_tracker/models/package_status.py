"""
Package status enum for delivery lifecycle tracking.

Status transitions:
    CREATED -> any non-terminal status via update_status (IN_TRANSIT,
        OUT_FOR_DELIVERY, or back to CREATED)
    non-terminal -> DELIVERED (confirm_delivery, recipient only)
    non-terminal -> CANCELLED (cancel) or RETURNED (mark_returned/update_status)

Terminal statuses (DELIVERED, CANCELLED, RETURNED) never change again.
Movement between non-terminal statuses is not ordered: regressing from
OUT_FOR_DELIVERY to IN_TRANSIT is allowed.
"""

import enum


class PackageStatus(str, enum.Enum):
    """Delivery lifecycle status for a Package."""

    CREATED = "created"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"

    @property
    def is_terminal(self) -> bool:
        """True for statuses that finalize a package."""
        return self in TERMINAL_STATUSES

    @classmethod
    def parse(cls, value) -> "PackageStatus":
        """
        Resolve a status from an enum member, value or name.

        Accepts "in_transit", "IN_TRANSIT", "InTransit" and PackageStatus.IN_TRANSIT.

        Raises:
            ValueError: If the value names no status
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip()
            for member in cls:
                if key in (member.value, member.name) or key.lower() == member.name.replace("_", "").lower():
                    return member
        raise ValueError(f"Unknown package status: {value!r}")


TERMINAL_STATUSES = frozenset(
    {PackageStatus.DELIVERED, PackageStatus.CANCELLED, PackageStatus.RETURNED}
)
