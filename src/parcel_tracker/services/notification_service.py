"""
Notification Service - the registry's append-only event stream.

Operations write notifications through emit() inside their own
transaction. Nothing is delivered to in-process subscribers until that
transaction commits; a rollback discards the pending notifications
together with the rows.

Observers outside the process rebuild history with list_notifications(),
polling with after_id set to the last id they processed.
"""

from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import event
from sqlalchemy.orm import Session

from parcel_tracker.models import Notification
from parcel_tracker.services.database import session_scope
from parcel_tracker.services.logging_utils import get_service_logger

logger = get_service_logger(__name__)

# Notification names
OWNERSHIP_TRANSFERRED = "OwnershipTransferred"
PAUSED = "Paused"
UNPAUSED = "Unpaused"
OPERATOR_SET = "OperatorSet"
COURIER_SET = "CourierSet"
PACKAGE_CREATED = "PackageCreated"
COURIER_ASSIGNED = "CourierAssigned"
STATUS_UPDATED = "StatusUpdated"
CHECKPOINT_ADDED = "CheckpointAdded"
DELIVERED = "Delivered"
CANCELLED = "Cancelled"
RETURNED = "Returned"

NOTIFICATION_NAMES = (
    OWNERSHIP_TRANSFERRED,
    PAUSED,
    UNPAUSED,
    OPERATOR_SET,
    COURIER_SET,
    PACKAGE_CREATED,
    COURIER_ASSIGNED,
    STATUS_UPDATED,
    CHECKPOINT_ADDED,
    DELIVERED,
    CANCELLED,
    RETURNED,
)

_PENDING_KEY = "parcel_tracker.pending_notifications"

Subscriber = Callable[[Notification], None]
_subscribers: List[Subscriber] = []


def emit(
    session: Session,
    name: str,
    payload: Dict[str, Any],
    emitted_at: int,
    package_id: Optional[int] = None,
) -> Notification:
    """
    Record a notification in the caller's transaction.

    Transaction boundary: Inherits session from caller.

    Args:
        session: Active session of the emitting operation
        name: One of NOTIFICATION_NAMES
        payload: Notification fields (JSON-serializable)
        emitted_at: Unix seconds of the emitting operation
        package_id: Package concerned, if any

    Returns:
        The flushed Notification (id assigned)
    """
    notification = Notification(
        name=name,
        package_id=package_id,
        payload=payload,
        emitted_at=emitted_at,
    )
    session.add(notification)
    session.flush()
    session.info.setdefault(_PENDING_KEY, []).append(notification)
    return notification


def subscribe(callback: Subscriber) -> None:
    """Register a callback invoked with each notification after commit."""
    if callback not in _subscribers:
        _subscribers.append(callback)


def unsubscribe(callback: Subscriber) -> None:
    """Remove a previously registered callback (no-op if absent)."""
    if callback in _subscribers:
        _subscribers.remove(callback)


def clear_subscribers() -> None:
    """Remove all callbacks."""
    _subscribers.clear()


@event.listens_for(Session, "after_commit")
def _dispatch_committed(session):
    pending = session.info.pop(_PENDING_KEY, [])
    for notification in pending:
        for callback in list(_subscribers):
            try:
                callback(notification)
            except Exception:
                # State is already committed; a failing observer must not
                # stop delivery to the others.
                logger.exception(
                    f"Subscriber {callback!r} failed on notification {notification.id}"
                )


@event.listens_for(Session, "after_rollback")
def _discard_rolled_back(session):
    session.info.pop(_PENDING_KEY, None)


def _list_notifications_impl(
    package_id: Optional[int],
    name: Optional[str],
    after_id: Optional[int],
    session: Session,
) -> List[Notification]:
    query = session.query(Notification)
    if package_id is not None:
        query = query.filter(Notification.package_id == package_id)
    if name is not None:
        query = query.filter(Notification.name == name)
    if after_id is not None:
        query = query.filter(Notification.id > after_id)
    return query.order_by(Notification.id).all()


def list_notifications(
    package_id: Optional[int] = None,
    name: Optional[str] = None,
    after_id: Optional[int] = None,
    session: Session = None,
) -> List[Notification]:
    """
    List emitted notifications in emission order.

    Transaction boundary: Read-only query.

    Args:
        package_id: Only notifications about this package
        name: Only notifications with this name
        after_id: Only notifications with id greater than this
        session: Optional session for transaction sharing

    Returns:
        List of Notification instances ordered by id
    """
    if session is not None:
        return _list_notifications_impl(package_id, name, after_id, session)

    with session_scope() as session:
        return _list_notifications_impl(package_id, name, after_id, session)
