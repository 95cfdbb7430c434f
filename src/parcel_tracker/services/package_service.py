"""
Package Service - package lifecycle for the delivery registry.

Lifecycle:
    create_package (CREATED)
      -> assign_courier (any number of times, status unchanged)
      -> update_status / add_checkpoint (while not finalized)
      -> exactly one of confirm_delivery (DELIVERED), cancel (CANCELLED),
         mark_returned (RETURNED)

Finalized packages reject assign_courier, update_status, confirm_delivery,
cancel and mark_returned. add_checkpoint deliberately has no finalization
guard, so late annotations after delivery are still accepted.

Check order for every mutation:
    registry deployed -> not paused -> role checks that need no package
    -> arguments -> package exists -> not finalized -> package-dependent
    authorization -> courier whitelist

Session Management Pattern:
- All public functions accept session=None parameter
- If session provided, use it directly
- If session is None, create a new session via session_scope()
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from parcel_tracker.models import Checkpoint, Package, PackageStatus
from parcel_tracker.services import notification_service
from parcel_tracker.services.access_control import (
    get_package_or_raise,
    get_registry_state,
    is_courier,
    require_courier_or_operator,
    require_not_finalized,
    require_not_paused,
    require_operator,
)
from parcel_tracker.services.database import operation_scope, session_scope
from parcel_tracker.services.exceptions import (
    AuthorizationError,
    InvalidArgumentError,
    InvalidStateError,
)
from parcel_tracker.services.logging_utils import get_service_logger, log_operation
from parcel_tracker.utils.constants import (
    MAX_DESCRIPTION_LENGTH,
    MAX_LOCATION_LENGTH,
    MAX_NOTE_LENGTH,
    MAX_PROOF_HASH_LENGTH,
    MAX_REASON_LENGTH,
)
from parcel_tracker.utils.datetime_utils import resolve_timestamp
from parcel_tracker.utils.validators import (
    normalize_account,
    validate_account,
    validate_text,
    validate_timestamp,
)

logger = get_service_logger(__name__)


def _collect_errors(*results) -> None:
    """Raise InvalidArgumentError for every failed (is_valid, error) result."""
    errors = [error for is_valid, error in results if not is_valid]
    if errors:
        raise InvalidArgumentError(errors)


def _parse_status(value) -> PackageStatus:
    try:
        return PackageStatus.parse(value)
    except ValueError as e:
        raise InvalidArgumentError([f"status: {e}"]) from e


# =============================================================================
# Creation & assignment
# =============================================================================


def _create_package_impl(
    caller: str,
    recipient: str,
    description: str,
    pickup: str,
    now: Optional[int],
    session: Session,
) -> int:
    state = get_registry_state(session)
    require_not_paused(state, "create package")
    _collect_errors(
        validate_account(caller, "caller"),
        validate_account(recipient, "recipient"),
        validate_text(description, MAX_DESCRIPTION_LENGTH, "description"),
        validate_text(pickup, MAX_DESCRIPTION_LENGTH, "pickup"),
        validate_timestamp(now, "now"),
    )

    timestamp = resolve_timestamp(now)
    package_id = state.next_package_id
    state.next_package_id = package_id + 1

    package = Package(
        id=package_id,
        sender=normalize_account(caller),
        recipient=normalize_account(recipient),
        courier=None,
        status=PackageStatus.CREATED,
        description=description,
        pickup=pickup,
        created_at=timestamp,
        updated_at=timestamp,
    )
    session.add(package)
    session.flush()

    notification_service.emit(
        session,
        notification_service.PACKAGE_CREATED,
        {
            "id": package_id,
            "sender": package.sender,
            "recipient": package.recipient,
            "description": description,
            "pickup": pickup,
        },
        emitted_at=timestamp,
        package_id=package_id,
    )
    log_operation(
        logger,
        operation="create_package",
        outcome="success",
        package_id=package_id,
        sender=package.sender,
        recipient=package.recipient,
    )
    return package_id


def create_package(
    caller: str,
    recipient: str,
    description: str = "",
    pickup: str = "",
    now: Optional[int] = None,
    session: Session = None,
) -> int:
    """Register a new package. Anyone may call while not paused.

    Transaction boundary: Multi-step operation (atomic).
    Steps executed atomically:
        1. Reserve the next package id
        2. Insert the package with status CREATED
        3. Emit PackageCreated

    A rejected call consumes no id.

    Args:
        caller: Sending account (stored as sender)
        recipient: Destination account, must not be null
        description: Free-form description
        pickup: Free-form pickup location
        now: Unix seconds, defaults to the current time
        session: Optional session for transaction sharing

    Returns:
        The new package id

    Raises:
        RegistryNotDeployedError: If no registry exists
        PausedError: If the registry is paused
        InvalidArgumentError: If recipient is null or text fields are invalid
    """
    with operation_scope(logger, "create_package", caller=caller, recipient=recipient):
        if session is not None:
            return _create_package_impl(caller, recipient, description, pickup, now, session)

        with session_scope() as session:
            return _create_package_impl(caller, recipient, description, pickup, now, session)


def _assign_courier_impl(
    caller: str, package_id: int, courier: str, now: Optional[int], session: Session
) -> Package:
    state = get_registry_state(session)
    require_not_paused(state, "assign courier")
    require_operator(state, caller, "assign courier", session)
    _collect_errors(validate_account(courier, "courier"), validate_timestamp(now, "now"))

    package = get_package_or_raise(package_id, session)
    require_not_finalized(package, "assign courier")

    if not is_courier(courier, session):
        raise InvalidArgumentError([f"courier: Account '{courier}' is not a whitelisted courier"])

    timestamp = resolve_timestamp(now)
    package.courier = normalize_account(courier)
    package.updated_at = timestamp
    session.flush()

    notification_service.emit(
        session,
        notification_service.COURIER_ASSIGNED,
        {"id": package.id, "courier": package.courier},
        emitted_at=timestamp,
        package_id=package.id,
    )
    log_operation(
        logger,
        operation="assign_courier",
        outcome="success",
        package_id=package.id,
        courier=package.courier,
    )
    return package


def assign_courier(
    caller: str,
    package_id: int,
    courier: str,
    now: Optional[int] = None,
    session: Session = None,
) -> Package:
    """Assign (or reassign) a whitelisted courier. Owner or operator.

    The courier field can be overwritten by a later assignment but never
    cleared. Status is unchanged.

    Returns:
        Updated Package instance

    Raises:
        RegistryNotDeployedError: If no registry exists
        PausedError: If the registry is paused
        AuthorizationError: If caller is neither owner nor operator
        PackageNotFoundError: If the package was never created
        InvalidStateError: If the package is finalized
        InvalidArgumentError: If courier is null or not whitelisted
    """
    with operation_scope(logger, "assign_courier", caller=caller, package_id=package_id):
        if session is not None:
            return _assign_courier_impl(caller, package_id, courier, now, session)

        with session_scope() as session:
            return _assign_courier_impl(caller, package_id, courier, now, session)


# =============================================================================
# Status & checkpoint updates
# =============================================================================


def _update_status_impl(
    caller: str,
    package_id: int,
    new_status,
    reason: str,
    now: Optional[int],
    session: Session,
) -> Package:
    state = get_registry_state(session)
    require_not_paused(state, "update status")
    status = _parse_status(new_status)
    _collect_errors(
        validate_text(reason, MAX_REASON_LENGTH, "reason"),
        validate_timestamp(now, "now"),
    )

    package = get_package_or_raise(package_id, session)
    if status == PackageStatus.DELIVERED:
        raise InvalidStateError(
            package.id,
            package.status,
            "set status to delivered through update_status (use confirm_delivery)",
        )
    require_not_finalized(package, "update status")
    require_courier_or_operator(state, package, caller, "update status", session)

    # Any non-terminal package may move to any non-delivered status,
    # including the same status or an earlier one.
    timestamp = resolve_timestamp(now)
    previous_status = package.status
    package.status = status
    package.updated_at = timestamp
    session.flush()

    notification_service.emit(
        session,
        notification_service.STATUS_UPDATED,
        {"id": package.id, "status": status.value, "reason": reason},
        emitted_at=timestamp,
        package_id=package.id,
    )
    log_operation(
        logger,
        operation="update_status",
        outcome="success",
        package_id=package.id,
        previous_status=previous_status.value,
        status=status.value,
    )
    return package


def update_status(
    caller: str,
    package_id: int,
    new_status,
    reason: str = "",
    now: Optional[int] = None,
    session: Session = None,
) -> Package:
    """Report a new status for a package.

    Before a courier is assigned only the owner and operators may call;
    afterwards the assigned courier may too. DELIVERED is always rejected
    here because delivery is confirmed by the recipient through
    confirm_delivery(). CANCELLED and RETURNED are accepted and finalize
    the package.

    Args:
        caller: Calling account
        package_id: Package to update
        new_status: PackageStatus member, value or name
        reason: Free-form reason
        now: Unix seconds, defaults to the current time
        session: Optional session for transaction sharing

    Returns:
        Updated Package instance

    Raises:
        RegistryNotDeployedError: If no registry exists
        PausedError: If the registry is paused
        InvalidArgumentError: If new_status is unknown or reason is invalid
        PackageNotFoundError: If the package was never created
        InvalidStateError: If new_status is DELIVERED or the package is finalized
        AuthorizationError: If caller is not allowed to report on the package
    """
    with operation_scope(logger, "update_status", caller=caller, package_id=package_id):
        if session is not None:
            return _update_status_impl(caller, package_id, new_status, reason, now, session)

        with session_scope() as session:
            return _update_status_impl(caller, package_id, new_status, reason, now, session)


def _add_checkpoint_impl(
    caller: str,
    package_id: int,
    location: str,
    note: str,
    now: Optional[int],
    session: Session,
) -> Checkpoint:
    state = get_registry_state(session)
    require_not_paused(state, "add checkpoint")
    _collect_errors(
        validate_text(location, MAX_LOCATION_LENGTH, "location"),
        validate_text(note, MAX_NOTE_LENGTH, "note"),
        validate_timestamp(now, "now"),
    )

    package = get_package_or_raise(package_id, session)
    require_courier_or_operator(state, package, caller, "add checkpoint", session)

    timestamp = resolve_timestamp(now)
    checkpoint = Checkpoint(
        sequence=len(package.checkpoints),
        time=timestamp,
        location=location,
        note=note,
    )
    package.checkpoints.append(checkpoint)
    package.updated_at = timestamp
    session.flush()

    notification_service.emit(
        session,
        notification_service.CHECKPOINT_ADDED,
        {"id": package.id, "location": location, "note": note},
        emitted_at=timestamp,
        package_id=package.id,
    )
    log_operation(
        logger,
        operation="add_checkpoint",
        outcome="success",
        package_id=package.id,
        sequence=checkpoint.sequence,
        finalized=package.is_finalized,
    )
    return checkpoint


def add_checkpoint(
    caller: str,
    package_id: int,
    location: str,
    note: str = "",
    now: Optional[int] = None,
    session: Session = None,
) -> Checkpoint:
    """Append a checkpoint to a package's history.

    Same authorization as update_status (assigned courier, owner or
    operator). Finalized packages still accept checkpoints.

    Returns:
        The new Checkpoint

    Raises:
        RegistryNotDeployedError: If no registry exists
        PausedError: If the registry is paused
        InvalidArgumentError: If location or note is invalid
        PackageNotFoundError: If the package was never created
        AuthorizationError: If caller is not allowed to report on the package
    """
    with operation_scope(logger, "add_checkpoint", caller=caller, package_id=package_id):
        if session is not None:
            return _add_checkpoint_impl(caller, package_id, location, note, now, session)

        with session_scope() as session:
            return _add_checkpoint_impl(caller, package_id, location, note, now, session)


# =============================================================================
# Finalization
# =============================================================================


def _confirm_delivery_impl(
    caller: str, package_id: int, proof_hash: str, now: Optional[int], session: Session
) -> Package:
    state = get_registry_state(session)
    require_not_paused(state, "confirm delivery")
    _collect_errors(
        validate_text(proof_hash, MAX_PROOF_HASH_LENGTH, "proof_hash"),
        validate_timestamp(now, "now"),
    )

    package = get_package_or_raise(package_id, session)
    require_not_finalized(package, "confirm delivery")
    if normalize_account(caller) != package.recipient:
        raise AuthorizationError(caller, "confirm delivery", "package recipient")

    timestamp = resolve_timestamp(now)
    package.status = PackageStatus.DELIVERED
    package.updated_at = timestamp
    session.flush()

    notification_service.emit(
        session,
        notification_service.DELIVERED,
        {"id": package.id, "recipient": package.recipient, "proof_hash": proof_hash},
        emitted_at=timestamp,
        package_id=package.id,
    )
    log_operation(
        logger, operation="confirm_delivery", outcome="success", package_id=package.id
    )
    return package


def confirm_delivery(
    caller: str,
    package_id: int,
    proof_hash: str = "",
    now: Optional[int] = None,
    session: Session = None,
) -> Package:
    """Confirm delivery. Only the package's recipient may call.

    proof_hash is an opaque reference to off-system evidence (e.g. a
    content hash); only the reference is recorded, in the Delivered
    notification.

    Returns:
        Updated Package instance (status DELIVERED)

    Raises:
        RegistryNotDeployedError: If no registry exists
        PausedError: If the registry is paused
        InvalidArgumentError: If proof_hash is invalid
        PackageNotFoundError: If the package was never created
        InvalidStateError: If the package is finalized
        AuthorizationError: If caller is not the recipient
    """
    with operation_scope(logger, "confirm_delivery", caller=caller, package_id=package_id):
        if session is not None:
            return _confirm_delivery_impl(caller, package_id, proof_hash, now, session)

        with session_scope() as session:
            return _confirm_delivery_impl(caller, package_id, proof_hash, now, session)


def _finalize_impl(
    caller: str,
    package_id: int,
    status: PackageStatus,
    reason: str,
    now: Optional[int],
    session: Session,
) -> Package:
    """Shared body of cancel() and mark_returned()."""
    action = "cancel package" if status == PackageStatus.CANCELLED else "mark package returned"
    state = get_registry_state(session)
    require_not_paused(state, action)
    require_operator(state, caller, action, session)
    _collect_errors(
        validate_text(reason, MAX_REASON_LENGTH, "reason"),
        validate_timestamp(now, "now"),
    )

    package = get_package_or_raise(package_id, session)
    require_not_finalized(package, action)

    timestamp = resolve_timestamp(now)
    package.status = status
    package.updated_at = timestamp
    session.flush()

    name = (
        notification_service.CANCELLED
        if status == PackageStatus.CANCELLED
        else notification_service.RETURNED
    )
    notification_service.emit(
        session,
        name,
        {"id": package.id, "reason": reason},
        emitted_at=timestamp,
        package_id=package.id,
    )
    log_operation(
        logger,
        operation="cancel" if status == PackageStatus.CANCELLED else "mark_returned",
        outcome="success",
        package_id=package.id,
    )
    return package


def cancel(
    caller: str,
    package_id: int,
    reason: str = "",
    now: Optional[int] = None,
    session: Session = None,
) -> Package:
    """Cancel a package. Owner or operator.

    Returns:
        Updated Package instance (status CANCELLED)

    Raises:
        RegistryNotDeployedError: If no registry exists
        PausedError: If the registry is paused
        AuthorizationError: If caller is neither owner nor operator
        InvalidArgumentError: If reason is invalid
        PackageNotFoundError: If the package was never created
        InvalidStateError: If the package is finalized
    """
    with operation_scope(logger, "cancel", caller=caller, package_id=package_id):
        if session is not None:
            return _finalize_impl(caller, package_id, PackageStatus.CANCELLED, reason, now, session)

        with session_scope() as session:
            return _finalize_impl(caller, package_id, PackageStatus.CANCELLED, reason, now, session)


def mark_returned(
    caller: str,
    package_id: int,
    reason: str = "",
    now: Optional[int] = None,
    session: Session = None,
) -> Package:
    """Mark a package as returned to sender. Owner or operator.

    Returns:
        Updated Package instance (status RETURNED)

    Raises:
        Same as cancel()
    """
    with operation_scope(logger, "mark_returned", caller=caller, package_id=package_id):
        if session is not None:
            return _finalize_impl(caller, package_id, PackageStatus.RETURNED, reason, now, session)

        with session_scope() as session:
            return _finalize_impl(caller, package_id, PackageStatus.RETURNED, reason, now, session)


# =============================================================================
# Queries
# =============================================================================


def get_package(package_id: int, session: Session = None) -> Package:
    """Get the full package record, checkpoints included.

    Transaction boundary: Read-only query.

    Raises:
        RegistryNotDeployedError: If no registry exists
        PackageNotFoundError: If the package was never created
    """
    if session is not None:
        get_registry_state(session)
        return get_package_or_raise(package_id, session)

    with session_scope() as session:
        get_registry_state(session)
        return get_package_or_raise(package_id, session)


def _get_checkpoints_impl(package_id: int, session: Session) -> List[Checkpoint]:
    get_registry_state(session)
    package = get_package_or_raise(package_id, session)
    return list(package.checkpoints)


def get_checkpoints(package_id: int, session: Session = None) -> List[Checkpoint]:
    """Get a package's checkpoint history in recording order (possibly empty).

    Raises:
        RegistryNotDeployedError: If no registry exists
        PackageNotFoundError: If the package was never created
    """
    if session is not None:
        return _get_checkpoints_impl(package_id, session)

    with session_scope() as session:
        return _get_checkpoints_impl(package_id, session)


def next_package_id(session: Session = None) -> int:
    """Peek at the id the next created package will receive."""
    if session is not None:
        return get_registry_state(session).next_package_id

    with session_scope() as session:
        return get_registry_state(session).next_package_id


def _list_packages_impl(
    status,
    sender: Optional[str],
    recipient: Optional[str],
    courier: Optional[str],
    session: Session,
) -> List[Package]:
    get_registry_state(session)
    query = session.query(Package)
    if status is not None:
        query = query.filter(Package.status == _parse_status(status))
    if sender is not None:
        query = query.filter(Package.sender == normalize_account(sender))
    if recipient is not None:
        query = query.filter(Package.recipient == normalize_account(recipient))
    if courier is not None:
        query = query.filter(Package.courier == normalize_account(courier))
    return query.order_by(Package.id).all()


def list_packages(
    status=None,
    sender: Optional[str] = None,
    recipient: Optional[str] = None,
    courier: Optional[str] = None,
    session: Session = None,
) -> List[Package]:
    """List packages ordered by id, optionally filtered.

    Args:
        status: Only packages with this status (member, value or name)
        sender: Only packages created by this account
        recipient: Only packages addressed to this account
        courier: Only packages currently assigned to this courier
        session: Optional session for transaction sharing

    Returns:
        List of Package instances

    Raises:
        InvalidArgumentError: If status is unknown
    """
    if session is not None:
        return _list_packages_impl(status, sender, recipient, courier, session)

    with session_scope() as session:
        return _list_packages_impl(status, sender, recipient, courier, session)
