"""
Registry Service - deployment, role administration and the pause switch.

Role model:
- owner: single account, changed only by transfer_ownership
- operators: admin/dispatch tier; the owner always counts as an operator
- couriers: whitelist of accounts eligible for package assignment

Pause rules: pause() only blocks package mutations. Role administration,
ownership transfer and pause()/unpause() themselves keep working while
paused.

Session Management Pattern:
- All public functions accept session=None parameter
- If session provided, use it directly
- If session is None, create a new session via session_scope()
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from parcel_tracker.models import RegistryState, Role, RoleGrant
from parcel_tracker.services import notification_service
from parcel_tracker.services.access_control import (
    get_registry_state,
    is_courier,
    is_operator,
    require_operator,
    require_owner,
)
from parcel_tracker.services.database import operation_scope, session_scope
from parcel_tracker.services.exceptions import (
    InvalidArgumentError,
    RegistryAlreadyDeployedError,
)
from parcel_tracker.services.logging_utils import get_service_logger, log_operation
from parcel_tracker.utils.datetime_utils import resolve_timestamp
from parcel_tracker.utils.validators import (
    normalize_account,
    validate_account,
    validate_timestamp,
)

logger = get_service_logger(__name__)


def _check_arguments(now: Optional[int], **accounts) -> None:
    """Validate account arguments and the timestamp, raising InvalidArgumentError."""
    errors = []
    for field_name, account in accounts.items():
        is_valid, error = validate_account(account, field_name)
        if not is_valid:
            errors.append(error)
    is_valid, error = validate_timestamp(now, "now")
    if not is_valid:
        errors.append(error)
    if errors:
        raise InvalidArgumentError(errors)


# =============================================================================
# Deployment
# =============================================================================


def _deploy_registry_impl(owner: str, now: Optional[int], session: Session) -> RegistryState:
    _check_arguments(now, owner=owner)

    existing = session.query(RegistryState).first()
    if existing is not None:
        raise RegistryAlreadyDeployedError(existing.owner)

    state = RegistryState(
        owner=normalize_account(owner),
        paused=False,
        next_package_id=1,
        deployed_at=resolve_timestamp(now),
    )
    session.add(state)
    session.flush()

    log_operation(logger, operation="deploy_registry", outcome="success", owner=state.owner)
    return state


def deploy_registry(owner: str, now: Optional[int] = None, session: Session = None) -> RegistryState:
    """Create the registry with owner as its owner.

    Transaction boundary: Single-step write.

    Args:
        owner: Initial owner account (implicitly an operator)
        now: Unix seconds, defaults to the current time
        session: Optional session for transaction sharing

    Returns:
        The new RegistryState (not paused, next package id 1)

    Raises:
        InvalidArgumentError: If owner is null
        RegistryAlreadyDeployedError: If a registry already exists
    """
    with operation_scope(logger, "deploy_registry", owner=owner):
        if session is not None:
            return _deploy_registry_impl(owner, now, session)

        with session_scope() as session:
            return _deploy_registry_impl(owner, now, session)


# =============================================================================
# Ownership
# =============================================================================


def _transfer_ownership_impl(
    caller: str, new_owner: str, now: Optional[int], session: Session
) -> RegistryState:
    state = get_registry_state(session)
    require_owner(state, caller, "transfer ownership")
    _check_arguments(now, new_owner=new_owner)

    previous_owner = state.owner
    state.owner = normalize_account(new_owner)
    session.flush()

    # Added notification: ownership changes are otherwise visible only
    # through registry state
    notification_service.emit(
        session,
        notification_service.OWNERSHIP_TRANSFERRED,
        {"previous_owner": previous_owner, "new_owner": state.owner},
        emitted_at=resolve_timestamp(now),
    )
    log_operation(
        logger,
        operation="transfer_ownership",
        outcome="success",
        previous_owner=previous_owner,
        new_owner=state.owner,
    )
    return state


def transfer_ownership(
    caller: str, new_owner: str, now: Optional[int] = None, session: Session = None
) -> RegistryState:
    """Hand the registry to a new owner.

    The previous owner keeps any explicit operator or courier grants but
    loses owner rights, including implicit operator status.

    Raises:
        RegistryNotDeployedError: If no registry exists
        AuthorizationError: If caller is not the current owner
        InvalidArgumentError: If new_owner is null
    """
    with operation_scope(logger, "transfer_ownership", caller=caller):
        if session is not None:
            return _transfer_ownership_impl(caller, new_owner, now, session)

        with session_scope() as session:
            return _transfer_ownership_impl(caller, new_owner, now, session)


# =============================================================================
# Role grants
# =============================================================================


def _set_role(account: str, role: Role, allowed: bool, now: int, session: Session) -> None:
    """Insert or delete the grant row so membership matches allowed."""
    account = normalize_account(account)
    grant = (
        session.query(RoleGrant)
        .filter(RoleGrant.account == account, RoleGrant.role == role)
        .first()
    )
    if allowed and grant is None:
        session.add(RoleGrant(account=account, role=role, granted_at=now))
    elif not allowed and grant is not None:
        session.delete(grant)
    session.flush()


def _set_operator_impl(
    caller: str, account: str, allowed: bool, now: Optional[int], session: Session
) -> None:
    state = get_registry_state(session)
    require_owner(state, caller, "set operator")
    _check_arguments(now, account=account)

    timestamp = resolve_timestamp(now)
    allowed = bool(allowed)
    _set_role(account, Role.OPERATOR, allowed, timestamp, session)

    notification_service.emit(
        session,
        notification_service.OPERATOR_SET,
        {"account": normalize_account(account), "allowed": allowed},
        emitted_at=timestamp,
    )
    log_operation(
        logger, operation="set_operator", outcome="success", account=account, allowed=allowed
    )


def set_operator(
    caller: str, account: str, allowed: bool, now: Optional[int] = None, session: Session = None
) -> None:
    """Grant or revoke operator rights. Owner only.

    Idempotent; an OperatorSet notification is emitted on every call,
    even when membership does not change.

    Raises:
        RegistryNotDeployedError: If no registry exists
        AuthorizationError: If caller is not the owner
        InvalidArgumentError: If account is null
    """
    with operation_scope(logger, "set_operator", caller=caller, account=account):
        if session is not None:
            return _set_operator_impl(caller, account, allowed, now, session)

        with session_scope() as session:
            return _set_operator_impl(caller, account, allowed, now, session)


def _set_courier_impl(
    caller: str, account: str, allowed: bool, now: Optional[int], session: Session
) -> None:
    state = get_registry_state(session)
    require_operator(state, caller, "set courier", session)
    _check_arguments(now, account=account)

    timestamp = resolve_timestamp(now)
    allowed = bool(allowed)
    _set_role(account, Role.COURIER, allowed, timestamp, session)

    notification_service.emit(
        session,
        notification_service.COURIER_SET,
        {"account": normalize_account(account), "allowed": allowed},
        emitted_at=timestamp,
    )
    log_operation(
        logger, operation="set_courier", outcome="success", account=account, allowed=allowed
    )


def set_courier(
    caller: str, account: str, allowed: bool, now: Optional[int] = None, session: Session = None
) -> None:
    """Add or remove an account on the courier whitelist. Owner or operator.

    Removing a courier does not unassign it from packages it already
    holds; it only blocks new assignments.

    Raises:
        RegistryNotDeployedError: If no registry exists
        AuthorizationError: If caller is neither owner nor operator
        InvalidArgumentError: If account is null
    """
    with operation_scope(logger, "set_courier", caller=caller, account=account):
        if session is not None:
            return _set_courier_impl(caller, account, allowed, now, session)

        with session_scope() as session:
            return _set_courier_impl(caller, account, allowed, now, session)


# =============================================================================
# Pause switch
# =============================================================================


def _set_paused_impl(caller: str, paused: bool, now: Optional[int], session: Session) -> None:
    action = "pause" if paused else "unpause"
    state = get_registry_state(session)
    require_owner(state, caller, action)
    _check_arguments(now)

    # No guard against redundant calls: pausing twice emits twice
    state.paused = paused
    session.flush()

    notification_service.emit(
        session,
        notification_service.PAUSED if paused else notification_service.UNPAUSED,
        {"by": state.owner},
        emitted_at=resolve_timestamp(now),
    )
    log_operation(logger, operation=action, outcome="success", caller=caller)


def pause(caller: str, now: Optional[int] = None, session: Session = None) -> None:
    """Pause all package mutations. Owner only.

    Raises:
        RegistryNotDeployedError: If no registry exists
        AuthorizationError: If caller is not the owner
    """
    with operation_scope(logger, "pause", caller=caller):
        if session is not None:
            return _set_paused_impl(caller, True, now, session)

        with session_scope() as session:
            return _set_paused_impl(caller, True, now, session)


def unpause(caller: str, now: Optional[int] = None, session: Session = None) -> None:
    """Resume package mutations. Owner only.

    Raises:
        RegistryNotDeployedError: If no registry exists
        AuthorizationError: If caller is not the owner
    """
    with operation_scope(logger, "unpause", caller=caller):
        if session is not None:
            return _set_paused_impl(caller, False, now, session)

        with session_scope() as session:
            return _set_paused_impl(caller, False, now, session)


# =============================================================================
# Views
# =============================================================================


def get_registry(session: Session = None) -> RegistryState:
    """Get the registry state row.

    Raises:
        RegistryNotDeployedError: If no registry exists
    """
    if session is not None:
        return get_registry_state(session)

    with session_scope() as session:
        return get_registry_state(session)


def get_owner(session: Session = None) -> str:
    """Get the current owner account."""
    return get_registry(session=session).owner


def is_paused(session: Session = None) -> bool:
    """True if package mutations are currently paused."""
    return get_registry(session=session).paused


def is_operator_account(account: Optional[str], session: Session = None) -> bool:
    """Authorization predicate: account is the owner or a granted operator."""
    if session is not None:
        return is_operator(get_registry_state(session), account, session)

    with session_scope() as session:
        return is_operator(get_registry_state(session), account, session)


def is_courier_account(account: Optional[str], session: Session = None) -> bool:
    """Authorization predicate: account is on the courier whitelist."""
    if session is not None:
        get_registry_state(session)
        return is_courier(account, session)

    with session_scope() as session:
        get_registry_state(session)
        return is_courier(account, session)


def _list_role_impl(role: Role, session: Session) -> List[str]:
    get_registry_state(session)
    grants = (
        session.query(RoleGrant.account)
        .filter(RoleGrant.role == role)
        .order_by(RoleGrant.account)
        .all()
    )
    return [row.account for row in grants]


def list_operators(session: Session = None) -> List[str]:
    """List explicitly granted operators, sorted. The owner is not included."""
    if session is not None:
        return _list_role_impl(Role.OPERATOR, session)

    with session_scope() as session:
        return _list_role_impl(Role.OPERATOR, session)


def list_couriers(session: Session = None) -> List[str]:
    """List whitelisted couriers, sorted."""
    if session is not None:
        return _list_role_impl(Role.COURIER, session)

    with session_scope() as session:
        return _list_role_impl(Role.COURIER, session)
