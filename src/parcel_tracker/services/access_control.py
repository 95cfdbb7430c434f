"""
Access control for registry operations.

Three tiers: the owner, operators, and couriers. One predicate per tier,
shared by every operation:

    is operator  = account is the owner OR holds an OPERATOR grant
    is courier   = account holds a COURIER grant (owner/operator status
                   does not imply courier status)

The require_* helpers raise the matching ServiceError instead of returning
False. They never write, so a rejected call leaves the session clean.
"""

from typing import Optional

from sqlalchemy.orm import Session

from parcel_tracker.models import Package, RegistryState, Role, RoleGrant
from parcel_tracker.services.exceptions import (
    AuthorizationError,
    InvalidStateError,
    PackageNotFoundError,
    PausedError,
    RegistryNotDeployedError,
)
from parcel_tracker.utils.validators import is_null_account, normalize_account


def get_registry_state(session: Session) -> RegistryState:
    """Get the registry state row or raise RegistryNotDeployedError."""
    state = session.query(RegistryState).order_by(RegistryState.id).first()
    if state is None:
        raise RegistryNotDeployedError()
    return state


def has_role(account: Optional[str], role: Role, session: Session) -> bool:
    """True if an explicit grant of role exists for account."""
    if is_null_account(account):
        return False
    grant = (
        session.query(RoleGrant.id)
        .filter(RoleGrant.account == normalize_account(account), RoleGrant.role == role)
        .first()
    )
    return grant is not None


def is_owner(state: RegistryState, account: Optional[str]) -> bool:
    """True if account is the registry owner."""
    return not is_null_account(account) and normalize_account(account) == state.owner


def is_operator(state: RegistryState, account: Optional[str], session: Session) -> bool:
    """True if account is the owner or an explicitly granted operator."""
    return is_owner(state, account) or has_role(account, Role.OPERATOR, session)


def is_courier(account: Optional[str], session: Session) -> bool:
    """True if account is on the courier whitelist."""
    return has_role(account, Role.COURIER, session)


def require_owner(state: RegistryState, caller: Optional[str], action: str) -> None:
    """Raise AuthorizationError unless caller is the owner."""
    if not is_owner(state, caller):
        raise AuthorizationError(caller, action, "owner")


def require_operator(
    state: RegistryState, caller: Optional[str], action: str, session: Session
) -> None:
    """Raise AuthorizationError unless caller is the owner or an operator."""
    if not is_operator(state, caller, session):
        raise AuthorizationError(caller, action, "owner or operator")


def require_courier_or_operator(
    state: RegistryState,
    package: Package,
    caller: Optional[str],
    action: str,
    session: Session,
) -> None:
    """
    Raise AuthorizationError unless caller may report on the package.

    Before a courier is assigned only the owner and operators qualify.
    Afterwards the assigned courier qualifies too; other couriers never do.
    """
    if is_operator(state, caller, session):
        return
    if package.courier is not None and normalize_account(caller) == package.courier:
        return
    required = "owner or operator" if package.courier is None else "assigned courier, owner or operator"
    raise AuthorizationError(caller, action, required)


def require_not_paused(state: RegistryState, action: str) -> None:
    """Raise PausedError if the registry is paused."""
    if state.paused:
        raise PausedError(action)


def get_package_or_raise(package_id: int, session: Session) -> Package:
    """Get a package by id or raise PackageNotFoundError."""
    package = None
    if isinstance(package_id, int) and not isinstance(package_id, bool):
        package = session.get(Package, package_id)
    if package is None:
        raise PackageNotFoundError(package_id)
    return package


def require_not_finalized(package: Package, action: str) -> None:
    """Raise InvalidStateError if the package has reached a terminal status."""
    if package.is_finalized:
        raise InvalidStateError(package.id, package.status, action)
