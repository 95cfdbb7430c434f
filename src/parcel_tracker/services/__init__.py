"""Services package - Business logic layer for Parcel Tracker.

Architecture:
- Services: Stateless functions; all registry state lives in the database
- Transactions: Managed via session_scope(); each operation is atomic
- Exceptions: Consistent error handling via ServiceError hierarchy
- Authorization: Shared role predicates in access_control

Service Modules:
- registry_service: Deployment, ownership, operator/courier grants, pause switch
- package_service: Package creation, assignment, status, checkpoints, finalization
- notification_service: Append-only notification log and subscribers

Infrastructure:
- access_control: Role predicates and guard helpers
- database: Engine, session and operation scopes
- exceptions: Custom exception classes for service layer errors
- logging_utils: Structured operation logging
"""

from . import (
    database,
    exceptions,
    notification_service,
    registry_service,
    package_service,
)

from .exceptions import (
    ServiceError,
    AuthorizationError,
    NotFoundError,
    PackageNotFoundError,
    ValidationError,
    InvalidArgumentError,
    InvalidStateError,
    PausedError,
    RegistryNotDeployedError,
    RegistryAlreadyDeployedError,
    DatabaseError,
)

from .registry_service import (
    deploy_registry,
    transfer_ownership,
    set_operator,
    set_courier,
    pause,
    unpause,
    get_registry,
    get_owner,
    is_paused,
    is_operator_account,
    is_courier_account,
    list_operators,
    list_couriers,
)

from .package_service import (
    create_package,
    assign_courier,
    update_status,
    add_checkpoint,
    confirm_delivery,
    cancel,
    mark_returned,
    get_package,
    get_checkpoints,
    next_package_id,
    list_packages,
)

from .notification_service import (
    list_notifications,
    subscribe,
    unsubscribe,
)

__all__ = [
    # Modules
    "database",
    "exceptions",
    "notification_service",
    "registry_service",
    "package_service",
    # Exceptions
    "ServiceError",
    "AuthorizationError",
    "NotFoundError",
    "PackageNotFoundError",
    "ValidationError",
    "InvalidArgumentError",
    "InvalidStateError",
    "PausedError",
    "RegistryNotDeployedError",
    "RegistryAlreadyDeployedError",
    "DatabaseError",
    # Registry administration
    "deploy_registry",
    "transfer_ownership",
    "set_operator",
    "set_courier",
    "pause",
    "unpause",
    "get_registry",
    "get_owner",
    "is_paused",
    "is_operator_account",
    "is_courier_account",
    "list_operators",
    "list_couriers",
    # Package lifecycle
    "create_package",
    "assign_courier",
    "update_status",
    "add_checkpoint",
    "confirm_delivery",
    "cancel",
    "mark_returned",
    "get_package",
    "get_checkpoints",
    "next_package_id",
    "list_packages",
    # Notifications
    "list_notifications",
    "subscribe",
    "unsubscribe",
]
