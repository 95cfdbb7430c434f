"""Service layer exception classes for Parcel Tracker.

This module defines all custom exceptions used by the service layer to provide
consistent error handling across the application. Every failure rolls back
the whole operation, so a caller catching one of these can rely on the
registry being unchanged.

Exception Hierarchy:
    ServiceError (base)
    ├── AuthorizationError
    ├── NotFoundError
    │   └── PackageNotFoundError
    ├── ValidationError
    │   └── InvalidArgumentError
    ├── InvalidStateError
    ├── PausedError
    ├── RegistryNotDeployedError
    ├── RegistryAlreadyDeployedError
    └── DatabaseError
"""

from typing import Optional


class ServiceError(Exception):
    """Base exception for all service layer errors.

    All service-specific exceptions should inherit from this class.
    """

    pass


class AuthorizationError(ServiceError):
    """Raised when the caller lacks the role an operation requires.

    Args:
        caller: The calling account
        action: What the caller attempted
        required: Description of the required role

    Example:
        >>> raise AuthorizationError("0xabc", "set operator", "owner")
        AuthorizationError: Account '0xabc' is not authorized to set operator (requires owner)
    """

    def __init__(self, caller: Optional[str], action: str, required: str):
        self.caller = caller
        self.action = action
        self.required = required
        super().__init__(
            f"Account '{caller}' is not authorized to {action} (requires {required})"
        )


class NotFoundError(ServiceError):
    """Raised when a referenced record was never created."""

    pass


class PackageNotFoundError(NotFoundError):
    """Raised when a package id was never assigned.

    Args:
        package_id: The package ID that was not found
    """

    def __init__(self, package_id):
        self.package_id = package_id
        super().__init__(f"Package with ID {package_id} not found")


class ValidationError(ServiceError):
    """Raised when data validation fails."""

    def __init__(self, errors: list):
        self.errors = errors
        error_msg = "; ".join(errors)
        super().__init__(f"Validation failed: {error_msg}")


class InvalidArgumentError(ValidationError):
    """Raised for null accounts, malformed input, or a non-whitelisted courier."""

    pass


class InvalidStateError(ServiceError):
    """Raised when an operation is not allowed for the package's current status.

    Args:
        package_id: The package ID
        current_status: The package's status when the call was rejected
        action: Description of the attempted action
    """

    def __init__(self, package_id: int, current_status, action: str):
        self.package_id = package_id
        self.current_status = current_status
        self.action = action
        status_value = getattr(current_status, "value", current_status)
        super().__init__(
            f"Cannot {action} for package {package_id} with status '{status_value}'"
        )


class PausedError(ServiceError):
    """Raised when a package mutation is attempted while the registry is paused."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Cannot {action}: registry is paused")


class RegistryNotDeployedError(ServiceError):
    """Raised when an operation runs before deploy_registry()."""

    def __init__(self):
        super().__init__("Registry has not been deployed")


class RegistryAlreadyDeployedError(ServiceError):
    """Raised when deploy_registry() is called on a deployed registry."""

    def __init__(self, owner: str):
        self.owner = owner
        super().__init__(f"Registry already deployed (owner '{owner}')")


class DatabaseError(ServiceError):
    """Raised when a database operation fails."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")
