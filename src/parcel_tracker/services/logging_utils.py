"""Structured logging for registry and package operations.

Every service module logs through a logger under ``parcel_tracker.services``.
Successful calls are logged at INFO by the service itself; rejected calls are
logged once, at WARNING, by database.operation_scope via log_rejection().

Each record carries ``operation`` and ``outcome`` attributes plus whatever
context the call supplied (caller, package_id, status, ...), so handlers can
filter on e.g. ``record.package_id``.
"""

import logging
from typing import Any

from .exceptions import ServiceError

# Error attributes copied onto rejection records when the caller did not
# already supply them
_ERROR_CONTEXT_FIELDS = ("package_id", "action", "required", "current_status")


def get_service_logger(name: str) -> logging.Logger:
    """
    Get the logger for a service module.

    >>> get_service_logger("parcel_tracker.services.package_service").name
    'parcel_tracker.services.package_service'
    """
    if "." in name:
        name = name.split(".")[-1]
    return logging.getLogger(f"parcel_tracker.services.{name}")


def _format_message(operation: str, outcome: str, context: dict) -> str:
    message = f"{operation}: {outcome}"
    package_id = context.get("package_id")
    if package_id is not None:
        message += f" (package {package_id})"
    caller = context.get("caller")
    if caller is not None:
        message += f" by {caller}"
    return message


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log a registry or package operation.

    The message reads ``"<operation>: <outcome> (package <id>) by <caller>"``,
    omitting the parts the context does not provide.

    Args:
        logger: Logger instance to use
        operation: Operation name (e.g., "create_package", "pause")
        outcome: "success", or the error class name for rejections
        level: Log level (default: INFO)
        **context: Structured fields stored on the record
    """
    extra = {"operation": operation, "outcome": outcome, **context}
    logger.log(level, _format_message(operation, outcome, context), extra=extra)


def log_rejection(
    logger: logging.Logger, operation: str, error: ServiceError, **context: Any
) -> None:
    """
    Log a rejected call at WARNING.

    The outcome is the error class name. Package id, action, required role
    and current status are lifted from the error when it carries them.
    """
    for field in _ERROR_CONTEXT_FIELDS:
        value = getattr(error, field, None)
        if value is not None and context.get(field) is None:
            context[field] = getattr(value, "value", value)
    log_operation(
        logger,
        operation=operation,
        outcome=type(error).__name__,
        level=logging.WARNING,
        error=str(error),
        **context,
    )
