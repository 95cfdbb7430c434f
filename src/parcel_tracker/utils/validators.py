"""
Input validation functions for the Parcel Tracker application.

Validators return a (is_valid, error_message) tuple so callers can collect
every problem before raising a single InvalidArgumentError.
"""

from typing import Any, Optional, Tuple

from .constants import MAX_ACCOUNT_LENGTH, MAX_TIMESTAMP, ZERO_ACCOUNT


def is_null_account(account: Optional[str]) -> bool:
    """
    Check whether an account identity counts as null.

    None, blank strings and the zero account are all null.
    """
    if account is None:
        return True
    if not isinstance(account, str):
        return False
    stripped = account.strip()
    return stripped == "" or stripped.lower() == ZERO_ACCOUNT


def normalize_account(account: Optional[str]) -> Optional[str]:
    """Strip surrounding whitespace from an account; None stays None."""
    if account is None:
        return None
    return account.strip()


def validate_account(account: Any, field_name: str = "Account") -> Tuple[bool, str]:
    """
    Validate that an account is a usable, non-null identity.

    Args:
        account: The account value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if account is not None and not isinstance(account, str):
        return False, f"{field_name}: Must be a string"
    if is_null_account(account):
        return False, f"{field_name}: Must not be the null account"
    if len(account.strip()) > MAX_ACCOUNT_LENGTH:
        return False, f"{field_name}: Must be {MAX_ACCOUNT_LENGTH} characters or less"
    return True, ""


def validate_text(value: Any, max_length: int, field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate a free-form text field.

    Empty text is allowed; None is not.
    """
    if not isinstance(value, str):
        return False, f"{field_name}: Must be a string"
    if len(value) > max_length:
        return False, f"{field_name}: Must be {max_length} characters or less"
    return True, ""


def validate_timestamp(value: Any, field_name: str = "Timestamp") -> Tuple[bool, str]:
    """Validate an optional Unix-seconds timestamp."""
    if value is None:
        return True, ""
    if isinstance(value, bool) or not isinstance(value, int):
        return False, f"{field_name}: Must be an integer number of seconds"
    if value < 0:
        return False, f"{field_name}: Must be non-negative"
    if value > MAX_TIMESTAMP:
        return False, f"{field_name}: Must be at most {MAX_TIMESTAMP}"
    return True, ""
