"""
Constants for the Parcel Tracker application.

This module defines system-wide constants including:
- Application metadata
- Database configuration
- Account identity rules
- Field length limits
"""

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Parcel Tracker"
APP_VERSION = "0.1.0"

# ============================================================================
# Database Configuration
# ============================================================================

DATABASE_FILENAME = "parcel_tracker.db"
APP_DIR_NAME = ".parcel_tracker"

ENV_VAR_ENVIRONMENT = "PARCEL_TRACKER_ENV"
ENV_VAR_DATABASE_URL = "PARCEL_TRACKER_DATABASE_URL"

# Last second of year 9999; larger values cannot be rendered as datetimes
MAX_TIMESTAMP = 253402300799

# ============================================================================
# Accounts
# ============================================================================

# The zero account is treated the same as a missing account
ZERO_ACCOUNT = "0x0000000000000000000000000000000000000000"

MAX_ACCOUNT_LENGTH = 128

# ============================================================================
# Field Limits
# ============================================================================

MAX_DESCRIPTION_LENGTH = 2000
MAX_LOCATION_LENGTH = 500
MAX_NOTE_LENGTH = 2000
MAX_REASON_LENGTH = 2000
MAX_PROOF_HASH_LENGTH = 256
