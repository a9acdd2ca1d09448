"""
Exception handling utilities.

Defines the platform error taxonomy and categorized exception types for
proper error handling.
"""

import math
from datetime import timedelta

from aiogram.exceptions import TelegramAPIError
from aiohttp import ClientError
from sqlalchemy.exc import OperationalError


class PlatformError(Exception):
    """
    Base class for expected business failures.

    Attributes:
        code: Stable machine-readable error code
        message: User-facing message
    """

    code = "platform_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PlatformError):
    """Malformed or out-of-range input."""

    code = "validation_error"


class NotFoundError(PlatformError):
    """Referenced entity does not exist."""

    code = "not_found"


class StateConflictError(PlatformError):
    """Operation is not allowed in the current state."""

    code = "state_conflict"


class NoActiveVip(StateConflictError):
    """User has no active VIP membership."""

    code = "no_active_vip"

    def __init__(
        self,
        message: str = "You need an active VIP membership to start earning",
    ) -> None:
        super().__init__(message)


class SessionAlreadyActive(StateConflictError):
    """User already has an ACTIVE earning session."""

    code = "session_already_active"

    def __init__(
        self, message: str = "You already have an active earning session"
    ) -> None:
        super().__init__(message)


class CooldownActive(StateConflictError):
    """Cooldown since the last completed session has not elapsed."""

    code = "cooldown_active"

    def __init__(self, remaining: timedelta) -> None:
        self.remaining = remaining
        self.remaining_hours = max(
            1, math.ceil(remaining.total_seconds() / 3600)
        )
        super().__init__(
            f"Please wait {self.remaining_hours} more hours "
            f"before starting a new session"
        )


class InsufficientBalance(StateConflictError):
    """Wallet balance does not cover the debit."""

    code = "insufficient_balance"


class DowngradeNotAllowed(StateConflictError):
    """Target VIP tier is not more expensive than what was already paid."""

    code = "downgrade_not_allowed"


class ExternalServiceError(PlatformError):
    """Notification channel or blockchain explorer failure."""

    code = "external_service_error"


class LedgerIntegrityError(PlatformError):
    """A ledger invariant would be violated (e.g. negative balance)."""

    code = "integrity_error"


# Exception categories based on handling strategy

# Safe to ignore - operations that fail gracefully
SAFE_TO_IGNORE = (
    TelegramAPIError,  # Blocked bot, deleted chat, etc.
)

# Must log but can continue - non-critical failures
MUST_LOG = (
    OperationalError,  # Database errors
    ClientError,       # Explorer / RPC HTTP errors
    ExternalServiceError,
)

# Must raise - critical validation or ledger issues
MUST_RAISE = (
    LedgerIntegrityError,
    ValueError,        # Validation errors
    TypeError,         # Type errors in critical paths
)


def is_safe_to_ignore(exc: Exception) -> bool:
    """
    Check if exception can be safely ignored.

    Args:
        exc: Exception to check

    Returns:
        True if exception is safe to ignore
    """
    return isinstance(exc, SAFE_TO_IGNORE)


def must_log(exc: Exception) -> bool:
    """
    Check if exception must be logged.

    Args:
        exc: Exception to check

    Returns:
        True if exception must be logged
    """
    return isinstance(exc, MUST_LOG)


def must_raise(exc: Exception) -> bool:
    """
    Check if exception must be raised.

    Args:
        exc: Exception to check

    Returns:
        True if exception must be raised
    """
    return isinstance(exc, MUST_RAISE)
