"""
Tests for the error taxonomy and severity categories.
"""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from aiogram.exceptions import TelegramAPIError
from aiohttp import ClientError

from app.utils.exceptions import (
    CooldownActive,
    ExternalServiceError,
    InsufficientBalance,
    LedgerIntegrityError,
    NoActiveVip,
    StateConflictError,
    is_safe_to_ignore,
    must_log,
    must_raise,
)


class TestErrorCodes:
    """Test stable error codes."""

    def test_subclasses_keep_their_own_code(self):
        error = InsufficientBalance("Insufficient balance")

        assert isinstance(error, StateConflictError)
        assert error.code == "insufficient_balance"
        assert error.message == "Insufficient balance"

    def test_default_message(self):
        assert "active VIP" in NoActiveVip().message

    @pytest.mark.parametrize(
        "remaining,hours",
        [
            (timedelta(hours=23, minutes=1), 24),
            (timedelta(hours=2), 2),
            (timedelta(seconds=5), 1),
        ],
    )
    def test_cooldown_rounds_hours_up(self, remaining, hours):
        error = CooldownActive(remaining)

        assert error.remaining_hours == hours
        assert f"{hours} more hours" in error.message


class TestSeverityCategories:
    """Test is_safe_to_ignore, must_log and must_raise."""

    def test_telegram_errors_are_ignorable(self):
        error = TelegramAPIError(
            method=MagicMock(), message="Forbidden: bot was blocked"
        )

        assert is_safe_to_ignore(error)
        assert not must_raise(error)

    @pytest.mark.parametrize(
        "error",
        [ClientError("explorer down"), ExternalServiceError("timeout")],
    )
    def test_transient_failures_are_logged(self, error):
        assert must_log(error)
        assert not is_safe_to_ignore(error)

    @pytest.mark.parametrize(
        "error",
        [
            LedgerIntegrityError("Balance would become negative"),
            ValueError("bad amount"),
        ],
    )
    def test_integrity_failures_must_raise(self, error):
        assert must_raise(error)
        assert not must_log(error)
