"""
Tests for service decorators.

Covers commit/rollback in transaction and the ServiceResult conversion at
the facade boundary.
"""

from unittest.mock import AsyncMock

import pytest

from app.services.base_service import (
    BaseService,
    ServiceResult,
    log_operation,
    service_result,
    transaction,
)
from app.utils.exceptions import (
    InsufficientBalance,
    NotFoundError,
    PlatformError,
    ValidationError,
)


class _Service(BaseService):
    @transaction
    async def succeed(self):
        return 42

    @transaction
    async def reject(self):
        raise InsufficientBalance("Insufficient balance")

    @transaction
    async def crash(self):
        raise RuntimeError("database unreachable")

    @service_result
    async def found(self):
        return {"id": 1}

    @service_result
    async def missing(self):
        raise NotFoundError("User 7 not found")

    @service_result
    async def broken(self):
        raise RuntimeError("database unreachable")

    @service_result
    @log_operation
    @transaction
    async def echo_input(self, currency):
        raise ValidationError(f"Unsupported currency: {currency}")


@pytest.fixture
def service():
    session = AsyncMock()
    return _Service(session)


class TestTransactionDecorator:
    """Test the transaction decorator."""

    async def test_commits_on_success(self, service):
        assert await service.succeed() == 42
        service.session.commit.assert_awaited_once()
        service.session.rollback.assert_not_awaited()

    async def test_rolls_back_platform_error(self, service):
        with pytest.raises(InsufficientBalance):
            await service.reject()
        service.session.rollback.assert_awaited_once()
        service.session.commit.assert_not_awaited()

    async def test_rolls_back_unexpected_error(self, service):
        with pytest.raises(RuntimeError):
            await service.crash()
        service.session.rollback.assert_awaited_once()


class TestServiceResultDecorator:
    """Test the service_result decorator."""

    async def test_success_wraps_data(self, service):
        result = await service.found()
        assert result == ServiceResult(success=True, data={"id": 1})

    async def test_platform_error_becomes_failed_result(self, service):
        result = await service.missing()
        assert result.success is False
        assert result.error == "User 7 not found"
        assert result.error_code == "not_found"

    @pytest.mark.parametrize("currency", ["{USD}", "{0}", "{}", "}{"])
    async def test_braces_in_message_survive_logging(self, service, currency):
        result = await service.echo_input(currency)

        assert result.success is False
        assert result.error_code == "validation_error"
        assert result.error == f"Unsupported currency: {currency}"
        service.session.rollback.assert_awaited_once()

    async def test_other_errors_propagate(self, service):
        """Infrastructure failures are not business results."""
        with pytest.raises(RuntimeError):
            await service.broken()


class TestErrorCodes:
    """Every platform error carries a stable code."""

    def test_subclasses_have_distinct_codes(self):
        codes = set()
        pending = list(PlatformError.__subclasses__())
        while pending:
            cls = pending.pop()
            codes.add(cls.code)
            pending.extend(cls.__subclasses__())
        assert "no_active_vip" in codes
        assert "session_already_active" in codes
        assert "insufficient_balance" in codes
        assert "integrity_error" in codes
