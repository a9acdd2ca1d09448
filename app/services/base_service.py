"""
Base service class.

Session ownership, bound logger and injectable clock shared by the ledger
engines, plus the decorators that define their unit-of-work and result
conventions.
"""

import functools
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.utils.datetime_utils import utc_now
from app.utils.exceptions import PlatformError


T = TypeVar("T")

# Returns the current aware UTC datetime; tests inject a fake one
Clock = Callable[[], datetime]


@dataclass
class ServiceResult:
    """
    Outcome of a facade call.

    ``data`` is set on success; ``error`` and ``error_code`` (the
    PlatformError code) on failure.
    """
    success: bool
    data: Any = None
    error: str | None = None
    error_code: str | None = None


class BaseService:
    """
    Base service class.

    Subclasses get:
    - the AsyncSession they commit through
    - ``self.logger`` bound with the service name
    - ``self.clock`` used for every timestamp they write
    """

    def __init__(
        self, session: AsyncSession, clock: Clock | None = None
    ) -> None:
        """
        Initialize base service.

        Args:
            session: Async database session
            clock: Callable returning the current UTC datetime
        """
        self.session = session
        self.clock = clock or utc_now
        self.logger = logger.bind(service=self.__class__.__name__)

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()


def transaction(func: Callable[..., T]) -> Callable[..., T]:
    """
    Run a service method as one database transaction.

    Commits when the method returns and rolls back when it raises. Typed
    platform errors are expected outcomes and logged as warnings; anything
    else is logged with its traceback. The exception is always re-raised.

    Usage:
        @transaction
        async def request_withdrawal(self, user_id: int, ...):
            ...
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        try:
            result = await func(self, *args, **kwargs)
            await self.commit()
            return result
        except PlatformError as e:
            await self.rollback()
            self.logger.warning(
                "{} rejected: {}",
                func.__name__,
                e.message,
                extra={"error_code": e.code, "function": func.__name__},
            )
            raise
        except Exception as e:
            await self.rollback()
            self.logger.error(
                "Transaction failed in {}",
                func.__name__,
                extra={
                    "error": str(e),
                    "function": func.__name__,
                },
                exc_info=True,
            )
            raise

    return wrapper


def log_operation(func: Callable[..., T]) -> Callable[..., T]:
    """
    Log entry and exit of a state-changing facade call with its duration.

    Usage:
        @log_operation
        async def purchase_vip(self, user_id: int, vip_level_id: int):
            ...
    """
    @functools.wraps(func)
    async def wrapper(self: BaseService, *args: Any, **kwargs: Any) -> Any:
        started = time.monotonic()
        self.logger.info(
            "Starting {}",
            func.__name__,
            extra={
                "function": func.__name__,
                "args_count": len(args),
                "kwargs_keys": list(kwargs.keys()),
            },
        )

        try:
            result = await func(self, *args, **kwargs)
        except PlatformError as e:
            self.logger.info(
                "{} refused",
                func.__name__,
                extra={
                    "function": func.__name__,
                    "duration_seconds": round(time.monotonic() - started, 3),
                    "error_code": e.code,
                },
            )
            raise
        except Exception as e:
            self.logger.error(
                "Failed {}",
                func.__name__,
                extra={
                    "function": func.__name__,
                    "duration_seconds": round(time.monotonic() - started, 3),
                    "error": str(e),
                },
                exc_info=True,
            )
            raise

        self.logger.info(
            "Completed {}",
            func.__name__,
            extra={
                "function": func.__name__,
                "duration_seconds": round(time.monotonic() - started, 3),
            },
        )
        return result

    return wrapper


def service_result(func: Callable[..., T]) -> Callable[..., T]:
    """
    Convert a facade method's outcome into a ServiceResult.

    The return value becomes ``ServiceResult(success=True, data=...)``; a
    PlatformError becomes a failed result carrying its message and code.
    Any other exception propagates unchanged.
    """
    @functools.wraps(func)
    async def wrapper(self: Any, *args: Any, **kwargs: Any) -> ServiceResult:
        try:
            data = await func(self, *args, **kwargs)
        except PlatformError as e:
            return ServiceResult(
                success=False, error=e.message, error_code=e.code
            )
        return ServiceResult(success=True, data=data)

    return wrapper
