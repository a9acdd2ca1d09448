"""
Automatic deposit detection.

Lifecycle-managed background pass that verifies PENDING deposits carrying
a transaction hash against the transaction oracle.
"""

import asyncio
from dataclasses import dataclass, field

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config.operational_constants import (
    DEPOSIT_DETECTION_BATCH_SIZE,
    DEPOSIT_DETECTION_INTERVAL_SECONDS,
)
from app.repositories.deposit_repository import DepositRepository
from app.services.base_service import Clock
from app.services.deposit.service import DepositService
from app.services.notification.dispatcher import NotificationDispatcher
from app.services.oracle.lookup import TransactionOracle
from app.utils.exceptions import must_raise


@dataclass
class DetectionResult:
    """Outcome of one detection pass."""

    checked: int = 0
    confirmed: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)


class DepositDetectionWorker:
    """
    Periodic deposit detection with explicit start/stop.

    Usage:
        worker = DepositDetectionWorker(async_session_maker, oracle)
        await worker.start()
        ...
        await worker.stop()
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        oracle: TransactionOracle,
        dispatcher: NotificationDispatcher | None = None,
        interval: float = DEPOSIT_DETECTION_INTERVAL_SECONDS,
        batch_size: int = DEPOSIT_DETECTION_BATCH_SIZE,
        clock: Clock | None = None,
    ) -> None:
        self.session_maker = session_maker
        self.oracle = oracle
        self.dispatcher = dispatcher or NotificationDispatcher()
        self.interval = interval
        self.batch_size = batch_size
        self.clock = clock
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        """Whether the detection loop is active."""
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the detection loop."""
        if self.is_running:
            logger.warning("Deposit detection already running")
            return

        self._task = asyncio.create_task(self._loop())
        logger.info(
            "Deposit detection started",
            extra={"interval_seconds": self.interval},
        )

    async def stop(self) -> None:
        """Stop the detection loop and wait for it to exit."""
        if self._task is None:
            return

        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)
        self._task = None
        logger.info("Deposit detection stopped")

    async def run_once(self) -> DetectionResult:
        """
        Verify one batch of pending deposits.

        Returns:
            DetectionResult
        """
        result = DetectionResult()

        async with self.session_maker() as session:
            pending = await DepositRepository(
                session
            ).get_pending_with_tx_hash(limit=self.batch_size)
            deposit_ids = [d.id for d in pending]

            service = DepositService(
                session, dispatcher=self.dispatcher, clock=self.clock
            )
            for deposit_id in deposit_ids:
                result.checked += 1
                try:
                    verification = await service.verify_with_oracle(
                        deposit_id, self.oracle
                    )
                except Exception as e:
                    await session.rollback()
                    if must_raise(e):
                        raise
                    logger.error(
                        "Deposit verification failed",
                        extra={"deposit_id": deposit_id, "error": str(e)},
                    )
                    result.failed.append(deposit_id)
                    continue

                if verification.confirmed:
                    result.confirmed.append(deposit_id)

        if result.checked:
            logger.info(
                "Deposit detection pass finished",
                extra={
                    "checked": result.checked,
                    "confirmed": len(result.confirmed),
                    "failed": len(result.failed),
                },
            )
        return result

    async def _loop(self) -> None:
        while True:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.exception(f"Deposit detection pass failed: {e}")
            await asyncio.sleep(self.interval)
