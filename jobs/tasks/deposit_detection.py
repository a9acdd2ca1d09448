"""
Deposit detection task.

Verifies PENDING deposits that carry a transaction hash against the
blockchain explorers and confirms the ones that match.
"""

import dramatiq
from loguru import logger

from app.config.operational_constants import (
    DEFAULT_MAX_RETRIES,
    DEPOSIT_DETECTION_LOCK_SECONDS,
    DRAMATIQ_TIME_LIMIT_MEDIUM,
)
from app.services.deposit import DepositDetectionWorker
from app.services.notification import create_notification_dispatcher
from app.services.oracle import ExplorerTransactionOracle
from app.utils.redis_utils import task_lock
from jobs.async_runner import local_session_maker, run_async


@dramatiq.actor(
    max_retries=DEFAULT_MAX_RETRIES, time_limit=DRAMATIQ_TIME_LIMIT_MEDIUM
)
def detect_pending_deposits() -> dict:
    """
    Run one automatic deposit detection pass.

    Returns:
        Dict with checked, confirmed and failed counts
    """
    logger.info("Starting deposit detection...")
    result = run_async(_detect_pending_deposits_async())
    logger.info(
        f"Deposit detection complete: {result['checked']} checked, "
        f"{result['confirmed']} confirmed, {result['failed']} failed"
    )
    return result


async def _detect_pending_deposits_async() -> dict:
    """Async implementation of the detection pass."""
    async with task_lock(
        "lock:deposit_detection", DEPOSIT_DETECTION_LOCK_SECONDS
    ) as acquired:
        if not acquired:
            logger.info("Deposit detection already running elsewhere, skipping")
            return {"checked": 0, "confirmed": 0, "failed": 0}

        oracle = ExplorerTransactionOracle()
        async with local_session_maker() as session_maker:
            dispatcher = create_notification_dispatcher(session_maker)
            worker = DepositDetectionWorker(
                session_maker, oracle, dispatcher=dispatcher
            )
            try:
                detection = await worker.run_once()
            finally:
                await dispatcher.close()
                await oracle.close()

    return {
        "checked": detection.checked,
        "confirmed": len(detection.confirmed),
        "failed": len(detection.failed),
    }
