"""
Expired session sweep.

Completes ACTIVE earning sessions whose expected end time has passed.
Covers sessions whose in-process timer was lost (restart, crash) and runs
every few minutes; completion is idempotent so overlap with the timers is
harmless.
"""

import dramatiq
from loguru import logger

from app.config.operational_constants import (
    DEFAULT_MAX_RETRIES,
    DRAMATIQ_TIME_LIMIT_SHORT,
    SESSION_SWEEP_LOCK_SECONDS,
)
from app.services.earnings import EarningSessionService
from app.services.notification import create_notification_dispatcher
from app.utils.redis_utils import task_lock
from jobs.async_runner import local_session_maker, run_async


@dramatiq.actor(
    max_retries=DEFAULT_MAX_RETRIES, time_limit=DRAMATIQ_TIME_LIMIT_SHORT
)
def complete_expired_sessions() -> dict:
    """
    Complete expired earning sessions.

    Returns:
        Dict with completed, skipped and failed counts
    """
    logger.info("Starting expired session sweep...")
    result = run_async(_complete_expired_sessions_async())
    logger.info(
        f"Expired session sweep complete: {result['completed']} completed, "
        f"{result['skipped']} skipped, {result['failed']} failed"
    )
    return result


async def _complete_expired_sessions_async() -> dict:
    """Async implementation of the sweep."""
    async with task_lock(
        "lock:session_sweep", SESSION_SWEEP_LOCK_SECONDS
    ) as acquired:
        if not acquired:
            logger.info("Session sweep already running elsewhere, skipping")
            return {"completed": 0, "skipped": 0, "failed": 0}

        async with local_session_maker() as session_maker:
            dispatcher = create_notification_dispatcher(session_maker)
            try:
                async with session_maker() as session:
                    service = EarningSessionService(
                        session, dispatcher=dispatcher
                    )
                    sweep = await service.complete_expired_sessions()
            finally:
                await dispatcher.close()

    return {
        "completed": len(sweep.completed),
        "skipped": len(sweep.skipped),
        "failed": len(sweep.failed),
    }
