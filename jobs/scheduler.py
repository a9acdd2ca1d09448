"""
Periodic job scheduler.

Enqueues the background actors on fixed intervals. Run with:

    python -m jobs.scheduler

Workers consume the queue separately:

    dramatiq jobs.broker jobs.tasks.session_sweep jobs.tasks.deposit_detection
"""

import asyncio

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from loguru import logger

import jobs.broker  # noqa: F401 - registers the Redis broker
from app.config.logging import setup_logging
from app.config.settings import settings
from jobs.tasks.deposit_detection import detect_pending_deposits
from jobs.tasks.session_sweep import complete_expired_sessions


def create_scheduler() -> AsyncIOScheduler:
    """
    Build the scheduler with all periodic jobs registered.

    Returns:
        AsyncIOScheduler (not started)
    """
    scheduler = AsyncIOScheduler(timezone="UTC")

    scheduler.add_job(
        complete_expired_sessions.send,
        IntervalTrigger(seconds=settings.session_sweep_interval_seconds),
        id="session_sweep",
        name="Complete expired earning sessions",
        max_instances=1,
        coalesce=True,
    )
    scheduler.add_job(
        detect_pending_deposits.send,
        IntervalTrigger(seconds=settings.deposit_detection_interval_seconds),
        id="deposit_detection",
        name="Detect pending deposits",
        max_instances=1,
        coalesce=True,
    )
    return scheduler


async def main() -> None:
    """Run the scheduler until cancelled."""
    setup_logging()
    scheduler = create_scheduler()
    scheduler.start()
    logger.info(
        f"Scheduler started with {len(scheduler.get_jobs())} jobs"
    )

    try:
        await asyncio.Event().wait()
    finally:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")


if __name__ == "__main__":
    asyncio.run(main())
