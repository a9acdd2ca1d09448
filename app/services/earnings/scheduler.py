"""
Session completion scheduler.

In-process completion of earning sessions: one timer per started session
plus a periodic sweep for sessions that expired while nobody was watching.
Both paths call the idempotent EarningSessionService.complete_session.
"""

import asyncio
from datetime import datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config.operational_constants import SESSION_SWEEP_INTERVAL_SECONDS
from app.services.base_service import Clock
from app.services.earnings.session_service import (
    EarningSessionService,
    SweepResult,
)
from app.services.notification.dispatcher import NotificationDispatcher
from app.utils.datetime_utils import utc_now


class SessionCompletionScheduler:
    """
    Lifecycle-managed background completion of earning sessions.

    Usage:
        scheduler = SessionCompletionScheduler(async_session_maker)
        await scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        dispatcher: NotificationDispatcher | None = None,
        sweep_interval: float = SESSION_SWEEP_INTERVAL_SECONDS,
        clock: Clock | None = None,
    ) -> None:
        self.session_maker = session_maker
        self.dispatcher = dispatcher or NotificationDispatcher()
        self.sweep_interval = sweep_interval
        self.clock = clock or utc_now
        self._sweep_task: asyncio.Task | None = None
        self._timers: dict[int, asyncio.Task] = {}

    @property
    def is_running(self) -> bool:
        """Whether the sweep loop is active."""
        return self._sweep_task is not None and not self._sweep_task.done()

    @property
    def scheduled_sessions(self) -> list[int]:
        """Session ids with a pending completion timer."""
        return list(self._timers)

    async def start(self) -> None:
        """Start the periodic sweep loop."""
        if self.is_running:
            logger.warning("Session completion scheduler already running")
            return

        self._sweep_task = asyncio.create_task(self._sweep_loop())
        logger.info(
            "Session completion scheduler started",
            extra={"sweep_interval_seconds": self.sweep_interval},
        )

    async def stop(self) -> None:
        """Cancel the sweep loop and all pending timers."""
        tasks = list(self._timers.values())
        if self._sweep_task is not None:
            tasks.append(self._sweep_task)

        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        self._timers.clear()
        self._sweep_task = None
        logger.info("Session completion scheduler stopped")

    def schedule(self, session_id: int, expected_end_time: datetime) -> None:
        """
        Complete a session when its expected end time is reached.

        Args:
            session_id: Session ID
            expected_end_time: When to complete it
        """
        if session_id in self._timers:
            return

        task = asyncio.create_task(
            self._complete_at(session_id, expected_end_time)
        )
        self._timers[session_id] = task
        task.add_done_callback(
            lambda _t, sid=session_id: self._timers.pop(sid, None)
        )

    async def _complete_at(
        self, session_id: int, expected_end_time: datetime
    ) -> None:
        delay = (expected_end_time - self.clock()).total_seconds()
        if delay > 0:
            await asyncio.sleep(delay)
        await self.complete(session_id)

    async def complete(self, session_id: int) -> None:
        """Complete one session in a fresh database session."""
        try:
            async with self.session_maker() as session:
                service = EarningSessionService(
                    session, dispatcher=self.dispatcher, clock=self.clock
                )
                await service.complete_session(session_id)
        except Exception as e:
            logger.error(
                "Scheduled session completion failed",
                extra={"session_id": session_id, "error": str(e)},
            )

    async def run_sweep(self) -> SweepResult:
        """Run one expired-session sweep."""
        async with self.session_maker() as session:
            service = EarningSessionService(
                session, dispatcher=self.dispatcher, clock=self.clock
            )
            return await service.complete_expired_sessions()

    async def _sweep_loop(self) -> None:
        while True:
            try:
                await self.run_sweep()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.exception(f"Session sweep failed: {e}")
            await asyncio.sleep(self.sweep_interval)
