"""
Earning session service.

Lifecycle of timed earning sessions: start, completion (exactly one
credit per session), manual stop, expired-session sweep and status.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import (
    EARNING_HISTORY_LIMIT,
    SESSION_COOLDOWN,
    TASK_SESSION_DURATION,
    VIP_SESSION_DURATION,
)
from app.models.earnings_session import EarningsSession
from app.models.enums import SessionStatus, TransactionType
from app.repositories.earnings_session_repository import (
    EarningsSessionRepository,
)
from app.repositories.transaction_repository import TransactionRepository
from app.repositories.vip_repository import UserVipRepository
from app.services.base_service import BaseService, Clock, transaction
from app.services.earnings.calculator import (
    calculate_progress,
    calculate_prorated_earnings,
    cooldown_remaining,
)
from app.services.notification.dispatcher import NotificationDispatcher
from app.services.wallet.ledger import WalletLedger
from app.utils.exceptions import (
    CooldownActive,
    NoActiveVip,
    NotFoundError,
    SessionAlreadyActive,
)

if TYPE_CHECKING:
    from app.services.earnings.scheduler import SessionCompletionScheduler


class SessionProfile(Enum):
    """Session durations of the two earning surfaces."""

    TASK = TASK_SESSION_DURATION
    VIP = VIP_SESSION_DURATION


@dataclass
class CompletionResult:
    """Outcome of completing or stopping a session."""

    session_id: int
    user_id: int
    credited: bool
    amount: Decimal = Decimal("0")
    already_completed: bool = False


@dataclass
class SweepResult:
    """Outcome of one expired-session sweep."""

    completed: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)


@dataclass
class SessionStatusView:
    """What a user sees about their earning state."""

    state: str  # "active", "cooldown" or "ready"
    can_start: bool
    session_id: int | None = None
    vip_level_name: str | None = None
    daily_earning_rate: Decimal | None = None
    start_time: datetime | None = None
    expected_end_time: datetime | None = None
    duration_seconds: int = 0
    elapsed_seconds: int = 0
    remaining_seconds: int = 0
    progress: Decimal = Decimal("0")
    current_earnings: Decimal = Decimal("0")
    cooldown_remaining_seconds: int = 0
    cooldown_remaining_hours: int = 0


class EarningSessionService(BaseService):
    """
    Earning session lifecycle.

    Completion can be triggered by the in-process timer, the periodic
    sweep and manual calls at the same time. All of them go through
    complete_session, which locks the session row and skips crediting
    when a VIP_EARNINGS transaction already references the session.
    """

    def __init__(
        self,
        session: AsyncSession,
        dispatcher: NotificationDispatcher | None = None,
        scheduler: "SessionCompletionScheduler | None" = None,
        clock: Clock | None = None,
        cooldown: timedelta = SESSION_COOLDOWN,
    ) -> None:
        super().__init__(session, clock)
        self.dispatcher = dispatcher or NotificationDispatcher()
        self.scheduler = scheduler
        self.cooldown = cooldown
        self.session_repo = EarningsSessionRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.user_vip_repo = UserVipRepository(session)
        self.ledger = WalletLedger(session, clock=self.clock)

    async def start_session(
        self,
        user_id: int,
        duration: SessionProfile | timedelta = SessionProfile.VIP,
    ) -> EarningsSession:
        """
        Start a new earning session.

        Args:
            user_id: User ID
            duration: SessionProfile or explicit duration

        Returns:
            Created ACTIVE session

        Raises:
            NoActiveVip: User has no active membership
            SessionAlreadyActive: An ACTIVE session exists
            CooldownActive: Last completion is within the cooldown window
        """
        if isinstance(duration, SessionProfile):
            duration = duration.value

        earnings_session = await self._create_session(user_id, duration)

        if self.scheduler is not None:
            self.scheduler.schedule(
                earnings_session.id, earnings_session.expected_end_time
            )
        return earnings_session

    @transaction
    async def _create_session(
        self, user_id: int, duration: timedelta
    ) -> EarningsSession:
        membership = await self.user_vip_repo.get_active_membership(user_id)
        if not membership:
            raise NoActiveVip()

        if await self.session_repo.get_active_for_user(user_id):
            raise SessionAlreadyActive()

        now = self.clock()
        last = await self.session_repo.get_last_completed(user_id)
        if last is not None:
            remaining = cooldown_remaining(
                last.actual_end_time, now, self.cooldown
            )
            if remaining > timedelta(0):
                raise CooldownActive(remaining)

        level = membership.vip_level
        earnings_session = await self.session_repo.create(
            user_id=user_id,
            vip_level_id=level.id,
            vip_level=level,
            start_time=now,
            expected_end_time=now + duration,
            status=SessionStatus.ACTIVE.value,
            daily_earning_rate=level.daily_earning,
        )

        self.logger.info(
            "Earning session started",
            extra={
                "user_id": user_id,
                "session_id": earnings_session.id,
                "vip_level": level.name,
                "rate": str(level.daily_earning),
                "duration_seconds": duration.total_seconds(),
            },
        )
        return earnings_session

    async def complete_session(self, session_id: int) -> CompletionResult:
        """
        Complete a session and credit its rate snapshot once.

        No-op when the session is already COMPLETED.

        Args:
            session_id: Session ID

        Returns:
            CompletionResult

        Raises:
            NotFoundError: Unknown session
        """
        result = await self._finish(session_id, prorate=False)
        self._notify_completion(result)
        return result

    async def stop_session(self, user_id: int) -> CompletionResult:
        """
        Stop the user's ACTIVE session early with a prorated credit.

        Args:
            user_id: User ID

        Returns:
            CompletionResult

        Raises:
            NotFoundError: User has no ACTIVE session
        """
        active = await self.session_repo.get_active_for_user(user_id)
        if not active:
            raise NotFoundError("No active earning session found")

        result = await self._finish(active.id, prorate=True)
        self._notify_completion(result)
        return result

    @transaction
    async def _finish(
        self, session_id: int, prorate: bool
    ) -> CompletionResult:
        earnings_session = await self.session_repo.get_for_update(session_id)
        if not earnings_session:
            raise NotFoundError(f"Earning session {session_id} not found")

        user_id = earnings_session.user_id
        if earnings_session.status != SessionStatus.ACTIVE:
            self.logger.debug(
                "Session already completed, skipping",
                extra={"session_id": session_id, "user_id": user_id},
            )
            return CompletionResult(
                session_id=session_id,
                user_id=user_id,
                credited=False,
                amount=earnings_session.total_earnings or Decimal("0"),
                already_completed=True,
            )

        now = self.clock()
        if prorate:
            amount = calculate_prorated_earnings(
                earnings_session.start_time,
                earnings_session.expected_end_time,
                earnings_session.daily_earning_rate,
                now,
            )
        else:
            amount = earnings_session.daily_earning_rate

        earnings_session.status = SessionStatus.COMPLETED.value
        earnings_session.actual_end_time = now
        earnings_session.total_earnings = amount

        existing = await self.transaction_repo.find_by_reference(
            TransactionType.VIP_EARNINGS.value, str(session_id)
        )

        credited = False
        if existing is not None:
            self.logger.warning(
                "Earnings already credited for session, skipping credit",
                extra={
                    "session_id": session_id,
                    "transaction_id": existing.id,
                },
            )
        elif amount > 0:
            level_name = earnings_session.vip_level.name
            await self.ledger.adjust_balance(
                user_id=user_id,
                signed_amount=amount,
                type=TransactionType.VIP_EARNINGS,
                description=(
                    f"VIP earnings from {level_name} session"
                    + (" (stopped early)" if prorate else "")
                ),
                reference_id=session_id,
            )
            credited = True
        else:
            await self.session.flush()

        self.logger.info(
            "Earning session completed",
            extra={
                "session_id": session_id,
                "user_id": user_id,
                "amount": str(amount),
                "credited": credited,
                "prorated": prorate,
            },
        )
        return CompletionResult(
            session_id=session_id,
            user_id=user_id,
            credited=credited,
            amount=amount,
        )

    def _notify_completion(self, result: CompletionResult) -> None:
        if result.credited:
            self.dispatcher.notify(
                result.user_id,
                "session_completed",
                {"amount": f"{result.amount:.2f}"},
            )

    async def complete_expired_sessions(
        self, limit: int | None = None
    ) -> SweepResult:
        """
        Complete every ACTIVE session past its expected end time.

        Per-session failures are logged and reported, not raised.

        Args:
            limit: Optional batch size

        Returns:
            SweepResult with completed, skipped and failed session ids
        """
        expired = await self.session_repo.get_expired_active(
            self.clock(), limit=limit
        )
        session_ids = [s.id for s in expired]
        sweep = SweepResult()

        for session_id in session_ids:
            try:
                result = await self.complete_session(session_id)
            except Exception as e:
                self.logger.error(
                    "Failed to complete expired session",
                    extra={"session_id": session_id, "error": str(e)},
                )
                sweep.failed.append(session_id)
                continue

            if result.already_completed:
                sweep.skipped.append(session_id)
            else:
                sweep.completed.append(session_id)

        if session_ids:
            self.logger.info(
                "Expired session sweep finished",
                extra={
                    "completed": len(sweep.completed),
                    "skipped": len(sweep.skipped),
                    "failed": len(sweep.failed),
                },
            )
        return sweep

    async def get_status(self, user_id: int) -> SessionStatusView:
        """
        Get the user's earning status.

        Args:
            user_id: User ID

        Returns:
            SessionStatusView: active progress, cooldown or ready
        """
        now = self.clock()
        active = await self.session_repo.get_active_for_user(user_id)

        if active:
            progress = calculate_progress(
                active.start_time,
                active.expected_end_time,
                active.daily_earning_rate,
                now,
            )
            return SessionStatusView(
                state="active",
                can_start=False,
                session_id=active.id,
                vip_level_name=active.vip_level.name,
                daily_earning_rate=active.daily_earning_rate,
                start_time=active.start_time,
                expected_end_time=active.expected_end_time,
                duration_seconds=int(active.duration_seconds),
                elapsed_seconds=int(progress.elapsed.total_seconds()),
                remaining_seconds=int(progress.remaining.total_seconds()),
                progress=progress.progress,
                current_earnings=progress.current_earnings,
            )

        last = await self.session_repo.get_last_completed(user_id)
        remaining = cooldown_remaining(
            last.actual_end_time if last else None, now, self.cooldown
        )
        if remaining > timedelta(0):
            cooldown = CooldownActive(remaining)
            return SessionStatusView(
                state="cooldown",
                can_start=False,
                cooldown_remaining_seconds=int(remaining.total_seconds()),
                cooldown_remaining_hours=cooldown.remaining_hours,
            )

        return SessionStatusView(state="ready", can_start=True)

    async def get_history(
        self, user_id: int, limit: int = EARNING_HISTORY_LIMIT
    ) -> list[EarningsSession]:
        """
        Get the user's recent sessions, newest first.

        Args:
            user_id: User ID
            limit: Max number of sessions

        Returns:
            List of sessions
        """
        return await self.session_repo.get_history(user_id, limit)
