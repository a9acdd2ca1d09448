"""
EarningsSession repository.

Data access layer for EarningsSession model.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.earnings_session import EarningsSession
from app.models.enums import SessionStatus
from app.repositories.base import BaseRepository


class EarningsSessionRepository(BaseRepository[EarningsSession]):
    """EarningsSession repository with lifecycle queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize earnings session repository."""
        super().__init__(EarningsSession, session)

    async def get_active_for_user(
        self, user_id: int
    ) -> EarningsSession | None:
        """
        Get the user's ACTIVE session, if any.

        Args:
            user_id: User ID

        Returns:
            Active session or None
        """
        stmt = (
            select(EarningsSession)
            .where(
                EarningsSession.user_id == user_id,
                EarningsSession.status == SessionStatus.ACTIVE,
            )
            .order_by(EarningsSession.start_time.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_last_completed(
        self, user_id: int
    ) -> EarningsSession | None:
        """
        Get the most recently completed session.

        Args:
            user_id: User ID

        Returns:
            Latest COMPLETED session by actual end time, or None
        """
        stmt = (
            select(EarningsSession)
            .where(
                EarningsSession.user_id == user_id,
                EarningsSession.status == SessionStatus.COMPLETED,
            )
            .order_by(
                EarningsSession.actual_end_time.desc(),
                EarningsSession.id.desc(),
            )
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_expired_active(
        self, now: datetime, limit: int | None = None
    ) -> list[EarningsSession]:
        """
        Get ACTIVE sessions whose expected end time has passed.

        Args:
            now: Reference time
            limit: Optional batch size

        Returns:
            Expired sessions, oldest first
        """
        stmt = (
            select(EarningsSession)
            .where(
                EarningsSession.status == SessionStatus.ACTIVE,
                EarningsSession.expected_end_time <= now,
            )
            .order_by(EarningsSession.expected_end_time.asc())
        )
        if limit:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_history(
        self, user_id: int, limit: int
    ) -> list[EarningsSession]:
        """
        Get the user's sessions, newest first.

        Args:
            user_id: User ID
            limit: Max number of sessions

        Returns:
            List of sessions
        """
        stmt = (
            select(EarningsSession)
            .where(EarningsSession.user_id == user_id)
            .order_by(
                EarningsSession.start_time.desc(), EarningsSession.id.desc()
            )
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def sum_completed_earnings(
        self, user_id: int, since: datetime | None = None
    ) -> Decimal:
        """
        Sum credited earnings of completed sessions.

        Args:
            user_id: User ID
            since: Only count sessions completed at or after this time

        Returns:
            Total credited amount
        """
        stmt = select(
            func.coalesce(func.sum(EarningsSession.total_earnings), 0)
        ).where(
            EarningsSession.user_id == user_id,
            EarningsSession.status == SessionStatus.COMPLETED,
        )
        if since is not None:
            stmt = stmt.where(EarningsSession.actual_end_time >= since)
        result = await self.session.execute(stmt)
        return Decimal(str(result.scalar() or 0))
