"""
Withdrawal repository.

Data access layer for Withdrawal model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import WithdrawalStatus
from app.models.withdrawal import Withdrawal
from app.repositories.base import BaseRepository


class WithdrawalRepository(BaseRepository[Withdrawal]):
    """Withdrawal repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize withdrawal repository."""
        super().__init__(Withdrawal, session)

    async def get_pending_for_user(self, user_id: int) -> Withdrawal | None:
        """
        Get the user's PENDING withdrawal, if any.

        Args:
            user_id: User ID

        Returns:
            Pending withdrawal or None
        """
        return await self.get_by(
            user_id=user_id, status=WithdrawalStatus.PENDING.value
        )

    async def get_by_user(self, user_id: int) -> list[Withdrawal]:
        """
        Get withdrawal history of a user, newest first.

        Args:
            user_id: User ID

        Returns:
            List of withdrawals
        """
        stmt = (
            select(Withdrawal)
            .where(Withdrawal.user_id == user_id)
            .order_by(Withdrawal.created_at.desc(), Withdrawal.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
