"""
Deposit repository.

Lookups by hash, per-user history and the detection work queue.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.deposit import Deposit
from app.models.enums import DepositStatus
from app.repositories.base import BaseRepository


class DepositRepository(BaseRepository[Deposit]):
    """Deposit repository."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(Deposit, session)

    async def get_by_user(
        self,
        user_id: int,
        status: str | None = None,
    ) -> list[Deposit]:
        """
        Get deposits of a user, newest first.

        Args:
            user_id: User ID
            status: Optional status filter

        Returns:
            List of deposits
        """
        stmt = select(Deposit).where(Deposit.user_id == user_id)
        if status:
            stmt = stmt.where(Deposit.status == status)
        stmt = stmt.order_by(Deposit.created_at.desc(), Deposit.id.desc())

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_tx_hash(self, tx_hash: str) -> Deposit | None:
        """Deposit registered with a blockchain transaction hash."""
        return await self.get_by(tx_hash=tx_hash)

    async def get_pending_with_tx_hash(
        self, limit: int | None = None
    ) -> list[Deposit]:
        """
        Get pending deposits that carry a transaction hash.

        Args:
            limit: Optional batch size

        Returns:
            Pending deposits, least recently checked first
        """
        stmt = (
            select(Deposit)
            .where(
                Deposit.status == DepositStatus.PENDING,
                Deposit.tx_hash.is_not(None),
            )
            .order_by(
                Deposit.last_checked_at.asc().nulls_first(),
                Deposit.created_at.asc(),
            )
        )
        if limit:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
