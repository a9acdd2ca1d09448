"""
Wallet repository.

Data access layer for Wallet model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.wallet import Wallet
from app.repositories.base import BaseRepository


class WalletRepository(BaseRepository[Wallet]):
    """Wallet repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize wallet repository."""
        super().__init__(Wallet, session)

    async def get_by_user_id(self, user_id: int) -> Wallet | None:
        """
        Get wallet by owner.

        Args:
            user_id: User ID

        Returns:
            Wallet or None
        """
        return await self.get_by(user_id=user_id)

    async def get_by_user_id_for_update(self, user_id: int) -> Wallet | None:
        """
        Get wallet by owner with a row lock.

        Args:
            user_id: User ID

        Returns:
            Locked wallet or None
        """
        stmt = (
            select(Wallet)
            .where(Wallet.user_id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
