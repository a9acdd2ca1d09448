"""
User repository.

Parent-pointer lookups and referral counts.
"""

from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """User repository with referral queries."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(User, session)

    async def get_referrer_id(self, user_id: int) -> int | None:
        """
        Get parent pointer of a user without loading the entity.

        Args:
            user_id: User ID

        Returns:
            referred_by value, None if the user has no referrer or is unknown
        """
        stmt = select(User.referred_by).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def count_direct_referrals(self, user_id: int) -> int:
        """Number of level 1 referrals of a user."""
        return await self.count(referred_by=user_id)

    async def count_second_level_referrals(self, user_id: int) -> int:
        """
        Count users referred by the user's direct referrals.

        Args:
            user_id: Referrer user ID

        Returns:
            Number of level 2 referrals
        """
        direct_ids = select(User.id).where(User.referred_by == user_id)
        stmt = select(func.count(User.id)).where(
            User.referred_by.in_(direct_ids)
        )
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def get_direct_referrals(
        self, referrer_ids: Iterable[int]
    ) -> list[User]:
        """
        Get users referred by any of the given users, with wallets loaded.

        Args:
            referrer_ids: Parent user IDs

        Returns:
            Users ordered by join date
        """
        referrer_ids = list(referrer_ids)
        if not referrer_ids:
            return []

        stmt = (
            select(User)
            .options(selectinload(User.wallet))
            .where(User.referred_by.in_(referrer_ids))
            .order_by(User.created_at, User.id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
