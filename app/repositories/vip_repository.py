"""
VIP repositories.

Data access layer for VipLevel and UserVip models.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user_vip import UserVip
from app.models.vip_level import VipLevel
from app.repositories.base import BaseRepository


class VipLevelRepository(BaseRepository[VipLevel]):
    """VipLevel repository with catalog queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize VIP level repository."""
        super().__init__(VipLevel, session)

    async def get_active_levels(self) -> list[VipLevel]:
        """
        Get active tiers ordered by price.

        Returns:
            List of active VIP levels, cheapest first
        """
        stmt = (
            select(VipLevel)
            .where(VipLevel.is_active.is_(True))
            .order_by(VipLevel.amount.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_name(self, name: str) -> VipLevel | None:
        """
        Get tier by unique name.

        Args:
            name: Tier name

        Returns:
            VipLevel or None
        """
        return await self.get_by(name=name)


class UserVipRepository(BaseRepository[UserVip]):
    """UserVip repository with membership queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user VIP repository."""
        super().__init__(UserVip, session)

    async def get_by_user_id(
        self, user_id: int, for_update: bool = False
    ) -> UserVip | None:
        """
        Get membership of a user.

        Args:
            user_id: User ID
            for_update: Lock the membership row

        Returns:
            UserVip or None
        """
        stmt = select(UserVip).where(UserVip.user_id == user_id)
        if for_update:
            stmt = stmt.with_for_update(of=UserVip).execution_options(
                populate_existing=True
            )
        result = await self.session.execute(stmt)
        return result.unique().scalar_one_or_none()

    async def get_active_membership(self, user_id: int) -> UserVip | None:
        """
        Get membership only if it is active.

        Args:
            user_id: User ID

        Returns:
            Active UserVip or None
        """
        membership = await self.get_by_user_id(user_id)
        if membership and membership.is_active:
            return membership
        return None
