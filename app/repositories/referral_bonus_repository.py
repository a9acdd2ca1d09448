"""
ReferralBonus repository.

Per-level bonus records and their aggregates.
"""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.referral_bonus import ReferralBonus
from app.repositories.base import BaseRepository


class ReferralBonusRepository(BaseRepository[ReferralBonus]):
    """ReferralBonus repository."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(ReferralBonus, session)

    async def sum_by_level(self, referrer_id: int) -> dict[int, Decimal]:
        """
        Sum bonus amounts per level for a referrer.

        Args:
            referrer_id: Referrer user ID

        Returns:
            Dict level -> total (levels without bonuses are omitted)
        """
        stmt = (
            select(
                ReferralBonus.level,
                func.coalesce(func.sum(ReferralBonus.bonus_amount), 0).label(
                    "total"
                ),
            )
            .where(ReferralBonus.referrer_id == referrer_id)
            .group_by(ReferralBonus.level)
        )
        result = await self.session.execute(stmt)
        return {row.level: Decimal(str(row.total)) for row in result.all()}

    async def get_history(
        self, referrer_id: int, page: int = 1, limit: int = 20
    ) -> tuple[list[ReferralBonus], int]:
        """
        Get paginated bonuses received by a referrer, newest first.

        Returns:
            Tuple of (bonuses, total_count)
        """
        count_stmt = select(func.count(ReferralBonus.id)).where(
            ReferralBonus.referrer_id == referrer_id
        )
        total = (await self.session.execute(count_stmt)).scalar() or 0

        stmt = (
            select(ReferralBonus)
            .where(ReferralBonus.referrer_id == referrer_id)
            .order_by(ReferralBonus.created_at.desc(), ReferralBonus.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total
