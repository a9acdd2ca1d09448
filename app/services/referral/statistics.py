"""
Referral statistics module.

Referral counts and bonus totals for a referrer.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.referral_bonus_repository import (
    ReferralBonusRepository,
)
from app.repositories.user_repository import UserRepository
from app.services.referral.config import REFERRAL_DEPTH


class ReferralStatisticsManager:
    """Manages referral statistics."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize statistics manager."""
        self.session = session
        self.user_repo = UserRepository(session)
        self.bonus_repo = ReferralBonusRepository(session)

    async def get_referral_stats(self, user_id: int) -> dict:
        """
        Get referral statistics for user.

        Args:
            user_id: User ID

        Returns:
            Dict with referral counts and bonus totals per level
        """
        direct_referrals = await self.user_repo.count_direct_referrals(
            user_id
        )
        indirect_referrals = (
            await self.user_repo.count_second_level_referrals(user_id)
        )

        sums = await self.bonus_repo.sum_by_level(user_id)
        by_level = {
            level: sums.get(level, Decimal("0"))
            for level in range(1, REFERRAL_DEPTH + 1)
        }

        return {
            "direct_referrals": direct_referrals,
            "indirect_referrals": indirect_referrals,
            "total_referrals": direct_referrals + indirect_referrals,
            "total_bonus": sum(by_level.values(), Decimal("0")),
            "bonus_by_level": by_level,
        }
