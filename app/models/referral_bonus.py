"""
ReferralBonus model.

Append-only record of one computed multi-level referral bonus.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.types import MoneyType, RateType, UTCDateTime


class ReferralBonus(Base):
    """
    ReferralBonus entity.

    Attributes:
        id: Primary key
        referrer_id: Ancestor credited with the bonus
        referred_id: Paying user the bonus originates from
        bonus_amount: Credited amount
        bonus_rate: Rate applied (fraction, 0.10 = 10%)
        level: Distance from the paying user (1-3)
        deposit_id: Originating deposit, if any
        vip_level_id: Originating VIP purchase tier, if any
        transaction_id: REFERRAL_BONUS audit transaction
    """

    __tablename__ = "referral_bonuses"
    __table_args__ = (
        CheckConstraint(
            'level >= 1 AND level <= 3',
            name='check_referral_bonus_level_range'
        ),
        CheckConstraint(
            'bonus_amount > 0',
            name='check_referral_bonus_amount_positive'
        ),
        Index("idx_referral_bonuses_referrer_level", "referrer_id", "level"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    referrer_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    referred_id: Mapped[int] = mapped_column(
        Integer, nullable=False, index=True
    )

    bonus_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    bonus_rate: Mapped[Decimal] = mapped_column(RateType, nullable=False)
    level: Mapped[int] = mapped_column(Integer, nullable=False)

    deposit_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    vip_level_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    transaction_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("transactions.id"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(UTC), nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<ReferralBonus(referrer_id={self.referrer_id}, "
            f"referred_id={self.referred_id}, level={self.level}, "
            f"amount={self.bonus_amount})>"
        )
