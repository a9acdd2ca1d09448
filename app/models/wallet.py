"""
Wallet model.

One wallet per user holding the balance and the running aggregates.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.types import MoneyType, UTCDateTime

if TYPE_CHECKING:
    from app.models.user import User


class Wallet(Base):
    """
    Wallet entity.

    Mutated only through the wallet ledger (adjust_balance) and the
    withdrawal pool allocation; never written directly by callers.

    Attributes:
        id: Primary key
        user_id: Owner (one-to-one)
        balance: Spendable balance, never negative
        total_deposits: Sum of confirmed deposits
        total_earnings: Earnings pool (VIP session credits)
        total_referral_bonus: Referral bonus pool
        daily_earnings: Running sum of session credits
        last_withdrawal_at: When the last withdrawal was processed
    """

    __tablename__ = "wallets"
    __table_args__ = (
        CheckConstraint(
            'balance >= 0', name='check_wallet_balance_non_negative'
        ),
        CheckConstraint(
            'total_deposits >= 0',
            name='check_wallet_total_deposits_non_negative'
        ),
    )

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Owner
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    # Balances
    balance: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    total_deposits: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    total_earnings: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    total_referral_bonus: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    daily_earnings: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    last_withdrawal_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False
    )

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="wallet")

    @property
    def withdrawable_balance(self) -> Decimal:
        """Earnings and referral pools, bounded by the spendable balance."""
        pools = self.total_earnings + self.total_referral_bonus
        return max(Decimal("0"), min(pools, self.balance))

    def __repr__(self) -> str:
        """String representation."""
        return f"<Wallet(user_id={self.user_id}, balance={self.balance})>"
