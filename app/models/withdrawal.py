"""
Withdrawal model.

Represents a user withdrawal request and its processing outcome.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import WithdrawalStatus
from app.models.types import MoneyType, UTCDateTime


class Withdrawal(Base):
    """Withdrawal model - user withdrawal requests."""

    __tablename__ = "withdrawals"
    __table_args__ = (
        CheckConstraint(
            'amount > 0', name='check_withdrawal_amount_positive'
        ),
        CheckConstraint(
            'fee_amount >= 0', name='check_withdrawal_fee_non_negative'
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    # Fee is paid by the system, never deducted from the user
    fee_amount: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False, default=Decimal("0")
    )
    currency: Mapped[str] = mapped_column(String(20), nullable=False)
    network: Mapped[str | None] = mapped_column(String(20), nullable=True)
    wallet_address: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=WithdrawalStatus.PENDING.value,
        index=True,
    )
    transaction_hash: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Proportional split of the processed amount between the two pools
    earnings_deduction: Mapped[Decimal | None] = mapped_column(
        MoneyType, nullable=True
    )
    bonus_deduction: Mapped[Decimal | None] = mapped_column(
        MoneyType, nullable=True
    )

    processed_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    processed_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(UTC), nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Withdrawal(id={self.id}, user_id={self.user_id}, "
            f"amount={self.amount}, status={self.status})>"
        )
