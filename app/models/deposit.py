"""
Deposit model.

Represents a user deposit awaiting or having received confirmation.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import DepositStatus
from app.models.types import MoneyType, UTCDateTime

class Deposit(Base):
    """
    Deposit entity.

    PENDING until confirmed (balance credited once) or rejected. tx_hash is
    unique so one on-chain transfer can back at most one deposit.
    """

    __tablename__ = "deposits"
    __table_args__ = (
        CheckConstraint(
            'amount > 0', name='check_deposit_amount_positive'
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Deposit details
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    currency: Mapped[str] = mapped_column(
        String(20), nullable=False, default="USDT"
    )
    network: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Blockchain data
    tx_hash: Mapped[str | None] = mapped_column(
        String(255), nullable=True, unique=True
    )
    block_number: Mapped[int | None] = mapped_column(
        BigInteger, nullable=True
    )
    sender_address: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    # Status
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=DepositStatus.PENDING.value,
        index=True,
    )  # PENDING, CONFIRMED, REJECTED
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(UTC), nullable=False
    )
    confirmed_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )
    last_checked_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Deposit(id={self.id}, user_id={self.user_id}, "
            f"amount={self.amount}, status={self.status})>"
        )
