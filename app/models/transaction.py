"""
Transaction model.

Append-only audit record of every balance-affecting event.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.types import MoneyType, UTCDateTime


class Transaction(Base):
    """
    Transaction entity.

    Created by the wallet ledger together with the balance mutation it
    describes; never updated or deleted.

    Attributes:
        id: Primary key
        user_id: Wallet owner the event applies to
        type: TransactionType value
        amount: Signed requested amount (credit > 0, debit < 0)
        balance_before: Balance before the mutation
        balance_after: Balance after the mutation (clamped debits differ
            from balance_before + amount)
        description: Free-text description
        reference_id: Originating entity id (deposit, session, VIP level, ...)
        created_at: When the event was recorded
    """

    __tablename__ = "transactions"
    __table_args__ = (
        Index("idx_transactions_user_type", "user_id", "type"),
        Index("idx_transactions_type_reference", "type", "reference_id"),
        # At most one earnings credit per session
        Index(
            "uq_transactions_vip_earnings_reference",
            "reference_id",
            unique=True,
            postgresql_where=text("type = 'VIP_EARNINGS'"),
            sqlite_where=text("type = 'VIP_EARNINGS'"),
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    type: Mapped[str] = mapped_column(String(32), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    balance_before: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    balance_after: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    reference_id: Mapped[str | None] = mapped_column(
        String(64), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(UTC),
        nullable=False,
        index=True,
    )

    @property
    def shortfall(self) -> Decimal:
        """Amount absorbed by the system on a clamped debit."""
        applied = self.balance_after - self.balance_before
        return max(Decimal("0"), applied - self.amount)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Transaction(id={self.id}, user_id={self.user_id}, "
            f"type={self.type}, amount={self.amount})>"
        )
