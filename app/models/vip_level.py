"""
VipLevel model.

Catalog of membership tiers with their price and daily earning rate.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.types import MoneyType, UTCDateTime


class VipLevel(Base):
    """VipLevel model - admin-managed membership tiers."""

    __tablename__ = "vip_levels"
    __table_args__ = (
        CheckConstraint('amount > 0', name='check_vip_level_amount_positive'),
        CheckConstraint(
            'daily_earning >= 0',
            name='check_vip_level_daily_earning_non_negative'
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    name: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True
    )

    # Entry price and earning rate per session
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    daily_earning: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)

    # Descriptive fields
    bicycle_model: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bicycle_color: Mapped[str | None] = mapped_column(String(100), nullable=True)
    bicycle_features: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(UTC), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<VipLevel(id={self.id}, name={self.name}, "
            f"amount={self.amount}, daily_earning={self.daily_earning})>"
        )
