"""
UserVip model.

Current tier membership of a user; updated in place on upgrade.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.types import MoneyType, UTCDateTime

if TYPE_CHECKING:
    from app.models.user import User
    from app.models.vip_level import VipLevel


class UserVip(Base):
    """UserVip model - one membership row per user."""

    __tablename__ = "user_vips"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    vip_level_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("vip_levels.id"),
        nullable=False,
        index=True,
    )

    # Cumulative amount paid across the first purchase and all upgrades
    total_paid: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
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

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="vip")
    vip_level: Mapped["VipLevel"] = relationship("VipLevel", lazy="joined")

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<UserVip(user_id={self.user_id}, "
            f"vip_level_id={self.vip_level_id}, total_paid={self.total_paid})>"
        )
