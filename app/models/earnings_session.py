"""
EarningsSession model.

One row per earning cycle; created ACTIVE by start, completed exactly once.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.enums import SessionStatus
from app.models.types import MoneyType, UTCDateTime

if TYPE_CHECKING:
    from app.models.vip_level import VipLevel


class EarningsSession(Base):
    """
    EarningsSession entity.

    Attributes:
        id: Primary key
        user_id: Session owner
        vip_level_id: Tier the rate snapshot was taken from
        start_time: When the session started
        expected_end_time: start_time + session duration
        actual_end_time: When the session was completed (None while ACTIVE)
        status: ACTIVE or COMPLETED
        daily_earning_rate: Rate snapshot taken at start
        total_earnings: Amount credited on completion
    """

    __tablename__ = "earnings_sessions"
    __table_args__ = (
        Index("idx_earnings_sessions_user_status", "user_id", "status"),
        Index(
            "idx_earnings_sessions_status_expected_end",
            "status",
            "expected_end_time",
        ),
        Index(
            "uq_earnings_sessions_one_active_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'ACTIVE'"),
            sqlite_where=text("status = 'ACTIVE'"),
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
    vip_level_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("vip_levels.id"), nullable=False
    )

    start_time: Mapped[datetime] = mapped_column(
        UTCDateTime, default=lambda: datetime.now(UTC), nullable=False
    )
    expected_end_time: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False
    )
    actual_end_time: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )

    status: Mapped[str] = mapped_column(
        String(20), default=SessionStatus.ACTIVE.value, nullable=False
    )
    daily_earning_rate: Mapped[Decimal] = mapped_column(
        MoneyType, nullable=False
    )
    total_earnings: Mapped[Decimal | None] = mapped_column(
        MoneyType, nullable=True
    )

    vip_level: Mapped["VipLevel"] = relationship("VipLevel", lazy="joined")

    @property
    def is_active(self) -> bool:
        """Whether the session has not been completed yet."""
        return self.status == SessionStatus.ACTIVE

    @property
    def duration_seconds(self) -> float:
        """Planned session length in seconds."""
        return (self.expected_end_time - self.start_time).total_seconds()

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<EarningsSession(id={self.id}, user_id={self.user_id}, "
            f"status={self.status})>"
        )
