"""
User model.

A platform member and their parent pointer in the referral forest.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base
from app.models.types import UTCDateTime

if TYPE_CHECKING:
    from app.models.user_vip import UserVip
    from app.models.wallet import Wallet


class User(Base):
    """
    User entity.

    Attributes:
        id: Primary key
        email / phone / full_name: Identity used in messages
        referral_code: Public code shared with invitees
        telegram_id: Chat used for notifications (optional)
        referred_by: Direct referrer; the chain is walked one hop at a time
        is_active: Account flag
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "referred_by IS NULL OR referred_by <> id",
            name="check_user_not_self_referred",
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    email: Mapped[str | None] = mapped_column(
        String(255), nullable=True, unique=True, index=True
    )
    phone: Mapped[str | None] = mapped_column(
        String(50), nullable=True, unique=True
    )
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    referral_code: Mapped[str | None] = mapped_column(
        String(20), nullable=True, unique=True, index=True
    )
    telegram_id: Mapped[int | None] = mapped_column(
        BigInteger, nullable=True, unique=True, index=True
    )

    # Parent pointer only; no ORM relationship is walked for the chain
    referred_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
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
        nullable=False,
    )

    wallet: Mapped["Wallet | None"] = relationship(
        "Wallet",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    vip: Mapped["UserVip | None"] = relationship(
        "UserVip",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    @property
    def display_name(self) -> str:
        """Best available name for messages and audit descriptions."""
        return self.full_name or self.email or self.phone or "User"

    def __repr__(self) -> str:
        return (
            f"<User(id={self.id}, email={self.email}, "
            f"referred_by={self.referred_by})>"
        )
