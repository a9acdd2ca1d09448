"""Pytest configuration and shared fixtures for all tests."""

import os

# Minimal environment for Settings; must be set before app imports
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault(
    "COMPANY_WALLET_ADDRESS", "0x742d35cc6634c0532925a3b844bc9e7595f0beb0"
)
os.environ.setdefault(
    "COMPANY_TRON_WALLET_ADDRESS", "TXYZopYRdj2D9XRtbG411XZZ3kM5VkAeBf"
)
os.environ.pop("TELEGRAM_BOT_TOKEN", None)

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from app.config.settings import Settings
from app.models import Base, Transaction, User, UserVip, VipLevel, Wallet
from app.repositories.wallet_repository import WalletRepository
from app.services.notification import NotificationDispatcher


COMPANY_WALLET = "0x742d35cc6634c0532925a3b844bc9e7595f0beb0"
USER_WALLET = "0x8ba1f109551bd432803012645ac136ddd64dba72"
TX_HASH = "0x" + "ab" * 32


class FakeClock:
    """Controllable clock injected into services."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class RecordingSender:
    """NotificationSender that remembers what it was asked to send."""

    def __init__(self) -> None:
        self.sent: list[tuple[int, str, dict[str, Any]]] = []

    async def send(
        self, user_id: int, template_name: str, data: dict[str, Any]
    ) -> None:
        self.sent.append((user_id, template_name, data))

    def templates_for(self, user_id: int) -> list[str]:
        return [name for uid, name, _ in self.sent if uid == user_id]


class FailingSender:
    """NotificationSender whose every delivery fails."""

    def __init__(self) -> None:
        self.attempts = 0

    async def send(
        self, user_id: int, template_name: str, data: dict[str, Any]
    ) -> None:
        self.attempts += 1
        raise RuntimeError("channel down")


@pytest.fixture
def clock():
    """Deterministic clock starting at 2026-01-01 12:00 UTC."""
    return FakeClock()


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def dispatcher(sender):
    return NotificationDispatcher(sender)


@pytest.fixture
def failing_sender():
    return FailingSender()


@pytest.fixture
def config():
    """Settings with deposit and withdrawal defaults for tests."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        environment="test",
        company_wallet_address=COMPANY_WALLET,
        company_tron_wallet_address="TXYZopYRdj2D9XRtbG411XZZ3kM5VkAeBf",
        min_deposit_amount=10.0,
        min_withdrawal_amount=2.0,
        withdrawal_fee_percent=0.02,
        withdrawal_fee_fixed=1.0,
    )


@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite database built from the models."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def make_user(session):
    """
    Factory creating a user with a wallet.

    Usage:
        user = await make_user(balance=Decimal("100"), referred_by=parent.id)
    """
    counter = {"n": 0}

    async def _make_user(
        referred_by: int | None = None,
        balance: Decimal = Decimal("0"),
        telegram_id: int | None = None,
        full_name: str | None = None,
        **wallet_fields: Decimal,
    ) -> User:
        counter["n"] += 1
        user = User(
            email=f"user{counter['n']}@example.com",
            full_name=full_name or f"User {counter['n']}",
            referral_code=f"REF{counter['n']:04d}",
            telegram_id=telegram_id,
            referred_by=referred_by,
        )
        session.add(user)
        await session.flush()

        session.add(
            Wallet(user_id=user.id, balance=balance, **wallet_fields)
        )
        await session.commit()
        return user

    return _make_user


@pytest.fixture
def make_vip_level(session):
    """Factory creating a VIP tier."""

    async def _make_vip_level(
        name: str = "Starter",
        amount: Decimal = Decimal("30"),
        daily_earning: Decimal = Decimal("2"),
        is_active: bool = True,
    ) -> VipLevel:
        level = VipLevel(
            name=name,
            amount=amount,
            daily_earning=daily_earning,
            is_active=is_active,
        )
        session.add(level)
        await session.commit()
        return level

    return _make_vip_level


@pytest.fixture
def grant_vip(session):
    """Give a user an active membership without charging the wallet."""

    async def _grant_vip(user: User, level: VipLevel) -> UserVip:
        membership = UserVip(
            user_id=user.id,
            vip_level_id=level.id,
            vip_level=level,
            total_paid=level.amount,
            is_active=True,
        )
        session.add(membership)
        await session.commit()
        return membership

    return _grant_vip


@pytest.fixture
def get_wallet(session_maker):
    """Read a wallet in a fresh session (no identity-map caching)."""

    async def _get_wallet(user_id: int) -> Wallet:
        async with session_maker() as fresh:
            return await WalletRepository(fresh).get_by_user_id(user_id)

    return _get_wallet


@pytest.fixture
def count_transactions(session_maker):
    """Count ledger rows of a type, optionally for one user."""

    async def _count(type: str, user_id: int | None = None) -> int:
        stmt = (
            select(func.count())
            .select_from(Transaction)
            .where(Transaction.type == type)
        )
        if user_id is not None:
            stmt = stmt.where(Transaction.user_id == user_id)
        async with session_maker() as fresh:
            return (await fresh.execute(stmt)).scalar_one()

    return _count
