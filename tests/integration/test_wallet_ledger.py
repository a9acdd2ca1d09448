"""
Integration tests for WalletLedger.
"""

from decimal import Decimal

import pytest
from sqlalchemy import delete

from app.models import TransactionType, Wallet
from app.services.wallet import WalletLedger
from app.utils.exceptions import (
    LedgerIntegrityError,
    NotFoundError,
    ValidationError,
)


pytestmark = pytest.mark.integration


@pytest.fixture
def ledger(session, clock):
    return WalletLedger(session, clock=clock)


class TestAdjustBalance:
    """Test adjust_balance."""

    @pytest.mark.parametrize(
        "type,aggregate",
        [
            (TransactionType.DEPOSIT, "total_deposits"),
            (TransactionType.VIP_EARNINGS, "total_earnings"),
            (TransactionType.REFERRAL_BONUS, "total_referral_bonus"),
        ],
    )
    async def test_credit_bumps_aggregate(
        self, ledger, session, make_user, get_wallet, type, aggregate
    ):
        user = await make_user()
        user_id = user.id

        transaction = await ledger.adjust_balance(
            user_id, Decimal("25"), type, "credit"
        )
        await session.commit()

        wallet = await get_wallet(user_id)
        assert wallet.balance == Decimal("25")
        assert getattr(wallet, aggregate) == Decimal("25")
        assert transaction.balance_before == Decimal("0")
        assert transaction.balance_after == Decimal("25")

    async def test_admin_adjustment_leaves_aggregates(
        self, ledger, session, make_user, get_wallet
    ):
        user = await make_user()
        user_id = user.id

        await ledger.adjust_balance(
            user_id, Decimal("5"), TransactionType.ADMIN_ADJUSTMENT, "manual"
        )
        await session.commit()

        wallet = await get_wallet(user_id)
        assert wallet.balance == Decimal("5")
        assert wallet.total_deposits == Decimal("0")
        assert wallet.total_earnings == Decimal("0")

    async def test_negative_result_rejected(
        self, ledger, session, make_user, get_wallet, count_transactions
    ):
        user = await make_user(balance=Decimal("10"))
        user_id = user.id

        with pytest.raises(LedgerIntegrityError):
            await ledger.adjust_balance(
                user_id, Decimal("-10.01"), TransactionType.VIP_PAYMENT, "pay"
            )
        await session.rollback()

        assert (await get_wallet(user_id)).balance == Decimal("10")
        assert await count_transactions(TransactionType.VIP_PAYMENT) == 0

    async def test_withdrawal_clamps_to_zero(
        self, ledger, session, make_user, get_wallet
    ):
        user = await make_user(balance=Decimal("10"))
        user_id = user.id

        transaction = await ledger.adjust_balance(
            user_id, Decimal("-15"), TransactionType.WITHDRAWAL, "payout"
        )
        await session.commit()

        assert transaction.amount == Decimal("-15")
        assert transaction.balance_after == Decimal("0")
        assert transaction.shortfall == Decimal("5")
        assert (await get_wallet(user_id)).balance == Decimal("0")

    async def test_zero_amount(self, ledger, make_user):
        user = await make_user()
        with pytest.raises(ValidationError):
            await ledger.adjust_balance(
                user.id, Decimal("0"), TransactionType.DEPOSIT, "nothing"
            )

    async def test_unknown_user(self, ledger):
        with pytest.raises(NotFoundError):
            await ledger.adjust_balance(
                9999, Decimal("1"), TransactionType.DEPOSIT, "ghost"
            )

    async def test_sequence_never_goes_negative(
        self, ledger, session, make_user, get_wallet
    ):
        user = await make_user()
        user_id = user.id
        steps = [
            Decimal("50"), Decimal("-20"), Decimal("-40"),
            Decimal("15"), Decimal("-45"), Decimal("-1"),
        ]

        for step in steps:
            try:
                await ledger.adjust_balance(
                    user_id, step, TransactionType.ADMIN_ADJUSTMENT, "step"
                )
            except LedgerIntegrityError:
                await session.rollback()
            else:
                await session.commit()

        # 50 - 20 + 15 - 45; the -40 and the final -1 are rejected
        assert (await get_wallet(user_id)).balance == Decimal("0")

    async def test_creates_missing_wallet(
        self, ledger, session, make_user, get_wallet
    ):
        user = await make_user()
        user_id = user.id
        await session.execute(delete(Wallet).where(Wallet.user_id == user_id))
        await session.commit()

        await ledger.adjust_balance(
            user_id, Decimal("3"), TransactionType.DEPOSIT, "first credit"
        )
        await session.commit()

        assert (await get_wallet(user_id)).balance == Decimal("3")


class TestWithdrawalDebit:
    """Test debit_withdrawal pool accounting."""

    async def test_proportional_pools(
        self, ledger, session, make_user, get_wallet
    ):
        user = await make_user(
            balance=Decimal("100"),
            total_earnings=Decimal("60"),
            total_referral_bonus=Decimal("20"),
        )
        user_id = user.id

        debit = await ledger.debit_withdrawal(
            user_id, Decimal("40"), "payout", reference_id=1
        )
        await session.commit()

        assert debit.allocation.earnings_deduction == Decimal("30")
        assert debit.allocation.bonus_deduction == Decimal("10")
        wallet = await get_wallet(user_id)
        assert wallet.balance == Decimal("60")
        assert wallet.total_earnings == Decimal("30")
        assert wallet.total_referral_bonus == Decimal("10")
        assert wallet.last_withdrawal_at is not None


class TestReads:
    """Test wallet stats and history."""

    async def test_wallet_stats(self, ledger, make_user):
        user = await make_user(
            balance=Decimal("50"), total_earnings=Decimal("80")
        )

        stats = await ledger.get_wallet_stats(user.id)

        assert stats["balance"] == Decimal("50")
        assert stats["withdrawable_balance"] == Decimal("50")

    async def test_lifetime_credits_survive_withdrawal(
        self, ledger, session, make_user
    ):
        user = await make_user()
        user_id = user.id
        await ledger.adjust_balance(
            user_id, Decimal("30"), TransactionType.VIP_EARNINGS, "session"
        )
        await ledger.adjust_balance(
            user_id, Decimal("10"), TransactionType.REFERRAL_BONUS, "bonus"
        )
        await ledger.debit_withdrawal(user_id, Decimal("20"), "payout")
        await session.commit()

        stats = await ledger.get_wallet_stats(user_id)

        assert stats["total_earnings"] + stats["total_referral_bonus"] == (
            Decimal("20")
        )
        assert stats["lifetime_credits"] == {
            "VIP_EARNINGS": Decimal("30"),
            "REFERRAL_BONUS": Decimal("10"),
        }

    async def test_wallet_stats_unknown(self, ledger):
        with pytest.raises(NotFoundError):
            await ledger.get_wallet_stats(9999)

    async def test_history_pagination_and_filter(
        self, ledger, session, make_user, clock
    ):
        user = await make_user()
        user_id = user.id
        for i in range(5):
            clock.advance(minutes=1)
            await ledger.adjust_balance(
                user_id, Decimal(i + 1), TransactionType.DEPOSIT, f"d{i}"
            )
        clock.advance(minutes=1)
        await ledger.adjust_balance(
            user_id, Decimal("-1"), TransactionType.ADMIN_ADJUSTMENT, "fix"
        )
        await session.commit()

        page = await ledger.get_transaction_history(user_id, page=2, limit=2)
        deposits = await ledger.get_transaction_history(
            user_id, limit=10, type="DEPOSIT"
        )

        assert page["total"] == 6
        assert page["pages"] == 3
        assert [t.description for t in page["transactions"]] == ["d3", "d2"]
        assert deposits["total"] == 5

    async def test_history_rejects_unknown_type(self, ledger, make_user):
        user = await make_user()
        with pytest.raises(ValidationError):
            await ledger.get_transaction_history(user.id, type="BOGUS")
