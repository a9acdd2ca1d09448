"""
Tests for withdrawal pool allocation.

The processed amount is split between the earnings pool and the referral
bonus pool proportionally to their sizes.
"""

from decimal import Decimal

from app.services.wallet import allocate_withdrawal


class TestAllocateWithdrawal:
    """Test allocate_withdrawal."""

    def test_proportional_split(self):
        """75/25 pools split a withdrawal 75/25."""
        allocation = allocate_withdrawal(
            Decimal("40"), Decimal("75"), Decimal("25")
        )
        assert allocation.earnings_deduction == Decimal("30")
        assert allocation.bonus_deduction == Decimal("10")
        assert allocation.earnings_remaining == Decimal("45")
        assert allocation.bonus_remaining == Decimal("15")

    def test_deductions_sum_to_amount(self):
        """Rounding remainder lands on the bonus pool."""
        allocation = allocate_withdrawal(
            Decimal("10"), Decimal("1"), Decimal("2")
        )
        assert allocation.total == Decimal("10")
        assert allocation.earnings_deduction == Decimal("3.33333333")
        assert allocation.bonus_deduction == Decimal("6.66666667")

    def test_only_earnings_pool(self):
        allocation = allocate_withdrawal(
            Decimal("5"), Decimal("20"), Decimal("0")
        )
        assert allocation.earnings_deduction == Decimal("5")
        assert allocation.bonus_deduction == Decimal("0")

    def test_only_bonus_pool(self):
        allocation = allocate_withdrawal(
            Decimal("5"), Decimal("0"), Decimal("20")
        )
        assert allocation.earnings_deduction == Decimal("0")
        assert allocation.bonus_remaining == Decimal("15")

    def test_empty_pools_deduct_nothing(self):
        """Nothing to reduce when both pools are empty."""
        allocation = allocate_withdrawal(
            Decimal("5"), Decimal("0"), Decimal("0")
        )
        assert allocation.total == Decimal("0")
        assert allocation.earnings_remaining == Decimal("0")
        assert allocation.bonus_remaining == Decimal("0")

    def test_pools_never_negative(self):
        """Withdrawing more than the pools hold clamps them at zero."""
        allocation = allocate_withdrawal(
            Decimal("200"), Decimal("50"), Decimal("50")
        )
        assert allocation.earnings_remaining == Decimal("0")
        assert allocation.bonus_remaining == Decimal("0")

    def test_negative_pool_treated_as_empty(self):
        allocation = allocate_withdrawal(
            Decimal("10"), Decimal("-5"), Decimal("20")
        )
        assert allocation.earnings_deduction == Decimal("0")
        assert allocation.bonus_deduction == Decimal("10")
