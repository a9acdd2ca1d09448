"""
Tests for referral bonus calculation.

Covers:
- Per-level rates (10% / 5% / 2%)
- Levels outside the configured depth
- Precision of the quantized bonus
"""

from decimal import Decimal

import pytest

from app.services.referral import (
    REFERRAL_DEPTH,
    REFERRAL_RATES,
    calculate_level_bonus,
)


class TestReferralRates:
    """Test the configured referral program."""

    def test_depth_is_three_levels(self):
        """Bonuses are paid to three ancestors at most."""
        assert REFERRAL_DEPTH == 3
        assert sorted(REFERRAL_RATES) == [1, 2, 3]

    def test_rates_decrease_with_level(self):
        """Closer referrers earn more."""
        assert REFERRAL_RATES[1] > REFERRAL_RATES[2] > REFERRAL_RATES[3]


class TestCalculateLevelBonus:
    """Test calculate_level_bonus."""

    @pytest.mark.parametrize(
        "level,expected",
        [(1, Decimal("10")), (2, Decimal("5")), (3, Decimal("2"))],
    )
    def test_bonus_per_level(self, level, expected):
        """A $100 payment yields 10 / 5 / 2."""
        assert calculate_level_bonus(Decimal("100"), level) == expected

    def test_level_outside_depth_pays_nothing(self):
        """Level 4 and beyond are not configured."""
        assert calculate_level_bonus(Decimal("100"), 4) == Decimal("0")

    def test_level_zero_pays_nothing(self):
        """The paying user is not their own referrer."""
        assert calculate_level_bonus(Decimal("100"), 0) == Decimal("0")

    def test_bonus_rounded_to_eight_places(self):
        """Bonus is quantized to ledger precision."""
        bonus = calculate_level_bonus(Decimal("33.333333333"), 1)
        assert bonus == Decimal("3.33333333")
        assert bonus.as_tuple().exponent == -8

    def test_upgrade_difference_is_qualifying_amount(self):
        """Upgrading from $30 to $180 pays bonuses on the $150 difference."""
        assert calculate_level_bonus(Decimal("150"), 1) == Decimal("15")
        assert calculate_level_bonus(Decimal("150"), 2) == Decimal("7.5")
        assert calculate_level_bonus(Decimal("150"), 3) == Decimal("3")
