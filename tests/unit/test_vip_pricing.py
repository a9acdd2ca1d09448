"""Tests for VIP upgrade pricing."""

from decimal import Decimal

import pytest

from app.services.vip import calculate_upgrade_payment
from app.utils.exceptions import DowngradeNotAllowed


class TestCalculateUpgradePayment:
    """Test calculate_upgrade_payment."""

    def test_first_purchase_pays_full_price(self):
        """New members pay the tier price."""
        assert calculate_upgrade_payment(
            Decimal("0"), Decimal("30")
        ) == Decimal("30")

    def test_upgrade_pays_difference(self):
        """Upgrades pay the difference to what was already paid."""
        assert calculate_upgrade_payment(
            Decimal("30"), Decimal("180")
        ) == Decimal("150")

    def test_same_tier_is_rejected(self):
        """Buying the tier already paid for is not an upgrade."""
        with pytest.raises(DowngradeNotAllowed):
            calculate_upgrade_payment(Decimal("180"), Decimal("180"))

    def test_cheaper_tier_is_rejected(self):
        """Downgrades are not allowed."""
        with pytest.raises(DowngradeNotAllowed) as exc_info:
            calculate_upgrade_payment(Decimal("400"), Decimal("180"))
        assert exc_info.value.code == "downgrade_not_allowed"

    def test_cumulative_payments_count(self):
        """Total paid across several upgrades is what gets subtracted."""
        # 30 (Starter) + 150 (Bronze) + 220 (Silver) = 400 paid so far
        assert calculate_upgrade_payment(
            Decimal("400"), Decimal("1000")
        ) == Decimal("600")
