"""
Referral system configuration.

Contains constants and the per-level bonus calculation.
"""

from decimal import Decimal

from app.config.business_constants import (
    REFERRAL_DEPTH,
    REFERRAL_RATES,
    quantize_money,
)


def calculate_level_bonus(amount: Decimal, level: int) -> Decimal:
    """
    Calculate bonus for a referral level.

    Args:
        amount: Qualifying amount
        level: Referral level (1-3)

    Returns:
        Bonus rounded to 8 decimal places (0 if level not configured)
    """
    rate = REFERRAL_RATES.get(level, Decimal("0"))

    if rate == Decimal("0"):
        return Decimal("0")

    return quantize_money(Decimal(amount) * rate)


__all__ = ["REFERRAL_DEPTH", "REFERRAL_RATES", "calculate_level_bonus"]
