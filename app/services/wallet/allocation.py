"""
Withdrawal pool allocation.

Splits a processed withdrawal between the earnings pool and the referral
bonus pool proportionally to their current sizes.
"""

from dataclasses import dataclass
from decimal import Decimal

from app.config.business_constants import quantize_money


@dataclass(frozen=True)
class WithdrawalAllocation:
    """Result of splitting a withdrawal across the two pools."""

    earnings_deduction: Decimal
    bonus_deduction: Decimal
    earnings_remaining: Decimal
    bonus_remaining: Decimal

    @property
    def total(self) -> Decimal:
        return self.earnings_deduction + self.bonus_deduction


def allocate_withdrawal(
    amount: Decimal,
    earnings_pool: Decimal,
    bonus_pool: Decimal,
) -> WithdrawalAllocation:
    """
    Split a withdrawal amount between the earnings and bonus pools.

    Each pool is reduced by its share of the combined pool. The two
    deductions always add up to the amount (the bonus share takes the
    rounding remainder). Pools never go below zero; if both pools are
    empty nothing is deducted from them.

    Args:
        amount: Withdrawal amount
        earnings_pool: Current wallet total_earnings
        bonus_pool: Current wallet total_referral_bonus

    Returns:
        WithdrawalAllocation with deductions and remaining pools
    """
    earnings_pool = max(Decimal("0"), Decimal(earnings_pool))
    bonus_pool = max(Decimal("0"), Decimal(bonus_pool))
    combined = earnings_pool + bonus_pool

    if combined <= 0 or amount <= 0:
        return WithdrawalAllocation(
            earnings_deduction=Decimal("0"),
            bonus_deduction=Decimal("0"),
            earnings_remaining=earnings_pool,
            bonus_remaining=bonus_pool,
        )

    earnings_deduction = quantize_money(amount * earnings_pool / combined)
    bonus_deduction = quantize_money(amount) - earnings_deduction

    return WithdrawalAllocation(
        earnings_deduction=earnings_deduction,
        bonus_deduction=bonus_deduction,
        earnings_remaining=max(Decimal("0"), earnings_pool - earnings_deduction),
        bonus_remaining=max(Decimal("0"), bonus_pool - bonus_deduction),
    )
