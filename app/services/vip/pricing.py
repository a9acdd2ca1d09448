"""
VIP pricing rules.
"""

from decimal import Decimal

from app.config.business_constants import quantize_money
from app.utils.exceptions import DowngradeNotAllowed


def calculate_upgrade_payment(
    total_paid: Decimal, target_amount: Decimal
) -> Decimal:
    """
    Amount charged to move to a tier.

    The user pays the difference between the target price and what was
    already paid across earlier purchases (full price on a first purchase).

    Args:
        total_paid: Cumulative amount already paid (0 for new members)
        target_amount: Price of the target tier

    Returns:
        Payment amount

    Raises:
        DowngradeNotAllowed: If the target price is not above total_paid
    """
    total_paid = Decimal(total_paid)
    target_amount = Decimal(target_amount)

    if target_amount <= total_paid:
        raise DowngradeNotAllowed(
            f"Cannot move to a tier priced {target_amount}: "
            f"already paid {total_paid}"
        )

    return quantize_money(target_amount - total_paid)
