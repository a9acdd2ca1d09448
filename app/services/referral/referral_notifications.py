"""
Referral notifications.

Handles notifications for referral events.
"""

from decimal import Decimal
from typing import TYPE_CHECKING

from app.services.notification.dispatcher import NotificationDispatcher

if TYPE_CHECKING:
    from app.services.referral.referral_reward_processor import BonusResult


def notify_referral_bonus(
    dispatcher: NotificationDispatcher,
    bonus: "BonusResult",
    source_name: str,
    source_amount: Decimal,
) -> None:
    """
    Schedule the "referral bonus received" message for a referrer.

    Args:
        dispatcher: Notification dispatcher
        bonus: Credited level
        source_name: Display name of the paying user
        source_amount: Qualifying amount of the payment
    """
    dispatcher.notify(
        bonus.referrer_id,
        "referral_bonus",
        {
            "amount": f"{bonus.amount:.2f}",
            "level": bonus.level,
            "source_name": source_name,
            "source_amount": f"{source_amount:.2f}",
        },
    )
