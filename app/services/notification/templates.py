"""
Notification templates.

Named message templates rendered with str.format from the event data.
Templates are Telegram Markdown; values are escaped before substitution.
"""

from typing import Any

from app.utils.exceptions import ValidationError
from app.utils.formatters import escape_md


TEMPLATES: dict[str, str] = {
    "referral_bonus": (
        "💰 *Referral bonus!*\n\n"
        "You received *{amount} USDT*\n"
        "Level {level} bonus from {source_name}\n"
        "(payment: ${source_amount})\n\n"
        "Your balance has been credited automatically."
    ),
    "vip_purchased": (
        "🚲 *VIP {level_name} activated!*\n\n"
        "Paid: {amount} USDT\n"
        "Daily earning: {daily_earning} USDT"
    ),
    "session_completed": (
        "✅ *Earning session completed*\n\n"
        "Credited: *{amount} USDT*\n"
        "Next session available in 24 hours."
    ),
    "deposit_confirmed": (
        "✅ *Deposit confirmed*\n\n"
        "Amount: {amount} {currency}\n"
        "Your balance has been credited."
    ),
    "withdrawal_processed": (
        "✅ *Withdrawal processed*\n\n"
        "Amount: {amount} {currency}\n"
        "Status: {status}"
    ),
    "withdrawal_rejected": (
        "❌ *Withdrawal rejected*\n\n"
        "Amount: {amount} {currency}\n"
        "Reason: {reason}"
    ),
}


def render(template_name: str, data: dict[str, Any]) -> str:
    """
    Render a named template.

    Args:
        template_name: Key of TEMPLATES
        data: Values referenced by the template

    Returns:
        Rendered message text

    Raises:
        ValidationError: If the template is unknown or data is missing
    """
    template = TEMPLATES.get(template_name)
    if template is None:
        raise ValidationError(f"Unknown notification template: {template_name}")

    try:
        return template.format(
            **{key: escape_md(value) for key, value in data.items()}
        )
    except KeyError as e:
        raise ValidationError(
            f"Missing field {e} for notification template {template_name}"
        ) from e
