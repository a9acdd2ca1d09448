"""
Notification service module.

Structure:
- templates.py: Named message templates
- sender.py: NotificationSender protocol and Telegram delivery
- dispatcher.py: Fire-and-forget scheduling after commit
- factory.py: Dispatcher wiring from settings

Usage:
    from app.services.notification import create_notification_dispatcher

    dispatcher = create_notification_dispatcher(async_session_maker)
    dispatcher.notify(user_id, "deposit_confirmed", {"amount": "10", ...})
    await dispatcher.close()
"""

from app.services.notification.dispatcher import NotificationDispatcher
from app.services.notification.factory import create_notification_dispatcher
from app.services.notification.sender import (
    NotificationSender,
    TelegramNotificationSender,
)
from app.services.notification.templates import TEMPLATES, render

__all__ = [
    "NotificationDispatcher",
    "NotificationSender",
    "TelegramNotificationSender",
    "TEMPLATES",
    "create_notification_dispatcher",
    "render",
]
