"""
Notification wiring.

Builds the dispatcher used by background jobs and application startup.
"""

from aiogram import Bot
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config.settings import Settings, settings as default_settings
from app.services.notification.dispatcher import NotificationDispatcher
from app.services.notification.sender import TelegramNotificationSender


def create_notification_dispatcher(
    session_maker: async_sessionmaker[AsyncSession],
    config: Settings | None = None,
) -> NotificationDispatcher:
    """
    Create a dispatcher delivering through Telegram.

    Notifications are disabled when no bot token is configured.

    Args:
        session_maker: Session factory used to resolve telegram ids
        config: Settings (defaults to the global instance)

    Returns:
        NotificationDispatcher; call close() when done
    """
    config = config or default_settings
    if not config.telegram_bot_token:
        logger.debug("Telegram bot token not set, notifications disabled")
        return NotificationDispatcher()

    bot = Bot(token=config.telegram_bot_token)
    return NotificationDispatcher(
        TelegramNotificationSender(bot, session_maker)
    )
