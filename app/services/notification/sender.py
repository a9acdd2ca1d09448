"""
Notification senders.

NotificationSender is the capability the engines notify through;
TelegramNotificationSender delivers rendered templates with an aiogram Bot.
"""

import asyncio
from typing import Any, Protocol

from aiogram import Bot
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.config.operational_constants import NOTIFICATION_SEND_TIMEOUT_SECONDS
from app.repositories.user_repository import UserRepository
from app.services.notification.templates import render
from app.utils.exceptions import ExternalServiceError


class NotificationSender(Protocol):
    """Best-effort delivery of a templated message to a user."""

    async def send(
        self, user_id: int, template_name: str, data: dict[str, Any]
    ) -> None:
        ...


class TelegramNotificationSender:
    """
    Telegram delivery through aiogram.

    Uses its own database session to resolve the user's telegram_id, so a
    send never touches the session of the operation that triggered it.
    """

    def __init__(
        self,
        bot: Bot,
        session_maker: async_sessionmaker[AsyncSession],
        timeout: float = NOTIFICATION_SEND_TIMEOUT_SECONDS,
    ) -> None:
        self.bot = bot
        self.session_maker = session_maker
        self.timeout = timeout

    async def send(
        self, user_id: int, template_name: str, data: dict[str, Any]
    ) -> None:
        """
        Render and send a template to the user's Telegram chat.

        Users without a linked telegram_id are skipped silently.

        Raises:
            ExternalServiceError: If the send times out
            TelegramAPIError: If Telegram rejects the message (blocked bot,
                deleted chat)
        """
        async with self.session_maker() as session:
            user = await UserRepository(session).get_by_id(user_id)
            telegram_id = user.telegram_id if user else None

        if not telegram_id:
            logger.debug(
                "User has no Telegram chat, notification skipped",
                extra={"user_id": user_id, "template": template_name},
            )
            return

        text = render(template_name, data)

        try:
            await asyncio.wait_for(
                self.bot.send_message(
                    chat_id=telegram_id,
                    text=text,
                    parse_mode="Markdown",
                ),
                timeout=self.timeout,
            )
        except TimeoutError as e:
            raise ExternalServiceError(
                f"Telegram send timed out after {self.timeout}s"
            ) from e

        logger.debug(
            "Notification sent",
            extra={"user_id": user_id, "template": template_name},
        )

    async def close(self) -> None:
        """Close the bot's HTTP session."""
        await self.bot.session.close()
