"""
Notification dispatcher.

Schedules sends as background asyncio tasks after the primary operation
has committed. Failures are logged and never reach the caller.
"""

import asyncio
from typing import Any

from loguru import logger

from app.services.notification.sender import NotificationSender
from app.utils.exceptions import (
    ExternalServiceError,
    is_safe_to_ignore,
    must_log,
)


class NotificationDispatcher:
    """Fire-and-forget front of a NotificationSender."""

    def __init__(self, sender: NotificationSender | None = None) -> None:
        """
        Initialize dispatcher.

        Args:
            sender: Delivery channel; None disables notifications
        """
        self.sender = sender
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of sends still in flight."""
        return len(self._tasks)

    def notify(
        self, user_id: int, template_name: str, data: dict[str, Any]
    ) -> asyncio.Task | None:
        """
        Schedule a notification without awaiting it.

        Args:
            user_id: Recipient
            template_name: Template key
            data: Template values

        Returns:
            The scheduled task, or None when notifications are disabled
        """
        if self.sender is None:
            return None

        task = asyncio.create_task(
            self._deliver(user_id, template_name, data)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _deliver(
        self, user_id: int, template_name: str, data: dict[str, Any]
    ) -> None:
        try:
            await self.sender.send(user_id, template_name, data)
        except Exception as e:
            if is_safe_to_ignore(e):
                logger.debug(
                    f"Notification skipped for user {user_id}: {e}"
                )
                return
            if not must_log(e):
                logger.error(
                    "Unexpected notification failure",
                    extra={"user_id": user_id, "template": template_name},
                    exc_info=True,
                )
                return
            error = e if isinstance(e, ExternalServiceError) else (
                ExternalServiceError(str(e))
            )
            logger.warning(
                "Notification delivery failed",
                extra={
                    "user_id": user_id,
                    "template": template_name,
                    "error_code": error.code,
                    "error": error.message,
                },
            )

    async def drain(self) -> None:
        """Wait for all in-flight sends to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Drain in-flight sends and release the sender's resources."""
        await self.drain()
        close = getattr(self.sender, "close", None)
        if close is not None:
            await close()
