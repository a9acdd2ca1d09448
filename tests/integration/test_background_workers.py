"""
Integration tests for background completion and notification delivery.
"""

import asyncio
from datetime import timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiogram.exceptions import TelegramAPIError
from loguru import logger

from app.services.earnings import EarningSessionService, SessionCompletionScheduler
from app.services.notification import (
    NotificationDispatcher,
    TelegramNotificationSender,
    create_notification_dispatcher,
)
from app.utils.exceptions import ExternalServiceError


pytestmark = pytest.mark.integration


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Poll a predicate until it holds or the timeout expires."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


class TestSessionCompletionScheduler:
    """Test SessionCompletionScheduler."""

    async def test_start_stop(self, session_maker):
        scheduler = SessionCompletionScheduler(
            session_maker, sweep_interval=0.01
        )

        await scheduler.start()
        assert scheduler.is_running
        await scheduler.stop()
        assert not scheduler.is_running

    async def test_timer_completes_session(
        self, session, session_maker, make_user, make_vip_level, grant_vip,
        get_wallet,
    ):
        level = await make_vip_level(daily_earning=Decimal("24"))
        user = await make_user()
        user_id = user.id
        await grant_vip(user, level)

        scheduler = SessionCompletionScheduler(session_maker)
        service = EarningSessionService(session, scheduler=scheduler)
        earnings_session = await service.start_session(
            user_id, timedelta(milliseconds=50)
        )
        assert scheduler.scheduled_sessions == [earnings_session.id]

        await wait_until(lambda: not scheduler.scheduled_sessions)
        await scheduler.stop()

        assert (await get_wallet(user_id)).balance == Decimal("24")

    async def test_sweep_completes_expired(
        self, session, session_maker, make_user, make_vip_level, grant_vip,
        clock,
    ):
        level = await make_vip_level()
        user = await make_user()
        await grant_vip(user, level)
        earnings_session = await EarningSessionService(
            session, clock=clock
        ).start_session(user.id)
        clock.advance(hours=24)

        scheduler = SessionCompletionScheduler(session_maker, clock=clock)
        sweep = await scheduler.run_sweep()

        assert sweep.completed == [earnings_session.id]


class TestTelegramNotificationSender:
    """Test Telegram delivery with a mocked bot."""

    @pytest.fixture
    def bot(self):
        bot = MagicMock()
        bot.send_message = AsyncMock()
        bot.session.close = AsyncMock()
        return bot

    async def test_sends_to_linked_chat(self, bot, session_maker, make_user):
        user = await make_user(telegram_id=555001)
        sender = TelegramNotificationSender(bot, session_maker)

        await sender.send(user.id, "session_completed", {"amount": "24.00"})

        bot.send_message.assert_awaited_once()
        kwargs = bot.send_message.await_args.kwargs
        assert kwargs["chat_id"] == 555001
        assert "24.00 USDT" in kwargs["text"]

    async def test_user_text_is_escaped(self, bot, session_maker, make_user):
        user = await make_user(telegram_id=555004)
        sender = TelegramNotificationSender(bot, session_maker)

        await sender.send(
            user.id,
            "referral_bonus",
            {
                "amount": "5.00",
                "level": 1,
                "source_name": "john_doe@x.com",
                "source_amount": "50.00",
            },
        )

        kwargs = bot.send_message.await_args.kwargs
        assert kwargs["parse_mode"] == "Markdown"
        assert "john\\_doe@x.com" in kwargs["text"]

    async def test_skips_user_without_chat(self, bot, session_maker, make_user):
        user = await make_user()
        sender = TelegramNotificationSender(bot, session_maker)

        await sender.send(user.id, "session_completed", {"amount": "1.00"})

        bot.send_message.assert_not_awaited()

    async def test_timeout_raises_external_error(
        self, bot, session_maker, make_user
    ):
        async def slow_send(**kwargs):
            await asyncio.sleep(1)

        bot.send_message = slow_send
        user = await make_user(telegram_id=555002)
        sender = TelegramNotificationSender(bot, session_maker, timeout=0.01)

        with pytest.raises(ExternalServiceError):
            await sender.send(user.id, "session_completed", {"amount": "1.00"})

    async def test_dispatcher_swallows_delivery_errors(
        self, bot, session_maker, make_user
    ):
        bot.send_message = AsyncMock(side_effect=RuntimeError("boom"))
        user = await make_user(telegram_id=555003)
        dispatcher = NotificationDispatcher(
            TelegramNotificationSender(bot, session_maker)
        )

        dispatcher.notify(user.id, "session_completed", {"amount": "1.00"})
        await dispatcher.close()

        assert dispatcher.pending == 0
        bot.session.close.assert_awaited_once()


class TestDispatcherFactory:
    """Test create_notification_dispatcher."""

    def test_disabled_without_token(self, session_maker, config):
        config.telegram_bot_token = None

        dispatcher = create_notification_dispatcher(session_maker, config)

        assert dispatcher.sender is None
        assert dispatcher.notify(1, "session_completed", {}) is None


class TestDispatcherSeverity:
    """Test how delivery failures are classified."""

    @pytest.mark.parametrize(
        "error,level",
        [
            (ExternalServiceError("Telegram send timed out"), "WARNING"),
            (ValueError("bad template data"), "ERROR"),
            (
                TelegramAPIError(
                    method=MagicMock(), message="Forbidden: bot was blocked"
                ),
                "DEBUG",
            ),
        ],
    )
    async def test_failure_log_level(self, error, level):
        records = []
        handler_id = logger.add(
            lambda message: records.append(message.record), level="DEBUG"
        )
        sender = MagicMock()
        sender.send = AsyncMock(side_effect=error)
        dispatcher = NotificationDispatcher(sender)

        try:
            dispatcher.notify(1, "session_completed", {"amount": "1.00"})
            await dispatcher.drain()
        finally:
            logger.remove(handler_id)

        assert [r["level"].name for r in records] == [level]
