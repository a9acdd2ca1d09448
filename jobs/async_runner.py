"""
Async bridge for dramatiq actors.

Dramatiq runs actors in plain worker threads. Each thread keeps one event
loop for its lifetime, and every task opens its own NullPool engine so no
connection is ever shared between loops.
"""

import asyncio
import threading
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from app.config.settings import settings

T = TypeVar("T")

_thread_local = threading.local()


def _thread_loop() -> asyncio.AbstractEventLoop:
    loop = getattr(_thread_local, "loop", None)
    if loop is None or loop.is_closed():
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        _thread_local.loop = loop
        logger.debug(
            f"Created event loop for worker thread "
            f"{threading.current_thread().name}"
        )
    return loop


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run a coroutine to completion on the worker thread's loop.

    Args:
        coro: Coroutine to run

    Returns:
        Its result (exceptions are logged and re-raised for dramatiq retries)
    """
    try:
        return _thread_loop().run_until_complete(coro)
    except Exception as e:
        logger.exception(f"Background task failed: {e}")
        raise


@asynccontextmanager
async def local_session_maker() -> AsyncIterator[
    async_sessionmaker[AsyncSession]
]:
    """
    Session factory bound to a task-local engine.

    Usage:
        async with local_session_maker() as session_maker:
            async with session_maker() as session:
                ...

    Yields:
        async_sessionmaker whose engine is disposed when the block exits
    """
    engine = create_async_engine(
        settings.async_database_url,
        echo=False,
        poolclass=NullPool,
    )

    try:
        yield async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    finally:
        await engine.dispose()
