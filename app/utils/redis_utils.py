"""
Redis helpers for the background workers.

Client construction from settings and the lock that keeps two sweep or
detection passes from running at once.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as redis
from loguru import logger
from redis.exceptions import LockError, RedisError

from app.config.settings import settings


async def get_redis_client() -> redis.Redis:
    """Client for the configured Redis database (string responses)."""
    return redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.redis_password,
        db=settings.redis_db,
        decode_responses=True,
    )


def get_redis_url_masked() -> str:
    """Redis URL for log lines, password replaced with asterisks."""
    auth = ":****@" if settings.redis_password else ""
    location = f"{settings.redis_host}:{settings.redis_port}"
    return f"redis://{auth}{location}/{settings.redis_db}"


@asynccontextmanager
async def task_lock(name: str, timeout: int) -> AsyncIterator[bool]:
    """
    Non-blocking Redis lock around a background pass.

    Yields True when the lock is held (or Redis is unreachable, in which case
    the pass runs unlocked), False when another worker holds it.

    Args:
        name: Lock key
        timeout: Lock expiry in seconds

    Usage:
        async with task_lock("lock:session_sweep", 60) as acquired:
            if acquired:
                ...
    """
    client = await get_redis_client()
    lock = client.lock(name, timeout=timeout, blocking=False)
    acquired = False
    try:
        try:
            acquired = await lock.acquire()
        except RedisError as e:
            logger.warning(
                f"Redis unavailable, running {name} without lock: {e}"
            )
            yield True
            return

        yield acquired
    finally:
        if acquired:
            try:
                await lock.release()
            except LockError:
                logger.warning(f"Lock {name} expired before release")
        await client.aclose()
