"""
Dramatiq broker configuration.

Redis broker shared by the scheduler (producer) and the workers.
"""

import dramatiq
from dramatiq.brokers.redis import RedisBroker
from dramatiq.middleware import CurrentMessage, Retries, ShutdownNotifications
from loguru import logger

from app.config.operational_constants import DEFAULT_MAX_RETRIES
from app.config.settings import settings
from app.utils.exceptions import PlatformError
from app.utils.redis_utils import get_redis_url_masked


def _should_retry(retries_so_far: int, exception: Exception) -> bool:
    """Retry infrastructure failures; platform errors are permanent."""
    if isinstance(exception, PlatformError):
        return False
    return retries_so_far < DEFAULT_MAX_RETRIES


redis_broker = RedisBroker(
    host=settings.redis_host,
    port=settings.redis_port,
    password=settings.redis_password or None,
    db=settings.redis_db,
)

redis_broker.add_middleware(ShutdownNotifications())
redis_broker.add_middleware(CurrentMessage())
redis_broker.add_middleware(
    Retries(
        max_retries=DEFAULT_MAX_RETRIES,
        min_backoff=1000,  # 1 second
        max_backoff=60000,  # 1 minute
        retry_when=_should_retry,
    )
)

dramatiq.set_broker(redis_broker)

broker = redis_broker

logger.info(f"Dramatiq broker initialized: {get_redis_url_masked()}")
