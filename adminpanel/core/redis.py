"""Redis client for the session store."""

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from adminpanel.core.config import settings
from adminpanel.core.logging import get_logger

logger = get_logger("redis")

# decode_responses: every value the session store writes is text
redis_client: aioredis.Redis = aioredis.from_url(
    settings.redis_url,
    decode_responses=True,
    socket_timeout=settings.redis_socket_timeout,
    socket_connect_timeout=settings.redis_socket_timeout,
)


def get_redis() -> aioredis.Redis:
    """Dependency to get the shared Redis client."""
    return redis_client


async def check_redis_connection() -> bool:
    """Check if Redis answers PING."""
    try:
        return bool(await redis_client.ping())
    except (RedisError, OSError) as e:
        logger.debug(f"Redis connection check failed: {e}")
        return False
