"""
Redis client factory for the change feed.

The client is owned by whoever builds it (the application container) and
closed on shutdown; there is no module-level singleton.
"""

from __future__ import annotations

import redis.asyncio as redis

from shared.config.settings import Settings
from shared.config.logging import get_logger

logger = get_logger(__name__)


def create_redis_client(settings: Settings) -> redis.Redis:
    """Build an async Redis client from settings (connections are lazy)."""
    client = redis.from_url(
        settings.redis_url,
        decode_responses=True,
        socket_connect_timeout=settings.redis_socket_timeout,
        socket_timeout=None,  # pub/sub reads block until a message arrives
        health_check_interval=30,
    )
    logger.info("Redis client created", url=_redact(settings.redis_url))
    return client


async def close_redis_client(client: redis.Redis | None) -> None:
    if client is None:
        return
    try:
        await client.aclose()
        logger.info("Redis client closed")
    except (redis.RedisError, OSError) as e:
        logger.warning("Error closing Redis client", error=str(e))


def _redact(url: str) -> str:
    """Hide credentials in a redis:// URL."""
    if "@" not in url:
        return url
    scheme, _, rest = url.partition("://")
    return f"{scheme}://***@{rest.split('@', 1)[1]}"
