"""
Redis utility module for centralized Redis configuration and connection logic.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ctfbot.config import Config

logger = logging.getLogger(__name__)


class RedisUtils:
    """Centralized Redis configuration and connection utilities."""

    @staticmethod
    def get_redis_url() -> Optional[str]:
        """Get the configured Redis URL, None when the stats engine is disabled."""
        if not Config.USE_REDIS:
            logger.info("USE_REDIS is set, stats engine disabled")
            return None

        redis_url = Config.REDIS_URL
        if not RedisUtils._validate_redis_url(redis_url):
            return None
        return redis_url

    @staticmethod
    def _validate_redis_url(redis_url: str) -> bool:
        """Validate the Redis URL scheme and warn about unencrypted remote connections."""
        if not redis_url:
            return False

        if not redis_url.startswith(('redis://', 'rediss://', 'unix://')):
            logger.error(f"Unsupported Redis URL scheme: {redis_url.split(':', 1)[0]}")
            return False

        local_prefixes = ('redis://localhost', 'redis://127.0.0.1', 'unix://')
        if not redis_url.startswith(local_prefixes) and not redis_url.startswith('rediss://'):
            # Score store is read only, but credentials would still travel in clear text
            logger.warning("Connecting to a remote Redis without TLS")

        return True

    @staticmethod
    async def create_redis_client() -> Optional['redis.Redis']:
        """Create a Redis client and check the connection."""
        redis_url = RedisUtils.get_redis_url()
        if not redis_url:
            return None

        try:
            client = redis.from_url(redis_url, decode_responses=True)
            await client.ping()
            logger.info("Successfully connected to Redis")
            return client
        except RedisError as e:
            logger.error(f"Failed to connect to Redis: {e}")
            return None
