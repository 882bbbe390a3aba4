"""Redis async client for the shared matrix cache generation counter."""

from typing import Optional

import redis.asyncio as redis

from printshop.config import settings

_redis_client: Optional[redis.Redis] = None


def get_redis_client() -> Optional[redis.Redis]:
    """Get or create Redis client (lazy init). None when Redis is not configured."""
    global _redis_client
    if not settings.redis_url:
        return None
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            decode_responses=True,
        )
    return _redis_client


async def get_redis() -> Optional[redis.Redis]:
    """FastAPI dependency for Redis client."""
    return get_redis_client()
