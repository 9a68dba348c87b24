"""Redis client used by the rate limiter.

Learn: The client is opened in the app lifespan. If Redis is down at
startup the app still runs; get_redis() raises and the rate-limit
middleware lets requests through unmetered.
"""

from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from inkwell.config import settings

# Set by init_redis() during startup, cleared by close_redis().
_client: Optional[aioredis.Redis] = None


async def init_redis(url: Optional[str] = None) -> aioredis.Redis:
    """Connect and ping; raises if Redis is unreachable."""
    global _client
    client = aioredis.from_url(
        url or settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    await client.ping()
    _client = client
    return client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


def get_redis() -> aioredis.Redis:
    """The connected client, or RuntimeError when Redis was never reached."""
    if _client is None:
        raise RuntimeError("Redis is not connected")
    return _client


async def ping_redis() -> bool:
    """True when Redis is connected and answering."""
    try:
        return bool(await get_redis().ping())
    except (RuntimeError, RedisError):
        return False
