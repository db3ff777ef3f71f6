"""Redis implementation of the CacheBackend port (redis-py asyncio client).

``rediss://`` URLs enable TLS, as required by hosted Redis providers.
"""

import functools
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import redis.asyncio as redis
from redis.exceptions import RedisError

from onboard.application.interfaces.cache_backend import CacheBackend
from onboard.domain.exceptions import CacheBackendError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SCAN_BATCH = 500


def _translate_errors(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Re-raise client and socket failures as CacheBackendError."""

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await func(*args, **kwargs)
        except (RedisError, OSError) as e:
            raise CacheBackendError(f"Redis {func.__name__} failed: {e}") from e

    return wrapper


class RedisCacheBackend(CacheBackend):
    """Cache backend on a shared ``redis.asyncio.Redis`` connection pool."""

    def __init__(self, client: redis.Redis):
        self._client = client

    @classmethod
    def from_url(cls, url: str, *, socket_timeout: float = 5.0) -> "RedisCacheBackend":
        client = redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            health_check_interval=30,
        )
        return cls(client)

    @_translate_errors
    async def get(self, key: str) -> str | None:
        return await self._client.get(key)

    @_translate_errors
    async def set(self, key: str, value: str, *, ttl_seconds: int) -> None:
        await self._client.set(key, value, ex=ttl_seconds)

    @_translate_errors
    async def incr(self, key: str) -> int:
        return int(await self._client.incr(key))

    @_translate_errors
    async def expire(self, key: str, ttl_seconds: int) -> None:
        await self._client.expire(key, ttl_seconds)

    @_translate_errors
    async def zadd(self, key: str, member: str, score: float) -> None:
        await self._client.zadd(key, {member: score})

    @_translate_errors
    async def zrevrange_with_scores(self, key: str, start: int, stop: int) -> list[tuple[str, float]]:
        entries = await self._client.zrevrange(key, start, stop, withscores=True)
        return [(member, float(score)) for member, score in entries]

    @_translate_errors
    async def zcard(self, key: str) -> int:
        return int(await self._client.zcard(key))

    @_translate_errors
    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(await self._client.delete(*keys))

    @_translate_errors
    async def scan_keys(self, pattern: str) -> list[str]:
        # SCAN instead of KEYS so large keyspaces never block the server
        return [key async for key in self._client.scan_iter(match=pattern, count=_SCAN_BATCH)]

    @_translate_errors
    async def ping(self) -> bool:
        return bool(await self._client.ping())

    async def close(self) -> None:
        try:
            await self._client.aclose()
        except (RedisError, OSError) as e:
            logger.warning("Error closing Redis connection: %s", e)
        else:
            logger.info("Redis connection closed")
