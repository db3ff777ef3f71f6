"""Abstract interface (port) for the key-value cache backend."""

from abc import ABC, abstractmethod


class CacheBackend(ABC):
    """Port for a Redis-like key-value store.

    Implementations raise ``CacheBackendError`` for any backend failure so
    callers can degrade without knowing the client library.
    """

    @abstractmethod
    async def get(self, key: str) -> str | None:
        ...

    @abstractmethod
    async def set(self, key: str, value: str, *, ttl_seconds: int) -> None:
        """Store a string value that expires ``ttl_seconds`` after the write."""
        ...

    @abstractmethod
    async def incr(self, key: str) -> int:
        """Atomically increment an integer counter and return the new value."""
        ...

    @abstractmethod
    async def expire(self, key: str, ttl_seconds: int) -> None:
        ...

    @abstractmethod
    async def zadd(self, key: str, member: str, score: float) -> None:
        """Add or update a sorted-set member's score."""
        ...

    @abstractmethod
    async def zrevrange_with_scores(self, key: str, start: int, stop: int) -> list[tuple[str, float]]:
        """Return members with scores ordered by score descending (inclusive bounds)."""
        ...

    @abstractmethod
    async def zcard(self, key: str) -> int:
        ...

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        """Delete keys; returns how many existed."""
        ...

    @abstractmethod
    async def scan_keys(self, pattern: str) -> list[str]:
        """Return all keys matching a glob-style pattern."""
        ...

    @abstractmethod
    async def ping(self) -> bool:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...
