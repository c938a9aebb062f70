"""
Cache Backend Protocol

This module defines the protocol the caching engine expects from its cache
backend. RedisClient is the production implementation; tests run it against
fakeredis.
"""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CommandQueue(Protocol):
    """
    A batch of cache commands sent in one round trip.

    Commands are queued synchronously and executed in order by execute().
    Execution is pipelined, not transactional.
    """

    def mget(self, keys: list[str]) -> "CommandQueue": ...

    def mset(self, mapping: Mapping[str, bytes | str]) -> "CommandQueue": ...

    def expire(self, key: str, seconds: int) -> "CommandQueue": ...

    def delete(self, *keys: str) -> "CommandQueue": ...

    def exists(self, key: str) -> "CommandQueue": ...

    def smembers(self, key: str) -> "CommandQueue": ...

    def sadd(self, key: str, *members: str) -> "CommandQueue": ...

    def zadd(self, key: str, mapping: Mapping[str, float]) -> "CommandQueue": ...

    async def execute(self) -> list[Any]: ...


@runtime_checkable
class CacheBackend(Protocol):
    """
    Protocol defining the cache backend used by the engine.

    Usage:
        async def warm(cache: CacheBackend, keys: list[str]) -> list[bytes | None]:
            return await cache.get_many(keys)
    """

    async def connect(self) -> None:
        """
        Establish connection to the cache backend.

        Raises:
            CacheConnectionError: If connection fails
        """
        ...

    async def disconnect(self) -> None:
        """Close connection to the cache backend."""
        ...

    async def ping(self) -> bool:
        """Return True if the backend answers."""
        ...

    def batch(self) -> CommandQueue:
        """Start a pipelined batch of commands."""
        ...

    async def get_many(self, keys: list[str]) -> list[bytes | None]: ...

    async def delete(self, *keys: str) -> int: ...

    async def exists(self, *keys: str) -> int: ...

    async def smembers(self, key: str) -> set[str]: ...

    async def sadd(self, key: str, *members: str) -> int: ...

    async def zadd(self, key: str, mapping: Mapping[str, float]) -> int: ...

    async def zrangebyscore(self, key: str, min_score: Any, max_score: Any) -> list[str]: ...

    async def zremrangebyscore(self, key: str, min_score: Any, max_score: Any) -> int: ...

    async def ttl(self, key: str) -> int: ...

    async def health_check(self) -> dict[str, Any]: ...


__all__ = ["CacheBackend", "CommandQueue"]
