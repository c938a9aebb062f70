"""
Cache-Related Exceptions

All exceptions raised by the Redis cache backend adapter.
"""

from pantry.core.exceptions.base import PantryError


class CacheError(PantryError):
    """Base exception for cache-related errors."""
    pass


class CacheConnectionError(CacheError):
    """
    Raised when unable to connect to the cache (Redis).

    Common causes:
    - Redis server is down
    - Network connectivity issues
    - Incorrect REDIS_URL
    - Authentication failure
    """
    pass


class CacheKeyError(CacheError):
    """
    Raised when a cache command or pipelined batch fails.

    Common causes:
    - Wrong value type stored under a key (WRONGTYPE)
    - Operation timeout
    - Memory limit exceeded
    """
    pass
