"""
Cache Infrastructure

Redis adapter used as the engine's cache backend.
"""

from .redis_client import CommandBatch, RedisClient

__all__ = ["CommandBatch", "RedisClient"]
