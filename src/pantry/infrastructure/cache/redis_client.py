"""
Redis Client with Connection Pooling

Architecture:
    RedisClient (Public API)
        ├── ConnectionManager (Connection lifecycle)
        ├── OperationExecutor (Command execution with error handling)
        ├── CommandBatch (Explicit per-operation pipelines)
        └── HealthMonitor (Health checks and pool metrics)

Every multi-key engine operation builds one CommandBatch and sends it with a
single round trip. Pipelines are non-transactional: commands run in order but
other clients may interleave.
"""

import time
from collections.abc import Mapping
from typing import Any

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import ConnectionError, RedisError, TimeoutError

from pantry.core.config.constants import Stage
from pantry.core.config.settings import PantrySettings
from pantry.core.exceptions import CacheConnectionError, CacheKeyError
from pantry.core.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# LAYER 1: CONNECTION MANAGEMENT
# =============================================================================


class ConnectionManager:
    """
    Manages Redis connection lifecycle and pooling.

    An injected client (e.g. fakeredis in tests) is used as-is and never
    gets its pool replaced.
    """

    def __init__(self, settings: PantrySettings, client: redis.Redis | None = None):
        self._settings = settings
        self._pool: ConnectionPool | None = None
        self._client: redis.Redis | None = client
        self._owns_client = client is None
        self._is_connected = False

    async def connect(self) -> redis.Redis:
        """
        Establish connection to Redis and verify it with PING.

        Returns:
            redis.Redis: Connected Redis client

        Raises:
            CacheConnectionError: If connection fails
        """
        if self._is_connected and self._client:
            return self._client

        try:
            if self._owns_client:
                self._pool = ConnectionPool.from_url(
                    self._settings.REDIS_URL,
                    max_connections=self._settings.REDIS_MAX_CONNECTIONS,
                    socket_connect_timeout=self._settings.REDIS_SOCKET_CONNECT_TIMEOUT,
                    socket_timeout=self._settings.REDIS_SOCKET_TIMEOUT,
                    retry_on_timeout=True,
                    health_check_interval=self._settings.REDIS_HEALTH_CHECK_INTERVAL,
                    decode_responses=True,
                )
                self._client = redis.Redis(connection_pool=self._pool)

            await self._client.ping()
            self._is_connected = True

            logger.info(
                "Redis connected successfully",
                stage=f"{Stage.REDIS.value}.CONNECT",
                url=self._settings.REDIS_URL if self._owns_client else "<injected>",
                max_connections=self._settings.REDIS_MAX_CONNECTIONS,
            )
            return self._client

        except (ConnectionError, TimeoutError) as e:
            logger.error(
                "Failed to connect to Redis",
                stage=f"{Stage.REDIS.value}.CONNECT",
                error=str(e),
            )
            raise CacheConnectionError.from_exception(
                e,
                message=f"Failed to connect to Redis: {e}",
                url=self._settings.REDIS_URL,
            ) from e

    async def disconnect(self) -> None:
        """Close the client and, when owned, its pool."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

        if self._pool:
            await self._pool.disconnect()
            self._pool = None

        self._is_connected = False
        logger.info("Redis disconnected", stage=f"{Stage.REDIS.value}.DISCONNECT")

    async def ping(self) -> bool:
        try:
            if self._client and self._is_connected:
                return bool(await self._client.ping())
        except (ConnectionError, TimeoutError):
            return False
        return False

    def get_client(self) -> redis.Redis | None:
        return self._client

    def get_pool(self) -> ConnectionPool | None:
        return self._pool

    def is_connected(self) -> bool:
        return self._is_connected


# =============================================================================
# LAYER 2: OPERATION EXECUTOR
# =============================================================================


class OperationExecutor:
    """
    Executes single Redis commands with consistent error handling.

    Error Handling Strategy:
    - Catch RedisError
    - Log error with stage and key
    - Raise CacheKeyError with details, chained to the original
    """

    def __init__(self, redis_client: redis.Redis):
        self._redis = redis_client

    async def get_many(self, keys: list[str]) -> list[str | None]:
        """
        Read several string keys with MGET.

        Returns:
            Values in key order, None where the key is absent
        """
        if not keys:
            return []
        try:
            return await self._redis.mget(keys)
        except RedisError as e:
            logger.error("Redis MGET failed", stage="REDIS.MGET", keys=keys, error=str(e))
            raise CacheKeyError(
                message=f"Redis MGET failed: {e}", details={"keys": keys}
            ) from e

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            return await self._redis.delete(*keys)
        except RedisError as e:
            logger.error("Redis DELETE failed", stage="REDIS.DEL", keys=keys, error=str(e))
            raise CacheKeyError(
                message=f"Redis DELETE failed: {e}", details={"keys": list(keys)}
            ) from e

    async def exists(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            return await self._redis.exists(*keys)
        except RedisError as e:
            logger.error("Redis EXISTS failed", stage="REDIS.EXISTS", keys=keys, error=str(e))
            raise CacheKeyError(
                message=f"Redis EXISTS failed: {e}", details={"keys": list(keys)}
            ) from e

    async def smembers(self, key: str) -> set[str]:
        try:
            return await self._redis.smembers(key)
        except RedisError as e:
            logger.error("Redis SMEMBERS failed", stage="REDIS.SMEMBERS", key=key, error=str(e))
            raise CacheKeyError(
                message=f"Redis SMEMBERS failed: {e}", details={"key": key}
            ) from e

    async def sadd(self, key: str, *members: str) -> int:
        try:
            return await self._redis.sadd(key, *members)
        except RedisError as e:
            logger.error("Redis SADD failed", stage="REDIS.SADD", key=key, error=str(e))
            raise CacheKeyError(message=f"Redis SADD failed: {e}", details={"key": key}) from e

    async def zadd(self, key: str, mapping: Mapping[str, float]) -> int:
        try:
            return await self._redis.zadd(key, dict(mapping))
        except RedisError as e:
            logger.error("Redis ZADD failed", stage="REDIS.ZADD", key=key, error=str(e))
            raise CacheKeyError(message=f"Redis ZADD failed: {e}", details={"key": key}) from e

    async def zrangebyscore(self, key: str, min_score: Any, max_score: Any) -> list[str]:
        """
        Members of a sorted set scored within [min_score, max_score].

        Bounds accept Redis syntax: "-inf", "+inf", "(42" for exclusive.
        """
        try:
            return await self._redis.zrangebyscore(key, min_score, max_score)
        except RedisError as e:
            logger.error(
                "Redis ZRANGEBYSCORE failed", stage="REDIS.ZRANGEBYSCORE", key=key, error=str(e)
            )
            raise CacheKeyError(
                message=f"Redis ZRANGEBYSCORE failed: {e}", details={"key": key}
            ) from e

    async def zremrangebyscore(self, key: str, min_score: Any, max_score: Any) -> int:
        try:
            return await self._redis.zremrangebyscore(key, min_score, max_score)
        except RedisError as e:
            logger.error(
                "Redis ZREMRANGEBYSCORE failed",
                stage="REDIS.ZREMRANGEBYSCORE",
                key=key,
                error=str(e),
            )
            raise CacheKeyError(
                message=f"Redis ZREMRANGEBYSCORE failed: {e}", details={"key": key}
            ) from e

    async def ttl(self, key: str) -> int:
        """
        Get TTL of a key.

        Returns:
            TTL in seconds, -1 if no TTL, -2 if key doesn't exist
        """
        try:
            return await self._redis.ttl(key)
        except RedisError as e:
            logger.error("Redis TTL failed", stage="REDIS.TTL", key=key, error=str(e))
            raise CacheKeyError(message=f"Redis TTL failed: {e}", details={"key": key}) from e


# =============================================================================
# LAYER 3: COMMAND BATCHES
# =============================================================================


class CommandBatch:
    """
    An explicit, non-transactional pipeline for one logical engine operation.

    Commands are queued synchronously and sent together by execute().
    Results come back in queue order.

    Usage:
        batch = client.batch()
        batch.mset({"a": "1", "b": "2"}).expire("a", 60).expire("b", 60)
        results = await batch.execute()
    """

    def __init__(self, redis_client: redis.Redis):
        self._pipe = redis_client.pipeline(transaction=False)
        self._commands: list[str] = []

    def __len__(self) -> int:
        return len(self._commands)

    def _queue(self, command: str, *args, **kwargs) -> "CommandBatch":
        getattr(self._pipe, command)(*args, **kwargs)
        self._commands.append(command)
        return self

    def mget(self, keys: list[str]) -> "CommandBatch":
        return self._queue("mget", keys)

    def mset(self, mapping: Mapping[str, bytes | str]) -> "CommandBatch":
        return self._queue("mset", dict(mapping))

    def expire(self, key: str, seconds: int) -> "CommandBatch":
        return self._queue("expire", key, seconds)

    def delete(self, *keys: str) -> "CommandBatch":
        return self._queue("delete", *keys)

    def exists(self, key: str) -> "CommandBatch":
        return self._queue("exists", key)

    def smembers(self, key: str) -> "CommandBatch":
        return self._queue("smembers", key)

    def sadd(self, key: str, *members: str) -> "CommandBatch":
        return self._queue("sadd", key, *members)

    def zadd(self, key: str, mapping: Mapping[str, float]) -> "CommandBatch":
        return self._queue("zadd", key, dict(mapping))

    async def execute(self) -> list[Any]:
        """
        Send every queued command in one round trip.

        An empty batch returns [] without touching Redis.

        Raises:
            CacheKeyError: If the pipeline fails
        """
        if not self._commands:
            return []
        try:
            return await self._pipe.execute()
        except RedisError as e:
            logger.error(
                "Redis pipeline failed",
                stage="REDIS.PIPELINE",
                commands=len(self._commands),
                error=str(e),
            )
            raise CacheKeyError(
                message=f"Redis pipeline failed: {e}",
                details={"commands": list(self._commands)},
            ) from e
        finally:
            self._commands.clear()


# =============================================================================
# LAYER 4: HEALTH MONITORING
# =============================================================================


class HealthMonitor:
    """
    Monitors Redis health and connection pool metrics.

    Metrics Tracked:
    - Connection status
    - Ping latency
    - Pool size and utilization (owned pools only)
    """

    def __init__(self, connection_manager: ConnectionManager):
        self._conn_mgr = connection_manager

    async def health_check(self) -> dict[str, Any]:
        """
        Perform health check on Redis connection.

        Returns:
            Dict with health status and metrics
        """
        health: dict[str, Any] = {
            "status": "healthy",
            "connected": self._conn_mgr.is_connected(),
            "pool_size": 0,
            "pool_available": 0,
            "pool_utilization_pct": 0,
            "pool_warning": False,
            "ping_latency_ms": None,
        }

        client = self._conn_mgr.get_client()
        if not client:
            health["status"] = "unhealthy"
            health["error"] = "Client not initialized"
            return health

        try:
            start = time.perf_counter()
            await client.ping()
            health["ping_latency_ms"] = round((time.perf_counter() - start) * 1000, 2)
        except RedisError as e:
            health["status"] = "unhealthy"
            health["error"] = str(e)
            return health

        pool = self._conn_mgr.get_pool()
        if pool:
            health["pool_size"] = pool.max_connections
            if hasattr(pool, "_available_connections"):
                available = len(pool._available_connections)
                health["pool_available"] = available
                utilization = 100.0 * ((pool.max_connections - available) / pool.max_connections)
                health["pool_utilization_pct"] = round(utilization, 1)
                if utilization > 80:
                    health["pool_warning"] = True
                    logger.warning(
                        "Redis pool utilization high",
                        pool_utilization=utilization,
                        max_connections=pool.max_connections,
                    )

        return health


# =============================================================================
# LAYER 5: PUBLIC API
# =============================================================================


class RedisClient:
    """
    Async Redis client used as the engine's cache backend.

    Usage:
        client = RedisClient(load_settings())
        await client.connect()

        batch = client.batch()
        batch.mget(["pantry:v1:user:v1:#1"])
        [values] = await batch.execute()

        await client.disconnect()

    Tests inject a fakeredis client:
        client = RedisClient(settings, client=fakeredis.FakeAsyncRedis(decode_responses=True))
    """

    def __init__(self, settings: PantrySettings, client: redis.Redis | None = None):
        self._settings = settings
        self._conn_mgr = ConnectionManager(settings, client)
        self._executor: OperationExecutor | None = (
            OperationExecutor(client) if client is not None else None
        )
        self._health_monitor = HealthMonitor(self._conn_mgr)

    async def connect(self) -> None:
        """
        Raises:
            CacheConnectionError: If connection fails
        """
        client = await self._conn_mgr.connect()
        self._executor = OperationExecutor(client)

    async def disconnect(self) -> None:
        await self._conn_mgr.disconnect()
        if self._conn_mgr.get_client() is None:
            self._executor = None

    async def ping(self) -> bool:
        return await self._conn_mgr.ping()

    def _require_client(self) -> redis.Redis:
        client = self._conn_mgr.get_client()
        if client is None:
            raise CacheConnectionError(
                message="Redis client is not connected; call connect() first",
                details={"url": self._settings.REDIS_URL},
            )
        return client

    def _require_executor(self) -> OperationExecutor:
        if self._executor is None:
            self._executor = OperationExecutor(self._require_client())
        return self._executor

    def batch(self) -> CommandBatch:
        """Start a non-transactional pipeline."""
        return CommandBatch(self._require_client())

    # -------------------------------------------------------------------------
    # Delegate to OperationExecutor
    # -------------------------------------------------------------------------

    async def get_many(self, keys: list[str]) -> list[str | None]:
        return await self._require_executor().get_many(keys)

    async def delete(self, *keys: str) -> int:
        return await self._require_executor().delete(*keys)

    async def exists(self, *keys: str) -> int:
        return await self._require_executor().exists(*keys)

    async def smembers(self, key: str) -> set[str]:
        return await self._require_executor().smembers(key)

    async def sadd(self, key: str, *members: str) -> int:
        return await self._require_executor().sadd(key, *members)

    async def zadd(self, key: str, mapping: Mapping[str, float]) -> int:
        return await self._require_executor().zadd(key, mapping)

    async def zrangebyscore(self, key: str, min_score: Any, max_score: Any) -> list[str]:
        return await self._require_executor().zrangebyscore(key, min_score, max_score)

    async def zremrangebyscore(self, key: str, min_score: Any, max_score: Any) -> int:
        return await self._require_executor().zremrangebyscore(key, min_score, max_score)

    async def ttl(self, key: str) -> int:
        return await self._require_executor().ttl(key)

    async def health_check(self) -> dict[str, Any]:
        """Perform health check on Redis connection."""
        return await self._health_monitor.health_check()
