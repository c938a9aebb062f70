"""
All-Records Index

A sorted set per restockable model mapping id -> expiry epoch. Readers only
see members scored at or after now, so expired members never need to be
removed for correctness; prune() only bounds the set's size.
"""

from collections.abc import Callable, Iterable
from typing import Any

from pantry.core.config.constants import Stage
from pantry.core.interfaces import CacheBackend, CommandQueue
from pantry.core.logging import get_logger, log_stage
from pantry.engine.keys import KeyCodec

logger = get_logger(__name__)


class AllRecordsIndex:
    """
    Time-windowed membership of every cached record of one model.

    Args:
        cache: Cache backend
        codec: Key codec of the owning model
        clock: Returns the current epoch time in seconds
        id_type: Converts members read back from Redis into ids
    """

    def __init__(
        self,
        cache: CacheBackend,
        codec: KeyCodec,
        clock: Callable[[], float],
        id_type: Callable[[str], Any] = int,
    ):
        self._cache = cache
        self._clock = clock
        self._id_type = id_type
        self.key = codec.all_index_key()

    def now(self) -> int:
        return int(self._clock())

    def queue_add(self, batch: CommandQueue, ids: Iterable[Any], ttl: int) -> CommandQueue:
        """Queue a ZADD of ids on an existing batch; scores are now + ttl."""
        expires_at = self.now() + ttl
        members = {str(id): expires_at for id in ids}
        if members:
            batch.zadd(self.key, members)
        return batch

    async def add(self, ids: Iterable[Any], ttl: int) -> int:
        """
        Add ids with score now + ttl. Re-adding an id moves its score.

        Returns:
            Number of new members
        """
        expires_at = self.now() + ttl
        members = {str(id): expires_at for id in ids}
        if not members:
            return 0
        return await self._cache.zadd(self.key, members)

    async def current_members(self) -> list[Any]:
        """Ids whose score is now or later."""
        members = await self._cache.zrangebyscore(self.key, self.now(), "+inf")
        log_stage(logger, Stage.ALL_INDEX_READ, "All-records index read", level="debug",
                  key=self.key, members=len(members))
        return [self._id_type(member) for member in members]

    async def prune(self) -> int:
        """
        Remove members scored strictly before now.

        Returns:
            Number of members removed
        """
        removed = await self._cache.zremrangebyscore(self.key, "-inf", f"({self.now()}")
        log_stage(logger, Stage.ALL_INDEX_PRUNE, "All-records index pruned", level="debug",
                  key=self.key, removed=removed)
        return removed
