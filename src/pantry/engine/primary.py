"""
Primary Cache

Id-keyed record snapshots, one string key per record with the model's TTL.
"""

from collections.abc import Iterable, Sequence
from typing import Any

from pantry.core.config.constants import Stage
from pantry.core.interfaces import CacheBackend, RecordStore, StockedRecord
from pantry.core.logging import get_logger
from pantry.engine.all_index import AllRecordsIndex
from pantry.engine.keys import KeyCodec
from pantry.engine.serialization import SnapshotCodec
from pantry.infrastructure.monitoring import MetricsCollector

logger = get_logger(__name__)


class PrimaryCache:
    """
    Reads and writes record snapshots by id.

    Absent entries are reported as None, never as an empty snapshot. When
    force_misses is set every read reports every id absent without touching
    Redis.
    """

    def __init__(
        self,
        model: str,
        cache: CacheBackend,
        codec: KeyCodec,
        snapshots: SnapshotCodec,
        store: RecordStore,
        ttl: int,
        metrics: MetricsCollector,
        all_index: AllRecordsIndex | None = None,
        force_misses: bool = False,
    ):
        self.model = model
        self.ttl = ttl
        self._cache = cache
        self._codec = codec
        self._snapshots = snapshots
        self._store = store
        self._metrics = metrics
        self._all_index = all_index
        self._force_misses = force_misses

    async def multi_fetch(self, ids: Sequence[Any]) -> dict[Any, Any]:
        """
        Read several records with one MGET.

        Returns:
            Map from each requested id to its snapshot, or None when absent
        """
        ids = list(ids)
        if self._force_misses:
            self._metrics.record_cache_miss(self.model, "primary", len(ids))
            return {id: None for id in ids}
        if not ids:
            return {}

        payloads = await self._cache.get_many([self._codec.primary_key(id) for id in ids])
        fetched = {
            id: self._snapshots.loads(payload) if payload is not None else None
            for id, payload in zip(ids, payloads)
        }

        misses = sum(1 for snapshot in fetched.values() if snapshot is None)
        self._metrics.record_cache_hit(self.model, "primary", len(fetched) - misses)
        self._metrics.record_cache_miss(self.model, "primary", misses)
        if misses:
            logger.debug(
                "Primary cache miss",
                stage=Stage.PRIMARY_FETCH.value,
                model=self.model,
                requested=len(ids),
                misses=misses,
            )
        return fetched

    async def multi_store(
        self, records: Iterable[StockedRecord], skip_deserialization: bool = False
    ) -> dict[Any, Any] | None:
        """
        Write records in one pipeline: MSET, one EXPIRE per key and, for
        restockable models, a ZADD on the all-records index.

        Args:
            records: Records to cache
            skip_deserialization: Don't build snapshots of what was written

        Returns:
            Map from record id to snapshot, or None when skip_deserialization
        """
        records = list(records)
        if not records:
            return None if skip_deserialization else {}

        self._store.before_serialize(records)

        payloads: dict[str, bytes] = {}
        ids: list[Any] = []
        for record in records:
            key = self._codec.primary_key(record.id)
            if key not in payloads:
                ids.append(record.id)
            payloads[key] = self._snapshots.dumps(record)

        batch = self._cache.batch()
        batch.mset(payloads)
        for key in payloads:
            batch.expire(key, self.ttl)
        if self._all_index is not None:
            self._all_index.queue_add(batch, ids, self.ttl)
        await batch.execute()

        logger.debug(
            "Stored records",
            stage=Stage.PRIMARY_STORE.value,
            model=self.model,
            count=len(ids),
            ttl=self.ttl,
        )

        if skip_deserialization:
            return None
        return {
            id: self._snapshots.loads(payloads[self._codec.primary_key(id)]) for id in ids
        }

    async def delete(self, ids: Iterable[Any]) -> int:
        keys = list(dict.fromkeys(self._codec.primary_key(id) for id in ids))
        if not keys:
            return 0
        deleted = await self._cache.delete(*keys)
        logger.debug(
            "Deleted primary keys", stage=Stage.PRIMARY_DELETE.value, model=self.model,
            requested=len(keys), deleted=deleted,
        )
        return deleted
