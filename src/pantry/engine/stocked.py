"""
Stocked Model

Public cache-aside operations for one model: reads go to Redis first and fall
through to the record store on a miss, writing what they found back.
Invalidation is explicit: the owning application calls invalidate() after a
successful write or delete.

Architecture:
    StockedModel
        ├── PrimaryCache (id -> snapshot)
        ├── SecondaryIndexManager (attribute value -> ids)
        ├── AllRecordsIndex (restockable models only)
        └── RecordStore (source of truth)
"""

import functools
import time
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import Any

from pantry.core.config.constants import Stage
from pantry.core.config.settings import PantrySettings
from pantry.core.exceptions import ConfigurationError
from pantry.core.interfaces import CacheBackend, RecordStore, StockedRecord
from pantry.core.logging import get_logger, log_stage, model_context
from pantry.engine.all_index import AllRecordsIndex
from pantry.engine.indices import Changes, SecondaryIndexManager
from pantry.engine.keys import KeyCodec
from pantry.engine.options import IndexSpec, ModelOptions
from pantry.engine.primary import PrimaryCache
from pantry.engine.serialization import SnapshotCodec
from pantry.infrastructure.monitoring import MetricsCollector, get_metrics_collector

logger = get_logger(__name__)


def _in_model_context(method):
    """Run an operation with its log entries attributed to the model."""

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        with model_context(self.name):
            return await method(self, *args, **kwargs)

    return wrapper


class StockedModel:
    """
    Cache-aside access to one model's records.

    Usage:
        users = StockedModel("user", store, ModelOptions(indices=(stock_by("team"),)),
                             settings=settings, cache=redis_client)
        await users.get(1)
        await users.multi_get_by("team", ["backend", None])
        await users.invalidate(record, changes={record.id: {"team": (None, "backend")}})
    """

    def __init__(
        self,
        name: str,
        store: RecordStore,
        options: ModelOptions | None = None,
        *,
        settings: PantrySettings,
        cache: CacheBackend,
        clock: Callable[[], float] = time.time,
        metrics: MetricsCollector | None = None,
    ):
        self.name = name
        self.store = store
        self.options = options or ModelOptions()
        self.settings = settings
        self._metrics = metrics or get_metrics_collector()

        self.keys = KeyCodec(
            global_prefix=settings.GLOBAL_KEY_PREFIX,
            global_version=settings.GLOBAL_KEY_VERSION,
            local_prefix=self.options.local_key_prefix or name.lower(),
            local_version=self.options.local_key_version,
        )
        self.snapshots = SnapshotCodec(
            self.options.dry_good_type, self.options.datetime_attributes
        )
        self.all_index = (
            AllRecordsIndex(cache, self.keys, clock, self.options.id_type)
            if self.options.restock
            else None
        )
        self.primary = PrimaryCache(
            model=name,
            cache=cache,
            codec=self.keys,
            snapshots=self.snapshots,
            store=store,
            ttl=self.key_ttl_s,
            metrics=self._metrics,
            all_index=self.all_index,
            force_misses=settings.FORCE_CACHE_MISSES,
        )
        self.indices = SecondaryIndexManager(
            model=name,
            cache=cache,
            codec=self.keys,
            indices=self.options.indices,
            primary=self.primary,
            metrics=self._metrics,
            id_type=self.options.id_type,
            force_misses=settings.FORCE_CACHE_MISSES,
        )

    def __repr__(self) -> str:
        return f"<StockedModel {self.name} namespace={self.keys.namespace!r}>"

    @property
    def key_ttl_s(self) -> int:
        if self.options.key_ttl_s is not None:
            return self.options.key_ttl_s
        return self.settings.GLOBAL_KEY_TTL_S

    @property
    def restockable(self) -> bool:
        return self.options.restock

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get(self, id: Any) -> Any:
        """One record by id, or None."""
        return (await self.multi_get([id])).get(id)

    @_in_model_context
    async def multi_get(self, ids: Iterable[Any]) -> dict[Any, Any]:
        """
        Records by id, cache first.

        Misses are fetched from the store in one query and written back.
        Result keys are the caller's ids; ids the store no longer has are
        left out.
        """
        ids = list(dict.fromkeys(ids))
        if not ids:
            return {}

        cached = await self.primary.multi_fetch(ids)
        misses = [id for id in ids if cached.get(id) is None]

        fetched: dict[str, Any] = {}
        if misses:
            records = await self._query("find_by_ids", self.store.find_by_ids, misses)
            stored = await self.primary.multi_store(records)
            fetched = {str(id): snapshot for id, snapshot in stored.items()}

        result = {}
        for id in ids:
            snapshot = cached.get(id)
            if snapshot is None:
                snapshot = fetched.get(str(id))
            if snapshot is not None:
                result[id] = snapshot
        return result

    async def get_by(self, attribute: str, value: Any) -> Any:
        """One value's match: a record (unique index) or a list of records."""
        return (await self.multi_get_by(attribute, [value])).get(value)

    @_in_model_context
    async def multi_get_by(self, attribute: str, values: Iterable[Any]) -> dict[Any, Any]:
        """
        Records by indexed attribute value.

        A unique index maps each value to one record or None; any other index
        maps each value to a list of records sorted by id. Values whose index
        key is absent are read through from the store and indexed, values
        whose index key exists but is empty answer [] without a store query.

        Raises:
            ConfigurationError: If attribute was never declared with stock_by()
        """
        spec = self.indices.spec(attribute)
        values = list(dict.fromkeys(values))
        if not values:
            return {}

        id_lists = await self.indices.multi_get_by_index(attribute, values)

        hit_ids = list(
            dict.fromkeys(id for ids in id_lists.values() if ids is not None for id in ids)
        )
        cached = await self.multi_get(hit_ids) if hit_ids else {}

        misses = [value for value in values if id_lists.get(value) is None]
        stocked = await self._stock_by(spec, misses) if misses else {}

        result = {}
        for value in values:
            ids = id_lists.get(value)
            if ids is None:
                result[value] = stocked.get(value, None if spec.unique else [])
            elif spec.unique:
                result[value] = cached.get(ids[0]) if ids else None
            else:
                result[value] = [cached[id] for id in ids if id in cached]
        return result

    @_in_model_context
    async def multi_get_all(self) -> dict[Any, Any]:
        """
        Every cached record of a restockable model, keyed by id.

        An empty all-records index triggers restock(). A non-empty one is
        resolved through the primary cache only; ids whose primary entry has
        expired are dropped from the result.

        Raises:
            ConfigurationError: If the model is not restockable
        """
        if not self.restockable:
            raise ConfigurationError(
                "restock must be enabled in order to use multi_get_all()",
                model=self.name,
            )

        if self.settings.FORCE_CACHE_MISSES:
            records = await self._query("find_all", self.store.find_all)
            return {record.id: self.snapshot(record) for record in records}

        ids = await self.all_index.current_members()
        if not ids:
            return await self.restock()

        fetched = await self.primary.multi_fetch(ids)
        return {id: snapshot for id, snapshot in fetched.items() if snapshot is not None}

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def invalidate(self, item: Any, changes: Changes | None = None) -> None:
        """Invalidate one record or id. See multi_invalidate()."""
        await self.multi_invalidate([item], changes)

    @_in_model_context
    async def multi_invalidate(
        self, items: Iterable[Any], changes: Changes | None = None
    ) -> None:
        """
        Drop cache entries for records or bare ids.

        Args:
            items: Records, ids, or a mix of both
            changes: Record id -> {attribute: (old, new)} for attributes that
                changed in the write being invalidated
        """
        items = list(items)
        if not items:
            return

        records = [item for item in items if isinstance(item, StockedRecord)]
        bare_ids = [item for item in items if not isinstance(item, StockedRecord)]
        ids = [record.id for record in records] + bare_ids

        if bare_ids and (self.options.indices or self.restockable):
            records += await self._query("find_by_ids", self.store.find_by_ids, bare_ids)

        await self.primary.delete(ids)

        if self.options.indices:
            await self.indices.invalidate(records, changes)

        if self.restockable:
            live = [record for record in records if not record.destroyed]
            await self.primary.multi_store(live, skip_deserialization=True)

        self._metrics.record_invalidation(self.name, len(ids))
        logger.debug(
            "Invalidated records",
            stage=Stage.INVALIDATE.value,
            model=self.name,
            ids=ids,
        )

    @_in_model_context
    async def restock(self) -> dict[Any, Any] | None:
        """
        Write every record of a restockable model to the cache.

        Returns:
            Map from id to snapshot, or None for models that don't restock
        """
        if not self.restockable:
            return None
        records = await self._query("find_all", self.store.find_all)
        stocked = await self.primary.multi_store(records)
        log_stage(logger, Stage.RESTOCK, "Restocked model", level="debug",
                  model=self.name, count=len(stocked))
        return stocked

    @_in_model_context
    async def tidy(self) -> int:
        """
        Prune expired members from the all-records index.

        Returns:
            Number of members removed (0 for models that don't restock)
        """
        if self.all_index is None:
            return 0
        removed = await self.all_index.prune()
        self._metrics.record_tidied(self.name, removed)
        return removed

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def snapshot(self, record: StockedRecord) -> Any:
        """The snapshot a cache read of record would return."""
        return self.snapshots.loads(self.snapshots.dumps(record))

    async def _stock_by(self, spec: IndexSpec, values: Sequence[Any]) -> dict[Any, Any]:
        records = await self._query(
            "find_by_attribute", self.store.find_by_attribute, spec.attribute, values, spec.scope
        )

        grouped: dict[Any, list[StockedRecord]] = {value: [] for value in values}
        for record in records:
            grouped.setdefault(getattr(record, spec.attribute, None), []).append(record)

        await self.indices.populate(spec.attribute, grouped)

        result: dict[Any, Any] = {}
        for value in values:
            matches = sorted(grouped[value], key=lambda record: record.id)
            snapshots = [self.snapshot(record) for record in matches]
            result[value] = (snapshots[0] if snapshots else None) if spec.unique else snapshots
        return result

    async def _query(
        self, operation: str, method: Callable[..., Awaitable[Sequence[StockedRecord]]], *args
    ) -> list[StockedRecord]:
        started = time.perf_counter()
        records = list(await method(*args))
        elapsed = time.perf_counter() - started
        self._metrics.record_store_query(self.name, operation, elapsed)
        log_stage(logger, Stage.STORE_QUERY, "Record store queried", level="debug",
                  model=self.name, operation=operation, records=len(records),
                  duration_ms=round(elapsed * 1000, 2))
        return records

