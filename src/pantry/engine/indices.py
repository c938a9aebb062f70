"""
Secondary Index Manager

Each declared index maps (attribute, value) to a Redis set of record ids.

Three states per value:
- key absent: never populated or invalidated, a genuine miss
- key holds ids: the matching records
- key holds only EMPTY_INDEX_MEMBER: populated, nothing matched

Redis deletes a set when its last member goes, so the placeholder member is
what lets an empty answer be cached at all. Readers discard it.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from pantry.core.config.constants import EMPTY_INDEX_MEMBER, Stage
from pantry.core.exceptions import ConfigurationError
from pantry.core.interfaces import CacheBackend, StockedRecord
from pantry.core.logging import get_logger, log_stage
from pantry.engine.keys import KeyCodec
from pantry.engine.options import IndexSpec
from pantry.engine.primary import PrimaryCache
from pantry.infrastructure.monitoring import MetricsCollector

logger = get_logger(__name__)

Changes = Mapping[Any, Mapping[str, tuple[Any, Any]]]


class SecondaryIndexManager:
    """
    Reads, populates and invalidates the secondary indices of one model.

    Args:
        model: Model name (for logs and metrics)
        cache: Cache backend
        codec: Key codec of the model
        indices: Declared index specs
        primary: Primary cache written back on populate
        metrics: Metrics collector
        id_type: Converts set members back into ids
        force_misses: Report every value as a miss without reading Redis
    """

    def __init__(
        self,
        model: str,
        cache: CacheBackend,
        codec: KeyCodec,
        indices: Sequence[IndexSpec],
        primary: PrimaryCache,
        metrics: MetricsCollector,
        id_type: Callable[[str], Any] = int,
        force_misses: bool = False,
    ):
        self.model = model
        self._cache = cache
        self._codec = codec
        self._specs = {spec.attribute: spec for spec in indices}
        self._primary = primary
        self._metrics = metrics
        self._id_type = id_type
        self._force_misses = force_misses

    @property
    def specs(self) -> list[IndexSpec]:
        return list(self._specs.values())

    def spec(self, attribute: str) -> IndexSpec:
        """
        Raises:
            ConfigurationError: If attribute was never declared with stock_by()
        """
        try:
            return self._specs[str(attribute)]
        except KeyError:
            raise ConfigurationError(
                f"'{attribute}' is not a stocked index",
                model=self.model,
                details={"attribute": attribute, "indices": list(self._specs)},
            ) from None

    async def multi_get_by_index(
        self, attribute: str, values: Sequence[Any]
    ) -> dict[Any, list[Any] | None]:
        """
        Read the index set of every value.

        Returns:
            Map from value to its sorted id list, or None when the index key
            does not exist (the caller must consult the record store)
        """
        self.spec(attribute)
        values = list(dict.fromkeys(values))
        if self._force_misses:
            self._metrics.record_cache_miss(self.model, "index", len(values))
            return {value: None for value in values}
        if not values:
            return {}

        batch = self._cache.batch()
        for value in values:
            batch.smembers(self._codec.index_key(attribute, value))
        memberships = await batch.execute()

        found: dict[Any, list[Any] | None] = {}
        empty: list[Any] = []
        for value, members in zip(values, memberships):
            ids = sorted(self._id_type(m) for m in members if m != EMPTY_INDEX_MEMBER)
            found[value] = ids
            if not ids:
                empty.append(value)

        # An empty read is authoritative only if the key exists
        if empty:
            batch = self._cache.batch()
            for value in empty:
                batch.exists(self._codec.index_key(attribute, value))
            existences = await batch.execute()
            for value, exists in zip(empty, existences):
                if not exists:
                    found[value] = None

        misses = sum(1 for ids in found.values() if ids is None)
        self._metrics.record_cache_hit(self.model, "index", len(found) - misses)
        self._metrics.record_cache_miss(self.model, "index", misses)
        log_stage(logger, Stage.INDEX_READ, "Secondary index read", level="debug",
                  model=self.model, attribute=attribute, values=len(values), misses=misses)
        return found

    async def populate(
        self, attribute: str, records_by_value: Mapping[Any, Sequence[StockedRecord]]
    ) -> None:
        """
        Add each value's record ids to its index set, then write every
        involved record back to the primary cache.

        A value mapped to no records gets the placeholder member so the next
        read sees an existing, empty index.
        """
        self.spec(attribute)
        if not records_by_value:
            return

        batch = self._cache.batch()
        for value, records in records_by_value.items():
            members = [str(record.id) for record in records] or [EMPTY_INDEX_MEMBER]
            batch.sadd(self._codec.index_key(attribute, value), *members)
        await batch.execute()

        involved = {
            str(record.id): record
            for records in records_by_value.values()
            for record in records
        }
        await self._primary.multi_store(
            sorted(involved.values(), key=lambda record: record.id),
            skip_deserialization=True,
        )
        log_stage(logger, Stage.INDEX_POPULATE, "Secondary index populated", level="debug",
                  model=self.model, attribute=attribute, values=len(records_by_value),
                  records=len(involved))

    def dirty_keys(
        self, records: Iterable[StockedRecord], changes: Changes | None = None
    ) -> list[str]:
        """
        Index keys made stale by the given records.

        A scoped index treats every record as dirty, since scope membership
        cannot be derived from an attribute diff. An unscoped index only
        considers live records whose indexed attribute appears in changes,
        and clears both the old and the new value.
        """
        records = list(records)
        changes_by_id = {str(id): change for id, change in (changes or {}).items()}
        keys: dict[str, None] = {}

        for spec in self._specs.values():
            for record in records:
                change = changes_by_id.get(str(record.id), {}).get(spec.attribute)
                if not spec.scoped and (record.destroyed or change is None):
                    continue
                values = change if change is not None else (getattr(record, spec.attribute, None),)
                for value in values:
                    keys[self._codec.index_key(spec.attribute, value)] = None

        return list(keys)

    async def invalidate(
        self, records: Iterable[StockedRecord], changes: Changes | None = None
    ) -> int:
        """
        Delete every stale index key with one DEL. Indices rebuild on the
        next read.

        Args:
            records: Changed or destroyed records
            changes: Record id -> {attribute: (old, new)}

        Returns:
            Number of index keys deleted
        """
        keys = self.dirty_keys(records, changes)
        if not keys:
            return 0

        deleted = await self._cache.delete(*keys)
        log_stage(logger, Stage.INDEX_INVALIDATE, "Secondary index invalidated", level="debug",
                  model=self.model, keys=keys, deleted=deleted)
        return deleted
