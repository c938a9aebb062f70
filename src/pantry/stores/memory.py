"""
In-Memory Record Store

A dict-backed RecordStore for tests, fixtures and small reference tables.
Writes return what the caller needs to invalidate the cache afterwards.
"""

from collections.abc import Callable, Iterable, Sequence
from datetime import datetime, timezone
from typing import Any

from pantry.core.exceptions import RecordStoreError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemoryRecord:
    """
    A record held by MemoryRecordStore.

    Attributes are plain instance attributes; id, created_at and updated_at
    are always present.
    """

    def __init__(self, id: Any, **attributes):
        self.id = id
        self.destroyed = False
        self.__dict__.update(attributes)

    def pantry_attributes(self) -> dict[str, Any]:
        return {k: v for k, v in self.__dict__.items() if k != "destroyed"}

    def __repr__(self) -> str:
        return f"<MemoryRecord id={self.id!r}{' destroyed' if self.destroyed else ''}>"


class MemoryRecordStore:
    """
    RecordStore over a dict of MemoryRecords.

    Index scopes are predicates: stock_by("team", scope=lambda r: r.nickname != "Benji").

    Usage:
        store = MemoryRecordStore()
        ada, changes = store.create(name="Ada", team="backend")
        await users.invalidate(ada, changes)

        ada, changes = store.update(ada.id, team="client")
        await users.invalidate(ada, changes)
    """

    def __init__(
        self,
        records: Iterable[dict[str, Any]] = (),
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._records: dict[Any, MemoryRecord] = {}
        self._next_id = 1
        self._clock = clock
        for attributes in records:
            self.create(**attributes)

    def __len__(self) -> int:
        return len(self._records)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create(
        self, **attributes
    ) -> tuple[MemoryRecord, dict[Any, dict[str, tuple[Any, Any]]]]:
        """
        Insert a record.

        Returns:
            The record and its changes map, every attribute going from None
            to its new value, so the indices it lands in get invalidated
        """
        id = attributes.pop("id", None)
        if id is None:
            id = self._next_id
        if id in self._records:
            raise RecordStoreError("Duplicate record id", details={"id": id})
        if isinstance(id, int):
            self._next_id = max(self._next_id, id + 1)

        now = self._clock()
        record = MemoryRecord(id, **attributes, created_at=now, updated_at=now)
        self._records[id] = record
        diff = {name: (None, value) for name, value in record.pantry_attributes().items()}
        return record, {id: diff}

    def update(
        self, record_or_id: Any, **attributes
    ) -> tuple[MemoryRecord, dict[Any, dict[str, tuple[Any, Any]]]]:
        """
        Change attributes of a record.

        Returns:
            The record and its changes map, {id: {attribute: (old, new)}},
            holding only attributes whose value actually changed
        """
        record = self._get(record_or_id)
        diff = {}
        for attribute, new in attributes.items():
            old = getattr(record, attribute, None)
            if old != new:
                diff[attribute] = (old, new)
                setattr(record, attribute, new)
        if diff:
            record.updated_at = self._clock()
        return record, ({record.id: diff} if diff else {})

    def destroy(self, record_or_id: Any) -> MemoryRecord:
        """Remove a record; the returned record is flagged destroyed."""
        record = self._records.pop(self._get(record_or_id).id)
        record.destroyed = True
        return record

    def _get(self, record_or_id: Any) -> MemoryRecord:
        id = record_or_id.id if isinstance(record_or_id, MemoryRecord) else record_or_id
        try:
            return self._records[id]
        except KeyError:
            raise RecordStoreError("Record not found", details={"id": id}) from None

    # -------------------------------------------------------------------------
    # RecordStore
    # -------------------------------------------------------------------------

    async def find_by_ids(self, ids: Sequence[Any]) -> list[MemoryRecord]:
        wanted = {str(id) for id in ids}
        return [record for record in self._records.values() if str(record.id) in wanted]

    async def find_by_attribute(
        self,
        attribute: str,
        values: Sequence[Any],
        scope: Callable[[MemoryRecord], bool] | None = None,
    ) -> list[MemoryRecord]:
        values = list(values)
        return [
            record
            for record in self._records.values()
            if getattr(record, attribute, None) in values and (scope is None or scope(record))
        ]

    async def find_all(self) -> list[MemoryRecord]:
        return list(self._records.values())

    def before_serialize(self, records: Iterable[MemoryRecord]) -> None:
        """Nothing to precompute for in-memory records."""
