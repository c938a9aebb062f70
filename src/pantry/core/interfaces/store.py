"""
Record Store Protocols

The caching engine treats the backing store as something that can filter
records by primary key or by attribute value. These protocols describe that
boundary; pantry.stores ships an in-memory and a SQLAlchemy implementation.
"""

from collections.abc import Iterable, Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class StockedRecord(Protocol):
    """
    A record as returned by a RecordStore.

    Attributes:
        id: Unique identifier, stable for the record's lifetime
        destroyed: True once the record has been deleted from the store
    """

    id: Any
    destroyed: bool

    def pantry_attributes(self) -> dict[str, Any]:
        """Attribute map written to the cache for this record."""
        ...


@runtime_checkable
class Snapshot(Protocol):
    """What the engine hands back on read: anything exposing its attributes."""

    def attributes(self) -> dict[str, Any]: ...


@runtime_checkable
class RecordStore(Protocol):
    """
    Protocol for the persistent store the cache sits in front of.

    The store is the source of truth on every miss. Records that no longer
    exist are simply left out of results.
    """

    async def find_by_ids(self, ids: Sequence[Any]) -> list[StockedRecord]:
        """Records whose id is in ids, in any order."""
        ...

    async def find_by_attribute(
        self, attribute: str, values: Sequence[Any], scope: Any = None
    ) -> list[StockedRecord]:
        """
        Records whose attribute is one of values.

        Args:
            attribute: Indexed attribute name
            values: Values to match; None matches records with no value
            scope: Optional extra filter declared on the index
        """
        ...

    async def find_all(self) -> list[StockedRecord]:
        """Every live record."""
        ...

    def before_serialize(self, records: Iterable[StockedRecord]) -> None:
        """Hook run once per batch of records about to be cached."""
        ...
