"""
Snapshot Serialization

Records are written to Redis as orjson payloads of their pantry_attributes()
and restored through the model's snapshot factory.
"""

from collections.abc import Callable, Iterable
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

import orjson

from pantry.core.interfaces import StockedRecord


def _default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    if isinstance(value, UUID):
        return str(value)
    raise TypeError(f"Type is not JSON serializable: {type(value).__name__}")


class SnapshotCodec:
    """
    Turns records into cache payloads and payloads into snapshots.

    Args:
        factory: Callable building a snapshot from an attribute dict
        datetime_attributes: Attributes re-cast from ISO-8601 strings on restore
    """

    def __init__(self, factory: Callable[[dict[str, Any]], Any], datetime_attributes: Iterable[str] = ()):
        self.factory = factory
        self.datetime_attributes = tuple(datetime_attributes)

    def dumps(self, record: StockedRecord) -> bytes:
        return orjson.dumps(record.pantry_attributes(), default=_default)

    def loads(self, payload: bytes | str) -> Any:
        return self.restore(orjson.loads(payload))

    def restore(self, attributes: dict[str, Any]) -> Any:
        for name in self.datetime_attributes:
            value = attributes.get(name)
            if isinstance(value, str):
                attributes[name] = datetime.fromisoformat(value)
        return self.factory(attributes)
