"""
Per-Model Options

ModelOptions is fixed when a model is stocked and never changes afterwards.
Secondary indices are declared with stock_by().
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pantry.core.exceptions import ConfigurationError
from pantry.engine.dry_good import DryGood


@dataclass(frozen=True)
class IndexSpec:
    """
    A declared secondary index.

    Attributes:
        attribute: Indexed attribute name
        unique: One record per value when True, a list of records otherwise
        scope: Extra filter handed to the record store when populating; the
            engine never interprets it
    """

    attribute: str
    unique: bool = False
    scope: Any = None

    @property
    def scoped(self) -> bool:
        return self.scope is not None


def stock_by(attribute: str, unique: bool = False, scope: Any = None) -> IndexSpec:
    """
    Declare a secondary index on attribute.

    Usage:
        stock_by("nickname", unique=True)
        stock_by("team", scope=lambda record: record.nickname != "Benji")
    """
    return IndexSpec(attribute=str(attribute), unique=bool(unique), scope=scope)


@dataclass(frozen=True)
class ModelOptions:
    """
    Configuration for one stocked model.

    Attributes:
        local_key_prefix: Model segment of every key (default: lower-cased model name)
        local_key_version: Bump to orphan this model's keys
        key_ttl_s: TTL for record keys (default: GLOBAL_KEY_TTL_S)
        restock: Keep the all-records index and repopulate on invalidation
        indices: Declared secondary indices
        dry_good_type: Snapshot factory, called with the attribute dict
        id_type: Converts ids read back from index sets
        datetime_attributes: Attributes restored as datetime
    """

    local_key_prefix: str | None = None
    local_key_version: int = 1
    key_ttl_s: int | None = None
    restock: bool = False
    indices: tuple[IndexSpec, ...] = ()
    dry_good_type: Callable[[dict[str, Any]], Any] = DryGood
    id_type: Callable[[str], Any] = int
    datetime_attributes: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "indices", tuple(self.indices))
        object.__setattr__(self, "datetime_attributes", tuple(self.datetime_attributes))
        attributes = [spec.attribute for spec in self.indices]
        if len(attributes) != len(set(attributes)):
            raise ConfigurationError(
                "Each attribute may be stocked by only once",
                details={"indices": attributes},
            )
        if self.key_ttl_s is not None and self.key_ttl_s <= 0:
            raise ConfigurationError(
                "key_ttl_s must be positive", details={"key_ttl_s": self.key_ttl_s}
            )

    def index(self, attribute: str) -> IndexSpec | None:
        for spec in self.indices:
            if spec.attribute == attribute:
                return spec
        return None
