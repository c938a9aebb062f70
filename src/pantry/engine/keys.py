"""
Cache Key Derivation

Keys are pure functions of the namespace versions and their inputs:

    {global_prefix}:v{global_version}:{local_prefix}:v{local_version}:#{id}
    {global_prefix}:v{global_version}:{local_prefix}:v{local_version}:index:{attribute}:{value}

Bumping either version orphans every key written under the old one.
"""

from dataclasses import dataclass
from typing import Any

from pantry.core.config.constants import (
    ALL_INDEX_ATTRIBUTE,
    ALL_INDEX_VALUE,
    INDEX_SEGMENT,
    KEY_SEPARATOR,
    NIL_VALUE_TOKEN,
    PRIMARY_KEY_MARKER,
    VERSION_MARKER,
)


@dataclass(frozen=True)
class KeyCodec:
    """
    Derives primary, index and all-index keys for one stocked model.

    Usage:
        codec = KeyCodec("pantry", 1, "user", 1)
        codec.primary_key(7)               # "pantry:v1:user:v1:#7"
        codec.index_key("team", None)      # "pantry:v1:user:v1:index:team:__pantry_nil__"
    """

    global_prefix: str
    global_version: int
    local_prefix: str
    local_version: int

    @property
    def namespace(self) -> str:
        return KEY_SEPARATOR.join(
            [
                self.global_prefix,
                f"{VERSION_MARKER}{self.global_version}",
                self.local_prefix,
                f"{VERSION_MARKER}{self.local_version}",
            ]
        )

    def primary_key(self, id: Any) -> str:
        return f"{self.namespace}{KEY_SEPARATOR}{PRIMARY_KEY_MARKER}{id}"

    def index_key(self, attribute: str, value: Any) -> str:
        token = NIL_VALUE_TOKEN if value is None else value
        return KEY_SEPARATOR.join([self.namespace, INDEX_SEGMENT, str(attribute), str(token)])

    def all_index_key(self) -> str:
        return self.index_key(ALL_INDEX_ATTRIBUTE, ALL_INDEX_VALUE)
