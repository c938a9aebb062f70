"""
pantry - a read/write-through Redis cache in front of a record store.

Lookup by id and by declared secondary indices, explicit invalidation, and an
"all records" mode for small restockable models.

Usage:
------
```python
from pantry import ModelOptions, Pantry, load_settings, stock_by
from pantry.stores import MemoryRecordStore

store = MemoryRecordStore([{"name": "Matthew", "nickname": "Matt", "team": "backend"}])

async with Pantry(load_settings()) as pantry:
    people = pantry.stock(
        "person",
        store,
        ModelOptions(indices=(stock_by("nickname", unique=True), stock_by("team"))),
    )
    matt = await people.get_by("nickname", "Matt")
```
"""

from pantry.core.config import PantrySettings, load_settings
from pantry.core.exceptions import (
    CacheConnectionError,
    CacheError,
    CacheKeyError,
    ConfigurationError,
    PantryError,
    RecordStoreError,
)
from pantry.core.logging import setup_logging
from pantry.engine import (
    DryGood,
    IndexSpec,
    KeyCodec,
    ModelOptions,
    Pantry,
    StockedModel,
    stock_by,
)

__version__ = "0.4.0"

__all__ = [
    "CacheConnectionError",
    "CacheError",
    "CacheKeyError",
    "ConfigurationError",
    "DryGood",
    "IndexSpec",
    "KeyCodec",
    "ModelOptions",
    "Pantry",
    "PantryError",
    "PantrySettings",
    "RecordStoreError",
    "StockedModel",
    "load_settings",
    "setup_logging",
    "stock_by",
]
