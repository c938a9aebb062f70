"""
Caching Engine

- **keys.py**: KeyCodec, cache key derivation
- **primary.py**: PrimaryCache, id -> snapshot
- **indices.py**: SecondaryIndexManager, attribute value -> ids
- **all_index.py**: AllRecordsIndex, time-windowed membership for restockable models
- **stocked.py**: StockedModel, the public cache-aside operations
- **pantry.py**: Pantry, registry of stocked models
"""

from pantry.engine.all_index import AllRecordsIndex
from pantry.engine.dry_good import DryGood
from pantry.engine.indices import SecondaryIndexManager
from pantry.engine.keys import KeyCodec
from pantry.engine.options import IndexSpec, ModelOptions, stock_by
from pantry.engine.pantry import Pantry
from pantry.engine.primary import PrimaryCache
from pantry.engine.serialization import SnapshotCodec
from pantry.engine.stocked import StockedModel

__all__ = [
    "AllRecordsIndex",
    "DryGood",
    "IndexSpec",
    "KeyCodec",
    "ModelOptions",
    "Pantry",
    "PrimaryCache",
    "SecondaryIndexManager",
    "SnapshotCodec",
    "StockedModel",
    "stock_by",
]
