"""
Record Stores

- **memory.py**: MemoryRecordStore, dict-backed
- **sqlalchemy.py**: SQLAlchemyRecordStore, async SQLAlchemy 2.x (install the
  ``sql`` extra and import from pantry.stores.sqlalchemy)
"""

from pantry.stores.memory import MemoryRecord, MemoryRecordStore

__all__ = ["MemoryRecord", "MemoryRecordStore"]
