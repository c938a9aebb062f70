"""
Protocols

- **cache.py**: CacheBackend / CommandQueue, the cache side contract
- **store.py**: RecordStore / StockedRecord / Snapshot, the backing store contract
"""

from .cache import CacheBackend, CommandQueue
from .store import RecordStore, Snapshot, StockedRecord

__all__ = ["CacheBackend", "CommandQueue", "RecordStore", "Snapshot", "StockedRecord"]
