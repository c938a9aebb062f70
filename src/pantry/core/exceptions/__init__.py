"""
Exception Module

Structured exception hierarchy for pantry.

Module Structure:
-----------------
- **base.py**: PantryError base class + ConfigurationError
- **cache.py**: Cache backend exceptions (Redis)
- **store.py**: Record store exceptions

Usage:
------
```python
from pantry.core.exceptions import ConfigurationError, CacheKeyError
```
"""

from pantry.core.exceptions.base import ConfigurationError, PantryError
from pantry.core.exceptions.cache import CacheConnectionError, CacheError, CacheKeyError
from pantry.core.exceptions.store import RecordStoreError

__all__ = [
    # Base
    "PantryError",
    "ConfigurationError",
    # Cache
    "CacheError",
    "CacheConnectionError",
    "CacheKeyError",
    # Store
    "RecordStoreError",
]
