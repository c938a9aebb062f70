"""
Configuration Module

- **settings.py**: PantrySettings, environment-backed process configuration
- **constants.py**: Key format tokens, sentinels and stage identifiers

Usage:
------
```python
from pantry.core.config import load_settings

settings = load_settings()
settings.GLOBAL_KEY_PREFIX  # "pantry"
```

Environment Variables:
---------------------
```bash
PANTRY_REDIS_URL=redis://localhost:6379/0
PANTRY_GLOBAL_KEY_PREFIX=pantry
PANTRY_GLOBAL_KEY_VERSION=1
PANTRY_GLOBAL_KEY_TTL_S=1209600
PANTRY_FORCE_CACHE_MISSES=false
PANTRY_LOG_LEVEL=INFO
PANTRY_LOG_FORMAT=json
```
"""

from pantry.core.config.settings import PantrySettings, load_settings

__all__ = ["PantrySettings", "load_settings"]
