"""
Integration tests.

These run the engine against a live Redis and are skipped unless
USE_REAL_REDIS is set:
- Index read-through and invalidation
- Restock, multi_get_all and tidy
"""
