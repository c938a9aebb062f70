"""
Core Module

Foundational components: configuration, logging, exceptions and protocols.
"""

from .config import PantrySettings, load_settings
from .exceptions import (
    CacheConnectionError,
    CacheError,
    CacheKeyError,
    ConfigurationError,
    PantryError,
    RecordStoreError,
)
from .logging import get_logger, log_stage, setup_logging

__all__ = [
    # Config
    "PantrySettings",
    "load_settings",
    # Exceptions
    "PantryError",
    "ConfigurationError",
    "CacheError",
    "CacheConnectionError",
    "CacheKeyError",
    "RecordStoreError",
    # Logging
    "get_logger",
    "log_stage",
    "setup_logging",
]
