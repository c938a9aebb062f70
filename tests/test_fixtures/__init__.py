"""
Test Fixtures Package

Shared test utilities and helpers for consistent testing across all modules.
"""

from .people_factory import MODEL_NAME, PEOPLE, FrozenClock, PeopleFactory

__all__ = ["MODEL_NAME", "PEOPLE", "FrozenClock", "PeopleFactory"]
