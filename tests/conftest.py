"""
Pytest Configuration and Shared Test Fixtures

Fixtures here are available to every test module. Redis is fakeredis with
one FakeServer per test, so tests never share cache state.
"""

import os
import sys

import fakeredis
import pytest

# Add project root to sys.path so tests.test_fixtures is importable
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from pantry.core.config import load_settings  # noqa: E402
from pantry.infrastructure.cache import RedisClient  # noqa: E402
from tests.test_fixtures import FrozenClock, PeopleFactory  # noqa: E402


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def settings():
    """Settings with the default namespace and a short TTL."""
    return load_settings(
        GLOBAL_KEY_PREFIX="pantry",
        GLOBAL_KEY_VERSION=1,
        GLOBAL_KEY_TTL_S=3600,
        FORCE_CACHE_MISSES=False,
    )


@pytest.fixture
def force_miss_settings():
    return load_settings(GLOBAL_KEY_TTL_S=3600, FORCE_CACHE_MISSES=True)


@pytest.fixture
def clock():
    return FrozenClock()


# ============================================================================
# Redis Fixtures
# ============================================================================


@pytest.fixture
async def fake_redis():
    """A fakeredis client on a private server."""
    client = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def redis_client(settings, fake_redis):
    """RedisClient wrapping the fakeredis client."""
    return RedisClient(settings, client=fake_redis)


# ============================================================================
# Model Fixtures
# ============================================================================


@pytest.fixture
def store():
    """Memory store seeded with Matt (1), Kyle (2), Lere (3) and Benji (4)."""
    return PeopleFactory.store()


@pytest.fixture
def people(store, settings, redis_client, clock):
    """The typical model: unique nickname index, non-unique team index."""
    return PeopleFactory.model(store, settings, redis_client, clock)


@pytest.fixture
def restockable_people(store, settings, redis_client, clock):
    return PeopleFactory.model(store, settings, redis_client, clock, restock=True)


# ============================================================================
# Environment-Based Integration Toggles
# ============================================================================


@pytest.fixture(scope="session")
def use_real_redis():
    """Check if a real Redis should be used for integration tests."""
    return os.getenv("USE_REAL_REDIS", "0").lower() in ("1", "true", "yes")
