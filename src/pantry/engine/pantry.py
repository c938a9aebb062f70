"""
Pantry - registry of stocked models sharing one cache backend.

Usage:
    async with Pantry(load_settings()) as pantry:
        users = pantry.stock("user", store, ModelOptions(restock=True))
        everyone = await users.multi_get_all()
        await pantry.tidy_all()
"""

import time
from collections.abc import Callable
from typing import Any

from pantry.core.config.settings import PantrySettings, load_settings
from pantry.core.exceptions import ConfigurationError
from pantry.core.interfaces import CacheBackend, RecordStore
from pantry.core.logging import get_logger
from pantry.engine.options import ModelOptions
from pantry.engine.stocked import StockedModel
from pantry.infrastructure.cache import RedisClient
from pantry.infrastructure.monitoring import MetricsCollector, get_metrics_collector

logger = get_logger(__name__)


class Pantry:
    """
    Owns the cache backend and every StockedModel built on it.

    Args:
        settings: Process configuration (default: load_settings())
        cache: Cache backend (default: a RedisClient on settings.REDIS_URL)
        clock: Epoch-seconds clock used for the all-records index
        metrics: Metrics collector (default: the process-wide one)
    """

    def __init__(
        self,
        settings: PantrySettings | None = None,
        cache: CacheBackend | None = None,
        clock: Callable[[], float] = time.time,
        metrics: MetricsCollector | None = None,
    ):
        self.settings = settings or load_settings()
        self.cache = cache if cache is not None else RedisClient(self.settings)
        self._clock = clock
        self._metrics = metrics or get_metrics_collector()
        self._models: dict[str, StockedModel] = {}

    async def __aenter__(self) -> "Pantry":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()

    async def connect(self) -> None:
        await self.cache.connect()

    async def disconnect(self) -> None:
        await self.cache.disconnect()

    # -------------------------------------------------------------------------
    # Registry
    # -------------------------------------------------------------------------

    def stock(
        self, name: str, store: RecordStore, options: ModelOptions | None = None
    ) -> StockedModel:
        """
        Register a model.

        Raises:
            ConfigurationError: If name is already stocked
        """
        if name in self._models:
            raise ConfigurationError(f"Model '{name}' is already stocked", model=name)

        model = StockedModel(
            name,
            store,
            options,
            settings=self.settings,
            cache=self.cache,
            clock=self._clock,
            metrics=self._metrics,
        )
        self._models[name] = model
        logger.info(
            "Model stocked",
            model=name,
            namespace=model.keys.namespace,
            restock=model.restockable,
            indices=[spec.attribute for spec in model.options.indices],
        )
        return model

    def __getitem__(self, name: str) -> StockedModel:
        try:
            return self._models[name]
        except KeyError:
            raise ConfigurationError(f"Model '{name}' is not stocked", model=name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._models

    def __iter__(self):
        return iter(self._models.values())

    def __len__(self) -> int:
        return len(self._models)

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    async def restock_all(self) -> dict[str, dict[Any, Any]]:
        """Restock every restockable model; returns name -> restocked records."""
        restocked = {}
        for model in self._models.values():
            if model.restockable:
                restocked[model.name] = await model.restock()
        return restocked

    async def tidy_all(self) -> dict[str, int]:
        """Prune every all-records index; returns name -> members removed."""
        return {model.name: await model.tidy() for model in self._models.values()}

    async def health_check(self) -> dict[str, Any]:
        health = await self.cache.health_check()
        health["models"] = sorted(self._models)
        return health
