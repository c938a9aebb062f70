"""
People Test Factory

Builds the typical model used across the engine tests: people with a unique
nickname index and a non-unique team index.
"""

from typing import Any

from pantry.core.config import PantrySettings
from pantry.engine import DryGood, ModelOptions, StockedModel, stock_by
from pantry.infrastructure.monitoring import MetricsCollector
from pantry.stores import MemoryRecord, MemoryRecordStore

PEOPLE = [
    {"name": "Matthew", "nickname": "Matt", "team": "backend"},
    {"name": "Kyle", "nickname": "Kyle", "team": "client"},
    {"name": "Olalere", "nickname": "Lere", "team": "backend"},
    {"name": "Benjamin", "nickname": "Benji", "team": "backend"},
]

MODEL_NAME = "TypicalModel"


class FrozenClock:
    """Epoch clock the tests move by hand."""

    def __init__(self, now: float = 1_700_000_000):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class PeopleFactory:
    """Factory for people stores, models and expected snapshots."""

    @staticmethod
    def store(people: list[dict[str, Any]] | None = None) -> MemoryRecordStore:
        return MemoryRecordStore(PEOPLE if people is None else people)

    @staticmethod
    def options(**overrides) -> ModelOptions:
        defaults = {
            "indices": (stock_by("nickname", unique=True), stock_by("team")),
            "datetime_attributes": ("created_at", "updated_at"),
        }
        defaults.update(overrides)
        return ModelOptions(**defaults)

    @staticmethod
    def model(
        store: MemoryRecordStore,
        settings: PantrySettings,
        cache,
        clock: FrozenClock | None = None,
        **option_overrides,
    ) -> StockedModel:
        return StockedModel(
            MODEL_NAME,
            store,
            PeopleFactory.options(**option_overrides),
            settings=settings,
            cache=cache,
            clock=clock or FrozenClock(),
            metrics=MetricsCollector(),
        )

    @staticmethod
    def snapshot(record: MemoryRecord) -> DryGood:
        """What a cache read of record is expected to return."""
        return DryGood(record.pantry_attributes())

    @staticmethod
    def snapshots(records: list[MemoryRecord]) -> list[DryGood]:
        return [PeopleFactory.snapshot(record) for record in records]
