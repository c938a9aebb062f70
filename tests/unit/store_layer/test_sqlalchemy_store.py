"""
Unit Tests for SQLAlchemyRecordStore

Runs against an in-memory SQLite database through aiosqlite.
"""

from datetime import datetime
from unittest.mock import MagicMock

import pytest
from sqlalchemy import DateTime, String, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from pantry.core.exceptions import RecordStoreError
from pantry.engine import ModelOptions, StockedModel, stock_by
from pantry.infrastructure.monitoring import MetricsCollector
from pantry.stores.sqlalchemy import SQLAlchemyRecordStore
from tests.test_fixtures import PEOPLE


class Base(DeclarativeBase):
    pass


class Person(Base):
    __tablename__ = "people"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(50))
    nickname: Mapped[str] = mapped_column(String(50))
    team: Mapped[str | None] = mapped_column(String(50), nullable=True)
    joined_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)


@pytest.fixture
async def session_factory():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        session.add_all(Person(**person) for person in PEOPLE)
        session.add(Person(name="Ada", nickname="Ada", team=None))
        await session.commit()

    yield factory
    await engine.dispose()


@pytest.fixture
def sql_store(session_factory):
    return SQLAlchemyRecordStore(session_factory, Person)


@pytest.mark.unit
class TestQueries:
    """Test the RecordStore side."""

    async def test_find_by_ids(self, sql_store):
        found = await sql_store.find_by_ids([3, 1, 99])

        assert [record.id for record in found] == [1, 3]
        assert found[0].name == "Matthew"
        assert found[0].destroyed is False

    async def test_find_by_ids_empty(self, sql_store):
        assert await sql_store.find_by_ids([]) == []

    async def test_find_by_attribute_matches_none(self, sql_store):
        found = await sql_store.find_by_attribute("team", ["client", None])
        assert [record.name for record in found] == ["Kyle", "Ada"]

    async def test_find_by_attribute_applies_scope(self, sql_store):
        found = await sql_store.find_by_attribute(
            "team", ["backend"], scope=lambda stmt: stmt.where(Person.nickname != "Benji")
        )
        assert [record.id for record in found] == [1, 3]

    async def test_find_all(self, sql_store):
        assert [record.id for record in await sql_store.find_all()] == [1, 2, 3, 4, 5]

    async def test_pantry_attributes_are_columns(self, sql_store):
        [record] = await sql_store.find_by_ids([2])

        assert record.pantry_attributes() == {
            "id": 2,
            "name": "Kyle",
            "nickname": "Kyle",
            "team": "client",
            "joined_at": None,
        }

    async def test_database_errors_are_wrapped(self):
        factory = MagicMock()
        factory.return_value.__aenter__.return_value.execute.side_effect = OperationalError(
            "SELECT", {}, Exception("no such table")
        )
        store = SQLAlchemyRecordStore(factory, Person)

        with pytest.raises(RecordStoreError) as exc_info:
            await store.find_all()

        assert exc_info.value.details["operation"] == "find_all"
        assert exc_info.value.details["original_error"] == "OperationalError"


@pytest.mark.unit
class TestWriteHelpers:
    """Test records and change maps built from ORM state."""

    async def test_changes_from_history(self, session_factory, sql_store):
        async with session_factory() as session:
            kyle = (await session.execute(select(Person).where(Person.id == 2))).scalar_one()
            kyle.team = "backend"
            kyle.name = "Kyle"

            changes = sql_store.changes(kyle, ["team", "nickname", "name"])

        assert changes == {2: {"team": ("client", "backend")}}

    async def test_no_changes(self, session_factory, sql_store):
        async with session_factory() as session:
            kyle = await session.get(Person, 2)

            assert sql_store.changes(kyle, ["team"]) == {}

    async def test_deleted_instance_is_destroyed(self, session_factory, sql_store):
        async with session_factory() as session:
            kyle = await session.get(Person, 2)
            await session.delete(kyle)
            await session.commit()

            record = sql_store.record(kyle)

        assert record.destroyed is True
        assert record.nickname == "Kyle"


@pytest.mark.unit
class TestWithModel:
    """Drive a stocked model off the SQL store."""

    async def test_write_then_invalidate(self, session_factory, sql_store, settings, redis_client):
        people = StockedModel(
            "person",
            sql_store,
            ModelOptions(indices=(stock_by("team"),)),
            settings=settings,
            cache=redis_client,
            metrics=MetricsCollector(),
        )
        assert [p.id for p in await people.get_by("team", "client")] == [2]

        async with session_factory() as session:
            kyle = await session.get(Person, 2)
            kyle.team = "backend"
            changes = sql_store.changes(kyle, ["team"])
            await session.commit()
            record = sql_store.record(kyle)

        await people.invalidate(record, changes)

        assert await people.get_by("team", "client") == []
        assert [p.id for p in await people.get_by("team", "backend")] == [1, 2, 3, 4]

    async def test_datetime_columns_are_restored(self, session_factory, sql_store, settings, redis_client):
        joined = datetime(2024, 5, 1, 12, 30)
        async with session_factory() as session:
            kyle = await session.get(Person, 2)
            kyle.joined_at = joined
            await session.commit()

        assert sql_store.datetime_attributes() == ("joined_at",)

        people = StockedModel(
            "person",
            sql_store,
            ModelOptions(datetime_attributes=sql_store.datetime_attributes()),
            settings=settings,
            cache=redis_client,
            metrics=MetricsCollector(),
        )
        fresh = await people.get(2)
        cached = await people.get(2)

        assert fresh.joined_at == joined
        assert cached.joined_at == joined
