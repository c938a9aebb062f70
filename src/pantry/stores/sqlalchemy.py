"""
SQLAlchemy Record Store

Async SQLAlchemy 2.x RecordStore over one mapped model class. Each query runs
in its own session from the given async_sessionmaker.

Index scopes are Select -> Select callables:

    stock_by("team", scope=lambda stmt: stmt.where(Person.nickname != "Benji"))

Snapshots restore DateTime columns as datetimes when the model is stocked with

    ModelOptions(datetime_attributes=store.datetime_attributes())

Invalidation after a write:

    changes = store.changes(person, ["team"])      # before flush
    await session.commit()
    await people.invalidate(store.record(person), changes)
"""

from collections.abc import Callable, Iterable, Sequence
from typing import Any

from sqlalchemy import DateTime, Select, inspect, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pantry.core.config.constants import Stage
from pantry.core.exceptions import RecordStoreError
from pantry.core.logging import get_logger

logger = get_logger(__name__)


class SQLAlchemyRecord:
    """
    A mapped instance seen as a StockedRecord.

    Column values are captured when the record is built, so the record stays
    readable after its session is gone. Attribute access falls through to
    the captured columns.
    """

    def __init__(self, instance: Any, id_attribute: str = "id", destroyed: bool | None = None):
        state = inspect(instance)
        self.instance = instance
        self._attributes = {
            column.key: getattr(instance, column.key) for column in state.mapper.column_attrs
        }
        self.id = self._attributes[id_attribute]
        self.destroyed = (state.deleted or state.was_deleted) if destroyed is None else destroyed

    def __getattr__(self, name: str) -> Any:
        attributes = self.__dict__.get("_attributes", {})
        if name in attributes:
            return attributes[name]
        raise AttributeError(name)

    def pantry_attributes(self) -> dict[str, Any]:
        return dict(self._attributes)

    def __repr__(self) -> str:
        return f"<SQLAlchemyRecord {type(self.instance).__name__} id={self.id!r}>"


class SQLAlchemyRecordStore:
    """
    RecordStore backed by a SQLAlchemy model.

    Args:
        session_factory: async_sessionmaker producing AsyncSessions
        model: Mapped class
        id_attribute: Primary key attribute name
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        model: type,
        id_attribute: str = "id",
    ):
        self._session_factory = session_factory
        self.model = model
        self.id_attribute = id_attribute

    @property
    def _id_column(self):
        return getattr(self.model, self.id_attribute)

    def record(self, instance: Any, destroyed: bool | None = None) -> SQLAlchemyRecord:
        return SQLAlchemyRecord(instance, self.id_attribute, destroyed)

    def datetime_attributes(self) -> tuple[str, ...]:
        """
        Mapped attributes backed by DateTime columns, for
        ModelOptions(datetime_attributes=store.datetime_attributes()).
        """
        return tuple(
            prop.key
            for prop in inspect(self.model).column_attrs
            if any(isinstance(column.type, DateTime) for column in prop.columns)
        )

    def changes(
        self, instance: Any, attributes: Iterable[str]
    ) -> dict[Any, dict[str, tuple[Any, Any]]]:
        """
        Changes map for instance from its pending attribute history.

        Must be called before the session flushes, history is reset on flush.

        Returns:
            {id: {attribute: (old, new)}} for attributes with pending changes
        """
        state = inspect(instance)
        diff = {}
        for attribute in attributes:
            history = state.attrs[attribute].history
            if not history.has_changes():
                continue
            old = history.deleted[0] if history.deleted else None
            new = history.added[0] if history.added else None
            if old != new:
                diff[attribute] = (old, new)
        id = getattr(instance, self.id_attribute)
        return {id: diff} if diff else {}

    async def _fetch(self, operation: str, stmt: Select) -> list[SQLAlchemyRecord]:
        try:
            async with self._session_factory() as session:
                instances = (await session.execute(stmt)).scalars().all()
                return [self.record(instance, destroyed=False) for instance in instances]
        except SQLAlchemyError as e:
            logger.error(
                "Record store query failed",
                stage=Stage.STORE_QUERY.value,
                table=getattr(self.model, "__tablename__", self.model.__name__),
                operation=operation,
                error=str(e),
            )
            raise RecordStoreError.from_exception(
                e,
                message=f"Record store {operation} failed: {e}",
                operation=operation,
            ) from e

    async def find_by_ids(self, ids: Sequence[Any]) -> list[SQLAlchemyRecord]:
        ids = list(ids)
        if not ids:
            return []
        stmt = select(self.model).where(self._id_column.in_(ids)).order_by(self._id_column)
        return await self._fetch("find_by_ids", stmt)

    async def find_by_attribute(
        self,
        attribute: str,
        values: Sequence[Any],
        scope: Callable[[Select], Select] | None = None,
    ) -> list[SQLAlchemyRecord]:
        column = getattr(self.model, attribute)
        present = [value for value in values if value is not None]

        clauses = []
        if present:
            clauses.append(column.in_(present))
        if len(present) != len(values):
            clauses.append(column.is_(None))
        if not clauses:
            return []

        stmt = select(self.model).where(or_(*clauses))
        if scope is not None:
            stmt = scope(stmt)
        return await self._fetch("find_by_attribute", stmt.order_by(self._id_column))

    async def find_all(self) -> list[SQLAlchemyRecord]:
        return await self._fetch("find_all", select(self.model).order_by(self._id_column))

    def before_serialize(self, records: Iterable[SQLAlchemyRecord]) -> None:
        """Override to precompute derived columns for a batch about to be cached."""
