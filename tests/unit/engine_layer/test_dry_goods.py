"""
Unit Tests for Snapshots

Tests DryGood and the orjson snapshot codec.
"""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

import orjson
import pytest

from pantry.engine import DryGood, SnapshotCodec
from pantry.stores import MemoryRecord
from tests.test_fixtures import PeopleFactory


@pytest.mark.unit
class TestDryGood:
    """Test suite for DryGood."""

    def test_attributes_become_instance_attributes(self):
        good = DryGood({"id": 1, "name": "Matthew"})

        assert good.id == 1
        assert good.name == "Matthew"
        assert good.attributes() == {"id": 1, "name": "Matthew"}

    def test_to_dict_is_not_wrapped(self):
        good = DryGood({"id": 1, "name": "Matthew"})
        assert good.to_dict() == {"id": 1, "name": "Matthew"}

    def test_equality_by_attributes(self):
        assert DryGood({"id": 1}) == DryGood(id=1)
        assert DryGood({"id": 1}) != DryGood({"id": 2})
        assert DryGood({"id": 1}) != {"id": 1}

    def test_missing_attribute_raises(self):
        with pytest.raises(AttributeError):
            DryGood({"id": 1}).nickname


@pytest.mark.unit
class TestSnapshotCodec:
    """Test suite for SnapshotCodec."""

    def test_round_trip_restores_datetimes(self):
        created = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        record = MemoryRecord(1, name="Matthew", created_at=created)
        codec = SnapshotCodec(DryGood, datetime_attributes=("created_at",))

        snapshot = codec.loads(codec.dumps(record))

        assert snapshot.created_at == created
        assert isinstance(snapshot.created_at, datetime)

    def test_undeclared_datetimes_stay_strings(self):
        record = MemoryRecord(1, seen_at=datetime(2024, 5, 1, tzinfo=timezone.utc))
        codec = SnapshotCodec(DryGood)

        assert isinstance(codec.loads(codec.dumps(record)).seen_at, str)

    def test_extra_types_are_serialized(self):
        record = MemoryRecord(
            1,
            balance=Decimal("10.50"),
            tags={"b", "a"},
            token=UUID("12345678-1234-5678-1234-567812345678"),
        )

        payload = orjson.loads(SnapshotCodec(DryGood).dumps(record))

        assert payload["balance"] == "10.50"
        assert payload["tags"] == ["a", "b"]
        assert payload["token"] == "12345678-1234-5678-1234-567812345678"

    def test_unknown_types_raise(self):
        record = MemoryRecord(1, blob=object())

        with pytest.raises(TypeError):
            SnapshotCodec(DryGood).dumps(record)

    def test_destroyed_flag_is_not_cached(self):
        payload = orjson.loads(SnapshotCodec(DryGood).dumps(MemoryRecord(1, name="Kyle")))
        assert "destroyed" not in payload


@pytest.mark.unit
class TestCustomSnapshotType:
    """Test the per-model snapshot factory."""

    async def test_model_returns_factory_output(self, store, settings, redis_client):
        class Person(DryGood):
            def greeting(self):
                return f"Hi {self.nickname}"

        model = PeopleFactory.model(store, settings, redis_client, dry_good_type=Person)

        fresh = await model.get(1)
        cached = await model.get(1)

        assert isinstance(fresh, Person)
        assert isinstance(cached, Person)
        assert cached.greeting() == "Hi Matt"

    async def test_plain_dict_factory(self, store, settings, redis_client):
        model = PeopleFactory.model(store, settings, redis_client, dry_good_type=dict)

        person = await model.get(2)

        assert person["name"] == "Kyle"
        assert isinstance(person["created_at"], datetime)
