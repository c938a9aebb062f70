"""
Unit Tests for PrimaryCache

Covers batched writes, per-key TTLs, the pre-serialization hook and
force-miss reads.
"""

from unittest.mock import MagicMock, patch

import pytest

from tests.test_fixtures import PeopleFactory


@pytest.mark.unit
class TestMultiStore:
    """Test suite for PrimaryCache.multi_store."""

    async def test_writes_every_record_with_ttl(self, people, store, fake_redis):
        records = await store.find_all()

        stored = await people.primary.multi_store(records)

        assert stored == {r.id: PeopleFactory.snapshot(r) for r in records}
        for record in records:
            key = people.keys.primary_key(record.id)
            assert await fake_redis.exists(key) == 1
            assert await fake_redis.ttl(key) == 3600

    async def test_model_ttl_overrides_global(self, store, settings, redis_client, fake_redis):
        model = PeopleFactory.model(store, settings, redis_client, key_ttl_s=60)

        await model.primary.multi_store(await store.find_by_ids([1]))

        assert await fake_redis.ttl(model.keys.primary_key(1)) == 60

    async def test_before_serialize_called_once_per_batch(self, people, store):
        records = await store.find_all()

        with patch.object(store, "before_serialize", new=MagicMock()) as hook:
            await people.primary.multi_store(records)

        hook.assert_called_once()
        assert [r.id for r in hook.call_args.args[0]] == [1, 2, 3, 4]

    async def test_skip_deserialization_returns_none(self, people, store, fake_redis):
        result = await people.primary.multi_store(
            await store.find_by_ids([2]), skip_deserialization=True
        )

        assert result is None
        assert await fake_redis.exists(people.keys.primary_key(2)) == 1

    async def test_empty_input_touches_nothing(self, people, store):
        with patch.object(store, "before_serialize", new=MagicMock()) as hook:
            assert await people.primary.multi_store([]) == {}
            assert await people.primary.multi_store([], skip_deserialization=True) is None

        hook.assert_not_called()

    async def test_restockable_model_adds_to_all_index(self, restockable_people, store, fake_redis, clock):
        await restockable_people.primary.multi_store(await store.find_by_ids([1, 2]))

        key = restockable_people.all_index.key
        assert await fake_redis.zscore(key, "1") == clock.now + 3600
        assert await fake_redis.zscore(key, "2") == clock.now + 3600

    async def test_plain_model_has_no_all_index(self, people, store, fake_redis):
        await people.primary.multi_store(await store.find_all())

        assert people.all_index is None
        assert await fake_redis.exists(people.keys.all_index_key()) == 0


@pytest.mark.unit
class TestMultiFetch:
    """Test suite for PrimaryCache.multi_fetch."""

    async def test_absent_ids_are_none(self, people, store):
        await people.primary.multi_store(await store.find_by_ids([1]))

        fetched = await people.primary.multi_fetch([1, 2])

        assert fetched[1] == PeopleFactory.snapshot(store._records[1])
        assert fetched[2] is None

    async def test_force_miss_skips_redis(self, store, force_miss_settings, redis_client):
        model = PeopleFactory.model(store, force_miss_settings, redis_client)
        await model.primary.multi_store(await store.find_all())

        with patch.object(redis_client, "get_many") as get_many:
            fetched = await model.primary.multi_fetch([1, 2])

        assert fetched == {1: None, 2: None}
        get_many.assert_not_called()


@pytest.mark.unit
class TestDelete:
    """Test suite for PrimaryCache.delete."""

    async def test_deletes_each_key_once(self, people, store, fake_redis):
        await people.primary.multi_store(await store.find_by_ids([1, 2]))

        deleted = await people.primary.delete([1, "1", 2, 3])

        assert deleted == 2
        assert await fake_redis.exists(people.keys.primary_key(1)) == 0

    async def test_empty_delete(self, people):
        assert await people.primary.delete([]) == 0
