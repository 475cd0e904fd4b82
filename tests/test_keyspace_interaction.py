# ==============================================================================
# Tests for KeyspaceInteraction
# ==============================================================================
"""
Unit tests for the keyspace storage regime, run against fakeredis.

Tests cover:
- Keys written at top level with native TTL
- Sorted-set index scored with the construction timestamp
- TTL refresh on reads when enabled
- Purge (all, and by age) and garbage collection
- GC sampling on construction
"""

import time
from unittest.mock import MagicMock

import pytest

from cachestore.core.models import MISSING, CacheDefinition
from cachestore.infrastructure.interactions import KeyspaceInteraction

DEFINITION = CacheDefinition(id="phpunit/keyspace", ttl=60)
NO_TTL = CacheDefinition(id="phpunit/forever")


def _fixed_clock(value: float):
    return lambda: value


def _build(driver, definition=DEFINITION, now: float = 1_000_000, **kwargs):
    kwargs.setdefault("gc_frequency", 0)
    return KeyspaceInteraction(driver, definition, clock=_fixed_clock(now), **kwargs)


# ==============================================================================
# Writes and the index
# ==============================================================================


class TestWrites:
    """Tests for set/set_many and index maintenance."""

    def test_set_get_roundtrip(self, driver):
        interaction = _build(driver)
        assert interaction.set("k", {"nested": [1, 2]}) is True
        assert interaction.get("k") == {"nested": [1, 2]}

    def test_set_writes_top_level_key_with_ttl(self, driver, fake_redis):
        interaction = _build(driver)
        interaction.set("k", "v")
        assert fake_redis.exists("k")
        assert 0 < fake_redis.ttl("k") <= 60

    def test_set_without_ttl_has_no_expiry(self, driver, fake_redis):
        interaction = _build(driver, NO_TTL)
        interaction.set("k", "v")
        assert fake_redis.ttl("k") == -1

    def test_set_indexes_key_with_construction_time(self, driver, fake_redis):
        interaction = _build(driver, now=1234.9)
        interaction.set("k", "v")
        assert interaction.now == 1234
        assert fake_redis.zscore(DEFINITION.id, "k") == 1234

    def test_set_many_indexes_every_key(self, driver, fake_redis):
        interaction = _build(driver, now=50)
        assert interaction.set_many({"a": 1, "b": 2, "c": 3}) == 3
        assert fake_redis.zrange(DEFINITION.id, 0, -1, withscores=True) == [
            ("a", 50.0),
            ("b", 50.0),
            ("c", 50.0),
        ]

    def test_set_many_only_expires_when_refreshing(self, driver, fake_redis):
        _build(driver).set_many({"plain": 1})
        assert fake_redis.ttl("plain") == -1
        _build(driver, update_ttl=True).set_many({"refreshed": 1})
        assert 0 < fake_redis.ttl("refreshed") <= 60

    def test_failed_set_leaves_index_untouched(self):
        driver = MagicMock()
        driver.set.return_value = False
        driver.mset.return_value = False
        interaction = _build(driver)
        assert interaction.set("k", "v") is True
        assert interaction.set_many({"a": 1}) == 1
        driver.zadd.assert_not_called()

    def test_set_twice_keeps_value(self, driver):
        interaction = _build(driver)
        interaction.set("k", "v")
        interaction.set("k", "v")
        assert interaction.get("k") == "v"


# ==============================================================================
# Reads
# ==============================================================================


class TestReads:
    """Tests for get/get_many/has and TTL refresh."""

    def test_get_missing(self, driver):
        assert _build(driver).get("nope") is MISSING

    def test_get_many_preserves_order(self, driver):
        interaction = _build(driver)
        interaction.set_many({"x": "X", "z": "Z"})
        result = interaction.get_many(["z", "y", "x"])
        assert list(result) == ["z", "y", "x"]
        assert result == {"z": "Z", "y": MISSING, "x": "X"}

    def test_get_many_fetches_repeated_keys_once(self):
        driver = MagicMock()
        driver.mget.return_value = ["A", MISSING]
        result = _build(driver).get_many(["a", "b", "a"])
        driver.mget.assert_called_once_with(["a", "b"])
        assert list(result) == ["a", "b"]
        assert result == {"a": "A", "b": MISSING}

    def test_bulk_roundtrip(self, driver):
        interaction = _build(driver)
        values = {"k1": [1, 2], "k2": "two", "k3": {"three": 3}}
        interaction.set_many(values)
        assert interaction.get_many(list(values)) == values

    def test_has(self, driver):
        interaction = _build(driver)
        assert interaction.has("k") is False
        interaction.set("k", 0)
        assert interaction.has("k") is True

    def test_reads_refresh_ttl_when_enabled(self, driver, fake_redis):
        interaction = _build(driver, update_ttl=True)
        fake_redis.set("k", '"v"', ex=5)
        assert interaction.get("k") == "v"
        assert fake_redis.ttl("k") > 5
        fake_redis.expire("k", 5)
        interaction.get_many(["k"])
        assert fake_redis.ttl("k") > 5

    def test_reads_do_not_refresh_by_default(self, driver, fake_redis):
        interaction = _build(driver)
        fake_redis.set("k", '"v"', ex=5)
        interaction.get("k")
        interaction.get_many(["k"])
        assert fake_redis.ttl("k") <= 5

    def test_no_refresh_without_ttl(self):
        driver = MagicMock()
        driver.mget.return_value = [MISSING]
        interaction = _build(driver, NO_TTL, update_ttl=True)
        interaction.get("k")
        interaction.get_many(["k"])
        driver.expire.assert_not_called()

    def test_key_expires_after_ttl(self, driver):
        interaction = _build(driver, CacheDefinition(id="phpunit/short", ttl=1))
        interaction.set("k", "v")
        time.sleep(1.5)
        assert interaction.get("k") is MISSING


# ==============================================================================
# Deletes
# ==============================================================================


class TestDeletes:
    """Tests for delete/delete_many."""

    def test_delete_removes_key_and_index_entry(self, driver, fake_redis):
        interaction = _build(driver)
        interaction.set("k", "v")
        assert interaction.delete("k") is True
        assert interaction.has("k") is False
        assert interaction.get("k") is MISSING
        assert fake_redis.zscore(DEFINITION.id, "k") is None

    def test_delete_absent(self, driver):
        assert _build(driver).delete("k") is False

    def test_delete_many_returns_cardinality(self, driver, fake_redis):
        interaction = _build(driver)
        interaction.set_many({"a": 1, "b": 2, "c": 3})
        assert interaction.delete_many(["a", "c", "nonexistent"]) == 2
        assert interaction.get_many(["a", "b", "c"]) == {"a": MISSING, "b": 2, "c": MISSING}
        assert fake_redis.zrange(DEFINITION.id, 0, -1) == ["b"]

    def test_delete_many_empty(self):
        driver = MagicMock()
        assert _build(driver).delete_many([]) == 0
        driver.delete.assert_not_called()


# ==============================================================================
# Purge and garbage collection
# ==============================================================================


class TestPurge:
    """Tests for purge and gc."""

    def test_purge_removes_everything(self, driver, fake_redis):
        interaction = _build(driver)
        interaction.set_many({"a": 1, "b": 2})
        interaction.set("c", 3)
        assert interaction.purge() is True
        assert not any(interaction.has(key) for key in "abc")
        assert not fake_redis.exists(DEFINITION.id)

    def test_purge_by_age_is_inclusive(self, driver, fake_redis):
        _build(driver, now=100).set("old", 1)
        _build(driver, now=150).set("edge", 2)
        newer = _build(driver, now=200)
        newer.set("new", 3)
        newer.purge(150)
        assert newer.get_many(["old", "edge", "new"]) == {"old": MISSING, "edge": MISSING, "new": 3}
        assert fake_redis.zrange(DEFINITION.id, 0, -1) == ["new"]

    def test_purge_empty_index(self):
        driver = MagicMock()
        driver.zrangebyscore.return_value = []
        assert _build(driver).purge() is True
        driver.delete.assert_not_called()
        driver.zrem.assert_not_called()

    def test_gc_removes_entries_of_earlier_instances(self, driver, fake_redis):
        first = _build(driver, now=100)
        first.set("a", "A")
        second = _build(driver, now=200)
        second.gc()
        assert second.get("a") is MISSING
        assert fake_redis.zscore(DEFINITION.id, "a") is None

    def test_gc_spares_own_entries(self, driver):
        interaction = _build(driver, now=100)
        interaction.set("mine", 1)
        interaction.gc()
        assert interaction.get("mine") == 1

    def test_gc_drops_index_entries_of_expired_keys(self, driver, fake_redis):
        fake_redis.zadd(DEFINITION.id, {"expired": 10})
        _build(driver, now=200).gc()
        assert fake_redis.zcard(DEFINITION.id) == 0


class TestGcSampling:
    """Tests for the 1-in-N garbage collection on construction."""

    def test_gc_runs_when_sample_hits(self):
        driver = MagicMock()
        driver.zrangebyscore.return_value = []
        rng = MagicMock()
        rng.randint.return_value = 1
        KeyspaceInteraction(
            driver, DEFINITION, gc_frequency=500, clock=_fixed_clock(300), rng=rng
        )
        rng.randint.assert_called_once_with(0, 500)
        driver.zrangebyscore.assert_called_once_with(DEFINITION.id, 0, 299)

    def test_gc_skipped_when_sample_misses(self):
        driver = MagicMock()
        rng = MagicMock()
        rng.randint.return_value = 7
        KeyspaceInteraction(driver, DEFINITION, gc_frequency=500, rng=rng)
        driver.zrangebyscore.assert_not_called()

    def test_zero_frequency_disables_gc(self):
        driver = MagicMock()
        rng = MagicMock()
        KeyspaceInteraction(driver, DEFINITION, gc_frequency=0, rng=rng)
        rng.randint.assert_not_called()
        driver.zrangebyscore.assert_not_called()

    @pytest.mark.parametrize("frequency", [1, 3])
    def test_custom_frequency_bounds_sample(self, frequency):
        driver = MagicMock()
        rng = MagicMock()
        rng.randint.return_value = 0
        KeyspaceInteraction(driver, DEFINITION, gc_frequency=frequency, rng=rng)
        rng.randint.assert_called_once_with(0, frequency)
