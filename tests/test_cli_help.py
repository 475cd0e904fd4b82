# ==============================================================================
# Tests for CLI Commands
# ==============================================================================
"""
Tests that the cachestore CLI is wired up and its commands work.

Verifies that:
- Every command group exits with code 0 on --help and lists its subcommands
- status and config show report an unconfigured server
- store commands round-trip values through a fakeredis-backed pool

These tests use the real app from cachestore.app so that Typer introspects
every command signature.
"""

from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from typer.testing import CliRunner

from cachestore.app import app
from cachestore.utils.config import get_settings

runner = CliRunner()


# ==============================================================================
# Help
# ==============================================================================


class TestRootHelp:
    """Tests for the root `cachestore --help` output."""

    def test_exit_code(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0

    def test_description(self):
        result = runner.invoke(app, ["--help"])
        assert "Redis cache store CLI" in result.output

    def test_lists_all_subcommands(self):
        result = runner.invoke(app, ["--help"])
        for cmd in ["config", "status", "store"]:
            assert cmd in result.output, f"Missing command: {cmd}"


class TestStoreHelp:
    """Tests for `cachestore store --help`."""

    def test_lists_all_subcommands(self):
        result = runner.invoke(app, ["store", "--help"])
        assert result.exit_code == 0
        for cmd in ["get", "set", "delete", "has", "purge", "gc"]:
            assert cmd in result.output, f"Missing command: {cmd}"

    def test_set_options(self):
        result = runner.invoke(app, ["store", "set", "--help"])
        assert result.exit_code == 0
        assert "--definition" in result.output
        assert "--interaction" in result.output


# ==============================================================================
# Unconfigured
# ==============================================================================


class TestUnconfigured:
    """Commands run without REDIS_SERVER."""

    def test_status_json(self):
        result = runner.invoke(app, ["status", "--json"])
        assert result.exit_code == 0
        assert '"status": "not_configured"' in result.output

    def test_config_show_json(self):
        result = runner.invoke(app, ["config", "show", "--json"])
        assert result.exit_code == 0
        assert '"server": ""' in result.output

    def test_store_command_fails(self):
        result = runner.invoke(app, ["store", "get", "k"])
        assert result.exit_code == 1
        assert "not ready" in result.output


# ==============================================================================
# Store Commands
# ==============================================================================


@pytest.fixture()
def configured(monkeypatch, pool):
    """Point the CLI at the fakeredis-backed pool."""
    monkeypatch.setenv("REDIS_SERVER", "localhost")
    monkeypatch.setenv("CACHESTORE_GC_FREQ", "0")
    get_settings.cache_clear()
    monkeypatch.setattr("cachestore.store.get_connection_pool", lambda: pool)
    return pool


class TestStoreCommands:
    """Tests for the store command group against fakeredis."""

    def test_set_then_get(self, configured):
        result = runner.invoke(app, ["store", "set", "greeting", '"hello"'])
        assert result.exit_code == 0
        assert "greeting set" in result.output

        result = runner.invoke(app, ["store", "get", "greeting", "absent"])
        assert result.exit_code == 0
        assert '"hello"' in result.output
        assert "(missing)" in result.output

    def test_plain_text_value(self, configured):
        runner.invoke(app, ["store", "set", "word", "plain"])
        result = runner.invoke(app, ["store", "get", "word"])
        assert '"plain"' in result.output

    def test_has(self, configured):
        assert runner.invoke(app, ["store", "has", "k"]).exit_code == 1
        runner.invoke(app, ["store", "set", "k", "1"])
        assert runner.invoke(app, ["store", "has", "k"]).exit_code == 0

    def test_delete(self, configured):
        runner.invoke(app, ["store", "set", "k", "1"])
        result = runner.invoke(app, ["store", "delete", "k", "other"])
        assert result.exit_code == 0
        assert "Deleted 1 of 2 keys" in result.output

    def test_keyspace_definition(self, configured, fake_redis):
        result = runner.invoke(app, ["store", "set", "k", "1", "--ttl", "60"])
        assert result.exit_code == 0
        assert fake_redis.exists("k") == 1
        assert 0 < fake_redis.ttl("k") <= 60

    def test_purge_requires_confirmation(self, configured):
        runner.invoke(app, ["store", "set", "k", "1"])
        result = runner.invoke(app, ["store", "purge"], input="n\n")
        assert result.exit_code == 1
        assert runner.invoke(app, ["store", "has", "k"]).exit_code == 0

    def test_purge(self, configured):
        runner.invoke(app, ["store", "set", "k", "1"])
        result = runner.invoke(app, ["store", "purge", "--yes"])
        assert result.exit_code == 0
        assert runner.invoke(app, ["store", "has", "k"]).exit_code == 1

    def test_gc(self, configured):
        result = runner.invoke(app, ["store", "gc", "--ttl", "60"])
        assert result.exit_code == 0
        assert "Garbage collected" in result.output

    def test_gc_on_hash_storage_warns(self, configured):
        result = runner.invoke(app, ["store", "gc"])
        assert result.exit_code == 0
        assert "nothing to garbage collect" in result.output
        assert "Garbage collected" not in result.output

    def test_status_unreachable_when_stats_fail(self, configured):
        driver = configured.instance("localhost")
        driver.client.info = MagicMock(side_effect=RedisConnectionError("reset"))
        result = runner.invoke(app, ["status", "--json"])
        assert result.exit_code == 0
        assert '"status": "unreachable"' in result.output
        assert driver.client.info.call_count == 3

    def test_status_connected(self, configured, monkeypatch):
        monkeypatch.setattr(
            "cachestore.cli.status._redis_stats_with_retry", lambda store: (3, "1.00 MB")
        )
        result = runner.invoke(app, ["status", "--json"])
        assert result.exit_code == 0
        assert '"status": "connected"' in result.output
