# ==============================================================================
# Tests for Server String Parsing
# ==============================================================================
"""
Unit tests for parse_server().

Tests cover:
- Positional fields and their defaults
- Persistent id handling with persistent connections on and off
- Invalid numeric fields
"""

import pytest

from cachestore.core.exceptions import MisconfigurationError
from cachestore.utils.server import DEFAULT_PERSISTENT_ID, ServerAddress, parse_server


class TestPositions:
    """Tests for the positional fields."""

    def test_empty(self):
        address = parse_server("")
        assert address == ServerAddress()
        assert address.is_configured is False

    def test_none(self):
        assert parse_server(None).is_configured is False

    def test_host_only(self):
        assert parse_server("127.0.0.1") == ServerAddress(host="127.0.0.1", port=6379)

    def test_host_and_port(self):
        address = parse_server("redis.local:6380")
        assert address.host == "redis.local"
        assert address.port == 6380
        assert address.timeout is None

    def test_timeout(self):
        assert parse_server("h:6379:2.5").timeout == 2.5

    def test_retry_interval(self):
        address = parse_server("h:6379:1:ignored:250")
        assert address.retry_interval == 250
        assert address.persistent_id is None

    def test_empty_positions_use_defaults(self):
        address = parse_server("h::")
        assert address.port == 6379
        assert address.timeout is None

    def test_missing_host(self):
        assert parse_server(":6379").is_configured is False

    def test_unix_socket(self):
        assert parse_server("/tmp/redis.sock").host == "/tmp/redis.sock"


class TestPersistentId:
    """Tests for position 3, which only counts with persistent connections."""

    def test_ignored_without_persistent_connection(self):
        assert parse_server("h:6379:1:web").persistent_id is None

    def test_read_with_persistent_connection(self):
        assert parse_server("h:6379:1:web", persistent_connection=True).persistent_id == "web"

    def test_read_alongside_retry_interval(self):
        address = parse_server("h:6379:1:web:100", persistent_connection=True)
        assert address.persistent_id == "web"
        assert address.retry_interval == 100

    def test_default_when_absent(self):
        address = parse_server("h", persistent_connection=True)
        assert address.persistent_id == DEFAULT_PERSISTENT_ID


class TestInvalid:
    """Tests for non-numeric fields."""

    @pytest.mark.parametrize("server", ["h:port", "h:6379:soon", "h:6379:1:id:often"])
    def test_raises(self, server):
        with pytest.raises(MisconfigurationError):
            parse_server(server)
