# ==============================================================================
# Shared Test Fixtures
# ==============================================================================
"""
Pytest fixtures shared across all test modules.

Provides:
- A fakeredis server per test, plus a raw client for inspecting it
- A ConnectionPool whose drivers talk to that fakeredis server
- Connected drivers and ready stores built on top of it
"""

import fakeredis
import pytest

from cachestore.core.models import CacheDefinition
from cachestore.infrastructure.driver import ConnectionPool
from cachestore.store import RedisStore
from cachestore.utils.config import TuningSettings, get_settings


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    """Isolate every test from REDIS_* / CACHESTORE_* variables of the caller."""
    for name in (
        "REDIS_SERVER",
        "REDIS_AUTH_PASSWORD",
        "REDIS_DATABASE",
        "REDIS_TEST_SERVER",
        "CACHESTORE_UPDATE_TTL",
        "CACHESTORE_GC_FREQ",
        "DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def fake_server():
    """A clean in-memory Redis server for each test."""
    return fakeredis.FakeServer()


@pytest.fixture()
def fake_redis(fake_server):
    """A raw client on the fake server, for asserting on Redis state directly."""
    client = fakeredis.FakeRedis(server=fake_server, decode_responses=True)
    yield client
    client.flushall()
    client.close()


@pytest.fixture()
def client_factory(fake_server):
    """Client factory handing out fakeredis clients bound to the fake server."""

    def _factory(**kwargs):
        return fakeredis.FakeRedis(server=fake_server, db=kwargs.get("db", 0))

    return _factory


@pytest.fixture()
def pool(client_factory):
    """A ConnectionPool backed by fakeredis."""
    pool = ConnectionPool(client_factory=client_factory)
    yield pool
    pool.close_all()


@pytest.fixture()
def driver(pool):
    """A connected driver on database 0."""
    return pool.instance("localhost")


@pytest.fixture()
def make_store(pool):
    """Build ready stores against the fake server, initialised for a definition.

    Garbage collection on construction is disabled unless asked for.
    """

    def _make(definition: CacheDefinition | None = None, **configuration):
        configuration.setdefault("server", "localhost")
        store = RedisStore(
            "test",
            configuration,
            pool=pool,
            tuning=TuningSettings(gc_freq=0),
            debug=False,
        )
        if definition is not None:
            store.initialise(definition)
        return store

    return _make
