# ==============================================================================
# Redis Cache Store
# ==============================================================================
"""
Cache store facade handed to the host caching framework.

A RedisStore is built from a store configuration, borrows a driver from
the connection pool and, once initialised with a cache definition, forwards
every operation to the interaction chosen for that definition.

A store that is not ready (nothing configured, bad server string, server
unreachable, authentication rejected) never talks to Redis: every operation
returns its neutral value instead. Errors raised while talking to a ready
server propagate to the host.
"""

import importlib.util
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from cachestore.core.exceptions import AuthenticationFailedError, MisconfigurationError
from cachestore.core.models import (
    MISSING,
    CacheDefinition,
    KeyValue,
    StoreConfiguration,
    StoreFeature,
    StoreMode,
)
from cachestore.infrastructure.driver import ConnectionPool, RedisDriver, get_connection_pool
from cachestore.infrastructure.interactions import create_interaction, select_interaction_type
from cachestore.utils.config import Settings, TuningSettings, get_settings
from cachestore.utils.server import ServerAddress, parse_server

logger = logging.getLogger(__name__)


def store_configuration_from_settings(settings: Settings | None = None) -> StoreConfiguration:
    """Build a store configuration from the REDIS_* settings."""
    settings = settings or get_settings()
    return StoreConfiguration(
        server=settings.redis.server,
        persistent_connection=settings.redis.persistent_connection,
        auth_password=settings.redis.auth_password,
        database=settings.redis.database,
    )


class RedisStore:
    """
    Redis implementation of a host cache store.

    Supports the application and session modes and guarantees data: once
    written, values are only lost to an explicit delete, a purge or TTL expiry.
    """

    SUPPORTED_MODES = frozenset({StoreMode.APPLICATION, StoreMode.SESSION})
    SUPPORTED_FEATURES = frozenset({StoreFeature.DATA_GUARANTEE})

    def __init__(
        self,
        name: str,
        configuration: StoreConfiguration | Mapping[str, Any] | None = None,
        pool: ConnectionPool | None = None,
        tuning: TuningSettings | None = None,
        debug: bool | None = None,
    ):
        """
        Initialize the store and connect when a server is configured.

        Args:
            name: Name of this store instance
            configuration: StoreConfiguration or the raw form mapping
            pool: Connection pool (default: process-wide pool)
            tuning: Keyspace interaction knobs (default: from settings)
            debug: PING the server during construction (default: from settings)
        """
        settings = get_settings()
        self._name = name
        self._pool = pool
        self._tuning = tuning or settings.tuning
        self._debug = settings.debug if debug is None else debug
        if configuration is None:
            configuration = StoreConfiguration()
        elif not isinstance(configuration, StoreConfiguration):
            configuration = StoreConfiguration.model_validate(dict(configuration))
        self._configuration = configuration

        self._address = ServerAddress()
        self._connection: RedisDriver | None = None
        self._definition: CacheDefinition | None = None
        self._interaction = None
        self._is_ready = False
        self._is_initialised = False

        if not configuration.server:
            logger.debug("Store %s has no server configured", name)
            return
        try:
            self._address = parse_server(configuration.server, configuration.persistent_connection)
        except MisconfigurationError as exc:
            logger.warning("Store %s is misconfigured: %s", name, exc)
            return
        if not self._address.is_configured:
            logger.warning("Store %s has no host in server string '%s'", name, configuration.server)
            return

        self._is_ready = self._ensure_connection_ready()
        if self._is_ready and self._debug:
            self._is_ready = self._connection.ping()

    # ==========================================================================
    # Capabilities
    # ==========================================================================

    @staticmethod
    def are_requirements_met() -> bool:
        """Whether the Redis client library is installed."""
        return importlib.util.find_spec("redis") is not None

    @classmethod
    def is_supported_mode(cls, mode: StoreMode | str) -> bool:
        """Whether the store can serve a cache mode."""
        return StoreMode(mode) in cls.SUPPORTED_MODES

    @classmethod
    def get_supported_modes(cls) -> frozenset[StoreMode]:
        return cls.SUPPORTED_MODES

    @classmethod
    def get_supported_features(cls) -> frozenset[StoreFeature]:
        return cls.SUPPORTED_FEATURES

    @staticmethod
    def config_get_configuration_array(data: Mapping[str, Any]) -> dict[str, Any]:
        """Extract the stored configuration from submitted form data."""
        configuration = {"server": data.get("server", "")}
        for key in ("persistentconnection", "authpassword", "database", "interaction"):
            if data.get(key):
                configuration[key] = data[key]
        return configuration

    @classmethod
    def initialise_test_instance(
        cls, definition: CacheDefinition, pool: ConnectionPool | None = None
    ) -> "RedisStore | None":
        """
        Build an initialised store against the configured test server.

        Returns:
            RedisStore, or None when no test server is configured
        """
        if not cls.are_requirements_met():
            return None
        test_server = get_settings().redis.test_server
        if not test_server:
            return None
        store = cls("Test redis", {"server": test_server}, pool=pool)
        store.initialise(definition)
        return store

    # ==========================================================================
    # Lifecycle
    # ==========================================================================

    def _ensure_connection_ready(self) -> bool:
        if self._connection is None:
            if self._pool is None:
                self._pool = get_connection_pool()
            self._connection = self._pool.instance(
                self._address.host,
                self._address.port,
                self._configuration.database,
                self._address.timeout,
                self._address.persistent_id,
                self._address.retry_interval,
            )
            if self._connection.is_connected and self._configuration.auth_password:
                try:
                    self._connection.authenticate(self._configuration.auth_password)
                except AuthenticationFailedError:
                    self._pool.release(self._connection)
        return self._connection.is_connected

    @property
    def name(self) -> str:
        return self._name

    def my_name(self) -> str:
        """Name of this store instance."""
        return self._name

    @property
    def configuration(self) -> StoreConfiguration:
        return self._configuration

    @property
    def address(self) -> ServerAddress:
        return self._address

    @property
    def connection(self) -> RedisDriver | None:
        """The driver borrowed from the pool, if any."""
        return self._connection

    @property
    def definition(self) -> CacheDefinition | None:
        return self._definition

    @property
    def interaction(self):
        """The interaction serving the current definition, if any."""
        return self._interaction

    def is_ready(self) -> bool:
        """Whether the store is connected and can serve requests."""
        return self._is_ready

    def is_initialised(self) -> bool:
        """Whether initialise() has been called."""
        return self._is_initialised

    def initialise(self, definition: CacheDefinition) -> None:
        """
        Bind the store to a cache definition.

        Definitions with a TTL get keyspace storage, others hash storage,
        unless the configuration forces one.

        Args:
            definition: Cache definition served by this store
        """
        self._definition = definition
        self._is_initialised = True
        if not self._is_ready:
            logger.debug("Store %s is not ready; %s will not reach Redis", self._name, definition.id)
            return
        interaction_type = select_interaction_type(definition, self._configuration.interaction)
        self._interaction = create_interaction(
            interaction_type,
            self._connection,
            definition,
            update_ttl=self._tuning.update_ttl,
            gc_frequency=self._tuning.gc_freq,
        )
        logger.debug(
            "Store %s serves %s with %s storage", self._name, definition.id, interaction_type.value
        )

    def ping(self) -> bool:
        """Check the server answers. Never raises."""
        if self._connection is None:
            return False
        return self._connection.ping()

    def instance_deleted(self) -> None:
        """Purge this store's entries and release its connection."""
        if not self._address.is_configured:
            return
        if self._ensure_connection_ready() and self._interaction is not None:
            self._interaction.purge()
        self._pool.release(self._connection)
        self._connection = None
        self._interaction = None
        self._is_ready = False

    # ==========================================================================
    # Cache Operations
    # ==========================================================================

    def _unavailable(self, operation: str) -> bool:
        if self._interaction is None:
            logger.debug("Store %s skipped %s: not ready or not initialised", self._name, operation)
            return True
        return False

    def get(self, key: str) -> Any:
        """Get a value, or MISSING."""
        if self._unavailable("get"):
            return MISSING
        return self._interaction.get(key)

    def get_many(self, keys: Iterable[str]) -> dict[str, Any]:
        """Get several values; every distinct key appears once, in first-seen order."""
        keys = list(keys)
        if self._unavailable("get_many"):
            return {key: MISSING for key in keys}
        return self._interaction.get_many(keys)

    def set(self, key: str, value: Any) -> bool:
        """Store a value. Returns True on success."""
        if self._unavailable("set"):
            return False
        return self._interaction.set(key, value)

    def set_many(self, records: Iterable[KeyValue | Mapping[str, Any]]) -> int:
        """
        Store several {key, value} records.

        Args:
            records: KeyValue instances or mappings with "key" and "value"

        Returns:
            Number of entries accepted
        """
        values: dict[str, Any] = {}
        for record in records:
            if isinstance(record, KeyValue):
                values[record.key] = record.value
            else:
                values[record["key"]] = record["value"]
        if self._unavailable("set_many"):
            return 0
        return self._interaction.set_many(values)

    def delete(self, key: str) -> bool:
        """Delete a key. True if it existed."""
        if self._unavailable("delete"):
            return False
        return self._interaction.delete(key)

    def delete_many(self, keys: Iterable[str]) -> int:
        """Delete several keys. Returns how many existed."""
        keys = list(keys)
        if self._unavailable("delete_many"):
            return 0
        return self._interaction.delete_many(keys)

    def has(self, key: str) -> bool:
        """Whether a key is present."""
        if self._unavailable("has"):
            return False
        return self._interaction.has(key)

    def purge(self) -> bool:
        """Remove every entry of the current definition."""
        if self._unavailable("purge"):
            return False
        return self._interaction.purge()

    def gc(self) -> None:
        """Run garbage collection for the current definition now."""
        if self._unavailable("gc"):
            return
        self._interaction.gc()
