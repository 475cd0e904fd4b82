# ==============================================================================
# Redis Driver
# ==============================================================================
"""
Thin transport over a synchronous redis-py client.

Provides:
- RedisDriver: connection lifecycle (connect, authenticate, close, ping)
  and the Redis commands used by the cache interactions
- ConnectionPool: process-wide registry handing out one connected driver
  per (host, port, database)

Values are serialized on the way in and decoded on the way out. A nil
reply is returned as MISSING so that a stored None stays distinguishable.
"""

import logging
import zlib
from collections.abc import Callable, Iterable
from functools import lru_cache
from typing import Any

import redis
from redis.exceptions import AuthenticationError as RedisAuthenticationError
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from cachestore.core.exceptions import (
    AuthenticationFailedError,
    NotConnectedError,
    TransportError,
)
from cachestore.core.models import MISSING
from cachestore.infrastructure.serializer import JsonSerializer, get_serializer
from cachestore.utils.config import get_settings
from cachestore.utils.retry import retry_connect

logger = logging.getLogger(__name__)

DEFAULT_PORT = 6379


def _to_str(member: bytes | str) -> str:
    if isinstance(member, bytes):
        return member.decode("utf-8")
    return member


class RedisDriver:
    """
    A single Redis connection as seen by the cache store.

    The driver is shared by every store configured for the same server and
    database; interactions borrow it and must not close it.
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        timeout: float | None = None,
        persistent_id: str | None = None,
        retry_interval: int | None = None,
        serializer=None,
        client_factory: Callable[..., redis.Redis] | None = None,
    ):
        """
        Initialize the driver. No connection is made until connect().

        Args:
            host: Hostname, IP address or unix socket path
            port: TCP port (ignored for socket paths)
            timeout: Connect and read timeout in seconds (None = no timeout)
            persistent_id: Name announced with CLIENT SETNAME
            retry_interval: Milliseconds to wait between handshake attempts
            serializer: Value codec (default: JsonSerializer)
            client_factory: Callable building the redis client (default: redis.Redis)
        """
        self.host = host
        self.port = port
        self.timeout = timeout
        self.persistent_id = persistent_id
        self.retry_interval = retry_interval
        self.database = 0
        self._serializer = serializer or JsonSerializer()
        self._client_factory = client_factory or redis.Redis
        self._client: redis.Redis | None = None
        self._connected = False

    # ==========================================================================
    # Connection Lifecycle
    # ==========================================================================

    def _client_kwargs(self, database: int) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "db": database,
            "socket_timeout": self.timeout,
            "socket_connect_timeout": self.timeout,
        }
        if self.host.startswith("/"):
            kwargs["unix_socket_path"] = self.host
        else:
            kwargs["host"] = self.host
            kwargs["port"] = self.port
        if self.persistent_id:
            kwargs["client_name"] = self.persistent_id
        return kwargs

    def _handshake(self) -> bool:
        try:
            return bool(self._client.ping())
        except RedisAuthenticationError:
            # Reachable, but AUTH has not been sent yet.
            return True

    def connect(self, database: int = 0) -> bool:
        """
        Create the client, select the database and check the server answers.

        Connection failures are logged, not raised.

        Args:
            database: Redis database number

        Returns:
            True if the server answered
        """
        self.database = database
        self._client = self._client_factory(**self._client_kwargs(database))
        try:
            self._connected = retry_connect(
                (RedisConnectionError, RedisTimeoutError), logger, self.retry_interval
            )(self._handshake)()
        except (RedisConnectionError, RedisTimeoutError) as exc:
            logger.warning("Could not connect to Redis at %s: %s", self.describe(), exc)
            self._connected = False
        if self._connected:
            logger.info("Connected to Redis at %s", self.describe())
        return self._connected

    @property
    def is_connected(self) -> bool:
        """Whether the driver is connected and usable."""
        return self._connected

    @property
    def client(self) -> redis.Redis | None:
        """Get the underlying Redis client for advanced operations."""
        return self._client

    def authenticate(self, password: str) -> None:
        """
        Authenticate every connection of the client with a password.

        Nothing happens when the client already uses this password, so
        stores sharing the driver keep their open connections.

        Args:
            password: Server password

        Raises:
            NotConnectedError: If the driver is not connected
            AuthenticationFailedError: If the server rejects the password.
                The driver is closed before raising.
        """
        if not self.is_connected:
            raise NotConnectedError("authenticate")
        pool = self._client.connection_pool
        if pool.connection_kwargs.get("password") == password:
            return
        pool.connection_kwargs["password"] = password
        pool.disconnect()
        try:
            self._client.ping()
        except RedisAuthenticationError as exc:
            logger.error("Redis at %s rejected authentication: %s", self.describe(), exc)
            self.close()
            raise AuthenticationFailedError(str(exc), "authenticate") from exc
        except (RedisConnectionError, RedisTimeoutError) as exc:
            raise TransportError(str(exc), "authenticate") from exc

    def close(self) -> None:
        """Close the connection. Further commands raise NotConnectedError."""
        if self._client is not None:
            self._client.close()
        self._connected = False

    def ping(self) -> bool:
        """
        Check if the server is reachable.

        Returns:
            True if ping succeeds, False otherwise
        """
        try:
            return bool(self._client.ping())
        except Exception:
            return False

    def describe(self) -> str:
        """Human-readable server address."""
        if self.host.startswith("/"):
            return f"{self.host} (db {self.database})"
        return f"{self.host}:{self.port} (db {self.database})"

    # ==========================================================================
    # Command Plumbing
    # ==========================================================================

    def _call(self, operation: str, method: str, *args, **kwargs):
        if not self._connected:
            raise NotConnectedError(operation)
        try:
            return getattr(self._client, method)(*args, **kwargs)
        except (RedisConnectionError, RedisTimeoutError) as exc:
            raise TransportError(str(exc), operation) from exc

    def _encode(self, value: Any) -> bytes:
        return self._serializer.dumps(value)

    def _decode(self, raw: bytes | str | None) -> Any:
        if raw is None:
            return MISSING
        return self._serializer.loads(raw)

    # ==========================================================================
    # Keyspace Commands
    # ==========================================================================

    def set(self, key: str, value: Any, ex: int | None = None) -> bool:
        """SET key value [EX ex]. EX is only sent for a positive ex."""
        return bool(self._call("SET", "set", key, self._encode(value), ex=ex or None))

    def get(self, key: str) -> Any:
        """GET key. Returns MISSING for an absent key."""
        return self._decode(self._call("GET", "get", key))

    def delete(self, *keys: str) -> int:
        """DEL key [key ...]. Returns the number of keys removed."""
        if not keys:
            return 0
        return int(self._call("DEL", "delete", *keys))

    def exists(self, key: str) -> bool:
        """EXISTS key."""
        return bool(self._call("EXISTS", "exists", key))

    def expire(self, key: str, seconds: int) -> bool:
        """EXPIRE key seconds. False if the key does not exist."""
        return bool(self._call("EXPIRE", "expire", key, seconds))

    def mset(self, mapping: dict[str, Any]) -> bool:
        """MSET key value [key value ...]."""
        encoded = {key: self._encode(value) for key, value in mapping.items()}
        return bool(self._call("MSET", "mset", encoded))

    def mget(self, keys: list[str]) -> list[Any]:
        """MGET key [key ...]. Absent keys come back as MISSING."""
        return [self._decode(raw) for raw in self._call("MGET", "mget", keys)]

    # ==========================================================================
    # Hash Commands
    # ==========================================================================

    def hset(self, name: str, key: str, value: Any) -> int:
        """HSET name key value. Returns 1 for a new field, 0 for an update."""
        return int(self._call("HSET", "hset", name, key, self._encode(value)))

    def hget(self, name: str, key: str) -> Any:
        """HGET name key. Returns MISSING for an absent field."""
        return self._decode(self._call("HGET", "hget", name, key))

    def hexists(self, name: str, key: str) -> bool:
        """HEXISTS name key."""
        return bool(self._call("HEXISTS", "hexists", name, key))

    def hdel(self, name: str, *keys: str) -> int:
        """HDEL name key [key ...]. Returns the number of fields removed."""
        if not keys:
            return 0
        return int(self._call("HDEL", "hdel", name, *keys))

    def hmset(self, name: str, mapping: dict[str, Any]) -> bool:
        """Set several hash fields at once (multi-field HSET, the successor of HMSET)."""
        encoded = {key: self._encode(value) for key, value in mapping.items()}
        self._call("HMSET", "hset", name, mapping=encoded)
        return True

    def hmget(self, name: str, keys: list[str]) -> list[Any]:
        """HMGET name key [key ...]. Absent fields come back as MISSING."""
        return [self._decode(raw) for raw in self._call("HMGET", "hmget", name, keys)]

    # ==========================================================================
    # Sorted Set Commands
    # ==========================================================================

    def zadd(self, name: str, score: float, members: Iterable[str]) -> int:
        """ZADD name score member [score member ...] with one score for all members."""
        mapping = {member: score for member in members}
        if not mapping:
            return 0
        return int(self._call("ZADD", "zadd", name, mapping))

    def zrangebyscore(self, name: str, min_score: float | str, max_score: float | str) -> list[str]:
        """ZRANGEBYSCORE name min max (inclusive). Members are returned as str."""
        members = self._call("ZRANGEBYSCORE", "zrangebyscore", name, min_score, max_score)
        return [_to_str(member) for member in members]

    def zrem(self, name: str, *members: str) -> int:
        """ZREM name member [member ...]. Returns the number of members removed."""
        if not members:
            return 0
        return int(self._call("ZREM", "zrem", name, *members))

    def zscore(self, name: str, member: str) -> float | None:
        """ZSCORE name member."""
        return self._call("ZSCORE", "zscore", name, member)


# ==============================================================================
# Connection Pool
# ==============================================================================


class ConnectionPool:
    """
    Registry of connected drivers, one per (host, port, database).

    Stores pointing at the same server and database share a driver.
    Tests can pass a client_factory returning fakeredis clients.
    """

    def __init__(
        self,
        client_factory: Callable[..., redis.Redis] | None = None,
        serializer=None,
    ):
        """
        Initialize an empty pool.

        Args:
            client_factory: Callable building redis clients (default: redis.Redis)
            serializer: Value codec handed to every driver (default: JsonSerializer)
        """
        self._client_factory = client_factory
        self._serializer = serializer
        self._drivers: dict[int, RedisDriver] = {}

    @staticmethod
    def key(host: str, port: int, database: int) -> int:
        """Digest identifying a (host, port, database) tuple."""
        return zlib.crc32(f"{host} {port} {database}".encode("utf-8"))

    def instance(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        database: int = 0,
        timeout: float | None = None,
        persistent_id: str | None = None,
        retry_interval: int | None = None,
    ) -> RedisDriver:
        """
        Get the driver for a server and database, connecting on first use.

        The first caller's timeout, persistent id and retry interval win.

        Returns:
            RedisDriver (check is_connected before use)
        """
        key = self.key(host, port, database)
        driver = self._drivers.get(key)
        if driver is None:
            driver = RedisDriver(
                host,
                port,
                timeout=timeout,
                persistent_id=persistent_id,
                retry_interval=retry_interval,
                serializer=self._serializer,
                client_factory=self._client_factory,
            )
            driver.connect(database)
            self._drivers[key] = driver
        return driver

    def release(self, driver: RedisDriver) -> None:
        """Close a driver and forget it so the next instance() reconnects."""
        driver.close()
        key = self.key(driver.host, driver.port, driver.database)
        if self._drivers.get(key) is driver:
            del self._drivers[key]

    def close_all(self) -> None:
        """Close every driver in the pool."""
        for driver in list(self._drivers.values()):
            driver.close()
        self._drivers.clear()

    def __len__(self) -> int:
        return len(self._drivers)


@lru_cache
def get_connection_pool() -> ConnectionPool:
    """
    Get the process-wide connection pool configured from settings.

    Created once and reused for subsequent calls.
    """
    return ConnectionPool(serializer=get_serializer(get_settings().redis.serializer))
