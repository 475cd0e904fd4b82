# ==============================================================================
# Server String Parsing
# ==============================================================================
"""
Parser for the colon-separated server string of a store instance:

    host[:port[:timeout[:persistentid[:retryinterval]]]]

The persistent id (position 3) is only read when persistent connections
are enabled; otherwise it is ignored even when present. When persistent
connections are enabled without an id, DEFAULT_PERSISTENT_ID is used.
Empty positions fall back to their defaults.
"""

from dataclasses import dataclass

from cachestore.core.exceptions import MisconfigurationError

DEFAULT_PORT = 6379
DEFAULT_PERSISTENT_ID = "cachestore"


@dataclass(frozen=True)
class ServerAddress:
    """Connection parameters parsed from a server string.

    Attributes:
        host: Hostname, IP address or unix socket path ("" when not configured)
        port: TCP port
        timeout: Connect/read timeout in seconds, None for no timeout
        persistent_id: Connection name for persistent connections
        retry_interval: Milliseconds between connection attempts
    """

    host: str = ""
    port: int = DEFAULT_PORT
    timeout: float | None = None
    persistent_id: str | None = None
    retry_interval: int | None = None

    @property
    def is_configured(self) -> bool:
        """Whether a host was given."""
        return bool(self.host)


def _number(bits: list[str], index: int, cast, name: str):
    if index >= len(bits) or bits[index] == "":
        return None
    try:
        return cast(bits[index])
    except ValueError:
        raise MisconfigurationError(f"Invalid {name} '{bits[index]}' in server string") from None


def parse_server(server: str | None, persistent_connection: bool = False) -> ServerAddress:
    """
    Parse a server string.

    Args:
        server: Colon-separated server string (may be empty)
        persistent_connection: Whether persistent connections are enabled

    Returns:
        ServerAddress (host is "" when nothing usable was configured)

    Raises:
        MisconfigurationError: If port, timeout or retry interval is not numeric

    Example:
        >>> parse_server("127.0.0.1:6380:2.5")
        ServerAddress(host='127.0.0.1', port=6380, timeout=2.5, persistent_id=None, retry_interval=None)
    """
    if not server:
        return ServerAddress()

    bits = server.strip().split(":")
    port = _number(bits, 1, int, "port")
    timeout = _number(bits, 2, float, "timeout")
    retry_interval = _number(bits, 4, int, "retry interval")

    persistent_id = None
    if persistent_connection:
        if len(bits) > 3 and bits[3]:
            persistent_id = bits[3]
        else:
            persistent_id = DEFAULT_PERSISTENT_ID

    return ServerAddress(
        host=bits[0],
        port=DEFAULT_PORT if port is None else port,
        timeout=timeout,
        persistent_id=persistent_id,
        retry_interval=retry_interval,
    )
