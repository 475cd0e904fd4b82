# ==============================================================================
# Status Command
# ==============================================================================
"""
Status command for the cache store CLI.

Displays whether the configured Redis server is reachable and what it
holds, either as formatted box output or as JSON.
"""

import json as json_module
from typing import Any

import typer
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from cachestore.cli.shared import (
    CLI_STORE_NAME,
    C,
    I,
    _box_bottom,
    _box_header,
    _box_line,
    _empty_line,
)
from cachestore.core.exceptions import StoreUnavailableError
from cachestore.store import RedisStore, store_configuration_from_settings
from cachestore.utils.retry import RETRY_ATTEMPTS_CONNECT, RETRY_WAIT_MAX, RETRY_WAIT_MIN

# ==============================================================================
# Data Collection
# ==============================================================================


@retry(
    stop=stop_after_attempt(RETRY_ATTEMPTS_CONNECT),
    wait=wait_exponential(multiplier=RETRY_WAIT_MIN, min=RETRY_WAIT_MIN, max=RETRY_WAIT_MAX),
    retry=retry_if_exception_type((StoreUnavailableError, RedisConnectionError, RedisTimeoutError)),
    reraise=True,
)
def _redis_stats_with_retry(store: RedisStore) -> tuple[int | None, str | None]:
    """Read key count and memory usage from the server."""
    if not store.ping():
        raise StoreUnavailableError("Redis ping failed", "status")
    client = store.connection.client
    info = client.info("memory")
    memory = info.get("used_memory_human")
    # Normalize memory format
    if memory and memory[-1] in ("K", "M", "G"):
        memory = memory[:-1] + " " + memory[-1] + "B"
    return client.dbsize(), memory


def _collect_status_data() -> dict[str, Any]:
    """Collect store and server status data."""
    configuration = store_configuration_from_settings()
    store = RedisStore(CLI_STORE_NAME, configuration)
    address = store.address

    data: dict[str, Any] = {
        "server": configuration.server,
        "configured": address.is_configured,
        "host": address.host or None,
        "port": address.port if address.is_configured else None,
        "database": configuration.database,
        "ready": store.is_ready(),
        "status": "not_configured",
        "keys": None,
        "memory": None,
    }
    if not address.is_configured:
        return data
    if not store.is_ready():
        data["status"] = "unreachable"
        return data

    try:
        data["keys"], data["memory"] = _redis_stats_with_retry(store)
        data["status"] = "connected"
    except (StoreUnavailableError, RedisConnectionError, RedisTimeoutError):
        data["status"] = "unreachable"
    return data


# ==============================================================================
# Display
# ==============================================================================


def _display_status(data: dict[str, Any]) -> None:
    """Print status data as a box."""
    print()
    print(_box_header("Redis Cache Store"))
    print(_empty_line())

    if data["status"] == "not_configured":
        print(
            _box_line(
                f"  {C.BRIGHT_YELLOW}{I.WARN}{C.RESET} {C.BOLD}Redis{C.RESET} {C.DIM}(not configured){C.RESET}"
            )
        )
        print(_box_line(f"    {C.DIM}Set REDIS_SERVER=host[:port]{C.RESET}"))
    elif data["status"] == "connected":
        print(_box_line(f"  {C.BRIGHT_GREEN}{I.CHECK}{C.RESET} {C.BOLD}Redis{C.RESET}"))
        print(_box_line(f"    Server:   {C.WHITE}{data['host']}:{data['port']}{C.RESET}"))
        print(_box_line(f"    Database: {C.WHITE}{data['database']}{C.RESET}"))
        if data["keys"] is not None:
            print(_box_line(f"    Keys:     {C.WHITE}{data['keys']:,}{C.RESET}"))
        if data["memory"]:
            print(_box_line(f"    Memory:   {C.WHITE}{data['memory']}{C.RESET}"))
    else:
        print(
            _box_line(
                f"  {C.BRIGHT_RED}{I.CROSS}{C.RESET} {C.BOLD}Redis{C.RESET} {C.DIM}(unreachable){C.RESET}"
            )
        )
        print(_box_line(f"    Server:   {C.WHITE}{data['host']}:{data['port']}{C.RESET}"))

    print(_empty_line())
    print(_box_bottom())
    print()


# ==============================================================================
# Command
# ==============================================================================


def show_status(
    json_output: bool = typer.Option(False, "--json", help="Output status as JSON"),
) -> None:
    """Show Redis server status and store readiness."""
    data = _collect_status_data()

    if json_output:
        print(json_module.dumps(data, indent=2))
    else:
        _display_status(data)
