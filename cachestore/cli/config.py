# ==============================================================================
# Config Commands
# ==============================================================================
"""
Configuration commands for the cache store CLI.
"""

import json
from typing import Annotated

import typer

from cachestore.cli.shared import C
from cachestore.core.exceptions import MisconfigurationError
from cachestore.utils.config import get_settings
from cachestore.utils.server import parse_server


# ==============================================================================
# Commands
# ==============================================================================


def config_show(
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output configuration as JSON")
    ] = False,
) -> None:
    """Display current configuration (includes secrets in JSON mode)."""
    settings = get_settings()

    try:
        address = parse_server(settings.redis.server, settings.redis.persistent_connection)
        parse_error = None
    except MisconfigurationError as exc:
        address = None
        parse_error = str(exc)

    # JSON output mode
    if json_output:
        config = {
            "redis": {
                "server": settings.redis.server,
                "host": address.host if address else None,
                "port": address.port if address else None,
                "timeout": address.timeout if address else None,
                "persistent_id": address.persistent_id if address else None,
                "retry_interval": address.retry_interval if address else None,
                "persistent_connection": settings.redis.persistent_connection,
                "password": settings.redis.auth_password,
                "database": settings.redis.database,
                "serializer": settings.redis.serializer,
                "error": parse_error,
            },
            "tuning": {
                "update_ttl": settings.tuning.update_ttl,
                "gc_freq": settings.tuning.gc_freq,
            },
            "debug": settings.debug,
            "log_level": settings.log_level,
        }
        print(json.dumps(config, indent=2))
        return

    # Human-readable output
    print()
    print(f"{C.BOLD}Configuration{C.RESET}")
    print()

    # Redis
    print(f"{C.CYAN}Redis{C.RESET}")
    print(f"  Server:     {C.WHITE}{settings.redis.server or '(not set)'}{C.RESET}")
    if parse_error:
        print(f"  Error:      {C.BRIGHT_RED}{parse_error}{C.RESET}")
    elif address.is_configured:
        print(f"  Host:       {C.WHITE}{address.host}{C.RESET}")
        print(f"  Port:       {C.WHITE}{address.port}{C.RESET}")
        timeout = f"{address.timeout}s" if address.timeout is not None else "none"
        print(f"  Timeout:    {C.WHITE}{timeout}{C.RESET}")
        if address.persistent_id:
            print(f"  Persistent: {C.WHITE}{address.persistent_id}{C.RESET}")
    print(f"  Database:   {C.WHITE}{settings.redis.database}{C.RESET}")
    auth = "enabled" if settings.redis.auth_password else "disabled"
    print(f"  Auth:       {C.WHITE}{auth}{C.RESET}")
    print(f"  Serializer: {C.WHITE}{settings.redis.serializer}{C.RESET}")
    print()

    # Tuning
    print(f"{C.CYAN}Tuning{C.RESET}")
    update_ttl = "enabled" if settings.tuning.update_ttl else "disabled"
    print(f"  Update TTL: {C.WHITE}{update_ttl}{C.RESET}")
    gc = f"1 in {settings.tuning.gc_freq}" if settings.tuning.gc_freq else "disabled"
    print(f"  GC:         {C.WHITE}{gc}{C.RESET}")
    print()
