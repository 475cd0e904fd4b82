# ==============================================================================
# Cache Store CLI
# ==============================================================================
"""
Command-line interface for the Redis cache store.

Usage:
    cachestore --help
    cachestore status
    cachestore config show
    cachestore store set greeting '"hello"'
    cachestore store get greeting
    cachestore store purge -d core/config -y
"""

import os
from typing import Optional

import typer

# ==============================================================================
# App Configuration
# ==============================================================================
# Set consistent terminal width for help output formatting
if "COLUMNS" not in os.environ:
    os.environ["COLUMNS"] = "115"

app = typer.Typer(
    name="cachestore",
    help="Redis cache store CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def _setup(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level (default: from settings)"
    ),
) -> None:
    """Redis cache store CLI"""
    from cachestore.cli.shared import configure_logging

    configure_logging(log_level)


config_app = typer.Typer(
    help="Configuration management",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

# Register config commands from cli.config module
from cachestore.cli.config import config_show

config_app.command("show")(config_show)

store_app = typer.Typer(
    help="Cache entry operations",
    no_args_is_help=True,
)
app.add_typer(store_app, name="store")

# Register store commands from cli.store module
from cachestore.cli.store import (
    store_delete,
    store_gc,
    store_get,
    store_has,
    store_purge,
    store_set,
)

store_app.command("get")(store_get)
store_app.command("set")(store_set)
store_app.command("delete")(store_delete)
store_app.command("has")(store_has)
store_app.command("purge")(store_purge)
store_app.command("gc")(store_gc)

# Status command is imported from cachestore.cli.status
from cachestore.cli.status import show_status

app.command("status")(show_status)


# ==============================================================================
# Entry Point
# ==============================================================================


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
