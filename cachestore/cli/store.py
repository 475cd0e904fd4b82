# ==============================================================================
# Store Commands
# ==============================================================================
"""
Commands operating on the entries of one cache definition.

Every command builds a store from settings, initialises it with the
definition given on the command line and runs a single operation.
"""

import json
from typing import Annotated, NoReturn, Optional

import typer

from cachestore.cli.shared import C, I, build_store, format_value
from cachestore.core.exceptions import CacheStoreError
from cachestore.core.models import InteractionType
from cachestore.infrastructure.interactions import KeyspaceInteraction
from cachestore.store import RedisStore

DefinitionOption = Annotated[
    str, typer.Option("--definition", "-d", help="Cache definition identifier")
]
TtlOption = Annotated[int, typer.Option("--ttl", help="Definition TTL in seconds (0 = none)")]
InteractionOption = Annotated[
    Optional[InteractionType],
    typer.Option("--interaction", "-i", help="Force hash or keyspace storage"),
]

DEFAULT_DEFINITION = "cachestore/cli"


def _ready_store(definition: str, ttl: int, interaction: Optional[InteractionType]) -> RedisStore:
    store = build_store(definition, ttl, interaction)
    if not store.is_ready():
        print(f"{C.BRIGHT_RED}{I.CROSS}{C.RESET} Redis store is not ready (check REDIS_SERVER)")
        raise typer.Exit(1)
    return store


def _fail(exc: CacheStoreError) -> NoReturn:
    print(f"{C.BRIGHT_RED}{I.CROSS}{C.RESET} {exc}")
    raise typer.Exit(1)


# ==============================================================================
# Commands
# ==============================================================================


def store_get(
    keys: Annotated[list[str], typer.Argument(help="Keys to fetch")],
    definition: DefinitionOption = DEFAULT_DEFINITION,
    ttl: TtlOption = 0,
    interaction: InteractionOption = None,
) -> None:
    """Print the values stored under one or more keys."""
    store = _ready_store(definition, ttl, interaction)
    try:
        values = store.get_many(keys)
    except CacheStoreError as exc:
        _fail(exc)
    for key, value in values.items():
        print(f"{C.CYAN}{key}{C.RESET} = {format_value(value)}")


def store_set(
    key: Annotated[str, typer.Argument(help="Key to write")],
    value: Annotated[str, typer.Argument(help="Value (parsed as JSON when possible)")],
    definition: DefinitionOption = DEFAULT_DEFINITION,
    ttl: TtlOption = 0,
    interaction: InteractionOption = None,
) -> None:
    """Store a value under a key."""
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    store = _ready_store(definition, ttl, interaction)
    try:
        ok = store.set(key, parsed)
    except CacheStoreError as exc:
        _fail(exc)
    if not ok:
        print(f"{C.BRIGHT_RED}{I.CROSS}{C.RESET} Failed to set {key}")
        raise typer.Exit(1)
    print(f"{C.BRIGHT_GREEN}{I.CHECK}{C.RESET} {key} set")


def store_delete(
    keys: Annotated[list[str], typer.Argument(help="Keys to delete")],
    definition: DefinitionOption = DEFAULT_DEFINITION,
    ttl: TtlOption = 0,
    interaction: InteractionOption = None,
) -> None:
    """Delete one or more keys."""
    store = _ready_store(definition, ttl, interaction)
    try:
        count = store.delete_many(keys)
    except CacheStoreError as exc:
        _fail(exc)
    print(f"{C.BRIGHT_GREEN}{I.CHECK}{C.RESET} Deleted {count} of {len(keys)} keys")


def store_has(
    key: Annotated[str, typer.Argument(help="Key to check")],
    definition: DefinitionOption = DEFAULT_DEFINITION,
    ttl: TtlOption = 0,
    interaction: InteractionOption = None,
) -> None:
    """Check whether a key is present (exit code 1 when it is not)."""
    store = _ready_store(definition, ttl, interaction)
    try:
        present = store.has(key)
    except CacheStoreError as exc:
        _fail(exc)
    if not present:
        print(f"{C.BRIGHT_YELLOW}{I.WARN}{C.RESET} {key} is missing")
        raise typer.Exit(1)
    print(f"{C.BRIGHT_GREEN}{I.CHECK}{C.RESET} {key} is present")


def store_purge(
    definition: DefinitionOption = DEFAULT_DEFINITION,
    ttl: TtlOption = 0,
    interaction: InteractionOption = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Remove every entry of a definition."""
    if not yes:
        typer.confirm(f"Purge every entry of {definition}?", abort=True)
    store = _ready_store(definition, ttl, interaction)
    try:
        store.purge()
    except CacheStoreError as exc:
        _fail(exc)
    print(f"{C.BRIGHT_GREEN}{I.CHECK}{C.RESET} Purged {definition}")


def store_gc(
    definition: DefinitionOption = DEFAULT_DEFINITION,
    ttl: TtlOption = 0,
    interaction: InteractionOption = None,
) -> None:
    """Run garbage collection for a definition now."""
    store = _ready_store(definition, ttl, interaction)
    if not isinstance(store.interaction, KeyspaceInteraction):
        print(
            f"{C.BRIGHT_YELLOW}{I.WARN}{C.RESET} {definition} uses hash storage, "
            "which has nothing to garbage collect (use --ttl or --interaction keyspace)"
        )
        return
    try:
        store.gc()
    except CacheStoreError as exc:
        _fail(exc)
    print(f"{C.BRIGHT_GREEN}{I.CHECK}{C.RESET} Garbage collected {definition}")
