# ==============================================================================
# Interaction Implementations
# ==============================================================================
"""
Storage regimes for cache definitions.

Available implementations:
- HashInteraction: one Redis hash per definition, no expiry
- KeyspaceInteraction: top-level keys with native TTL plus a sorted-set index
"""

from cachestore.core.models import CacheDefinition, InteractionType
from cachestore.infrastructure.interactions.hash import HashInteraction
from cachestore.infrastructure.interactions.keyspace import KeyspaceInteraction


def select_interaction_type(
    definition: CacheDefinition, requested: InteractionType | str | None = None
) -> InteractionType:
    """
    Decide which storage regime a definition uses.

    Args:
        definition: Cache definition
        requested: Explicit choice overriding the automatic one

    Returns:
        KEYSPACE for definitions with a TTL, HASH otherwise, unless requested
    """
    if requested:
        return InteractionType(requested)
    if definition.ttl > 0:
        return InteractionType.KEYSPACE
    return InteractionType.HASH


def create_interaction(
    interaction_type: InteractionType | str,
    driver,
    definition: CacheDefinition,
    update_ttl: bool = False,
    gc_frequency: int = 500,
):
    """
    Build an interaction for a definition.

    Args:
        interaction_type: "hash" or "keyspace"
        driver: Connected RedisDriver
        definition: Cache definition
        update_ttl: Keyspace only, refresh TTLs on reads
        gc_frequency: Keyspace only, 1-in-N garbage collection on construction

    Returns:
        Interaction instance
    """
    if InteractionType(interaction_type) is InteractionType.KEYSPACE:
        return KeyspaceInteraction(
            driver, definition, update_ttl=update_ttl, gc_frequency=gc_frequency
        )
    return HashInteraction(driver, definition)


__all__ = [
    "HashInteraction",
    "KeyspaceInteraction",
    "create_interaction",
    "select_interaction_type",
]
