# ==============================================================================
# Interaction Abstract Base Class
# ==============================================================================
"""
Abstract interface for mapping logical cache operations onto Redis.

An interaction is built for exactly one cache definition and decides how
(key, value) pairs of that definition are laid out in Redis.

Implementations: HashInteraction, KeyspaceInteraction
"""

from abc import ABC, abstractmethod
from typing import Any

from cachestore.core.models import CacheDefinition


class Interaction(ABC):
    """
    Per-definition strategy translating cache operations into Redis commands.

    Values are opaque to the interaction; the driver serializes them.
    Absent keys are reported with the MISSING sentinel, never an exception.
    """

    def __init__(self, driver, definition: CacheDefinition):
        """
        Initialize the interaction.

        Args:
            driver: Connected RedisDriver (shared, not owned)
            definition: Definition whose entries this interaction manages
        """
        self._driver = driver
        self._definition = definition

    @property
    def definition(self) -> CacheDefinition:
        """The definition this interaction was built for."""
        return self._definition

    @abstractmethod
    def set(self, key: str, value: Any) -> bool:
        """
        Store a value.

        Args:
            key: Logical key
            value: Value to store

        Returns:
            True on success
        """
        ...

    @abstractmethod
    def get(self, key: str) -> Any:
        """
        Fetch a value.

        Args:
            key: Logical key

        Returns:
            The stored value, or MISSING
        """
        ...

    @abstractmethod
    def has(self, key: str) -> bool:
        """Membership test without transferring the value."""
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete a key.

        Returns:
            True if the key existed and was removed
        """
        ...

    @abstractmethod
    def set_many(self, values: dict[str, Any]) -> int:
        """
        Store several values at once.

        Args:
            values: Mapping of key to value

        Returns:
            Number of entries accepted
        """
        ...

    @abstractmethod
    def get_many(self, keys: list[str]) -> dict[str, Any]:
        """
        Fetch several values at once.

        Args:
            keys: Logical keys

        Returns:
            Mapping with one entry per distinct input key, in order of
            first appearance; absent keys map to MISSING. Repeated keys
            are fetched once.
        """
        ...

    @abstractmethod
    def delete_many(self, keys: list[str]) -> int:
        """
        Delete several keys.

        Returns:
            Number of keys removed
        """
        ...

    @abstractmethod
    def purge(self) -> bool:
        """Remove every entry belonging to the definition."""
        ...

    def gc(self) -> None:
        """Reclaim stale bookkeeping. Interactions without any have nothing to do."""
        return None
