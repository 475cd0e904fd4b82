# ==============================================================================
# Hash Interaction
# ==============================================================================
"""
Stores every entry of a definition as a field of one Redis hash.

The hash is named after the definition hash. Purging a definition is a
single DEL. Redis hashes have no per-field expiry, so the definition TTL
is not honoured by this interaction.
"""

import logging
from typing import Any

from cachestore.base.interaction import Interaction
from cachestore.core.models import MISSING, CacheDefinition

logger = logging.getLogger(__name__)


class HashInteraction(Interaction):
    """Interaction keeping a definition's entries in a single Redis hash."""

    def __init__(self, driver, definition: CacheDefinition):
        super().__init__(driver, definition)
        self._hash = definition.hash
        if definition.ttl:
            logger.debug(
                "Definition %s declares ttl=%d which hash storage ignores",
                definition.id,
                definition.ttl,
            )

    @property
    def hash(self) -> str:
        """Name of the Redis hash holding the entries."""
        return self._hash

    def set(self, key: str, value: Any) -> bool:
        self._driver.hset(self._hash, key, value)
        return True

    def get(self, key: str) -> Any:
        return self._driver.hget(self._hash, key)

    def has(self, key: str) -> bool:
        return self._driver.hexists(self._hash, key)

    def delete(self, key: str) -> bool:
        return self._driver.hdel(self._hash, key) == 1

    def set_many(self, values: dict[str, Any]) -> int:
        if not values:
            return 0
        if self._driver.hmset(self._hash, values):
            return len(values)
        return 0

    def get_many(self, keys: list[str]) -> dict[str, Any]:
        if not keys:
            return {}
        keys = list(dict.fromkeys(keys))
        values = self._driver.hmget(self._hash, keys)
        return {key: value for key, value in zip(keys, values)}

    def delete_many(self, keys: list[str]) -> int:
        count = 0
        for key in keys:
            count += self._driver.hdel(self._hash, key)
        return count

    def purge(self) -> bool:
        self._driver.delete(self._hash)
        return True
