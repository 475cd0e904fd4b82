# ==============================================================================
# Keyspace Interaction
# ==============================================================================
"""
Stores every entry as a top-level Redis key with native expiry.

Alongside the keys, a sorted set named after the definition id indexes
every written key, scored with the timestamp taken when the interaction
was built. The index is used for purge and for garbage collection:

- purge() deletes every indexed key
- gc() deletes keys indexed before this interaction's timestamp, which
  drops index members whose keys Redis has already expired

Keys are not namespaced by definition; callers keep them unique.

Writing a key and indexing it are two commands. A crash in between leaves
an unindexed key that purge misses but Redis still expires.
"""

import logging
import random
import time
from collections.abc import Callable
from typing import Any

from cachestore.base.interaction import Interaction
from cachestore.core.models import CacheDefinition

logger = logging.getLogger(__name__)

DEFAULT_GC_FREQUENCY = 500


class KeyspaceInteraction(Interaction):
    """
    Interaction writing one Redis key per entry, indexed by write time.

    All writes of one instance share the same score: the wall-clock second
    at construction. gc() therefore never removes entries this instance wrote.
    """

    def __init__(
        self,
        driver,
        definition: CacheDefinition,
        update_ttl: bool = False,
        gc_frequency: int = DEFAULT_GC_FREQUENCY,
        clock: Callable[[], float] = time.time,
        rng: random.Random | None = None,
    ):
        """
        Initialize the interaction, occasionally running gc() first.

        Args:
            driver: Connected RedisDriver
            definition: Definition whose entries are managed
            update_ttl: Refresh the TTL of keys on every read
            gc_frequency: Run gc() on roughly 1 in N constructions (0 disables)
            clock: Wall-clock source in seconds
            rng: Random source for the gc sampling (default: SystemRandom)
        """
        super().__init__(driver, definition)
        self._collection = definition.id
        self._ttl = definition.ttl
        self._now = int(clock())
        self._update_ttl = update_ttl
        self._gc_frequency = gc_frequency
        rng = rng or random.SystemRandom()
        if self._gc_frequency > 0 and rng.randint(0, self._gc_frequency) == 1:
            self.gc()

    @property
    def collection(self) -> str:
        """Name of the sorted set indexing this definition's keys."""
        return self._collection

    @property
    def now(self) -> int:
        """Score given to every key written by this instance."""
        return self._now

    @property
    def ttl(self) -> int:
        return self._ttl

    def _refreshes_on_read(self) -> bool:
        return self._update_ttl and self._ttl > 0

    def set(self, key: str, value: Any) -> bool:
        if self._driver.set(key, value, ex=self._ttl or None):
            self._driver.zadd(self._collection, self._now, [key])
        return True

    def get(self, key: str) -> Any:
        if self._refreshes_on_read():
            self._driver.expire(key, self._ttl)
        return self._driver.get(key)

    def has(self, key: str) -> bool:
        return self._driver.exists(key)

    def delete(self, key: str) -> bool:
        self._driver.zrem(self._collection, key)
        return self._driver.delete(key) > 0

    def set_many(self, values: dict[str, Any]) -> int:
        if not values:
            return 0
        if self._driver.mset(values):
            if self._refreshes_on_read():
                for key in values:
                    self._driver.expire(key, self._ttl)
            self._driver.zadd(self._collection, self._now, values.keys())
        return len(values)

    def get_many(self, keys: list[str]) -> dict[str, Any]:
        if not keys:
            return {}
        keys = list(dict.fromkeys(keys))
        if self._refreshes_on_read():
            for key in keys:
                self._driver.expire(key, self._ttl)
        values = self._driver.mget(keys)
        return {key: value for key, value in zip(keys, values)}

    def delete_many(self, keys: list[str]) -> int:
        if not keys:
            return 0
        self._driver.zrem(self._collection, *keys)
        return self._driver.delete(*keys)

    def purge(self, up_to: float | None = None) -> bool:
        """
        Delete indexed keys scored between 0 and up_to, inclusive.

        Args:
            up_to: Highest score to purge (default: everything)

        Returns:
            True
        """
        upper = "+inf" if up_to is None else up_to
        keys = self._driver.zrangebyscore(self._collection, 0, upper)
        if keys:
            self._driver.delete(*keys)
            self._driver.zrem(self._collection, *keys)
        logger.debug("Purged %d keys of %s up to %s", len(keys), self._collection, upper)
        return True

    def gc(self) -> None:
        """Purge keys indexed before the second this instance was created."""
        self.purge(self._now - 1)
