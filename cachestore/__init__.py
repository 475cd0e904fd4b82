# ==============================================================================
# Redis Cache Store
# ==============================================================================
"""
Redis-backed cache store exposing a uniform key/value interface to a host
caching framework.
"""

from cachestore.core.exceptions import (
    AuthenticationFailedError,
    CacheStoreError,
    MalformedReplyError,
    MisconfigurationError,
    NotConnectedError,
    StoreUnavailableError,
    TransportError,
    ValueEncodingError,
)
from cachestore.core.models import (
    MISSING,
    CacheDefinition,
    InteractionType,
    KeyValue,
    StoreConfiguration,
    StoreFeature,
    StoreMode,
)
from cachestore.infrastructure.driver import ConnectionPool, RedisDriver
from cachestore.store import RedisStore

__all__ = [
    # Store
    "RedisStore",
    "ConnectionPool",
    "RedisDriver",
    # Models
    "MISSING",
    "CacheDefinition",
    "InteractionType",
    "KeyValue",
    "StoreConfiguration",
    "StoreFeature",
    "StoreMode",
    # Errors
    "AuthenticationFailedError",
    "CacheStoreError",
    "MalformedReplyError",
    "MisconfigurationError",
    "NotConnectedError",
    "StoreUnavailableError",
    "TransportError",
    "ValueEncodingError",
]
