# ==============================================================================
# Cache Store Exceptions
# ==============================================================================
"""
Error taxonomy for the Redis cache store.

StoreUnavailableError and its subclasses mean the store cannot talk to
Redis right now; hosts usually fall through to the next cache tier.
MalformedReplyError and ValueEncodingError are raised per operation when
a stored value cannot be decoded or a new value cannot be encoded. A missing key is never an error (see MISSING).
"""


class CacheStoreError(Exception):
    """Base class for all cache store errors."""

    def __init__(self, message: str, operation: str | None = None):
        self.operation = operation
        if operation:
            message = f"{message} (while performing {operation})"
        super().__init__(message)


class StoreUnavailableError(CacheStoreError):
    """The Redis server cannot be used for this operation."""


class NotConnectedError(StoreUnavailableError):
    """Operation attempted before a successful connect or after close."""

    def __init__(self, operation: str | None = None):
        super().__init__(
            "The requested operation cannot be performed as there is not an "
            "open connection to a Redis server",
            operation,
        )


class AuthenticationFailedError(StoreUnavailableError):
    """AUTH was rejected by the server."""


class TransportError(StoreUnavailableError):
    """Socket or protocol failure in the middle of an operation."""


class MalformedReplyError(CacheStoreError):
    """A reply could not be decoded into a value."""


class ValueEncodingError(CacheStoreError):
    """A value could not be encoded by the configured serializer."""


class MisconfigurationError(CacheStoreError):
    """The server string or store configuration is invalid."""
