# ==============================================================================
# Value Serialization
# ==============================================================================
"""
Codecs turning cache values into the byte strings stored in Redis.

- JsonSerializer (default): UTF-8 encoded JSON text. Round-trips dicts,
  lists, strings, numbers, booleans and None. Tuples come back as lists
  and non-string dict keys come back as strings. Bytes and other objects
  JSON cannot represent raise ValueEncodingError.
- PickleSerializer: Python pickle, for arbitrary objects. Only use it
  against a Redis server you trust.
"""

import json
import pickle
from typing import Any

from cachestore.core.exceptions import MalformedReplyError, ValueEncodingError


class JsonSerializer:
    """JSON value codec."""

    name = "json"

    def dumps(self, value: Any) -> bytes:
        try:
            return json.dumps(value, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise ValueEncodingError(f"Value cannot be stored as JSON: {exc}") from exc

    def loads(self, data: bytes | str) -> Any:
        try:
            return json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedReplyError(f"Stored value is not valid JSON: {exc}") from exc


class PickleSerializer:
    """Pickle value codec."""

    name = "pickle"

    def dumps(self, value: Any) -> bytes:
        try:
            return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)
        except (pickle.PicklingError, TypeError, AttributeError) as exc:
            raise ValueEncodingError(f"Value cannot be pickled: {exc}") from exc

    def loads(self, data: bytes | str) -> Any:
        if isinstance(data, str):
            raise MalformedReplyError(
                "Pickled values require a client created with decode_responses=False"
            )
        try:
            return pickle.loads(data)
        except (pickle.UnpicklingError, EOFError, ValueError) as exc:
            raise MalformedReplyError(f"Stored value could not be unpickled: {exc}") from exc


SERIALIZERS = {
    JsonSerializer.name: JsonSerializer,
    PickleSerializer.name: PickleSerializer,
}


def get_serializer(name: str = "json"):
    """
    Get a serializer by name.

    Args:
        name: "json" or "pickle"

    Returns:
        Serializer instance

    Raises:
        ValueError: If the name is unknown
    """
    try:
        return SERIALIZERS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown serializer '{name}'. Valid options: {', '.join(SERIALIZERS)}"
        ) from None
