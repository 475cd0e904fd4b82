# ==============================================================================
# Cache Store Domain Models
# ==============================================================================
"""
Pydantic models and constants shared by the store and its interactions.

This module is part of the core domain layer and has no external dependencies
beyond Pydantic.
"""

import hashlib
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class _Missing:
    """Marker returned for keys that are not present in the store."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"

    def __reduce__(self):
        return (_Missing, ())


MISSING = _Missing()


class StoreMode(str, Enum):
    """Cache modes a host may ask a store to serve."""

    APPLICATION = "application"
    SESSION = "session"
    REQUEST = "request"


class StoreFeature(str, Enum):
    """Optional capabilities a store can claim."""

    DATA_GUARANTEE = "data_guarantee"
    NATIVE_TTL = "native_ttl"
    MULTIPLE_IDENTIFIERS = "multiple_identifiers"
    SEARCHABLE = "searchable"


class InteractionType(str, Enum):
    """Storage regimes available for a definition."""

    HASH = "hash"
    KEYSPACE = "keyspace"


class CacheDefinition(BaseModel):
    """
    Read-only description of a logical cache namespace.

    Attributes:
        id: Stable identifier, e.g. "appcore/lang_menu"
        hash: Short stable digest of id (md5 hex); derived when omitted
        ttl: Time-to-live in seconds, 0 meaning no expiry
        mode: Mode the definition is used in
    """

    model_config = {"frozen": True}

    id: str = Field(..., min_length=1, description="Definition identifier")
    hash: str = Field(default="", description="Digest of the definition id")
    ttl: int = Field(default=0, ge=0, description="Time-to-live in seconds")
    mode: StoreMode = Field(default=StoreMode.APPLICATION, description="Cache mode")

    @model_validator(mode="before")
    @classmethod
    def _derive_hash(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            if data.get("ttl") is None:
                data["ttl"] = 0
            if not data.get("hash") and data.get("id"):
                data["hash"] = hashlib.md5(str(data["id"]).encode("utf-8")).hexdigest()
        return data

    @classmethod
    def adhoc(
        cls, component: str, area: str, ttl: int = 0, mode: StoreMode = StoreMode.APPLICATION
    ) -> "CacheDefinition":
        """Build a definition for a component/area pair that has no registered definition."""
        return cls(id=f"{component}/{area}", ttl=ttl, mode=mode)


class KeyValue(BaseModel):
    """A single record accepted by set_many."""

    key: str = Field(..., min_length=1)
    value: Any = None


class StoreConfiguration(BaseModel):
    """
    Configuration of one store instance, as submitted by the host's form.

    Attributes:
        server: Server string host[:port[:timeout[:persistentid[:retryinterval]]]]
        persistent_connection: Announce a persistent connection name
        auth_password: Password sent with AUTH, if any
        database: Redis database number
        interaction: Force "hash" or "keyspace" storage for every definition
    """

    server: str = Field(default="", description="Server string")
    persistent_connection: bool = Field(default=False, alias="persistentconnection")
    auth_password: str | None = Field(default=None, alias="authpassword")
    database: int = Field(default=0, ge=0)
    interaction: InteractionType | None = Field(default=None)

    model_config = {"populate_by_name": True}
