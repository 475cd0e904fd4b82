# ==============================================================================
# Cache Store Utilities
# ==============================================================================
"""
Shared utilities for the cache store.

This module exports configuration and server string parsing.
"""

from cachestore.utils.config import (
    RedisSettings,
    Settings,
    TuningSettings,
    get_settings,
)
from cachestore.utils.server import ServerAddress, parse_server

__all__ = [
    # Config
    "RedisSettings",
    "Settings",
    "TuningSettings",
    "get_settings",
    # Server string
    "ServerAddress",
    "parse_server",
]
