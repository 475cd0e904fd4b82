# ==============================================================================
# Base Abstract Classes
# ==============================================================================
"""
Abstract base classes defining the contracts of the cache store.
"""

from cachestore.base.interaction import Interaction

__all__ = [
    "Interaction",
]
