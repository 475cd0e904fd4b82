# ==============================================================================
# CLI Commands Module
# ==============================================================================
"""
CLI commands for the cache store.

Commands are organized into separate modules for maintainability:
- shared.py: Common utilities, constants, and helpers
- status.py: Status command showing server health
- config.py: Configuration display
- store.py: Operations on cache entries
"""
