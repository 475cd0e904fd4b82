# ==============================================================================
# Infrastructure Layer
# ==============================================================================
"""
Redis driver, value serialization and interaction implementations.
"""
