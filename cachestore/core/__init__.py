# ==============================================================================
# Core Domain Layer
# ==============================================================================
"""
Domain models and errors with no dependency on Redis.
"""
