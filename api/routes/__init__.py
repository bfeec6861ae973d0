"""API route handlers."""

from api.routes import health, reorg

__all__ = ["health", "reorg"]
