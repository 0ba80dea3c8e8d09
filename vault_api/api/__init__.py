"""API routes."""

from .vault import router as vault_router

__all__ = ["vault_router"]
