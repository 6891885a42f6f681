"""API router package for endpoint composition."""

from .trades import api_create_trades_router

__all__ = ["api_create_trades_router"]
