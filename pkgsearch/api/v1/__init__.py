"""API version 1."""

from pkgsearch.api.v1.router import api_router

__all__ = ["api_router"]
