"""Persistence repositories. Re-exports for dependency injection."""

from pkgsearch.infrastructure.persistence.repositories.search_repo import SearchRepository

__all__ = ["SearchRepository"]
