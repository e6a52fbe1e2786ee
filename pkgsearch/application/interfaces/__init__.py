"""Application interfaces (ports) implemented by infrastructure."""

from pkgsearch.application.interfaces.repositories import ISearchRepository

__all__ = ["ISearchRepository"]
