"""Application use cases (orchestration only; SQL lives in the query builders and repositories)."""

from pkgsearch.application.use_cases.refresh_search_view import RefreshSearchViewUseCase
from pkgsearch.application.use_cases.search import SearchService

__all__ = ["RefreshSearchViewUseCase", "SearchService"]
