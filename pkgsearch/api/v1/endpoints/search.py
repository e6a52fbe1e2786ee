"""Search API: composite package / keyword / author search and view refresh."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from pkgsearch.api.v1.dependencies import (
    get_refresh_use_case,
    get_search_service,
    require_refresh_token,
)
from pkgsearch.application.use_cases.refresh_search_view import RefreshSearchViewUseCase
from pkgsearch.application.use_cases.search import SearchService
from pkgsearch.core.config import get_settings
from pkgsearch.schemas.search import RefreshResponse, SearchPageResponse, search_page_response

router = APIRouter()

_settings = get_settings()


@router.get("", response_model=SearchPageResponse)
async def search(
    search_svc: Annotated[SearchService, Depends(get_search_service)],
    query: str = Query("", max_length=1000, description="Free text and key:value filters"),
    page: int = Query(1, description="1-based page; values below 1 are treated as 1"),
    page_size: int = Query(
        _settings.search_default_page_size, ge=1, le=_settings.search_max_page_size
    ),
) -> SearchPageResponse:
    """Search packages, keywords and authors.

    The query is split on whitespace. Tokens such as `stars:>500` or
    `license:compatible` become filters. Page 1 also lists matching
    authors and keywords.
    """
    response = await search_svc.fetch(query.split(), page=page, page_size=page_size)
    return search_page_response(response)


@router.post(
    "/refresh",
    response_model=RefreshResponse,
    dependencies=[Depends(require_refresh_token)],
)
async def refresh_search_view(
    use_case: Annotated[RefreshSearchViewUseCase, Depends(get_refresh_use_case)],
) -> RefreshResponse:
    """Rebuild the search materialized view. Requires the SEARCH_REFRESH_TOKEN bearer token."""
    await use_case.run()
    return RefreshResponse(view_name=use_case.config.view_name)
