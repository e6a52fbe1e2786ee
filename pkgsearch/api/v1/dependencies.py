"""Search dependencies (composition root).

Routes receive use cases from here; no manual repository or service
construction in endpoints.
"""

from __future__ import annotations

import hmac
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from pkgsearch.application.use_cases.refresh_search_view import RefreshSearchViewUseCase
from pkgsearch.application.use_cases.search import SearchService
from pkgsearch.core.config import SearchConfig, get_settings
from pkgsearch.domain.exceptions import AuthenticationException
from pkgsearch.infrastructure.persistence.database import get_db
from pkgsearch.infrastructure.persistence.repositories import SearchRepository

_http_bearer = HTTPBearer(auto_error=False)


def get_search_config() -> SearchConfig:
    return get_settings().search_config()


async def get_search_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SearchRepository:
    """Search repository bound to the request session."""
    return SearchRepository(db)


async def get_search_service(
    search_repo: Annotated[SearchRepository, Depends(get_search_repo)],
    config: Annotated[SearchConfig, Depends(get_search_config)],
) -> SearchService:
    return SearchService(search_repo, config)


async def get_refresh_use_case(
    search_repo: Annotated[SearchRepository, Depends(get_search_repo)],
    config: Annotated[SearchConfig, Depends(get_search_config)],
) -> RefreshSearchViewUseCase:
    return RefreshSearchViewUseCase(search_repo, config)


async def require_refresh_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> None:
    """Allow the call only with `Authorization: Bearer <SEARCH_REFRESH_TOKEN>`.

    With no token configured the refresh route rejects every call; scheduled
    refreshes then go through scripts/refresh_search_view.py.
    """
    expected = get_settings().search_refresh_token
    if not expected:
        raise AuthenticationException("View refresh over HTTP is disabled")
    if credentials is None or not hmac.compare_digest(
        credentials.credentials.encode(), expected.encode()
    ):
        raise AuthenticationException("Invalid refresh token")
