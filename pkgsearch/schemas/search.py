"""Search API schemas. JSON field names are camelCase; results are tagged by match type."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pkgsearch.application.dtos.search import (
    AuthorResult,
    KeywordResult,
    PackageResult,
    SearchFilterViewModel,
    SearchResponse,
    SearchResult,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuthorResultBody(_CamelModel):
    name: str


class KeywordResultBody(_CamelModel):
    keyword: str


class PackageResultBody(_CamelModel):
    package_id: UUID
    package_name: str | None = None
    package_url: str | None = None
    repository_name: str | None = None
    repository_owner: str | None = None
    summary: str | None = None


class AuthorResultResponse(_CamelModel):
    author: AuthorResultBody


class KeywordResultResponse(_CamelModel):
    keyword: KeywordResultBody


class PackageResultResponse(_CamelModel):
    package: PackageResultBody


SearchResultResponse = AuthorResultResponse | KeywordResultResponse | PackageResultResponse


class SearchFilterResponse(_CamelModel):
    """Applied filter in display form, e.g. stars / is greater than / 500."""

    key: str
    operator: str
    value: str


class SearchPageResponse(_CamelModel):
    """One page of search results."""

    has_more_results: bool = Field(..., description="Another page of package results exists")
    search_term: str = Field(..., description="Free-text terms joined with a space")
    search_filters: list[SearchFilterResponse]
    results: list[SearchResultResponse]


class RefreshResponse(_CamelModel):
    status: str = "ok"
    view_name: str


def result_response(result: SearchResult) -> SearchResultResponse:
    """Wrap a result variant in its tagged response object."""
    if isinstance(result, AuthorResult):
        return AuthorResultResponse(author=AuthorResultBody(name=result.name))
    if isinstance(result, KeywordResult):
        return KeywordResultResponse(keyword=KeywordResultBody(keyword=result.keyword))
    if isinstance(result, PackageResult):
        return PackageResultResponse(
            package=PackageResultBody(
                package_id=result.package_id,
                package_name=result.package_name,
                package_url=result.package_url,
                repository_name=result.repository_name,
                repository_owner=result.repository_owner,
                summary=result.summary,
            )
        )
    raise TypeError(f"Unknown search result type: {type(result).__name__}")


def _filter_response(view_model: SearchFilterViewModel) -> SearchFilterResponse:
    return SearchFilterResponse(
        key=view_model.key, operator=view_model.operator, value=view_model.value
    )


def search_page_response(response: SearchResponse) -> SearchPageResponse:
    return SearchPageResponse(
        has_more_results=response.has_more_results,
        search_term=response.search_term,
        search_filters=[_filter_response(f) for f in response.search_filters],
        results=[result_response(r) for r in response.results],
    )
