"""DTOs for package search: unified store row, result variants, response envelope.

No dependency on ORM or the HTTP layer. SearchRecord mirrors the column list
every match builder projects (UNIFIED_COLUMNS), in the same order.
"""

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Mapping, Union
from uuid import UUID

from pkgsearch.domain.enums import MatchType


@dataclass(frozen=True)
class SearchRecord:
    """One row of the combined search statement (read-model).

    Only the fields owned by match_type are non-null; the rest are NULL by
    construction of the builder that produced the row.
    """

    match_type: MatchType
    keyword: str | None = None
    package_id: UUID | None = None
    package_name: str | None = None
    repo_name: str | None = None
    repo_owner: str | None = None
    score: int | None = None
    summary: str | None = None
    stars: int | None = None
    license: str | None = None
    last_commit_date: datetime | None = None
    last_activity_at: datetime | None = None
    keywords: tuple[str, ...] | None = None
    levenshtein_dist: int | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SearchRecord | None":
        """Build from a result mapping. Returns None when match_type is missing or unknown."""
        try:
            match_type = MatchType(row["match_type"])
        except (KeyError, ValueError):
            return None
        values = {name: row.get(name) for name in UNIFIED_COLUMNS[1:]}
        if values["keywords"] is not None:
            values["keywords"] = tuple(values["keywords"])
        return cls(match_type=match_type, **values)

    @property
    def package_url(self) -> str | None:
        """Relative package page URL (/{owner}/{name}) when both parts are present."""
        if not self.repo_owner or not self.repo_name:
            return None
        return f"/{self.repo_owner}/{self.repo_name}"


# Column order shared by all match builders, the decoder and the search view.
UNIFIED_COLUMNS: tuple[str, ...] = tuple(f.name for f in fields(SearchRecord))


@dataclass(frozen=True)
class AuthorResult:
    name: str


@dataclass(frozen=True)
class KeywordResult:
    keyword: str


@dataclass(frozen=True)
class PackageResult:
    package_id: UUID
    package_name: str | None
    package_url: str | None
    repository_name: str | None
    repository_owner: str | None
    summary: str | None


SearchResult = Union[AuthorResult, KeywordResult, PackageResult]


def search_result_from_record(record: SearchRecord) -> SearchResult | None:
    """Map a record to its result variant, or None when a required field is missing.

    author needs repo_owner, keyword needs keyword, package needs package_id.
    """
    if record.match_type is MatchType.AUTHOR:
        if not record.repo_owner:
            return None
        return AuthorResult(name=record.repo_owner)
    if record.match_type is MatchType.KEYWORD:
        if not record.keyword:
            return None
        return KeywordResult(keyword=record.keyword)
    if record.package_id is None:
        return None
    return PackageResult(
        package_id=record.package_id,
        package_name=record.package_name,
        package_url=record.package_url,
        repository_name=record.repo_name,
        repository_owner=record.repo_owner,
        summary=record.summary,
    )


def is_package_result(result: SearchResult) -> bool:
    return isinstance(result, PackageResult)


@dataclass(frozen=True)
class SearchFilterViewModel:
    """Display form of an applied filter, e.g. ("stars", "is greater than", "500")."""

    key: str
    operator: str
    value: str


@dataclass(frozen=True)
class SearchResponse:
    """Search response envelope (read-model)."""

    has_more_results: bool
    search_term: str
    search_filters: list[SearchFilterViewModel]
    results: list[SearchResult]
