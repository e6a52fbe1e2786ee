"""Match query builders and the union composer for package search.

Each builder returns a QueryFragment over the search view that projects
UNIFIED_COLUMNS in order, filling the columns its match type does not own
with typed NULLs:

    match_type | keyword | package_name | ... | repo_owner
    package      NULL      foo                  bar
    keyword      ios       NULL                 NULL
    author       NULL      NULL                 bar

so the three can be combined with UNION ALL and decoded back into one sum
type. package rows also carry repo_owner/repo_name to build the package URL.
"""

from __future__ import annotations

from typing import Sequence

from pkgsearch.application.dtos.search import UNIFIED_COLUMNS
from pkgsearch.application.query.fragment import (
    Column,
    Comparison,
    Expression,
    Func,
    IsNotNull,
    Literal,
    OrderBy,
    Projection,
    QueryFragment,
    Relation,
    SearchQuery,
    SqlType,
    TypedNull,
    UnionAll,
    Unnest,
)
from pkgsearch.application.services.search_filters import SearchFilter
from pkgsearch.core.config import SearchConfig
from pkgsearch.domain.enums import MatchType

_NULL_TYPES: dict[str, str] = {
    "keyword": SqlType.TEXT,
    "package_id": SqlType.UUID,
    "package_name": SqlType.TEXT,
    "repo_name": SqlType.TEXT,
    "repo_owner": SqlType.TEXT,
    "score": SqlType.INTEGER,
    "summary": SqlType.TEXT,
    "stars": SqlType.INTEGER,
    "license": SqlType.TEXT,
    "last_commit_date": SqlType.TIMESTAMP,
    "last_activity_at": SqlType.TIMESTAMP,
    "keywords": SqlType.TEXT_ARRAY,
    "levenshtein_dist": SqlType.INTEGER,
}


def merged_terms(terms: Sequence[str]) -> str:
    """Terms joined by a single space, lowercased."""
    return " ".join(terms).lower()


def _ilike_contains_pattern(text: str) -> str:
    """'%text%' with ILIKE wildcards in text escaped; empty text gives an empty pattern."""
    if not text:
        return ""
    escaped = text.replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _project(match_type: MatchType, owned: dict[str, Expression]) -> tuple[Projection, ...]:
    """Project UNIFIED_COLUMNS: match_type tag, owned columns, typed NULL for the rest."""
    projections = [Projection(Literal(match_type.value, SqlType.TEXT, inline=True), "match_type")]
    for name in UNIFIED_COLUMNS[1:]:
        expr = owned.get(name, TypedNull(_NULL_TYPES[name]))
        projections.append(Projection(expr, name))
    return tuple(projections)


def package_match_fragment(
    terms: Sequence[str],
    filters: Sequence[SearchFilter] = (),
    offset: int | None = None,
    limit: int | None = None,
    config: SearchConfig = SearchConfig(),
) -> QueryFragment:
    """Packages whose haystack matches every term (case-insensitive regex, unanchored).

    Ranking: exact package name match on the merged terms first, then score
    descending, then package name ascending.
    """
    haystack = Func(
        "concat_ws",
        (
            Literal(" ", SqlType.TEXT, inline=True),
            Column("package_name"),
            Func("coalesce", (Column("summary"), Literal("", SqlType.TEXT, inline=True))),
            Column("repo_name"),
            Column("repo_owner"),
            Func("array_to_string", (Column("keywords"), Literal(" ", SqlType.TEXT, inline=True))),
        ),
    )
    # Packages without keywords would drop out of the join on unnest(keywords);
    # unnesting a one-element {""} array keeps them. Only the first element row
    # is kept so each package appears once.
    keyword_rows = Unnest(
        Func(
            "coalesce",
            (
                Func("nullif", (Column("keywords"), Literal("{}", SqlType.TEXT_ARRAY, inline=True))),
                Literal('{""}', SqlType.TEXT_ARRAY, inline=True),
            ),
        ),
        "keyword",
        ordinality="keyword_position",
    )
    owned: dict[str, Expression] = {
        name: Column(name)
        for name in (
            "package_id",
            "package_name",
            "repo_name",
            "repo_owner",
            "score",
            "summary",
            "stars",
            "license",
            "last_commit_date",
            "last_activity_at",
            "keywords",
        )
    }
    predicates = [
        Comparison(haystack, "~*", Literal(term, SqlType.TEXT))
        for term in terms[: config.max_terms]
    ]
    predicates.append(
        Comparison(Column("keyword_position"), "=", Literal(1, SqlType.INTEGER, inline=True))
    )
    predicates.append(IsNotNull(Column("repo_owner")))
    predicates.append(IsNotNull(Column("repo_name")))
    predicates.extend(f.predicate() for f in filters)

    return QueryFragment(
        projections=_project(MatchType.PACKAGE, owned),
        sources=(Relation(config.view_name), keyword_rows),
        predicates=tuple(predicates),
        order_by=(
            OrderBy(
                Comparison(
                    Func("lower", (Column("package_name"),)),
                    "=",
                    Literal(merged_terms(terms), SqlType.TEXT),
                ),
                descending=True,
                nulls_last=True,
            ),
            OrderBy(Column("score"), descending=True, nulls_last=True),
            OrderBy(Column("package_name")),
        ),
        offset=offset,
        limit=limit,
    )


def keyword_match_fragment(
    terms: Sequence[str], config: SearchConfig = SearchConfig()
) -> QueryFragment:
    """Distinct keywords containing the merged terms, closest spelling first."""
    merged = merged_terms(terms)
    return QueryFragment(
        projections=_project(
            MatchType.KEYWORD,
            {
                "keyword": Column("keyword"),
                "levenshtein_dist": Func(
                    "levenshtein", (Column("keyword"), Literal(merged, SqlType.TEXT))
                ),
            },
        ),
        sources=(
            Relation(config.view_name),
            Unnest(Column("keywords"), "keyword"),
        ),
        predicates=(
            Comparison(
                Column("keyword"),
                "ILIKE",
                Literal(_ilike_contains_pattern(merged), SqlType.TEXT),
            ),
        ),
        order_by=(OrderBy(Column("levenshtein_dist")), OrderBy(Column("keyword"))),
        limit=config.fuzzy_match_limit,
        distinct=True,
    )


def author_match_fragment(
    terms: Sequence[str], config: SearchConfig = SearchConfig()
) -> QueryFragment:
    """Distinct repository owners containing the merged terms, closest spelling first."""
    merged = merged_terms(terms)
    return QueryFragment(
        projections=_project(
            MatchType.AUTHOR,
            {
                "repo_owner": Column("repo_owner"),
                "levenshtein_dist": Func(
                    "levenshtein", (Column("repo_owner"), Literal(merged, SqlType.TEXT))
                ),
            },
        ),
        sources=(Relation(config.view_name),),
        predicates=(
            Comparison(
                Column("repo_owner"),
                "ILIKE",
                Literal(_ilike_contains_pattern(merged), SqlType.TEXT),
            ),
        ),
        order_by=(OrderBy(Column("levenshtein_dist")), OrderBy(Column("repo_owner"))),
        limit=config.fuzzy_match_limit,
        distinct=True,
    )


def compose_search_query(
    terms: Sequence[str],
    filters: Sequence[SearchFilter],
    page: int,
    page_size: int,
    config: SearchConfig = SearchConfig(),
) -> SearchQuery | None:
    """Combine the match fragments for one page into a single statement.

    Returns None when there are neither terms nor filters. Page 1 is
    author UNION ALL keyword UNION ALL package; later pages query packages
    only. Packages are fetched with limit page_size + 1 so the caller can tell
    whether another page exists.
    """
    if not terms and not filters:
        return None
    page = max(page, 1)
    packages = package_match_fragment(
        terms,
        filters,
        offset=(page - 1) * page_size,
        limit=page_size + 1,
        config=config,
    )
    if page > 1:
        return packages
    return UnionAll(
        (
            author_match_fragment(terms, config),
            keyword_match_fragment(terms, config),
            packages,
        )
    )
