"""Search repository integration tests. Require a migrated Postgres; session is rolled back after each test.

Rows are inserted into the base tables, the view is refreshed inside the
test transaction (plain REFRESH, no commit) and then searched.
"""

import uuid

import pytest

from pkgsearch.application.dtos.search import KeywordResult, PackageResult
from pkgsearch.application.query.builders import compose_search_query
from pkgsearch.application.services.search_filters import parse_filter
from pkgsearch.application.use_cases.search import SearchService
from pkgsearch.domain.enums import MatchType
from pkgsearch.domain.exceptions import SearchUnavailableException
from pkgsearch.infrastructure.persistence.models import Package, Product, Repository
from pkgsearch.infrastructure.persistence.repositories import SearchRepository
from pkgsearch.infrastructure.persistence.search_compiler import PostgresCompiler


async def _add_package(
    db_session,
    name: str | None,
    owner: str,
    score: int = 0,
    keywords: list[str] | None = None,
    license: str = "mit",
    products: tuple[str, ...] = (),
    repo_name: str | None = None,
    summary: str | None = None,
) -> Package:
    repo_name = repo_name or name
    package = Package(
        id=uuid.uuid4(),
        url=f"https://github.com/{owner}/{repo_name}-{uuid.uuid4().hex[:8]}.git",
        name=name,
        score=score,
        platform_compatibility=["ios", "macos"],
    )
    db_session.add(package)
    await db_session.flush()
    db_session.add(
        Repository(
            package_id=package.id,
            name=repo_name,
            owner=owner,
            summary=summary or f"{repo_name} test package",
            license=license,
            keywords=keywords or [],
        )
    )
    for product_type in products:
        db_session.add(Product(package_id=package.id, name=repo_name, type=product_type))
    await db_session.flush()
    return package


async def _refresh(db_session) -> None:
    await db_session.execute(PostgresCompiler().refresh_view_statement("search", False))


@pytest.mark.requires_db
async def test_exact_name_ranks_first_regardless_of_score(db_session) -> None:
    """A package named exactly like the query outranks more popular partial matches."""
    owner = f"owner-{uuid.uuid4().hex[:8]}"
    await _add_package(db_session, "AlamofireImage", owner, score=1000)
    await _add_package(db_session, "Alamofire", owner, score=1)
    await _refresh(db_session)

    response = await SearchService(SearchRepository(db_session)).fetch(
        ["Alamofire"], page=1, page_size=20
    )

    packages = [r for r in response.results if isinstance(r, PackageResult)]
    assert packages
    assert packages[0].package_name.lower() == "alamofire"


@pytest.mark.requires_db
async def test_unnamed_package_ranks_after_exact_name(db_session) -> None:
    """A package without a name compares as NULL and must not sort above the exact match."""
    owner = f"owner-{uuid.uuid4().hex[:8]}"
    await _add_package(
        db_session,
        None,
        owner,
        score=1000,
        repo_name=f"unnamed-{uuid.uuid4().hex[:6]}",
        summary="Helpers on top of Alamofire",
    )
    await _add_package(db_session, "Alamofire", owner, score=1)
    await _refresh(db_session)

    records = await SearchRepository(db_session).fetch_records(
        compose_search_query(
            ["Alamofire"], [parse_filter(f"author:{owner}")], page=1, page_size=20
        )
    )

    packages = [r for r in records if r.match_type is MatchType.PACKAGE]
    assert [p.package_name for p in packages] == ["Alamofire", None]


@pytest.mark.requires_db
async def test_invalid_pattern_term_reports_search_unavailable(db_session) -> None:
    """Plus signs are not escaped, so c++ is an invalid pattern for ~* and the store rejects it."""
    await _add_package(db_session, f"cpp-{uuid.uuid4().hex[:6]}", "someone")
    await _refresh(db_session)

    with pytest.raises(SearchUnavailableException) as exc_info:
        await SearchService(SearchRepository(db_session)).fetch(["c++"], page=2, page_size=20)

    assert exc_info.value.error_code == "SEARCH_UNAVAILABLE"


@pytest.mark.requires_db
async def test_keywords_ordered_by_edit_distance(db_session) -> None:
    await _add_package(
        db_session,
        f"net-{uuid.uuid4().hex[:6]}",
        f"owner-{uuid.uuid4().hex[:8]}",
        keywords=["ios-networking", "networking"],
    )
    await _refresh(db_session)

    response = await SearchService(SearchRepository(db_session)).fetch(
        ["network"], page=1, page_size=20
    )

    keywords = [r.keyword for r in response.results if isinstance(r, KeywordResult)]
    assert "networking" in keywords
    assert "ios-networking" in keywords
    assert keywords.index("networking") < keywords.index("ios-networking")


@pytest.mark.requires_db
async def test_package_with_several_keywords_listed_once(db_session) -> None:
    name = f"multi-{uuid.uuid4().hex[:8]}"
    await _add_package(db_session, name, "someone", keywords=["a", "b", "c"])
    await _add_package(db_session, name + "-bare", "someone", keywords=[])
    await _refresh(db_session)

    records = await SearchRepository(db_session).fetch_records(
        compose_search_query([name], [], page=1, page_size=20)
    )
    names = [r.package_name for r in records if r.match_type is MatchType.PACKAGE]
    assert sorted(names) == sorted([name, name + "-bare"])


@pytest.mark.requires_db
async def test_license_filter_without_terms(db_session) -> None:
    """Three MIT packages, no terms, page size 2: exactly two packages and more results."""
    for i in range(3):
        await _add_package(db_session, str(i), f"owner{i}-{uuid.uuid4().hex[:6]}", license="mit")
    await _refresh(db_session)

    response = await SearchService(SearchRepository(db_session)).fetch(
        ["license:mit"], page=1, page_size=2
    )

    assert response.has_more_results is True
    assert len(response.results) == 2
    assert all(isinstance(r, PackageResult) for r in response.results)


@pytest.mark.requires_db
async def test_product_filter(db_session) -> None:
    owner = f"owner-{uuid.uuid4().hex[:8]}"
    await _add_package(db_session, "with-macro", owner, products=("macro", "library"))
    await _add_package(db_session, "library-only", owner, products=("library",))
    await _refresh(db_session)

    response = await SearchService(SearchRepository(db_session)).fetch(
        [f"author:{owner}", "product:macro"], page=1, page_size=20
    )

    assert [r.package_name for r in response.results] == ["with-macro"]
