"""Match builders, union composer and their PostgreSQL compilation."""

import re

import pytest
from sqlalchemy.dialects import postgresql

from pkgsearch.application.dtos.search import UNIFIED_COLUMNS
from pkgsearch.application.query.builders import (
    author_match_fragment,
    compose_search_query,
    keyword_match_fragment,
    merged_terms,
    package_match_fragment,
)
from pkgsearch.application.query.fragment import (
    AnyOf,
    Column,
    Comparison,
    Literal,
    Not,
    Projection,
    QueryFragment,
    Relation,
    SqlType,
    UnionAll,
)
from pkgsearch.application.services.search_filters import parse_filter
from pkgsearch.core.config import SearchConfig
from pkgsearch.infrastructure.persistence.search_compiler import PostgresCompiler

compiler = PostgresCompiler()


def _compiled(query):
    return compiler.compile(query).compile(dialect=postgresql.dialect())


class TestMergedTerms:
    def test_joined_and_lowercased(self) -> None:
        assert merged_terms(["Swift", "UI"]) == "swift ui"

    def test_empty(self) -> None:
        assert merged_terms([]) == ""


class TestFragmentShape:
    def test_all_builders_project_unified_columns_in_order(self) -> None:
        for fragment in (
            package_match_fragment(["a"]),
            keyword_match_fragment(["a"]),
            author_match_fragment(["a"]),
        ):
            assert fragment.column_names == UNIFIED_COLUMNS

    def test_compiled_branches_have_identical_column_names(self) -> None:
        """The three compiled SELECTs expose the same labels in the same order."""
        names = [
            [c.name for c in compiler.select(f).selected_columns]
            for f in (
                author_match_fragment(["x"]),
                keyword_match_fragment(["x"]),
                package_match_fragment(["x"]),
            )
        ]
        assert names[0] == names[1] == names[2] == list(UNIFIED_COLUMNS)

    def test_union_rejects_mismatched_columns(self) -> None:
        other = QueryFragment(
            projections=(Projection(Column("repo_owner"), "repo_owner"),),
            sources=(Relation("search"),),
        )
        with pytest.raises(ValueError):
            UnionAll((author_match_fragment(["x"]), other))

    def test_union_rejects_empty(self) -> None:
        with pytest.raises(ValueError):
            UnionAll(())


class TestPackageFragment:
    def test_one_regex_predicate_per_term(self) -> None:
        fragment = package_match_fragment(["swift", "json"])
        regex = [p for p in fragment.predicates if isinstance(p, Comparison) and p.op == "~*"]
        assert [p.right.value for p in regex] == ["swift", "json"]

    def test_terms_capped_by_config(self) -> None:
        fragment = package_match_fragment(["a", "b", "c"], config=SearchConfig(max_terms=2))
        regex = [p for p in fragment.predicates if isinstance(p, Comparison) and p.op == "~*"]
        assert len(regex) == 2

    def test_filter_predicates_are_anded(self) -> None:
        stars = parse_filter("stars:>100")
        fragment = package_match_fragment([], [stars])
        assert stars.predicate() in fragment.predicates

    def test_exact_name_match_ranks_first(self) -> None:
        fragment = package_match_fragment(["Alamofire"])
        first = fragment.order_by[0]
        assert first.descending
        assert first.expr.right == Literal("alamofire", SqlType.TEXT)
        assert [o.expr for o in fragment.order_by[1:]] == [Column("score"), Column("package_name")]

    def test_descending_keys_put_nulls_last(self) -> None:
        exact, score, name = package_match_fragment(["Alamofire"]).order_by
        assert exact.nulls_last and score.nulls_last
        assert not name.descending and not name.nulls_last

    def test_reads_configured_view(self) -> None:
        fragment = package_match_fragment(["a"], config=SearchConfig(view_name="search_v2"))
        assert Relation("search_v2") in fragment.sources


class TestComposeSearchQuery:
    def test_empty_input_builds_nothing(self) -> None:
        assert compose_search_query([], [], page=1, page_size=20) is None

    def test_first_page_is_author_keyword_package_union(self) -> None:
        query = compose_search_query(["network"], [], page=1, page_size=20)
        assert isinstance(query, UnionAll)
        kinds = [f.projections[0].expr.value for f in query.fragments]
        assert kinds == ["author", "keyword", "package"]
        packages = query.fragments[2]
        assert packages.limit == 21
        assert packages.offset == 0

    def test_later_pages_query_packages_only(self) -> None:
        query = compose_search_query(["network"], [], page=3, page_size=10)
        assert isinstance(query, QueryFragment)
        assert query.offset == 20
        assert query.limit == 11

    def test_page_clamped_to_one(self) -> None:
        assert compose_search_query(["a"], [], page=0, page_size=5) == compose_search_query(
            ["a"], [], page=1, page_size=5
        )
        assert compose_search_query(["a"], [], page=-4, page_size=5) == compose_search_query(
            ["a"], [], page=1, page_size=5
        )

    def test_filters_only_still_queries(self) -> None:
        query = compose_search_query([], [parse_filter("license:mit")], page=1, page_size=2)
        assert isinstance(query, UnionAll)

    def test_fuzzy_limit_from_config(self) -> None:
        query = compose_search_query(["a"], [], 1, 20, SearchConfig(fuzzy_match_limit=7))
        assert query.fragments[0].limit == 7
        assert query.fragments[1].limit == 7


class TestPostgresCompilation:
    def test_union_sql(self) -> None:
        compiled = _compiled(compose_search_query(["network"], [], page=1, page_size=20))
        sql = str(compiled)
        assert sql.startswith("SELECT *")
        assert sql.count("UNION ALL") == 2
        assert "~*" in sql
        assert "ILIKE" in sql
        assert "levenshtein(" in sql
        assert "WITH ORDINALITY" in sql
        assert "AS t" in sql

    def test_user_values_are_bound(self) -> None:
        compiled = _compiled(compose_search_query(["o'hara"], [], page=1, page_size=20))
        assert "o'hara" not in str(compiled)
        values = list(compiled.params.values())
        assert "o'hara" in values
        assert "%o'hara%" in values
        assert 21 in values

    def test_ilike_pattern_escapes_wildcards(self) -> None:
        compiled = _compiled(compose_search_query(["100%_done"], [], page=1, page_size=20))
        assert "%100\\%\\_done%" in compiled.params.values()

    def test_typed_nulls(self) -> None:
        sql = str(_compiled(author_match_fragment(["a"])))
        assert "CAST(NULL AS UUID)" in sql
        assert "CAST(NULL AS TEXT[])" in sql
        assert "CAST(NULL AS TIMESTAMP WITH TIME ZONE)" in sql

    def test_filter_predicates_compile(self) -> None:
        filters = [
            parse_filter("license:compatible"),
            parse_filter("platform:ios"),
            parse_filter("keyword:!json"),
            parse_filter("last_commit:>=2024-01-01"),
        ]
        compiled = _compiled(compose_search_query([], filters, page=2, page_size=20))
        sql = str(compiled)
        assert "license IN" in sql
        assert "platform_compatibility &&" in sql
        assert re.search(r"NOT \(%\(\w+\)s(::\w+)? = ANY \(keywords\)\)", sql)
        assert "date(last_commit_date) >=" in sql
        assert "UNION ALL" not in sql

    def test_negated_keyword_filter_is_not_any(self) -> None:
        predicate = parse_filter("keyword:!json").predicate()
        assert predicate == Not(AnyOf(Literal("json", SqlType.TEXT), Column("keywords")))
        sql = str(compiler.expression(predicate).compile(dialect=postgresql.dialect()))
        assert "!=" not in sql
        assert "ANY (keywords)" in sql

    def test_package_ordering_puts_nulls_last(self) -> None:
        sql = str(_compiled(compose_search_query(["Alamofire"], [], page=1, page_size=20)))
        assert re.search(r"\) DESC NULLS LAST, score DESC NULLS LAST, package_name ASC", sql)
        assert "levenshtein_dist ASC, keyword ASC" in sql

    def test_refresh_statement(self) -> None:
        assert (
            str(compiler.refresh_view_statement("search", True))
            == "REFRESH MATERIALIZED VIEW CONCURRENTLY search"
        )
        assert (
            str(compiler.refresh_view_statement("search", False))
            == "REFRESH MATERIALIZED VIEW search"
        )
