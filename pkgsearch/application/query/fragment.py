"""Dialect-neutral query fragments for search statements.

A small typed AST: expressions, predicates, a single-select fragment and a
UNION ALL of fragments. Builders and filters produce these values; only the
dialect compiler in infrastructure turns them into executable SQL. All user
input is carried as Literal values and bound as parameters by the compiler.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union


class SqlType:
    """Type names the compiler knows how to cast NULLs and literals to."""

    TEXT = "text"
    INTEGER = "integer"
    UUID = "uuid"
    TIMESTAMP = "timestamp"
    DATE = "date"
    TEXT_ARRAY = "text[]"


@dataclass(frozen=True)
class Column:
    """Reference to a column of the searched relation (or an unnest alias)."""

    name: str


@dataclass(frozen=True)
class Literal:
    """A value bound as a query parameter. `inline` renders constants as SQL literals."""

    value: Any
    sql_type: str | None = None
    inline: bool = False


@dataclass(frozen=True)
class TypedNull:
    """NULL cast to a type so UNION branches line up column by column."""

    sql_type: str


@dataclass(frozen=True)
class Func:
    """SQL function call, e.g. Func("levenshtein", (Column("keyword"), Literal("x")))."""

    name: str
    args: tuple[Expression, ...] = ()


@dataclass(frozen=True)
class Comparison:
    """Binary predicate. op is one of COMPARISON_OPERATORS."""

    left: Expression
    op: str
    right: Expression


COMPARISON_OPERATORS = frozenset(
    {"=", "!=", ">", ">=", "<", "<=", "ILIKE", "~*", "&&"}
)


@dataclass(frozen=True)
class AnyOf:
    """`value = ANY(array_expr)`."""

    value: Expression
    array: Expression


@dataclass(frozen=True)
class InList:
    """`expr IN (v1, v2, ...)`."""

    expr: Expression
    values: tuple[Any, ...]


@dataclass(frozen=True)
class IsNotNull:
    expr: Expression


@dataclass(frozen=True)
class Not:
    predicate: Predicate


Expression = Union[Column, Literal, TypedNull, Func, Comparison]
Predicate = Union[Comparison, AnyOf, InList, IsNotNull, Not]


@dataclass(frozen=True)
class Projection:
    """One selected column: expression and output name."""

    expr: Expression
    alias: str


@dataclass(frozen=True)
class Relation:
    """A named table or view."""

    name: str


@dataclass(frozen=True)
class Unnest:
    """`unnest(expr) AS alias` as an additional FROM item.

    With ordinality set, renders `unnest(expr) WITH ORDINALITY AS alias(alias, ordinality)`
    so the element position is available as a column named by ordinality.
    """

    expr: Expression
    alias: str
    ordinality: str | None = None


Source = Union[Relation, Unnest]


@dataclass(frozen=True)
class OrderBy:
    """Sort key. PostgreSQL puts NULLs first under DESC unless nulls_last is set."""

    expr: Expression
    descending: bool = False
    nulls_last: bool = False


@dataclass(frozen=True)
class QueryFragment:
    """A single SELECT: projections, FROM items, ANDed predicates, ordering, paging."""

    projections: tuple[Projection, ...]
    sources: tuple[Source, ...]
    predicates: tuple[Predicate, ...] = ()
    order_by: tuple[OrderBy, ...] = ()
    limit: int | None = None
    offset: int | None = None
    distinct: bool = False

    @property
    def column_names(self) -> tuple[str, ...]:
        """Output column names in projection order."""
        return tuple(p.alias for p in self.projections)


@dataclass(frozen=True)
class UnionAll:
    """UNION ALL of fragments (no de-duplication), in branch order."""

    fragments: tuple[QueryFragment, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.fragments:
            raise ValueError("UnionAll requires at least one fragment")
        first = self.fragments[0].column_names
        for fragment in self.fragments[1:]:
            if fragment.column_names != first:
                raise ValueError(
                    f"UNION branches must project identical columns: {first} != {fragment.column_names}"
                )

    @property
    def column_names(self) -> tuple[str, ...]:
        return self.fragments[0].column_names


SearchQuery = Union[QueryFragment, UnionAll]
