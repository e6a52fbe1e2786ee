"""PostgreSQL compiler for search query fragments.

Turns the dialect-neutral fragments from pkgsearch.application.query into
SQLAlchemy Core statements. User values become bound parameters; only
Literal(inline=True) constants chosen by the builders are rendered into SQL.
"""

from __future__ import annotations

from typing import Any

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from sqlalchemy.sql.elements import ColumnElement, TextClause
from sqlalchemy.sql.selectable import FromClause, Select

from pkgsearch.application.query.fragment import (
    COMPARISON_OPERATORS,
    AnyOf,
    Column,
    Comparison,
    Func,
    InList,
    IsNotNull,
    Literal,
    Not,
    OrderBy,
    QueryFragment,
    Relation,
    SearchQuery,
    SqlType,
    TypedNull,
    UnionAll,
    Unnest,
)

_SQL_TYPES: dict[str, Any] = {
    SqlType.TEXT: sa.Text(),
    SqlType.INTEGER: sa.Integer(),
    SqlType.UUID: postgresql.UUID(as_uuid=True),
    SqlType.TIMESTAMP: sa.DateTime(timezone=True),
    SqlType.DATE: sa.Date(),
    SqlType.TEXT_ARRAY: postgresql.ARRAY(sa.Text()),
}

# Alias of the derived table wrapping the combined statement.
OUTER_ALIAS = "t"


def _sql_type(name: str | None) -> Any:
    if name is None:
        return None
    try:
        return _SQL_TYPES[name]
    except KeyError:
        raise ValueError(f"Unsupported SQL type: {name!r}") from None


def _inline_sql(value: Any) -> str:
    """Render a builder constant as SQL text (strings single-quoted)."""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    raise ValueError(f"Cannot inline value of type {type(value).__name__}")


class PostgresCompiler:
    """Compile QueryFragment / UnionAll values into executable SQLAlchemy statements."""

    dialect = postgresql.dialect()

    def compile(self, query: SearchQuery) -> Select:
        """Return `SELECT * FROM (<query>) AS t` for a fragment or a UNION ALL of fragments."""
        if isinstance(query, UnionAll):
            inner: Any = sa.union_all(*(self.select(f) for f in query.fragments))
        else:
            inner = self.select(query)
        return sa.select(sa.literal_column("*")).select_from(inner.subquery(OUTER_ALIAS))

    def select(self, fragment: QueryFragment) -> Select:
        stmt = sa.select(
            *(self.expression(p.expr).label(p.alias) for p in fragment.projections)
        ).select_from(*(self.source(s) for s in fragment.sources))
        if fragment.predicates:
            stmt = stmt.where(*(self.expression(p) for p in fragment.predicates))
        if fragment.distinct:
            stmt = stmt.distinct()
        if fragment.order_by:
            stmt = stmt.order_by(*(self.order_key(o) for o in fragment.order_by))
        if fragment.offset is not None:
            stmt = stmt.offset(fragment.offset)
        if fragment.limit is not None:
            stmt = stmt.limit(fragment.limit)
        return stmt

    def order_key(self, order: OrderBy) -> ColumnElement:
        key = self.expression(order.expr).self_group()
        key = key.desc() if order.descending else key.asc()
        if order.nulls_last:
            key = key.nulls_last()
        return key

    def source(self, source: Relation | Unnest) -> FromClause:
        if isinstance(source, Relation):
            return sa.table(source.name)
        fn = sa.func.unnest(self.expression(source.expr))
        if source.ordinality is None:
            return fn.alias(source.alias)
        return fn.table_valued(
            sa.column(source.alias), with_ordinality=source.ordinality
        ).render_derived(name=source.alias)

    def expression(self, node: Any) -> ColumnElement:
        if isinstance(node, Column):
            return sa.column(node.name)
        if isinstance(node, Literal):
            type_ = _sql_type(node.sql_type)
            if node.inline:
                rendered = sa.literal_column(_inline_sql(node.value))
                if type_ is None or isinstance(node.value, int):
                    return rendered
                return sa.cast(rendered, type_)
            return sa.literal(node.value, type_)
        if isinstance(node, TypedNull):
            return sa.cast(sa.null(), _sql_type(node.sql_type))
        if isinstance(node, Func):
            return getattr(sa.func, node.name)(*(self.expression(a) for a in node.args))
        if isinstance(node, Comparison):
            if node.op not in COMPARISON_OPERATORS:
                raise ValueError(f"Unsupported comparison operator: {node.op!r}")
            left = self.expression(node.left)
            return left.op(node.op, is_comparison=True)(self.expression(node.right))
        if isinstance(node, AnyOf):
            # Custom "=" so that not_() renders NOT (x = ANY (a)) rather than x != ANY (a).
            return self.expression(node.value).op("=", is_comparison=True)(
                sa.any_(self.expression(node.array))
            )
        if isinstance(node, InList):
            return self.expression(node.expr).in_(list(node.values))
        if isinstance(node, IsNotNull):
            return self.expression(node.expr).is_not(None)
        if isinstance(node, Not):
            return sa.not_(self.expression(node.predicate))
        raise TypeError(f"Cannot compile query node {node!r}")

    def refresh_view_statement(self, view_name: str, concurrently: bool) -> TextClause:
        """REFRESH MATERIALIZED VIEW [CONCURRENTLY] <view> with the name quoted."""
        quoted = self.dialect.identifier_preparer.quote(view_name)
        keyword = "CONCURRENTLY " if concurrently else ""
        return sa.text(f"REFRESH MATERIALIZED VIEW {keyword}{quoted}")

    def to_sql(self, query: SearchQuery) -> str:
        """SQL text of the compiled statement with placeholders (for logging and tests)."""
        return str(self.compile(query).compile(dialect=self.dialect))
