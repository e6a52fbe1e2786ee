"""Structured search filters and the filter/term splitter.

A search token of the form `key:value` with a recognized key becomes a
SearchFilter; every other token stays a free-text term. Values may carry an
operator prefix (`>=`, `<=`, `>`, `<`, `!`); without one the operator is
`is`. Tokens whose operator or value is not valid for the key fall back to
free-text terms, no error is raised.

Each filter renders a view model for display and a predicate of the query
fragment AST that the package builder ANDs into its WHERE clause.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, ClassVar

from pkgsearch.application.dtos.search import SearchFilterViewModel
from pkgsearch.application.query.fragment import (
    AnyOf,
    Column,
    Comparison,
    Func,
    InList,
    Literal,
    Not,
    Predicate,
    SqlType,
)
from pkgsearch.domain.enums import (
    FilterOperator,
    License,
    LicenseKind,
    Platform,
    ProductType,
)

# Longest prefixes first so ">=" is not read as ">".
_OPERATOR_PREFIXES: tuple[tuple[str, FilterOperator], ...] = (
    (">=", FilterOperator.GREATER_THAN_OR_EQUAL),
    ("<=", FilterOperator.LESS_THAN_OR_EQUAL),
    (">", FilterOperator.GREATER_THAN),
    ("<", FilterOperator.LESS_THAN),
    ("!", FilterOperator.IS_NOT),
)

_EQUALITY_OPERATORS = frozenset({FilterOperator.IS, FilterOperator.IS_NOT})
_ALL_OPERATORS = frozenset(FilterOperator)


def _negate_if(operator: FilterOperator, predicate: Predicate) -> Predicate:
    return Not(predicate) if operator is FilterOperator.IS_NOT else predicate


def _parse_enum_list(enum_cls: type, raw: str) -> tuple[Any, ...]:
    """Parse comma-separated enum values (deduplicated, order kept). Raises ValueError."""
    parts = [p.strip().lower() for p in raw.split(",")]
    if not parts or any(not p for p in parts):
        raise ValueError(f"empty {enum_cls.__name__} value")
    values = []
    for part in parts:
        value = enum_cls(part)
        if value not in values:
            values.append(value)
    return tuple(values)


class SearchFilter(ABC):
    """A structured predicate extracted from the search input.

    Subclasses set key and allowed_operators, parse their value in
    parse_value (raising ValueError when malformed) and build their
    predicate against the search view.
    """

    key: ClassVar[str]
    allowed_operators: ClassVar[frozenset[FilterOperator]] = _EQUALITY_OPERATORS

    def __init__(self, operator: FilterOperator, value: Any) -> None:
        if operator not in self.allowed_operators:
            raise ValueError(f"operator '{operator.value}' not supported for {self.key}")
        self.operator = operator
        self.value = value

    @classmethod
    @abstractmethod
    def parse_value(cls, raw: str) -> Any:
        """Parse the raw filter value. Raises ValueError when malformed."""

    @abstractmethod
    def predicate(self) -> Predicate:
        """Predicate on the search view that rows must satisfy."""

    def display_value(self) -> str:
        return str(self.value)

    @property
    def view_model(self) -> SearchFilterViewModel:
        return SearchFilterViewModel(
            key=self.key,
            operator=self.operator.value,
            value=self.display_value(),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SearchFilter):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.operator is other.operator
            and self.value == other.value
        )

    def __hash__(self) -> int:
        return hash((type(self), self.operator, self.value))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.operator.value!r}, {self.value!r})"


class AuthorSearchFilter(SearchFilter):
    """Repository owner equals the value (case-insensitive)."""

    key = "author"

    @classmethod
    def parse_value(cls, raw: str) -> str:
        if not raw.strip():
            raise ValueError("empty author")
        return raw.strip().lower()

    def predicate(self) -> Predicate:
        return Comparison(
            Func("lower", (Column("repo_owner"),)),
            self.operator.sql_operator,
            Literal(self.value, SqlType.TEXT),
        )


class KeywordSearchFilter(SearchFilter):
    """Package keywords contain the value."""

    key = "keyword"

    @classmethod
    def parse_value(cls, raw: str) -> str:
        if not raw.strip():
            raise ValueError("empty keyword")
        return raw.strip().lower()

    def predicate(self) -> Predicate:
        return _negate_if(
            self.operator,
            AnyOf(Literal(self.value, SqlType.TEXT), Column("keywords")),
        )


class LicenseSearchFilter(SearchFilter):
    """License is of a compatibility kind (compatible, incompatible) or a specific license."""

    key = "license"

    @classmethod
    def parse_value(cls, raw: str) -> License | LicenseKind:
        value = raw.strip().lower()
        if value in (LicenseKind.COMPATIBLE.value, LicenseKind.INCOMPATIBLE.value):
            return LicenseKind(value)
        return License(value)

    def predicate(self) -> Predicate:
        if isinstance(self.value, LicenseKind):
            licenses = tuple(lic.value for lic in License.of_kind(self.value))
            return _negate_if(self.operator, InList(Column("license"), licenses))
        return Comparison(
            Column("license"),
            self.operator.sql_operator,
            Literal(self.value.value, SqlType.TEXT),
        )

    def display_value(self) -> str:
        if self.value is LicenseKind.COMPATIBLE:
            return "compatible with the App Store"
        if self.value is LicenseKind.INCOMPATIBLE:
            return "incompatible with the App Store"
        return self.value.value


class _DateSearchFilter(SearchFilter):
    """Date column compared at day granularity. Value format: YYYY-MM-DD."""

    column: ClassVar[str]
    allowed_operators = _ALL_OPERATORS

    @classmethod
    def parse_value(cls, raw: str) -> date:
        return date.fromisoformat(raw.strip())

    def predicate(self) -> Predicate:
        return Comparison(
            Func("date", (Column(self.column),)),
            self.operator.sql_operator,
            Literal(self.value, SqlType.DATE),
        )

    def display_value(self) -> str:
        return self.value.isoformat()


class LastActivitySearchFilter(_DateSearchFilter):
    key = "last_activity"
    column = "last_activity_at"


class LastCommitSearchFilter(_DateSearchFilter):
    key = "last_commit"
    column = "last_commit_date"


class PlatformSearchFilter(SearchFilter):
    """Compatible with any of the listed platforms (comma-separated)."""

    key = "platform"

    @classmethod
    def parse_value(cls, raw: str) -> tuple[Platform, ...]:
        return _parse_enum_list(Platform, raw)

    def predicate(self) -> Predicate:
        return _negate_if(
            self.operator,
            Comparison(
                Column("platform_compatibility"),
                "&&",
                Literal([p.value for p in self.value], SqlType.TEXT_ARRAY),
            ),
        )

    def display_value(self) -> str:
        return ", ".join(p.value for p in self.value)


class ProductTypeSearchFilter(SearchFilter):
    """Declares a product of any of the listed types (comma-separated)."""

    key = "product"

    @classmethod
    def parse_value(cls, raw: str) -> tuple[ProductType, ...]:
        return _parse_enum_list(ProductType, raw)

    def predicate(self) -> Predicate:
        return _negate_if(
            self.operator,
            Comparison(
                Column("product_types"),
                "&&",
                Literal([p.value for p in self.value], SqlType.TEXT_ARRAY),
            ),
        )

    def display_value(self) -> str:
        return ", ".join(p.value for p in self.value)


class StarsSearchFilter(SearchFilter):
    key = "stars"
    allowed_operators = _ALL_OPERATORS

    @classmethod
    def parse_value(cls, raw: str) -> int:
        raw = raw.strip()
        if not raw.isdigit():
            raise ValueError(f"stars must be a non-negative integer, got {raw!r}")
        return int(raw)

    def predicate(self) -> Predicate:
        return Comparison(
            Column("stars"),
            self.operator.sql_operator,
            Literal(self.value, SqlType.INTEGER),
        )


FILTER_TYPES: dict[str, type[SearchFilter]] = {
    cls.key: cls
    for cls in (
        AuthorSearchFilter,
        KeywordSearchFilter,
        LastActivitySearchFilter,
        LastCommitSearchFilter,
        LicenseSearchFilter,
        PlatformSearchFilter,
        ProductTypeSearchFilter,
        StarsSearchFilter,
    )
}


def _split_operator(raw: str) -> tuple[FilterOperator, str]:
    for prefix, operator in _OPERATOR_PREFIXES:
        if raw.startswith(prefix):
            return operator, raw[len(prefix):]
    return FilterOperator.IS, raw


def parse_filter(token: str) -> SearchFilter | None:
    """Parse a `key:value` token into a filter, or None when it is not a valid filter."""
    key, sep, raw_value = token.partition(":")
    if not sep or not raw_value:
        return None
    filter_type = FILTER_TYPES.get(key.strip().lower())
    if filter_type is None:
        return None
    operator, raw_value = _split_operator(raw_value)
    try:
        return filter_type(operator, filter_type.parse_value(raw_value))
    except ValueError:
        return None


def split_terms(terms: list[str]) -> tuple[list[str], list[SearchFilter]]:
    """Partition sanitized tokens into free-text terms and filters (order kept in both)."""
    text_terms: list[str] = []
    filters: list[SearchFilter] = []
    for token in terms:
        search_filter = parse_filter(token)
        if search_filter is None:
            text_terms.append(token)
        else:
            filters.append(search_filter)
    return text_terms, filters
