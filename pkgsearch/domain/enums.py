"""Domain enumerations for package search.

Enums represent fixed sets of domain values: match types of search rows,
filter operators, licenses, platforms and product types.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class MatchType(_ValuesMixin, str, Enum):
    """Which match strategy produced a search row (discriminant of the unified row)."""

    AUTHOR = "author"
    KEYWORD = "keyword"
    PACKAGE = "package"


class FilterOperator(_ValuesMixin, str, Enum):
    """Comparison operator of a structured search filter."""

    IS = "is"
    IS_NOT = "is not"
    GREATER_THAN = "is greater than"
    GREATER_THAN_OR_EQUAL = "is greater than or equal to"
    LESS_THAN = "is less than"
    LESS_THAN_OR_EQUAL = "is less than or equal to"

    @property
    def sql_operator(self) -> str:
        """SQL comparison operator for scalar comparisons."""
        return _SQL_OPERATORS[self]


_SQL_OPERATORS: dict[FilterOperator, str] = {
    FilterOperator.IS: "=",
    FilterOperator.IS_NOT: "!=",
    FilterOperator.GREATER_THAN: ">",
    FilterOperator.GREATER_THAN_OR_EQUAL: ">=",
    FilterOperator.LESS_THAN: "<",
    FilterOperator.LESS_THAN_OR_EQUAL: "<=",
}


class LicenseKind(_ValuesMixin, str, Enum):
    """License grouping by App Store compatibility."""

    COMPATIBLE = "compatible"
    INCOMPATIBLE = "incompatible"
    OTHER = "other"
    NONE = "none"


class License(_ValuesMixin, str, Enum):
    """Licenses recognized on repositories (GitHub license keys)."""

    AFL_3_0 = "afl-3.0"
    APACHE_2_0 = "apache-2.0"
    ARTISTIC_2_0 = "artistic-2.0"
    BSL_1_0 = "bsl-1.0"
    BSD_2_CLAUSE = "bsd-2-clause"
    BSD_3_CLAUSE = "bsd-3-clause"
    BSD_3_CLAUSE_CLEAR = "bsd-3-clause-clear"
    CC = "cc"
    CC0_1_0 = "cc0-1.0"
    CC_BY_4_0 = "cc-by-4.0"
    CC_BY_SA_4_0 = "cc-by-sa-4.0"
    WTFPL = "wtfpl"
    ECL_2_0 = "ecl-2.0"
    EPL_1_0 = "epl-1.0"
    EPL_2_0 = "epl-2.0"
    EUPL_1_1 = "eupl-1.1"
    AGPL_3_0 = "agpl-3.0"
    GPL = "gpl"
    GPL_2_0 = "gpl-2.0"
    GPL_3_0 = "gpl-3.0"
    LGPL = "lgpl"
    LGPL_2_1 = "lgpl-2.1"
    LGPL_3_0 = "lgpl-3.0"
    ISC = "isc"
    LPPL_1_3C = "lppl-1.3c"
    MS_PL = "ms-pl"
    MIT = "mit"
    MPL_2_0 = "mpl-2.0"
    OSL_3_0 = "osl-3.0"
    POSTGRESQL = "postgresql"
    OFL_1_1 = "ofl-1.1"
    NCSA = "ncsa"
    UNLICENSE = "unlicense"
    ZLIB = "zlib"
    OTHER = "other"
    NONE = "none"

    @property
    def kind(self) -> LicenseKind:
        """App Store compatibility group of this license."""
        if self is License.NONE:
            return LicenseKind.NONE
        if self is License.OTHER:
            return LicenseKind.OTHER
        if self in _INCOMPATIBLE_LICENSES:
            return LicenseKind.INCOMPATIBLE
        return LicenseKind.COMPATIBLE

    @classmethod
    def of_kind(cls, kind: LicenseKind) -> list["License"]:
        """Return all licenses in the given kind, in declaration order."""
        return [lic for lic in cls if lic.kind is kind]


_INCOMPATIBLE_LICENSES = frozenset(
    {
        License.AGPL_3_0,
        License.GPL,
        License.GPL_2_0,
        License.GPL_3_0,
        License.LGPL,
        License.LGPL_2_1,
        License.LGPL_3_0,
    }
)


class Platform(_ValuesMixin, str, Enum):
    """Platforms a package can be compatible with."""

    IOS = "ios"
    LINUX = "linux"
    MACOS = "macos"
    TVOS = "tvos"
    VISIONOS = "visionos"
    WATCHOS = "watchos"


class ProductType(_ValuesMixin, str, Enum):
    """Product types a package can declare."""

    EXECUTABLE = "executable"
    LIBRARY = "library"
    MACRO = "macro"
    PLUGIN = "plugin"
