"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs or query fragments only; no infrastructure imports.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pkgsearch.application.dtos.search import SearchRecord
    from pkgsearch.application.query.fragment import SearchQuery


class ISearchRepository(Protocol):
    """Protocol for the search store (materialized view reads and refresh)."""

    async def fetch_records(self, query: "SearchQuery") -> list["SearchRecord"]:
        """Execute the combined search statement in one round trip.

        Rows that do not carry a known match_type are skipped. Store failures
        raise SearchUnavailableException.
        """
        ...

    async def refresh_view(self, view_name: str, concurrently: bool) -> None:
        """Rebuild the materialized view. Failures raise ViewRefreshException."""
        ...
