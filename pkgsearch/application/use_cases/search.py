"""Package search use case. Sanitizes and splits terms, builds one statement, assembles the page."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pkgsearch.application.dtos.search import SearchResponse
from pkgsearch.application.query.builders import compose_search_query
from pkgsearch.application.services.search_filters import split_terms
from pkgsearch.application.services.search_results import assemble_response
from pkgsearch.application.services.term_sanitizer import sanitize
from pkgsearch.core.config import SearchConfig
from pkgsearch.domain.exceptions import ValidationException
from pkgsearch.shared.telemetry.tracing import add_span_attributes, traced

if TYPE_CHECKING:
    from pkgsearch.application.interfaces.repositories import ISearchRepository

logger = logging.getLogger(__name__)


class SearchService:
    """Composite search over packages, keywords and authors (one round trip per call)."""

    def __init__(
        self,
        search_repo: "ISearchRepository",
        config: SearchConfig | None = None,
    ) -> None:
        self.search_repo = search_repo
        self.config = config or SearchConfig()

    @traced("search.fetch")
    async def fetch(self, terms: list[str], page: int, page_size: int) -> SearchResponse:
        """Return one page of results for raw terms.

        Terms are sanitized, then `key:value` tokens become filters. Page is
        clamped to 1. No statement is issued when neither terms nor filters
        remain.

        Raises:
            ValidationException: page_size < 1.
            SearchUnavailableException: the store failed.
        """
        if page_size < 1:
            raise ValidationException("page_size must be >= 1", field="page_size")
        page = max(page, 1)
        text_terms, filters = split_terms(sanitize(terms))
        add_span_attributes(
            **{
                "search.terms_count": len(text_terms),
                "search.filters_count": len(filters),
                "search.page": page,
            }
        )

        query = compose_search_query(text_terms, filters, page, page_size, self.config)
        if query is None:
            logger.debug("Empty search input; no statement issued")
            return SearchResponse(
                has_more_results=False,
                search_term=" ".join(text_terms),
                search_filters=[],
                results=[],
            )

        records = await self.search_repo.fetch_records(query)
        response = assemble_response(records, text_terms, filters, page, page_size)
        add_span_attributes(**{"search.results_count": len(response.results)})
        logger.debug(
            "Search page=%d terms=%d filters=%d rows=%d results=%d more=%s",
            page,
            len(text_terms),
            len(filters),
            len(records),
            len(response.results),
            response.has_more_results,
        )
        return response
