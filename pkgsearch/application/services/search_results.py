"""Search result assembly: decode records, compute has_more_results, cut the page."""

from __future__ import annotations

import logging
from typing import Sequence

from pkgsearch.application.dtos.search import (
    SearchRecord,
    SearchResponse,
    SearchResult,
    is_package_result,
    search_result_from_record,
)
from pkgsearch.application.services.search_filters import SearchFilter

logger = logging.getLogger(__name__)


def decode_results(records: Sequence[SearchRecord]) -> list[SearchResult]:
    """Map records to result variants in order, dropping the ones missing required fields."""
    results: list[SearchResult] = []
    for record in records:
        result = search_result_from_record(record)
        if result is None:
            logger.debug("Dropping %s row without its required field", record.match_type.value)
            continue
        results.append(result)
    return results


def assemble_response(
    records: Sequence[SearchRecord],
    terms: Sequence[str],
    filters: Sequence[SearchFilter],
    page: int,
    page_size: int,
) -> SearchResponse:
    """Build the response for one page from the rows of the combined statement.

    The statement over-fetches one package row: more than page_size package
    results means another page exists. Page 1 also carries the author and
    keyword results, so its cut is extended by their count.
    """
    results = decode_results(records)
    package_count = sum(1 for r in results if is_package_result(r))
    keep = page_size
    if page == 1:
        keep += len(results) - package_count
    return SearchResponse(
        has_more_results=package_count > page_size,
        search_term=" ".join(terms),
        search_filters=[f.view_model for f in filters],
        results=results[:keep],
    )
