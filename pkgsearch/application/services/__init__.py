"""Search services: term sanitizer, filter splitter, result assembler."""

from pkgsearch.application.services.search_filters import (
    FILTER_TYPES,
    SearchFilter,
    parse_filter,
    split_terms,
)
from pkgsearch.application.services.search_results import assemble_response, decode_results
from pkgsearch.application.services.term_sanitizer import sanitize, sanitize_term

__all__ = [
    "FILTER_TYPES",
    "SearchFilter",
    "parse_filter",
    "split_terms",
    "assemble_response",
    "decode_results",
    "sanitize",
    "sanitize_term",
]
