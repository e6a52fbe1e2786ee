"""Search term sanitization: escape regex metacharacters so terms match literally."""

# Backslash must come first so escapes added for later characters are not escaped again.
_ESCAPED_CHARACTERS = ("\\", "*", "?", "(", ")", "[", "]")
# Other operators (+ { } | ^ $ .) reach ~* as written. A term that is not a valid
# pattern, such as "c++", fails the search statement with SEARCH_UNAVAILABLE.


def sanitize_term(term: str) -> str:
    """Prefix each of \\ * ? ( ) [ ] in term with a backslash."""
    for char in _ESCAPED_CHARACTERS:
        term = term.replace(char, "\\" + char)
    return term


def sanitize(terms: list[str]) -> list[str]:
    """Escape every term and drop the empty ones. Order is preserved."""
    return [s for s in (sanitize_term(t) for t in terms) if s]
