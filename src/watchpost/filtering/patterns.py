"""Wildcard pattern matching for filter rules.

Supported patterns (all comparisons case-insensitive):
- "exact"        exact match
- "prefix*"      starts with "prefix"
- "*suffix"      ends with "suffix"
- "*contains*"   contains "contains"

Wildcards are only recognized at the two ends of a pattern; a "*" anywhere
else is matched literally.
"""

from collections.abc import Iterable

from watchpost.errors import InvalidInputError


def matches(value: str | None, pattern: str | None) -> bool:
    """Determine if a value matches a wildcard pattern.

    Args:
        value: The value to check.
        pattern: The pattern with optional wildcards at start and/or end.

    Returns:
        True if the value matches the pattern. Empty or missing value or
        pattern never matches.
    """
    if not value or not pattern:
        return False

    subject = value.casefold()
    needle = pattern.casefold()

    if needle.startswith("*") and needle.endswith("*") and len(needle) > 2:
        return needle[1:-1] in subject

    if needle.endswith("*"):
        return subject.startswith(needle[:-1])

    if needle.startswith("*"):
        return subject.endswith(needle[1:])

    return subject == needle


def matches_any(value: str | None, patterns: Iterable[str] | None) -> bool:
    """Determine if a value matches any pattern in a collection.

    Args:
        value: The value to check.
        patterns: The patterns to check against. An empty collection never
            matches.

    Returns:
        True on the first matching pattern, False otherwise.

    Raises:
        InvalidInputError: If the pattern collection itself is None.
    """
    if patterns is None:
        raise InvalidInputError("patterns must not be None")

    return any(matches(value, pattern) for pattern in patterns)
