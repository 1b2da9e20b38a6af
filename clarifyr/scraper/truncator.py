"""Content length bound applied before prompting."""

from __future__ import annotations

TRUNCATION_MARKER = "...[TRUNCATED]"


def truncate(text: str, limit: int) -> str:
    """Cut *text* to *limit* characters and append :data:`TRUNCATION_MARKER`.

    Text at or under the limit is returned unchanged.  The cut is by
    character, so it may land mid-word.

    Raises:
        ValueError: If *limit* is not a positive integer.
    """
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise ValueError(f"limit must be a positive integer, got {limit!r}")
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER
