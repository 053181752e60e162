"""
Snippet builder shared by the retrieval backends.

Dependencies: None
System role: Bounded excerpt around the first query-term occurrence
"""

from typing import Iterable

ELLIPSIS = "..."


def build_snippet(
    content: str,
    query: str,
    max_length: int = 120,
    extra_terms: Iterable[str] = (),
) -> str:
    """
    Extract a window of content around the first matching query term.

    Terms are the whitespace-separated words of the query followed by any
    extra (analyzed) terms; the first term found (case-insensitive) wins.
    Without a match the window starts at the beginning of content.

    Args:
        content: Chunk content
        query: Raw query text
        max_length: Window length in characters
        extra_terms: Additional terms tried after the query words

    Returns:
        str: Excerpt of at most max_length characters plus ellipsis markers
    """
    lowered = content.lower()
    position = -1
    for term in [*query.lower().split(), *(t.lower() for t in extra_terms)]:
        if not term:
            continue
        position = lowered.find(term)
        if position != -1:
            break

    if position == -1:
        if len(content) <= max_length:
            return content
        return content[:max_length] + ELLIPSIS

    start = max(0, position - max_length // 2)
    end = min(len(content), start + max_length)
    snippet = content[start:end]
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(content):
        snippet = snippet + ELLIPSIS
    return snippet
