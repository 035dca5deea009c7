"""
Query sanitization, shared by the search and suggestion views.

Strips markup and control characters and normalises whitespace before any
text reaches the interpreter. Length and content checks run afterwards.
"""

import html
import re

from search.services.query_interpreter import MAX_QUERY_LENGTH

# ── Limits ────────────────────────────────────────────────
MIN_QUERY_LENGTH = 2
MAX_PARTIAL_LENGTH = 100
MAX_HISTORY_ENTRIES = 20


def sanitize_query(raw: str, max_length: int = MAX_QUERY_LENGTH) -> str:
    """
    Sanitise a user search query.

    1. Strip leading/trailing whitespace
    2. HTML-unescape (``&amp;`` → ``&``)
    3. Remove HTML tags
    4. Remove control characters and null bytes
    5. Collapse whitespace
    6. Truncate to ``max_length``
    """
    if not raw:
        return ""

    q = html.unescape(str(raw).strip())
    q = re.sub(r"<[^>]+>", "", q)
    q = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", q)
    q = re.sub(r"\s+", " ", q).strip()
    return q[:max_length]


def validate_query(query: str):
    """Error message for an unusable sanitised query, or None."""
    if not query:
        return "Search text is required"

    if len(query) < MIN_QUERY_LENGTH:
        return f"Search text must be at least {MIN_QUERY_LENGTH} characters long"

    # Only symbols: nothing for the interpreter to work with
    if not re.search(r"[^\W_]", query):
        return "Search text must contain at least one letter or number"

    return None


def sanitize_history(entries) -> list:
    """Sanitised, non-empty history entries, most recent ``MAX_HISTORY_ENTRIES`` kept."""
    cleaned = [sanitize_query(e) for e in entries or ()]
    return [e for e in cleaned if e][:MAX_HISTORY_ENTRIES]
