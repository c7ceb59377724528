"""Cache key functions for each domain."""

import hashlib
import json
from datetime import date

from panj_granth.types import SearchFilters


def ang_key(page_number: int) -> str:
    """Key for a page: its decimal number."""
    return str(int(page_number))


def hukamnama_key(day: date) -> str:
    """Key for a daily reading: the calendar date as YYYY-MM-DD."""
    return day.isoformat()


def normalize_query(query: str) -> str:
    """The query text exactly as it is sent: only surrounding whitespace is dropped.

    Case is significant, since the ASCII Gurmukhi search types map ``k`` and
    ``K`` to different letters.
    """
    return query.strip()


def search_key(query: str, filters: SearchFilters) -> str:
    """Key for a search: hash of the stripped query and canonical filters.

    Filters are serialized from their request parameters with sorted keys,
    so the order filters were given in never matters.
    """
    canonical = json.dumps(
        {"q": normalize_query(query), "filters": filters.to_params()},
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(canonical.encode()).hexdigest()[:16]
