"""Core types for the Gurbani reader cache."""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import timedelta
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")

# Duration type alias
Duration = str | int | timedelta  # "30s", "5m", "1h", "7d", milliseconds or timedelta

# Raw JSON object as returned by the remote API
Payload = dict[str, Any]

FIRST_ANG = 1
LAST_ANG = 1430

DEFAULT_SOURCE = "G"  # Guru Granth Sahib
DEFAULT_SEARCH_TYPE = 3  # Full word (English)
DEFAULT_RESULTS = 20
MAX_RESULTS = 100
SEARCH_TYPES = range(0, 8)


class Source(str, Enum):
    """Where a returned value came from."""

    CACHE = "cache"
    NETWORK = "network"


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[T]):
    """A cached payload with the time it was written."""

    data: T
    timestamp: int  # Unix timestamp ms

    def to_json(self) -> dict[str, Any]:
        return {"data": self.data, "timestamp": self.timestamp}


@dataclass(frozen=True, slots=True)
class FetchResult(Generic[T]):
    """A value returned by a read-through call."""

    value: T
    source: Source

    @property
    def from_cache(self) -> bool:
        return self.source is Source.CACHE


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Number of stored entries per domain."""

    ang_count: int = 0
    hukamnama_count: int = 0
    search_count: int = 0


# Accepted spellings for SearchFilters.from_mapping
_FILTER_ALIASES = {
    "searchType": "search_type",
    "searchtype": "search_type",
}


@dataclass(frozen=True, slots=True)
class SearchFilters:
    """Filters for a full-text search.

    ``results`` is clamped to MAX_RESULTS when the request parameters are
    built; everything else is passed through as given.
    """

    search_type: int = DEFAULT_SEARCH_TYPE
    source: str = DEFAULT_SOURCE
    writer: int | None = None
    raag: int | None = None
    ang: int | None = None
    results: int = DEFAULT_RESULTS
    skip: int = 0

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "SearchFilters":
        """Build filters from API-style or snake_case keys, in any order.

        Keys whose value is None are treated as absent.
        """
        known = set(cls.__dataclass_fields__)
        kwargs: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            name = _FILTER_ALIASES.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown search filter: {key!r}")
            kwargs[name] = value
        return cls(**kwargs)

    def with_skip(self, skip: int) -> "SearchFilters":
        """Return a copy of these filters at another pagination offset."""
        return replace(self, skip=skip)

    def to_params(self) -> dict[str, str]:
        """Request parameters in a fixed order. Same filters give same params."""
        params = {
            "searchtype": str(self.search_type),
            "source": self.source,
            "results": str(min(self.results, MAX_RESULTS)),
            "skip": str(self.skip),
        }
        if self.writer is not None:
            params["writer"] = str(self.writer)
        if self.raag is not None:
            params["raag"] = str(self.raag)
        if self.ang is not None:
            params["ang"] = str(self.ang)
        return params
