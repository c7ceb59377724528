"""panj_granth - cached Gurbani content for reader apps."""

from contextlib import suppress

# Remote API
from panj_granth.client import GurbaniClient

# Configuration
from panj_granth.config import Settings, get_settings

# Debouncing and search state
from panj_granth.debounce import Debouncer

# Cache internals
from panj_granth.domain import DomainCache
from panj_granth.duration import parse_duration

# Errors
from panj_granth.errors import (
    CacheCorruptionError,
    ErrorKind,
    GurbaniError,
    InvalidRequestError,
    RemoteError,
    RequestTimeoutError,
    UnknownError,
)
from panj_granth.keys import ang_key, hukamnama_key, search_key
from panj_granth.log import configure_logging
from panj_granth.metadata import CacheMetadata, MetadataStore
from panj_granth.read_through import fetch_through
from panj_granth.results import Err, Ok, attempt

# Cache façade
from panj_granth.service import GurbaniCache, create_cache
from panj_granth.session import SearchSession

# Stores (async only)
from panj_granth.stores import AsyncKeyValueStore, AsyncMemoryStore

# Core types
from panj_granth.types import (
    CacheEntry,
    CacheStats,
    Duration,
    FetchResult,
    SearchFilters,
    Source,
)

# Optional store imports - only available when dependencies are installed
with suppress(ImportError):
    from panj_granth.stores import AsyncRedisStore

__version__ = "0.1.0"

__all__ = [
    "AsyncKeyValueStore",
    "AsyncMemoryStore",
    "AsyncRedisStore",
    "CacheCorruptionError",
    "CacheEntry",
    "CacheMetadata",
    "CacheStats",
    "Debouncer",
    "DomainCache",
    "Duration",
    "Err",
    "ErrorKind",
    "FetchResult",
    "GurbaniCache",
    "GurbaniClient",
    "GurbaniError",
    "InvalidRequestError",
    "MetadataStore",
    "Ok",
    "RemoteError",
    "RequestTimeoutError",
    "SearchFilters",
    "SearchSession",
    "Settings",
    "Source",
    "UnknownError",
    "ang_key",
    "attempt",
    "configure_logging",
    "create_cache",
    "fetch_through",
    "get_settings",
    "hukamnama_key",
    "parse_duration",
    "search_key",
]
