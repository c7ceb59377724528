"""Persistent key-value stores backing the cache (async only)."""

from contextlib import suppress

from panj_granth.stores.base import AsyncKeyValueStore
from panj_granth.stores.memory import AsyncMemoryStore

# Optional stores - only available when dependencies are installed
with suppress(ImportError):
    from panj_granth.stores.redis import AsyncRedisStore

__all__ = [
    "AsyncKeyValueStore",
    "AsyncMemoryStore",
    "AsyncRedisStore",
]
