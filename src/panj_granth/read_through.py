"""Read-through orchestration shared by every content type."""

from collections.abc import Awaitable, Callable
from typing import TypeVar

from panj_granth.domain import DomainCache
from panj_granth.types import FetchResult, Source

T = TypeVar("T")


async def fetch_through(
    cache: DomainCache[T],
    key: str,
    fetch: Callable[[], Awaitable[T]],
) -> FetchResult[T]:
    """Serve key from cache, or fetch, cache and return it.

    A failing fetch caches nothing and its exception propagates unchanged.
    Concurrent misses for one key each call fetch; the writes are idempotent.
    """
    cached = await cache.get(key)
    if cached is not None:
        return FetchResult(value=cached, source=Source.CACHE)

    value = await fetch()
    await cache.put(key, value)
    return FetchResult(value=value, source=Source.NETWORK)
