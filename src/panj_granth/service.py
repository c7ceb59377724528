"""Cached access to Angs, Hukamnamas and search results."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime

import structlog

from panj_granth.client import GurbaniClient, validate_ang, validate_search
from panj_granth.config import Settings, get_settings
from panj_granth.domain import DomainCache, now_ms
from panj_granth.keys import ang_key, hukamnama_key, search_key
from panj_granth.metadata import MetadataStore
from panj_granth.read_through import fetch_through
from panj_granth.stores.base import AsyncKeyValueStore
from panj_granth.stores.memory import AsyncMemoryStore
from panj_granth.types import CacheStats, FetchResult, Payload, SearchFilters

logger = structlog.get_logger(__name__)

ANG_DOMAIN = "ang"
HUKAMNAMA_DOMAIN = "hukamnama"
SEARCH_DOMAIN = "search"


class GurbaniCache:
    """Read-through cache in front of a GurbaniClient.

    Three independent domains share one store and one metadata record:
    pages (LRU-bounded, long TTL), daily readings (one per date) and
    search results (LRU-bounded, short TTL).
    """

    def __init__(
        self,
        client: GurbaniClient,
        store: AsyncKeyValueStore,
        *,
        settings: Settings | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        settings = settings or get_settings()
        self._settings = settings
        self._client = client
        self._store = store
        self._prefix = settings.cache_prefix
        self._clock = clock
        self._metadata = MetadataStore(store, key=f"{self._prefix}:metadata")

        self.angs: DomainCache[Payload] = DomainCache(
            ANG_DOMAIN,
            store,
            self._metadata,
            ttl=settings.ang_ttl,
            capacity=settings.ang_capacity,
            prefix=self._prefix,
            clock=clock,
        )
        self.hukamnamas: DomainCache[Payload] = DomainCache(
            HUKAMNAMA_DOMAIN,
            store,
            self._metadata,
            ttl=settings.hukamnama_ttl,
            prefix=self._prefix,
            clock=clock,
        )
        self.searches: DomainCache[Payload] = DomainCache(
            SEARCH_DOMAIN,
            store,
            self._metadata,
            ttl=settings.search_ttl,
            capacity=settings.search_capacity,
            prefix=self._prefix,
            clock=clock,
        )

    @property
    def client(self) -> GurbaniClient:
        return self._client

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def metadata(self) -> MetadataStore:
        return self._metadata

    def today(self) -> date:
        """Local calendar date according to the cache clock."""
        return datetime.fromtimestamp(self._clock() / 1000).date()

    async def get_ang(self, page_number: int) -> FetchResult[Payload]:
        """Get an Ang, from cache when fresh."""
        validate_ang(page_number)
        return await fetch_through(
            self.angs,
            ang_key(page_number),
            lambda: self._client.fetch_ang(page_number),
        )

    async def get_today_hukamnama(self) -> FetchResult[Payload]:
        """Get today's Hukamnama, cached under today's date."""
        return await fetch_through(
            self.hukamnamas,
            hukamnama_key(self.today()),
            self._client.fetch_today_hukamnama,
        )

    async def get_hukamnama(self, day: date) -> FetchResult[Payload]:
        """Get the Hukamnama for any date, cached under that date."""
        if day == self.today():
            return await self.get_today_hukamnama()
        return await fetch_through(
            self.hukamnamas,
            hukamnama_key(day),
            lambda: self._client.fetch_hukamnama_by_date(day),
        )

    async def search(
        self, query: str, filters: SearchFilters | None = None
    ) -> FetchResult[Payload]:
        """Search, caching each distinct query + filters combination."""
        filters = filters or SearchFilters()
        validate_search(query, filters)
        return await fetch_through(
            self.searches,
            search_key(query, filters),
            lambda: self._client.search(query, filters),
        )

    async def clear_ang(self, page_number: int) -> None:
        await self.angs.delete(ang_key(page_number))

    async def clear_hukamnama(self, day: date) -> None:
        await self.hukamnamas.delete(hukamnama_key(day))

    async def clear_search(self) -> None:
        await self.searches.clear()

    async def clear_all(self) -> None:
        """Remove every cache entry and the metadata record."""
        try:
            keys = await self._store.keys(f"{self._prefix}:")
            await self._store.delete_many(keys)
        except Exception as e:
            logger.warning("cache_clear_all_failed", error=str(e))
            return
        logger.info("cache_cleared_all", count=len(keys))

    async def stats(self) -> CacheStats:
        """Count stored entries per domain."""
        return CacheStats(
            ang_count=await self.angs.count(),
            hukamnama_count=await self.hukamnamas.count(),
            search_count=await self.searches.count(),
        )

    async def aclose(self) -> None:
        """Close the HTTP client and disconnect the store."""
        await self._client.aclose()
        await self._store.disconnect()

    async def __aenter__(self) -> GurbaniCache:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def create_cache(
    settings: Settings | None = None,
    *,
    store: AsyncKeyValueStore | None = None,
    client: GurbaniClient | None = None,
    clock: Callable[[], int] = now_ms,
) -> GurbaniCache:
    """Create a wired cache.

    Args:
        settings: Settings to use (default: from environment)
        store: Key-value store (default: Redis when configured, else memory)
        client: API client (default: one built from settings)
        clock: Millisecond clock, replaceable in tests

    Returns:
        GurbaniCache with get_ang, get_today_hukamnama, get_hukamnama, search
    """
    settings = settings or get_settings()
    if store is None:
        if settings.redis_url:
            from panj_granth.stores.redis import AsyncRedisStore

            store = AsyncRedisStore.from_url(settings.redis_url)
        else:
            store = AsyncMemoryStore()
    if client is None:
        client = GurbaniClient(base_url=settings.api_url, timeout=settings.timeout)
    return GurbaniCache(client, store, settings=settings, clock=clock)


__all__ = ["GurbaniCache", "create_cache"]
