"""Generic TTL + LRU bounded cache over one namespace of a key-value store."""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from typing import Any, Generic, TypeVar

import structlog

from panj_granth.duration import parse_duration
from panj_granth.errors import CacheCorruptionError
from panj_granth.metadata import DomainMetadata, MetadataStore
from panj_granth.stores.base import AsyncKeyValueStore
from panj_granth.types import CacheEntry, Duration

T = TypeVar("T")

logger = structlog.get_logger(__name__)


def now_ms() -> int:
    """Current Unix time in milliseconds."""
    return int(time.time() * 1000)


def _serialize_entry(entry: CacheEntry[Any]) -> str:
    """Serialize a cache entry to JSON."""
    return json.dumps(entry.to_json())


def _deserialize_entry(data: str) -> CacheEntry[Any]:
    """Deserialize JSON to a cache entry, raising CacheCorruptionError."""
    try:
        obj = json.loads(data)
        timestamp = obj["timestamp"]
        if isinstance(timestamp, bool) or not isinstance(timestamp, int):
            raise TypeError(f"timestamp must be an int, got {timestamp!r}")
        return CacheEntry(data=obj["data"], timestamp=timestamp)
    except (ValueError, TypeError, KeyError) as e:
        raise CacheCorruptionError(f"Malformed cache entry: {e}") from e


class DomainCache(Generic[T]):
    """Read-through cache partition with its own TTL and optional capacity.

    Entries live under ``{prefix}:{name}:{key}``. Domains with a capacity
    track their keys in the shared metadata record and evict the least
    recently used entry before admitting a new key at capacity.

    The cache never raises for its own failures: unreadable or corrupt
    entries read as misses and failed writes are logged and dropped.
    """

    def __init__(
        self,
        name: str,
        store: AsyncKeyValueStore,
        metadata: MetadataStore,
        *,
        ttl: Duration,
        capacity: int | None = None,
        prefix: str = "cache",
        clock: Callable[[], int] = now_ms,
    ) -> None:
        if capacity is not None and capacity < 1:
            raise ValueError("capacity must be a positive integer")
        self._name = name
        self._store = store
        self._metadata = metadata
        self._ttl = parse_duration(ttl)
        self._capacity = capacity
        self._namespace = f"{prefix}:{name}:"
        self._clock = clock

    @property
    def name(self) -> str:
        return self._name

    @property
    def ttl(self) -> int:
        return self._ttl

    @property
    def capacity(self) -> int | None:
        return self._capacity

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def tracked(self) -> bool:
        """Whether this domain keeps recency metadata (capacity-bound)."""
        return self._capacity is not None

    def full_key(self, key: str) -> str:
        """Generate the store key for a cache key."""
        return f"{self._namespace}{key}"

    def _is_expired(self, entry: CacheEntry[Any], now: int) -> bool:
        """Check if entry has exceeded the domain TTL."""
        return now - entry.timestamp > self._ttl

    async def get(self, key: str) -> T | None:
        """Return the live cached value for key, or None."""
        try:
            data = await self._store.get(self.full_key(key))
        except Exception as e:
            logger.warning("cache_read_failed", domain=self._name, key=key, error=str(e))
            return None

        if data is None:
            logger.debug("cache_miss", domain=self._name, key=key)
            return None

        try:
            entry = _deserialize_entry(data)
        except CacheCorruptionError as e:
            logger.warning("cache_entry_corrupt", domain=self._name, key=key, error=e.message)
            await self.delete(key)
            return None

        now = self._clock()
        if self._is_expired(entry, now):
            logger.debug("cache_expired", domain=self._name, key=key)
            await self.delete(key)
            return None

        if self.tracked:
            async with self._metadata.edit() as metadata:
                metadata.domain(self._name).touch(key, now)

        logger.debug("cache_hit", domain=self._name, key=key)
        return entry.data

    async def put(self, key: str, data: T) -> None:
        """Store data under key with a fresh timestamp, evicting if at capacity."""
        now = self._clock()
        try:
            payload = _serialize_entry(CacheEntry(data=data, timestamp=now))
        except (TypeError, ValueError) as e:
            logger.warning("cache_entry_unserializable", domain=self._name, key=key, error=str(e))
            return

        if not self.tracked:
            await self._write(key, payload)
            return

        async with self._metadata.edit() as metadata:
            section = metadata.domain(self._name)
            if key not in section.keys and len(section.keys) >= self._capacity:  # type: ignore[operator]
                await self._evict_from(section)
            if await self._write(key, payload):
                section.track(key, now)

    async def evict_one(self) -> str | None:
        """Evict the least recently used entry. Returns its key, if any."""
        if not self.tracked:
            return None
        async with self._metadata.edit() as metadata:
            return await self._evict_from(metadata.domain(self._name))

    async def delete(self, key: str) -> None:
        """Remove one entry and its metadata."""
        try:
            await self._store.delete(self.full_key(key))
        except Exception as e:
            logger.warning("cache_delete_failed", domain=self._name, key=key, error=str(e))
            return
        if self.tracked:
            async with self._metadata.edit() as metadata:
                metadata.domain(self._name).untrack(key)

    async def clear(self) -> None:
        """Remove every entry of this domain and reset its metadata."""
        try:
            keys = await self._store.keys(self._namespace)
            await self._store.delete_many(keys)
        except Exception as e:
            logger.warning("cache_clear_failed", domain=self._name, error=str(e))
            return
        if self.tracked:
            async with self._metadata.edit() as metadata:
                metadata.reset(self._name)
        logger.debug("cache_cleared", domain=self._name, count=len(keys))

    async def count(self) -> int:
        """Number of entries currently stored for this domain."""
        try:
            return len(await self._store.keys(self._namespace))
        except Exception as e:
            logger.warning("cache_count_failed", domain=self._name, error=str(e))
            return 0

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    async def _write(self, key: str, payload: str) -> bool:
        try:
            await self._store.set(self.full_key(key), payload)
        except Exception as e:
            logger.warning("cache_write_failed", domain=self._name, key=key, error=str(e))
            return False
        return True

    async def _evict_from(self, section: DomainMetadata) -> str | None:
        victim = section.lru_key()
        if victim is None:
            return None
        try:
            await self._store.delete(self.full_key(victim))
        except Exception as e:
            logger.warning("cache_evict_failed", domain=self._name, key=victim, error=str(e))
            return None
        section.untrack(victim)
        logger.debug("cache_evicted", domain=self._name, key=victim)
        return victim
