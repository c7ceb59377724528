"""Persisted recency metadata shared by the capacity-bound cache domains."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import structlog

from panj_granth.stores.base import AsyncKeyValueStore

logger = structlog.get_logger(__name__)


@dataclass
class DomainMetadata:
    """Tracked keys of one domain and when each was last accessed."""

    keys: list[str] = field(default_factory=list)
    last_access: dict[str, int] = field(default_factory=dict)

    def track(self, key: str, now: int) -> None:
        if key not in self.keys:
            self.keys.append(key)
        self.last_access[key] = now

    def touch(self, key: str, now: int) -> None:
        self.last_access[key] = now

    def untrack(self, key: str) -> None:
        if key in self.keys:
            self.keys.remove(key)
        self.last_access.pop(key, None)

    def lru_key(self) -> str | None:
        """Least recently accessed tracked key; first in tracked order on ties."""
        victim: str | None = None
        oldest = 0
        for key in self.keys:
            accessed = self.last_access.get(key, 0)
            if victim is None or accessed < oldest:
                victim = key
                oldest = accessed
        return victim

    def to_json(self) -> dict[str, Any]:
        return {"keys": list(self.keys), "lastAccess": dict(self.last_access)}

    @classmethod
    def from_json(cls, obj: dict[str, Any]) -> DomainMetadata:
        keys = [str(key) for key in obj.get("keys", [])]
        last_access = {str(k): int(v) for k, v in obj.get("lastAccess", {}).items()}
        return cls(keys=keys, last_access=last_access)


@dataclass
class CacheMetadata:
    """The singleton metadata record, one section per capacity domain."""

    domains: dict[str, DomainMetadata] = field(default_factory=dict)

    def domain(self, name: str) -> DomainMetadata:
        return self.domains.setdefault(name, DomainMetadata())

    def reset(self, name: str) -> None:
        self.domains.pop(name, None)

    def to_json(self) -> str:
        return json.dumps({name: d.to_json() for name, d in self.domains.items()})

    @classmethod
    def from_json(cls, data: str) -> CacheMetadata:
        obj = json.loads(data)
        if not isinstance(obj, dict):
            raise ValueError("metadata must be a JSON object")
        return cls(
            domains={name: DomainMetadata.from_json(d) for name, d in obj.items()}
        )


class MetadataStore:
    """Handle on the persisted metadata record.

    Read-modify-write cycles go through :meth:`edit`, which holds a lock so
    edits from tasks sharing this handle never overwrite each other. Other
    processes writing the same key still race last-write-wins.
    """

    def __init__(self, store: AsyncKeyValueStore, key: str = "cache:metadata") -> None:
        self._store = store
        self._key = key
        self._lock = asyncio.Lock()

    @property
    def key(self) -> str:
        return self._key

    async def load(self) -> CacheMetadata:
        """Read the record. Missing, unreadable or corrupt metadata reads as empty."""
        try:
            data = await self._store.get(self._key)
        except Exception as e:
            logger.warning("cache_metadata_read_failed", error=str(e))
            return CacheMetadata()
        if data is None:
            return CacheMetadata()
        try:
            return CacheMetadata.from_json(data)
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("cache_metadata_corrupt", error=str(e))
            return CacheMetadata()

    async def save(self, metadata: CacheMetadata) -> None:
        """Write the record. Failures are logged and otherwise ignored."""
        try:
            await self._store.set(self._key, metadata.to_json())
        except Exception as e:
            logger.warning("cache_metadata_save_failed", error=str(e))

    @asynccontextmanager
    async def edit(self) -> AsyncIterator[CacheMetadata]:
        """Load, yield for mutation, then save. Nothing is saved if the body raises."""
        async with self._lock:
            metadata = await self.load()
            yield metadata
            await self.save(metadata)
