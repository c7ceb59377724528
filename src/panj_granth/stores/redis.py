"""Redis key-value store."""

from __future__ import annotations

from typing import Any


def _decode(data: bytes | str) -> str:
    if isinstance(data, bytes):
        return data.decode("utf-8")
    return data


class AsyncRedisStore:
    """Async Redis store.

    Keys are written under an optional namespace so several apps can share
    one database. Entries never expire server-side; expiry is decided by the
    cache layer from the stored timestamp.
    """

    def __init__(
        self,
        client: Any,  # redis.asyncio.Redis
        *,
        namespace: str = "panj_granth",
    ) -> None:
        self._client = client
        self._namespace = namespace

    @classmethod
    def from_url(cls, url: str, *, namespace: str = "panj_granth") -> AsyncRedisStore:
        """Create a store from a redis:// URL."""
        import redis.asyncio

        return cls(redis.asyncio.from_url(url), namespace=namespace)

    def _full_key(self, key: str) -> str:
        """Generate the Redis key for a store key."""
        return f"{self._namespace}:{key}" if self._namespace else key

    def _strip(self, full_key: str) -> str:
        if not self._namespace:
            return full_key
        return full_key[len(self._namespace) + 1 :]

    async def get(self, key: str) -> str | None:
        """Get the value stored under key."""
        data = await self._client.get(self._full_key(key))
        if data is None:
            return None
        return _decode(data)

    async def set(self, key: str, value: str) -> None:
        """Store a value under key."""
        await self._client.set(self._full_key(key), value)

    async def delete(self, key: str) -> None:
        """Delete a key."""
        await self._client.delete(self._full_key(key))

    async def keys(self, prefix: str = "") -> list[str]:
        """List keys starting with prefix."""
        # Use SCAN so large databases are not blocked
        found: list[str] = []
        cursor: int = 0
        pattern = f"{self._full_key(prefix)}*"
        while True:
            result = await self._client.scan(cursor, match=pattern, count=100)
            cursor = result[0]
            found.extend(self._strip(_decode(key)) for key in result[1])
            if cursor == 0:
                break
        return found

    async def delete_many(self, keys: list[str]) -> None:
        """Delete several keys in one round trip."""
        if keys:
            await self._client.delete(*(self._full_key(key) for key in keys))

    async def disconnect(self) -> None:
        """Close the Redis connection."""
        await self._client.aclose()
