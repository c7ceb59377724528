"""In-memory key-value store."""

import asyncio


class AsyncMemoryStore:
    """Async in-memory store. Contents live as long as the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> str | None:
        """Get the value stored under key."""
        async with self._lock:
            return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        """Store a value under key."""
        async with self._lock:
            self._data[key] = value

    async def delete(self, key: str) -> None:
        """Delete a key."""
        async with self._lock:
            self._data.pop(key, None)

    async def keys(self, prefix: str = "") -> list[str]:
        """List keys starting with prefix, in insertion order."""
        async with self._lock:
            return [key for key in self._data if key.startswith(prefix)]

    async def delete_many(self, keys: list[str]) -> None:
        """Delete several keys at once."""
        async with self._lock:
            for key in keys:
                self._data.pop(key, None)

    async def disconnect(self) -> None:
        """Disconnect from the store (no-op for memory)."""
        pass

    def __len__(self) -> int:
        return len(self._data)
