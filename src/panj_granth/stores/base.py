"""Base protocol for persistent key-value stores."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class AsyncKeyValueStore(Protocol):
    """Async string-to-string store.

    Only per-key atomicity is assumed. Implementations raise on backend
    failures; callers in the cache layer decide whether to swallow them.
    """

    async def get(self, key: str) -> str | None:
        """Get the value stored under key."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store a value under key, replacing any previous value."""
        ...

    async def delete(self, key: str) -> None:
        """Delete a key. Missing keys are ignored."""
        ...

    async def keys(self, prefix: str = "") -> list[str]:
        """List all keys starting with prefix."""
        ...

    async def delete_many(self, keys: list[str]) -> None:
        """Delete several keys at once."""
        ...

    async def disconnect(self) -> None:
        """Release backend resources."""
        ...
