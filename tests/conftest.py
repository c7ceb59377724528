"""Shared pytest fixtures."""

from collections.abc import AsyncIterator, Callable, Iterator
from typing import Any

import pytest
import respx

from panj_granth import (
    AsyncMemoryStore,
    GurbaniCache,
    GurbaniClient,
    MetadataStore,
    Settings,
)

BASE_URL = "https://api.test.dev/v2"

# 2024-06-15 12:00:00 UTC
START_MS = 1_718_452_800_000


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = START_MS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    """Create a fresh FakeClock for each test."""
    return FakeClock()


@pytest.fixture
def store() -> AsyncMemoryStore:
    """Create a fresh AsyncMemoryStore for each test."""
    return AsyncMemoryStore()


@pytest.fixture
def metadata(store: AsyncMemoryStore) -> MetadataStore:
    """Create a MetadataStore over the test store."""
    return MetadataStore(store)


@pytest.fixture
def settings() -> Settings:
    """Settings with the default capacities and TTLs, pointed at the test API."""
    return Settings(
        api_url=BASE_URL,
        timeout=10.0,
        cache_prefix="cache",
        ang_capacity=50,
        search_capacity=20,
        ang_ttl="7d",
        hukamnama_ttl="24h",
        search_ttl="1h",
        redis_url=None,
        search_debounce="500ms",
    )


@pytest.fixture
def api() -> Iterator[respx.MockRouter]:
    """Mock the remote API. Unmatched requests fail the test."""
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as router:
        yield router


@pytest.fixture
async def client() -> AsyncIterator[GurbaniClient]:
    """Create a GurbaniClient pointed at the test API."""
    client = GurbaniClient(base_url=BASE_URL)
    yield client
    await client.aclose()


@pytest.fixture
def cache(
    client: GurbaniClient,
    store: AsyncMemoryStore,
    settings: Settings,
    clock: FakeClock,
) -> GurbaniCache:
    """Create a GurbaniCache over the memory store and the fake clock."""
    return GurbaniCache(client, store, settings=settings, clock=clock)


@pytest.fixture
def ang_payload() -> Callable[[int], dict[str, Any]]:
    """Build an Ang response body."""

    def build(page_number: int) -> dict[str, Any]:
        return {
            "pageno": page_number,
            "source": {"id": "G", "english": "Guru Granth Sahib", "unicode": ""},
            "count": 1,
            "page": [
                {
                    "line": {
                        "id": f"{page_number}-1",
                        "pageno": page_number,
                        "lineno": 1,
                        "gurmukhi": {"akhar": "", "unicode": ""},
                    }
                }
            ],
            "error": False,
        }

    return build


@pytest.fixture
def hukamnama_payload() -> dict[str, Any]:
    """A Hukamnama response body."""
    return {
        "date": {"gregorian": {"year": 2024, "monthno": 6, "date": 15}},
        "hukamnamainfo": {"pageno": 296, "count": 1},
        "hukamnama": [{"line": {"id": "296-3", "pageno": 296, "lineno": 3}}],
        "error": False,
    }


@pytest.fixture
def search_payload() -> Callable[..., dict[str, Any]]:
    """Build a search response body with n results out of count."""

    def build(n: int = 2, count: int | None = None, start: int = 0) -> dict[str, Any]:
        return {
            "count": n if count is None else count,
            "results": [{"line": {"id": f"r{start + i}"}} for i in range(n)],
            "error": False,
        }

    return build


class FailingStore(AsyncMemoryStore):
    """Store whose every operation fails."""

    async def get(self, key: str) -> str | None:
        raise ConnectionError("store unavailable")

    async def set(self, key: str, value: str) -> None:
        raise ConnectionError("store unavailable")

    async def delete(self, key: str) -> None:
        raise ConnectionError("store unavailable")

    async def keys(self, prefix: str = "") -> list[str]:
        raise ConnectionError("store unavailable")

    async def delete_many(self, keys: list[str]) -> None:
        raise ConnectionError("store unavailable")
