"""Settings loaded from environment variables."""

import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

from panj_granth.client import API_BASE_URL, REQUEST_TIMEOUT
from panj_granth.duration import parse_duration


def _env(name: str, default: str) -> str:
    return os.getenv(f"PANJ_GRANTH_{name}", default)


@dataclass(frozen=True)
class Settings:
    """Library settings. Every field can be overridden by a PANJ_GRANTH_* variable."""

    # Remote API
    api_url: str = field(default_factory=lambda: _env("API_URL", API_BASE_URL))
    timeout: float = field(
        default_factory=lambda: float(_env("TIMEOUT", str(REQUEST_TIMEOUT)))
    )

    # Cache
    cache_prefix: str = field(default_factory=lambda: _env("CACHE_PREFIX", "cache"))
    ang_capacity: int = field(default_factory=lambda: int(_env("ANG_CAPACITY", "50")))
    search_capacity: int = field(
        default_factory=lambda: int(_env("SEARCH_CAPACITY", "20"))
    )
    ang_ttl: str = field(default_factory=lambda: _env("ANG_TTL", "7d"))
    hukamnama_ttl: str = field(default_factory=lambda: _env("HUKAMNAMA_TTL", "24h"))
    search_ttl: str = field(default_factory=lambda: _env("SEARCH_TTL", "1h"))

    # Storage - in-memory unless a Redis URL is given
    redis_url: str | None = field(
        default_factory=lambda: os.getenv("PANJ_GRANTH_REDIS_URL") or None
    )

    # Search
    search_debounce: str = field(
        default_factory=lambda: _env("SEARCH_DEBOUNCE", "500ms")
    )

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.timeout <= 0:
            raise ValueError("PANJ_GRANTH_TIMEOUT must be positive")
        if self.ang_capacity < 1 or self.search_capacity < 1:
            raise ValueError("Cache capacities must be positive integers")
        if not self.cache_prefix:
            raise ValueError("PANJ_GRANTH_CACHE_PREFIX cannot be empty")
        # Fail fast on malformed durations
        for value in (self.ang_ttl, self.hukamnama_ttl, self.search_ttl, self.search_debounce):
            parse_duration(value)

    @property
    def search_debounce_seconds(self) -> float:
        return parse_duration(self.search_debounce) / 1000


@lru_cache
def get_settings() -> Settings:
    """Get cached settings, reading a .env file first if present."""
    load_dotenv()
    return Settings()
