"""Async client for the Gurbani Now v2 API.

Every call is a single GET bounded by a hard timeout. Transport failures,
non-2xx responses and error payloads all surface as :class:`RemoteError`;
the API reports logical errors with ``{"error": true}`` even on HTTP 200,
so payloads are decoded and checked before they are returned.
"""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from panj_granth.errors import (
    GurbaniError,
    InvalidRequestError,
    RemoteError,
    RequestTimeoutError,
    UnknownError,
)
from panj_granth.types import (
    DEFAULT_SOURCE,
    FIRST_ANG,
    LAST_ANG,
    SEARCH_TYPES,
    Payload,
    SearchFilters,
)

logger = structlog.get_logger(__name__)

API_BASE_URL = "https://api.gurbaninow.com/v2"
REQUEST_TIMEOUT = 10.0  # seconds

_ANG_FIELDS = ("page",)
_HUKAMNAMA_FIELDS = ("hukamnama",)
_SEARCH_FIELDS = ("count", "results")


def validate_ang(page_number: int) -> None:
    """Raise InvalidRequestError unless page_number is a valid Ang."""
    if (
        isinstance(page_number, bool)
        or not isinstance(page_number, int)
        or not FIRST_ANG <= page_number <= LAST_ANG
    ):
        raise InvalidRequestError(
            f"Invalid Ang number: {page_number}. "
            f"Must be between {FIRST_ANG} and {LAST_ANG}."
        )


def validate_search(query: str, filters: SearchFilters) -> None:
    """Raise InvalidRequestError for an empty query or out-of-range filters."""
    if not query or not query.strip():
        raise InvalidRequestError("Search query cannot be empty")
    if filters.search_type not in SEARCH_TYPES:
        raise InvalidRequestError(
            f"Invalid search type: {filters.search_type}. Must be between 0 and 7."
        )
    if filters.results < 1:
        raise InvalidRequestError("Result count must be at least 1")
    if filters.skip < 0:
        raise InvalidRequestError("Skip offset cannot be negative")


def decode_payload(data: Any, *, required: tuple[str, ...], what: str) -> Payload:
    """Check a parsed response body and return it as a payload.

    Fails closed: anything that is not an object with a false or missing
    ``error`` flag and the required fields is a RemoteError.
    """
    if not isinstance(data, dict):
        raise RemoteError(f"Unexpected response while fetching {what}")

    flag = data.get("error", False)
    if flag is True:
        message = data.get("message")
        raise RemoteError(str(message) if message else f"Error fetching {what}")
    if flag is not False:
        raise RemoteError(f"Ambiguous error flag while fetching {what}: {flag!r}")

    missing = [name for name in required if name not in data]
    if missing:
        raise RemoteError(f"Malformed {what} response: missing {', '.join(missing)}")
    return data


class GurbaniClient:
    """Async HTTP client for Ang, Hukamnama and search requests."""

    def __init__(
        self,
        *,
        base_url: str = API_BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            headers={"Accept": "application/json"},
            timeout=timeout,
        )

    @property
    def timeout(self) -> float:
        return self._timeout

    async def fetch_ang(self, page_number: int, source: str = DEFAULT_SOURCE) -> Payload:
        """Fetch one Ang (page). Pages run from 1 to 1430."""
        validate_ang(page_number)
        return await self._request(
            f"/ang/{page_number}/{source}",
            required=_ANG_FIELDS,
            what=f"Ang {page_number}",
        )

    async def fetch_today_hukamnama(self) -> Payload:
        """Fetch today's Hukamnama."""
        return await self._request(
            "/hukamnama/today",
            required=_HUKAMNAMA_FIELDS,
            what="today's Hukamnama",
        )

    async def fetch_hukamnama_by_date(self, day: date) -> Payload:
        """Fetch the Hukamnama for a specific date."""
        return await self._request(
            f"/hukamnama/{day.year}/{day.month}/{day.day}",
            required=_HUKAMNAMA_FIELDS,
            what=f"Hukamnama for {day.isoformat()}",
        )

    async def search(self, query: str, filters: SearchFilters | None = None) -> Payload:
        """Search the corpus. The query is stripped and URL-encoded."""
        filters = filters or SearchFilters()
        validate_search(query, filters)
        encoded = quote(query.strip(), safe="")
        return await self._request(
            f"/search/{encoded}",
            params=filters.to_params(),
            required=_SEARCH_FIELDS,
            what=f'search results for "{query.strip()}"',
        )

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> GurbaniClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _request(
        self,
        path: str,
        *,
        params: dict[str, str] | None = None,
        required: tuple[str, ...],
        what: str,
    ) -> Payload:
        """Make a GET request and decode the payload."""
        try:
            try:
                response = await asyncio.wait_for(
                    self._client.get(path, params=params), timeout=self._timeout
                )
            except (asyncio.TimeoutError, httpx.TimeoutException) as e:
                logger.info("remote_timeout", path=path, timeout=self._timeout)
                raise RequestTimeoutError() from e
            except httpx.HTTPError as e:
                logger.info("remote_transport_failed", path=path, error=str(e))
                raise RemoteError(f"Network error while fetching {what}: {e}") from e

            if not response.is_success:
                logger.info("remote_bad_status", path=path, status_code=response.status_code)
                raise RemoteError(f"Failed to fetch {what}", status_code=response.status_code)

            try:
                data = response.json()
            except ValueError as e:
                raise RemoteError(
                    f"Invalid JSON while fetching {what}", status_code=response.status_code
                ) from e

            return decode_payload(data, required=required, what=what)
        except GurbaniError:
            raise
        except Exception as e:
            logger.info("remote_unexpected_error", path=path, error=repr(e))
            raise UnknownError(str(e) or "Unknown error occurred") from e
