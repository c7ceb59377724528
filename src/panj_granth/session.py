"""Debounced, paginated search state for a search screen."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any

import structlog

from panj_granth.debounce import Debouncer
from panj_granth.errors import ErrorKind
from panj_granth.results import Err, Ok, attempt
from panj_granth.service import GurbaniCache
from panj_granth.types import DEFAULT_RESULTS, SearchFilters

logger = structlog.get_logger(__name__)


class SearchSession:
    """Holds the results of the current search and fetches more on demand.

    Typing-driven searches go through a debouncer, so only the last query
    in a burst reaches the cache. Failures are kept as ``error`` for the
    caller to display alongside a retry action; nothing is retried
    automatically. Responses to a search that has since been replaced are
    discarded.
    """

    def __init__(
        self,
        cache: GurbaniCache,
        *,
        debouncer: Debouncer | None = None,
        page_size: int = DEFAULT_RESULTS,
    ) -> None:
        self._cache = cache
        self._debouncer = debouncer or Debouncer(cache.settings.search_debounce_seconds)
        self._page_size = page_size
        self._generation = 0
        self._query = ""
        self._filters = SearchFilters()
        self._skip = 0
        self.results: list[dict[str, Any]] = []
        self.total_count = 0
        self.loading = False
        self.error: Err | None = None
        self.from_cache = False

    @property
    def query(self) -> str:
        return self._query

    @property
    def has_more(self) -> bool:
        return len(self.results) < self.total_count

    @property
    def error_message(self) -> str | None:
        return self.error.message if self.error else None

    @property
    def error_kind(self) -> ErrorKind | None:
        return self.error.kind if self.error else None

    @property
    def retryable(self) -> bool:
        return self.error is not None and self.error.retryable

    def search(
        self, query: str, filters: SearchFilters | None = None
    ) -> asyncio.Future[None] | None:
        """Start a new search after the debounce window.

        An empty query clears the results at once and returns None.
        Otherwise returns a future that completes when the search has run.
        """
        self._generation += 1
        self._query = query
        self._filters = filters or SearchFilters()
        self._skip = 0

        if not query or not query.strip():
            self._debouncer.cancel()
            self._reset_results()
            return None

        return self._debouncer.schedule(
            self._perform, self._generation, query, self._filters, 0
        )

    async def load_more(self) -> None:
        """Fetch and append the next page of the current search.

        Does nothing while a new search is still waiting out the debounce window.
        """
        if self._debouncer.pending or self.loading or not self.has_more:
            return
        self._skip += self._page_size
        await self._perform(self._generation, self._query, self._filters, self._skip)

    async def retry(self) -> None:
        """Repeat the last request, typically after an error."""
        if not self._query.strip():
            return
        await self._perform(self._generation, self._query, self._filters, self._skip)

    def clear(self) -> None:
        """Forget the current search and drop any pending one."""
        self._generation += 1
        self._debouncer.cancel()
        self._query = ""
        self._filters = SearchFilters()
        self._skip = 0
        self._reset_results()
        self.from_cache = False

    async def aclose(self) -> None:
        """Tear down; a pending debounced search will not fire."""
        self._debouncer.cancel()

    def _reset_results(self) -> None:
        self.results = []
        self.total_count = 0
        self.error = None
        self.loading = False

    async def _perform(
        self, generation: int, query: str, filters: SearchFilters, skip: int
    ) -> None:
        self.loading = True
        self.error = None
        page_filters = replace(filters, skip=skip, results=self._page_size)
        try:
            outcome = await attempt(self._cache.search(query, page_filters))
        finally:
            if generation == self._generation:
                self.loading = False

        if generation != self._generation:
            logger.debug("search_response_discarded", query=query, skip=skip)
            return

        if isinstance(outcome, Ok):
            payload = outcome.value.value
            page = list(payload.get("results") or [])
            self.results = page if skip == 0 else [*self.results, *page]
            self.total_count = int(payload.get("count") or 0)
            self.from_cache = outcome.value.from_cache
            return

        self.error = outcome
        if outcome.kind is ErrorKind.UNKNOWN:
            logger.warning("search_failed", query=query, error=outcome.message)
        else:
            logger.info("search_failed", query=query, kind=outcome.kind.value)
        if skip == 0:
            self.results = []
            self.total_count = 0
