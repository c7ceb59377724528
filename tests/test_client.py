"""Tests for GurbaniClient using mocked HTTP responses."""

from datetime import date

import httpx
import pytest
import respx

from conftest import BASE_URL
from panj_granth import (
    ErrorKind,
    GurbaniClient,
    InvalidRequestError,
    RemoteError,
    RequestTimeoutError,
    SearchFilters,
    UnknownError,
)


class TestFetchAng:
    """Tests for fetching pages."""

    async def test_returns_payload(
        self, client: GurbaniClient, api: respx.MockRouter, ang_payload
    ) -> None:
        """Test fetching a page."""
        route = api.get("/ang/296/G").mock(return_value=httpx.Response(200, json=ang_payload(296)))

        result = await client.fetch_ang(296)

        assert result["pageno"] == 296
        assert route.call_count == 1

    async def test_custom_source(
        self, client: GurbaniClient, api: respx.MockRouter, ang_payload
    ) -> None:
        """Test that the source id is part of the path."""
        route = api.get("/ang/10/D").mock(return_value=httpx.Response(200, json=ang_payload(10)))
        await client.fetch_ang(10, source="D")
        assert route.called

    @pytest.mark.parametrize("page", [0, -1, 1431, 5000])
    async def test_out_of_range_rejected_before_network(
        self, client: GurbaniClient, api: respx.MockRouter, page: int
    ) -> None:
        """Test that invalid page numbers never reach the network."""
        with pytest.raises(InvalidRequestError, match="Invalid Ang number"):
            await client.fetch_ang(page)
        assert api.calls.call_count == 0

    @pytest.mark.parametrize("page", [1, 1430])
    async def test_bounds_are_inclusive(
        self, client: GurbaniClient, api: respx.MockRouter, ang_payload, page: int
    ) -> None:
        api.get(f"/ang/{page}/G").mock(return_value=httpx.Response(200, json=ang_payload(page)))
        assert (await client.fetch_ang(page))["pageno"] == page


class TestHukamnama:
    """Tests for daily readings."""

    async def test_today(
        self, client: GurbaniClient, api: respx.MockRouter, hukamnama_payload
    ) -> None:
        route = api.get("/hukamnama/today").mock(
            return_value=httpx.Response(200, json=hukamnama_payload)
        )
        result = await client.fetch_today_hukamnama()
        assert result["hukamnamainfo"]["pageno"] == 296
        assert route.called

    async def test_by_date(
        self, client: GurbaniClient, api: respx.MockRouter, hukamnama_payload
    ) -> None:
        """Test that the date is sent unpadded as year/month/day."""
        route = api.get("/hukamnama/2024/1/5").mock(
            return_value=httpx.Response(200, json=hukamnama_payload)
        )
        await client.fetch_hukamnama_by_date(date(2024, 1, 5))
        assert route.called


class TestSearch:
    """Tests for search requests."""

    async def test_default_parameters(
        self, client: GurbaniClient, api: respx.MockRouter, search_payload
    ) -> None:
        """Test the parameters sent with default filters."""
        route = api.get("/search/naam").mock(return_value=httpx.Response(200, json=search_payload()))

        await client.search("naam")

        params = route.calls[0].request.url.params
        assert dict(params) == {"searchtype": "3", "source": "G", "results": "20", "skip": "0"}

    async def test_optional_filters_and_clamp(
        self, client: GurbaniClient, api: respx.MockRouter, search_payload
    ) -> None:
        """Test optional filters are sent and the result count is capped at 100."""
        route = api.get("/search/naam").mock(return_value=httpx.Response(200, json=search_payload()))

        await client.search("  naam  ", SearchFilters(search_type=5, writer=5, ang=296, results=500))

        params = route.calls[0].request.url.params
        assert params["searchtype"] == "5"
        assert params["writer"] == "5"
        assert params["ang"] == "296"
        assert params["results"] == "100"
        assert "raag" not in params

    async def test_query_is_url_encoded(self, client: GurbaniClient, search_payload) -> None:
        """Test that spaces and slashes in the query are percent-encoded."""
        with respx.mock() as router:
            route = router.get(url__startswith=f"{BASE_URL}/search/").mock(
                return_value=httpx.Response(200, json=search_payload())
            )
            await client.search("sat/naam ji")

        raw_path = route.calls[0].request.url.raw_path
        assert raw_path.startswith(b"/v2/search/sat%2Fnaam%20ji")

    @pytest.mark.parametrize("query", ["", "   ", "\t\n"])
    async def test_empty_query_rejected(
        self, client: GurbaniClient, api: respx.MockRouter, query: str
    ) -> None:
        with pytest.raises(InvalidRequestError, match="cannot be empty"):
            await client.search(query)
        assert api.calls.call_count == 0

    @pytest.mark.parametrize(
        "filters",
        [SearchFilters(search_type=8), SearchFilters(search_type=-1), SearchFilters(skip=-20)],
    )
    async def test_invalid_filters_rejected(
        self, client: GurbaniClient, api: respx.MockRouter, filters: SearchFilters
    ) -> None:
        with pytest.raises(InvalidRequestError):
            await client.search("naam", filters)
        assert api.calls.call_count == 0


class TestErrorNormalization:
    """Tests that every failure becomes one of the library's errors."""

    async def test_http_error_status(self, client: GurbaniClient, api: respx.MockRouter) -> None:
        """Test that non-2xx responses carry their status code."""
        api.get("/ang/1/G").mock(return_value=httpx.Response(503))

        with pytest.raises(RemoteError) as exc_info:
            await client.fetch_ang(1)

        assert exc_info.value.status_code == 503
        assert exc_info.value.kind is ErrorKind.REMOTE
        assert exc_info.value.retryable

    async def test_error_payload_on_200(self, client: GurbaniClient, api: respx.MockRouter) -> None:
        """Test that {"error": true} is an error even with HTTP 200."""
        api.get("/ang/1/G").mock(
            return_value=httpx.Response(200, json={"error": True, "message": "Ang not found"})
        )

        with pytest.raises(RemoteError, match="Ang not found") as exc_info:
            await client.fetch_ang(1)
        assert exc_info.value.status_code is None

    async def test_error_payload_without_message(
        self, client: GurbaniClient, api: respx.MockRouter
    ) -> None:
        api.get("/hukamnama/today").mock(return_value=httpx.Response(200, json={"error": True}))
        with pytest.raises(RemoteError, match="Error fetching today's Hukamnama"):
            await client.fetch_today_hukamnama()

    @pytest.mark.parametrize(
        "body",
        [
            [1, 2, 3],
            "just a string",
            {"error": "yes", "page": []},
            {"error": False},
            {"pageno": 1},
        ],
    )
    async def test_malformed_payloads_fail_closed(
        self, client: GurbaniClient, api: respx.MockRouter, body: object
    ) -> None:
        """Test that anything not clearly a page payload is rejected."""
        api.get("/ang/1/G").mock(return_value=httpx.Response(200, json=body))
        with pytest.raises(RemoteError):
            await client.fetch_ang(1)

    async def test_invalid_json(self, client: GurbaniClient, api: respx.MockRouter) -> None:
        api.get("/ang/1/G").mock(return_value=httpx.Response(200, content=b"<html>oops</html>"))
        with pytest.raises(RemoteError, match="Invalid JSON"):
            await client.fetch_ang(1)

    async def test_timeout(self, client: GurbaniClient, api: respx.MockRouter) -> None:
        """Test that transport timeouts become RequestTimeoutError."""
        route = api.get("/hukamnama/today").mock(side_effect=httpx.ReadTimeout("timed out"))

        with pytest.raises(RequestTimeoutError) as exc_info:
            await client.fetch_today_hukamnama()

        assert exc_info.value.kind is ErrorKind.TIMEOUT
        assert exc_info.value.retryable
        assert route.call_count == 1  # no automatic retry

    async def test_connection_error(self, client: GurbaniClient, api: respx.MockRouter) -> None:
        """Test that transport failures keep the underlying message."""
        api.get("/ang/1/G").mock(side_effect=httpx.ConnectError("connection refused"))

        with pytest.raises(RemoteError, match="connection refused") as exc_info:
            await client.fetch_ang(1)
        assert exc_info.value.status_code is None

    async def test_unexpected_error_wrapped(
        self, client: GurbaniClient, api: respx.MockRouter
    ) -> None:
        api.get("/ang/1/G").mock(side_effect=RuntimeError("kaboom"))

        with pytest.raises(UnknownError, match="kaboom") as exc_info:
            await client.fetch_ang(1)
        assert not exc_info.value.retryable


class TestLifecycle:
    """Tests for client construction and closing."""

    def test_rejects_non_positive_timeout(self) -> None:
        with pytest.raises(ValueError, match="timeout"):
            GurbaniClient(timeout=0)

    async def test_borrowed_client_is_not_closed(self) -> None:
        http = httpx.AsyncClient(base_url=BASE_URL)
        async with GurbaniClient(client=http):
            pass
        assert not http.is_closed
        await http.aclose()

    async def test_owned_client_is_closed(self) -> None:
        client = GurbaniClient(base_url=BASE_URL)
        await client.aclose()
        assert client._client.is_closed
