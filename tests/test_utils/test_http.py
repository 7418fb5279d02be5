from __future__ import annotations

from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from kiwiko.utils.http import HTTPClient, _backoff_delay, _retry_after_seconds
from kiwiko.exceptions import NetworkError, RegistryError

REGISTRY_URL = "https://registry.npmjs.org/react"


def _response(
    status_code: int,
    *,
    json_body: Any = None,
    text: Optional[str] = None,
    headers: Optional[dict] = None,
    url: str = REGISTRY_URL,
) -> httpx.Response:
    """Build a real httpx response bound to a request."""
    kwargs: dict = {"headers": headers or {}}
    if json_body is not None:
        kwargs["json"] = json_body
    elif text is not None:
        kwargs["text"] = text
    return httpx.Response(status_code, request=httpx.Request("GET", url), **kwargs)


@pytest.fixture
def no_sleep():
    """Skip retry and backoff delays."""
    with patch("kiwiko.utils.http.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


@pytest.mark.unit
class TestHTTPClientInit:
    """Tests for HTTPClient initialization."""

    def test_default_values(self) -> None:
        client = HTTPClient()

        assert client.timeout == 30
        assert client.max_retries == 3
        assert client.rate_limit_delay == 0.0
        assert client.verify_ssl is True
        assert client.max_concurrency == 10
        assert client.user_agent.startswith("kiwiko/")
        assert client.headers == {}
        assert client._client is None

    def test_custom_values(self) -> None:
        client = HTTPClient(
            timeout=5,
            max_retries=0,
            user_agent="Agent/1.0",
            headers={"Authorization": "Bearer token"},
        )

        assert client.timeout == 5
        assert client.max_retries == 0
        assert client.user_agent == "Agent/1.0"
        assert client.headers == {"Authorization": "Bearer token"}


@pytest.mark.unit
class TestHTTPClientLifecycle:
    """Tests for client creation and shutdown."""

    @pytest.mark.asyncio
    async def test_context_manager_creates_and_closes(self) -> None:
        client = HTTPClient()

        async with client:
            assert isinstance(client._client, httpx.AsyncClient)

        assert client._client is None

    @pytest.mark.asyncio
    async def test_ensure_client_creates_once(self) -> None:
        client = HTTPClient()

        await client._ensure_client()
        first = client._client
        await client._ensure_client()

        assert client._client is first
        await client.close()

    @pytest.mark.asyncio
    async def test_default_headers_applied(self) -> None:
        client = HTTPClient(user_agent="Agent/1.0", headers={"X-Extra": "1"})

        async with client:
            assert client._client.headers["User-Agent"] == "Agent/1.0"
            assert client._client.headers["X-Extra"] == "1"

    @pytest.mark.asyncio
    async def test_close_without_client(self) -> None:
        client = HTTPClient()

        await client.close()

        assert client._client is None


@pytest.mark.unit
class TestRequestWithRetry:
    """Tests for HTTPClient._request_with_retry."""

    @pytest.mark.asyncio
    async def test_success_returns_immediately(self) -> None:
        client = HTTPClient(max_retries=2)

        with patch.object(
            httpx.AsyncClient, "request", new_callable=AsyncMock
        ) as mock_request:
            mock_request.return_value = _response(200, json_body={})

            async with client:
                response = await client._request_with_retry("GET", REGISTRY_URL)

        assert response.status_code == 200
        assert mock_request.call_count == 1

    @pytest.mark.asyncio
    async def test_url_is_cleaned(self) -> None:
        client = HTTPClient(max_retries=0)

        with patch.object(
            httpx.AsyncClient, "request", new_callable=AsyncMock
        ) as mock_request:
            mock_request.return_value = _response(200, json_body={})

            async with client:
                await client._request_with_retry("GET", f'  "{REGISTRY_URL}" ')

        assert mock_request.call_args[0][1] == REGISTRY_URL

    @pytest.mark.asyncio
    async def test_404_raises_registry_error_without_retry(self) -> None:
        client = HTTPClient(max_retries=3)

        with patch.object(
            httpx.AsyncClient, "request", new_callable=AsyncMock
        ) as mock_request:
            mock_request.return_value = _response(404, text="Not Found")

            async with client:
                with pytest.raises(RegistryError) as exc_info:
                    await client._request_with_retry("GET", REGISTRY_URL)

        assert exc_info.value.status_code == 404
        assert mock_request.call_count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 403])
    async def test_other_4xx_raise_network_error(self, status: int) -> None:
        client = HTTPClient(max_retries=3)

        with patch.object(
            httpx.AsyncClient, "request", new_callable=AsyncMock
        ) as mock_request:
            mock_request.return_value = _response(status, text="denied")

            async with client:
                with pytest.raises(NetworkError) as exc_info:
                    await client._request_with_retry("GET", REGISTRY_URL)

        assert not isinstance(exc_info.value, RegistryError)
        assert exc_info.value.status_code == status
        assert mock_request.call_count == 1

    @pytest.mark.asyncio
    async def test_429_honours_retry_after(self, no_sleep: AsyncMock) -> None:
        client = HTTPClient(max_retries=1)

        with patch.object(
            httpx.AsyncClient, "request", new_callable=AsyncMock
        ) as mock_request:
            mock_request.side_effect = [
                _response(429, headers={"Retry-After": "7"}),
                _response(200, json_body={}),
            ]

            async with client:
                response = await client._request_with_retry("GET", REGISTRY_URL)

        assert response.status_code == 200
        no_sleep.assert_any_await(7)

    @pytest.mark.asyncio
    async def test_429_gives_up(self, no_sleep: AsyncMock) -> None:
        client = HTTPClient(max_retries=10)
        client._max_429_retries = 2

        with patch.object(
            httpx.AsyncClient, "request", new_callable=AsyncMock
        ) as mock_request:
            mock_request.return_value = _response(429)

            async with client:
                with pytest.raises(NetworkError) as exc_info:
                    await client._request_with_retry("GET", REGISTRY_URL)

        assert exc_info.value.status_code == 429
        assert mock_request.call_count == 3

    @pytest.mark.asyncio
    async def test_5xx_retried_then_succeeds(self, no_sleep: AsyncMock) -> None:
        client = HTTPClient(max_retries=2)

        with patch.object(
            httpx.AsyncClient, "request", new_callable=AsyncMock
        ) as mock_request:
            mock_request.side_effect = [
                _response(503, text="unavailable"),
                _response(200, json_body={"ok": True}),
            ]

            async with client:
                response = await client._request_with_retry("GET", REGISTRY_URL)

        assert response.status_code == 200
        assert mock_request.call_count == 2
        assert no_sleep.await_count == 1

    @pytest.mark.asyncio
    async def test_timeouts_exhaust_retries(self, no_sleep: AsyncMock) -> None:
        client = HTTPClient(max_retries=2)

        with patch.object(
            httpx.AsyncClient, "request", new_callable=AsyncMock
        ) as mock_request:
            mock_request.side_effect = httpx.ReadTimeout("slow")

            async with client:
                with pytest.raises(NetworkError) as exc_info:
                    await client._request_with_retry("GET", REGISTRY_URL)

        assert "after 3 attempts" in str(exc_info.value)
        assert mock_request.call_count == 3
        assert no_sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_network_errors_are_retried(self, no_sleep: AsyncMock) -> None:
        client = HTTPClient(max_retries=1)

        with patch.object(
            httpx.AsyncClient, "request", new_callable=AsyncMock
        ) as mock_request:
            mock_request.side_effect = [
                httpx.ConnectError("refused"),
                _response(200, json_body={}),
            ]

            async with client:
                response = await client._request_with_retry("GET", REGISTRY_URL)

        assert response.status_code == 200


@pytest.mark.unit
class TestGetJson:
    """Tests for HTTPClient.get_json."""

    @pytest.mark.asyncio
    async def test_returns_object(self) -> None:
        client = HTTPClient()

        with patch.object(
            httpx.AsyncClient, "request", new_callable=AsyncMock
        ) as mock_request:
            mock_request.return_value = _response(200, json_body={"name": "react"})

            async with client:
                data = await client.get_json(REGISTRY_URL)

        assert data == {"name": "react"}

    @pytest.mark.asyncio
    async def test_forwards_headers(self) -> None:
        client = HTTPClient()

        with patch.object(
            httpx.AsyncClient, "request", new_callable=AsyncMock
        ) as mock_request:
            mock_request.return_value = _response(200, json_body={})

            async with client:
                await client.get_json(REGISTRY_URL, headers={"Accept": "application/json"})

        assert mock_request.call_args[1]["headers"] == {"Accept": "application/json"}

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        client = HTTPClient()

        with patch.object(
            httpx.AsyncClient, "request", new_callable=AsyncMock
        ) as mock_request:
            mock_request.return_value = _response(200, text="<html>")

            async with client:
                with pytest.raises(NetworkError) as exc_info:
                    await client.get_json(REGISTRY_URL)

        assert "Invalid JSON" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_non_object_json(self) -> None:
        client = HTTPClient()

        with patch.object(
            httpx.AsyncClient, "request", new_callable=AsyncMock
        ) as mock_request:
            mock_request.return_value = _response(200, json_body=["a", "b"])

            async with client:
                with pytest.raises(NetworkError) as exc_info:
                    await client.get_json(REGISTRY_URL)

        assert "Expected JSON object" in str(exc_info.value)


@pytest.mark.unit
class TestRetryAfterSeconds:
    """Tests for _retry_after_seconds."""

    @pytest.mark.parametrize(
        "headers,expected",
        [
            ({"Retry-After": "3"}, 3),
            ({}, 1),
            ({"Retry-After": "-4"}, 0),
            ({"Retry-After": "Wed, 21 Oct 2026 07:28:00 GMT"}, 1),
        ],
        ids=["seconds", "missing", "negative", "http-date"],
    )
    def test_parsing(self, headers: dict, expected: int) -> None:
        response = MagicMock()
        response.headers = headers

        assert _retry_after_seconds(response) == expected


@pytest.mark.unit
class TestRequestSpacing:
    """Tests for rate_limit_delay spacing and backoff."""

    @pytest.mark.asyncio
    async def test_no_delay_by_default(self, no_sleep: AsyncMock) -> None:
        client = HTTPClient()

        await client._wait_for_slot()
        await client._wait_for_slot()

        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_second_request_waits(self, no_sleep: AsyncMock) -> None:
        client = HTTPClient(rate_limit_delay=0.5)

        await client._wait_for_slot()
        await client._wait_for_slot()

        no_sleep.assert_awaited_once()
        assert 0.4 < no_sleep.await_args[0][0] <= 0.5

    @pytest.mark.parametrize("attempt,low", [(0, 1), (1, 2), (3, 8)])
    def test_backoff_grows_exponentially(self, attempt: int, low: int) -> None:
        delay = _backoff_delay(attempt)

        assert low <= delay <= low + 0.3
