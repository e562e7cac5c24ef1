"""Tests for HTTPClient and RetryConfig."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx

from gctalk.backend.http_client import HTTPClient, HTTPClientError, RetryConfig

BASE = "https://api.test"


class TestRetryConfig:
    def test_backoff_grows_and_caps(self):
        config = RetryConfig(base_delay=1.0, max_backoff_seconds=4.0, jitter_factor=0.0)
        assert config.calculate_backoff(0) == 1.0
        assert config.calculate_backoff(1) == 2.0
        assert config.calculate_backoff(5) == 4.0

    def test_jitter_bounds(self):
        config = RetryConfig(base_delay=1.0, jitter_factor=0.1)
        for _ in range(20):
            assert 1.0 <= config.calculate_backoff(0) <= 1.1

    def test_retryable_status(self):
        config = RetryConfig()
        assert config.is_retryable_status(503)
        assert not config.is_retryable_status(404)


class TestHTTPClient:
    """Tests for request handling."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_success(self):
        route = respx.get(f"{BASE}/rest/v1/feedback").mock(
            return_value=httpx.Response(200, json=[{"id": "1"}])
        )

        async with HTTPClient(base_url=BASE) as client:
            response = await client.request("GET", "/rest/v1/feedback", params={"order": "created_at.desc"})

        assert response.json() == [{"id": "1"}]
        assert route.calls.last.request.url.params["order"] == "created_at.desc"

    @pytest.mark.asyncio
    @respx.mock
    async def test_error_status_raises(self):
        respx.get(f"{BASE}/missing").mock(return_value=httpx.Response(404, text="nope"))

        async with HTTPClient(base_url=BASE) as client:
            with pytest.raises(HTTPClientError) as exc_info:
                await client.request("GET", "/missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.response_body == "nope"

    @pytest.mark.asyncio
    @respx.mock
    async def test_no_retry_by_default(self):
        route = respx.get(f"{BASE}/flaky").mock(return_value=httpx.Response(503))

        async with HTTPClient(base_url=BASE) as client:
            with pytest.raises(HTTPClientError) as exc_info:
                await client.request("GET", "/flaky")

        assert exc_info.value.status_code == 503
        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_retries_transient_status(self):
        route = respx.get(f"{BASE}/flaky").mock(
            side_effect=[httpx.Response(503), httpx.Response(200, json={"ok": True})]
        )

        with patch("gctalk.backend.http_client.asyncio.sleep", new=AsyncMock()) as sleep:
            async with HTTPClient(base_url=BASE, retry_config=RetryConfig(max_retries=2)) as client:
                response = await client.request("GET", "/flaky")

        assert response.json() == {"ok": True}
        assert route.call_count == 2
        sleep.assert_awaited_once()

    @pytest.mark.asyncio
    @respx.mock
    async def test_transport_error(self):
        respx.get(f"{BASE}/down").mock(side_effect=httpx.ConnectError("refused"))

        with patch("gctalk.backend.http_client.asyncio.sleep", new=AsyncMock()):
            async with HTTPClient(base_url=BASE, retry_config=RetryConfig(max_retries=1)) as client:
                with pytest.raises(HTTPClientError, match="after 2 attempts") as exc_info:
                    await client.request("GET", "/down")

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_must_be_opened(self):
        client = HTTPClient(base_url=BASE)
        with pytest.raises(RuntimeError, match="opened"):
            await client.request("GET", "/")
