"""
HTTP infrastructure layer for the hosted backend.

Provides:
- RetryConfig: Exponential backoff configuration
- HTTPClient: Async HTTP client with optional retry on transient errors

Retries are off unless configured (``MAX_HTTP_RETRIES``); the feed and
the writers surface a failure once and let the user try again.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


@dataclass
class RetryConfig:
    """
    Exponential backoff configuration for HTTP retries.

    Formula: min(max_backoff, base_delay * 2^attempt) * (1 + random(0, jitter_factor))
    """

    max_retries: int = 0
    max_backoff_seconds: float = 10.0
    base_delay: float = 0.5
    jitter_factor: float = 0.1

    def calculate_backoff(self, attempt: int) -> float:
        """Backoff in seconds for a 0-indexed retry attempt, jitter included."""
        delay = min(self.base_delay * (2**attempt), self.max_backoff_seconds)
        return delay + delay * self.jitter_factor * random.random()

    def is_retryable_status(self, status_code: int) -> bool:
        return status_code in RETRYABLE_STATUS_CODES


class HTTPClientError(Exception):
    """Raised for transport failures and error status codes."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class HTTPClient:
    """
    Async HTTP client wrapping ``httpx.AsyncClient``.

    Example:
        async with HTTPClient(base_url="https://xyz.supabase.co") as client:
            response = await client.request("GET", "/rest/v1/feedback")
    """

    def __init__(
        self,
        base_url: str = "",
        retry_config: RetryConfig | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize HTTP client.

        Args:
            base_url: Prefix for relative request paths.
            retry_config: Retry behaviour. No retries if None.
            timeout: Request timeout in seconds.
            transport: Optional custom transport (tests).
        """
        self.base_url = base_url
        self.retry_config = retry_config or RetryConfig()
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "HTTPClient":
        await self.open()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def open(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        json_body: Any = None,
    ) -> httpx.Response:
        """
        Perform a request, retrying transient failures if configured.

        Returns:
            httpx.Response with a status below 400.

        Raises:
            HTTPClientError: On error status codes or transport failures.
        """
        if self._client is None:
            raise RuntimeError("HTTPClient must be opened before use")

        max_attempts = self.retry_config.max_retries + 1

        for attempt in range(max_attempts):
            last_attempt = attempt == max_attempts - 1
            try:
                response = await self._client.request(
                    method,
                    path,
                    params=params,
                    headers=headers,
                    json=json_body,
                )
            except (httpx.TimeoutException, httpx.ConnectError, httpx.ReadError) as e:
                if last_attempt:
                    raise HTTPClientError(
                        f"{method} {path} failed after {attempt + 1} attempts: {e}"
                    ) from e
                await self._backoff(method, path, attempt, type(e).__name__)
                continue

            if self.retry_config.is_retryable_status(response.status_code) and not last_attempt:
                await self._backoff(method, path, attempt, str(response.status_code))
                continue

            if response.status_code >= 400:
                raise HTTPClientError(
                    f"{method} {path} failed with status {response.status_code}",
                    status_code=response.status_code,
                    response_body=response.text,
                )

            return response

        # Unreachable: the last attempt either returns or raises
        raise HTTPClientError(f"{method} {path} failed")

    async def _backoff(self, method: str, path: str, attempt: int, reason: str) -> None:
        delay = self.retry_config.calculate_backoff(attempt)
        logger.warning(
            "Retryable failure (%s) for %s %s, attempt %d/%d, backing off %.2fs",
            reason,
            method,
            path,
            attempt + 1,
            self.retry_config.max_retries + 1,
            delay,
        )
        await asyncio.sleep(delay)
