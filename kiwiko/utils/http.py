"""
HTTP client utilities for kiwiko.

This module provides the asynchronous client used to talk to an npm
registry. It keeps one pooled HTTP/2 connection per session, bounds the
number of in-flight requests, and turns registry status codes into
kiwiko exceptions:

- ``404`` becomes :class:`~kiwiko.exceptions.RegistryError` (unknown package)
- other ``4xx`` become :class:`~kiwiko.exceptions.NetworkError`, not retried
- ``429`` waits for ``Retry-After`` and tries again
- ``5xx``, timeouts and connection failures are retried with backoff
"""

from __future__ import annotations

import time
import httpx
import random
import asyncio
from typing import Any, Dict, Mapping, Optional, cast

from kiwiko.utils.logger import get_logger
from kiwiko.__version__ import __version__
from kiwiko.exceptions import NetworkError, RegistryError
from kiwiko.constants import (
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    USER_AGENT_TEMPLATE,
)

logger = get_logger("http")

#: Default Accept header. The registry store overrides it per request
#: when it wants abbreviated packuments.
DEFAULT_ACCEPT = "application/json"


class HTTPClient:
    """Async registry client with retries, throttling and a concurrency cap.

    Args:
        timeout: Request timeout in seconds.
        max_retries: Extra attempts after the first one for retryable failures.
        rate_limit_delay: Minimum spacing (seconds) between requests.
        verify_ssl: Whether to verify TLS certificates.
        user_agent: User-Agent header value (``kiwiko/<version>`` by default).
        max_concurrency: Maximum number of requests in flight.
        headers: Extra headers sent with every request, e.g. an
            ``Authorization`` header for a private registry.

    Example:
        >>> async with HTTPClient() as client:
        ...     data = await client.get_json("https://registry.npmjs.org/react")
    """

    def __init__(
        self,
        *,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        rate_limit_delay: float = 0.0,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
        max_concurrency: int = 10,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self.rate_limit_delay = rate_limit_delay
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)
        self.max_concurrency = max_concurrency
        self.headers: Dict[str, str] = dict(headers or {})

        self._client: Optional[httpx.AsyncClient] = None
        self._next_request_at: float = 0.0
        self._spacing_lock = asyncio.Lock()
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._max_429_retries: int = 5

    async def __aenter__(self) -> "HTTPClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    async def _ensure_client(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                http2=True,
                verify=self.verify_ssl,
                follow_redirects=True,
                headers={
                    "User-Agent": self.user_agent,
                    "Accept": DEFAULT_ACCEPT,
                    **self.headers,
                },
            )

    async def close(self) -> None:
        """Close the pooled connection, if one was opened."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _wait_for_slot(self) -> None:
        """Space requests at least ``rate_limit_delay`` seconds apart."""
        if self.rate_limit_delay <= 0:
            return

        async with self._spacing_lock:
            now = time.monotonic()
            wait = self._next_request_at - now
            self._next_request_at = max(now, self._next_request_at) + self.rate_limit_delay
        if wait > 0:
            await asyncio.sleep(wait)

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        assert self._client is not None
        await self._wait_for_slot()
        async with self._semaphore:
            return await self._client.request(method, url, **kwargs)

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request, retrying transient failures.

        Raises:
            RegistryError: The registry answered 404.
            NetworkError: Any other 4xx, too many 429s, or every attempt
                failed.
        """
        await self._ensure_client()

        target = url.strip().strip("\"'")
        attempts = self.max_retries + 1
        throttled = 0
        last_exc: Optional[Exception] = None

        for attempt in range(attempts):
            try:
                response = await self._send(method, target, **kwargs)
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                last_exc = exc
                logger.warning(
                    "%s contacting registry (attempt %d/%d): %s",
                    type(exc).__name__,
                    attempt + 1,
                    attempts,
                    target,
                )
            else:
                status = response.status_code

                if status == 429:
                    throttled += 1
                    if throttled > self._max_429_retries:
                        raise NetworkError(
                            f"Registry kept throttling requests after "
                            f"{self._max_429_retries} retries",
                            url=target,
                            status_code=429,
                        )
                    delay = _retry_after_seconds(response)
                    logger.warning(
                        "Registry throttled %s; waiting %ds (%d/%d)",
                        target,
                        delay,
                        throttled,
                        self._max_429_retries,
                    )
                    await asyncio.sleep(delay)
                    continue

                if status < 400:
                    return response

                _raise_for_client_error(response, target)

                last_exc = NetworkError(
                    f"Registry returned HTTP {status}",
                    url=target,
                    status_code=status,
                )
                logger.warning(
                    "HTTP %d from registry (attempt %d/%d): %s",
                    status,
                    attempt + 1,
                    attempts,
                    target,
                )

            if attempt < self.max_retries:
                delay = _backoff_delay(attempt)
                logger.debug("Retrying %s in %.2fs", target, delay)
                await asyncio.sleep(delay)

        raise NetworkError(
            f"Request failed after {attempts} attempts: {target}",
            url=target,
        ) from last_exc

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """GET *url* with retries."""
        return await self._request_with_retry("GET", url, **kwargs)

    async def get_json(self, url: str, **kwargs: Any) -> Dict[str, Any]:
        """GET *url* and decode the body as a JSON object.

        Raises:
            NetworkError: The body is not JSON or not a JSON object.
        """
        response = await self.get(url, **kwargs)

        try:
            data = response.json()
        except ValueError as exc:
            raise NetworkError(
                f"Invalid JSON response from {url}",
                url=url,
                response_body=response.text,
            ) from exc

        if not isinstance(data, dict):
            raise NetworkError(
                f"Expected JSON object from {url}, got {type(data).__name__}",
                url=url,
                response_body=response.text,
            )

        return cast(Dict[str, Any], data)


def _raise_for_client_error(response: httpx.Response, url: str) -> None:
    """Raise for 4xx answers; 5xx are left to the retry loop."""
    status = response.status_code
    if status == 404:
        raise RegistryError(
            f"Not found on the registry: {url}",
            url=url,
            status_code=404,
        )
    if 400 <= status < 500:
        raise NetworkError(
            f"HTTP {status} error for {url}",
            url=url,
            status_code=status,
            response_body=response.text,
        )


def _backoff_delay(attempt: int) -> float:
    """Exponential backoff with a little jitter: ~1s, ~2s, ~4s, ..."""
    return (2**attempt) + random.uniform(0.0, 0.3)


def _retry_after_seconds(response: httpx.Response, default: int = 1) -> int:
    """Read ``Retry-After`` as whole seconds, falling back to *default*."""
    try:
        return max(int(response.headers.get("Retry-After", default)), 0)
    except (TypeError, ValueError):
        return default
