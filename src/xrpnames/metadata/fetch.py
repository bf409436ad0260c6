"""HTTP client for NFT metadata documents."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx

from xrpnames.core.exceptions import FetchError

logger = logging.getLogger(__name__)

# Metadata documents are small JSON objects
DEFAULT_MAX_BYTES = 1024 * 1024


class MetadataFetcher:
    """
    Fetches raw metadata bytes over HTTP(S).

    Each call is a single attempt bounded by its timeout and by a cap on the
    body size; the fetcher keeps a pooled client but no per-URL state.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: str = "xrpnames/0.1",
        max_bytes: int = DEFAULT_MAX_BYTES,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self.max_bytes = max_bytes
        self._client: httpx.AsyncClient | None = None

    @asynccontextmanager
    async def _get_client(self) -> AsyncIterator[httpx.AsyncClient]:
        """Get or create HTTP client with proper lifecycle."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={
                    "User-Agent": self.user_agent,
                    "Accept": "application/json",
                },
                follow_redirects=True,
            )
        yield self._client

    async def fetch(self, url: str, timeout: float | None = None) -> bytes:
        """
        Fetch a URL and return the response body.

        Args:
            url: Absolute http(s) URL
            timeout: Per-request timeout in seconds (defaults to the fetcher's)

        Returns:
            Raw response bytes

        Raises:
            FetchError: On timeout, transport failure, a non-2xx status or a
                body larger than ``max_bytes``
        """
        logger.debug(f"Fetching metadata: {url}")
        request_timeout = httpx.Timeout(timeout if timeout is not None else self.timeout)

        async with self._get_client() as client:
            try:
                async with client.stream("GET", url, timeout=request_timeout) as response:
                    if not response.is_success:
                        raise FetchError(
                            message=f"HTTP {response.status_code} fetching {url}",
                            url=url,
                            status_code=response.status_code,
                        )
                    return await self._read_capped(response, url)
            except httpx.TimeoutException as e:
                raise FetchError(message=f"Timed out fetching {url}", url=url) from e
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                raise FetchError(message=f"HTTP error fetching {url}: {e}", url=url) from e

    async def _read_capped(self, response: httpx.Response, url: str) -> bytes:
        """Read a streamed body, giving up once it exceeds ``max_bytes``."""
        declared = response.headers.get("Content-Length", "")
        if declared.isdigit() and int(declared) > self.max_bytes:
            raise FetchError(
                message=f"Body of {url} is {declared} bytes (limit {self.max_bytes})",
                url=url,
                status_code=response.status_code,
            )

        body = bytearray()
        async for chunk in response.aiter_bytes():
            body.extend(chunk)
            if len(body) > self.max_bytes:
                raise FetchError(
                    message=f"Body of {url} exceeds {self.max_bytes} bytes",
                    url=url,
                    status_code=response.status_code,
                )
        return bytes(body)

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "MetadataFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
