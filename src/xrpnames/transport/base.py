"""Abstract ledger transport with HTTP client management and rate limiting."""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from collections import deque
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator

import httpx
from pydantic import BaseModel, Field

from xrpnames.core.exceptions import TransportError
from xrpnames.core.models import NftHandle
from xrpnames.core.types import Network

logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """Client-side limits for RPC traffic to public ledger servers."""

    requests_per_second: float = 5.0
    burst_size: int = 1
    retry_on_429: bool = True
    max_429_retries: int = 3
    backoff_factor: float = 2.0
    max_backoff: float = 60.0


class TransportConfig(BaseModel):
    """Endpoints and HTTP settings for a ledger transport."""

    rpc_url: str | None = Field(default=None, description="JSON-RPC endpoint override")
    clio_url: str | None = Field(default=None, description="Clio endpoint override")
    timeout: float = Field(default=30.0, description="Seconds per RPC request")
    user_agent: str = "xrpnames/0.1"
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)


class AsyncRateLimiter:
    """
    Spaces outgoing RPC requests and tracks server-side throttling.

    Requests are counted over a sliding one-second window. A 429 pauses
    every caller until the server's ``Retry-After`` (or an exponential
    backoff) has passed.
    """

    def __init__(self, config: RateLimitConfig) -> None:
        self.config = config
        self._sent: deque[float] = deque()
        self._paused_until = 0.0
        self._rejections = 0
        self._lock = asyncio.Lock()
        # Created on first use so it binds to the running loop
        self._slots: asyncio.Semaphore | None = None

    async def acquire(self) -> None:
        """Wait until another request may be sent."""
        if self._slots is None:
            self._slots = asyncio.Semaphore(self.config.burst_size)

        async with self._slots, self._lock:
            delay = self._delay(time.monotonic())
            if delay > 0:
                await asyncio.sleep(delay)
            self._sent.append(time.monotonic())

    def _delay(self, now: float) -> float:
        """Seconds to wait before the next request is allowed."""
        ready_at = max(now, self._paused_until)
        while self._sent and self._sent[0] <= ready_at - 1.0:
            self._sent.popleft()
        if len(self._sent) >= self.config.requests_per_second:
            ready_at = max(ready_at, self._sent[0] + 1.0)
        return ready_at - now

    def handle_429(self, retry_after: float | None = None) -> float:
        """Record a throttled request and return how long callers will pause."""
        self._rejections += 1
        if retry_after:
            wait = retry_after
        else:
            wait = min(self.config.backoff_factor**self._rejections, self.config.max_backoff)
        self._paused_until = time.monotonic() + wait
        return wait

    def reset_429_state(self) -> None:
        """Forget earlier 429s once a request goes through."""
        self._rejections = 0

    @property
    def should_retry_429(self) -> bool:
        """Whether the retry budget allows another attempt after a 429."""
        return self.config.retry_on_429 and self._rejections < self.config.max_429_retries


def _retry_after(response: httpx.Response) -> float | None:
    """Parse a numeric ``Retry-After`` header; HTTP-date values are ignored."""
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class LedgerTransport(ABC):
    """
    Abstract base class for ledger RPC transports.

    Provides:
    - HTTP client management with connection pooling
    - Rate limiting with 429 handling
    - Mapping of httpx failures to TransportError

    Subclasses own the request/response framing and pagination; callers only
    ever see completed NFT sequences or a TransportError.
    """

    def __init__(
        self,
        network: Network = Network.MAINNET,
        config: TransportConfig | None = None,
    ) -> None:
        self.network = network
        self.config = config or TransportConfig()
        self._client: httpx.AsyncClient | None = None
        self._rate_limiter = AsyncRateLimiter(self.config.rate_limit)

    @property
    def rpc_url(self) -> str:
        """JSON-RPC endpoint for standard methods."""
        return self.config.rpc_url or self.network.rpc_url

    @property
    def clio_url(self) -> str:
        """Endpoint for Clio-only methods; a custom RPC URL serves both."""
        return self.config.clio_url or self.config.rpc_url or self.network.clio_url

    @asynccontextmanager
    async def _get_client(self) -> AsyncIterator[httpx.AsyncClient]:
        """Get or create HTTP client with proper lifecycle."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout),
                headers=self._get_default_headers(),
                follow_redirects=True,
            )

        try:
            yield self._client
        except httpx.HTTPError as e:
            raise TransportError(message=f"HTTP error: {e}") from e

    def _get_default_headers(self) -> dict[str, str]:
        """Get default headers for requests."""
        return {
            "User-Agent": self.config.user_agent,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _make_request(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request through the rate limiter, retrying 429 responses."""
        async with self._get_client() as client:
            while True:
                await self._rate_limiter.acquire()
                response = await client.request(method, url, **kwargs)
                if response.status_code != 429:
                    self._rate_limiter.reset_429_state()
                    return response

                if not self._rate_limiter.should_retry_429:
                    raise TransportError(
                        message=f"Rate limited by {url}",
                        status_code=429,
                    )
                wait = self._rate_limiter.handle_429(_retry_after(response))
                logger.warning(f"Rate limited by {url}, retrying in {wait:.2f}s")

    # Abstract methods
    @abstractmethod
    async def enumerate_nfts_by_issuer(
        self,
        issuer: str,
        network: Network | None = None,
    ) -> list[NftHandle]:
        """
        List every live NFT minted by an issuer, with its current owner.

        Args:
            issuer: Issuing account address
            network: Network to query (defaults to the transport's own)

        Returns:
            All NFTs in ledger enumeration order

        Raises:
            TransportError: On any network or RPC failure
        """
        ...

    @abstractmethod
    async def enumerate_nfts_by_owner(
        self,
        owner: str,
        network: Network | None = None,
    ) -> list[NftHandle]:
        """
        List every NFT currently held by an account.

        Args:
            owner: Holder address
            network: Network to query (defaults to the transport's own)

        Returns:
            All NFTs in ledger enumeration order (empty for unknown accounts)

        Raises:
            TransportError: On any network or RPC failure
        """
        ...

    async def __aenter__(self) -> "LedgerTransport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
