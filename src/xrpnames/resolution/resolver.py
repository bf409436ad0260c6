"""Name resolver: domain -> record and owner -> records."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from xrpnames.cache import CacheKeys, TTLCache, cached
from xrpnames.core.exceptions import (
    DomainNotFoundError,
    InvalidAddressError,
    InvalidDomainError,
    ParseError,
    TransportError,
)
from xrpnames.core.models import DomainRecord, NftHandle
from xrpnames.core.normalization import is_classic_address, normalize_address, parse_domain
from xrpnames.core.types import NamingService, Network
from xrpnames.metadata.parser import MetadataParser
from xrpnames.resolution.registry import NamingServiceRegistry
from xrpnames.transport.base import LedgerTransport

logger = logging.getLogger(__name__)


class NameResolver:
    """
    Resolves domains to their NFT records and owners back to their domains.

    Features:
    - Per-service issuer scans in registration order, first match wins
    - Owner-scoped reverse lookups with bounded concurrent metadata fetches
    - Per-NFT metadata failures are logged and skipped
    - Results cached in a shared TTL cache (misses and errors are not cached)
    """

    def __init__(
        self,
        transport: LedgerTransport,
        parser: MetadataParser,
        *,
        network: Network | None = None,
        registry: NamingServiceRegistry | None = None,
        cache: TTLCache | None = None,
        max_concurrent_fetches: int = 8,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            transport: Ledger RPC transport used for NFT enumeration
            parser: Metadata parser applied to every candidate NFT
            network: Network to resolve on (defaults to the transport's)
            registry: Naming service issuer table (defaults to the built-in one)
            cache: Result cache (defaults to 1000 entries, 5 minute TTL)
            max_concurrent_fetches: Metadata fetches in flight per reverse lookup
        """
        if max_concurrent_fetches < 1:
            raise ValueError("max_concurrent_fetches must be at least 1")
        self._transport = transport
        self._parser = parser
        self.network = network or transport.network
        self._registry = registry or NamingServiceRegistry()
        self._cache = cache if cache is not None else TTLCache()
        self._max_concurrent_fetches = max_concurrent_fetches

    @property
    def registry(self) -> NamingServiceRegistry:
        return self._registry

    @property
    def cache(self) -> TTLCache:
        return self._cache

    async def resolve(self, name: str) -> DomainRecord:
        """
        Resolve a domain name to the record of the NFT representing it.

        Args:
            name: Domain such as "alice.xrp" (case and surrounding space ignored)

        Returns:
            The first matching record, scanning services in registration order

        Raises:
            InvalidDomainError: Name is not a supported label.suffix domain
            DomainNotFoundError: No registered service holds the domain
            TransportError: The ledger could not be queried
        """
        try:
            normalized = parse_domain(name)
        except ValueError as e:
            raise InvalidDomainError(str(e), domain=name) from e

        return await self._resolve_normalized(normalized)

    @cached(CacheKeys.domain)
    async def _resolve_normalized(self, name: str) -> DomainRecord:
        start = time.monotonic()
        logger.info(f"Resolving domain: {name}")

        services = self._registry.services_for(self.network)
        if not services:
            logger.warning(f"No naming services registered on {self.network}")

        for service, issuer in services:
            nfts = await self._enumerate(
                self._transport.enumerate_nfts_by_issuer, issuer, "nfts_by_issuer"
            )
            logger.debug(f"{service}: {len(nfts)} NFTs from issuer {issuer}")

            for nft in nfts:
                record = await self._try_parse(nft, service)
                if record is not None and record.name == name:
                    duration = time.monotonic() - start
                    logger.info(
                        f"Resolved {name} via {service} in {duration:.2f}s: "
                        f"owner={record.owner} nft={record.nft_id}"
                    )
                    return record

        raise DomainNotFoundError(
            f"Domain not found: {name}",
            domain=name,
            details={"services": [str(service) for service, _ in services]},
        )

    async def reverse_lookup(self, owner: str) -> list[DomainRecord]:
        """
        List the domains held by an address.

        Args:
            owner: Classic address ("r...")

        Returns:
            Records in ledger enumeration order; empty if the address holds
            no naming-service NFTs

        Raises:
            InvalidAddressError: Not a classic address
            TransportError: The ledger could not be queried
        """
        address = normalize_address(owner)
        if not is_classic_address(address):
            raise InvalidAddressError(f"Invalid ledger address: {owner!r}", address=owner)

        return list(await self._lookup_owner(address))

    @cached(CacheKeys.owner)
    async def _lookup_owner(self, address: str) -> tuple[DomainRecord, ...]:
        start = time.monotonic()
        logger.info(f"Reverse lookup for address: {address}")

        nfts = await self._enumerate(
            self._transport.enumerate_nfts_by_owner, address, "account_nfts"
        )

        candidates: list[tuple[NftHandle, NamingService]] = []
        for nft in nfts:
            service = self._registry.service_for_issuer(nft.issuer, self.network)
            if service is not None:
                candidates.append((nft, service))

        semaphore = asyncio.Semaphore(self._max_concurrent_fetches)

        async def parse_one(nft: NftHandle, service: NamingService) -> DomainRecord | None:
            async with semaphore:
                return await self._try_parse(nft, service)

        # gather keeps input order, so records follow ledger enumeration order
        results = await asyncio.gather(
            *(parse_one(nft, service) for nft, service in candidates)
        )
        records = tuple(record for record in results if record is not None)

        duration = time.monotonic() - start
        logger.info(
            f"Reverse lookup for {address} completed in {duration:.2f}s: "
            f"{len(records)} of {len(candidates)} domain NFTs resolved"
        )
        return records

    async def _enumerate(
        self,
        enumerate_nfts: Callable[[str, Network], Awaitable[list[NftHandle]]],
        account: str,
        method: str,
    ) -> list[NftHandle]:
        """Run a transport enumeration, reporting any failure as TransportError."""
        try:
            return await enumerate_nfts(account, self.network)
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(
                message=f"{method} failed for {account}: {e}",
                method=method,
            ) from e

    async def _try_parse(
        self,
        nft: NftHandle,
        service: NamingService | None,
    ) -> DomainRecord | None:
        """Parse one NFT, absorbing metadata failures."""
        try:
            return await self._parser.parse(nft, service)
        except ParseError as e:
            logger.debug(f"Skipping NFT {nft.nft_id}: {type(e).__name__}: {e.message}")
            return None

    def clear_cache(self) -> None:
        """Drop all cached names and owners."""
        self._cache.clear()

    async def close(self) -> None:
        """Close the transport and parser HTTP clients."""
        await self._transport.close()
        await self._parser.close()

    async def __aenter__(self) -> "NameResolver":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
