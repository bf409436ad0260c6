"""Main library client for standalone usage."""

from __future__ import annotations

import logging

from xrpnames.cache import TTLCache
from xrpnames.config import XrpNamesSettings
from xrpnames.core.models import DomainRecord
from xrpnames.core.types import Network
from xrpnames.metadata.fetch import MetadataFetcher
from xrpnames.metadata.parser import MetadataParser
from xrpnames.resolution.registry import NamingServiceRegistry
from xrpnames.resolution.resolver import NameResolver
from xrpnames.transport.base import RateLimitConfig, TransportConfig
from xrpnames.transport.xrpl import XrplRpcTransport

logger = logging.getLogger(__name__)


class XrpNamesClient:
    """
    Main client for the xrpnames library.

    Wires the ledger transport, metadata parser, naming service registry and
    cache from settings, and exposes name resolution and reverse lookup.

    Usage:
        async with XrpNamesClient() as client:
            # Resolve a domain to its owner
            record = await client.resolve("ckelley.xrp")

            # List the domains an address holds
            records = await client.reverse_lookup("rYhfynZDrde1uSvvQAYctApg6DnVE5HKm")

    Settings are loaded from environment variables or can be passed explicitly.
    """

    def __init__(
        self,
        settings: XrpNamesSettings | None = None,
        *,
        network: Network | None = None,
        rpc_url: str | None = None,
        registry: NamingServiceRegistry | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            settings: Library settings. If not provided, loaded from environment.
            network: Overrides the configured network.
            rpc_url: Custom JSON-RPC endpoint; also used for Clio methods
                unless a Clio URL is configured.
            registry: Custom naming service table.
        """
        self._settings = settings or XrpNamesSettings()
        overrides = {}
        if network is not None:
            overrides["network"] = network
        if rpc_url is not None:
            overrides["rpc_url"] = rpc_url
        if overrides:
            self._settings = self._settings.model_copy(update=overrides)
        self._registry = registry
        self._resolver: NameResolver | None = None

    @property
    def settings(self) -> XrpNamesSettings:
        return self._settings

    @property
    def network(self) -> Network:
        return self._settings.network

    async def __aenter__(self) -> XrpNamesClient:
        """Initialize resources on context entry."""
        self._initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Clean up resources on context exit."""
        await self.close()

    def _initialize(self) -> None:
        """Build the resolver and its collaborators from settings."""
        settings = self._settings

        transport = XrplRpcTransport(
            settings.network,
            TransportConfig(
                rpc_url=settings.rpc_url,
                clio_url=settings.clio_url,
                timeout=settings.rpc_timeout,
                user_agent=settings.user_agent,
                rate_limit=RateLimitConfig(
                    requests_per_second=settings.rpc_requests_per_second,
                ),
            ),
        )
        parser = MetadataParser(
            MetadataFetcher(
                timeout=settings.metadata_timeout,
                user_agent=settings.user_agent,
                max_bytes=settings.metadata_max_bytes,
            ),
            gateways=settings.ipfs_gateways,
            timeout=settings.metadata_timeout,
        )
        self._resolver = NameResolver(
            transport,
            parser,
            network=settings.network,
            registry=self._registry,
            cache=TTLCache(settings.cache_capacity, settings.cache_ttl),
            max_concurrent_fetches=settings.max_concurrent_fetches,
        )
        logger.info(
            f"xrpnames client ready: network={settings.network} "
            f"rpc={settings.resolved_rpc_url}"
        )

    async def close(self) -> None:
        """Close all resources."""
        if self._resolver:
            await self._resolver.close()
            self._resolver = None

    def _ensure_initialized(self) -> NameResolver:
        """Ensure client is initialized."""
        if self._resolver is None:
            raise RuntimeError(
                "Client not initialized. Use 'async with XrpNamesClient() as client:'"
            )
        return self._resolver

    async def resolve(self, name: str) -> DomainRecord:
        """
        Resolve a domain name.

        Args:
            name: Domain such as "alice.xrp"

        Returns:
            Record of the NFT representing the domain
        """
        return await self._ensure_initialized().resolve(name)

    async def reverse_lookup(self, address: str) -> list[DomainRecord]:
        """
        List the domains held by an address.

        Args:
            address: Classic address ("r...")

        Returns:
            Domain records, possibly empty
        """
        return await self._ensure_initialized().reverse_lookup(address)

    def clear_cache(self) -> None:
        """Drop all cached results."""
        self._ensure_initialized().clear_cache()


# Convenience functions for one-off lookups
async def resolve_domain(
    name: str,
    *,
    settings: XrpNamesSettings | None = None,
    network: Network | None = None,
) -> DomainRecord:
    """
    Resolve a domain (convenience function).

    For multiple lookups, use XrpNamesClient so the cache is reused.
    """
    async with XrpNamesClient(settings, network=network) as client:
        return await client.resolve(name)


async def lookup_address(
    address: str,
    *,
    settings: XrpNamesSettings | None = None,
    network: Network | None = None,
) -> list[DomainRecord]:
    """
    List the domains held by an address (convenience function).

    For multiple lookups, use XrpNamesClient so the cache is reused.
    """
    async with XrpNamesClient(settings, network=network) as client:
        return await client.reverse_lookup(address)
