"""Tests for the name resolver."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest
import respx
from httpx import Response

from xrpnames.cache import TTLCache
from xrpnames.core.exceptions import (
    DomainNotFoundError,
    InvalidAddressError,
    InvalidDomainError,
    TransportError,
)
from xrpnames.core.models import DomainRecord, NftHandle
from xrpnames.core.types import NamingService, Network
from xrpnames.metadata.parser import MetadataParser
from xrpnames.resolution.registry import NamingServiceRegistry
from xrpnames.resolution.resolver import NameResolver
from xrpnames.transport.base import LedgerTransport

XNS_ISSUER = "rYhfynZDrde1uSvvQAYctApg6DnVE5HKm"
XRP_DOMAINS_ISSUER = "r4pM3nT7r7X1k2WMcSw5Sz8ftUu33TEfA4"
UNRELATED_ISSUER = "rGWrZyQqhTp9Xu7G5Pkayo7bXjH4k4QYpf"
ALICE = "rPT1Sjq2YGrBMTttX4GZHjKu9dyfzbpAYe"
BOB = "rHb9CJAWyB4rj91VRWn96DkukG4bwdtyTh"

# ============================================================================
# Fakes
# ============================================================================


class FakeTransport(LedgerTransport):
    """In-memory ledger keyed by issuer and owner, counting every query."""

    def __init__(self, nfts: list[NftHandle] | None = None) -> None:
        super().__init__(Network.MAINNET)
        self.nfts = list(nfts or [])
        self.issuer_calls: list[str] = []
        self.owner_calls: list[str] = []
        self.error: Exception | None = None
        self.closed = False

    async def enumerate_nfts_by_issuer(
        self, issuer: str, network: Network | None = None
    ) -> list[NftHandle]:
        self.issuer_calls.append(issuer)
        if self.error is not None:
            raise self.error
        return [nft for nft in self.nfts if nft.issuer == issuer]

    async def enumerate_nfts_by_owner(
        self, owner: str, network: Network | None = None
    ) -> list[NftHandle]:
        self.owner_calls.append(owner)
        if self.error is not None:
            raise self.error
        return [nft for nft in self.nfts if nft.owner == owner]

    async def close(self) -> None:
        self.closed = True


class SlowParser(MetadataParser):
    """Parser that finishes later NFTs first and tracks concurrency."""

    def __init__(self) -> None:
        super().__init__()
        self.in_flight = 0
        self.max_in_flight = 0

    async def parse(self, nft, service=None):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            # Higher serials finish sooner
            await asyncio.sleep(0.05 / int(nft.nft_id, 16))
            return await super().parse(nft, service)
        finally:
            self.in_flight -= 1


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def resolver(transport: FakeTransport) -> NameResolver:
    return NameResolver(transport, MetadataParser())


# ============================================================================
# Construction Tests
# ============================================================================


class TestNameResolverConfig:
    """Tests for NameResolver construction."""

    def test_defaults(self, resolver: NameResolver):
        assert resolver.network == Network.MAINNET
        assert resolver.cache.capacity == 1000
        assert resolver.registry.services[0] == NamingService.XNS

    def test_rejects_zero_concurrency(self, transport: FakeTransport):
        with pytest.raises(ValueError):
            NameResolver(transport, MetadataParser(), max_concurrent_fetches=0)

    async def test_close(self, transport: FakeTransport):
        parser = MetadataParser()
        parser.close = AsyncMock()

        async with NameResolver(transport, parser):
            pass

        assert transport.closed is True
        parser.close.assert_awaited_once()


# ============================================================================
# Resolve Tests
# ============================================================================


class TestResolve:
    """Tests for NameResolver.resolve."""

    async def test_resolves_domain(
        self,
        resolver: NameResolver,
        transport: FakeTransport,
        make_domain_nft: Callable[..., NftHandle],
    ):
        transport.nfts = [
            make_domain_nft(1, "bob.xrp", owner=BOB),
            make_domain_nft(2, "alice.xrp", owner=ALICE),
        ]

        record = await resolver.resolve("alice.xrp")

        assert record.name == "alice.xrp"
        assert record.owner == ALICE
        assert record.issuer == XNS_ISSUER
        assert record.service == NamingService.XNS
        assert transport.issuer_calls == [XNS_ISSUER]

    async def test_normalizes_input(
        self,
        resolver: NameResolver,
        transport: FakeTransport,
        make_domain_nft: Callable[..., NftHandle],
    ):
        transport.nfts = [make_domain_nft(1, "alice.xrp")]

        record = await resolver.resolve("  Alice.XRP. ")

        assert record.name == "alice.xrp"

    async def test_falls_through_to_next_service(
        self,
        resolver: NameResolver,
        transport: FakeTransport,
        make_domain_nft: Callable[..., NftHandle],
    ):
        transport.nfts = [make_domain_nft(1, "carol.xrp", issuer=XRP_DOMAINS_ISSUER)]

        record = await resolver.resolve("carol.xrp")

        assert record.service == NamingService.XRP_DOMAINS
        assert transport.issuer_calls == [XNS_ISSUER, XRP_DOMAINS_ISSUER]

    async def test_first_registered_service_wins(
        self,
        resolver: NameResolver,
        transport: FakeTransport,
        make_domain_nft: Callable[..., NftHandle],
    ):
        transport.nfts = [
            make_domain_nft(1, "dup.xrp", owner=BOB, issuer=XRP_DOMAINS_ISSUER),
            make_domain_nft(2, "dup.xrp", owner=ALICE, issuer=XNS_ISSUER),
        ]

        record = await resolver.resolve("dup.xrp")

        assert record.service == NamingService.XNS
        assert record.owner == ALICE
        assert transport.issuer_calls == [XNS_ISSUER]

    async def test_skips_unparseable_nfts(
        self,
        resolver: NameResolver,
        transport: FakeTransport,
        make_nft: Callable[..., NftHandle],
        make_domain_nft: Callable[..., NftHandle],
    ):
        transport.nfts = [
            make_nft(1),  # no URI
            make_nft(2, uri="{not json"),
            make_nft(3, metadata={"name": "Domain #3"}),
            make_domain_nft(4, "alice.xrp"),
        ]

        record = await resolver.resolve("alice.xrp")

        assert record.nft_id == make_nft(4).nft_id

    @respx.mock
    async def test_skips_deeply_nested_metadata(
        self,
        resolver: NameResolver,
        transport: FakeTransport,
        make_nft: Callable[..., NftHandle],
        make_domain_nft: Callable[..., NftHandle],
    ):
        """A body nested too deeply to decode is one NFT's failure, not the scan's."""
        respx.get("https://meta.test/nested.json").mock(
            return_value=Response(200, content=b"[" * 200000)
        )
        transport.nfts = [
            make_nft(1, uri="https://meta.test/nested.json"),
            make_domain_nft(2, "alice.xrp"),
        ]

        record = await resolver.resolve("alice.xrp")

        assert record.nft_id == make_nft(2).nft_id

    async def test_not_found(
        self,
        resolver: NameResolver,
        transport: FakeTransport,
        make_domain_nft: Callable[..., NftHandle],
    ):
        transport.nfts = [make_domain_nft(1, "alice.xrp")]

        with pytest.raises(DomainNotFoundError) as exc_info:
            await resolver.resolve("nobody.xrp")

        assert exc_info.value.domain == "nobody.xrp"
        assert exc_info.value.details["services"] == ["xns", "xrpdomains"]

    @pytest.mark.parametrize("name", ["", "alice", "alice.eth", "a.b.xrp", "al ice.xrp"])
    async def test_invalid_domain(
        self, resolver: NameResolver, transport: FakeTransport, name: str
    ):
        with pytest.raises(InvalidDomainError) as exc_info:
            await resolver.resolve(name)

        assert exc_info.value.domain == name
        assert transport.issuer_calls == []

    async def test_network_without_services(self, transport: FakeTransport):
        resolver = NameResolver(transport, MetadataParser(), network=Network.TESTNET)

        with pytest.raises(DomainNotFoundError):
            await resolver.resolve("alice.xrp")

        assert transport.issuer_calls == []

    async def test_custom_registry(
        self,
        transport: FakeTransport,
        make_domain_nft: Callable[..., NftHandle],
    ):
        registry = NamingServiceRegistry(
            {(NamingService.XRP_DOMAINS, Network.MAINNET): UNRELATED_ISSUER}
        )
        resolver = NameResolver(transport, MetadataParser(), registry=registry)
        transport.nfts = [make_domain_nft(1, "erin.xrp", issuer=UNRELATED_ISSUER)]

        record = await resolver.resolve("erin.xrp")

        assert record.service == NamingService.XRP_DOMAINS

    async def test_transport_error_propagates(
        self, resolver: NameResolver, transport: FakeTransport
    ):
        transport.error = TransportError("ledger down", method="nfts_by_issuer")

        with pytest.raises(TransportError, match="ledger down"):
            await resolver.resolve("alice.xrp")

    async def test_unexpected_error_becomes_transport_error(
        self, resolver: NameResolver, transport: FakeTransport
    ):
        transport.error = ConnectionResetError("reset by peer")

        with pytest.raises(TransportError) as exc_info:
            await resolver.resolve("alice.xrp")

        assert exc_info.value.method == "nfts_by_issuer"
        assert isinstance(exc_info.value.__cause__, ConnectionResetError)


# ============================================================================
# Cache Tests
# ============================================================================


class TestResolverCache:
    """Tests for result caching."""

    async def test_repeat_resolve_uses_cache(
        self,
        resolver: NameResolver,
        transport: FakeTransport,
        make_domain_nft: Callable[..., NftHandle],
    ):
        transport.nfts = [make_domain_nft(1, "alice.xrp")]

        first = await resolver.resolve("alice.xrp")
        second = await resolver.resolve("ALICE.xrp")

        assert first == second
        assert transport.issuer_calls == [XNS_ISSUER]

    async def test_not_found_is_not_cached(
        self, resolver: NameResolver, transport: FakeTransport
    ):
        for _ in range(2):
            with pytest.raises(DomainNotFoundError):
                await resolver.resolve("alice.xrp")

        assert len(transport.issuer_calls) == 4

    async def test_errors_are_not_cached(
        self,
        resolver: NameResolver,
        transport: FakeTransport,
        make_domain_nft: Callable[..., NftHandle],
    ):
        transport.nfts = [make_domain_nft(1, "alice.xrp")]
        transport.error = TransportError("ledger down")
        with pytest.raises(TransportError):
            await resolver.resolve("alice.xrp")

        transport.error = None
        record = await resolver.resolve("alice.xrp")

        assert record.name == "alice.xrp"

    async def test_entry_expires(
        self,
        transport: FakeTransport,
        make_domain_nft: Callable[..., NftHandle],
    ):
        clock = FakeClock()
        resolver = NameResolver(
            transport, MetadataParser(), cache=TTLCache(10, ttl=60.0, clock=clock)
        )
        transport.nfts = [make_domain_nft(1, "alice.xrp", owner=ALICE)]
        await resolver.resolve("alice.xrp")

        # Ownership changes on the ledger while the entry is still fresh
        transport.nfts = [make_domain_nft(1, "alice.xrp", owner=BOB)]
        clock.now = 60.0
        assert (await resolver.resolve("alice.xrp")).owner == ALICE

        clock.now = 61.0
        assert (await resolver.resolve("alice.xrp")).owner == BOB

    async def test_clear_cache(
        self,
        resolver: NameResolver,
        transport: FakeTransport,
        make_domain_nft: Callable[..., NftHandle],
    ):
        transport.nfts = [make_domain_nft(1, "alice.xrp")]
        await resolver.resolve("alice.xrp")
        await resolver.reverse_lookup(ALICE)

        resolver.clear_cache()
        await resolver.resolve("alice.xrp")
        await resolver.reverse_lookup(ALICE)

        assert len(transport.issuer_calls) == 2
        assert len(transport.owner_calls) == 2

    async def test_domains_and_owners_share_capacity(
        self,
        transport: FakeTransport,
        make_domain_nft: Callable[..., NftHandle],
    ):
        resolver = NameResolver(transport, MetadataParser(), cache=TTLCache(capacity=1))
        transport.nfts = [make_domain_nft(1, "alice.xrp")]

        await resolver.resolve("alice.xrp")
        await resolver.reverse_lookup(ALICE)
        await resolver.resolve("alice.xrp")

        assert len(transport.issuer_calls) == 2


# ============================================================================
# Reverse Lookup Tests
# ============================================================================


class TestReverseLookup:
    """Tests for NameResolver.reverse_lookup."""

    async def test_lists_domains_from_known_issuers(
        self,
        resolver: NameResolver,
        transport: FakeTransport,
        make_nft: Callable[..., NftHandle],
        make_domain_nft: Callable[..., NftHandle],
    ):
        transport.nfts = [
            make_domain_nft(1, "alice.xrp"),
            make_domain_nft(2, "art.xrp", issuer=UNRELATED_ISSUER),
            make_domain_nft(3, "wonder.xrp", issuer=XRP_DOMAINS_ISSUER),
            make_nft(4, uri="{broken"),
            make_domain_nft(5, "bob.xrp", owner=BOB),
        ]

        records = await resolver.reverse_lookup(f"  {ALICE} ")

        assert [r.name for r in records] == ["alice.xrp", "wonder.xrp"]
        assert [r.service for r in records] == [
            NamingService.XNS,
            NamingService.XRP_DOMAINS,
        ]
        assert all(r.owner == ALICE for r in records)
        assert transport.owner_calls == [ALICE]
        assert transport.issuer_calls == []

    @respx.mock
    async def test_skips_deeply_nested_metadata(
        self,
        resolver: NameResolver,
        transport: FakeTransport,
        make_nft: Callable[..., NftHandle],
        make_domain_nft: Callable[..., NftHandle],
    ):
        respx.get("https://meta.test/nested.json").mock(
            return_value=Response(200, content=b"[" * 200000)
        )
        transport.nfts = [
            make_domain_nft(1, "alice.xrp"),
            make_nft(2, uri="https://meta.test/nested.json"),
            make_domain_nft(3, "alice-art.xrp"),
        ]

        records = await resolver.reverse_lookup(ALICE)

        assert [r.name for r in records] == ["alice.xrp", "alice-art.xrp"]

    async def test_empty_result(self, resolver: NameResolver, transport: FakeTransport):
        assert await resolver.reverse_lookup(ALICE) == []
        assert await resolver.reverse_lookup(ALICE) == []
        assert transport.owner_calls == [ALICE]

    async def test_returns_fresh_list(
        self,
        resolver: NameResolver,
        transport: FakeTransport,
        make_domain_nft: Callable[..., NftHandle],
    ):
        transport.nfts = [make_domain_nft(1, "alice.xrp")]

        first = await resolver.reverse_lookup(ALICE)
        first.clear()

        assert len(await resolver.reverse_lookup(ALICE)) == 1

    @pytest.mark.parametrize("address", ["", "alice.xrp", "xPT1Sjq2YGrBMTttX4GZHjKu9dyfzbpAYe"])
    async def test_invalid_address(
        self, resolver: NameResolver, transport: FakeTransport, address: str
    ):
        with pytest.raises(InvalidAddressError) as exc_info:
            await resolver.reverse_lookup(address)

        assert exc_info.value.address == address
        assert transport.owner_calls == []

    async def test_transport_error(self, resolver: NameResolver, transport: FakeTransport):
        transport.error = TransportError("ledger down", method="account_nfts")

        with pytest.raises(TransportError):
            await resolver.reverse_lookup(ALICE)

    async def test_preserves_ledger_order_under_concurrency(
        self,
        transport: FakeTransport,
        make_domain_nft: Callable[..., NftHandle],
    ):
        parser = SlowParser()
        resolver = NameResolver(transport, parser, max_concurrent_fetches=2)
        names = [f"name{i}.xrp" for i in range(1, 7)]
        transport.nfts = [make_domain_nft(i, name) for i, name in enumerate(names, start=1)]

        records = await resolver.reverse_lookup(ALICE)

        assert [r.name for r in records] == names
        assert 1 <= parser.max_in_flight <= 2

    async def test_round_trip(
        self,
        resolver: NameResolver,
        transport: FakeTransport,
        make_domain_nft: Callable[..., NftHandle],
    ):
        """Every domain an address holds resolves back to that address."""
        transport.nfts = [
            make_domain_nft(1, "alice.xrp"),
            make_domain_nft(2, "alice-art.xrp", issuer=XRP_DOMAINS_ISSUER),
            make_domain_nft(3, "bob.xrp", owner=BOB),
        ]

        records = await resolver.reverse_lookup(ALICE)

        assert len(records) == 2
        for record in records:
            resolved: DomainRecord = await resolver.resolve(record.name)
            assert resolved.owner == ALICE
            assert resolved.nft_id == record.nft_id
