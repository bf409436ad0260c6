"""Shared test fixtures for all tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import pytest

from xrpnames.config import XrpNamesSettings
from xrpnames.core.models import DomainRecord, NftHandle
from xrpnames.core.types import NamingService, Network, SourceKind

# ============================================================================
# Test Data Constants
# ============================================================================


XNS_ISSUER = "rYhfynZDrde1uSvvQAYctApg6DnVE5HKm"
XRP_DOMAINS_ISSUER = "r4pM3nT7r7X1k2WMcSw5Sz8ftUu33TEfA4"
UNRELATED_ISSUER = "rGWrZyQqhTp9Xu7G5Pkayo7bXjH4k4QYpf"

OWNER_ALICE = "rPT1Sjq2YGrBMTttX4GZHjKu9dyfzbpAYe"
OWNER_BOB = "rHb9CJAWyB4rj91VRWn96DkukG4bwdtyTh"

CID_V0 = "QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG"
CID_V1 = "bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi"


def _hex_uri(uri: str) -> str:
    """Encode a URI the way the ledger stores it."""
    return uri.encode("utf-8").hex().upper()


def _nft_id(serial: int) -> str:
    """A deterministic 64-hex-character NFTokenID."""
    return f"{serial:064X}"


# ============================================================================
# Factory Fixtures
# ============================================================================


@pytest.fixture
def make_nft() -> Callable[..., NftHandle]:
    """Factory fixture building NFT handles."""

    def _make(
        serial: int,
        *,
        uri: str | None = None,
        metadata: dict[str, Any] | None = None,
        owner: str = OWNER_ALICE,
        issuer: str = XNS_ISSUER,
    ) -> NftHandle:
        if metadata is not None:
            uri = json.dumps(metadata)
        return NftHandle(
            nft_id=_nft_id(serial),
            owner=owner,
            issuer=issuer,
            uri=_hex_uri(uri) if uri is not None else None,
        )

    return _make


@pytest.fixture
def make_domain_nft(make_nft: Callable[..., NftHandle]) -> Callable[..., NftHandle]:
    """Factory fixture building NFTs with embedded domain metadata."""

    def _make(
        serial: int,
        domain: str,
        *,
        owner: str = OWNER_ALICE,
        issuer: str = XNS_ISSUER,
    ) -> NftHandle:
        return make_nft(
            serial,
            metadata={"name": domain, "description": f"{domain} domain NFT"},
            owner=owner,
            issuer=issuer,
        )

    return _make


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_domain_record() -> DomainRecord:
    """Create a sample resolved domain record."""
    return DomainRecord(
        name="alice.xrp",
        owner=OWNER_ALICE,
        issuer=XNS_ISSUER,
        nft_id=_nft_id(1),
        source_kind=SourceKind.EMBEDDED,
        service=NamingService.XNS,
    )


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture
def mock_settings() -> XrpNamesSettings:
    """Create settings pointing at test endpoints."""
    return XrpNamesSettings(
        network=Network.MAINNET,
        rpc_url="https://rpc.test",
        clio_url="https://clio.test",
        ipfs_gateways=["https://gw1.test/ipfs/", "https://gw2.test/ipfs/"],
        rpc_timeout=5.0,
        rpc_requests_per_second=1000.0,
        metadata_timeout=2.0,
        cache_ttl=60.0,
        cache_capacity=10,
        log_level="DEBUG",
    )
