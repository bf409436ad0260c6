"""Core enums and type definitions."""

from enum import StrEnum


class Network(StrEnum):
    """XRP Ledger networks a resolver can be bound to."""

    MAINNET = "mainnet"
    TESTNET = "testnet"
    DEVNET = "devnet"

    @property
    def rpc_url(self) -> str:
        """Default public JSON-RPC endpoint for this network."""
        return _RPC_URLS[self]

    @property
    def clio_url(self) -> str:
        """Endpoint serving Clio-only methods such as ``nfts_by_issuer``."""
        return _CLIO_URLS.get(self, _RPC_URLS[self])


_RPC_URLS: dict[Network, str] = {
    Network.MAINNET: "https://s1.ripple.com:51234",
    Network.TESTNET: "https://s.altnet.rippletest.net:51234",
    Network.DEVNET: "https://s.devnet.rippletest.net:51234",
}

_CLIO_URLS: dict[Network, str] = {
    Network.MAINNET: "https://clio.xrpl.org",
}


class NamingService(StrEnum):
    """Known organizations issuing domain NFTs on the ledger."""

    XNS = "xns"  # xrpns.com
    XRP_DOMAINS = "xrpdomains"  # xrpdomains.xyz


class SourceKind(StrEnum):
    """Where an NFT's metadata document lives."""

    EMBEDDED = "embedded"
    IPFS = "ipfs"
    HTTP = "http"
