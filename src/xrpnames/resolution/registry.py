"""Naming service registry: which account issues domains on which network."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from xrpnames.core.types import NamingService, Network

IssuerTable = Mapping[tuple[NamingService, Network], str | None]

# Registration order is the resolution tie-break order.
DEFAULT_ISSUERS: IssuerTable = MappingProxyType(
    {
        (NamingService.XNS, Network.MAINNET): "rYhfynZDrde1uSvvQAYctApg6DnVE5HKm",
        (NamingService.XNS, Network.TESTNET): None,
        (NamingService.XNS, Network.DEVNET): None,
        (NamingService.XRP_DOMAINS, Network.MAINNET): "r4pM3nT7r7X1k2WMcSw5Sz8ftUu33TEfA4",
        (NamingService.XRP_DOMAINS, Network.TESTNET): None,
        (NamingService.XRP_DOMAINS, Network.DEVNET): None,
    }
)


class NamingServiceRegistry:
    """
    Immutable lookup table of naming service issuers per network.

    A missing row or a None issuer means the service is not deployed on that
    network; callers skip such combinations. Services are reported in the
    order their first row appears in the table.
    """

    def __init__(self, issuers: IssuerTable | None = None) -> None:
        self._issuers: IssuerTable = MappingProxyType(
            dict(DEFAULT_ISSUERS if issuers is None else issuers)
        )
        self._services: tuple[NamingService, ...] = tuple(
            dict.fromkeys(service for service, _ in self._issuers)
        )

    @property
    def services(self) -> tuple[NamingService, ...]:
        """All registered services in registration order."""
        return self._services

    def issuer_for(self, service: NamingService, network: Network) -> str | None:
        """Issuer of ``service`` on ``network``, or None if not deployed."""
        return self._issuers.get((service, network))

    def services_for(self, network: Network) -> list[tuple[NamingService, str]]:
        """``(service, issuer)`` pairs deployed on ``network``, in registration order."""
        pairs = []
        for service in self._services:
            issuer = self.issuer_for(service, network)
            if issuer is not None:
                pairs.append((service, issuer))
        return pairs

    def issuers_for(self, network: Network) -> frozenset[str]:
        """Every known issuer on ``network``."""
        return frozenset(issuer for _, issuer in self.services_for(network))

    def service_for_issuer(self, issuer: str, network: Network) -> NamingService | None:
        """The service minting from ``issuer`` on ``network``, if any."""
        for service, known in self.services_for(network):
            if known == issuer:
                return service
        return None
