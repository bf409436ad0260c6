"""xrpnames - Resolve XRP Ledger domain names (name.xrp) to addresses and back."""

from xrpnames.client import XrpNamesClient, lookup_address, resolve_domain
from xrpnames.config import XrpNamesSettings
from xrpnames.core.exceptions import (
    DomainNotFoundError,
    InvalidAddressError,
    InvalidDomainError,
    ParseError,
    ResolveError,
    TransportError,
    XrpNamesError,
)
from xrpnames.core.models import DomainRecord, NftHandle, NftMetadata
from xrpnames.core.types import NamingService, Network, SourceKind
from xrpnames.resolution.registry import NamingServiceRegistry
from xrpnames.resolution.resolver import NameResolver

__version__ = "0.1.0"
__all__ = [
    # Client
    "XrpNamesClient",
    "XrpNamesSettings",
    "lookup_address",
    "resolve_domain",
    # Resolution
    "NameResolver",
    "NamingServiceRegistry",
    # Types
    "NamingService",
    "Network",
    "SourceKind",
    # Models
    "DomainRecord",
    "NftHandle",
    "NftMetadata",
    # Errors
    "DomainNotFoundError",
    "InvalidAddressError",
    "InvalidDomainError",
    "ParseError",
    "ResolveError",
    "TransportError",
    "XrpNamesError",
    # Version
    "__version__",
]
