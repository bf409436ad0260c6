"""Core types, models, and utilities."""

from .exceptions import (
    DomainNotFoundError,
    FetchError,
    FetchFailedError,
    InvalidAddressError,
    InvalidDomainError,
    InvalidEncodingError,
    MissingFieldError,
    ParseError,
    ResolveError,
    TransportError,
    XrpNamesError,
)
from .models import DomainRecord, MetadataAttribute, NftHandle, NftMetadata
from .normalization import (
    SUPPORTED_SUFFIXES,
    decode_hex_uri,
    ipfs_path,
    is_classic_address,
    is_content_hash,
    is_valid_domain,
    normalize_address,
    normalize_domain,
    parse_domain,
)
from .types import NamingService, Network, SourceKind

__all__ = [
    # Types
    "NamingService",
    "Network",
    "SourceKind",
    # Models
    "DomainRecord",
    "MetadataAttribute",
    "NftHandle",
    "NftMetadata",
    # Normalization
    "SUPPORTED_SUFFIXES",
    "decode_hex_uri",
    "ipfs_path",
    "is_classic_address",
    "is_content_hash",
    "is_valid_domain",
    "normalize_address",
    "normalize_domain",
    "parse_domain",
    # Exceptions
    "DomainNotFoundError",
    "FetchError",
    "FetchFailedError",
    "InvalidAddressError",
    "InvalidDomainError",
    "InvalidEncodingError",
    "MissingFieldError",
    "ParseError",
    "ResolveError",
    "TransportError",
    "XrpNamesError",
]
