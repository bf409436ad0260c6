"""Metadata retrieval and parsing for domain NFTs."""

from xrpnames.metadata.fetch import MetadataFetcher
from xrpnames.metadata.parser import MetadataParser, classify_uri

__all__ = [
    "MetadataFetcher",
    "MetadataParser",
    "classify_uri",
]
