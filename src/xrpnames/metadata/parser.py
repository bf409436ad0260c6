"""NFT metadata parser: hex URI -> metadata document -> domain record."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any, ClassVar

from pydantic import ValidationError

from xrpnames.config import DEFAULT_IPFS_GATEWAYS
from xrpnames.core.exceptions import (
    FetchError,
    FetchFailedError,
    InvalidEncodingError,
    MissingFieldError,
)
from xrpnames.core.models import DomainRecord, NftHandle, NftMetadata
from xrpnames.core.normalization import (
    decode_hex_uri,
    ipfs_path,
    is_content_hash,
    is_valid_domain,
    normalize_domain,
)
from xrpnames.core.types import NamingService, SourceKind
from xrpnames.metadata.fetch import MetadataFetcher

logger = logging.getLogger(__name__)


def classify_uri(uri: str) -> SourceKind:
    """Decide where the metadata for a decoded URI lives."""
    if uri.startswith("ipfs://") or is_content_hash(uri):
        return SourceKind.IPFS
    if uri.startswith(("http://", "https://")):
        return SourceKind.HTTP
    return SourceKind.EMBEDDED


class MetadataParser:
    """
    Turns an NFT's URI field into a DomainRecord.

    Usage:
        async with MetadataFetcher() as fetcher:
            parser = MetadataParser(fetcher)
            record = await parser.parse(nft)

    The parser is stateless between calls: every IPFS lookup walks the full
    gateway list again, and nothing fetched is remembered.
    """

    # Top-level keys checked first and last for the domain
    NAME_KEY: ClassVar[str] = "name"
    DOMAIN_KEY: ClassVar[str] = "domain"
    # Attribute trait types that may carry the domain
    NAME_TRAITS: ClassVar[frozenset[str]] = frozenset({"domain", "name"})

    def __init__(
        self,
        fetcher: MetadataFetcher | None = None,
        gateways: Sequence[str] | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._fetcher = fetcher or MetadataFetcher(timeout=timeout)
        self.gateways: tuple[str, ...] = tuple(
            DEFAULT_IPFS_GATEWAYS if gateways is None else gateways
        )
        if not self.gateways:
            raise ValueError("At least one IPFS gateway is required")
        self.timeout = timeout
        self._loaders = {
            SourceKind.EMBEDDED: self._load_embedded,
            SourceKind.IPFS: self._load_ipfs,
            SourceKind.HTTP: self._load_http,
        }

    async def parse(
        self,
        nft: NftHandle,
        service: NamingService | None = None,
    ) -> DomainRecord:
        """
        Decode, fetch and interpret an NFT's metadata.

        Args:
            nft: NFT as reported by the ledger
            service: Naming service that issued it, if known

        Returns:
            Domain record for the NFT

        Raises:
            InvalidEncodingError: URI missing, not hex/UTF-8, or bad embedded JSON
            FetchFailedError: HTTP source or every IPFS gateway failed
            MissingFieldError: No valid domain name in the metadata
        """
        if not nft.uri:
            raise InvalidEncodingError("NFT has no URI", nft_id=nft.nft_id)

        try:
            uri = decode_hex_uri(nft.uri)
        except ValueError as e:
            raise InvalidEncodingError(
                f"URI is not hex-encoded UTF-8: {e}", nft_id=nft.nft_id
            ) from e

        source_kind = classify_uri(uri)
        logger.debug(f"NFT {nft.nft_id}: {source_kind} metadata at {uri[:120]}")

        document = await self._loaders[source_kind](uri, nft.nft_id)

        name = self.extract_domain_name(document)
        if name is None:
            raise MissingFieldError(
                "Metadata has no domain name field", nft_id=nft.nft_id
            )

        return DomainRecord(
            name=name,
            owner=nft.owner,
            issuer=nft.issuer,
            nft_id=nft.nft_id,
            source_kind=source_kind,
            service=service,
            metadata=self._to_metadata(document, nft.nft_id),
        )

    # Loaders, one per SourceKind
    def gateway_urls(self, uri: str) -> list[str]:
        """Candidate gateway URLs for an IPFS reference, in fallback order."""
        path = ipfs_path(uri)
        return [f"{gateway.rstrip('/')}/{path}" for gateway in self.gateways]

    async def _load_embedded(self, uri: str, nft_id: str) -> dict[str, Any]:
        try:
            document = json.loads(uri)
        except (ValueError, RecursionError) as e:
            raise InvalidEncodingError(
                f"URI is neither a link nor JSON: {e}", nft_id=nft_id
            ) from e
        if not isinstance(document, dict):
            raise InvalidEncodingError(
                "Embedded metadata is not a JSON object", nft_id=nft_id
            )
        return document

    async def _load_http(self, uri: str, nft_id: str) -> dict[str, Any]:
        try:
            return await self._fetch_document(uri)
        except FetchError as e:
            raise FetchFailedError(e.message, nft_id=nft_id) from e

    async def _load_ipfs(self, uri: str, nft_id: str) -> dict[str, Any]:
        last_error: FetchError | None = None

        for url in self.gateway_urls(uri):
            try:
                return await self._fetch_document(url)
            except FetchError as e:
                logger.warning(f"IPFS gateway failed for NFT {nft_id}: {e.message}")
                last_error = e

        raise FetchFailedError(
            f"All {len(self.gateways)} IPFS gateways failed"
            + (f" (last: {last_error.message})" if last_error else ""),
            nft_id=nft_id,
        )

    async def _fetch_document(self, url: str) -> dict[str, Any]:
        """Fetch a URL and require a JSON object body."""
        body = await self._fetcher.fetch(url, timeout=self.timeout)
        try:
            document = json.loads(body)
        except (ValueError, RecursionError) as e:
            raise FetchError(message=f"Body of {url} is not JSON", url=url) from e
        if not isinstance(document, dict):
            raise FetchError(message=f"Body of {url} is not a JSON object", url=url)
        return document

    # Extraction
    @classmethod
    def extract_domain_name(cls, document: dict[str, Any]) -> str | None:
        """
        Find the domain a metadata document describes.

        Checks the ``name`` key, then attributes whose trait type is in
        NAME_TRAITS, then the ``domain`` key. Only values that normalize to a
        valid domain count, so display names like "Domain #42" are skipped.
        """
        if name := cls._as_domain(document.get(cls.NAME_KEY)):
            return name

        attributes = document.get("attributes")
        if isinstance(attributes, list):
            for attribute in attributes:
                if not isinstance(attribute, dict):
                    continue
                trait = str(attribute.get("trait_type") or "").strip().lower()
                if trait in cls.NAME_TRAITS:
                    if name := cls._as_domain(attribute.get("value")):
                        return name

        return cls._as_domain(document.get(cls.DOMAIN_KEY))

    @staticmethod
    def _as_domain(value: Any) -> str | None:
        if not isinstance(value, str):
            return None
        normalized = normalize_domain(value)
        return normalized if is_valid_domain(normalized) else None

    @staticmethod
    def _to_metadata(document: dict[str, Any], nft_id: str) -> NftMetadata | None:
        try:
            return NftMetadata.model_validate(document)
        except ValidationError as e:
            logger.debug(f"NFT {nft_id}: metadata does not fit NftMetadata: {e}")
            return None

    async def close(self) -> None:
        """Close the underlying fetcher."""
        await self._fetcher.close()
