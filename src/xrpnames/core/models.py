"""Domain models for ledger NFTs and resolved domain records."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .normalization import parse_domain
from .types import NamingService, SourceKind

_NFT_ID_PATTERN = re.compile(r"^[0-9A-F]{64}$")


def _normalize_nft_id(value: Any) -> str:
    nft_id = str(value).strip().upper()
    if not _NFT_ID_PATTERN.match(nft_id):
        raise ValueError(f"NFT id must be 64 hex characters: {value!r}")
    return nft_id


class NftHandle(BaseModel):
    """Raw NFT record as reported by the ledger."""

    model_config = ConfigDict(frozen=True)

    nft_id: str = Field(..., description="256-bit NFTokenID (64 hex characters)")
    owner: str = Field(..., description="Current holder address")
    issuer: str = Field(..., description="Issuing account address")
    uri: str | None = Field(default=None, description="Hex-encoded URI field")

    @field_validator("nft_id", mode="before")
    @classmethod
    def normalize_nft_id(cls, v: Any) -> str:
        return _normalize_nft_id(v)


class MetadataAttribute(BaseModel):
    """A single ``trait_type``/``value`` pair from NFT metadata."""

    model_config = ConfigDict(frozen=True)

    trait_type: str | None = Field(default=None, description="Attribute name")
    value: Any = Field(default=None, description="Attribute value")


class NftMetadata(BaseModel):
    """
    Decoded NFT metadata document.

    Only the common fields are typed; any other keys are preserved as extras.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    name: str | None = Field(default=None, description="Display name")
    description: str | None = Field(default=None, description="Free-form description")
    image: str | None = Field(default=None, description="Image URI")
    attributes: list[MetadataAttribute] = Field(
        default_factory=list, description="Trait attributes"
    )


class DomainRecord(BaseModel):
    """A domain name bound to the NFT that represents it."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Normalized domain, e.g. 'alice.xrp'")
    owner: str = Field(..., description="Address currently holding the NFT")
    issuer: str = Field(..., description="Address that minted the NFT")
    nft_id: str = Field(..., description="256-bit NFTokenID (64 hex characters)")
    source_kind: SourceKind = Field(..., description="Where the metadata came from")
    service: NamingService | None = Field(
        default=None, description="Naming service whose issuer minted the NFT"
    )
    metadata: NftMetadata | None = Field(
        default=None, description="Decoded metadata document"
    )

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v: Any) -> str:
        """Normalize and require exactly one recognized suffix."""
        return parse_domain(str(v))

    @field_validator("nft_id", mode="before")
    @classmethod
    def normalize_nft_id(cls, v: Any) -> str:
        return _normalize_nft_id(v)

    @property
    def label(self) -> str:
        """The part of the name before the suffix."""
        return self.name.split(".", 1)[0]

    @property
    def suffix(self) -> str:
        """The top-level suffix, without the dot."""
        return self.name.split(".", 1)[1]
