"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from xrpnames.core.types import Network

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_IPFS_GATEWAYS: list[str] = [
    "https://ipfs.io/ipfs/",
    "https://gateway.pinata.cloud/ipfs/",
    "https://cloudflare-ipfs.com/ipfs/",
]


class XrpNamesSettings(BaseSettings):
    """Library configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="XRPNAMES_",
    )

    # Ledger
    network: Network = Field(
        default=Network.MAINNET,
        description="Ledger network to resolve against",
    )
    rpc_url: str | None = Field(
        default=None,
        description="Custom JSON-RPC endpoint (defaults to the network's public server)",
    )
    clio_url: str | None = Field(
        default=None,
        description="Custom Clio endpoint for nfts_by_issuer (defaults per network)",
    )
    rpc_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout in seconds for a single RPC request",
    )
    rpc_requests_per_second: float = Field(
        default=5.0,
        gt=0,
        description="Client-side rate limit for RPC requests",
    )

    # Metadata
    ipfs_gateways: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IPFS_GATEWAYS),
        min_length=1,
        description="IPFS gateway base URLs, tried in order",
    )
    metadata_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Timeout in seconds for one metadata fetch attempt",
    )
    metadata_max_bytes: int = Field(
        default=1024 * 1024,
        ge=1,
        description="Largest metadata body accepted from an HTTP or IPFS source",
    )
    max_concurrent_fetches: int = Field(
        default=8,
        ge=1,
        description="Metadata fetches in flight during a reverse lookup",
    )

    # Cache
    cache_ttl: float = Field(
        default=300.0,
        gt=0,
        description="Seconds a resolved entry stays fresh",
    )
    cache_capacity: int = Field(
        default=1000,
        ge=1,
        description="Maximum number of cached entries (names and owners combined)",
    )

    # App settings
    user_agent: str = Field(
        default="xrpnames/0.1",
        description="User-Agent header sent with every request",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: object) -> str:
        level = str(v).strip().upper()
        if level not in LOG_LEVELS:
            expected = ", ".join(LOG_LEVELS)
            raise ValueError(f"Unknown log level {v!r} (expected one of {expected})")
        return level

    @property
    def resolved_rpc_url(self) -> str:
        """The RPC endpoint actually used."""
        return self.rpc_url or self.network.rpc_url

    @property
    def resolved_clio_url(self) -> str:
        """The Clio endpoint actually used; a custom RPC URL serves both."""
        return self.clio_url or self.rpc_url or self.network.clio_url


@lru_cache
def get_settings() -> XrpNamesSettings:
    """Get cached settings instance."""
    return XrpNamesSettings()
