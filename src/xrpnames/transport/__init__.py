"""Ledger RPC transport layer."""

from xrpnames.transport.base import (
    AsyncRateLimiter,
    LedgerTransport,
    RateLimitConfig,
    TransportConfig,
)
from xrpnames.transport.xrpl import XrplRpcTransport

__all__ = [
    "AsyncRateLimiter",
    "LedgerTransport",
    "RateLimitConfig",
    "TransportConfig",
    "XrplRpcTransport",
]
