"""Resolution layer: naming service registry and name resolver."""

from xrpnames.resolution.registry import (
    DEFAULT_ISSUERS,
    IssuerTable,
    NamingServiceRegistry,
)
from xrpnames.resolution.resolver import NameResolver

__all__ = [
    # Registry
    "DEFAULT_ISSUERS",
    "IssuerTable",
    "NamingServiceRegistry",
    # Resolver
    "NameResolver",
]
