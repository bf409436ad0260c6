"""Custom exception hierarchy for xrpnames."""

from typing import Any


class XrpNamesError(Exception):
    """Base exception for all xrpnames errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Resolution errors (surfaced to callers)
# ============================================================================


class ResolveError(XrpNamesError):
    """A resolve or reverse lookup call failed."""

    pass


class InvalidDomainError(ResolveError):
    """Requested name is not a well-formed ``label.suffix`` domain."""

    def __init__(
        self,
        message: str,
        domain: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.domain = domain


class InvalidAddressError(ResolveError):
    """Requested owner is not a classic ledger address."""

    def __init__(
        self,
        message: str,
        address: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.address = address


class DomainNotFoundError(ResolveError):
    """No registered naming service holds an NFT for the domain."""

    def __init__(
        self,
        message: str,
        domain: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.domain = domain


class TransportError(ResolveError):
    """The ledger RPC layer failed."""

    def __init__(
        self,
        message: str,
        method: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.method = method
        self.status_code = status_code


# ============================================================================
# Metadata errors (confined to a single NFT)
# ============================================================================


class ParseError(XrpNamesError):
    """An NFT's metadata could not be turned into a domain record."""

    def __init__(
        self,
        message: str,
        nft_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.nft_id = nft_id


class InvalidEncodingError(ParseError):
    """URI is missing, not hex, not UTF-8, or embedded JSON is malformed."""

    pass


class FetchFailedError(ParseError):
    """Metadata could not be retrieved from any source."""

    pass


class MissingFieldError(ParseError):
    """Metadata carries no recognizable domain name."""

    pass


class FetchError(XrpNamesError):
    """A single metadata fetch attempt failed."""

    def __init__(
        self,
        message: str,
        url: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.url = url
        self.status_code = status_code
