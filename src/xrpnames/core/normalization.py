"""Normalization and validation for domain names, addresses and NFT URIs."""

import re

# Top-level suffixes issued by the known naming services
SUPPORTED_SUFFIXES: frozenset[str] = frozenset({"xrp"})

_LABEL_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")

_HEX_PATTERN = re.compile(r"^(?:[0-9A-Fa-f]{2})*$")

# Classic addresses use the ledger's base58 alphabet (no 0, O, I, l)
CLASSIC_ADDRESS_PATTERN = re.compile(r"^r[1-9A-HJ-NP-Za-km-z]{24,34}$")

# CIDv0 (base58btc multihash) and CIDv1 (base32), optionally followed by a path
_CID_PATTERN = re.compile(
    r"^(?:Qm[1-9A-HJ-NP-Za-km-z]{44}|b[a-z2-7]{58,})(?:/.*)?$"
)


def normalize_domain(name: str) -> str:
    """
    Normalize a domain name for comparison.

    Strips surrounding whitespace, lowercases and drops a single trailing
    dot ("Alice.XRP." -> "alice.xrp"). Does not validate.
    """
    normalized = name.strip().lower()
    if normalized.endswith("."):
        normalized = normalized[:-1]
    return normalized


def is_valid_domain(name: str) -> bool:
    """Check that an already-normalized name has the ``label.suffix`` shape."""
    if name.count(".") != 1:
        return False
    label, suffix = name.split(".")
    return suffix in SUPPORTED_SUFFIXES and bool(_LABEL_PATTERN.match(label))


def parse_domain(name: str) -> str:
    """
    Normalize and validate a domain name.

    Args:
        name: Raw user input, e.g. " CKelley.xrp "

    Returns:
        The normalized domain

    Raises:
        ValueError: If the name is not a supported ``label.suffix`` domain
    """
    normalized = normalize_domain(name)
    if not normalized:
        raise ValueError("Domain name is empty")
    if normalized.count(".") != 1:
        raise ValueError(f"Domain must have the form label.suffix: {name!r}")
    label, suffix = normalized.split(".")
    if suffix not in SUPPORTED_SUFFIXES:
        supported = ", ".join(f".{s}" for s in sorted(SUPPORTED_SUFFIXES))
        raise ValueError(f"Unsupported suffix .{suffix} (expected {supported})")
    if not _LABEL_PATTERN.match(label):
        raise ValueError(f"Invalid characters in domain label: {label!r}")
    return normalized


def normalize_address(address: str) -> str:
    """Strip whitespace from a classic address."""
    return address.strip()


def is_classic_address(address: str) -> bool:
    """Check the shape of a classic ``r...`` address (no checksum test)."""
    return bool(CLASSIC_ADDRESS_PATTERN.match(address))


def decode_hex_uri(uri_hex: str) -> str:
    """
    Decode a hex-encoded NFT URI into text.

    Raises:
        ValueError: If the input is not valid hex or not valid UTF-8
    """
    value = uri_hex.strip()
    if not _HEX_PATTERN.match(value):
        raise ValueError(f"URI is not an even-length hex string: {uri_hex[:64]!r}")
    raw = bytes.fromhex(value)
    return raw.decode("utf-8")


def is_content_hash(value: str) -> bool:
    """Check whether a string is a bare IPFS CID (with an optional path)."""
    return bool(_CID_PATTERN.match(value))


def ipfs_path(uri: str) -> str:
    """
    Reduce an IPFS reference to the ``<cid>[/path]`` form gateways expect.

    Handles "ipfs://<cid>", "ipfs://ipfs/<cid>" and bare CIDs.
    """
    path = uri.strip()
    if path.startswith("ipfs://"):
        path = path[len("ipfs://"):]
    if path.startswith("ipfs/"):
        path = path[len("ipfs/"):]
    return path.lstrip("/")
