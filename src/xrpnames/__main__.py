"""Command-line entry point for xrpnames.

Examples:
    ```bash
    python -m xrpnames resolve ckelley.xrp
    python -m xrpnames --json reverse rYhfynZDrde1uSvvQAYctApg6DnVE5HKm
    python -m xrpnames --network testnet --log-level DEBUG resolve alice.xrp
    ```
"""

import argparse
import asyncio
import json
import logging
import sys

from xrpnames.client import XrpNamesClient
from xrpnames.config import LOG_LEVELS, XrpNamesSettings
from xrpnames.core.exceptions import ResolveError, TransportError
from xrpnames.core.models import DomainRecord
from xrpnames.core.types import Network

EXIT_OK = 0
EXIT_NOT_RESOLVED = 1
EXIT_TRANSPORT = 2

logger = logging.getLogger("xrpnames.cli")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="xrpnames",
        description="Resolve XRP Ledger domain names and reverse-lookup addresses.",
    )
    parser.add_argument(
        "--network",
        choices=[network.value for network in Network],
        default=None,
        help="Ledger network (default: XRPNAMES_NETWORK or mainnet)",
    )
    parser.add_argument("--rpc-url", default=None, help="Custom JSON-RPC endpoint")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: XRPNAMES_LOG_LEVEL or INFO)",
    )
    parser.add_argument("--json", action="store_true", help="Print results as JSON")

    commands = parser.add_subparsers(dest="command", required=True)
    resolve = commands.add_parser("resolve", help="Resolve a domain to its owner")
    resolve.add_argument("name", help="Domain name, e.g. alice.xrp")
    reverse = commands.add_parser("reverse", help="List domains held by an address")
    reverse.add_argument("address", help="Classic address (r...)")

    return parser.parse_args(argv)


def format_record(record: DomainRecord) -> str:
    """Human-readable block for one record."""
    lines = [
        f"  Domain:  {record.name}",
        f"  Owner:   {record.owner}",
        f"  Issuer:  {record.issuer}",
        f"  NFT ID:  {record.nft_id}",
        f"  Source:  {record.source_kind}",
    ]
    if record.service is not None:
        lines.append(f"  Service: {record.service}")
    return "\n".join(lines)


async def run(args: argparse.Namespace, settings: XrpNamesSettings) -> int:
    """Execute the requested command and print its result."""
    network = Network(args.network) if args.network else None

    async with XrpNamesClient(settings, network=network, rpc_url=args.rpc_url) as client:
        try:
            if args.command == "resolve":
                records = [await client.resolve(args.name)]
            else:
                records = await client.reverse_lookup(args.address)
        except TransportError as e:
            logger.error(f"Ledger query failed: {e.message}")
            return EXIT_TRANSPORT
        except ResolveError as e:
            logger.error(e.message)
            return EXIT_NOT_RESOLVED

    if args.json:
        payload = [record.model_dump(mode="json", exclude={"metadata"}) for record in records]
        print(json.dumps(payload[0] if args.command == "resolve" else payload, indent=2))
    elif not records:
        print(f"No domains found for {args.address}")
    else:
        print("\n\n".join(format_record(record) for record in records))

    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = parse_args(argv)
    settings = XrpNamesSettings()

    logging.basicConfig(
        level=args.log_level or settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
