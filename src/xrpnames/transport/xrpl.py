"""JSON-RPC transport for rippled and Clio servers."""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, ClassVar

from pydantic import ValidationError

from xrpnames.core.exceptions import TransportError
from xrpnames.core.models import NftHandle
from xrpnames.core.types import Network
from xrpnames.transport.base import LedgerTransport, TransportConfig

logger = logging.getLogger(__name__)


class XrplRpcTransport(LedgerTransport):
    """
    Ledger transport speaking the rippled JSON-RPC protocol.

    - ``account_nfts`` (any rippled server) lists NFTs held by an account.
    - ``nfts_by_issuer`` (Clio only) lists NFTs minted by an issuer together
      with their current owner.

    Both follow the ``marker`` cursor until the server stops returning one.

    API Documentation: https://xrpl.org/docs/references/http-websocket-apis
    """

    ACCOUNT_NFTS_LIMIT: ClassVar[int] = 400
    NFTS_BY_ISSUER_LIMIT: ClassVar[int] = 100

    def __init__(
        self,
        network: Network = Network.MAINNET,
        config: TransportConfig | None = None,
    ) -> None:
        super().__init__(network, config)

    async def enumerate_nfts_by_issuer(
        self,
        issuer: str,
        network: Network | None = None,
    ) -> list[NftHandle]:
        """List NFTs minted by ``issuer`` via Clio, skipping burned tokens."""
        url = self._clio_url_for(network)
        nfts: list[NftHandle] = []

        async for page in self._paginate(
            url,
            "nfts_by_issuer",
            {"issuer": issuer, "limit": self.NFTS_BY_ISSUER_LIMIT},
        ):
            for entry in page.get("nfts", []):
                if entry.get("is_burned"):
                    continue
                nfts.append(
                    self._to_handle(
                        "nfts_by_issuer",
                        nft_id=entry.get("nft_id"),
                        owner=entry.get("owner"),
                        issuer=entry.get("issuer") or issuer,
                        uri=entry.get("uri"),
                    )
                )

        logger.debug(f"nfts_by_issuer {issuer}: {len(nfts)} NFTs")
        return nfts

    async def enumerate_nfts_by_owner(
        self,
        owner: str,
        network: Network | None = None,
    ) -> list[NftHandle]:
        """List NFTs held by ``owner``; an unfunded account holds none."""
        url = self._rpc_url_for(network)
        nfts: list[NftHandle] = []

        try:
            async for page in self._paginate(
                url,
                "account_nfts",
                {"account": owner, "limit": self.ACCOUNT_NFTS_LIMIT},
            ):
                for entry in page.get("account_nfts", []):
                    nfts.append(
                        self._to_handle(
                            "account_nfts",
                            nft_id=entry.get("NFTokenID"),
                            owner=owner,
                            issuer=entry.get("Issuer"),
                            uri=entry.get("URI"),
                        )
                    )
        except TransportError as e:
            if e.details.get("error") == "actNotFound":
                logger.debug(f"account_nfts {owner}: account not found")
                return []
            raise

        logger.debug(f"account_nfts {owner}: {len(nfts)} NFTs")
        return nfts

    def _rpc_url_for(self, network: Network | None) -> str:
        if network is None or network == self.network:
            return self.rpc_url
        return network.rpc_url

    def _clio_url_for(self, network: Network | None) -> str:
        if network is None or network == self.network:
            return self.clio_url
        return network.clio_url

    async def _paginate(
        self,
        url: str,
        method: str,
        params: dict[str, Any],
    ) -> AsyncIterator[dict[str, Any]]:
        """Yield each result page of a marker-paginated RPC method."""
        marker: Any = None
        seen_markers: list[Any] = []

        while True:
            page_params = {**params, "ledger_index": "validated"}
            if marker is not None:
                page_params["marker"] = marker

            result = await self._call(url, method, page_params)
            yield result

            marker = result.get("marker")
            if marker is None:
                break
            if marker in seen_markers:
                raise TransportError(
                    message=f"{method} returned a repeated marker",
                    method=method,
                )
            seen_markers.append(marker)

    async def _call(self, url: str, method: str, params: dict[str, Any]) -> dict[str, Any]:
        """Issue one JSON-RPC request and return its ``result`` object."""
        logger.debug(f"RPC {method} -> {url}")
        response = await self._make_request(
            "POST",
            url,
            json={"method": method, "params": [params]},
        )

        if not response.is_success:
            raise TransportError(
                message=f"{method} failed with HTTP {response.status_code}",
                method=method,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise TransportError(
                message=f"{method} returned a non-JSON body",
                method=method,
                status_code=response.status_code,
            ) from e

        result = payload.get("result") if isinstance(payload, dict) else None
        if not isinstance(result, dict):
            raise TransportError(
                message=f"{method} response has no result object",
                method=method,
                status_code=response.status_code,
            )

        if result.get("status") == "error" or "error" in result:
            error = result.get("error", "unknown")
            raise TransportError(
                message=f"{method} error: {result.get('error_message') or error}",
                method=method,
                status_code=response.status_code,
                details={"error": error},
            )

        return result

    @staticmethod
    def _to_handle(method: str, **fields: Any) -> NftHandle:
        try:
            return NftHandle(**fields)
        except ValidationError as e:
            raise TransportError(
                message=f"{method} returned a malformed NFT entry: {e}",
                method=method,
            ) from e
