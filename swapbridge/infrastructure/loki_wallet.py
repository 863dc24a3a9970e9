"""Loki Wallet Client — NetworkClient over loki-wallet-rpc JSON-RPC.

Invariants:
    - Deposit addresses are subaddresses of one bridge wallet account;
      the subaddress index is the account's secret (keys stay in the wallet)
    - Only confirmed incoming transfers are reported ("in", never "pool")
    - multi_send uses transfer_split: one batch may yield several tx hashes
    - Amounts are atomic units (10^-9 LOKI) — identical to bridge base units

Design Decisions:
    - JSON-RPC errors mapped to NetworkClientError(error_type="rpc_error")
    - transfer_split is never retried by the transport (non-idempotent)
"""

import logging

import httpx

from swapbridge.core.domain_types import Network
from swapbridge.core.errors import NetworkClientError
from swapbridge.core.network_protocols import (
    IncomingTransaction, MintedAddress, PayoutOutput,
)
from swapbridge.infrastructure.resilient_http import ResilientHttpClient

logger = logging.getLogger(__name__)


class LokiWalletClient:
    """Loki deposit addresses, incoming transfers and multi-destination sends."""

    network = Network.LOKI

    def __init__(
        self,
        rpc_url: str,
        account_index: int = 0,
        priority: int = 0,
        username: str | None = None,
        password: str | None = None,
        **transport_options,
    ):
        auth = httpx.DigestAuth(username, password) if username else None
        self._http = ResilientHttpClient(
            Network.LOKI.value, auth=auth, **transport_options,
        )
        self._rpc_url = rpc_url
        self.account_index = account_index
        self.priority = priority

    async def _call(self, method: str, params: dict, *, idempotent: bool = True) -> dict:
        payload = {"jsonrpc": "2.0", "id": "0", "method": method, "params": params}
        body = await self._http.request_json(
            "POST", self._rpc_url, json=payload, idempotent=idempotent,
        )
        error = body.get("error")
        if error:
            raise NetworkClientError(
                f"{method}: {error.get('message', error)}", self.network.value, "rpc_error",
            )
        return body.get("result") or {}

    async def mint_address(self) -> MintedAddress:
        """Create a new subaddress in the bridge account."""
        result = await self._call(
            "create_address", {"account_index": self.account_index},
            idempotent=False,
        )
        logger.info(
            f"Created loki subaddress {result['address_index']}",
            extra={"network": self.network.value},
        )
        return MintedAddress(
            address=result["address"], secret=str(result["address_index"]),
        )

    async def list_incoming_transactions(
        self, address: str,
    ) -> list[IncomingTransaction]:
        """Confirmed transfers received by one subaddress."""
        index = await self._call("get_address_index", {"address": address})
        major = index["index"]["major"]
        minor = index["index"]["minor"]
        result = await self._call("get_transfers", {
            "in": True,
            "account_index": major,
            "subaddr_indices": [minor],
        })
        return [
            IncomingTransaction(hash=tx["txid"], amount=int(tx["amount"]))
            for tx in result.get("in", [])
            if tx.get("address", address) == address
        ]

    async def multi_send(self, outputs: list[PayoutOutput]) -> list[str]:
        """Send every output from the bridge account; returns all resulting tx hashes."""
        destinations = [
            {"address": output.address, "amount": output.amount}
            for output in outputs
        ]
        result = await self._call("transfer_split", {
            "destinations": destinations,
            "account_index": self.account_index,
            "priority": self.priority,
            "get_tx_hex": False,
        }, idempotent=False)
        return list(result.get("tx_hash_list", []))

    async def aclose(self) -> None:
        await self._http.aclose()
