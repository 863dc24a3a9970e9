"""Binance Chain Client — NetworkClient for the B-LOKI BEP2 token.

Invariants:
    - Reads go to the public explorer API (GET /api/v1/transactions), retried on transient failure
    - Key generation and signing happen in the signer gateway; private keys
      returned by POST /accounts are stored as the account secret and never logged
    - Only successful (code == 0) RECEIVE transfers of bnb_denom are reported
    - Wire amounts are decimal strings with `decimals` places; the bridge
      converts to/from base units here and nowhere else
    - multi_send posts every output to the signer in one request; the signer
      may split it into several transactions and returns every hash

Design Decisions:
    - Separate signer gateway: BEP2 keys and signing stay out of the API process
    - Sends truncate to token precision (never round a payout up)
"""

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_DOWN

from swapbridge.core.amounts import base_units_to_coins, coins_to_base_units
from swapbridge.core.domain_types import Network
from swapbridge.core.errors import NetworkClientError
from swapbridge.core.network_protocols import (
    IncomingTransaction, MintedAddress, PayoutOutput,
)
from swapbridge.infrastructure.resilient_http import ResilientHttpClient

logger = logging.getLogger(__name__)


class BinanceChainClient:
    """B-LOKI deposit addresses, incoming transfers and multi-output sends."""

    network = Network.BNB

    def __init__(
        self,
        api_url: str,
        signer_url: str,
        signer_token: str,
        denom: str,
        decimals: int = 8,
        lookback_days: int = 90,
        api_transport=None,
        signer_transport=None,
        **transport_options,
    ):
        self._api = ResilientHttpClient(
            Network.BNB.value, base_url=api_url,
            transport=api_transport, **transport_options,
        )
        self._signer = ResilientHttpClient(
            Network.BNB.value, base_url=signer_url,
            headers={"Authorization": f"Bearer {signer_token}"},
            transport=signer_transport, **transport_options,
        )
        self.denom = denom
        self.decimals = decimals
        self.lookback_days = lookback_days

    async def mint_address(self) -> MintedAddress:
        """Ask the signer gateway for a fresh key pair."""
        body = await self._signer.request_json("POST", "/accounts", idempotent=False)
        try:
            return MintedAddress(address=body["address"], secret=body["private_key"])
        except KeyError as e:
            raise NetworkClientError(
                f"signer response missing {e}", self.network.value, "decode_error",
            )

    async def list_incoming_transactions(
        self, address: str,
    ) -> list[IncomingTransaction]:
        """Successful B-LOKI transfers into `address` within the lookback window."""
        start = datetime.now(timezone.utc) - timedelta(days=self.lookback_days)
        body = await self._api.request_json(
            "GET", "/api/v1/transactions",
            params={
                "address": address,
                "side": "RECEIVE",
                "txType": "TRANSFER",
                "txAsset": self.denom,
                "startTime": int(start.timestamp() * 1000),
                "limit": 1000,
            },
            idempotent=True,
        )
        return [
            IncomingTransaction(
                hash=tx["txHash"], amount=coins_to_base_units(tx["value"]),
            )
            for tx in body.get("tx") or []
            if tx.get("code", 0) == 0
            and tx.get("toAddr") == address
            and tx.get("txAsset") == self.denom
        ]

    async def multi_send(self, outputs: list[PayoutOutput]) -> list[str]:
        """Submit one multi-output transfer through the signer gateway."""
        payload = {
            "outputs": [
                {
                    "to": output.address,
                    "coins": [{
                        "denom": output.denom or self.denom,
                        "amount": self._to_wire_amount(output.amount),
                    }],
                }
                for output in outputs
            ],
        }
        body = await self._signer.request_json(
            "POST", "/multi-send", json=payload, idempotent=False,
        )
        return list(body.get("hashes", []))

    def _to_wire_amount(self, amount: int) -> str:
        quantum = Decimal(1).scaleb(-self.decimals)
        return str(base_units_to_coins(amount).quantize(quantum, rounding=ROUND_DOWN))

    async def aclose(self) -> None:
        await self._api.aclose()
        await self._signer.aclose()
