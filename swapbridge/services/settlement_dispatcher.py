"""Settlement Dispatcher — submits aggregated outputs as one batched payout.

Invariants:
    - Direction is validated before any network call (InvalidSwapTypeError)
    - loki_to_bloki pays on Binance Chain: full amount, fixed denom, no fee
    - bloki_to_loki pays on Loki: withdrawal_fee base units subtracted from every output
    - A batch containing a non-positive net amount is rejected before any network call
    - Every client failure or timeout surfaces as DispatchError (retryable)
    - Returns every transaction hash the destination client produced, in order

Design Decisions:
    - SettlementConfig passed in explicitly: fee/denom behavior testable without settings
    - split_payable lets the orchestrator withhold sub-fee outputs instead of
      failing the whole batch (withheld swaps accumulate with later deposits)
"""

import asyncio
import logging
from dataclasses import dataclass
from decimal import ROUND_DOWN

from swapbridge.config import Settings
from swapbridge.core.aggregate_payouts import AggregatedOutput
from swapbridge.core.amounts import coins_to_base_units
from swapbridge.core.domain_types import SwapDirection, user_network_for
from swapbridge.core.errors import (
    DispatchError, ErrorContext, FeeExceedsAmountError, InvalidSwapTypeError,
    NetworkClientError,
)
from swapbridge.core.network_protocols import NetworkClients, PayoutOutput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettlementConfig:
    """Fixed fee/denomination parameters for payouts."""
    withdrawal_fee: int
    bnb_denom: str
    dispatch_timeout_seconds: float = 120.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "SettlementConfig":
        return cls(
            withdrawal_fee=coins_to_base_units(settings.loki_withdrawal_fee),
            bnb_denom=settings.bnb_denom,
            dispatch_timeout_seconds=settings.dispatch_timeout_seconds,
        )


def parse_direction(direction: object) -> SwapDirection:
    """Coerce to SwapDirection or fail with InvalidSwapTypeError."""
    try:
        return SwapDirection(direction)
    except (ValueError, TypeError):
        raise InvalidSwapTypeError(direction)


class SettlementDispatcher:
    """Turns aggregated outputs into a multi-send on the destination network."""

    def __init__(self, network_clients: NetworkClients, config: SettlementConfig):
        self.network_clients = network_clients
        self.config = config

    def fee_for(self, direction: SwapDirection) -> int:
        if direction == SwapDirection.BLOKI_TO_LOKI:
            return self.config.withdrawal_fee
        return 0

    def build_payout_outputs(
        self, direction: object, outputs: list[AggregatedOutput],
    ) -> list[PayoutOutput]:
        """Apply the direction's fee and denom. Raises if any net amount is non-positive."""
        direction = parse_direction(direction)
        fee = self.fee_for(direction)
        denom = self.config.bnb_denom if direction == SwapDirection.LOKI_TO_BLOKI else None
        payouts = []
        for output in outputs:
            amount = _whole_units(output)
            if amount - fee <= 0:
                raise FeeExceedsAmountError(
                    output.address, amount, fee,
                    ErrorContext(swap_direction=direction.value),
                )
            payouts.append(PayoutOutput(
                address=output.address, amount=amount - fee, denom=denom,
            ))
        return payouts

    def split_payable(
        self, direction: object, outputs: list[AggregatedOutput],
    ) -> tuple[list[AggregatedOutput], list[AggregatedOutput]]:
        """Partition outputs into (payable, withheld) by the fee floor."""
        fee = self.fee_for(parse_direction(direction))
        payable, withheld = [], []
        for output in outputs:
            (payable if _whole_units(output) - fee > 0 else withheld).append(output)
        return payable, withheld

    async def dispatch(
        self, direction: object, outputs: list[AggregatedOutput],
    ) -> list[str]:
        direction = parse_direction(direction)
        payouts = self.build_payout_outputs(direction, outputs)
        network = user_network_for(direction)
        client = self.network_clients[network]
        context = ErrorContext(swap_direction=direction.value)

        logger.info(
            f"Dispatching {len(payouts)} output(s) on {network.value}",
            extra={"swap_direction": direction.value, "network": network.value},
        )
        try:
            hashes = await asyncio.wait_for(
                client.multi_send(payouts),
                timeout=self.config.dispatch_timeout_seconds,
            )
        except asyncio.TimeoutError:
            raise DispatchError(
                f"multi-send on {network.value} timed out after "
                f"{self.config.dispatch_timeout_seconds}s",
                context,
            )
        except NetworkClientError as e:
            raise DispatchError(e.message, context)
        return list(hashes)


def _whole_units(output: AggregatedOutput) -> int:
    return int(output.total_amount.to_integral_value(rounding=ROUND_DOWN))
