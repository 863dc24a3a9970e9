"""Payout Aggregation — collapses pending swaps into one output per recipient.

Invariants:
    - One AggregatedOutput per distinct destination address, in first-seen order
    - total_amount is the parse_amount sum of every contributing swap
    - swap_uuids lists every contributing swap (write-back targets)
    - Pure function: no IO, no mutation of inputs

Design Decisions:
    - Aggregation by destination address minimizes destination-network transaction count
    - PendingPayout decouples aggregation from the ORM (tests pass plain values)
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable
from uuid import UUID

from swapbridge.core.amounts import parse_amount


@dataclass(frozen=True)
class PendingPayout:
    """One pending swap, resolved to the address it pays out to."""
    address: str
    amount: object
    swap_uuid: UUID | None = None


@dataclass
class AggregatedOutput:
    """Ephemeral per-recipient payout, never persisted."""
    address: str
    total_amount: Decimal
    swap_uuids: list[UUID] = field(default_factory=list)


def aggregate_payouts(payouts: Iterable[PendingPayout]) -> list[AggregatedOutput]:
    """Group payouts by address and sum their amounts."""
    outputs: dict[str, AggregatedOutput] = {}
    for payout in payouts:
        output = outputs.get(payout.address)
        if output is None:
            output = AggregatedOutput(address=payout.address, total_amount=Decimal(0))
            outputs[payout.address] = output
        output.total_amount += parse_amount(payout.amount)
        if payout.swap_uuid is not None:
            output.swap_uuids.append(payout.swap_uuid)
    return list(outputs.values())
