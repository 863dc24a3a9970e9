"""Batch Settlement — settles every pending swap of one direction in a single payout run.

Invariants:
    - At most one run per direction at a time in this process (_direction_locks);
      across processes the pending selection is row-locked (SKIP LOCKED)
    - Swaps are reserved (in_flight, batch uuid) and committed BEFORE dispatch:
      a crash after dispatch leaves an in_flight batch, never a re-payable pending swap
    - Dispatch success: every dispatched swap gets the full hash list + settled in one commit
    - DispatchError: reserved swaps return to pending unchanged, error propagates,
      the next run retries
    - InvalidSwapTypeError is raised before any selection and never retried
    - Sub-fee outputs are withheld: their swaps return to pending

Design Decisions:
    - Reservation-before-dispatch over post-dispatch write-back only: trades an
      operator-resolved in_flight batch for the impossibility of a silent double payout
    - Skipping (not waiting) when a run for the direction is active: the scheduler
      ticks again, and a queued run would only find an empty pending set
    - Operator helpers release/settle whole batches after checking the destination chain
"""

import asyncio
import logging
from dataclasses import dataclass, field
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from swapbridge.core.aggregate_payouts import PendingPayout, aggregate_payouts
from swapbridge.core.domain_types import SwapDirection
from swapbridge.core.errors import DispatchError, ResourceNotFoundError
from swapbridge.services.settlement_dispatcher import (
    SettlementDispatcher, parse_direction,
)
from swapbridge.services.swap_queries import (
    InFlightBatch,
    get_batch_swap_uuids,
    list_in_flight_batches,
    mark_swaps_settled,
    release_swaps,
    reserve_pending_swaps,
)

logger = logging.getLogger(__name__)

# ADR: process-local mutual exclusion per direction.
# Multi-process deployments rely on the row locks taken by reserve_pending_swaps.
_direction_locks: dict[SwapDirection, asyncio.Lock] = {
    direction: asyncio.Lock() for direction in SwapDirection
}


@dataclass
class SettlementReport:
    """Outcome of one settlement run."""
    direction: SwapDirection
    batch_uuid: UUID | None = None
    settled_swaps: int = 0
    withheld_swaps: int = 0
    transaction_hashes: list[str] = field(default_factory=list)
    skipped: bool = False


class BatchSettlementOrchestrator:
    """Select -> reserve -> aggregate -> dispatch -> write back, for one direction."""

    def __init__(self, db: AsyncSession, dispatcher: SettlementDispatcher):
        self.db = db
        self.dispatcher = dispatcher

    async def process_all_swaps_of_type(self, direction: object) -> SettlementReport:
        direction = parse_direction(direction)
        lock = _direction_locks[direction]
        if lock.locked():
            logger.warning(
                "Settlement already running, skipping",
                extra={"swap_direction": direction.value},
            )
            return SettlementReport(direction=direction, skipped=True)
        async with lock:
            return await self._settle(direction)

    async def _settle(self, direction: SwapDirection) -> SettlementReport:
        batch_uuid = uuid4()
        log_extra = {"swap_direction": direction.value, "batch_uuid": batch_uuid}
        report = SettlementReport(direction=direction, batch_uuid=batch_uuid)

        reserved = await reserve_pending_swaps(self.db, direction, batch_uuid)
        if not reserved:
            logger.info("No pending swaps", extra=log_extra)
            return report

        outputs = aggregate_payouts(
            PendingPayout(address=address, amount=swap.amount, swap_uuid=swap.uuid)
            for swap, address in reserved
        )
        payable, withheld = self.dispatcher.split_payable(direction, outputs)

        withheld_uuids = [uuid for output in withheld for uuid in output.swap_uuids]
        if withheld_uuids:
            await release_swaps(self.db, withheld_uuids)
            report.withheld_swaps = len(withheld_uuids)
            logger.warning(
                f"Withheld {len(withheld)} output(s) below the withdrawal fee",
                extra={**log_extra, "swap_count": len(withheld_uuids)},
            )
        if not payable:
            return report

        payable_uuids = [uuid for output in payable for uuid in output.swap_uuids]
        try:
            hashes = await self.dispatcher.dispatch(direction, payable)
        except DispatchError as e:
            await release_swaps(self.db, payable_uuids)
            logger.error(
                f"Dispatch failed, {len(payable_uuids)} swap(s) back to pending: {e.message}",
                extra={**log_extra, "error_code": e.code},
            )
            raise

        if not hashes:
            logger.critical(
                "Destination returned no transaction hashes; batch left in_flight "
                "for manual verification",
                extra={**log_extra, "swap_count": len(payable_uuids)},
            )
            return report

        try:
            await mark_swaps_settled(self.db, payable_uuids, hashes)
        except Exception:
            logger.critical(
                f"Batch paid with {','.join(hashes)} but write-back failed; "
                "swaps left in_flight",
                extra={**log_extra, "swap_count": len(payable_uuids)},
                exc_info=True,
            )
            raise

        report.settled_swaps = len(payable_uuids)
        report.transaction_hashes = hashes
        logger.info(
            f"Settled {len(payable_uuids)} swap(s) in {len(hashes)} transaction(s)",
            extra={**log_extra, "swap_count": len(payable_uuids)},
        )
        return report

    # ─── Operator recovery ──────────────────────────────────────

    async def list_in_flight_batches(self) -> list[InFlightBatch]:
        return await list_in_flight_batches(self.db)

    async def release_batch(self, batch_uuid: UUID) -> int:
        """Return an in_flight batch to pending. Only for batches verified unpaid."""
        swap_uuids = await self._batch_swaps(batch_uuid)
        released = await release_swaps(self.db, swap_uuids)
        logger.warning(
            f"Released {released} swap(s) to pending",
            extra={"batch_uuid": batch_uuid, "swap_count": released},
        )
        return released

    async def settle_batch(self, batch_uuid: UUID, transaction_hashes: list[str]) -> int:
        """Mark an in_flight batch settled with hashes found on the destination chain."""
        if not transaction_hashes:
            raise ValueError("settle_batch requires at least one transaction hash")
        swap_uuids = await self._batch_swaps(batch_uuid)
        settled = await mark_swaps_settled(self.db, swap_uuids, transaction_hashes)
        logger.info(
            f"Manually settled {settled} swap(s)",
            extra={"batch_uuid": batch_uuid, "swap_count": settled},
        )
        return settled

    async def _batch_swaps(self, batch_uuid: UUID) -> list[UUID]:
        swap_uuids = await get_batch_swap_uuids(self.db, batch_uuid)
        if not swap_uuids:
            raise ResourceNotFoundError("SettlementBatch", str(batch_uuid))
        return swap_uuids
