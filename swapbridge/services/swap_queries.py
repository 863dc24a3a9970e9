"""Swap Queries — shared data access over client_accounts and swaps.

Invariants:
    - Inserts that race on a unique constraint use ON CONFLICT DO NOTHING ... RETURNING:
      callers learn which rows they actually created, never get an IntegrityError
    - Status transitions are guarded by the expected current status in the WHERE clause
    - Every write helper commits: each call is one atomic step of the pipeline

Design Decisions:
    - Dialect-specific insert (postgresql / sqlite): same ON CONFLICT semantics
      in production and in the in-memory test database
    - FOR UPDATE OF swaps SKIP LOCKED on the pending selection: concurrent runs
      for one direction on PostgreSQL never reserve the same rows (no-op on SQLite)
"""

import logging
import uuid as uuid_lib
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from swapbridge.core.domain_types import (
    Network, SwapDirection, SwapStatus, direction_for_user_network,
)
from swapbridge.core.network_protocols import IncomingTransaction, MintedAddress
from swapbridge.models.client_account import ClientAccount
from swapbridge.models.swap import Swap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InFlightBatch:
    """Summary of swaps reserved by one settlement run and not yet resolved."""
    batch_uuid: UUID
    direction: str
    swap_count: int
    total_amount: int
    reserved_at: datetime | None


def _insert_for(db: AsyncSession, model):
    if db.get_bind().dialect.name == "postgresql":
        return pg_insert(model)
    return sqlite_insert(model)


# ─── Client accounts ─────────────────────────────────────────────

async def get_client_account(
    db: AsyncSession, account_uuid: UUID,
) -> ClientAccount | None:
    result = await db.execute(
        select(ClientAccount).where(ClientAccount.uuid == account_uuid),
    )
    return result.scalar_one_or_none()


async def get_client_account_for_address(
    db: AsyncSession, user_address: str, user_address_type: Network,
) -> ClientAccount | None:
    result = await db.execute(
        select(ClientAccount)
        .where(ClientAccount.user_address == user_address)
        .where(ClientAccount.user_address_type == user_address_type.value),
    )
    return result.scalar_one_or_none()


async def insert_client_account(
    db: AsyncSession,
    user_address: str,
    user_address_type: Network,
    deposit_address_type: Network,
    minted: MintedAddress,
) -> ClientAccount | None:
    """Insert a new account. Returns None if the (address, type) pair already exists."""
    stmt = _insert_for(db, ClientAccount).values(
        uuid=uuid_lib.uuid4(),
        user_address=user_address,
        user_address_type=user_address_type.value,
        deposit_address=minted.address,
        deposit_address_type=deposit_address_type.value,
        secret=minted.secret,
        created=datetime.now(timezone.utc),
    )
    stmt = stmt.on_conflict_do_nothing(
        index_elements=["user_address", "user_address_type"],
    ).returning(ClientAccount)
    result = await db.scalars(stmt)
    account = result.first()
    await db.commit()
    return account


# ─── Swaps ───────────────────────────────────────────────────────

async def get_swaps_for_client_account(
    db: AsyncSession, account_uuid: UUID,
) -> list[Swap]:
    result = await db.execute(
        select(Swap)
        .where(Swap.client_account_uuid == account_uuid)
        .order_by(Swap.created),
    )
    return list(result.scalars().all())


async def insert_swaps(
    db: AsyncSession,
    transactions: list[IncomingTransaction],
    account: ClientAccount,
) -> list[Swap]:
    """Insert one pending swap per transaction; returns only the rows actually created."""
    if not transactions:
        return []
    direction = direction_for_user_network(Network(account.user_address_type))
    now = datetime.now(timezone.utc)
    stmt = _insert_for(db, Swap).values([
        {
            "uuid": uuid_lib.uuid4(),
            "client_account_uuid": account.uuid,
            "direction": direction.value,
            "amount": tx.amount,
            "deposit_transaction_hash": tx.hash,
            "transfer_transaction_hashes": [],
            "status": SwapStatus.PENDING.value,
            "created": now,
        }
        for tx in transactions
    ])
    stmt = stmt.on_conflict_do_nothing(
        index_elements=["deposit_transaction_hash"],
    ).returning(Swap)
    result = await db.scalars(stmt)
    swaps = list(result.all())
    await db.commit()
    return swaps


async def reserve_pending_swaps(
    db: AsyncSession, direction: SwapDirection, batch_uuid: UUID,
) -> list[tuple[Swap, str]]:
    """Move every pending swap of `direction` to in_flight under `batch_uuid`.

    Returns (swap, payout address) pairs. The reservation is committed before
    return, so a later run never re-selects these swaps.
    """
    result = await db.execute(
        select(Swap, ClientAccount.user_address)
        .join(ClientAccount, Swap.client_account_uuid == ClientAccount.uuid)
        .where(Swap.direction == direction.value)
        .where(Swap.status == SwapStatus.PENDING.value)
        .order_by(Swap.created)
        .with_for_update(of=Swap, skip_locked=True),
    )
    rows = [(swap, address) for swap, address in result.all()]
    now = datetime.now(timezone.utc)
    for swap, _ in rows:
        swap.status = SwapStatus.IN_FLIGHT.value
        swap.settlement_batch_uuid = batch_uuid
        swap.reserved_at = now
    await db.commit()
    return rows


async def release_swaps(db: AsyncSession, swap_uuids: list[UUID]) -> int:
    """Return in_flight swaps to pending, clearing their reservation."""
    if not swap_uuids:
        return 0
    result = await db.execute(
        update(Swap)
        .where(Swap.uuid.in_(swap_uuids))
        .where(Swap.status == SwapStatus.IN_FLIGHT.value)
        .values(
            status=SwapStatus.PENDING.value,
            settlement_batch_uuid=None,
            reserved_at=None,
        ),
    )
    await db.commit()
    return result.rowcount


async def mark_swaps_settled(
    db: AsyncSession, swap_uuids: list[UUID], transaction_hashes: list[str],
) -> int:
    """Record the payout hashes and settle in one statement."""
    result = await db.execute(
        update(Swap)
        .where(Swap.uuid.in_(swap_uuids))
        .where(Swap.status == SwapStatus.IN_FLIGHT.value)
        .values(
            status=SwapStatus.SETTLED.value,
            transfer_transaction_hashes=list(transaction_hashes),
        ),
    )
    await db.commit()
    if result.rowcount != len(swap_uuids):
        logger.warning(
            f"Settled {result.rowcount} of {len(swap_uuids)} reserved swaps",
            extra={"swap_count": len(swap_uuids)},
        )
    return result.rowcount


# ─── In-flight batches (operator recovery) ───────────────────────

async def list_in_flight_batches(db: AsyncSession) -> list[InFlightBatch]:
    result = await db.execute(
        select(
            Swap.settlement_batch_uuid,
            Swap.direction,
            func.count(Swap.uuid),
            func.sum(Swap.amount),
            func.min(Swap.reserved_at),
        )
        .where(Swap.status == SwapStatus.IN_FLIGHT.value)
        .group_by(Swap.settlement_batch_uuid, Swap.direction)
        .order_by(func.min(Swap.reserved_at)),
    )
    return [
        InFlightBatch(
            batch_uuid=batch_uuid, direction=direction, swap_count=count,
            total_amount=int(total or 0), reserved_at=reserved_at,
        )
        for batch_uuid, direction, count, total, reserved_at in result.all()
    ]


async def get_batch_swap_uuids(db: AsyncSession, batch_uuid: UUID) -> list[UUID]:
    result = await db.execute(
        select(Swap.uuid)
        .where(Swap.settlement_batch_uuid == batch_uuid)
        .where(Swap.status == SwapStatus.IN_FLIGHT.value),
    )
    return list(result.scalars().all())
