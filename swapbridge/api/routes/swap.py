"""Swap Routes — swap request, deposit finalization and swap listing.

Invariants:
    - Request bodies validated by Pydantic before reaching the handler
    - Every success response is {status: 200, success: true, result}
    - finalize records deposits only: payouts happen in the settlement job
    - The client account secret never leaves the service

Design Decisions:
    - get_account_or_404 shared by finalize and list (same not-found contract)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from swapbridge.core.errors import ResourceNotFoundError
from swapbridge.core.network_protocols import NetworkClients
from swapbridge.infrastructure.database import get_db
from swapbridge.infrastructure.network_registry import get_network_clients
from swapbridge.models.client_account import ClientAccount
from swapbridge.schemas.swap import (
    ClientAccountResponse, FinalizeSwap, SwapCreate, SwapResponse,
)
from swapbridge.services.account_allocator import AccountAllocator
from swapbridge.services.deposit_reconciler import DepositReconciler
from swapbridge.services.swap_queries import (
    get_client_account, get_swaps_for_client_account,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/swap", tags=["swap"])


def _ok(result) -> dict:
    return {"status": 200, "success": True, "result": result}


async def get_account_or_404(
    account_uuid: UUID, db: AsyncSession,
) -> ClientAccount:
    account = await get_client_account(db, account_uuid)
    if not account:
        raise ResourceNotFoundError("ClientAccount", str(account_uuid))
    return account


@router.post("")
async def swap_token(
    body: SwapCreate,
    db: AsyncSession = Depends(get_db),
    network_clients: NetworkClients = Depends(get_network_clients),
):
    """Issue (or re-issue) the deposit address for a payout address."""
    allocator = AccountAllocator(db, network_clients)
    account = await allocator.get_or_create_deposit_account(
        body.address, body.address_type,
    )
    return _ok(ClientAccountResponse.from_account(account))


@router.post("/finalize")
async def finalize_swap(
    body: FinalizeSwap,
    db: AsyncSession = Depends(get_db),
    network_clients: NetworkClients = Depends(get_network_clients),
):
    """Record every new deposit to the account's deposit address."""
    reconciler = DepositReconciler(db, network_clients)
    swaps = await reconciler.reconcile(body.uuid)
    account = await get_account_or_404(body.uuid, db)
    return _ok([SwapResponse.from_swap(swap, account) for swap in swaps])


@router.get("")
async def get_swaps(
    uuid: UUID = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """List every swap recorded for a client account."""
    account = await get_account_or_404(uuid, db)
    swaps = await get_swaps_for_client_account(db, account.uuid)
    return _ok([SwapResponse.from_swap(swap, account) for swap in swaps])
