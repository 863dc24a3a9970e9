"""Deposit Reconciler — records newly confirmed deposits as pending swaps.

Invariants:
    - The dedup key is the source transaction hash, never the amount
    - A deposit is recorded at most once: the account-level diff filters known
      hashes, the global unique constraint absorbs concurrent finalize calls
    - Returns only swaps created by this call
    - Never triggers a payout: settlement runs out of band in batch_settlement

Design Decisions:
    - Incoming transactions and existing swaps fetched concurrently (asyncio.gather)
    - NoDeposit / NoNewDeposit are client-facing outcomes, not system faults
"""

import asyncio
import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from swapbridge.core.domain_types import Network
from swapbridge.core.errors import (
    ErrorContext, NoDepositError, NoNewDepositError, ResourceNotFoundError,
)
from swapbridge.core.network_protocols import NetworkClients
from swapbridge.models.swap import Swap
from swapbridge.services.swap_queries import (
    get_client_account, get_swaps_for_client_account, insert_swaps,
)

logger = logging.getLogger(__name__)


class DepositReconciler:
    """Finalize step: diff incoming transactions against recorded swaps."""

    def __init__(self, db: AsyncSession, network_clients: NetworkClients):
        self.db = db
        self.network_clients = network_clients

    async def reconcile(self, client_account_uuid: UUID) -> list[Swap]:
        context = ErrorContext(client_account_uuid=str(client_account_uuid))
        account = await get_client_account(self.db, client_account_uuid)
        if not account:
            raise ResourceNotFoundError(
                "ClientAccount", str(client_account_uuid), context,
            )

        client = self.network_clients[Network(account.deposit_address_type)]
        transactions, swaps = await asyncio.gather(
            client.list_incoming_transactions(account.deposit_address),
            get_swaps_for_client_account(self.db, account.uuid),
        )
        if not transactions:
            raise NoDepositError(context)

        known_hashes = {swap.deposit_transaction_hash for swap in swaps}
        new_transactions = []
        for tx in transactions:
            if tx.hash not in known_hashes:
                known_hashes.add(tx.hash)
                new_transactions.append(tx)
        if not new_transactions:
            raise NoNewDepositError(context)

        created = await insert_swaps(self.db, new_transactions, account)
        if not created:
            # Every hash was inserted by a concurrent finalize call
            raise NoNewDepositError(context)
        logger.info(
            f"Recorded {len(created)} new deposit(s)",
            extra={
                "client_account_uuid": account.uuid,
                "swap_count": len(created),
            },
        )
        return created
