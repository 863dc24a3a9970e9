"""Account Allocator — idempotently maps a payout address to a deposit address.

Invariants:
    - The deposit address always lives on the network opposite user_address_type
    - Repeated calls with the same (user_address, user_address_type) return the same row
    - The unique constraint is authoritative: a lost insert race re-reads and returns
      the winner's row, never a duplicate and never an error
    - No row is written when no minting capability applies (AccountCreationError)

Design Decisions:
    - Look up first: the common case (retry / returning user) mints nothing
    - A minted address that loses the insert race is abandoned (logged, never reused)
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from swapbridge.core.domain_types import Network, opposite_network
from swapbridge.core.errors import AccountCreationError, ErrorContext
from swapbridge.core.network_protocols import NetworkClients
from swapbridge.models.client_account import ClientAccount
from swapbridge.services.swap_queries import (
    get_client_account_for_address, insert_client_account,
)

logger = logging.getLogger(__name__)


class AccountAllocator:
    """Deposit account lookup-or-create."""

    def __init__(self, db: AsyncSession, network_clients: NetworkClients):
        self.db = db
        self.network_clients = network_clients

    async def get_or_create_deposit_account(
        self, user_address: str, user_address_type: Network,
    ) -> ClientAccount:
        existing = await get_client_account_for_address(
            self.db, user_address, user_address_type,
        )
        if existing:
            return existing

        deposit_address_type = opposite_network(user_address_type)
        client = self.network_clients.get(deposit_address_type)
        if client is None:
            logger.error(
                f"No minting capability for {deposit_address_type.value}",
                extra={"network": deposit_address_type.value},
            )
            raise AccountCreationError(deposit_address_type.value)

        minted = await client.mint_address()
        account = await insert_client_account(
            self.db, user_address, user_address_type,
            deposit_address_type, minted,
        )
        if account is not None:
            logger.info(
                f"Created {deposit_address_type.value} deposit account",
                extra={"client_account_uuid": account.uuid},
            )
            return account

        # Lost the race: a concurrent request inserted the pair first
        logger.warning(
            f"Deposit account for {user_address_type.value} address created "
            f"concurrently; abandoning minted address {minted.address}",
        )
        existing = await get_client_account_for_address(
            self.db, user_address, user_address_type,
        )
        if existing is None:
            raise AccountCreationError(
                deposit_address_type.value,
                ErrorContext(debug_info={"reason": "conflict without existing row"}),
            )
        return existing
