"""Swap Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - SwapCreate.address must be a well-formed address on the network the user is paid on
    - Response models never carry the client account secret
    - transfer_tx_hashes is always a list (possibly empty), never a delimited string

Design Decisions:
    - Address format checked by pattern only: ownership/existence is the network's concern
    - from_* constructors keep ORM -> API mapping next to the schema
"""

import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from swapbridge.core.domain_types import Network, SwapDirection, user_network_for

_BASE58 = "1-9A-HJ-NP-Za-km-z"
_ADDRESS_PATTERNS = {
    # standard/subaddress (95) or integrated (106); L = mainnet, T = testnet
    Network.LOKI: re.compile(rf"^[LT][{_BASE58}]{{94}}([{_BASE58}]{{11}})?$"),
    Network.BNB: re.compile(r"^t?bnb1[02-9ac-hj-np-z]{38}$"),
}


class SwapCreate(BaseModel):
    """Swap request — direction plus the address to be paid out to."""
    type: SwapDirection
    address: str = Field(min_length=1, max_length=200)

    @field_validator("address")
    @classmethod
    def strip_address(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("address cannot be empty or whitespace")
        return v

    @model_validator(mode="after")
    def validate_address_network(self):
        network = user_network_for(self.type)
        if not _ADDRESS_PATTERNS[network].match(self.address):
            raise ValueError(f"address is not a valid {network.value} address")
        return self

    @property
    def address_type(self) -> Network:
        return user_network_for(self.type)


class FinalizeSwap(BaseModel):
    """Finalize request — the client account uuid returned by swap."""
    uuid: UUID


class ClientAccountResponse(BaseModel):
    """Client account — public-facing fields only."""
    uuid: UUID
    address: str
    address_type: Network
    deposit_address: str
    deposit_address_type: Network
    created: datetime

    @classmethod
    def from_account(cls, account) -> "ClientAccountResponse":
        return cls(
            uuid=account.uuid,
            address=account.user_address,
            address_type=account.user_address_type,
            deposit_address=account.deposit_address,
            deposit_address_type=account.deposit_address_type,
            created=account.created,
        )


class SwapResponse(BaseModel):
    """Swap as reported to the client."""
    uuid: UUID
    type: SwapDirection
    source_address: str
    dest_address: str
    amount: int
    deposit_tx_hash: str
    transfer_tx_hashes: list[str] = Field(default_factory=list)
    status: str
    created: datetime

    @classmethod
    def from_swap(cls, swap, account) -> "SwapResponse":
        return cls(
            uuid=swap.uuid,
            type=swap.direction,
            source_address=account.deposit_address,
            dest_address=account.user_address,
            amount=swap.amount,
            deposit_tx_hash=swap.deposit_transaction_hash,
            transfer_tx_hashes=list(swap.transfer_transaction_hashes or []),
            status=swap.status,
            created=swap.created,
        )
