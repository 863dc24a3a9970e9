"""Boundary Protocols — contracts between the settlement core and network clients.

Invariants:
    - Core NEVER imports from infrastructure — dependency arrows point inward only
    - One NetworkClient implementation per Network; amounts cross the boundary in base units
    - multi_send may split one logical batch into several transactions: callers
      must not assume one hash per output

Design Decisions:
    - Protocol over ABC: structural subtyping, fakes in tests need no inheritance
    - Async in Protocol: every implementation does network IO
"""

from dataclasses import dataclass
from typing import Mapping, Protocol

from swapbridge.core.domain_types import Network


@dataclass(frozen=True)
class MintedAddress:
    """Fresh deposit address plus the key material the bridge keeps for it."""
    address: str
    secret: str


@dataclass(frozen=True)
class IncomingTransaction:
    """Confirmed transfer into a deposit address."""
    hash: str
    amount: int


@dataclass(frozen=True)
class PayoutOutput:
    """One entry of a multi-output send. denom is only meaningful for token networks."""
    address: str
    amount: int
    denom: str | None = None


class NetworkClient(Protocol):
    """Contract for a network's address, read and send capabilities."""
    network: Network

    async def mint_address(self) -> MintedAddress: ...
    async def list_incoming_transactions(
        self, address: str,
    ) -> list[IncomingTransaction]: ...
    async def multi_send(self, outputs: list[PayoutOutput]) -> list[str]: ...
    async def aclose(self) -> None: ...


NetworkClients = Mapping[Network, NetworkClient]
