"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ClientAccountId, SwapId, BatchId wrap UUIDs — never use bare UUID in domain logic
    - Amounts are integer base units of 10^-9 token (BASE_UNITS_PER_COIN)
    - A direction always pays out on the network its user address lives on
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to DB string columns without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

ClientAccountId = NewType("ClientAccountId", UUID)
SwapId = NewType("SwapId", UUID)
BatchId = NewType("BatchId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

BaseUnits = NewType("BaseUnits", int)

BASE_UNITS_PER_COIN = 10**9


# ─── Enums ───────────────────────────────────────────────────────

class Network(str, Enum):
    """Networks bridged by the service — maps to *_address_type columns."""
    LOKI = "loki"
    BNB = "bnb"


class SwapDirection(str, Enum):
    """Swap flows — maps to the swaps.direction column."""
    LOKI_TO_BLOKI = "loki_to_bloki"
    BLOKI_TO_LOKI = "bloki_to_loki"


class SwapStatus(str, Enum):
    """Swap lifecycle: pending -> in_flight -> settled (in_flight -> pending on dispatch failure)."""
    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    SETTLED = "settled"


def opposite_network(network: Network) -> Network:
    """Deposit addresses always live on the network the user is not paid on."""
    return Network.BNB if network == Network.LOKI else Network.LOKI


def user_network_for(direction: SwapDirection) -> Network:
    """Network the user supplies an address for (and is paid out on)."""
    if direction == SwapDirection.LOKI_TO_BLOKI:
        return Network.BNB
    return Network.LOKI


def direction_for_user_network(network: Network) -> SwapDirection:
    """Inverse of user_network_for — derives a swap's direction from its account."""
    if network == Network.BNB:
        return SwapDirection.LOKI_TO_BLOKI
    return SwapDirection.BLOKI_TO_LOKI
