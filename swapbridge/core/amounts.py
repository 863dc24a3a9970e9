"""Amount Parsing — permissive numeric parsing for swap amounts.

Invariants:
    - parse_amount never raises: unparseable input parses to Decimal(0)
    - Floats are parsed through their shortest repr (12.5 -> Decimal("12.5")),
      not their binary expansion
    - coins_to_base_units truncates toward zero (never rounds a payout up)

Design Decisions:
    - Decimal over float: aggregated sums of base units stay exact
    - Zero fallback: one malformed record must not block unrelated swaps in the same batch
"""

import logging
from decimal import Decimal, InvalidOperation, ROUND_DOWN

from swapbridge.core.domain_types import BASE_UNITS_PER_COIN

logger = logging.getLogger(__name__)

ZERO = Decimal(0)


def parse_amount(value: object) -> Decimal:
    """Parse an int, float, Decimal or decimal string. Anything else is 0."""
    if isinstance(value, bool) or value is None:
        return ZERO
    try:
        if isinstance(value, float):
            parsed = Decimal(repr(value))
        elif isinstance(value, (int, Decimal)):
            parsed = Decimal(value)
        elif isinstance(value, str):
            parsed = Decimal(value.strip())
        else:
            return ZERO
    except (InvalidOperation, ValueError):
        logger.warning(f"Unparseable amount {value!r}, counting as 0")
        return ZERO
    if not parsed.is_finite():
        logger.warning(f"Non-finite amount {value!r}, counting as 0")
        return ZERO
    return parsed


def coins_to_base_units(coins: object) -> int:
    """Convert a whole-token value (e.g. a configured fee of 0.1) to base units."""
    scaled = parse_amount(coins) * BASE_UNITS_PER_COIN
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def base_units_to_coins(amount: int) -> Decimal:
    """Convert base units back to a whole-token Decimal for wire formats."""
    return Decimal(amount) / BASE_UNITS_PER_COIN
