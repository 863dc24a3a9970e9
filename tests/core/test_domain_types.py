"""Domain Types — verifies identity wrappers, enum values and direction mapping.

Tests:
    - NewType wrappers exist and are callable
    - Enums serialize to the strings stored in the database
    - Direction <-> user network mapping is a bijection
"""

from uuid import uuid4

from swapbridge.core.domain_types import (
    BASE_UNITS_PER_COIN, BaseUnits, BatchId, ClientAccountId, SwapId,
    Network, SwapDirection, SwapStatus,
    direction_for_user_network, opposite_network, user_network_for,
)


def test_identity_types_wrap_uuid():
    uid = uuid4()
    assert ClientAccountId(uid) == uid
    assert SwapId(uid) == uid
    assert BatchId(uid) == uid


def test_base_units_are_nine_decimals():
    assert BASE_UNITS_PER_COIN == 1_000_000_000
    assert BaseUnits(5) == 5


def test_enum_values_match_stored_strings():
    assert Network.LOKI.value == "loki"
    assert Network.BNB.value == "bnb"
    assert SwapDirection.LOKI_TO_BLOKI.value == "loki_to_bloki"
    assert SwapDirection.BLOKI_TO_LOKI.value == "bloki_to_loki"
    assert [s.value for s in SwapStatus] == ["pending", "in_flight", "settled"]


def test_str_enum_compares_to_raw_string():
    assert SwapDirection("loki_to_bloki") == "loki_to_bloki"


def test_opposite_network():
    assert opposite_network(Network.LOKI) == Network.BNB
    assert opposite_network(Network.BNB) == Network.LOKI


def test_loki_to_bloki_pays_out_on_bnb():
    assert user_network_for(SwapDirection.LOKI_TO_BLOKI) == Network.BNB
    assert user_network_for(SwapDirection.BLOKI_TO_LOKI) == Network.LOKI


def test_direction_mapping_round_trips():
    for direction in SwapDirection:
        assert direction_for_user_network(user_network_for(direction)) == direction
