"""Settlement Dispatcher — verifies per-direction payout construction and failure mapping.

Invariants:
    - loki_to_bloki pays full amounts in the configured denom on BNB
    - bloki_to_loki subtracts the withdrawal fee from every output on Loki
    - Invalid direction fails before any network call
    - Client failures and timeouts surface as DispatchError
    - Outputs at or below the fee are withheld, never sent
"""

from decimal import Decimal

import pytest

from swapbridge.config import Settings
from swapbridge.core.aggregate_payouts import AggregatedOutput
from swapbridge.core.domain_types import Network, SwapDirection
from swapbridge.core.errors import (
    DispatchError, FeeExceedsAmountError, InvalidSwapTypeError, NetworkClientError,
)
from swapbridge.services.settlement_dispatcher import (
    SettlementConfig, SettlementDispatcher,
)
from tests.services.factories import DEFAULT_FEE, DENOM


def _output(address: str, amount) -> AggregatedOutput:
    return AggregatedOutput(address=address, total_amount=Decimal(amount))


async def test_loki_to_bloki_sends_full_amount_in_denom(dispatcher, network_clients):
    hashes = await dispatcher.dispatch(
        SwapDirection.LOKI_TO_BLOKI,
        [_output("bnb1a", 5_000_000_000), _output("bnb1b", 1)],
    )
    assert hashes == ["hash1", "hash2"]
    sent = network_clients[Network.BNB].sends[0]
    assert [(o.address, o.amount, o.denom) for o in sent] == [
        ("bnb1a", 5_000_000_000, DENOM), ("bnb1b", 1, DENOM),
    ]
    assert network_clients[Network.LOKI].sends == []


async def test_bloki_to_loki_deducts_fee_per_output(dispatcher, network_clients):
    await dispatcher.dispatch(
        "bloki_to_loki",
        [_output("L-a", 1_000_000_000), _output("L-b", 150_000_000)],
    )
    sent = network_clients[Network.LOKI].sends[0]
    assert [(o.address, o.amount) for o in sent] == [
        ("L-a", 1_000_000_000 - DEFAULT_FEE), ("L-b", 50_000_000),
    ]
    assert all(o.denom is None for o in sent)


async def test_fractional_totals_truncate_to_whole_units(dispatcher, network_clients):
    await dispatcher.dispatch("loki_to_bloki", [_output("bnb1a", "10.9")])
    assert network_clients[Network.BNB].sends[0][0].amount == 10


async def test_invalid_direction_makes_no_network_call(dispatcher, network_clients):
    with pytest.raises(InvalidSwapTypeError):
        await dispatcher.dispatch("sideways", [_output("x", 10)])
    assert network_clients[Network.BNB].sends == []
    assert network_clients[Network.LOKI].sends == []


async def test_client_error_becomes_dispatch_error(dispatcher, network_clients):
    network_clients[Network.BNB].send_error = NetworkClientError(
        "insufficient funds", "bnb", "http_error",
    )
    with pytest.raises(DispatchError) as exc_info:
        await dispatcher.dispatch("loki_to_bloki", [_output("bnb1a", 10)])
    assert "insufficient funds" in exc_info.value.message


async def test_send_timeout_becomes_dispatch_error(network_clients):
    dispatcher = SettlementDispatcher(network_clients, SettlementConfig(
        withdrawal_fee=DEFAULT_FEE, bnb_denom=DENOM, dispatch_timeout_seconds=0.01,
    ))
    network_clients[Network.LOKI].send_hangs = True
    with pytest.raises(DispatchError) as exc_info:
        await dispatcher.dispatch("bloki_to_loki", [_output("L-a", 1_000_000_000)])
    assert "timed out" in exc_info.value.message


async def test_output_at_fee_is_rejected_before_sending(dispatcher, network_clients):
    with pytest.raises(FeeExceedsAmountError):
        await dispatcher.dispatch(
            "bloki_to_loki",
            [_output("L-a", 1_000_000_000), _output("L-b", DEFAULT_FEE)],
        )
    assert network_clients[Network.LOKI].sends == []


def test_split_payable_withholds_sub_fee_outputs(dispatcher):
    big, exact, small = (
        _output("L-a", DEFAULT_FEE + 1), _output("L-b", DEFAULT_FEE), _output("L-c", 5),
    )
    payable, withheld = dispatcher.split_payable("bloki_to_loki", [big, exact, small])
    assert payable == [big]
    assert withheld == [exact, small]


def test_split_payable_bnb_only_withholds_zero(dispatcher):
    one, zero = _output("bnb1a", 1), _output("bnb1b", 0)
    payable, withheld = dispatcher.split_payable("loki_to_bloki", [one, zero])
    assert payable == [one]
    assert withheld == [zero]


def test_fee_only_applies_to_loki_payouts(dispatcher):
    assert dispatcher.fee_for(SwapDirection.BLOKI_TO_LOKI) == DEFAULT_FEE
    assert dispatcher.fee_for(SwapDirection.LOKI_TO_BLOKI) == 0


def test_config_from_settings_converts_fee_to_base_units():
    config = SettlementConfig.from_settings(Settings())
    assert config.withdrawal_fee == 100_000_000
    assert config.bnb_denom == "BLOKI-000"
