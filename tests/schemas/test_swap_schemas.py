"""Swap Schemas — verifies request validation and response mapping.

Invariants:
    - address is validated against the network the user is paid on
    - Response models never expose the account secret
"""

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest
from pydantic import ValidationError

from swapbridge.core.domain_types import Network, SwapDirection
from swapbridge.schemas.swap import (
    ClientAccountResponse, FinalizeSwap, SwapCreate, SwapResponse,
)

LOKI_ADDRESS = "L" + "5" * 94
BNB_ADDRESS = "bnb1" + "q" * 38


def test_loki_to_bloki_requires_bnb_address():
    body = SwapCreate(type="loki_to_bloki", address=BNB_ADDRESS)
    assert body.type == SwapDirection.LOKI_TO_BLOKI
    assert body.address_type == Network.BNB


def test_bloki_to_loki_requires_loki_address():
    body = SwapCreate(type="bloki_to_loki", address=LOKI_ADDRESS)
    assert body.address_type == Network.LOKI


def test_testnet_addresses_accepted():
    SwapCreate(type="loki_to_bloki", address="tbnb1" + "q" * 38)
    SwapCreate(type="bloki_to_loki", address="T" + "5" * 94)


def test_integrated_loki_address_accepted():
    SwapCreate(type="bloki_to_loki", address="L" + "5" * 105)


def test_address_is_stripped():
    body = SwapCreate(type="loki_to_bloki", address=f"  {BNB_ADDRESS}  ")
    assert body.address == BNB_ADDRESS


@pytest.mark.parametrize("direction, address", [
    ("loki_to_bloki", LOKI_ADDRESS),
    ("bloki_to_loki", BNB_ADDRESS),
    ("bloki_to_loki", "L" + "0" * 94),
    ("loki_to_bloki", "bnb1" + "b" * 38),
    ("loki_to_bloki", "   "),
])
def test_invalid_address_rejected(direction, address):
    with pytest.raises(ValidationError):
        SwapCreate(type=direction, address=address)


def test_unknown_direction_rejected():
    with pytest.raises(ValidationError):
        SwapCreate(type="sideways", address=BNB_ADDRESS)


def test_finalize_requires_uuid():
    uid = uuid4()
    assert FinalizeSwap(uuid=str(uid)).uuid == uid
    with pytest.raises(ValidationError):
        FinalizeSwap(uuid="not-a-uuid")


def _account():
    return SimpleNamespace(
        uuid=uuid4(),
        user_address=BNB_ADDRESS,
        user_address_type="bnb",
        deposit_address=LOKI_ADDRESS,
        deposit_address_type="loki",
        secret="7",
        created=datetime.now(timezone.utc),
    )


def test_client_account_response_hides_secret():
    response = ClientAccountResponse.from_account(_account())
    dumped = response.model_dump()
    assert "secret" not in dumped
    assert dumped["address"] == BNB_ADDRESS
    assert dumped["deposit_address_type"] == Network.LOKI


def test_swap_response_maps_addresses_and_hashes():
    account = _account()
    swap = SimpleNamespace(
        uuid=uuid4(),
        direction="loki_to_bloki",
        amount=5_000_000_000,
        deposit_transaction_hash="deposit-hash",
        transfer_transaction_hashes=["hash1", "hash2"],
        status="settled",
        created=datetime.now(timezone.utc),
    )
    response = SwapResponse.from_swap(swap, account)
    assert response.source_address == LOKI_ADDRESS
    assert response.dest_address == BNB_ADDRESS
    assert response.transfer_tx_hashes == ["hash1", "hash2"]


def test_swap_response_defaults_hashes_to_empty_list():
    swap = SimpleNamespace(
        uuid=uuid4(), direction="bloki_to_loki", amount=1,
        deposit_transaction_hash="h", transfer_transaction_hashes=None,
        status="pending", created=datetime.now(timezone.utc),
    )
    assert SwapResponse.from_swap(swap, _account()).transfer_tx_hashes == []
