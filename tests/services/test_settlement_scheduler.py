"""Settlement Scheduler — verifies each tick settles both directions and survives failures."""

import asyncio
from contextlib import asynccontextmanager

import pytest
from sqlalchemy import select

from swapbridge.core.domain_types import Network, SwapDirection
from swapbridge.core.errors import InvalidSwapTypeError, NetworkClientError
from swapbridge.models.swap import Swap
from swapbridge.services.settlement_scheduler import SettlementScheduler
from tests.services.factories import seed_swap


class _SerialSessions:
    """One session at a time: the in-memory database is a single shared connection."""

    def __init__(self, session_factory):
        self._session_factory = session_factory
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def session(self):
        async with self._lock:
            async with self._session_factory() as session:
                yield session


@pytest.fixture
def session_manager(test_session_factory):
    return _SerialSessions(test_session_factory)


async def test_run_once_settles_both_directions(
    test_db, session_manager, dispatcher, network_clients,
    bnb_user_account, loki_user_account,
):
    await seed_swap(test_db, bnb_user_account, 10)
    await seed_swap(test_db, loki_user_account, 1_000_000_000)
    scheduler = SettlementScheduler(session_manager, dispatcher, interval_seconds=60)

    reports = await scheduler.run_once()

    assert {r.direction for r in reports} == set(SwapDirection)
    assert sum(r.settled_swaps for r in reports) == 2
    assert len(network_clients[Network.BNB].sends) == 1
    assert len(network_clients[Network.LOKI].sends) == 1


async def test_dispatch_failure_is_logged_and_retried_next_tick(
    test_db, session_manager, dispatcher, network_clients, bnb_user_account,
):
    await seed_swap(test_db, bnb_user_account, 10)
    network_clients[Network.BNB].send_error = NetworkClientError("down", "bnb", "timeout")
    scheduler = SettlementScheduler(session_manager, dispatcher, interval_seconds=60)

    reports = await scheduler.run_once()
    assert None in reports

    network_clients[Network.BNB].send_error = None
    reports = await scheduler.run_once()
    assert sum(r.settled_swaps for r in reports if r) == 1

    statuses = (await test_db.execute(select(Swap.status))).scalars().all()
    assert statuses == ["settled"]


async def test_invalid_swap_type_stops_the_scheduler(session_manager, dispatcher, monkeypatch):
    async def broken(self, direction):
        raise InvalidSwapTypeError(direction)

    monkeypatch.setattr(
        "swapbridge.services.settlement_scheduler.BatchSettlementOrchestrator."
        "process_all_swaps_of_type",
        broken,
    )
    scheduler = SettlementScheduler(session_manager, dispatcher, interval_seconds=60)
    with pytest.raises(InvalidSwapTypeError):
        await scheduler.run_once()


async def test_start_and_stop(session_manager, dispatcher):
    scheduler = SettlementScheduler(session_manager, dispatcher, interval_seconds=3600)
    scheduler.start()
    assert scheduler._task is not None
    await scheduler.stop()
    assert scheduler._task is None
