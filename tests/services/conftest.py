"""Service test fixtures — async DB, fake network clients + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - get_network_clients overridden with FakeNetworkClients (no HTTP)
    - db_manager patched so the readiness probe and scheduler use the test DB

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (SKIP LOCKED compiles away on SQLite; PostgreSQL row locking not exercised here)
    - Seed helpers insert rows directly: tests control amounts, statuses and hashes
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from swapbridge.db.base import Base
from swapbridge.infrastructure.database import get_db, DatabaseSessionManager
from swapbridge.infrastructure.network_registry import get_network_clients
from swapbridge.services.settlement_dispatcher import (
    SettlementConfig, SettlementDispatcher,
)
import swapbridge.infrastructure.database as db_module
from swapbridge.main import app
from tests.services.factories import DEFAULT_FEE, DENOM, seed_account
from tests.services.fake_networks import LOKI_ADDRESS, make_network_clients


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def session_manager(test_engine, test_session_factory):
    """DatabaseSessionManager bound to the test engine (no pool arguments)."""
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = test_session_factory
    return manager


@pytest.fixture
def network_clients():
    return make_network_clients()


@pytest.fixture
def settlement_config():
    return SettlementConfig(
        withdrawal_fee=DEFAULT_FEE, bnb_denom=DENOM, dispatch_timeout_seconds=1.0,
    )


@pytest.fixture
def dispatcher(network_clients, settlement_config):
    return SettlementDispatcher(network_clients, settlement_config)


@pytest.fixture
async def client(test_session_factory, session_manager, network_clients):
    """FastAPI test client with DB and network dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_network_clients] = lambda: network_clients

    original_manager = db_module.db_manager
    db_module.db_manager = session_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def bnb_user_account(test_db):
    """Account of a user paid in B-LOKI (loki_to_bloki swaps)."""
    return await seed_account(test_db)


@pytest.fixture
async def loki_user_account(test_db):
    """Account of a user paid in LOKI (bloki_to_loki swaps)."""
    return await seed_account(
        test_db, user_address=LOKI_ADDRESS, user_address_type="loki",
        deposit_address="bnb1deposit1",
    )
