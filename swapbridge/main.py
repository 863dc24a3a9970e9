"""SwapBridge API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map BridgeError → {status, success, result} envelopes
    - CORS configured from settings (not hardcoded)
    - Database and network clients initialized on startup via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Settlement scheduler only runs when settlement_enabled: API replicas stay
      read/allocate-only and one worker owns payouts
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import swapbridge.infrastructure.database as db_module
from swapbridge import __version__
from swapbridge.api.error_handlers import register_error_handlers
from swapbridge.api.routes import health, swap
from swapbridge.config import get_settings
from swapbridge.infrastructure.network_registry import (
    close_network_clients, init_network_clients,
)
from swapbridge.infrastructure.observability import setup_logging
from swapbridge.services.settlement_dispatcher import (
    SettlementConfig, SettlementDispatcher,
)
from swapbridge.services.settlement_scheduler import SettlementScheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db_module.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    clients = init_network_clients(settings)

    scheduler = None
    if settings.settlement_enabled:
        dispatcher = SettlementDispatcher(
            clients, SettlementConfig.from_settings(settings),
        )
        scheduler = SettlementScheduler(
            db_module.db_manager, dispatcher, settings.settlement_interval_seconds,
        )
        scheduler.start()
    logger.info("SwapBridge API started")
    yield
    if scheduler:
        await scheduler.stop()
    await close_network_clients()
    await db_module.db_manager.dispose()
    logger.info("SwapBridge API shutting down")


app = FastAPI(
    title="SwapBridge API", version=__version__, lifespan=lifespan,
)

# CORS — configured from settings, not hardcoded
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes — explicit registration
app.include_router(health.router)
app.include_router(swap.router)

register_error_handlers(app)
