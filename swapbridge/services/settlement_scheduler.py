"""Settlement Scheduler — periodic batch settlement for every direction.

Invariants:
    - Each tick settles both directions concurrently, each in its own DB session
    - DispatchError and unexpected errors are logged and retried on the next tick
    - InvalidSwapTypeError stops the scheduler (programming error, never retried)

Design Decisions:
    - Runs as an asyncio task owned by the FastAPI lifespan (or the CLI `run` command)
    - Session source is anything with an async `session()` context manager (db_manager)
"""

import asyncio
import logging

from swapbridge.core.domain_types import SwapDirection
from swapbridge.core.errors import DispatchError, InvalidSwapTypeError
from swapbridge.services.batch_settlement import (
    BatchSettlementOrchestrator, SettlementReport,
)
from swapbridge.services.settlement_dispatcher import SettlementDispatcher

logger = logging.getLogger(__name__)


class SettlementScheduler:
    """Runs process_all_swaps_of_type for each direction every interval."""

    def __init__(self, session_manager, dispatcher: SettlementDispatcher, interval_seconds: float):
        self.session_manager = session_manager
        self.dispatcher = dispatcher
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    async def run_once(self) -> list[SettlementReport | None]:
        return list(await asyncio.gather(
            *(self._run_direction(direction) for direction in SwapDirection),
        ))

    async def _run_direction(self, direction: SwapDirection) -> SettlementReport | None:
        try:
            async with self.session_manager.session() as db:
                orchestrator = BatchSettlementOrchestrator(db, self.dispatcher)
                return await orchestrator.process_all_swaps_of_type(direction)
        except InvalidSwapTypeError:
            raise
        except DispatchError as e:
            logger.error(
                f"Settlement run failed, retrying next tick: {e.message}",
                extra={"swap_direction": direction.value, "error_code": e.code},
            )
        except Exception as e:
            logger.error(
                f"Unexpected settlement failure: {e}",
                extra={"swap_direction": direction.value},
                exc_info=True,
            )
        return None

    async def run_forever(self) -> None:
        while True:
            await self.run_once()
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self.run_forever())
            logger.info(f"Settlement scheduler started ({self.interval_seconds}s interval)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Settlement scheduler stopped")
