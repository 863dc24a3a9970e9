"""Operator CLI — settlement runs and in-flight batch recovery.

Usage:
    python -m swapbridge process                      # settle both directions once
    python -m swapbridge process --direction bloki_to_loki
    python -m swapbridge run                          # settle every SETTLEMENT_INTERVAL_SECONDS
    python -m swapbridge in-flight                    # list reserved, unresolved batches
    python -m swapbridge release <batch_uuid>         # batch verified NOT paid -> pending
    python -m swapbridge settle <batch_uuid> --hashes h1,h2   # batch verified paid -> settled
"""

import argparse
import asyncio
import logging
import sys
from uuid import UUID

from swapbridge.config import get_settings
from swapbridge.core.domain_types import SwapDirection
from swapbridge.core.errors import BridgeError
from swapbridge.infrastructure.database import DatabaseSessionManager
from swapbridge.infrastructure.network_registry import (
    close_network_clients, init_network_clients,
)
from swapbridge.infrastructure.observability import setup_logging
from swapbridge.services.batch_settlement import BatchSettlementOrchestrator
from swapbridge.services.settlement_dispatcher import (
    SettlementConfig, SettlementDispatcher,
)
from swapbridge.services.settlement_scheduler import SettlementScheduler

logger = logging.getLogger("swapbridge.cli")


def _hash_list(value: str) -> list[str]:
    hashes = [h.strip() for h in value.split(",") if h.strip()]
    if not hashes:
        raise argparse.ArgumentTypeError("at least one transaction hash is required")
    return hashes


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="python -m swapbridge",
        description="SwapBridge settlement operator tool",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    process = commands.add_parser("process", help="Run one settlement pass")
    process.add_argument(
        "--direction", choices=[d.value for d in SwapDirection], default=None,
        help="Settle only this direction (default: both)",
    )
    commands.add_parser("run", help="Run the settlement scheduler until interrupted")
    commands.add_parser("in-flight", help="List in-flight settlement batches")

    release = commands.add_parser("release", help="Return an unpaid batch to pending")
    release.add_argument("batch_uuid", type=UUID)

    settle = commands.add_parser("settle", help="Mark a paid batch as settled")
    settle.add_argument("batch_uuid", type=UUID)
    settle.add_argument(
        "--hashes", required=True, type=_hash_list,
        help="Comma-separated destination transaction hashes, in order",
    )
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> int:
    settings = get_settings()
    manager = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    clients = init_network_clients(settings)
    dispatcher = SettlementDispatcher(clients, SettlementConfig.from_settings(settings))
    try:
        if args.command == "process":
            return await _process(manager, dispatcher, args.direction)
        if args.command == "run":
            scheduler = SettlementScheduler(
                manager, dispatcher, settings.settlement_interval_seconds,
            )
            await scheduler.run_forever()
            return 0
        async with manager.session() as db:
            orchestrator = BatchSettlementOrchestrator(db, dispatcher)
            if args.command == "in-flight":
                for batch in await orchestrator.list_in_flight_batches():
                    print(
                        f"{batch.batch_uuid}  {batch.direction}  "
                        f"swaps={batch.swap_count}  amount={batch.total_amount}  "
                        f"reserved_at={batch.reserved_at}",
                    )
            elif args.command == "release":
                count = await orchestrator.release_batch(args.batch_uuid)
                print(f"Released {count} swap(s)")
            elif args.command == "settle":
                count = await orchestrator.settle_batch(args.batch_uuid, args.hashes)
                print(f"Settled {count} swap(s)")
        return 0
    finally:
        await close_network_clients()
        await manager.dispose()


async def _process(manager, dispatcher, direction: str | None) -> int:
    directions = [SwapDirection(direction)] if direction else list(SwapDirection)
    exit_code = 0
    for d in directions:
        async with manager.session() as db:
            orchestrator = BatchSettlementOrchestrator(db, dispatcher)
            try:
                report = await orchestrator.process_all_swaps_of_type(d)
            except BridgeError as e:
                logger.error(f"{d.value}: {e.message}", extra={"error_code": e.code})
                exit_code = 1
                continue
        print(
            f"{d.value}: settled={report.settled_swaps} "
            f"withheld={report.withheld_swaps} "
            f"hashes={','.join(report.transaction_hashes) or '-'}",
        )
    return exit_code


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130
    except BridgeError as e:
        logger.error(e.message, extra={"error_code": e.code})
        return 1


if __name__ == "__main__":
    sys.exit(main())
