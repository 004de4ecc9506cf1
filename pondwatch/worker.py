"""Run the monitoring loops without the HTTP API.

The realtime channel has no subscribers here, so reminders and alerts go out
over push and email only.
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from pondwatch.core.config import settings
from pondwatch.core.logging_config import setup_logging
from pondwatch.db.session import engine, init_db
from pondwatch.services.runtime import PondRuntime, build_runtime

logger = logging.getLogger(__name__)

ONESHOT_CHOICES = ("feeding", "conditions", "archive")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the PondWatch monitoring loops.")
    parser.add_argument(
        "--oneshot",
        choices=ONESHOT_CHOICES,
        help="Run a single cycle of one loop instead of the continuous scheduler.",
    )
    return parser.parse_args()


async def _oneshot(runtime: PondRuntime, which: str) -> None:
    scheduler = runtime.scheduler
    if which == "feeding":
        result = await scheduler.run_feeding_scan()
        logger.info("Feeding scan complete (due=%s, created=%s)", result.due, len(result.created))
    elif which == "conditions":
        check = await scheduler.run_condition_check()
        logger.info("Condition check complete (status=%s, alerts=%s)", check.status, len(check.conditions))
    else:
        row = await scheduler.run_archival()
        logger.info("Archived reading %s", row.id)


async def _run(args: argparse.Namespace) -> None:
    init_db()
    runtime = build_runtime(settings, engine)
    try:
        if args.oneshot:
            await _oneshot(runtime, args.oneshot)
            return
        runtime.scheduler.start()
        await asyncio.Event().wait()
    finally:
        await runtime.aclose()


def main() -> int:
    setup_logging(service_name="pondwatch-worker")
    args = parse_args()
    try:
        asyncio.run(_run(args))
    except KeyboardInterrupt:
        logger.info("Shutting down pondwatch worker")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
