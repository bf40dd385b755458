"""
Clinic desk entry point.

Runs the offline console demo, or polls a live reception token queue
against the configured backend and prints it on every change.

Usage:
    Console demo:  python main.py console
    Live queue:    python main.py queue <reception_id> [YYYY-MM-DD]
"""

import asyncio
import logging
import sys
from typing import Optional

from clinicdesk.services.api_client import ApiClient

logger = logging.getLogger(__name__)


async def _watch_queue(
    reception_id: int, day: Optional[str], api: Optional[ApiClient] = None
) -> None:
    """Poll the reception queue until cancelled, printing every refresh."""
    from clinicdesk.screens.token_queue import TokenQueueMonitor
    from console_demo import render_notices, render_queue

    if api is None:
        async with ApiClient() as client:
            await _watch_queue(reception_id, day, client)
        return

    def report(applied: bool) -> None:
        if applied:
            print(render_queue(monitor))
        notices = render_notices(monitor.notifier)
        if notices:
            print(notices)

    monitor = TokenQueueMonitor(
        api, reception_id, day=day,
        on_token_update=lambda: print(render_queue(monitor)),
        on_refresh=report,
    )
    logger.info("Watching reception %s at %s", reception_id, api.base_url)
    task = monitor.start()
    try:
        await task
    finally:
        await monitor.stop()


def _run_console_mode() -> None:
    """Start the offline console demo (no backend required)."""
    from console_demo import ConsoleSession

    session = ConsoleSession()
    asyncio.run(session.run())


def _run_queue_mode(args: list[str]) -> None:
    if not args or not args[0].isdigit():
        print("Usage: python main.py queue <reception_id> [YYYY-MM-DD]")
        sys.exit(2)
    day = args[1] if len(args) > 1 else None
    try:
        asyncio.run(_watch_queue(int(args[0]), day))
    except KeyboardInterrupt:
        logger.info("Queue watcher stopped")


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "queue":
        _run_queue_mode(sys.argv[2:])
    else:
        _run_console_mode()
