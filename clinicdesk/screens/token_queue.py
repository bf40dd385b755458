"""
Reception token queue monitor.

Keeps one reception's queue for one date up to date by polling. A poll
is scheduled only after the previous refresh has finished, and a manual
refresh that arrives while another is running is skipped, so there is
never more than one queue request in flight. Changing the reception or
date supersedes any in-flight request: its result is dropped and the
running refresh fetches again for the new filters.
"""

import asyncio
import logging
import re
from datetime import date
from typing import Callable, Optional

from clinicdesk.config import settings
from clinicdesk.logging_context import set_request_id
from clinicdesk.schemas.token_schema import Token, TokenStatus
from clinicdesk.services.api_client import ApiClient, ApiError
from clinicdesk.services.fetch_guard import RequestGenerations
from clinicdesk.services.notifier import Notifier
from clinicdesk.utils import to_date_string

logger = logging.getLogger(__name__)

QUEUE_CHANNEL = "queue"


def _token_sort_key(token: Token) -> list:
    """Natural ordering so that T2 sorts before T10."""
    return [int(part) if part.isdigit() else part for part in re.split(r"(\d+)", token.token_number)]


class TokenQueueMonitor:
    """Polling view over a reception's token queue."""

    def __init__(
        self,
        api: ApiClient,
        reception_id: Optional[int] = None,
        day: Optional[str] = None,
        notifier: Optional[Notifier] = None,
        on_token_update: Optional[Callable[[], None]] = None,
        on_refresh: Optional[Callable[[bool], None]] = None,
        poll_interval: Optional[float] = None,
        completed_limit: Optional[int] = None,
    ) -> None:
        self.api = api
        self.reception_id = reception_id
        self.date = day or to_date_string(date.today())
        self.notifier = notifier or Notifier()
        self.on_token_update = on_token_update
        self.on_refresh = on_refresh
        self.poll_interval = poll_interval or settings.queue.poll_interval_sec
        self.completed_limit = (
            settings.queue.completed_limit if completed_limit is None else completed_limit
        )
        self.tokens: list[Token] = []
        self.loading = False
        self.updating = False
        self._refreshing = False
        self._generations = RequestGenerations()
        self._task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------ #
    # Derived lists
    # ------------------------------------------------------------------ #

    @property
    def waiting(self) -> list[Token]:
        return sorted(
            (t for t in self.tokens if t.status == TokenStatus.WAITING), key=_token_sort_key
        )

    @property
    def in_progress(self) -> list[Token]:
        return [t for t in self.tokens if t.status == TokenStatus.IN_PROGRESS]

    @property
    def completed(self) -> list[Token]:
        done = [t for t in self.tokens if t.status == TokenStatus.COMPLETED]
        return done[:self.completed_limit]

    @property
    def is_refreshing(self) -> bool:
        return self._refreshing

    # ------------------------------------------------------------------ #
    # Fetching
    # ------------------------------------------------------------------ #

    async def refresh(self) -> bool:
        """Fetch the queue unless a refresh is already running.

        Returns True if fresh tokens were applied. ``on_refresh`` is called
        with the same flag after every refresh that ran, failed ones included.
        """
        if self.reception_id is None:
            return False
        if self._refreshing:
            logger.debug("Queue refresh already in flight, skipping")
            return False

        self._refreshing = True
        self.loading = True
        try:
            applied = await self._fetch_latest()
        finally:
            self._refreshing = False
            self.loading = False
        if self.on_refresh is not None:
            self.on_refresh(applied)
        return applied

    async def _fetch_latest(self) -> bool:
        """Fetch until a response for the current filters arrives."""
        while True:
            ticket = self._generations.begin(QUEUE_CHANNEL)
            set_request_id(ticket.request_id)
            try:
                tokens = await self.api.get_token_queue(self.reception_id, self.date)
            except ApiError as exc:
                if self._generations.is_current(ticket):
                    self.notifier.error("Failed to load token queue", detail=str(exc))
                    return False
                continue
            if self._generations.is_current(ticket):
                self.tokens = tokens
                return True

    async def _refetch(self) -> None:
        """Supersede any in-flight request and make sure a fresh one runs."""
        self._generations.invalidate(QUEUE_CHANNEL)
        if not self._refreshing:
            await self.refresh()

    async def set_reception(self, reception_id: int) -> None:
        if reception_id == self.reception_id:
            return
        self.reception_id = reception_id
        self.tokens = []
        await self._refetch()

    async def set_date(self, day: str) -> None:
        if day == self.date:
            return
        self.date = day
        self.tokens = []
        await self._refetch()

    # ------------------------------------------------------------------ #
    # Polling
    # ------------------------------------------------------------------ #

    async def run(self) -> None:
        """Refresh, then wait the poll interval, forever."""
        while True:
            await self.refresh()
            await asyncio.sleep(self.poll_interval)

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.run())
            logger.info(
                "Polling reception %s queue every %.0fs", self.reception_id, self.poll_interval
            )
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    # ------------------------------------------------------------------ #
    # Token actions
    # ------------------------------------------------------------------ #

    async def _update_status(
        self, token_id: int, status: TokenStatus, success: str, failure: str
    ) -> bool:
        self.updating = True
        try:
            await self.api.update_token_status(token_id, status)
        except ApiError as exc:
            self.notifier.error(failure, detail=str(exc))
            return False
        finally:
            self.updating = False
        self.notifier.success(success)
        await self._refetch()
        if self.on_token_update is not None:
            self.on_token_update()
        return True

    async def call_token(self, token_id: int) -> bool:
        return await self._update_status(
            token_id, TokenStatus.IN_PROGRESS, "Token called", "Failed to call token"
        )

    async def complete_token(self, token_id: int) -> bool:
        return await self._update_status(
            token_id, TokenStatus.COMPLETED,
            "Token marked as completed", "Failed to complete token",
        )

    async def cancel_token(
        self, token_id: int, confirm: Optional[Callable[[str], bool]] = None
    ) -> bool:
        if confirm is not None and not confirm("Are you sure you want to cancel this token?"):
            return False
        return await self._update_status(
            token_id, TokenStatus.CANCELLED, "Token cancelled", "Failed to cancel token"
        )
