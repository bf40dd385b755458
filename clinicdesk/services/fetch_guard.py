"""
Request generation counters for navigation-triggered fetches.

Each channel (e.g. "dates", "slots", "queue") has a monotonically
increasing generation. A fetch records the generation it started with
and may only apply its result if no newer fetch has started on the same
channel since, so the latest navigation always wins even when an older
request resolves last.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchTicket:
    channel: str
    generation: int

    @property
    def request_id(self) -> str:
        return f"{self.channel}-{self.generation}"


class RequestGenerations:
    """Per-channel generation counter."""

    def __init__(self) -> None:
        self._latest: dict[str, int] = defaultdict(int)

    def begin(self, channel: str) -> FetchTicket:
        """Start a fetch, superseding any in-flight fetch on ``channel``."""
        self._latest[channel] += 1
        return FetchTicket(channel, self._latest[channel])

    def invalidate(self, channel: str) -> None:
        """Mark every in-flight fetch on ``channel`` as stale."""
        self._latest[channel] += 1

    def is_current(self, ticket: FetchTicket) -> bool:
        current = self._latest[ticket.channel] == ticket.generation
        if not current:
            logger.debug(
                "Discarding stale %s result (latest generation %d)",
                ticket.request_id, self._latest[ticket.channel],
            )
        return current

    def latest(self, channel: str) -> int:
        return self._latest[channel]
