from __future__ import annotations

import dataclasses
import logging
from typing import Callable, List

from pingbot.models import PingEvent
from pingbot.time_utils import now_ms


logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = 60 * 1000


class PingStore:
    """Holds active pings. Expired entries are dropped the next time anyone reads.

    The store does no locking of its own; the owning state actor serializes
    every call into it.
    """

    def __init__(self, ttl_ms: int = DEFAULT_TTL_MS, clock: Callable[[], int] = now_ms):
        self.ttl_ms = ttl_ms
        self.clock = clock
        self._pings: List[PingEvent] = []

    def insert(self, candidate: PingEvent) -> PingEvent:
        """Store a copy of ``candidate`` expiring one TTL from now and return it."""
        ping = dataclasses.replace(candidate, expiry=self.clock() + self.ttl_ms)
        self._pings = [*self._pings, ping]
        logger.debug("Stored ping %s (%d held)", ping.random_phrase, len(self._pings))
        return ping

    def read_active(self) -> List[PingEvent]:
        now = self.clock()
        kept = [ping for ping in self._pings if ping.expiry > now]
        dropped = len(self._pings) - len(kept)
        if dropped:
            logger.debug("Dropped %d expired pings", dropped)
        self._pings = kept
        return list(kept)

    def __len__(self) -> int:
        return len(self._pings)
