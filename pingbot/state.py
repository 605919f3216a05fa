import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from pingbot.models import DeliveryResult, PingEvent, PostbackEvent, PostbackReceipt
from pingbot.postback import decode_postback, encode_ping
from pingbot.scheduler import AlarmScheduler
from pingbot.services.aggregator import MarkerAggregator
from pingbot.services.dispatcher import NotificationDispatcher
from pingbot.services.summary import compose_summary, render_marker_line, render_ping_line
from pingbot.store.ping_store import PingStore
from pingbot.store.subscriber_store import SubscriberStore
from pingbot.store.user_registry import UserRegistry
from pingbot.time_utils import now_ms


logger = logging.getLogger(__name__)


class PingBotState:
    """Single owner of live pings and subscribed users.

    Every read-modify-write of either collection runs under one lock; network
    calls (pushes, telemetry, persistence) always run outside it. Built once
    per process and handed to the request handlers.
    """

    def __init__(
        self,
        aggregator: MarkerAggregator,
        dispatcher: NotificationDispatcher,
        *,
        subscriber_store: Optional[SubscriberStore] = None,
        alarm_interval_seconds: float = 30,
        ping_ttl_seconds: int = 60,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.aggregator = aggregator
        self.dispatcher = dispatcher
        self.subscriber_store = subscriber_store
        self.clock = clock
        self.pings = PingStore(ttl_ms=ping_ttl_seconds * 1000, clock=clock)
        self.users = UserRegistry()
        self.scheduler = AlarmScheduler(self.run_summary, period_seconds=alarm_interval_seconds)
        self.start_time = datetime.now(timezone.utc)
        self.last_tick_dt: Optional[datetime] = None
        self.last_summary_dt: Optional[datetime] = None
        self._lock = asyncio.Lock()
        self._persist_lock = asyncio.Lock()

    # ---------- alarm ----------

    async def alarm_init(self, enabled: bool) -> Optional[int]:
        return await self.scheduler.init(enabled)

    async def run_summary(self) -> Optional[List[DeliveryResult]]:
        """Push a summary of active pings and external markers to every user.

        Sends nothing when there is nothing to report. Never raises.
        """
        self.last_tick_dt = datetime.now(timezone.utc)
        try:
            try:
                pings = await self.get_postback_data()
            except Exception as exc:
                logger.exception("Reading pings for summary failed: %s", exc)
                pings = []
            now = self.clock()
            ping_lines = [render_ping_line(ping, now) for ping in pings]

            try:
                markers = await self.aggregator.fetch()
            except Exception as exc:
                logger.exception("Marker aggregation failed: %s", exc)
                markers = []
            marker_lines = [render_marker_line(marker) for marker in markers]
            logger.info("Summary tick: %d pings, %d markers", len(ping_lines), len(marker_lines))

            if not ping_lines and not marker_lines:
                return None

            recipients = await self.list_users()
            results = await self.dispatcher.broadcast(compose_summary(ping_lines, marker_lines), recipients)
            self.last_summary_dt = datetime.now(timezone.utc)
            return results
        except Exception as exc:
            logger.exception("Unhandled error in summary job: %s", exc)
            return None

    # ---------- pings ----------

    async def store_ping_event(self, candidate: PingEvent) -> str:
        logger.info("Storing ping event %s from %s", candidate.random_phrase, candidate.origin)
        async with self._lock:
            stored = self.pings.insert(candidate)
        return encode_ping(stored)

    async def store_postback(self, event: PostbackEvent) -> PostbackReceipt:
        logger.info("Storing postback event from %s: %s", event.user_id, event.data)
        await self.store_ping_event(decode_postback(event.data, sender=event.user_id))
        return PostbackReceipt(reply_token=event.reply_token, coords=event.data)

    async def get_postback_data(self) -> List[PingEvent]:
        async with self._lock:
            return self.pings.read_active()

    # ---------- users ----------

    async def track_user(self, user_id: str) -> None:
        async with self._lock:
            self.users.add(user_id)
        await self._persist_users()

    async def remove_user(self, user_id: str) -> None:
        async with self._lock:
            self.users.remove(user_id)
        await self._persist_users()

    async def remove_all_users(self) -> None:
        logger.info("Removing all users")
        async with self._lock:
            self.users.clear()
        await self._persist_users()

    async def list_users(self) -> List[str]:
        async with self._lock:
            return self.users.list_all()

    async def load_users(self) -> None:
        if self.subscriber_store is None:
            return
        try:
            user_ids = await asyncio.to_thread(self.subscriber_store.load)
        except Exception as exc:
            logger.error("Failed to load subscribers: %s", exc)
            return
        async with self._lock:
            self.users.replace_all(user_ids)
        logger.info("Loaded %d subscribers", len(user_ids))

    async def _persist_users(self) -> None:
        if self.subscriber_store is None:
            return
        # Snapshot under the persist lock so saves never write stale data.
        async with self._persist_lock:
            user_ids = await self.list_users()
            try:
                await asyncio.to_thread(self.subscriber_store.save, user_ids)
            except Exception as exc:
                logger.error("Failed to persist subscribers: %s", exc)

    # ---------- health ----------

    @property
    def uptime_seconds(self) -> int:
        return int((datetime.now(timezone.utc) - self.start_time).total_seconds())

    def as_health_payload(self) -> Dict[str, Any]:
        return {
            "alarm_armed": self.scheduler.armed,
            "next_alarm_ms": self.scheduler.next_fire_ms,
            "alarm_fires": self.scheduler.fire_count,
            "last_tick_dt": self.last_tick_dt.isoformat() if self.last_tick_dt else None,
            "last_summary_dt": self.last_summary_dt.isoformat() if self.last_summary_dt else None,
            "active_pings": len(self.pings),
            "subscribers": len(self.users),
        }

    async def shutdown(self) -> None:
        await self.scheduler.shutdown()
