import asyncio
import logging
from typing import Awaitable, Callable, Optional

from pingbot.time_utils import now_ms


logger = logging.getLogger(__name__)

DISARMED = "disarmed"
ARMED = "armed"


class AlarmScheduler:
    """
    Single repeating alarm. Each fire runs the job, then re-arms the next fire
    no matter how the job ended. If re-arming fails the alarm stays disarmed
    until the next init(True).
    """

    def __init__(self, job: Callable[[], Awaitable[object]], period_seconds: float = 30):
        self.job = job
        self.period_seconds = period_seconds
        self.state = DISARMED
        self.next_fire_ms: Optional[int] = None
        self.fire_count = 0
        self._handle: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def armed(self) -> bool:
        return self.state == ARMED

    async def init(self, enabled: bool) -> Optional[int]:
        """Arm or disarm. Repeating the current state is a no-op."""
        if enabled and self.state == DISARMED:
            self._arm()
            self.state = ARMED
            logger.info("Alarm scheduled every %ss", self.period_seconds)
        elif not enabled and self.state == ARMED:
            self._disarm()
            logger.info("Alarm disabled")
        return self.next_fire_ms

    async def tick(self) -> None:
        self.fire_count += 1
        try:
            await self.job()
        except Exception as exc:
            logger.exception("Unhandled error in alarm job: %s", exc)
        finally:
            if self.state == ARMED:
                try:
                    self._arm()
                except Exception as exc:
                    logger.error("Failed to schedule next alarm: %s", exc)
                    self._disarm()

    async def shutdown(self) -> None:
        if self.state == ARMED:
            self._disarm()
        task = self._task
        if task is not None and not task.done():
            await asyncio.gather(task, return_exceptions=True)

    def _arm(self) -> None:
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_later(self.period_seconds, self._on_timer)
        self.next_fire_ms = now_ms() + int(self.period_seconds * 1000)

    def _disarm(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self.next_fire_ms = None
        self.state = DISARMED

    def _on_timer(self) -> None:
        self._task = asyncio.get_running_loop().create_task(self.tick())
