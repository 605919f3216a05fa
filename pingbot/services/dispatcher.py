from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Dict, Iterable, List, Optional, Protocol

from pingbot.messages import text_message
from pingbot.models import DeliveryResult

logger = logging.getLogger(__name__)


class PushTransport(Protocol):
    def push(self, to: str, messages: List[Dict[str, Any]]) -> Awaitable[None]: ...


class NotificationDispatcher:
    def __init__(self, transport: PushTransport, timeout_seconds: Optional[float] = 5):
        self.transport = transport
        self.timeout_seconds = timeout_seconds

    async def broadcast(self, message: str, recipients: Iterable[str]) -> List[DeliveryResult]:
        """Push ``message`` to every recipient independently.

        Results come back in recipient order. A failed recipient is logged and
        reported, never raised.
        """
        recipients = list(recipients)
        results = await asyncio.gather(*(self._send(recipient, message) for recipient in recipients))
        failed = sum(1 for result in results if not result.ok)
        logger.info("Broadcast to %d recipients, %d failed", len(results), failed)
        return list(results)

    async def _send(self, recipient: str, message: str) -> DeliveryResult:
        try:
            await asyncio.wait_for(self.transport.push(recipient, [text_message(message)]), self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error("Push to %s timed out after %ss", recipient, self.timeout_seconds)
            return DeliveryResult(recipient=recipient, ok=False, error="timeout")
        except Exception as exc:
            logger.error("Push to %s failed: %s", recipient, exc)
            return DeliveryResult(recipient=recipient, ok=False, error=str(exc) or type(exc).__name__)
        return DeliveryResult(recipient=recipient, ok=True)
