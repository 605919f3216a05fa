from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

LINE_API_BASE_URL = "https://api.line.me"


class LineAPIError(Exception):
    pass


class LineClient:
    def __init__(
        self,
        channel_token: str,
        *,
        base_url: str = LINE_API_BASE_URL,
        timeout: float = 15,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.channel_token = channel_token
        self.client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"Authorization": f"Bearer {channel_token}", "Content-Type": "application/json"},
        )

    async def push(self, to: str, messages: List[Dict[str, Any]]) -> None:
        """Push messages to one user. Raises on any non-2xx answer."""
        if not self.channel_token:
            raise LineAPIError("LINE channel token missing")
        response = await self.client.post("/v2/bot/message/push", json={"to": to, "messages": messages})
        response.raise_for_status()

    async def reply(self, reply_token: str, messages: List[Dict[str, Any]]) -> bool:
        if not self.channel_token:
            logger.warning("LINE token missing, skipping reply")
            return False
        try:
            response = await self.client.post(
                "/v2/bot/message/reply", json={"replyToken": reply_token, "messages": messages}
            )
            response.raise_for_status()
        except Exception as exc:
            logger.error("Failed to send LINE reply: %s", exc)
            return False
        return True

    async def aclose(self) -> None:
        await self.client.aclose()
