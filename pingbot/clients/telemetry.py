from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class TelemetryError(Exception):
    pass


class CatalystGatewayClient:
    """GraphQL client for the Catalyst telemetry gateway."""

    def __init__(
        self,
        gateway_url: str,
        token: str,
        *,
        timeout: float = 15,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.gateway_url = gateway_url
        self.client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
        )

    async def query(self, query: str) -> Dict[str, Any]:
        if not self.gateway_url:
            raise TelemetryError("Catalyst gateway URL not configured")
        response = await self.client.post(self.gateway_url, json={"query": query})
        if response.status_code != 200:
            raise TelemetryError(f"gateway answered {response.status_code}")
        payload = response.json()
        if not isinstance(payload, dict):
            raise TelemetryError("gateway answered with a non-object body")
        return payload

    async def aclose(self) -> None:
        await self.client.aclose()
