from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Dict, List, Optional, Protocol, Sequence

from pingbot.models import ExternalMarker

logger = logging.getLogger(__name__)


class TelemetrySource(Protocol):
    def query(self, query: str) -> Awaitable[Dict[str, Any]]: ...


def build_marker_query(field: str) -> str:
    return f"query {{\n  {field} {{\n    uid\n    callsign\n    lat\n    lon\n    namespace\n  }}\n}}"


def _parse_marker(item: Dict[str, Any]) -> ExternalMarker:
    return ExternalMarker(
        id=str(item["uid"]),
        label=str(item["callsign"]),
        latitude=float(item["lat"]),
        longitude=float(item["lon"]),
        source=str(item["namespace"]),
    )


class MarkerAggregator:
    """Fetches markers from every configured telemetry query.

    Queries run concurrently. A failing query contributes no markers and never
    affects its siblings.
    """

    def __init__(self, telemetry: TelemetrySource, marker_fields: Sequence[str], timeout_seconds: Optional[float] = 5):
        self.telemetry = telemetry
        self.marker_fields = list(marker_fields)
        self.timeout_seconds = timeout_seconds

    async def fetch(self) -> List[ExternalMarker]:
        batches = await asyncio.gather(*(self._fetch_one(field) for field in self.marker_fields))
        return [marker for batch in batches for marker in batch]

    async def _fetch_one(self, field: str) -> List[ExternalMarker]:
        try:
            payload = await asyncio.wait_for(self.telemetry.query(build_marker_query(field)), self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error("Telemetry query %s timed out after %ss", field, self.timeout_seconds)
            return []
        except Exception as exc:
            logger.error("Telemetry query %s failed: %s", field, exc)
            return []

        if not isinstance(payload, dict):
            logger.error("Telemetry query %s returned a malformed payload", field)
            return []
        if payload.get("errors"):
            logger.error("Telemetry query %s returned GraphQL errors: %s", field, payload["errors"])
            return []

        data = payload.get("data")
        items = data.get(field) if isinstance(data, dict) else None
        if items is None:
            return []
        if not isinstance(items, list):
            logger.error("Telemetry query %s returned %s instead of a list", field, type(items).__name__)
            return []

        try:
            return [_parse_marker(item) for item in items]
        except (KeyError, TypeError, ValueError) as exc:
            logger.error("Telemetry query %s returned a malformed marker: %s", field, exc)
            return []
