from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from pingbot.models import GeocodeResult

logger = logging.getLogger(__name__)

MAPTOOLKIT_HOST = "maptoolkit.p.rapidapi.com"


class GeocodingClient:
    def __init__(
        self,
        api_key: str,
        *,
        countrycodes: str = "TW,US",
        language: str = "en",
        timeout: float = 15,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_key = api_key
        self.countrycodes = countrycodes
        self.language = language
        self.client = client or httpx.AsyncClient(
            base_url=f"https://{MAPTOOLKIT_HOST}",
            timeout=timeout,
            headers={"X-RapidAPI-Key": api_key, "X-RapidAPI-Host": MAPTOOLKIT_HOST},
        )

    async def search(self, query: str) -> List[GeocodeResult]:
        params = {"q": query, "countrycodes": self.countrycodes, "language": self.language, "limit": "1"}
        response = await self.client.get("/geocode/search", params=params)
        response.raise_for_status()
        return [_parse_result(item) for item in response.json()]

    async def aclose(self) -> None:
        await self.client.aclose()


def _parse_result(item: Dict[str, Any]) -> GeocodeResult:
    address = item.get("address") or {}
    return GeocodeResult(
        lat=str(item["lat"]),
        lon=str(item["lon"]),
        display_name=item.get("display_name", ""),
        neighbourhood=address.get("neighbourhood"),
        suburb=address.get("suburb"),
        village=address.get("village"),
        city=address.get("city"),
        country=address.get("country"),
        postcode=address.get("postcode"),
    )


def city_label(result: GeocodeResult) -> str:
    parts = [part for part in (result.neighbourhood, result.suburb, result.village, result.city) if part]
    return ", ".join(parts) if parts else result.display_name
