from __future__ import annotations

import hmac
from typing import Any, Dict, List, Optional

from pingbot.models import PingEvent
from pingbot.state import PingBotState


def bearer_token(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def is_authorized(expected_token: str, header: Optional[str]) -> bool:
    token = bearer_token(header)
    if not expected_token or token is None:
        return False
    return hmac.compare_digest(token.encode("utf-8"), expected_token.encode("utf-8"))


def ping_view(ping: PingEvent) -> Dict[str, Any]:
    lat, _, lon = ping.latlong.replace(" ", "").partition(",")
    return {
        "city": ping.city,
        "title": ping.title,
        "lat": lat,
        "lon": lon,
        "expiry": ping.expiry,
        "UID": ping.random_phrase,
    }


async def list_pings(state: PingBotState, demo_active: bool) -> List[Dict[str, Any]]:
    """Active pings for display. Reading also drops expired pings from the store."""
    if not demo_active:
        return []
    return [ping_view(ping) for ping in await state.get_postback_data()]
