from __future__ import annotations

from typing import Dict, Optional
from urllib.parse import parse_qs, urlencode

from pingbot.models import PingEvent


PLACEHOLDERS: Dict[str, str] = {
    "title": "no title provided",
    "city": "no city provided",
    "latlong": "no latlong provided",
    "randomPhrase": "no UID provided",
}


def encode_ping(ping: PingEvent) -> str:
    """Key/value form of a stored ping, as echoed to users and carried by buttons."""
    return urlencode(
        {
            "latlong": ping.latlong,
            "expiry": str(ping.expiry),
            "city": ping.city,
            "title": ping.title,
            "randomPhrase": ping.random_phrase,
        }
    )


def encode_button_data(title: str, city: str, latlong: str, random_phrase: str) -> str:
    return urlencode({"title": title, "city": city, "latlong": latlong, "randomPhrase": random_phrase})


def parse_fields(data: str) -> Dict[str, str]:
    parsed = parse_qs(data, keep_blank_values=True)
    return {key: values[0] for key, values in parsed.items() if values}


def decode_postback(data: str, sender: Optional[str] = None) -> PingEvent:
    """Rebuild a ping candidate from postback data.

    Missing fields fall back to fixed placeholders. The expiry is left at zero
    for the store to overwrite.
    """
    fields = parse_fields(data)
    return PingEvent(
        title=fields.get("title", PLACEHOLDERS["title"]),
        city=fields.get("city", PLACEHOLDERS["city"]),
        latlong=fields.get("latlong", PLACEHOLDERS["latlong"]),
        random_phrase=fields.get("randomPhrase", PLACEHOLDERS["randomPhrase"]),
        expiry=0,
        origin=fields.get("from") or sender or "unknown",
    )
