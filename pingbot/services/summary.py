from __future__ import annotations

from typing import Sequence

from pingbot.models import ExternalMarker, PingEvent
from pingbot.time_utils import seconds_until

SUMMARY_HEADER = "Summary of Current Events: "


def render_ping_line(ping: PingEvent, now: int) -> str:
    return (
        f"Line Message: {ping.title}\n"
        f"\tUUID: {ping.random_phrase}\n"
        f"\tCoords: {ping.latlong}\n"
        f"\texpires in: {seconds_until(ping.expiry, now)}s"
    )


def render_marker_line(marker: ExternalMarker) -> str:
    return f"TAK Point: {marker.label}\n\tServer: {marker.source}\n\tCoords: {marker.latitude}, {marker.longitude}"


def compose_summary(ping_lines: Sequence[str], marker_lines: Sequence[str]) -> str:
    """Header, then every ping line, then every marker line."""
    return "\n".join([SUMMARY_HEADER, *ping_lines, *marker_lines])
