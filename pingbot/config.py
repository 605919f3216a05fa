import os
from dataclasses import dataclass, field
from typing import List


@dataclass
class Config:
    service_name: str = "ping-broadcast-bot"
    healthcheck_path: str = "/health"

    line_channel_token: str = ""
    line_channel_secret: str = ""
    line_webhook_path: str = "/line/webhook"

    catalyst_gateway_url: str = ""
    catalyst_gateway_token: str = ""
    telemetry_marker_fields: List[str] = field(default_factory=lambda: ["TAK1Markers", "TAK2Markers"])

    rapid_api_key: str = ""
    query_api_token: str = ""

    google_client_id: str = ""
    google_client_secret: str = ""
    google_refresh_token: str = ""
    google_token_uri: str = ""
    google_scopes: str = ""
    subscribers_sheet_id: str = ""

    demo_active: bool = False
    alarm_interval_seconds: float = 30
    ping_ttl_seconds: int = 60
    http_timeout_seconds: float = 5


def _split_list(raw: str) -> List[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def load_config() -> Config:
    """Read configuration from environment variables."""

    return Config(
        service_name=os.getenv("SERVICE_NAME", "ping-broadcast-bot"),
        healthcheck_path=os.getenv("HEALTHCHECK_PATH", "/health"),
        line_channel_token=os.getenv("LINE_CHANNEL_TOKEN", ""),
        line_channel_secret=os.getenv("LINE_CHANNEL_SECRET", ""),
        line_webhook_path=os.getenv("LINE_WEBHOOK_PATH", "/line/webhook"),
        catalyst_gateway_url=os.getenv("CATALYST_GATEWAY_URL", ""),
        catalyst_gateway_token=os.getenv("CATALYST_GATEWAY_TOKEN", ""),
        telemetry_marker_fields=_split_list(os.getenv("TELEMETRY_MARKER_FIELDS", "TAK1Markers,TAK2Markers")),
        rapid_api_key=os.getenv("RAPID_API_KEY", ""),
        query_api_token=os.getenv("QUERY_API_TOKEN", ""),
        google_client_id=os.getenv("GOOGLE_CLIENT_ID", ""),
        google_client_secret=os.getenv("GOOGLE_CLIENT_SECRET", ""),
        google_refresh_token=os.getenv("GOOGLE_REFRESH_TOKEN", ""),
        google_token_uri=os.getenv("GOOGLE_TOKEN_URI", ""),
        google_scopes=os.getenv("GOOGLE_SCOPES", ""),
        subscribers_sheet_id=os.getenv("SUBSCRIBERS_SHEET_ID", ""),
        demo_active=os.getenv("DEMO_ACTIVE", "false").lower() == "true",
        alarm_interval_seconds=float(os.getenv("ALARM_INTERVAL_SECONDS", "30")),
        ping_ttl_seconds=int(os.getenv("PING_TTL_SECONDS", "60")),
        http_timeout_seconds=float(os.getenv("HTTP_TIMEOUT_SECONDS", "5")),
    )
