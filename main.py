import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pingbot.clients.geocoding import GeocodingClient
from pingbot.clients.google_sheets import SheetsClient
from pingbot.clients.line import LineClient
from pingbot.clients.telemetry import CatalystGatewayClient
from pingbot.config import load_config
from pingbot.handlers.line_router import LineWebhookRouter
from pingbot.handlers.query import is_authorized, list_pings
from pingbot.services.aggregator import MarkerAggregator
from pingbot.services.dispatcher import NotificationDispatcher
from pingbot.state import PingBotState
from pingbot.store.subscriber_store import SubscriberStore


# =========================
# Basic config
# =========================

config = load_config()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(config.service_name)

app = FastAPI()

# Clients
line_client = LineClient(config.line_channel_token)
telemetry_client = CatalystGatewayClient(config.catalyst_gateway_url, config.catalyst_gateway_token)
geocoding_client = GeocodingClient(config.rapid_api_key)

subscriber_store = None
if config.subscribers_sheet_id:
    sheets_client = SheetsClient(
        client_id=config.google_client_id,
        client_secret=config.google_client_secret,
        refresh_token=config.google_refresh_token,
        token_uri=config.google_token_uri,
        scopes=config.google_scopes,
    )
    subscriber_store = SubscriberStore(sheets_client, config.subscribers_sheet_id)

# State actor and router
STATE = PingBotState(
    MarkerAggregator(telemetry_client, config.telemetry_marker_fields, timeout_seconds=config.http_timeout_seconds),
    NotificationDispatcher(line_client, timeout_seconds=config.http_timeout_seconds),
    subscriber_store=subscriber_store,
    alarm_interval_seconds=config.alarm_interval_seconds,
    ping_ttl_seconds=config.ping_ttl_seconds,
)
router = LineWebhookRouter(
    STATE,
    line_client,
    geocoding_client,
    channel_secret=config.line_channel_secret,
    demo_active=config.demo_active,
)


# =========================
# Healthcheck
# =========================

@app.get(config.healthcheck_path)
async def healthcheck():
    """
    Healthcheck endpoint.
    Must be fast, independent, and never call external APIs.
    """

    now_utc = datetime.now(timezone.utc)

    status = "ok"
    if STATE.scheduler.armed:
        if STATE.last_tick_dt is None:
            lag_seconds = (now_utc - STATE.start_time).total_seconds()
        else:
            lag_seconds = (now_utc - STATE.last_tick_dt).total_seconds()
        if lag_seconds > config.alarm_interval_seconds * 5:
            status = "degraded"

    payload = {
        "status": status,
        "service": config.service_name,
        "time_utc": now_utc.isoformat(),
        "demo_active": config.demo_active,
        "uptime_seconds": STATE.uptime_seconds,
    }
    payload.update(STATE.as_health_payload())
    return payload


# =========================
# LINE webhook
# =========================

@app.post(config.line_webhook_path)
async def line_webhook(request: Request):
    """
    LINE webhook entrypoint. Answers 200 unless something unexpected breaks.
    """
    body = await request.body()
    try:
        result = await router.handle_body(body, request.headers.get("x-line-signature"))
    except Exception as exc:
        logger.exception("Error processing LINE webhook: %s", exc)
        return JSONResponse({"error": str(exc)}, status_code=500)
    return JSONResponse(result)


# =========================
# Query and admin
# =========================

@app.get("/pings")
async def pings(request: Request):
    if not is_authorized(config.query_api_token, request.headers.get("Authorization")):
        logger.warning("Unauthorized /pings request")
        return JSONResponse({"message": "Invalid token", "code": 401}, status_code=401)
    return await list_pings(STATE, config.demo_active)


@app.delete("/subscribers")
async def remove_subscribers(request: Request):
    if not is_authorized(config.query_api_token, request.headers.get("Authorization")):
        logger.warning("Unauthorized /subscribers request")
        return JSONResponse({"message": "Invalid token", "code": 401}, status_code=401)
    await STATE.remove_all_users()
    return {"ok": True}


# =========================
# App lifecycle
# =========================

@app.on_event("startup")
async def on_startup():
    logger.info("Service starting up, demo_active=%s", config.demo_active)
    await STATE.load_users()
    # Summaries must run regardless of LINE traffic
    await STATE.alarm_init(config.demo_active)


@app.on_event("shutdown")
async def on_shutdown():
    logger.info("Service shutting down")
    await STATE.shutdown()
    await line_client.aclose()
    await telemetry_client.aclose()
    await geocoding_client.aclose()
