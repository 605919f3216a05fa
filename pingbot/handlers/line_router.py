from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from jsonschema import ValidationError

from pingbot.clients.geocoding import GeocodingClient, city_label
from pingbot.clients.line import LineClient
from pingbot.messages import (
    IDLE_TEXT,
    PROMPT_TEXT,
    WELCOME_TEXT,
    Message,
    ping_carousel,
    publish_notice,
    text_message,
)
from pingbot.models import (
    FollowEvent,
    LocationMessage,
    MessageEvent,
    PingEvent,
    PostbackEvent,
    TextMessage,
    UnfollowEvent,
)
from pingbot.phrases import random_phrase
from pingbot.state import PingBotState
from pingbot.webhook_validation import WebhookValidator, verify_signature

logger = logging.getLogger(__name__)


def parse_title_location(text: str) -> Optional[Tuple[str, str]]:
    """Split ``TITLE.LOCATION`` text; None when either part is missing."""
    parts = [part for part in text.split(".") if part.strip()]
    if len(parts) < 2:
        return None
    return parts[0], parts[1]


class LineWebhookRouter:
    def __init__(
        self,
        state: PingBotState,
        line: LineClient,
        geocoder: GeocodingClient,
        *,
        channel_secret: str,
        demo_active: bool,
        validator: Optional[WebhookValidator] = None,
        phrase_factory: Callable[[], str] = random_phrase,
    ):
        self.state = state
        self.line = line
        self.geocoder = geocoder
        self.channel_secret = channel_secret
        self.demo_active = demo_active
        self.validator = validator or WebhookValidator()
        self.phrase_factory = phrase_factory

    async def handle_body(self, body: bytes, signature: Optional[str]) -> Dict[str, Any]:
        next_alarm = await self.state.alarm_init(self.demo_active)
        logger.debug("Next alarm: %s", next_alarm)

        # LINE expects 200 even for requests we refuse.
        if not verify_signature(self.channel_secret, body, signature):
            logger.error("Invalid signature, ignoring webhook")
            return {"ok": False}

        try:
            payload = json.loads(body)
            events = self.validator.decode(payload)
        except (ValueError, ValidationError) as exc:
            logger.error("Rejecting malformed webhook body: %s", exc)
            return {"ok": False}

        messages = [event for event in events if isinstance(event, MessageEvent)]
        unfollows = [event for event in events if isinstance(event, UnfollowEvent)]
        follows = [event for event in events if isinstance(event, FollowEvent)]
        postbacks = [event for event in events if isinstance(event, PostbackEvent)]
        logger.info(
            "Webhook events: %d messages, %d follows, %d unfollows, %d postbacks",
            len(messages),
            len(follows),
            len(unfollows),
            len(postbacks),
        )

        await asyncio.gather(*(self._handle_message(event) for event in messages))
        await asyncio.gather(*(self.state.remove_user(event.user_id) for event in unfollows))
        await asyncio.gather(*(self._handle_follow(event) for event in follows))
        await asyncio.gather(*(self._handle_postback(event) for event in postbacks))
        return {"ok": True}

    def _catalog(self) -> List[Message]:
        return [ping_carousel()] if self.demo_active else []

    async def _handle_message(self, event: MessageEvent) -> None:
        notice: Optional[Message] = None
        try:
            if self.demo_active:
                if isinstance(event.message, LocationMessage):
                    notice = await self._handle_location(event, event.message)
                elif isinstance(event.message, TextMessage):
                    notice = await self._handle_text(event, event.message)
        except Exception as exc:
            logger.exception("Error processing LINE message from %s: %s", event.user_id, exc)

        reply: List[Message] = [notice] if notice else []
        reply.append(text_message(PROMPT_TEXT if self.demo_active else IDLE_TEXT))
        reply.extend(self._catalog())
        await self.line.reply(event.reply_token, reply)

    async def _handle_location(self, event: MessageEvent, message: LocationMessage) -> Message:
        encoded = await self.state.store_ping_event(
            PingEvent(
                title=f"Ping at {message.address}",
                city=message.address,
                latlong=f"{message.latitude}, {message.longitude}",
                random_phrase=self.phrase_factory(),
                expiry=0,
                origin=event.user_id or "unknown",
            )
        )
        return publish_notice(encoded)

    async def _handle_text(self, event: MessageEvent, message: TextMessage) -> Optional[Message]:
        parsed = parse_title_location(message.text)
        if parsed is None:
            return None
        title, location_query = parsed

        try:
            results = await self.geocoder.search(location_query)
        except Exception as exc:
            logger.error("Error geocoding %r: %s", location_query, exc)
            return None
        if not results:
            logger.info("No geocoding result for %r", location_query)
            return None

        best = results[0]
        encoded = await self.state.store_ping_event(
            PingEvent(
                title=title or "Unknown",
                city=city_label(best),
                latlong=f"{best.lat}, {best.lon}",
                random_phrase=self.phrase_factory(),
                expiry=0,
                origin=event.user_id or "unknown",
            )
        )
        return publish_notice(encoded)

    async def _handle_follow(self, event: FollowEvent) -> None:
        await self.state.track_user(event.user_id)
        await self.line.reply(event.reply_token, [text_message(WELCOME_TEXT), *self._catalog()])

    async def _handle_postback(self, event: PostbackEvent) -> None:
        receipt = await self.state.store_postback(event)
        await self.line.reply(
            receipt.reply_token,
            [text_message(f"Sent: {receipt.coords}"), text_message(PROMPT_TEXT), *self._catalog()],
        )
