from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from jsonschema import Draft202012Validator, ValidationError

from pingbot.models import (
    FollowEvent,
    LocationMessage,
    MessageEvent,
    PostbackEvent,
    TextMessage,
    UnfollowEvent,
    WebhookEvent,
)

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "line_webhook.schema.json"
EVENT_TYPES = ("message", "follow", "unfollow", "postback")


def verify_signature(secret: str, body: bytes, signature_header: Optional[str]) -> bool:
    """Check the ``x-line-signature`` header: base64 HMAC-SHA256 of the raw body."""
    if not secret or not signature_header:
        return False
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    try:
        signature = base64.b64decode(signature_header, validate=True)
    except (binascii.Error, ValueError):
        return False
    return hmac.compare_digest(digest, signature)


class WebhookValidator:
    def __init__(self, schema_path: Path = DEFAULT_SCHEMA_PATH) -> None:
        with schema_path.open("r", encoding="utf-8") as f:
            self.schema: Dict[str, Any] = json.load(f)
        self._validator = Draft202012Validator(self.schema)
        self._event_validators = {
            name: Draft202012Validator({"$defs": self.schema["$defs"], "$ref": f"#/$defs/{name}"})
            for name in EVENT_TYPES
        }

    def validate(self, payload: Dict[str, Any]) -> None:
        self._validator.validate(payload)

    def decode(self, payload: Dict[str, Any]) -> List[WebhookEvent]:
        """Validate the envelope and decode every recognised event.

        Events of other types, or failing their schema, are skipped.
        """
        self.validate(payload)
        events: List[WebhookEvent] = []
        for raw in payload["events"]:
            event_type = raw.get("type")
            validator = self._event_validators.get(event_type) if isinstance(event_type, str) else None
            if validator is None:
                logger.debug("Ignoring webhook event of type %s", event_type)
                continue
            try:
                validator.validate(raw)
            except ValidationError as exc:
                logger.warning("Skipping malformed %s event: %s", event_type, exc.message)
                continue
            events.append(_decode_event(raw))
        return events


def _decode_event(raw: Dict[str, Any]) -> WebhookEvent:
    user_id = raw["source"]["userId"]
    if raw["type"] == "message":
        message = raw["message"]
        if message["type"] == "location":
            body = LocationMessage(
                id=message["id"],
                latitude=message["latitude"],
                longitude=message["longitude"],
                address=message["address"],
            )
        else:
            body = TextMessage(id=message["id"], text=message["text"])
        return MessageEvent(user_id=user_id, reply_token=raw["replyToken"], message=body)
    if raw["type"] == "follow":
        return FollowEvent(user_id=user_id, reply_token=raw["replyToken"])
    if raw["type"] == "unfollow":
        return UnfollowEvent(user_id=user_id)
    return PostbackEvent(user_id=user_id, reply_token=raw["replyToken"], data=raw["postback"]["data"])
