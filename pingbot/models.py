from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class PingEvent:
    title: str
    city: str
    latlong: str
    random_phrase: str
    expiry: int
    origin: str = "unknown"


@dataclass(frozen=True)
class ExternalMarker:
    id: str
    label: str
    latitude: float
    longitude: float
    source: str


@dataclass(frozen=True)
class DeliveryResult:
    recipient: str
    ok: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class PostbackReceipt:
    reply_token: str
    coords: str


@dataclass(frozen=True)
class GeocodeResult:
    lat: str
    lon: str
    display_name: str
    neighbourhood: Optional[str] = None
    suburb: Optional[str] = None
    village: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    postcode: Optional[str] = None


# Decoded webhook events


@dataclass(frozen=True)
class TextMessage:
    id: str
    text: str


@dataclass(frozen=True)
class LocationMessage:
    id: str
    latitude: float
    longitude: float
    address: str


@dataclass(frozen=True)
class MessageEvent:
    user_id: str
    reply_token: str
    message: Union[TextMessage, LocationMessage]


@dataclass(frozen=True)
class FollowEvent:
    user_id: str
    reply_token: str


@dataclass(frozen=True)
class UnfollowEvent:
    user_id: str


@dataclass(frozen=True)
class PostbackEvent:
    user_id: str
    reply_token: str
    data: str


WebhookEvent = Union[MessageEvent, FollowEvent, UnfollowEvent, PostbackEvent]
