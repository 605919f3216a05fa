from __future__ import annotations

from typing import Any, Callable, Dict, List, Sequence, Tuple

from pingbot.phrases import random_phrase
from pingbot.postback import encode_button_data, parse_fields

Message = Dict[str, Any]

PROMPT_TEXT = "Please select a message from the catalog or provide a custom message in the format {MESSAGE}.{LOCATION}"
WELCOME_TEXT = (
    "Welcome to Catalyst! Please select a message from the catalog or provide a custom message "
    "in the format {MESSAGE}.{LOCATION}"
)
IDLE_TEXT = "Hello Friend"

# (title, city, coordinates)
DEMO_CATALOG: Tuple[Tuple[str, str, str], ...] = (
    ("Ping 1", "Kinmen Island", "24.42695125386981, 118.22488092750645"),
    ("Ping 2", "Taipei", "25.033916607697982, 121.565390818944"),
    ("Ping 3", "Kaohsuing", "22.76081208289122, 120.24882050572171"),
)


def text_message(text: str) -> Message:
    return {"type": "text", "text": text}


def _text_box(lines: Sequence[str]) -> List[Message]:
    return [text_message(line) for line in lines]


def ping_carousel(
    catalog: Sequence[Tuple[str, str, str]] = DEMO_CATALOG,
    phrase_factory: Callable[[], str] = lambda: random_phrase(join="__"),
) -> Message:
    """Carousel of catalog pings, each with a Send button carrying its postback data."""
    bubbles = []
    for title, city, coords in catalog:
        phrase = phrase_factory()
        button = {
            "type": "button",
            "style": "primary",
            "action": {
                "type": "postback",
                "label": "Send",
                "data": encode_button_data(title, city, coords.replace(" ", "", 1), phrase),
            },
        }
        bubbles.append(
            {
                "type": "bubble",
                "body": {
                    "type": "box",
                    "layout": "vertical",
                    "contents": [*_text_box([title, city, f"UID: {phrase}", coords]), button],
                },
            }
        )
    return {"type": "flex", "altText": "Ping catalog", "contents": {"type": "carousel", "contents": bubbles}}


def publish_notice(encoded: str) -> Message:
    detail = parse_fields(encoded)
    return text_message(
        f"New Message Published ({detail.get('randomPhrase')}) at {detail.get('city')} "
        f"[{detail.get('latlong')}]: {detail.get('title')}"
    )
