from __future__ import annotations

import time


def now_ms() -> int:
    return int(time.time() * 1000)


def seconds_until(expiry_ms: int, now: int) -> float:
    return (expiry_ms - now) / 1000
