from __future__ import annotations

import sys
import unittest
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from pingbot.models import PingEvent
from pingbot.store.ping_store import PingStore


class FakeClock:
    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


def make_ping(title: str = "Alert", expiry: int = 0) -> PingEvent:
    return PingEvent(
        title=title,
        city="Harbor",
        latlong="25.03, 121.56",
        random_phrase="AMBER_RIVER_OTTER",
        expiry=expiry,
        origin="U1",
    )


class PingStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.store = PingStore(clock=self.clock)

    def test_empty_store_reads_empty(self) -> None:
        self.assertEqual([], self.store.read_active())
        self.assertEqual(0, len(self.store))

    def test_insert_sets_expiry_one_ttl_from_now(self) -> None:
        stored = self.store.insert(make_ping(expiry=123))

        self.assertEqual(self.clock.now + 60_000, stored.expiry)

    def test_alert_scenario_expires_after_ttl(self) -> None:
        self.store.insert(make_ping())

        active = self.store.read_active()
        self.assertEqual(1, len(active))
        self.assertEqual("Alert", active[0].title)
        self.assertEqual("Harbor", active[0].city)
        self.assertEqual("25.03, 121.56", active[0].latlong)
        self.assertEqual(self.clock.now + 60_000, active[0].expiry)

        self.clock.advance(61_000)
        self.assertEqual([], self.store.read_active())

    def test_read_drops_expired_entries_from_contents(self) -> None:
        self.store.insert(make_ping("old"))
        self.clock.advance(30_000)
        self.store.insert(make_ping("new"))
        self.clock.advance(30_000)

        active = self.store.read_active()

        self.assertEqual(["new"], [ping.title for ping in active])
        self.assertEqual(1, len(self.store))

    def test_ping_expiring_exactly_now_is_dropped(self) -> None:
        self.store.insert(make_ping())
        self.clock.advance(60_000)

        self.assertEqual([], self.store.read_active())
        self.assertEqual(0, len(self.store))

    def test_returned_list_is_a_copy(self) -> None:
        self.store.insert(make_ping())
        active = self.store.read_active()
        active.clear()

        self.assertEqual(1, len(self.store.read_active()))


if __name__ == "__main__":
    unittest.main()
