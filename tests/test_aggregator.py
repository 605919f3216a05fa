from __future__ import annotations

import asyncio
import sys
import unittest
from pathlib import Path
from typing import Any, Dict

import httpx

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from pingbot.clients.telemetry import CatalystGatewayClient, TelemetryError
from pingbot.models import ExternalMarker
from pingbot.services.aggregator import MarkerAggregator, build_marker_query


def marker(uid: str, callsign: str, lat: float, lon: float, namespace: str) -> Dict[str, Any]:
    return {"uid": uid, "callsign": callsign, "lat": lat, "lon": lon, "namespace": namespace}


class FakeTelemetry:
    """Answers per marker field: a payload dict, or an exception to raise."""

    def __init__(self, answers: Dict[str, Any]) -> None:
        self.answers = answers
        self.queries = []

    async def query(self, query: str) -> Dict[str, Any]:
        self.queries.append(query)
        for field, answer in self.answers.items():
            if field in query:
                if isinstance(answer, Exception):
                    raise answer
                if answer == "hang":
                    await asyncio.sleep(10)
                return answer
        raise AssertionError(f"unexpected query {query}")


class MarkerAggregatorTests(unittest.IsolatedAsyncioTestCase):
    async def test_failed_query_does_not_affect_sibling(self) -> None:
        telemetry = FakeTelemetry(
            {
                "TAK1Markers": httpx.ConnectError("boom"),
                "TAK2Markers": {"data": {"TAK2Markers": [marker("u1", "X", 1.0, 2.0, "tak2")]}},
            }
        )
        aggregator = MarkerAggregator(telemetry, ["TAK1Markers", "TAK2Markers"])

        markers = await aggregator.fetch()

        self.assertEqual([ExternalMarker(id="u1", label="X", latitude=1.0, longitude=2.0, source="tak2")], markers)
        self.assertEqual(2, len(telemetry.queries))

    async def test_results_keep_query_then_source_order(self) -> None:
        telemetry = FakeTelemetry(
            {
                "TAK1Markers": {"data": {"TAK1Markers": [marker("a", "A", 1, 1, "one"), marker("b", "B", 2, 2, "one")]}},
                "TAK2Markers": {"data": {"TAK2Markers": [marker("c", "C", 3, 3, "two")]}},
            }
        )
        aggregator = MarkerAggregator(telemetry, ["TAK1Markers", "TAK2Markers"])

        markers = await aggregator.fetch()

        self.assertEqual(["A", "B", "C"], [m.label for m in markers])

    async def test_error_envelope_and_malformed_payloads_count_as_empty(self) -> None:
        telemetry = FakeTelemetry(
            {
                "TAK1Markers": {"errors": [{"message": "nope"}], "data": None},
                "TAK2Markers": {"data": {"TAK2Markers": [{"uid": "x"}]}},
                "TAK3Markers": {"data": {"TAK3Markers": "not a list"}},
                "TAK4Markers": {"data": None},
            }
        )
        aggregator = MarkerAggregator(telemetry, ["TAK1Markers", "TAK2Markers", "TAK3Markers", "TAK4Markers"])

        self.assertEqual([], await aggregator.fetch())

    async def test_all_queries_failing_returns_empty(self) -> None:
        telemetry = FakeTelemetry({"TAK1Markers": RuntimeError("down"), "TAK2Markers": TelemetryError("500")})
        aggregator = MarkerAggregator(telemetry, ["TAK1Markers", "TAK2Markers"])

        self.assertEqual([], await aggregator.fetch())

    async def test_slow_query_times_out_alone(self) -> None:
        telemetry = FakeTelemetry(
            {
                "TAK1Markers": "hang",
                "TAK2Markers": {"data": {"TAK2Markers": [marker("u1", "X", 1.0, 2.0, "tak2")]}},
            }
        )
        aggregator = MarkerAggregator(telemetry, ["TAK1Markers", "TAK2Markers"], timeout_seconds=0.05)

        markers = await aggregator.fetch()

        self.assertEqual(["X"], [m.label for m in markers])

    def test_query_names_the_marker_field(self) -> None:
        query = build_marker_query("TAK1Markers")

        self.assertIn("TAK1Markers", query)
        for name in ("uid", "callsign", "lat", "lon", "namespace"):
            self.assertIn(name, query)


class CatalystGatewayClientTests(unittest.IsolatedAsyncioTestCase):
    def _client(self, handler) -> CatalystGatewayClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return CatalystGatewayClient("https://gateway.example/graphql", "secret", client=http)

    async def test_posts_query_and_returns_payload(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = request.content
            return httpx.Response(200, json={"data": {"TAK1Markers": []}})

        client = self._client(handler)
        payload = await client.query("query { TAK1Markers { uid } }")
        await client.aclose()

        self.assertEqual({"data": {"TAK1Markers": []}}, payload)
        self.assertIn(b"TAK1Markers", seen["body"])

    async def test_non_200_raises(self) -> None:
        client = self._client(lambda request: httpx.Response(502, text="bad gateway"))

        with self.assertRaises(TelemetryError):
            await client.query("query { x }")
        await client.aclose()


if __name__ == "__main__":
    unittest.main()
