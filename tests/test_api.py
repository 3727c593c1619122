"""
API tests: HTTP endpoints and the /ws/chant websocket, using FastAPI's TestClient.
State is written to a temporary file.
Run: python3 -m unittest tests.test_api -v
"""
import os
import tempfile
import unittest
from unittest.mock import patch

from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

import config
import metrics.chant_metrics as chant_metrics
from core.counter import ChantCounterState
from core.mantra import MAHA_MANTRA_WORDS
from main import create_app
from storage.state_store import ChantStateStore
from streaming.chant_engine import ChantEngine

MANTRA = " ".join(MAHA_MANTRA_WORDS)


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        chant_metrics.reset()
        self._tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self._tmp.name, "chant_state.json")
        self.store = ChantStateStore(self.path)
        self.engine = ChantEngine(initial_state=self.store.load(), metrics=chant_metrics)
        self.client = TestClient(create_app(engine=self.engine, store=self.store))

    def tearDown(self):
        self._tmp.cleanup()


class TestHttpApi(ApiTestCase):
    def test_health(self):
        r = self.client.get("/")
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["state"], {"count": 0, "round": 0, "lifetime_count": 0})

    def test_streamed_transcript_confirms_on_fourth_fragment(self):
        fragments = [
            "hare krishna hare krishna",
            "krishna krishna hare hare",
            "hare rama hare rama",
            "rama rama hare hare",
        ]
        results = [self.client.post("/transcript", json={"text": f}).json() for f in fragments]
        self.assertEqual([r["confirmed"] for r in results], [False, False, False, True])
        self.assertEqual(results[2]["progress"], 12)
        self.assertEqual(self.client.get("/state").json()["count"], 1)

    def test_interim_transcript_ignored(self):
        r = self.client.post("/transcript", json={"text": MANTRA, "is_final": False})
        self.assertFalse(r.json()["confirmed"])
        self.assertEqual(chant_metrics.get_snapshot()["interim_fragments_ignored"], 1)

    def test_tap_persists(self):
        r = self.client.post("/tap", json={"source": "keyboard"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["milestone"], "tick")
        self.assertEqual(r.json()["source"], "keyboard")
        self.client.post("/tap")
        self.assertEqual(ChantStateStore(self.path).load(), ChantCounterState(count=2, round=0, lifetime_count=2))
        self.assertEqual(self.client.get("/stats/week").json()["days"][-1], 2)
        self.assertEqual(self.client.get("/stats").json()["streak"], 1)

    def test_reset(self):
        self.client.post("/tap")
        r = self.client.post("/reset")
        self.assertEqual(r.json(), {"count": 0, "round": 0, "lifetime_count": 1})
        self.assertEqual(ChantStateStore(self.path).load().lifetime_count, 1)

    def test_mode(self):
        self.assertEqual(self.client.post("/mode/tap").json()["mode"], "tap")
        self.assertEqual(self.client.post("/mode/chanting").status_code, 400)

    def test_metrics(self):
        self.client.post("/transcript", json={"text": MANTRA})
        snap = self.client.get("/metrics/chant").json()
        self.assertEqual(snap["voice_confirmations"], 1)
        self.assertEqual(snap["fragments_ingested"], 1)
        self.assertIsNotNone(snap["avg_ingest_latency_ms"])

    def test_round_logged(self):
        for _ in range(108):
            self.client.post("/tap")
        milestones = self.client.get("/stats/milestones").json()["milestones"]
        self.assertEqual(len(milestones), 1)
        self.assertEqual(milestones[0]["round"], 1)


class TestChantWebSocket(ApiTestCase):
    def test_transcript_confirmation_pushes_milestone(self):
        with self.client.websocket_connect("/ws/chant") as ws:
            ws.send_json({"type": "transcript", "text": MANTRA, "is_final": True})
            messages = {m["type"]: m for m in (ws.receive_json(), ws.receive_json())}
            self.assertTrue(messages["ingest_result"]["confirmed"])
            self.assertEqual(messages["milestone"]["milestone"], "tick")
            self.assertEqual(messages["milestone"]["source"], "voice")
            ws.send_text("stop")
        self.assertEqual(self.engine.state.lifetime_count, 1)

    def test_partial_transcript(self):
        with self.client.websocket_connect("/ws/chant") as ws:
            ws.send_json({"type": "transcript", "text": "hare krishna hare krishna"})
            reply = ws.receive_json()
            self.assertEqual(reply["type"], "ingest_result")
            self.assertFalse(reply["confirmed"])
            self.assertEqual(reply["progress"], 4)
            ws.send_text("stop")

    def test_tap_message(self):
        with self.client.websocket_connect("/ws/chant") as ws:
            ws.send_json({"type": "tap"})
            reply = ws.receive_json()
            self.assertEqual(reply["type"], "milestone")
            self.assertEqual(reply["state"]["count"], 1)
            ws.send_text("stop")

    def test_http_tap_broadcast_to_socket(self):
        with self.client.websocket_connect("/ws/chant") as ws:
            self.client.post("/tap")
            reply = ws.receive_json()
            self.assertEqual(reply["type"], "milestone")
            self.assertEqual(reply["source"], "touch")
            ws.send_text("stop")

    def test_recognizer_error_and_bad_messages(self):
        with self.client.websocket_connect("/ws/chant") as ws:
            ws.send_json({"type": "recognizer_error", "message": "network"})
            self.assertEqual(ws.receive_json(), {"type": "warning", "message": "network"})
            ws.send_text("not json")
            self.assertEqual(ws.receive_json()["type"], "error")
            ws.send_json({"type": "dance"})
            self.assertEqual(ws.receive_json()["type"], "error")
            ws.send_text("stop")
        self.assertEqual(self.engine.state, ChantCounterState())
        snap = chant_metrics.get_snapshot()
        self.assertEqual(snap["recognizer_errors"], 1)
        self.assertEqual(snap["active_connections"], 0)


class TestDefaultApp(unittest.TestCase):
    """create_app() with no arguments: engine and store built from config."""

    def setUp(self):
        chant_metrics.reset()
        self._tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self._tmp.name, "state", "chant_state.json")
        self._patches = [
            patch.object(config, "CHANT_STATE_PATH", self.path),
            patch.object(config, "CLEAR_BUFFER_ON_MODE_CHANGE", False),
            patch.object(config, "MANTRA_DISTANCE_THRESHOLD", 1),
            patch.object(config, "WS_IDLE_TIMEOUT_SECONDS", 0.05),
        ]
        for p in self._patches:
            p.start()

    def tearDown(self):
        for p in reversed(self._patches):
            p.stop()
        self._tmp.cleanup()

    def test_resumes_state_and_applies_config(self):
        os.makedirs(os.path.dirname(self.path))
        ChantStateStore(self.path).save(ChantCounterState(count=5, round=2, lifetime_count=221))

        app = create_app()
        client = TestClient(app)
        self.assertEqual(client.get("/state").json(), {"count": 5, "round": 2, "lifetime_count": 221})
        self.assertEqual(app.state.engine.config.distance_threshold, 1)
        self.assertFalse(app.state.engine.clear_buffer_on_mode_change)

        client.post("/tap")
        self.assertEqual(ChantStateStore(self.path).load(), ChantCounterState(count=6, round=2, lifetime_count=222))

    def test_mode_change_keeps_buffer_when_disabled(self):
        client = TestClient(create_app())
        client.post("/transcript", json={"text": "hare krishna"})
        self.assertEqual(client.post("/mode/tap").json()["progress"], 2)

    def test_idle_websocket_closed(self):
        client = TestClient(create_app())
        with client.websocket_connect("/ws/chant") as ws:
            with self.assertRaises(WebSocketDisconnect):
                ws.receive_json()


if __name__ == "__main__":
    unittest.main()
