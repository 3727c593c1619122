"""
Unit tests for chant engine metrics (counters and latency snapshot).
"""
import unittest

import metrics.chant_metrics as chant_metrics


class TestChantMetrics(unittest.TestCase):
    def setUp(self):
        chant_metrics.reset()

    def test_empty_snapshot(self):
        s = chant_metrics.get_snapshot()
        for key in ("active_connections", "fragments_ingested", "voice_confirmations", "taps",
                    "buffer_overflows", "recognizer_errors", "avg_ingest_latency_ms", "p95_ingest_latency_ms"):
            self.assertIn(key, s)
        self.assertIsNone(s["avg_ingest_latency_ms"])
        self.assertEqual(s["latency_sample_count"], 0)

    def test_counters(self):
        chant_metrics.record_fragment()
        chant_metrics.record_fragment()
        chant_metrics.record_confirmation()
        chant_metrics.record_tap()
        chant_metrics.record_overflow()
        s = chant_metrics.get_snapshot()
        self.assertEqual(s["fragments_ingested"], 2)
        self.assertEqual(s["voice_confirmations"], 1)
        self.assertEqual(s["taps"], 1)
        self.assertEqual(s["buffer_overflows"], 1)

    def test_connections_never_negative(self):
        chant_metrics.record_connection_close()
        self.assertEqual(chant_metrics.get_snapshot()["active_connections"], 0)
        chant_metrics.record_connection_open()
        self.assertEqual(chant_metrics.get_snapshot()["active_connections"], 1)

    def test_latency_stats(self):
        for ms in range(1, 101):
            chant_metrics.record_ingest_latency_ms(float(ms))
        s = chant_metrics.get_snapshot()
        self.assertEqual(s["latency_sample_count"], 100)
        self.assertAlmostEqual(s["avg_ingest_latency_ms"], 50.5)
        self.assertEqual(s["p95_ingest_latency_ms"], 95.0)


if __name__ == "__main__":
    unittest.main()
