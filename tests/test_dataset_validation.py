"""
Evaluation tests: dataset validation, synthetic noisy transcripts, recognition benchmark report.
"""
import json
import os
import tempfile
import unittest

from core.mantra import MAHA_MANTRA_WORDS
from evaluation.benchmark_runner import run_benchmark, write_report
from evaluation.dataset_validation import validate_dataset, ValidationReport
from evaluation.recognition_metrics import count_sample, run_samples
from evaluation.synthetic import generate_samples

MANTRA = " ".join(MAHA_MANTRA_WORDS)


class TestValidateDataset(unittest.TestCase):
    def test_valid_item(self):
        report = validate_dataset([{"sample_id": "a", "fragments": [MANTRA], "expected_count": 1}])
        self.assertEqual(report.n_valid, 1)
        self.assertTrue(report.is_valid)

    def test_missing_fragments(self):
        report = validate_dataset([{"sample_id": "a", "expected_count": 1}])
        self.assertEqual(len(report.missing_fragments), 1)
        self.assertFalse(report.is_valid)

    def test_bad_fragments(self):
        report = validate_dataset([{"fragments": "hare krishna", "expected_count": 0}])
        self.assertEqual(len(report.bad_fragments), 1)

    def test_bad_expected_count(self):
        items = [
            {"fragments": [], "expected_count": -1},
            {"fragments": [], "expected_count": "2"},
            {"fragments": [], "expected_count": True},
        ]
        report = validate_dataset(items)
        self.assertEqual(len(report.bad_expected_count), 3)

    def test_empty_transcript(self):
        report = validate_dataset([{"fragments": ["", "  "], "expected_count": 2}])
        self.assertEqual(len(report.empty_transcript), 1)

    def test_non_object_item(self):
        report = validate_dataset(["hare"])
        self.assertEqual(len(report.errors), 1)

    def test_report_to_dict(self):
        report = ValidationReport(n_total=5, n_valid=3)
        d = report.to_dict()
        self.assertEqual(d["n_total"], 5)
        self.assertEqual(d["n_valid"], 3)
        self.assertIn("missing_fragments", d)


class TestRecognitionBenchmark(unittest.TestCase):
    def test_count_sample_drains_leftovers(self):
        self.assertEqual(count_sample([MANTRA + " " + MANTRA + " " + MANTRA]), 3)
        self.assertEqual(count_sample(["hare krishna"]), 0)

    def test_synthetic_samples_counted_exactly(self):
        samples = generate_samples(40, seed=7)
        self.assertEqual(len(validate_dataset(samples).to_dict()["missing_fragments"]), 0)
        report = run_samples(samples)
        self.assertEqual(report.n_samples, 40)
        self.assertEqual(report.exact_rate, 1.0)
        self.assertEqual(report.counted_total, report.expected_total)

    def test_synthetic_is_seeded(self):
        self.assertEqual(generate_samples(5, seed=1), generate_samples(5, seed=1))

    def test_over_and_under_counted(self):
        samples = [
            {"sample_id": "over", "fragments": [MANTRA], "expected_count": 0},
            {"sample_id": "under", "fragments": ["hare krishna hare"], "expected_count": 1},
            {"sample_id": "ok", "fragments": [MANTRA], "expected_count": 1},
        ]
        report = run_samples(samples)
        self.assertEqual(report.n_exact, 1)
        self.assertEqual([s["sample_id"] for s in report.over_counted], ["over"])
        self.assertEqual([s["sample_id"] for s in report.under_counted], ["under"])
        self.assertAlmostEqual(report.mean_abs_error, 2 / 3)
        self.assertEqual(len(report.worst), 2)

    def test_run_benchmark_and_write_report(self):
        with tempfile.TemporaryDirectory() as d:
            dataset = os.path.join(d, "dataset.json")
            with open(dataset, "w", encoding="utf-8") as f:
                json.dump(generate_samples(10, seed=3), f)
            report = run_benchmark(dataset, limit=5)
            self.assertEqual(report.n_samples, 5)
            out = os.path.join(d, "report.json")
            write_report(report, out)
            with open(out, "r", encoding="utf-8") as f:
                self.assertEqual(json.load(f)["n_samples"], 5)

    def test_run_benchmark_rejects_non_list(self):
        with tempfile.TemporaryDirectory() as d:
            dataset = os.path.join(d, "dataset.json")
            with open(dataset, "w", encoding="utf-8") as f:
                json.dump({"sample_id": "x"}, f)
            with self.assertRaises(ValueError):
                run_benchmark(dataset)


if __name__ == "__main__":
    unittest.main()
