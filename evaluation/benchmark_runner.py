"""
Benchmark runner: count chants on a labeled dataset and output structured reports.
"""
import json
import logging
from typing import Optional

from core.mantra import EngineConfig
from evaluation.recognition_metrics import RecognitionReport, run_samples

logger = logging.getLogger(__name__)


def run_benchmark(
    dataset_path: str,
    config: Optional[EngineConfig] = None,
    limit: Optional[int] = None,
    sample_id_key: str = "sample_id",
) -> RecognitionReport:
    """
    Load dataset JSON (list of {"sample_id", "fragments", "expected_count"}) and count every sample.
    """
    with open(dataset_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError("Dataset must be a list of items")
    items = data[:limit] if limit else data
    logger.info("Benchmarking %d samples from %s", len(items), dataset_path)
    return run_samples(items, config=config, sample_id_key=sample_id_key)


def write_report(report: RecognitionReport, output_path: str) -> None:
    """Write recognition report to JSON file."""
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(report.to_dict(), f, ensure_ascii=False, indent=2)
    logger.info("Wrote recognition report to %s", output_path)
