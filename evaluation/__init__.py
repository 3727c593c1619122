"""
Evaluation layer: recognition accuracy over labeled transcript streams, benchmark runner, dataset validation.
"""
from evaluation.recognition_metrics import (
    RecognitionReport,
    count_sample,
    run_samples,
)
from evaluation.benchmark_runner import run_benchmark, write_report
from evaluation.dataset_validation import validate_dataset, ValidationReport

__all__ = [
    "RecognitionReport",
    "count_sample",
    "run_samples",
    "run_benchmark",
    "write_report",
    "validate_dataset",
    "ValidationReport",
]
