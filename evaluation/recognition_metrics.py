"""
Recognition metrics over labeled transcript streams.

Each sample is a list of final transcript fragments plus the number of chants
actually recited. A fresh engine counts each sample; the report tracks exact
counts, over-counting (false confirmations) and under-counting (missed chants).
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.mantra import EngineConfig
from streaming.chant_engine import ChantEngine

logger = logging.getLogger(__name__)


@dataclass
class SampleResult:
    """Single sample: expected vs counted chants."""
    sample_id: str
    expected: int
    counted: int

    @property
    def error(self) -> int:
        return self.counted - self.expected


@dataclass
class RecognitionReport:
    """Structured report: accuracy, over/under-counted samples, worst cases."""
    n_samples: int = 0
    n_exact: int = 0
    expected_total: int = 0
    counted_total: int = 0
    mean_abs_error: float = 0.0
    over_counted: List[Dict[str, Any]] = field(default_factory=list)
    under_counted: List[Dict[str, Any]] = field(default_factory=list)
    worst: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def exact_rate(self) -> float:
        return self.n_exact / self.n_samples if self.n_samples else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "n_samples": self.n_samples,
            "n_exact": self.n_exact,
            "exact_rate": round(self.exact_rate, 4),
            "expected_total": self.expected_total,
            "counted_total": self.counted_total,
            "mean_abs_error": round(self.mean_abs_error, 4),
            "over_counted": self.over_counted,
            "under_counted": self.under_counted,
            "worst": self.worst,
        }


def count_sample(fragments: List[str], config: Optional[EngineConfig] = None) -> int:
    """Feed fragments to a fresh engine, draining leftovers after each; return chants counted."""
    engine = ChantEngine(config=config)
    for fragment in fragments:
        confirmed = engine.ingest(fragment)
        while confirmed:
            confirmed = engine.rescan()
    return engine.state.lifetime_count


def run_samples(
    samples: List[Dict[str, Any]],
    config: Optional[EngineConfig] = None,
    sample_id_key: str = "sample_id",
    worst_n: int = 10,
) -> RecognitionReport:
    """
    Count every sample and build the report.
    samples: list of {"sample_id", "fragments": [str, ...], "expected_count": int}.
    """
    report = RecognitionReport()
    results: List[SampleResult] = []

    for i, item in enumerate(samples):
        fragments = item.get("fragments")
        if isinstance(fragments, str):
            fragments = [fragments]
        if not isinstance(fragments, list):
            continue
        sid = str(item.get(sample_id_key) or i)
        expected = int(item.get("expected_count", 0) or 0)
        counted = count_sample(fragments, config)
        results.append(SampleResult(sample_id=sid, expected=expected, counted=counted))

    if not results:
        return report

    report.n_samples = len(results)
    report.n_exact = sum(1 for r in results if r.error == 0)
    report.expected_total = sum(r.expected for r in results)
    report.counted_total = sum(r.counted for r in results)
    report.mean_abs_error = sum(abs(r.error) for r in results) / report.n_samples

    for r in results:
        entry = {"sample_id": r.sample_id, "expected": r.expected, "counted": r.counted}
        if r.error > 0:
            report.over_counted.append(entry)
            logger.warning("Over-counted sample %s: expected %d, counted %d", r.sample_id, r.expected, r.counted)
        elif r.error < 0:
            report.under_counted.append(entry)
            logger.info("Missed chants in sample %s: expected %d, counted %d", r.sample_id, r.expected, r.counted)

    by_error = sorted((r for r in results if r.error), key=lambda x: -abs(x.error))
    report.worst = [
        {"sample_id": r.sample_id, "expected": r.expected, "counted": r.counted, "error": r.error}
        for r in by_error[:worst_n]
    ]
    return report
