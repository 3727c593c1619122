"""
Dataset validation: every sample needs transcript fragments and a non-negative expected_count.
Output structured validation report.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Dict, Any

logger = logging.getLogger(__name__)


@dataclass
class ValidationReport:
    """Result of dataset validation."""
    n_total: int = 0
    n_valid: int = 0
    missing_fragments: List[Dict[str, Any]] = field(default_factory=list)
    bad_fragments: List[Dict[str, Any]] = field(default_factory=list)
    bad_expected_count: List[Dict[str, Any]] = field(default_factory=list)
    empty_transcript: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "n_total": self.n_total,
            "n_valid": self.n_valid,
            "missing_fragments": self.missing_fragments,
            "bad_fragments": self.bad_fragments,
            "bad_expected_count": self.bad_expected_count,
            "empty_transcript": self.empty_transcript,
            "errors": self.errors,
        }

    @property
    def is_valid(self) -> bool:
        return self.n_valid == self.n_total and not self.errors


def validate_dataset(
    items: List[Dict[str, Any]],
    sample_id_key: str = "sample_id",
) -> ValidationReport:
    """
    Validate each item has a list of string fragments and an integer expected_count >= 0.
    A sample whose fragments are all blank but expects chants is reported as empty_transcript.
    """
    report = ValidationReport()
    report.n_total = len(items)

    for i, item in enumerate(items):
        if not isinstance(item, dict):
            report.errors.append(f"Item {i} is not an object")
            continue
        sid = item.get(sample_id_key) or str(i)
        entry = {"index": i, "sample_id": sid}

        fragments = item.get("fragments")
        if fragments is None:
            report.missing_fragments.append(entry)
            continue
        if not isinstance(fragments, list) or not all(isinstance(f, str) for f in fragments):
            report.bad_fragments.append(entry)
            continue

        expected = item.get("expected_count")
        if isinstance(expected, bool) or not isinstance(expected, int) or expected < 0:
            report.bad_expected_count.append({**entry, "expected_count": expected})
            continue

        if expected > 0 and not any(f.strip() for f in fragments):
            report.empty_transcript.append(entry)
            continue

        report.n_valid += 1

    if report.n_valid != report.n_total:
        logger.warning("Dataset validation: %d of %d samples invalid", report.n_total - report.n_valid, report.n_total)
    return report
