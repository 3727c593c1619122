#!/usr/bin/env python3
"""
Benchmark chant recognition on labeled transcript streams.

Usage:
  python scripts/run_benchmark.py dataset/noisy_chants.json
  python scripts/run_benchmark.py dataset/noisy_chants.json --threshold 1 --limit 100 -o report.json

Expects JSON: list of {"sample_id": "...", "fragments": ["hare krishna ...", ...], "expected_count": 2}
"""
import argparse
import json
import logging
import os
import sys

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import get_engine_config
from core.mantra import EngineConfig
from evaluation.benchmark_runner import run_benchmark, write_report


def main():
    parser = argparse.ArgumentParser(description="Benchmark chant recognition on a transcript dataset")
    parser.add_argument("dataset", help="Path to dataset JSON")
    parser.add_argument("--threshold", type=int, default=None, help="Override fuzzy edit-distance threshold")
    parser.add_argument("--limit", type=int, default=None, help="Max samples to run")
    parser.add_argument("--output", "-o", default=None, help="Write report to JSON file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log per-sample miscounts")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    config = get_engine_config()
    if args.threshold is not None:
        config = EngineConfig(
            template=config.template,
            distance_threshold=args.threshold,
            buffer_cap=config.buffer_cap,
            buffer_keep=config.buffer_keep,
        )

    report = run_benchmark(args.dataset, config=config, limit=args.limit)
    if args.output:
        write_report(report, args.output)
        print(f"Wrote {args.output}")
    else:
        print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))

    print(f"Exact-count rate: {report.exact_rate:.2%} over {report.n_samples} samples", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
