#!/usr/bin/env python3
"""
Validate a chant dataset JSON: fragments present and well-typed, expected_count non-negative.
Output: validation report JSON.

Usage:
  python scripts/validate_dataset.py dataset/noisy_chants.json
  python scripts/validate_dataset.py dataset/noisy_chants.json --limit 100 -o validation.json
"""
import argparse
import json
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from evaluation.dataset_validation import validate_dataset


def main():
    parser = argparse.ArgumentParser(description="Validate dataset JSON")
    parser.add_argument("dataset", help="Path to dataset JSON")
    parser.add_argument("--limit", type=int, default=None, help="Max items to validate")
    parser.add_argument("--output", "-o", default=None, help="Write report to JSON file")
    args = parser.parse_args()

    with open(args.dataset, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        print("Error: dataset must be a list", file=sys.stderr)
        return 1
    items = data[:args.limit] if args.limit else data

    report = validate_dataset(items)

    out = report.to_dict()
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(out, f, ensure_ascii=False, indent=2)
        print(f"Wrote {args.output}")
    else:
        print(json.dumps(out, ensure_ascii=False, indent=2))

    return 0 if report.is_valid else 1


if __name__ == "__main__":
    sys.exit(main())
