#!/usr/bin/env python3
"""
Generate a seeded synthetic dataset of noisy chant transcripts for run_benchmark.py.

Usage:
  python scripts/generate_noisy_transcripts.py -n 500 -o dataset/noisy_chants.json
  python scripts/generate_noisy_transcripts.py -n 200 --variant-rate 0.5 --filler-rate 0.3 --seed 7
"""
import argparse
import json
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from evaluation.synthetic import generate_samples


def main():
    parser = argparse.ArgumentParser(description="Generate noisy chant transcript dataset")
    parser.add_argument("-n", "--samples", type=int, default=200, help="Number of samples")
    parser.add_argument("--seed", type=int, default=108)
    parser.add_argument("--max-chants", type=int, default=3, help="Max chants per sample")
    parser.add_argument("--variant-rate", type=float, default=0.2, help="Chance a word uses an alternate spelling")
    parser.add_argument("--filler-rate", type=float, default=0.1, help="Chance of a filler word before each mantra word")
    parser.add_argument("--output", "-o", default="dataset/noisy_chants.json")
    args = parser.parse_args()

    samples = generate_samples(
        args.samples,
        seed=args.seed,
        max_chants=args.max_chants,
        variant_rate=args.variant_rate,
        filler_rate=args.filler_rate,
    )
    out_dir = os.path.dirname(args.output)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(args.output, "w", encoding="utf-8") as f:
        json.dump(samples, f, ensure_ascii=False, indent=2)

    total = sum(s["expected_count"] for s in samples)
    print(f"Generated {len(samples)} samples ({total} chants).")
    print(f"JSON: {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
