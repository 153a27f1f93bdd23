"""
Link two scraped laptop listing files and write the matched / unmatched sets.

Usage:
    python run_linking.py data/amazon.json data/flipkart.json
    python run_linking.py a.json b.json --source-a amazon --source-b flipkart --format xlsx -o outputs

Inputs:
    - two JSON arrays of scraped listings, one per source

Outputs (in --output-dir, default from LAPTOP_LINKER_OUTPUT_DIR or ./output):
    - matched_laptops.json
    - <source-a>_only_laptops.json
    - <source-b>_only_laptops.json
    - final_laptops.json
    or, with --format xlsx, linked_laptops.xlsx with one tab per set
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'src'))
import argparse

from laptop_linker.exceptions import LaptopLinkerError
from laptop_linker.linker import check_source_names
from laptop_linker.log_setup import setup_logging
from laptop_linker.pipeline import EXPORT_FORMATS, run_linking_job
from laptop_linker.vocabulary import load_vocabulary


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Link laptop listings across two sources.")
    parser.add_argument('input_a', help="JSON listing file for source A")
    parser.add_argument('input_b', help="JSON listing file for source B")
    parser.add_argument('--source-a', default='amazon', help="Source name for input A (default: amazon)")
    parser.add_argument('--source-b', default='flipkart', help="Source name for input B (default: flipkart)")
    parser.add_argument('-o', '--output-dir', default=None, help="Output directory")
    parser.add_argument('--format', dest='fmt', choices=EXPORT_FORMATS, default='json')
    parser.add_argument('--vocabulary', default=None, help="Alternative vocabulary JSON file")
    parser.add_argument('--log-level', default=None, help="DEBUG, INFO, WARNING, ERROR")
    parser.add_argument('--log-file', default=None, help="Also log to this file")
    args = parser.parse_args(argv)
    try:
        check_source_names(args.source_a, args.source_b)
    except ValueError as e:
        parser.error(str(e))
    return args


def print_summary(job):
    result = job['result']
    metrics = job['metrics']

    print("\n" + "=" * 60)
    print(f"LINKING SUMMARY: {result.source_a} x {result.source_b}")
    print("=" * 60)
    print(f"  Matched entries:        {metrics['matched_count']}")
    print(f"  {result.source_a}-only entries:".ljust(26) + f"{metrics['a_only_count']}")
    print(f"  {result.source_b}-only entries:".ljust(26) + f"{metrics['b_only_count']}")
    print(f"  Total entries:          {metrics['total_entries']}")
    print(f"  {result.source_a} match rate:".ljust(26) + f"{metrics['a_match_rate']}%")
    print(f"  {result.source_b} match rate:".ljust(26) + f"{metrics['b_match_rate']}%")
    print(f"  Max / avg fan-out:      {metrics['max_fanout']} / {metrics['avg_fanout']}")

    if metrics['brand_breakdown']:
        print("\n  By brand:")
        for brand, statuses in sorted(metrics['brand_breakdown'].items()):
            parts = ', '.join(f"{status}={count}" for status, count in sorted(statuses.items()))
            print(f"    {brand:<12} {parts}")

    print(f"\nFiles generated:")
    for i, path in enumerate(job['files'], 1):
        print(f"  {i}. {path}")
    print(f"\nDone in {job['elapsed_s']:.1f}s")


def main(argv=None):
    args = parse_args(argv)
    setup_logging(level=args.log_level, log_file=args.log_file)

    try:
        vocabulary = load_vocabulary(args.vocabulary) if args.vocabulary else None
        job = run_linking_job(
            args.input_a, args.input_b,
            source_a=args.source_a, source_b=args.source_b,
            out_dir=args.output_dir, fmt=args.fmt,
            vocabulary=vocabulary,
        )
    except LaptopLinkerError as e:
        print(f"ERROR: {e}")
        return 1

    print_summary(job)
    return 0


if __name__ == '__main__':
    sys.exit(main())
