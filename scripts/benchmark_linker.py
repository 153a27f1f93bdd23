"""
Micro-benchmark for the linking pipeline.

Tests:
1. normalize_record() per-listing attribute extraction
2. link_records() bucketed join on synthetic sources (10k x 10k)
3. filter_near_duplicates() on a ranked page with heavy duplication

Usage:
    python benchmark_linker.py
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))
import time
import numpy as np
from laptop_linker.attributes import normalize_record
from laptop_linker.dedupe import filter_near_duplicates, overfetch_limit
from laptop_linker.linker import compute_link_metrics, link_records, normalize_records
from laptop_linker.records import RawRecord
from laptop_linker.vocabulary import load_vocabulary

BRANDS = ['HP', 'Lenovo', 'ASUS', 'Acer', 'Dell', 'MSI']
SERIES = {
    'HP': ['Pavilion', 'Victus', 'Omen', '15s'],
    'Lenovo': ['IdeaPad Slim 3', 'Legion 5', 'ThinkPad E14', 'LOQ'],
    'ASUS': ['Vivobook 15', 'TUF Gaming F15', 'ROG Strix G16', 'Zenbook 14'],
    'Acer': ['Aspire 7', 'Nitro 5', 'Swift Go 14', 'Predator Helios Neo 16'],
    'Dell': ['Inspiron 3520', 'Vostro 3420', 'G15 5530', 'Latitude 3540'],
    'MSI': ['Thin GF63', 'Katana 15', 'Modern 14', 'Cyborg 15'],
}
PROCESSORS = [
    'Intel Core i5 1235U 12th Gen',
    'Intel Core i7 13620H 13th Gen',
    'Intel Core i3 1115G4 11th Gen',
    'AMD Ryzen 5 5600H',
    'AMD Ryzen 7 7735HS',
]
RAM = ['8GB', '16GB', '32GB']
STORAGE = ['256GB SSD', '512GB SSD', '1TB SSD']
GPU = ['', 'NVIDIA GeForce RTX 3050', 'NVIDIA GeForce RTX 4060', 'AMD Radeon Graphics']


def generate_synthetic_listings(n_rows: int = 10000, seed: int = 0, source: str = 'amazon'):
    """Generate synthetic raw listings for benchmarking."""
    rng = np.random.default_rng(seed)
    records = []
    for i in range(n_rows):
        brand = rng.choice(BRANDS)
        series = rng.choice(SERIES[brand])
        title = (
            f"{brand} {series} Laptop, {rng.choice(PROCESSORS)}, "
            f"{rng.choice(RAM)} RAM, {rng.choice(STORAGE)}, {rng.choice(GPU)} "
            f"15.6 inch FHD Display"
        )
        records.append(RawRecord(
            title=title,
            price=f"₹{int(rng.integers(30000, 150000)):,}",
            link=f"https://example.com/{source}/{i}",
            rating=f"{rng.uniform(3.0, 5.0):.1f} out of 5 stars",
            source=source,
        ))
    return records


def benchmark_function(func, *args, **kwargs):
    """Benchmark a function and return (result, elapsed_ms)."""
    start = time.perf_counter()
    result = func(*args, **kwargs)
    end = time.perf_counter()
    elapsed_ms = (end - start) * 1000
    return result, elapsed_ms


def benchmark_normalize_record(n_iterations: int = 1000):
    """Benchmark normalize_record() on representative titles."""
    print("\n" + "="*70)
    print("BENCHMARK: normalize_record() - Attribute Extraction")
    print("="*70)

    vocab = load_vocabulary()
    test_titles = [
        "Lenovo Legion 5 AMD Ryzen 5 5600H 15.6 inch 16GB 512GB SSD RTX 3050",
        "HP Pavilion 15 Intel Core i5 11th Gen 1135G7 8GB 512GB SSD Windows 11",
        "ASUS Vivobook 15, Intel Core i3-1115G4 11th Gen, 8GB RAM, 256GB SSD",
        "Apple MacBook Air Laptop M2 chip 13.6-inch 8GB 256GB SSD",
    ]

    for title in test_titles:
        raw = RawRecord(title=title, source='amazon')
        start = time.perf_counter()
        for _ in range(n_iterations):
            _ = normalize_record(raw, vocab)
        end = time.perf_counter()

        elapsed_ms = (end - start) * 1000
        per_call_us = elapsed_ms * 1000 / n_iterations

        print(f"\nInput: {title}")
        print(f"  Total: {elapsed_ms:.2f}ms ({n_iterations} calls)")
        print(f"  Per call: {per_call_us:.2f}μs")


def benchmark_link_records(n_rows: int = 10000):
    """Benchmark normalization plus link_records() end-to-end."""
    print("\n" + "="*70)
    print(f"BENCHMARK: link_records() - {n_rows} x {n_rows} listings")
    print("="*70)

    print(f"\nGenerating {n_rows} synthetic listings per source...")
    raw_a = generate_synthetic_listings(n_rows, seed=1, source='amazon')
    raw_b = generate_synthetic_listings(n_rows, seed=2, source='flipkart')

    vocab = load_vocabulary()
    records_a, norm_a_time = benchmark_function(normalize_records, raw_a, vocab)
    records_b, norm_b_time = benchmark_function(normalize_records, raw_b, vocab)
    print(f"  Normalize A: {norm_a_time:.2f}ms ({len(raw_a) / (norm_a_time / 1000):.0f} rows/sec)")
    print(f"  Normalize B: {norm_b_time:.2f}ms ({len(raw_b) / (norm_b_time / 1000):.0f} rows/sec)")

    result, link_time = benchmark_function(link_records, records_a, records_b, 'amazon', 'flipkart')
    print(f"  Linking time: {link_time:.2f}ms")

    metrics = compute_link_metrics(result)
    print(f"\nLink Results:")
    print(f"  Matched entries: {metrics['matched_count']}")
    print(f"  amazon-only: {metrics['a_only_count']}")
    print(f"  flipkart-only: {metrics['b_only_count']}")
    print(f"  Max fan-out: {metrics['max_fanout']} (avg {metrics['avg_fanout']})")
    return result


def benchmark_filter_near_duplicates(limit: int = 20, n_iterations: int = 200):
    """Benchmark filter_near_duplicates() on a ranked page."""
    print("\n" + "="*70)
    print(f"BENCHMARK: filter_near_duplicates() - page of {limit}")
    print("="*70)

    vocab = load_vocabulary()
    raws = generate_synthetic_listings(overfetch_limit(limit), seed=3)
    candidates = [r.to_dict() for r in normalize_records(raws, vocab)]

    start = time.perf_counter()
    for _ in range(n_iterations):
        page = filter_near_duplicates(candidates, limit)
    end = time.perf_counter()

    elapsed_ms = (end - start) * 1000
    print(f"\n  Candidates: {len(candidates)}, kept: {len(page)}")
    print(f"  Total: {elapsed_ms:.2f}ms ({n_iterations} calls)")
    print(f"  Per call: {elapsed_ms / n_iterations:.2f}ms")


def main():
    """Run all benchmarks."""
    print("="*70)
    print("LAPTOP LINKER PERFORMANCE BENCHMARK")
    print("="*70)
    print("\nThis benchmark measures:")
    print("  1. normalize_record() - Attribute extraction")
    print("  2. link_records() - Bucketed join (10k x 10k)")
    print("  3. filter_near_duplicates() - Serving-time filter")

    benchmark_normalize_record(1000)
    benchmark_link_records(10000)
    benchmark_filter_near_duplicates(20)

    print("\n" + "="*70)
    print("BENCHMARK COMPLETE")
    print("="*70)


if __name__ == '__main__':
    main()
