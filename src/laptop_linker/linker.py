"""
Cross-source linking: bucketed exact-key join between two listing sources.

Linking Approach:
    1. Normalize both sources (independently; optionally on two threads)
    2. Bucket source-B records by match key, preserving insertion order
    3. For each source-A record, in order, look up its key:
         - bucket of n records -> n matched entries (one per B record),
           each B record is marked consumed
         - no bucket           -> one A-only entry
    4. Every B record never consumed becomes a B-only entry, emitted in
       bucket insertion order

Fan-out:
    A single A listing legitimately pairs with every B listing sharing its
    key (same laptop sold by several sellers), so matched entries are a cross
    product per key, not a one-to-one assignment.

Known Trade-offs (kept as-is):
    - Over-merging: listings whose titles yield almost nothing collapse onto
      the same near-empty key
    - False negatives: one attribute extracted differently on each side
      (e.g. generation from "11th Gen" vs none) prevents a match
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

import pandas as pd
from loguru import logger

from laptop_linker.attributes import normalize_record
from laptop_linker.match_key import build_key
from laptop_linker.records import MatchedEntry, NormalizedRecord, RawRecord
from laptop_linker.settings import get_settings
from laptop_linker.vocabulary import Vocabulary, load_vocabulary

STATUS_MATCHED = "MATCHED"
STATUS_A_ONLY = "A_ONLY"
STATUS_B_ONLY = "B_ONLY"


# ---------------------------------------------------------------------------
# Result container
# ---------------------------------------------------------------------------

@dataclass
class LinkResult:
    """Outcome of one linking run."""

    source_a: str
    source_b: str
    matched: List[MatchedEntry] = field(default_factory=list)
    a_only: List[MatchedEntry] = field(default_factory=list)
    b_only: List[MatchedEntry] = field(default_factory=list)
    # Bucket size looked up for each source-A record, in source-A order
    fanout: List[int] = field(default_factory=list)
    # Number of source-B records consumed by at least one match
    b_matched: int = 0

    @property
    def combined(self) -> List[MatchedEntry]:
        """matched + A-only + B-only, in that order."""
        return self.matched + self.a_only + self.b_only

    def counts(self) -> Dict[str, int]:
        return {
            'matched': len(self.matched),
            f'{self.source_a}_only': len(self.a_only),
            f'{self.source_b}_only': len(self.b_only),
            'total': len(self.matched) + len(self.a_only) + len(self.b_only),
        }

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            'matched': [e.to_dict() for e in self.matched],
            f'{self.source_a}_only': [e.to_dict() for e in self.a_only],
            f'{self.source_b}_only': [e.to_dict() for e in self.b_only],
        }

    def to_frame(self) -> pd.DataFrame:
        """
        One row per entry.

        Columns: status, brand, series, key, sources, n_sites, min_price,
        best_rating, plus the flattened processor / ram / storage / gpu specs.
        """
        rows = []
        for status, entries in (
            (STATUS_MATCHED, self.matched),
            (STATUS_A_ONLY, self.a_only),
            (STATUS_B_ONLY, self.b_only),
        ):
            for entry in entries:
                specs = entry.specs
                prices = [s.price for s in entry.sites if s.price > 0]
                rows.append({
                    'status': status,
                    'brand': entry.brand,
                    'series': entry.series,
                    'key': entry.key,
                    'sources': ', '.join(entry.sources),
                    'n_sites': len(entry.sites),
                    'min_price': min(prices) if prices else 0.0,
                    'best_rating': max((s.rating for s in entry.sites), default=0.0),
                    'processor': specs['processor']['name'],
                    'generation': specs['processor']['gen'],
                    'variant': specs['processor']['variant'],
                    'ram': specs['ram']['size'],
                    'storage': specs['storage']['size'],
                    'storage_type': specs['storage']['type'],
                    'gpu': specs['gpu'],
                    'display_inch': specs['displayInch'],
                    'title': specs['head'],
                    'links': ' | '.join(s.link for s in entry.sites),
                })
        columns = [
            'status', 'brand', 'series', 'key', 'sources', 'n_sites', 'min_price', 'best_rating',
            'processor', 'generation', 'variant', 'ram', 'storage', 'storage_type', 'gpu',
            'display_inch', 'title', 'links',
        ]
        return pd.DataFrame(rows, columns=columns)


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def normalize_records(
    raws: Iterable[RawRecord],
    vocabulary: Optional[Vocabulary] = None,
) -> List[NormalizedRecord]:
    """Normalize a source's raw records, preserving order."""
    vocab = vocabulary or load_vocabulary()
    return [normalize_record(raw, vocab) for raw in raws]


# ---------------------------------------------------------------------------
# Linking
# ---------------------------------------------------------------------------

def check_source_names(source_a: str, source_b: str) -> None:
    """
    Reject two sources with the same name.

    Unmatched sets and their output files are named after the source, so equal
    names (case-insensitively) would make the B-only set overwrite the A-only one.
    """
    if (source_a or '').strip().lower() == (source_b or '').strip().lower():
        raise ValueError(f"Source names must differ, got '{source_a}' and '{source_b}'")


def build_buckets(records: Sequence[NormalizedRecord]) -> Dict[str, List[int]]:
    """
    Build a lookup: match key -> indices into ``records``.

    Dict insertion order is the order in which each key was first seen, and
    indices inside a bucket follow the input order.
    """
    buckets: Dict[str, List[int]] = {}
    for idx, record in enumerate(records):
        buckets.setdefault(build_key(record), []).append(idx)
    return buckets


def link_records(
    records_a: Sequence[NormalizedRecord],
    records_b: Sequence[NormalizedRecord],
    source_a: str = 'a',
    source_b: str = 'b',
) -> LinkResult:
    """
    Join two normalized sources on exact match key.

    Output order follows source-A iteration order, ties broken by bucket
    insertion order. Inputs are not mutated; consumption is tracked in a
    run-local list.

    Raises ValueError when the two source names are equal.
    """
    check_source_names(source_a, source_b)
    buckets = build_buckets(records_b)
    consumed = [False] * len(records_b)
    result = LinkResult(source_a=source_a, source_b=source_b)

    for record_a in records_a:
        key = build_key(record_a)
        bucket = buckets.get(key, [])
        result.fanout.append(len(bucket))

        if bucket:
            for idx in bucket:
                consumed[idx] = True
                result.matched.append(MatchedEntry.from_records(key, record_a, records_b[idx]))
            if len(bucket) > 1:
                logger.debug(f"Key fan-out {len(bucket)} for '{record_a.head[:60]}'")
        else:
            result.a_only.append(MatchedEntry.from_records(key, record_a))

    result.b_matched = sum(consumed)
    for key, bucket in buckets.items():
        for idx in bucket:
            if not consumed[idx]:
                result.b_only.append(MatchedEntry.from_records(key, records_b[idx]))

    logger.info(
        f"Linked {len(records_a)} {source_a} x {len(records_b)} {source_b} listings: "
        f"{len(result.matched)} matched, {len(result.a_only)} {source_a}-only, "
        f"{len(result.b_only)} {source_b}-only ({len(buckets)} {source_b} buckets)"
    )
    return result


def link_sources(
    raw_a: Sequence[RawRecord],
    raw_b: Sequence[RawRecord],
    source_a: str = 'amazon',
    source_b: str = 'flipkart',
    vocabulary: Optional[Vocabulary] = None,
    parallel: Optional[bool] = None,
) -> LinkResult:
    """
    Normalize both raw sources and link them.

    The two normalization passes share no mutable state, so with ``parallel``
    (default from settings) they run on a two-worker thread pool; linking
    starts only after both complete.
    """
    check_source_names(source_a, source_b)
    vocab = vocabulary or load_vocabulary()
    if parallel is None:
        parallel = get_settings().parallel_normalization

    if parallel:
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix='normalize') as pool:
            future_a = pool.submit(normalize_records, raw_a, vocab)
            future_b = pool.submit(normalize_records, raw_b, vocab)
            records_a = future_a.result()
            records_b = future_b.result()
    else:
        records_a = normalize_records(raw_a, vocab)
        records_b = normalize_records(raw_b, vocab)

    return link_records(records_a, records_b, source_a=source_a, source_b=source_b)


# ---------------------------------------------------------------------------
# Coverage metrics
# ---------------------------------------------------------------------------

def compute_link_metrics(result: LinkResult) -> Dict[str, Any]:
    """
    Compute coverage metrics from a completed link result.

    Returns a dict with:
        total_entries: int - matched + A-only + B-only entries
        matched_count, a_only_count, b_only_count
        a_match_rate: % of source-A listings that found at least one partner
        b_match_rate: % of source-B listings consumed by a match
        max_fanout / avg_fanout: bucket sizes seen by matched A listings
        brand_breakdown: brand -> {status -> count}
    """
    n_a = len(result.fanout)
    matched_a = [n for n in result.fanout if n > 0]
    n_b = result.b_matched + len(result.b_only)

    df = result.to_frame()
    brand_breakdown: Dict[str, Dict[str, int]] = {}
    if not df.empty:
        df['brand'] = df['brand'].replace('', 'unknown')
        grouped = df.groupby(['brand', 'status']).size().unstack(fill_value=0)
        brand_breakdown = {
            brand: {status: int(count) for status, count in row.items() if count}
            for brand, row in grouped.iterrows()
        }

    return {
        'total_entries': len(df),
        'matched_count': len(result.matched),
        'a_only_count': len(result.a_only),
        'b_only_count': len(result.b_only),
        'a_match_rate': round(len(matched_a) / n_a * 100, 1) if n_a else 0.0,
        'b_match_rate': round(result.b_matched / n_b * 100, 1) if n_b else 0.0,
        'max_fanout': max(matched_a) if matched_a else 0,
        'avg_fanout': round(sum(matched_a) / len(matched_a), 2) if matched_a else 0.0,
        'brand_breakdown': brand_breakdown,
    }
