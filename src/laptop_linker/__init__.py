"""
laptop-linker: cross-source laptop listing linkage and near-duplicate suppression.

Modules:
    attributes  - title / detail-field parsing into normalized records
    match_key   - deterministic composite key for exact-match bucketing
    linker      - bucketed cross-source join (matched / A-only / B-only)
    dedupe      - fuzzy near-duplicate filter for ranked result pages
    listing     - display summaries for linked entries
    pipeline    - batch job: load JSON listings, link, export
"""

__version__ = "0.3.0"
