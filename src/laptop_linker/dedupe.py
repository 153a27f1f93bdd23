"""
Serving-time near-duplicate suppression for ranked result pages.

The store returns candidates already ranked (by rating, price, relevance).
The same physical laptop often appears several times with cosmetic title
differences, so before a page reaches the consumer we walk the ranked list
and drop candidates that look like something already accepted.

Filter Approach (per candidate, in rank order):
    1. Signature = normalized brand|model|processor|ram|storage|gpu|display
    2. Reject if similarity to ANY accepted signature is > 0.85, where
       similarity = 1 - levenshtein(a, b) / max(len(a), len(b))
       (rapidfuzz Levenshtein.normalized_similarity)
    3. Reject if, among accepted candidates of the SAME brand, the model's
       significant words (length > 2) overlap >= 60% with any accepted model
    4. Otherwise accept; stop once ``limit`` candidates are accepted

Callers over-fetch (overfetch_limit(), ~3x) to leave room for rejections.
Each call owns its scratch state; nothing is shared between calls.

Example:
    accepted:  'hp|pavilion15|i5|8gb|512gb||'
    candidate: 'hp|pavilion15s|i5|8gb|512gb||'  -> similarity 0.96 -> rejected
"""

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from loguru import logger
from rapidfuzz.distance import Levenshtein

from laptop_linker.settings import get_settings

SIGNATURE_FIELDS = ('brand', 'model', 'processor', 'ram', 'storage', 'gpu', 'display')
SIGNATURE_SEPARATOR = '|'

# Where each signature field may live in a candidate document, first hit wins.
# Covers serialized MatchedEntry / NormalizedRecord dicts and flat store rows.
_FIELD_PATHS = {
    'brand': ('specs.brand', 'brand'),
    'model': ('specs.head', 'head', 'title'),
    'processor': ('specs.processor.name', 'specs.processor', 'processor.name', 'processor'),
    'ram': ('specs.ram.size', 'specs.ram', 'ram.size', 'ram'),
    'storage': ('specs.storage.size', 'specs.storage', 'storage.size', 'storage'),
    'gpu': ('specs.gpu', 'gpu'),
    'display': ('specs.display.size', 'specs.displayInch', 'display.size', 'displayInch', 'display'),
}

_NON_WORD = re.compile(r'[^\w\s]')
_WHITESPACE = re.compile(r'\s+')


# ---------------------------------------------------------------------------
# Signatures
# ---------------------------------------------------------------------------

def normalize_signature_field(value) -> str:
    """Lower-case, strip punctuation, collapse whitespace. None -> ''."""
    if value is None:
        return ''
    s = _NON_WORD.sub('', str(value).lower())
    return _WHITESPACE.sub(' ', s).strip()


def _as_document(candidate: Any) -> Mapping:
    if isinstance(candidate, Mapping):
        return candidate
    to_dict = getattr(candidate, 'to_dict', None)
    if callable(to_dict):
        return to_dict()
    return {}


def _dig(doc: Mapping, path: str) -> Any:
    value: Any = doc
    for part in path.split('.'):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def candidate_fields(candidate: Any) -> Dict[str, str]:
    """
    Pull the signature fields out of a candidate, normalized.

    Accepts a mapping (store document) or any object with ``to_dict()``
    (MatchedEntry, NormalizedRecord). Missing fields are ''.
    """
    doc = _as_document(candidate)
    fields = {}
    for name in SIGNATURE_FIELDS:
        value = None
        for path in _FIELD_PATHS[name]:
            found = _dig(doc, path)
            # Nested objects ({'name': ..}) are reached through the longer path;
            # empty values fall through to the next path
            if isinstance(found, (Mapping, list, tuple)):
                continue
            if found is not None and str(found).strip():
                value = found
                break
        fields[name] = normalize_signature_field(value)
    return fields


def build_signature(candidate: Any) -> str:
    """Signature string used only for fuzzy comparison (never for linking)."""
    fields = candidate_fields(candidate)
    return SIGNATURE_SEPARATOR.join(fields[name] for name in SIGNATURE_FIELDS)


def signature_similarity(a: str, b: str) -> float:
    """1 - levenshtein(a, b) / max(len(a), len(b)); two empty strings -> 1.0"""
    return Levenshtein.normalized_similarity(a, b)


# ---------------------------------------------------------------------------
# Model-word overlap
# ---------------------------------------------------------------------------

def significant_words(model: str, min_length: Optional[int] = None) -> List[str]:
    """Words of a normalized model string with at least ``min_length`` characters."""
    if min_length is None:
        min_length = get_settings().significant_word_min_length
    return [w for w in normalize_signature_field(model).split(' ') if len(w) >= min_length]


def word_overlap(words: Sequence[str], other_words: Sequence[str]) -> float:
    """
    Share of common significant words, relative to the longer word list.

    Returns 0.0 when both lists are empty (nothing to compare).
    """
    denominator = max(len(words), len(other_words))
    if denominator == 0:
        return 0.0
    other = set(other_words)
    common = [w for w in words if w in other]
    return len(common) / denominator


# ---------------------------------------------------------------------------
# Filter
# ---------------------------------------------------------------------------

def overfetch_limit(limit: int, multiplier: Optional[int] = None) -> int:
    """How many ranked candidates to fetch for a page of ``limit`` results."""
    if multiplier is None:
        multiplier = get_settings().overfetch_multiplier
    return max(0, limit) * multiplier


def filter_near_duplicates(
    candidates: Iterable[Any],
    limit: int,
    similarity_threshold: Optional[float] = None,
    overlap_threshold: Optional[float] = None,
) -> List[Any]:
    """
    Drop near-duplicates from a ranked candidate sequence.

    Args:
        candidates: rank-ordered candidates (mappings or objects with to_dict())
        limit: maximum number of candidates to return
        similarity_threshold: reject when signature similarity is strictly above
        overlap_threshold: reject when same-brand model-word overlap is at least

    Returns:
        Accepted candidates (the original objects), in input rank order,
        at most ``limit`` of them.
    """
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    if limit == 0:
        return []

    cfg = get_settings()
    if similarity_threshold is None:
        similarity_threshold = cfg.similarity_threshold
    if overlap_threshold is None:
        overlap_threshold = cfg.word_overlap_threshold
    min_length = cfg.significant_word_min_length

    accepted: List[Any] = []
    accepted_signatures: List[str] = []
    accepted_models: List[tuple] = []   # (brand, significant words)
    scanned = 0

    for candidate in candidates:
        scanned += 1
        fields = candidate_fields(candidate)
        signature = SIGNATURE_SEPARATOR.join(fields[name] for name in SIGNATURE_FIELDS)

        if any(signature_similarity(signature, seen) > similarity_threshold
               for seen in accepted_signatures):
            logger.debug(f"Rejected (signature): {signature}")
            continue

        brand = fields['brand']
        words = significant_words(fields['model'], min_length)
        if any(seen_brand == brand and word_overlap(words, seen_words) >= overlap_threshold
               for seen_brand, seen_words in accepted_models):
            logger.debug(f"Rejected (model words): {signature}")
            continue

        accepted.append(candidate)
        accepted_signatures.append(signature)
        accepted_models.append((brand, words))
        if len(accepted) >= limit:
            break

    logger.debug(f"Near-duplicate filter kept {len(accepted)} of {scanned} scanned (limit {limit})")
    return accepted
