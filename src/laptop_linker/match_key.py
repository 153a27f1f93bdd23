"""
Deterministic match keys for exact-match bucketing.

A key is the ordered concatenation of nine normalized attributes:

    brand | series | processor.name | processor.gen | processor.variant |
    ram.size | storage.size | storage.type | gpu

Encoding:
    Each field is length-prefixed (``<len>:<value>``) and fields are joined
    with ``|``. A field value may itself contain ``|`` or ``:`` without ever
    colliding with a different field split, e.g.

        ('a|b', '')  -> '3:a|b|0:'
        ('a', 'b|')  -> '1:a|2:b|'

Empty fields are literal: an empty generation only equals another empty
generation. Two listings that both fail to extract the same attribute still
share a key on that field (over-merging risk is accepted, see DESIGN.md).
"""

from typing import Tuple

from laptop_linker.records import NormalizedRecord

KEY_FIELDS = (
    'brand',
    'series',
    'processor.name',
    'processor.gen',
    'processor.variant',
    'ram.size',
    'storage.size',
    'storage.type',
    'gpu',
)

FIELD_SEPARATOR = '|'
LENGTH_SEPARATOR = ':'


def key_fields(record: NormalizedRecord) -> Tuple[str, ...]:
    """The nine key attributes of ``record`` in KEY_FIELDS order."""
    return (
        record.brand,
        record.series,
        record.processor.name,
        record.processor.gen,
        record.processor.variant,
        record.ram.size,
        record.storage.size,
        record.storage.type,
        record.gpu,
    )


def encode_fields(values) -> str:
    return FIELD_SEPARATOR.join(f'{len(v)}{LENGTH_SEPARATOR}{v}' for v in (str(x or '') for x in values))


def build_key(record: NormalizedRecord) -> str:
    """
    Build the match key of a normalized record.

    Pure and stable across calls and processes (no hashing, no randomness).
    """
    return encode_fields(key_fields(record))


def parse_key(key: str) -> Tuple[str, ...]:
    """
    Decode a key produced by build_key back into its nine field values.

    Raises ValueError on a malformed key.
    """
    values = []
    pos = 0
    while True:
        colon = key.find(LENGTH_SEPARATOR, pos)
        if colon == -1 or not key[pos:colon].isdigit():
            raise ValueError(f"Malformed match key at offset {pos}: {key!r}")
        start = colon + 1
        end = start + int(key[pos:colon])
        if end > len(key):
            raise ValueError(f"Truncated field at offset {pos}: {key!r}")
        values.append(key[start:end])
        if end == len(key):
            break
        if key[end] != FIELD_SEPARATOR:
            raise ValueError(f"Expected '{FIELD_SEPARATOR}' at offset {end}: {key!r}")
        pos = end + 1

    if len(values) != len(KEY_FIELDS):
        raise ValueError(f"Expected {len(KEY_FIELDS)} fields, got {len(values)}: {key!r}")
    return tuple(values)
