"""
Market vocabulary: brands, series keywords, GPU families and per-source schemas.

The vocabulary is data, not code. It ships as ``vocabulary.json`` next to this
module and can be swapped with ``LAPTOP_LINKER_VOCABULARY_PATH`` to tune a new
market without touching the extraction logic.

Source schemas describe where each scraped source keeps things:

    "flipkart": {
        "record": {"title": ["productName"], "link": ["productLink", ...], ...},
        "fields": {"processor_gen": ["Processor Generation"], ...}
    }

``record`` maps RawRecord attributes to raw JSON keys (first present wins);
``fields`` maps extractor attributes to the ordered detail-field names that
are consulted before falling back to the title.
"""

import json
import re
from functools import cached_property, lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from laptop_linker.cascade import Cascade, Rule
from laptop_linker.exceptions import VocabularyError
from laptop_linker.settings import get_settings

RECORD_KEYS = ('title', 'details', 'price', 'link', 'rating')

FIELD_KEYS = (
    'brand', 'series', 'processor_name', 'processor_gen', 'processor_variant',
    'ram', 'ssd_flag', 'ssd_capacity', 'emmc_capacity', 'storage_size',
    'storage_type', 'display', 'touch', 'gpu',
)

# Generic schema for sources the vocabulary does not describe: title-only parsing
_GENERIC_SCHEMA = {
    'record': {
        'title': ['title', 'productName', 'name'],
        'details': ['details', 'technicalDetails'],
        'price': ['price'],
        'link': ['link', 'url', 'productLink'],
        'rating': ['rating'],
    },
    'fields': {key: [] for key in FIELD_KEYS},
}


class SourceSchema:
    """Raw-key and detail-field naming conventions of one listing source."""

    def __init__(self, name: str, record: Dict[str, List[str]], fields: Dict[str, List[str]]):
        self.name = name
        self.record = {key: tuple(record.get(key, ())) for key in RECORD_KEYS}
        self.fields = {key: tuple(fields.get(key, ())) for key in FIELD_KEYS}

    def record_keys(self, attribute: str) -> Tuple[str, ...]:
        return self.record.get(attribute, ())

    def detail_fields(self, attribute: str) -> Tuple[str, ...]:
        return self.fields.get(attribute, ())

    def __repr__(self) -> str:
        return f"SourceSchema({self.name!r})"


class Vocabulary:
    """Immutable view over the vocabulary file, with the cascades built from it."""

    def __init__(
        self,
        brands: List[str],
        brand_aliases: Dict[str, str],
        series_keywords: List[str],
        gpu_terms: List[str],
        sources: Dict[str, SourceSchema],
    ):
        self.brands: Tuple[str, ...] = tuple(_dedupe_lower(brands))
        self.brand_aliases: Dict[str, str] = {
            k.strip().lower(): v.strip().lower() for k, v in brand_aliases.items()
        }
        self.series_keywords: Tuple[str, ...] = tuple(_dedupe_lower(series_keywords))
        self.gpu_terms: Tuple[str, ...] = tuple(_dedupe_lower(gpu_terms))
        self.sources = dict(sources)

    @classmethod
    def from_dict(cls, data: Dict) -> 'Vocabulary':
        if not isinstance(data, dict):
            raise VocabularyError("Vocabulary root must be a JSON object")
        for key in ('brands', 'series_keywords', 'gpu_terms'):
            if not isinstance(data.get(key), list):
                raise VocabularyError(f"Vocabulary key '{key}' must be a list")
        aliases = data.get('brand_aliases', {})
        sources_raw = data.get('sources', {})
        if not isinstance(aliases, dict) or not isinstance(sources_raw, dict):
            raise VocabularyError("'brand_aliases' and 'sources' must be objects")
        for alias, brand in aliases.items():
            if not isinstance(alias, str) or not isinstance(brand, str):
                raise VocabularyError(f"Brand alias '{alias}' must be a string mapped to a string")

        sources = {}
        for name, schema in sources_raw.items():
            if not isinstance(schema, dict):
                raise VocabularyError(f"Source schema '{name}' must be an object")
            record = _name_lists(schema.get('record', {}), f"{name}.record")
            fields = _name_lists(schema.get('fields', {}), f"{name}.fields")
            sources[name.lower()] = SourceSchema(name.lower(), record, fields)
        return cls(
            brands=data['brands'],
            brand_aliases=aliases,
            series_keywords=data['series_keywords'],
            gpu_terms=data['gpu_terms'],
            sources=sources,
        )

    def source(self, name: str) -> SourceSchema:
        """Schema for a source; unknown sources get the generic title-only schema."""
        key = (name or '').strip().lower()
        if key in self.sources:
            return self.sources[key]
        return SourceSchema(key, _GENERIC_SCHEMA['record'], _GENERIC_SCHEMA['fields'])

    # -- cascades built from the vocabulary ---------------------------------

    @cached_property
    def series_cascade(self) -> Cascade:
        return Cascade.from_keywords('series', self.series_keywords)

    @cached_property
    def brand_cascade(self) -> Cascade:
        # Direct manufacturer token first, then product-line aliases (legion -> lenovo)
        brand_alt = '|'.join(re.escape(b) for b in self.brands)
        rules = [Rule('brand_token', re.compile(rf'\b({brand_alt})\b'), lambda m: m.group(1))]
        aliases = self.brand_aliases
        if aliases:
            alias_alt = '|'.join(re.escape(a) for a in sorted(aliases, key=len, reverse=True))
            rules.append(Rule(
                'brand_alias',
                re.compile(rf'\b({alias_alt})\b'),
                lambda m: aliases[m.group(1)],
            ))
        return Cascade('brand', rules)

    @cached_property
    def gpu_cascade(self) -> Cascade:
        return Cascade('gpu', [
            Rule(term, re.compile(rf'\b{re.escape(term)}')) for term in self.gpu_terms
        ])


def _name_lists(section, where: str) -> Dict[str, List[str]]:
    """Check a schema section is an object of string lists."""
    if not isinstance(section, dict):
        raise VocabularyError(f"Source schema section '{where}' must be an object")
    for key, names in section.items():
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise VocabularyError(f"'{where}.{key}' must be a list of strings")
    return section


def _dedupe_lower(values: List[str]) -> List[str]:
    """Lower-case, trim and drop repeats, keeping the first occurrence's position."""
    seen = set()
    out = []
    for value in values:
        v = str(value).strip().lower()
        if v and v not in seen:
            seen.add(v)
            out.append(v)
    return out


@lru_cache(maxsize=8)
def _load_vocabulary_file(path: str) -> Vocabulary:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise VocabularyError(f"Vocabulary file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise VocabularyError(f"Vocabulary file is not valid JSON: {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise VocabularyError(f"Vocabulary file is not UTF-8 text: {path}: {e}") from e
    except OSError as e:
        raise VocabularyError(f"Cannot read vocabulary file: {path}: {e}") from e
    return Vocabulary.from_dict(data)


def load_vocabulary(path: Optional[Path] = None) -> Vocabulary:
    """Load (and cache) the vocabulary from ``path`` or the configured default."""
    path = Path(path) if path else get_settings().vocabulary_path
    return _load_vocabulary_file(str(path.resolve()))
