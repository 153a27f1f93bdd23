"""
Display helpers for linked entries (what a product card shows).

Storage sizes follow the store's convention: a bare number below 10 is a TB
count, 1000 and above is GB shown as TB, anything else is GB.
"""

import re
from typing import Any, Dict, Mapping, Union

from laptop_linker.records import MatchedEntry

_SIZE_WITH_UNIT = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*(tb|gb)?\s*$', re.IGNORECASE)


def _format_tb(value: float) -> str:
    return f"{int(value)}TB" if value % 1 == 0 else f"{value:.1f}TB"


def format_storage_size(size: Union[str, int, float, None]) -> str:
    """
    Human-readable storage size.

    Accepts numbers (512, 1, 2000) and canonical strings ('512gb', '1tb').
    Non-positive or unparseable values give ''.
    """
    if size is None or isinstance(size, bool):
        return ''
    if isinstance(size, (int, float)):
        number, unit = float(size), ''
    else:
        m = _SIZE_WITH_UNIT.match(str(size))
        if not m:
            return ''
        number, unit = float(m.group(1)), (m.group(2) or '').lower()

    if number <= 0:
        return ''
    if unit == 'tb':
        return _format_tb(number)
    if unit == '' and number < 10:
        return _format_tb(number)
    if number >= 1000:
        return _format_tb(number / 1000)
    return f"{int(number)}GB"


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = 'th'
    else:
        suffix = {1: 'st', 2: 'nd', 3: 'rd'}.get(n % 10, 'th')
    return f"{n}{suffix}"


def format_brand(brand) -> str:
    """'hp' -> 'HP', 'lenovo' -> 'Lenovo'"""
    b = (brand or '').strip()
    if not b:
        return 'Unknown Brand'
    return b.upper() if len(b) <= 3 else b.title()


def format_processor(processor: Mapping[str, Any]) -> str:
    name = (processor.get('name') or '').strip()
    if not name:
        return 'Unknown Processor'
    parts = [name.title() if not re.match(r'^[a-z]\d+$', name) else name.upper()]
    variant = (processor.get('variant') or '').strip()
    if variant:
        parts.append(variant.upper())
    gen = str(processor.get('gen') or '').strip()
    if gen.isdigit():
        parts.append(f"({_ordinal(int(gen))} Gen)")
    return ' '.join(parts)


def format_ram(ram: Mapping[str, Any]) -> str:
    size = str(ram.get('size') or '').strip()
    return f"{size}GB" if size else 'Unknown RAM'


def format_storage(storage: Mapping[str, Any]) -> str:
    size_text = format_storage_size(storage.get('size'))
    storage_type = (storage.get('type') or '').strip()
    type_text = f" {storage_type.upper()}" if storage_type else ''
    return f"{size_text}{type_text}".strip() or 'Unknown Storage'


def summarize_entry(entry: Union[MatchedEntry, Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Card summary of one linked entry.

    Returns:
        brand, series, lowest_price (positive prices only, None if none),
        best_rating and best_rating_source, processor, ram, storage display
        strings, and the list of sources offering it.
    """
    data = entry.to_dict() if isinstance(entry, MatchedEntry) else entry
    specs = data.get('specs') or {}
    sites = data.get('sites') or []

    prices = [float(s.get('price') or 0) for s in sites]
    prices = [p for p in prices if p > 0]

    best_site = None
    for site in sites:
        rating = float(site.get('rating') or 0)
        if rating > 0 and (best_site is None or rating > float(best_site.get('rating') or 0)):
            best_site = site

    return {
        'brand': format_brand(data.get('brand')),
        'series': (data.get('series') or '').title(),
        'lowest_price': min(prices) if prices else None,
        'best_rating': float(best_site['rating']) if best_site else None,
        'best_rating_source': best_site.get('source') if best_site else None,
        'processor': format_processor(specs.get('processor') or {}),
        'ram': format_ram(specs.get('ram') or {}),
        'storage': format_storage(specs.get('storage') or {}),
        'sources': [s.get('source') for s in sites],
    }
