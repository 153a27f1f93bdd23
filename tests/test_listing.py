import pytest

from laptop_linker.listing import (
    format_brand,
    format_processor,
    format_storage,
    format_storage_size,
    summarize_entry,
)
from laptop_linker.records import MatchedEntry


@pytest.mark.parametrize("size, expected", [
    (512, "512GB"),
    (1, "1TB"),
    (2000, "2TB"),
    (1500, "1.5TB"),
    ("512gb", "512GB"),
    ("1tb", "1TB"),
    ("2", "2TB"),
    (0, ""),
    (-1, ""),
    (None, ""),
    ("abc", ""),
])
def test_format_storage_size(size, expected):
    assert format_storage_size(size) == expected


@pytest.mark.parametrize("processor, expected", [
    ({'name': 'i5', 'gen': '11', 'variant': '1135G'}, "I5 1135G (11th Gen)"),
    ({'name': 'ryzen', 'gen': '5', 'variant': '5800H'}, "Ryzen 5800H (5th Gen)"),
    ({'name': 'i7', 'gen': '12', 'variant': ''}, "I7 (12th Gen)"),
    ({'name': 'm2', 'gen': 'm2', 'variant': ''}, "M2"),
    ({}, "Unknown Processor"),
])
def test_format_processor(processor, expected):
    assert format_processor(processor) == expected


def test_format_storage():
    assert format_storage({'size': '512gb', 'type': 'ssd'}) == "512GB SSD"
    assert format_storage({'size': '', 'type': 'hdd'}) == "HDD"
    assert format_storage({}) == "Unknown Storage"


def test_format_brand():
    assert format_brand('hp') == "HP"
    assert format_brand('lenovo') == "Lenovo"
    assert format_brand('') == "Unknown Brand"


def test_summarize_matched_entry(make_record):
    a = make_record(variant='1135G', source='amazon', price=56490.0, rating=4.1)
    b = make_record(variant='1135G', source='flipkart', price=54990.0, rating=4.3)
    summary = summarize_entry(MatchedEntry.from_records('k', a, b))

    assert summary['brand'] == "HP"
    assert summary['series'] == "Pavilion"
    assert summary['lowest_price'] == 54990.0
    assert summary['best_rating'] == 4.3
    assert summary['best_rating_source'] == 'flipkart'
    assert summary['processor'] == "I5 1135G (11th Gen)"
    assert summary['ram'] == "8GB"
    assert summary['storage'] == "512GB SSD"
    assert summary['sources'] == ['amazon', 'flipkart']


def test_summarize_ignores_zero_prices(make_record):
    a = make_record(source='amazon', price=0.0)
    b = make_record(source='flipkart', price=49990.0)
    assert summarize_entry(MatchedEntry.from_records('k', a, b))['lowest_price'] == 49990.0


def test_summarize_empty_document():
    summary = summarize_entry({'specs': {}, 'sites': []})

    assert summary['brand'] == "Unknown Brand"
    assert summary['lowest_price'] is None
    assert summary['best_rating'] is None
    assert summary['processor'] == "Unknown Processor"
    assert summary['ram'] == "Unknown RAM"
    assert summary['storage'] == "Unknown Storage"
