import json

import pytest

from laptop_linker.attributes import normalize_record
from laptop_linker.records import NormalizedRecord, Processor, Ram, RawRecord, Storage
from laptop_linker.settings import get_settings
from laptop_linker.vocabulary import load_vocabulary


AMAZON_HP_PAVILION = {
    "title": "HP Pavilion 15, 11th Gen Intel Core i5-1135G7, 8GB RAM, 512GB SSD, 15.6-inch FHD Laptop",
    "price": "₹56,490.00",
    "rating": "4.1 out of 5 stars",
    "url": "https://www.amazon.in/dp/B0HPPAV15",
    "details": {
        "Brand": "HP",
        "Series": "Pavilion 15",
        "Processor Type": "Core i5",
        "RAM Memory Installed Size": "8 GB",
        "Hard Drive Size": "512 GB",
        "Hard Disk Description": "SSD",
        "Standing screen display size": "15.6 Inches",
        "Graphics Coprocessor": "Intel Iris Xe Graphics",
    },
}

AMAZON_LEGION = {
    "title": "Lenovo Legion 5 Ryzen 7 5800H 16GB 512GB RTX 3060",
    "price": "₹1,04,990",
    "rating": "4.5 out of 5 stars",
    "url": "https://www.amazon.in/dp/B0LEGION5",
    "details": {},
}

FLIPKART_HP_PAVILION = {
    "productName": "HP Pavilion Intel Core i5 11th Gen 1135G7 - (8 GB/512 GB SSD/Windows 11 Home) Thin and Light Laptop",
    "price": "₹54,990",
    "rating": "4.3",
    "productLink": "https://www.flipkart.com/hp-pavilion/p/itm0001",
    "technicalDetails": {
        "Brand": "HP",
        "Series": "Pavilion",
        "Processor Name": "Core i5",
        "Processor Generation": "11th Gen",
        "Processor Variant": "1135G7",
        "RAM": "8 GB",
        "SSD": "Yes",
        "SSD Capacity": "512 GB",
        "Screen Size": "39.62 cm (15.6 inch)",
        "Touchscreen": "No",
        "Graphic Processor": "Intel Iris Xe Graphics",
    },
}

FLIPKART_IDEAPAD = {
    "productName": "Lenovo IdeaPad Slim 3 Intel Core i3 12th Gen 1215U - (8 GB/256 GB SSD/Windows 11 Home) 15IAU7 Laptop",
    "price": "₹36,990",
    "rating": "4.2",
    "productLink": "https://www.flipkart.com/lenovo-ideapad/p/itm0002",
    "technicalDetails": {
        "Brand": "Lenovo",
        "Series": "IdeaPad Slim 3",
        "Processor Name": "Core i3",
        "Processor Generation": "12th Gen",
        "Processor Variant": "1215U",
        "RAM": "8 GB",
        "SSD": "Yes",
        "SSD Capacity": "256 GB",
        "Screen Size": "39.62 cm (15.6 inch)",
        "Graphic Processor": "Intel UHD Graphics",
    },
}


@pytest.fixture(autouse=True)
def _fresh_settings():
    """Settings are cached per process; tests that touch the env need a clean slate."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def vocabulary():
    return load_vocabulary()


@pytest.fixture
def amazon_listings():
    return [AMAZON_HP_PAVILION, AMAZON_LEGION]


@pytest.fixture
def flipkart_listings():
    return [FLIPKART_HP_PAVILION, FLIPKART_IDEAPAD]


@pytest.fixture
def write_listings(tmp_path):
    """Write a list of listing objects to a JSON file and return its path."""
    def _write(name, listings):
        path = tmp_path / name
        path.write_text(json.dumps(listings, ensure_ascii=False), encoding='utf-8')
        return path
    return _write


@pytest.fixture
def normalize_title(vocabulary):
    """Normalize a bare title as a listing from ``source``."""
    def _normalize(title, source='amazon', **kwargs):
        return normalize_record(RawRecord(title=title, source=source, **kwargs), vocabulary)
    return _normalize


@pytest.fixture
def make_record():
    """Build a NormalizedRecord directly, bypassing extraction."""
    def _make(brand='hp', series='pavilion', name='i5', gen='11', variant='', ram='8',
              storage='512gb', storage_type='ssd', gpu='', head='', price=0.0,
              link='', rating=0.0, source='a', display_inch=None):
        return NormalizedRecord(
            brand=brand,
            series=series,
            processor=Processor(name=name, gen=gen, variant=variant),
            ram=Ram(size=ram),
            storage=Storage(size=storage, type=storage_type),
            display_inch=display_inch,
            gpu=gpu,
            head=head,
            price=price,
            link=link,
            rating=rating,
            source=source,
        )
    return _make
