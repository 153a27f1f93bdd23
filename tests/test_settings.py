import json

import pytest
from loguru import logger
from pydantic import ValidationError

from laptop_linker.attributes import normalize_record
from laptop_linker.exceptions import LaptopLinkerError, VocabularyError
from laptop_linker.log_setup import setup_logging
from laptop_linker.records import RawRecord
from laptop_linker.settings import DEFAULT_VOCABULARY_PATH, LinkerSettings, get_settings
from laptop_linker.vocabulary import Vocabulary, load_vocabulary


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

def test_defaults():
    settings = LinkerSettings()
    assert settings.similarity_threshold == 0.85
    assert settings.word_overlap_threshold == 0.60
    assert settings.significant_word_min_length == 3
    assert settings.overfetch_multiplier == 3
    assert settings.vocabulary_path == DEFAULT_VOCABULARY_PATH


def test_env_override(monkeypatch):
    monkeypatch.setenv('LAPTOP_LINKER_SIMILARITY_THRESHOLD', '0.9')
    monkeypatch.setenv('LAPTOP_LINKER_PARALLEL_NORMALIZATION', 'false')
    settings = LinkerSettings()
    assert settings.similarity_threshold == 0.9
    assert settings.parallel_normalization is False


@pytest.mark.parametrize("name, value", [
    ('LAPTOP_LINKER_SIMILARITY_THRESHOLD', '1.5'),
    ('LAPTOP_LINKER_OVERFETCH_MULTIPLIER', '0'),
])
def test_invalid_values_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        LinkerSettings()


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

def test_packaged_vocabulary(vocabulary):
    assert 'lenovo' in vocabulary.brands
    assert vocabulary.series_keywords[0] == 'legion'
    assert vocabulary.gpu_terms == ('rtx', 'gtx', 'radeon', 'intel')
    assert vocabulary.source('amazon').detail_fields('ram')[0] == 'RAM_Size'


def test_unknown_source_gets_generic_schema(vocabulary):
    schema = vocabulary.source('Croma')
    assert schema.name == 'croma'
    assert schema.detail_fields('brand') == ()
    assert 'title' in schema.record_keys('title')


def test_custom_vocabulary_file(tmp_path):
    path = tmp_path / 'vocab.json'
    path.write_text(json.dumps({
        'brands': ['acme'],
        'brand_aliases': {},
        'series_keywords': ['rocket'],
        'gpu_terms': ['rtx'],
        'sources': {},
    }), encoding='utf-8')
    vocab = load_vocabulary(path)

    record = normalize_record(RawRecord(title='Acme Rocket 8GB 256GB SSD', source='shop'), vocab)
    assert record.brand == 'acme'
    assert record.series == 'rocket'


def test_missing_vocabulary_file(tmp_path):
    with pytest.raises(VocabularyError):
        load_vocabulary(tmp_path / 'nope.json')


def test_unreadable_vocabulary_file(tmp_path):
    path = tmp_path / 'latin.json'
    path.write_bytes(b'{"brands": ["\xe9"]}')
    with pytest.raises(VocabularyError):
        load_vocabulary(path)
    with pytest.raises(VocabularyError):
        load_vocabulary(tmp_path)


def test_invalid_vocabulary_json(tmp_path):
    path = tmp_path / 'broken.json'
    path.write_text('{"brands": [', encoding='utf-8')
    with pytest.raises(LaptopLinkerError):
        load_vocabulary(path)


@pytest.mark.parametrize("data", [
    [],
    {'brands': 'hp', 'series_keywords': [], 'gpu_terms': []},
    {'brands': [], 'series_keywords': [], 'gpu_terms': [], 'sources': []},
    {'brands': [], 'series_keywords': [], 'gpu_terms': [], 'sources': {'x': 1}},
    {'brands': [], 'series_keywords': [], 'gpu_terms': [], 'brand_aliases': {'hewlett': 1}},
    {'brands': [], 'series_keywords': [], 'gpu_terms': [], 'brand_aliases': {1: 'hp'}},
    {'brands': [], 'series_keywords': [], 'gpu_terms': [], 'sources': {'x': {'record': ['title']}}},
    {'brands': [], 'series_keywords': [], 'gpu_terms': [], 'sources': {'x': {'fields': {'brand': 'Brand'}}}},
    {'brands': [], 'series_keywords': [], 'gpu_terms': [], 'sources': {'x': {'fields': {'ram': ['RAM', 8]}}}},
])
def test_invalid_vocabulary_structure(data):
    with pytest.raises(VocabularyError):
        Vocabulary.from_dict(data)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / 'logs' / 'linker.log'
    try:
        setup_logging(level='DEBUG', log_file=log_file)
        logger.debug('hello from the linker')
        # sinks compress the file on removal, so read it while still open
        content = log_file.read_text(encoding='utf-8')
    finally:
        logger.remove()

    assert 'hello from the linker' in content
