import pytest

from laptop_linker.dedupe import (
    build_signature,
    candidate_fields,
    filter_near_duplicates,
    normalize_signature_field,
    overfetch_limit,
    signature_similarity,
    significant_words,
    word_overlap,
)
from laptop_linker.records import MatchedEntry


def doc(brand='hp', head='', processor='', ram='', storage='', gpu='', display=''):
    """Flat store-style candidate document."""
    return {
        'brand': brand, 'head': head, 'processor': processor, 'ram': ram,
        'storage': storage, 'gpu': gpu, 'display': display,
    }


def test_near_identical_signatures_exceed_threshold():
    accepted = 'hp|pavilion15|i5|8gb|512gb||'
    candidate = 'hp|pavilion15s|i5|8gb|512gb||'
    assert signature_similarity(accepted, candidate) > 0.85


def test_near_identical_candidate_rejected():
    first = doc(head='Pavilion15', processor='i5', ram='8gb', storage='512gb')
    second = doc(head='Pavilion15s', processor='i5', ram='8gb', storage='512gb')
    assert build_signature(first) == 'hp|pavilion15|i5|8gb|512gb||'

    assert filter_near_duplicates([first, second], 10) == [first]


def test_distinct_candidates_kept():
    candidates = [
        doc(brand='hp', head='Victus Gaming', processor='ryzen', ram='16', storage='1tb', gpu='rtx'),
        doc(brand='dell', head='Inspiron 3520', processor='i3', ram='8', storage='256gb'),
        doc(brand='apple', head='MacBook Air', processor='m2', ram='8', storage='256gb', display='13.6'),
    ]
    assert filter_near_duplicates(candidates, 10) == candidates


def test_same_brand_model_word_overlap_rejected():
    first = doc(brand='hp', head='HP Pavilion Gaming Laptop Ryzen')
    second = doc(brand='hp', head='HP Pavilion Gaming Laptop Intel')
    # similarity never exceeds 1.0, so only the word-overlap rule can reject
    result = filter_near_duplicates([first, second], 10, similarity_threshold=1.0)
    assert result == [first]


def test_word_overlap_only_compares_same_brand():
    first = doc(brand='hp', head='Thin Gaming Laptop')
    second = doc(brand='dell', head='Thin Gaming Laptop')
    result = filter_near_duplicates([first, second], 10, similarity_threshold=1.0)
    assert result == [first, second]


def test_limit_stops_scanning():
    candidates = [
        doc(brand='hp', head='Victus', processor='ryzen', ram='16', storage='1tb', gpu='rtx'),
        doc(brand='dell', head='Inspiron', processor='i3', ram='8', storage='256gb'),
        doc(brand='apple', head='MacBook Air', processor='m2', ram='8', storage='256gb'),
    ]
    assert filter_near_duplicates(candidates, 2) == candidates[:2]


@pytest.mark.parametrize("limit", [1, 2, 5, 50])
def test_output_bounded_and_rank_ordered(limit):
    heads = ['Victus', 'Victus 15', 'Inspiron', 'Inspiron 15', 'MacBook Air', 'MacBook Air M2',
             'Legion', 'Legion 5', 'Aspire', 'Aspire 7', 'Zenbook', 'Zenbook 14']
    brands = ['hp', 'hp', 'dell', 'dell', 'apple', 'apple',
              'lenovo', 'lenovo', 'acer', 'acer', 'asus', 'asus']
    candidates = [doc(brand=b, head=h, ram='8', storage='512gb') for b, h in zip(brands, heads)]
    position = {id(c): i for i, c in enumerate(candidates)}

    result = filter_near_duplicates(candidates, limit)

    assert len(result) <= limit
    ranks = [position[id(c)] for c in result]
    assert ranks == sorted(ranks)


def test_zero_limit_returns_empty():
    assert filter_near_duplicates([doc(head='Victus')], 0) == []


def test_negative_limit_raises():
    with pytest.raises(ValueError):
        filter_near_duplicates([doc(head='Victus')], -1)


def test_invocations_share_no_state():
    first = doc(head='Pavilion15', processor='i5')
    assert filter_near_duplicates([first], 5) == [first]
    assert filter_near_duplicates([first], 5) == [first]


def test_accepts_matched_entries(make_record):
    a = make_record(head='HP Pavilion 15 Core i5 8GB 512GB SSD', source='amazon', display_inch=15.6)
    b = make_record(head='HP Pavilion 15s Core i5 8GB 512GB SSD', source='amazon', display_inch=15.6)
    entries = [MatchedEntry.from_records('k1', a), MatchedEntry.from_records('k2', b)]

    fields = candidate_fields(entries[0])
    assert fields['brand'] == 'hp'
    assert fields['processor'] == 'i5'
    assert fields['ram'] == '8'
    assert fields['display'] == '156'

    assert filter_near_duplicates(entries, 5) == entries[:1]


@pytest.mark.parametrize("value, expected", [
    ('  HP  Pavilion-15 ', 'hp pavilion15'),
    ('Core i5 (11th Gen)', 'core i5 11th gen'),
    (None, ''),
    (15.6, '156'),
])
def test_normalize_signature_field(value, expected):
    assert normalize_signature_field(value) == expected


def test_significant_words_and_overlap():
    assert significant_words('HP Pavilion 15 x360') == ['pavilion', 'x360']
    assert word_overlap(['pavilion', 'gaming'], ['pavilion']) == 0.5
    assert word_overlap([], []) == 0.0


def test_overfetch_limit():
    assert overfetch_limit(10) == 30
    assert overfetch_limit(10, 2) == 20
    assert overfetch_limit(-1) == 0


def test_empty_nested_field_falls_back_to_top_level():
    doc = {'specs': {'brand': '', 'head': '  '}, 'brand': 'Dell', 'title': 'Dell Inspiron 15'}
    fields = candidate_fields(doc)

    assert fields['brand'] == 'dell'
    assert fields['model'] == 'dell inspiron 15'
