"""
Attribute extraction: raw listing text -> normalized laptop attributes.

Extraction Approach:
    - Every attribute is an ordered Cascade of (regex -> transform) rules;
      the first rule that matches wins (see cascade.py)
    - Structured detail fields are parsed first; the free-text title is only
      used when the detail field is missing or does not parse
    - Vocabulary-driven attributes (brand, series, GPU) use cascades built
      from vocabulary.json; fixed hardware grammars (processor family,
      generation, model code, RAM) are module-level cascades below

Failure Policy:
    - Nothing here raises on bad data. An unmatched pattern yields '' (or None
      for display size); junk prices / ratings become 0.0
    - Two sources can still disagree on a single attribute (e.g. one title
      says "11th Gen", the other only "Core i5") - exact-key linking treats
      that as a non-match, which is an accepted trade-off

Output Conventions:
    - processor.variant is upper-cased ('1135G', '5800H'); every other text
      attribute is lower-case
    - storage.size is canonical '<n>gb' / '<n>tb'; ram.size is the bare GB
      number ('16')
"""

import re
from typing import Any, Iterable, Mapping, Optional

from loguru import logger

from laptop_linker.cascade import Cascade, Rule, prepare_text
from laptop_linker.records import NormalizedRecord, Processor, Ram, RawRecord, Storage
from laptop_linker.vocabulary import SourceSchema, Vocabulary, load_vocabulary

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
RAM_MIN_GB = 2
RAM_MAX_GB = 64
STORAGE_MIN_GB = 128       # Title heuristic: storage is the largest GB value >= this
DISPLAY_MIN_INCH = 7.0
DISPLAY_MAX_INCH = 20.0
CM_PER_INCH = 2.54

# Units stripped before any numeric parse of a detail field
_UNIT_TOKENS = re.compile(r'(?:gb|tb|cm|inches|inch|"|″)', re.IGNORECASE)

# Legal suffixes removed from detail-field brand values ("HP Inc." -> "hp")
_BRAND_SUFFIXES = re.compile(
    r'\s+(?:inc\.?|ltd\.?|co\.?|corp\.?|corporation|electronics|technologies|'
    r'group|llc|gmbh|plc|pvt|private|limited|international)\s*$',
    re.IGNORECASE,
)

_NUMBER = re.compile(r'\d+(?:\.\d+)?')


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

def strip_units(text) -> str:
    """
    Remove unit tokens (GB, TB, cm, inch, ", ″) and trim.

    Examples:
        '512 GB'       -> '512'
        '15.6 Inches'  -> '15.6'
    """
    return _UNIT_TOKENS.sub('', prepare_text(text)).strip()


def _leading_number(text: str) -> Optional[float]:
    m = _NUMBER.search(text)
    if not m:
        return None
    try:
        return float(m.group(0))
    except ValueError:
        return None


def _format_number(value: float) -> str:
    """512.0 -> '512', 1.5 -> '1.5'"""
    return str(int(value)) if float(value).is_integer() else str(value)


def _first_parsed(parser, texts: Iterable[Any]) -> str:
    """Apply ``parser`` to each text in order; return the first non-empty result."""
    for text in texts:
        value = parser(text)
        if value:
            return value
    return ''


def _detail_values(details: Mapping[str, Any], names: Iterable[str]) -> list:
    """
    Look up detail fields by name (exact key first, then case-insensitive).

    Returns the present, non-empty values in ``names`` order.
    """
    if not details:
        return []
    lowered = None
    values = []
    for name in names:
        value = details.get(name)
        if value is None:
            if lowered is None:
                lowered = {str(k).strip().lower(): v for k, v in details.items()}
            value = lowered.get(name.strip().lower())
        if value is None or isinstance(value, (dict, list)):
            continue
        if str(value).strip():
            values.append(value)
    return values


# ---------------------------------------------------------------------------
# Brand / series / GPU (vocabulary-driven)
# ---------------------------------------------------------------------------

def normalize_brand(value, vocabulary: Optional[Vocabulary] = None) -> str:
    """
    Normalize a brand detail field to a known brand from the closed set.

    Examples:
        'HP Inc.'          -> 'hp'
        'Hewlett Packard'  -> 'hp'
        'Lenovo Group'     -> 'lenovo'
        'Generic'          -> ''
    """
    vocab = vocabulary or load_vocabulary()
    b = prepare_text(value)
    if not b:
        return ''
    b = _BRAND_SUFFIXES.sub('', b).strip()
    if b in vocab.brand_aliases:
        return vocab.brand_aliases[b]
    if b in vocab.brands:
        return b
    # Multi-word values such as "ASUS ROG" - fall back to token search
    return vocab.brand_cascade.first(b)


def extract_brand(text, vocabulary: Optional[Vocabulary] = None) -> str:
    """Leftmost known manufacturer token in free text, else a product-line alias."""
    vocab = vocabulary or load_vocabulary()
    return vocab.brand_cascade.first(text)


def extract_series(text, vocabulary: Optional[Vocabulary] = None) -> str:
    """
    First series keyword (in vocabulary order) appearing as a substring.

    Order is priority: a generic keyword listed earlier shadows a more
    specific one listed later.

    Examples:
        'HP Pavilion x360 14'   -> 'pavilion x360'
        'Acer Swift Go 14'      -> '14'   ('14' is listed before 'swift go 14')
    """
    vocab = vocabulary or load_vocabulary()
    return vocab.series_cascade.first(text)


def extract_gpu(text, vocabulary: Optional[Vocabulary] = None) -> str:
    """GPU family token by vocabulary priority ('rtx' beats 'intel')."""
    vocab = vocabulary or load_vocabulary()
    return vocab.gpu_cascade.first(text)


# ---------------------------------------------------------------------------
# Processor family
# ---------------------------------------------------------------------------

PROCESSOR_NAME_CASCADE = Cascade('processor_name', [
    Rule('core_ultra', re.compile(r'core\s+ultra\s*([579])'), lambda m: f'core ultra {m.group(1)}'),
    Rule('intel_core', re.compile(r'\bi[3579]\b')),
    Rule('ryzen', re.compile(r'ryzen\s*[3579]'), lambda m: 'ryzen'),
    Rule('athlon', re.compile(r'\bathlon\b'), lambda m: 'athlon'),
    # "M.2 SSD" written as "m2 ssd" is a drive slot, not a chip
    Rule(
        'apple_m',
        re.compile(r'\bm([1-4])(?:\s*(?:pro|max|ultra))?\b(?!\s*(?:ssd|nvme|slot))'),
        lambda m: f'm{m.group(1)}',
    ),
    Rule('apple_a', re.compile(r'apple\s+a(\d+)'), lambda m: f'a{m.group(1)}'),
    Rule('celeron', re.compile(r'celeron'), lambda m: 'celeron'),
    # Gold / Silver qualifier is not part of the family
    Rule('pentium', re.compile(r'pentium(?:\s*(?:gold|silver))?'), lambda m: 'pentium'),
    Rule('snapdragon', re.compile(r'snapdragon'), lambda m: 'snapdragon'),
    Rule('mediatek', re.compile(r'mediatek|\bmt\d+'), lambda m: 'mediatek'),
    Rule('exynos', re.compile(r'exynos'), lambda m: 'exynos'),
    Rule('arm_cortex', re.compile(r'arm\s*cortex[-\s]*([a-z\d]+)'), lambda m: f'cortex-{m.group(1)}'),
])


def extract_processor_name(text) -> str:
    """
    Processor family in priority order.

    Examples:
        'Intel Core Ultra 7 155H'   -> 'core ultra 7'
        'Core i5-1135G7'            -> 'i5'
        'AMD Ryzen 7 5800H'         -> 'ryzen'   (family only, not the grade)
        'Intel Pentium Silver N5030' -> 'pentium'
    """
    return PROCESSOR_NAME_CASCADE.first(text)


# ---------------------------------------------------------------------------
# Processor generation
# ---------------------------------------------------------------------------

def _intel_generation(match: re.Match) -> str:
    """
    Decode the generation from an Intel Core model number.

    5-digit models carry a 2-digit generation (i7-10750H -> 10); 4-digit models
    starting with 1 are gen 10+ (i5-1135G7 -> 11); other 4-digit models are
    gen 2-9 (i5-8250U -> 8).
    """
    digits = match.group(1)
    if len(digits) == 5 or digits[0] == '1':
        return digits[:2]
    return digits[0]


PROCESSOR_GEN_CASCADE = Cascade('processor_gen', [
    Rule('ordinal_gen', re.compile(r'\b(\d{1,2})(?:st|nd|rd|th)?\s*gen(?:eration)?\b'), lambda m: m.group(1)),
    # Generation length depends on the model number, not a fixed two digits
    # after the grade (8250U -> 8, 1135G7 -> 11); DESIGN.md decision 3
    Rule('intel_model', re.compile(r'\bi[3579][\s-]*(\d{4,5})(?!\d)'), _intel_generation),
    Rule('ryzen_model', re.compile(r'ryzen\s*[3579]\s*(?:pro\s*)?(\d)\d{3}(?!\d)'), lambda m: m.group(1)),
    Rule('apple_m', re.compile(r'\bapple\s*m(\d)\b'), lambda m: f'm{m.group(1)}'),
    Rule('apple_m_chip', re.compile(r'\bm(\d)(?:\s*(?:pro|max|ultra))?\s*chip\b'), lambda m: f'm{m.group(1)}'),
    Rule('apple_a', re.compile(r'\bapple\s*a(\d+)'), lambda m: f'a{m.group(1)}'),
    Rule('mobile_soc', re.compile(r'(?:snapdragon|exynos|mediatek|\bmt)[\s-]*(\d+)'), lambda m: m.group(1)),
    Rule('arm_cortex', re.compile(r'arm\s*cortex[-\s]*([a-z\d]+)'), lambda m: m.group(1)),
])

# Fallback: derive the generation from an already-extracted variant code
VARIANT_GEN_CASCADE = Cascade('variant_gen', [
    # AMD-style 4-digit code: 7320U -> 7
    Rule('four_digit', re.compile(r'^(\d)\d{3}[a-z]*$'), lambda m: m.group(1)),
    # Intel-style: 1135G -> 11, 155H -> 1
    Rule('intel_style', re.compile(r'^(\d{1,2})\d{2,3}[a-z]*$'), lambda m: m.group(1)),
    # Intel N-series: N100 -> n1
    Rule('n_series', re.compile(r'^n(\d)\d{2}$'), lambda m: f'n{m.group(1)}'),
])


def extract_processor_generation(text) -> str:
    """
    Processor generation in priority order.

    Examples:
        'Core i5 11th Gen'        -> '11'
        'i5 1135G7'               -> '11'
        'Ryzen 5 5500U'           -> '5'
        'Apple M2 chip'           -> 'm2'
        'Snapdragon 8cx'          -> '8'
    """
    return PROCESSOR_GEN_CASCADE.first(text)


def generation_from_variant(variant) -> str:
    """
    Secondary generation fallback from a bare variant code.

    Examples:
        '7320U'  -> '7'
        '155H'   -> '1'
        '1135G'  -> '1'    (any 4-digit code takes the leading digit)
        'N100'   -> 'n1'
    """
    return VARIANT_GEN_CASCADE.first(variant)


# ---------------------------------------------------------------------------
# Processor variant (model code)
# ---------------------------------------------------------------------------

# A 3-5 digit code not followed by a GB/TB or Hz unit ("512GB" is storage, "144Hz" a refresh rate)
_CODE = r'(\d{3,5})(?!\d)(?!\s*[gt]b\b)(?!\s*hz\b)'

PROCESSOR_VARIANT_CASCADE = Cascade('processor_variant', [
    Rule(
        'ryzen',
        re.compile(r'ryzen\s*[3579]\s*(?:pro\s*)?.*?' + _CODE + r'(x3d|xt|ge|hs|hx|h|u|g|x|s)?'),
        lambda m: (m.group(1) + (m.group(2) or '')).upper(),
    ),
    Rule(
        'intel_core',
        re.compile(r'core\s+(?:ultra\s*[579]|i[3579])[\s-]*.*?' + _CODE + r'([a-z]{0,2})'),
        lambda m: (m.group(1) + m.group(2)).upper(),
    ),
    Rule(
        'intel_value',
        re.compile(r'(?:pentium(?:\s*(?:gold|silver))?|celeron)[\s-]*.*?\b([a-z]?)' + _CODE + r'([a-z]{0,2})'),
        lambda m: (m.group(1) + m.group(2) + m.group(3)).upper(),
    ),
])

# Dedicated variant detail fields hold the bare code ("1135G7") with no family token
_BARE_CODE = Rule(
    'bare_code',
    re.compile(r'^([a-z]?)' + _CODE + r'([a-z]{0,2})'),
    lambda m: (m.group(1) + m.group(2) + m.group(3)).upper(),
)


def extract_processor_variant(text) -> str:
    """
    Trailing model code after the processor family token, upper-cased.

    Examples:
        'Ryzen 7 5800H'               -> '5800H'
        'Intel Core i5-1135G7'        -> '1135G'
        'Core Ultra 7 155H'           -> '155H'
        'Core i5 11th Gen 8GB 512GB'  -> ''      (512GB is storage, not a model code)
    """
    return PROCESSOR_VARIANT_CASCADE.first(text)


def parse_variant_field(text) -> str:
    """Parse a structured 'Processor Variant' field: family form first, bare code second."""
    value = extract_processor_variant(text)
    if value:
        return value
    prepared = prepare_text(text)
    if not prepared:
        return ''
    return _BARE_CODE.apply(prepared) or ''


# ---------------------------------------------------------------------------
# RAM
# ---------------------------------------------------------------------------

def _ram_from_mb(match: re.Match) -> str:
    return _format_number(int(match.group(1)) // 1024)


RAM_CASCADE = Cascade('ram', [
    # "8 GB RAM", "16GB DDR4 RAM", "8 GB LPDDR5 memory"
    Rule(
        'explicit_ram',
        re.compile(r'\b(\d{1,3})\s*gb\s*(?:[a-z]*ddr\d[a-z]?\s*)?(?:ram|memory)\b'),
        lambda m: m.group(1),
    ),
    # First GB value in the plausible RAM range (2..64)
    Rule('gb_in_range', re.compile(r'(?<!\d)([2-9]|[1-5]\d|6[0-4])\s*gb\b'), lambda m: m.group(1)),
    Rule('megabytes', re.compile(r'\b(\d{4,5})\s*mb\b'), _ram_from_mb),
    # Bare number detail field: "16"
    Rule('bare_number', re.compile(r'^(\d{1,2})$'), lambda m: m.group(1)),
])


def extract_ram(text) -> str:
    """
    RAM size in GB as a bare number.

    Examples:
        '16 GB'                               -> '16'
        'HP Pavilion Core i5 8GB RAM 512GB'   -> '8'
        'Legion 5 Ryzen 7 5800H 16GB 512GB'   -> '16'
        '4096 MB'                             -> '4'
    """
    value = RAM_CASCADE.first(text)
    if value and value.isdigit() and not (RAM_MIN_GB <= int(value) <= RAM_MAX_GB):
        return ''
    return value


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

def canonical_storage(value: float, unit: str) -> str:
    """
    Canonical storage size string.

    Examples:
        (512, 'gb')  -> '512gb'
        (1024, 'gb') -> '1tb'
        (0.5, 'tb')  -> '512gb'
    """
    if value <= 0:
        return ''
    unit = unit.lower()
    if unit == 'tb' and value < 1:
        return f'{int(round(value * 1024))}gb'
    if unit == 'gb' and value >= 1024 and value % 1024 == 0:
        return f'{int(value // 1024)}tb'
    return f'{_format_number(value)}{unit}'


def parse_storage_size(text) -> str:
    """
    Storage size from a structured capacity field.

    Unit suffixes decide GB vs TB; a bare number below 10 is TB.

    Examples:
        '512 GB' -> '512gb'
        '1 TB'   -> '1tb'
        '512'    -> '512gb'
        '2'      -> '2tb'
    """
    t = prepare_text(text)
    if not t:
        return ''
    m = re.search(r'(\d+(?:\.\d+)?)\s*(gb|tb)\b', t)
    if m:
        return canonical_storage(float(m.group(1)), m.group(2))
    number = _leading_number(strip_units(t))
    if number is None:
        return ''
    return canonical_storage(number, 'tb' if number < 10 else 'gb')


def extract_storage_size(text, ram: str = '') -> str:
    """
    Storage size from a free-text title.

    Prefers an explicit TB value; otherwise the largest GB value that is at
    least 128GB and larger than the RAM; otherwise the largest GB value that is
    not the RAM.

    Examples:
        'Legion 5 16GB 512GB RTX 3060'   -> '512gb'
        'IdeaPad 8GB 1TB HDD'            -> '1tb'
        'Chromebook 4GB 64GB eMMC'       -> '64gb'
    """
    t = prepare_text(text)
    if not t:
        return ''
    # \b avoids "tbt3" (Thunderbolt 3 ports)
    tb = re.findall(r'(\d+(?:\.\d+)?)\s*tb\b', t)
    if tb:
        return canonical_storage(float(tb[0]), 'tb')

    gb_values = [int(v) for v in re.findall(r'(\d+)\s*gb\b', t)]
    if not gb_values:
        return ''
    ram_int = int(ram) if ram and ram.isdigit() else 0
    storage_candidates = [v for v in gb_values if v > ram_int and v >= STORAGE_MIN_GB]
    if storage_candidates:
        return canonical_storage(max(storage_candidates), 'gb')
    largest = max(gb_values)
    if largest != ram_int:
        return canonical_storage(largest, 'gb')
    return ''


STORAGE_TYPE_CASCADE = Cascade('storage_type', [
    Rule('ssd', re.compile(r'\bssd\b|solid\s*state'), lambda m: 'ssd'),
    Rule('emmc', re.compile(r'\bemmc\b'), lambda m: 'emmc'),
    Rule('hdd', re.compile(r'\bhdd\b|hard\s*(?:disk|drive)|mechanical'), lambda m: 'hdd'),
])


def extract_storage_type(text) -> str:
    """'SSD' / 'Solid State Drive' -> 'ssd', 'eMMC' -> 'emmc', 'HDD' -> 'hdd'."""
    return STORAGE_TYPE_CASCADE.first(text)


def _is_yes(value) -> bool:
    return prepare_text(value) in ('yes', 'y', 'true', '1')


# ---------------------------------------------------------------------------
# Touch / display
# ---------------------------------------------------------------------------

TOUCH_CASCADE = Cascade('touch', [
    Rule('yes_flag', re.compile(r'^(?:yes|true)\b'), lambda m: 'yes'),
    Rule('touch_screen', re.compile(r'touch\s*-?\s*screen|touch\s*display'), lambda m: 'yes'),
])


def extract_touch(text) -> str:
    """'yes' when a touch panel is flagged or mentioned, else ''."""
    return TOUCH_CASCADE.first(text)


def _plausible_inch(value: Optional[float]) -> Optional[float]:
    if value is None or not (DISPLAY_MIN_INCH <= value <= DISPLAY_MAX_INCH):
        return None
    return round(value, 2)


def parse_display_inch(text) -> Optional[float]:
    """
    Display diagonal from a structured screen-size field.

    Examples:
        '39.62 cm (15.6 inch)'   -> 15.6
        '15.6 Inches'            -> 15.6
        '39.62 cm'               -> 15.6
        'Full HD'                -> None
    """
    t = prepare_text(text)
    if not t:
        return None
    m = re.search(r'\(\s*(\d+(?:\.\d+)?)\s*(?:inch(?:es)?|"|″)\s*\)', t)
    if m:
        return _plausible_inch(float(m.group(1)))
    number = _leading_number(strip_units(t))
    if number is None:
        return None
    if 'cm' in t and 'inch' not in t:
        number = round(number / CM_PER_INCH, 1)
    return _plausible_inch(number)


def extract_display_inch(text) -> Optional[float]:
    """Display diagonal from a title: '15.6"', '14 inch', '(15.6 inch)'."""
    t = prepare_text(text)
    if not t:
        return None
    m = re.search(r'\(\s*(\d+(?:\.\d+)?)\s*(?:inch(?:es)?|"|″)\s*\)', t)
    if not m:
        m = re.search(r'(?<![\d.])(\d{1,2}(?:\.\d{1,2})?)\s*(?:"|″|-?\s*inch(?:es)?\b)', t)
    if not m:
        return None
    return _plausible_inch(float(m.group(1)))


# ---------------------------------------------------------------------------
# Price / rating
# ---------------------------------------------------------------------------

def parse_price(value) -> float:
    """
    Numeric price from a currency-decorated string.

    Examples:
        '₹54,990'     -> 54990.0
        '₹54,990.00'  -> 54990.0
        'N/A'         -> 0.0
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if value > 0 else 0.0
    t = prepare_text(value).replace(',', '')
    number = _leading_number(t)
    return number if number else 0.0


def parse_rating(value) -> float:
    """'4.3 out of 5 stars' -> 4.3, 4 -> 4.0, 'N/A' -> 0.0"""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if value > 0 else 0.0
    number = _leading_number(prepare_text(value))
    return number if number else 0.0


# ---------------------------------------------------------------------------
# Record normalization
# ---------------------------------------------------------------------------

def _storage_attributes(details: Mapping, schema: SourceSchema, title: str, ram: str) -> Storage:
    """
    Storage size and type with the SSD / eMMC flags driving the reported type.

    An SSD flag of "yes" reads the SSD capacity field; otherwise the eMMC
    capacity field, then any generic capacity field. The title is the last
    resort for both size and type.
    """
    fields = schema.detail_fields
    has_ssd = any(_is_yes(v) for v in _detail_values(details, fields('ssd_flag')))
    ssd_capacity = _detail_values(details, fields('ssd_capacity'))
    emmc_capacity = _detail_values(details, fields('emmc_capacity'))
    generic_capacity = _detail_values(details, fields('storage_size'))

    size = ''
    storage_type = ''
    if has_ssd:
        size = _first_parsed(parse_storage_size, ssd_capacity + generic_capacity)
        storage_type = 'ssd'
    else:
        emmc_size = _first_parsed(parse_storage_size, emmc_capacity)
        if emmc_size:
            size, storage_type = emmc_size, 'emmc'
        else:
            size = _first_parsed(parse_storage_size, generic_capacity + ssd_capacity)

    if not storage_type:
        type_values = _detail_values(details, fields('storage_type'))
        storage_type = _first_parsed(extract_storage_type, type_values)
        if not storage_type and type_values:
            # Unrecognized vocabulary: keep the source's own wording
            storage_type = prepare_text(type_values[0])
    if not size:
        size = extract_storage_size(title, ram)
    if not storage_type:
        storage_type = extract_storage_type(title)
    return Storage(size=size, type=storage_type)


def normalize_record(raw: RawRecord, vocabulary: Optional[Vocabulary] = None) -> NormalizedRecord:
    """
    Derive a NormalizedRecord from a RawRecord.

    Pure function of ``raw`` (and the vocabulary). Every attribute prefers
    the source's structured detail fields, in schema order, and falls back to
    the title. Never raises for data-quality reasons.
    """
    vocab = vocabulary or load_vocabulary()
    schema = vocab.source(raw.source)
    details = raw.details if isinstance(raw.details, Mapping) else {}
    title = raw.title if isinstance(raw.title, str) else prepare_text(raw.title)

    if not title.strip():
        logger.warning(f"Listing without a title from source '{raw.source}' (link={raw.link!r}); "
                       "emitting best-effort record")

    def detail(attribute: str) -> list:
        return _detail_values(details, schema.detail_fields(attribute))

    brand = _first_parsed(lambda v: normalize_brand(v, vocab), detail('brand')) or extract_brand(title, vocab)
    series = _first_parsed(lambda v: extract_series(v, vocab), detail('series') + [title])

    processor_name = _first_parsed(extract_processor_name, detail('processor_name') + [title])
    processor_variant = (
        _first_parsed(parse_variant_field, detail('processor_variant'))
        or extract_processor_variant(title)
    )
    processor_gen = (
        _first_parsed(extract_processor_generation, detail('processor_gen') + [title])
        or generation_from_variant(processor_variant)
    )

    ram = _first_parsed(extract_ram, detail('ram') + [title])
    storage = _storage_attributes(details, schema, title, ram)

    touch = _first_parsed(extract_touch, detail('touch') + [title])
    display_inch = None
    for value in detail('display'):
        display_inch = parse_display_inch(value)
        if display_inch is not None:
            break
    if display_inch is None:
        display_inch = extract_display_inch(title)

    gpu = _first_parsed(lambda v: extract_gpu(v, vocab), detail('gpu') + [title])

    return NormalizedRecord(
        brand=brand,
        series=series,
        processor=Processor(name=processor_name, gen=processor_gen, variant=processor_variant),
        ram=Ram(size=ram),
        storage=storage,
        touch=touch,
        display_inch=display_inch,
        gpu=gpu,
        head=title.strip(),
        price=parse_price(raw.price),
        link=str(raw.link or '').strip(),
        rating=parse_rating(raw.rating),
        source=schema.name,
    )
