"""
Record types flowing through the pipeline.

    RawRecord         one scraped listing, as received from a source
    NormalizedRecord  structured attribute view derived from a RawRecord
    MatchedEntry      one output row: shared specs plus per-site offers

All records are frozen; transformations always build new values.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from laptop_linker.vocabulary import Vocabulary, load_vocabulary


def _first_present(data: Mapping, keys) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None and value != '':
            return value
    return None


@dataclass(frozen=True)
class RawRecord:
    """Unprocessed per-listing data from one source."""

    title: str = ''
    details: Mapping[str, Any] = field(default_factory=dict)
    price: Any = ''
    link: str = ''
    rating: Any = ''
    source: str = ''

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        source: str,
        vocabulary: Optional[Vocabulary] = None,
    ) -> 'RawRecord':
        """
        Build a RawRecord from a scraped JSON object using the source's schema.

        Examples:
            {'title': 'HP 15s ...', 'details': {...}, 'url': ...}     (amazon)
            {'productName': 'HP 15s ...', 'technicalDetails': {...}}  (flipkart)
        """
        vocab = vocabulary or load_vocabulary()
        schema = vocab.source(source)
        if not isinstance(data, Mapping):
            data = {}

        details = _first_present(data, schema.record_keys('details'))
        title = _first_present(data, schema.record_keys('title'))
        link = _first_present(data, schema.record_keys('link'))
        return cls(
            title=str(title).strip() if title is not None else '',
            details=dict(details) if isinstance(details, Mapping) else {},
            price=_first_present(data, schema.record_keys('price')) or '',
            link=str(link).strip() if link is not None else '',
            rating=_first_present(data, schema.record_keys('rating')) or '',
            source=schema.name,
        )


@dataclass(frozen=True)
class Processor:
    name: str = ''
    gen: str = ''
    variant: str = ''


@dataclass(frozen=True)
class Ram:
    size: str = ''


@dataclass(frozen=True)
class Storage:
    size: str = ''
    type: str = ''


@dataclass(frozen=True)
class SiteOffer:
    """One source's price / link / rating for a listing."""

    source: str
    price: float = 0.0
    link: str = ''
    rating: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {'source': self.source, 'price': self.price, 'link': self.link, 'rating': self.rating}


@dataclass(frozen=True)
class NormalizedRecord:
    """
    Structured attributes of one listing.

    Text attributes are lower-cased and trimmed; a missing attribute is ''
    (display_inch is None). ``head`` is the trimmed original title, carried
    through for display like ``link``.
    """

    brand: str = ''
    series: str = ''
    processor: Processor = field(default_factory=Processor)
    ram: Ram = field(default_factory=Ram)
    storage: Storage = field(default_factory=Storage)
    touch: str = ''
    display_inch: Optional[float] = None
    gpu: str = ''
    head: str = ''
    price: float = 0.0
    link: str = ''
    rating: float = 0.0
    source: str = ''

    def specs(self) -> Dict[str, Any]:
        """Attribute view with price / link / rating stripped."""
        return {
            'brand': self.brand,
            'series': self.series,
            'processor': {
                'name': self.processor.name,
                'gen': self.processor.gen,
                'variant': self.processor.variant,
            },
            'ram': {'size': self.ram.size},
            'storage': {'size': self.storage.size, 'type': self.storage.type},
            'touch': self.touch,
            'displayInch': self.display_inch,
            'gpu': self.gpu,
            'head': self.head,
        }

    def offer(self) -> SiteOffer:
        return SiteOffer(source=self.source, price=self.price, link=self.link, rating=self.rating)

    def to_dict(self) -> Dict[str, Any]:
        data = self.specs()
        data.update({'price': self.price, 'link': self.link, 'rating': self.rating, 'source': self.source})
        return data


@dataclass(frozen=True)
class MatchedEntry:
    """
    One linking output entry.

    A matched entry has two sites (source A first); A-only and B-only entries
    have exactly one. ``key`` is the match key the entry was bucketed under.
    """

    brand: str
    series: str
    specs: Mapping[str, Any]
    sites: Tuple[SiteOffer, ...]
    key: str = ''

    @classmethod
    def from_records(cls, key: str, primary: NormalizedRecord, *others: NormalizedRecord) -> 'MatchedEntry':
        return cls(
            brand=primary.brand,
            series=primary.series,
            specs=primary.specs(),
            sites=(primary.offer(),) + tuple(r.offer() for r in others),
            key=key,
        )

    @property
    def sources(self) -> Tuple[str, ...]:
        return tuple(site.source for site in self.sites)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'brand': self.brand,
            'series': self.series,
            'specs': dict(self.specs),
            'sites': [site.to_dict() for site in self.sites],
            'key': self.key,
        }
