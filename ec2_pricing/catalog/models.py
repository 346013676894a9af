"""Typed data model for a decoded EC2 pricing document."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Generic, Iterator, Mapping, Optional, TypeVar

T = TypeVar("T")

SKU = str
TermType = str

TERM_TYPE_ON_DEMAND: TermType = "OnDemand"
TERM_TYPE_RESERVED: TermType = "Reserved"

# Range.min value marking a field that could not be parsed
UNPARSEABLE = -1


@dataclass(frozen=True)
class Range(Generic[T]):
    """A unit-bearing [min, max] range.

    ``min`` equal to ``UNPARSEABLE`` means the source text could not be
    parsed. The all-zero range with an empty unit means the field was absent.
    """

    unit: str = ""
    min: T = 0
    max: T = 0

    @property
    def is_set(self) -> bool:
        return self.unit != "" or self.min != 0 or self.max != 0

    @property
    def is_unparseable(self) -> bool:
        return self.min == UNPARSEABLE


@dataclass(frozen=True)
class NetworkPerformance(Range[float]):
    """Throughput range in Gbps with the lower-cased source description."""

    description: str = ""


@dataclass(frozen=True)
class InstanceStorage:
    """Local instance storage, e.g. ``2 x 1900 NVMe SSD``."""

    amount: int = 0
    size_mb: int = 0
    type: str = ""


@dataclass(frozen=True)
class InstanceProcessor:
    """Processor vendor and model."""

    make: str = ""
    model: str = ""


@dataclass(frozen=True)
class ProductAttributes:
    """Normalized attributes of an EC2 product.

    Field docs at
    https://docs.aws.amazon.com/cur/latest/userguide/product-columns.html
    """

    # Meta / misc
    region: str = ""
    instance_family: str = ""
    instance_type: str = ""
    current_generation: bool = False
    operating_system: str = ""
    license_model: str = ""
    tenancy: str = ""
    capacity_status: str = ""
    size_factor: float = -1.0

    # CPU / GPU
    processor: InstanceProcessor = field(default_factory=InstanceProcessor)
    processor_features: tuple[str, ...] = ()
    clock_speed: Range[float] = field(default_factory=Range)
    vcpus: int = -1
    gpus: int = 0

    # Memory
    memory_mib: int = 0
    gpu_memory: str = ""

    # IO
    storage: InstanceStorage = field(default_factory=InstanceStorage)
    network_performance: NetworkPerformance = field(default_factory=NetworkPerformance)
    dedicated_ebs_throughput: NetworkPerformance = field(
        default_factory=NetworkPerformance
    )

    # Features
    enhanced_networking_supported: bool = False


@dataclass(frozen=True)
class Product:
    """A priced product variant identified by SKU."""

    sku: SKU
    family: str = ""
    attributes: ProductAttributes = field(default_factory=ProductAttributes)


@dataclass(frozen=True)
class PriceDimension:
    """One rate/usage tier within a term.

    Prices stay as the decimal strings found in the document.
    ``price_per_unit`` is stored as a read-only mapping.
    """

    rate_code: str
    description: str = ""
    begin_range: str = ""
    end_range: str = ""
    unit: str = ""
    price_per_unit: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "price_per_unit", _freeze(self.price_per_unit))

    def __hash__(self):
        return hash(
            (
                self.rate_code,
                self.description,
                self.begin_range,
                self.end_range,
                self.unit,
                frozenset(self.price_per_unit.items()),
            )
        )

    def price(self, currency: str = "USD") -> Optional[Decimal]:
        """Return the price in ``currency`` as a Decimal, or None if absent."""
        value = self.price_per_unit.get(currency)
        if value is None:
            return None
        return Decimal(value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rateCode": self.rate_code,
            "description": self.description,
            "beginRange": self.begin_range,
            "endRange": self.end_range,
            "unit": self.unit,
            "pricePerUnit": dict(self.price_per_unit),
        }


@dataclass(frozen=True)
class Term:
    """A pricing term attached to a SKU.

    ``product`` is a non-owning reference filled in by ``link_terms``.
    ``price_dimensions`` and ``attributes`` are read-only mappings.
    ``attributes`` does not take part in the hash.
    """

    sku: SKU
    offer_term_code: str = ""
    effective_date: Optional[datetime] = None
    price_dimensions: Mapping[str, PriceDimension] = field(default_factory=dict)
    attributes: Mapping[str, Any] = field(default_factory=dict)
    product: Optional[Product] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "price_dimensions", _freeze(self.price_dimensions))
        object.__setattr__(self, "attributes", _freeze(self.attributes))

    def __hash__(self):
        return hash(
            (
                self.sku,
                self.offer_term_code,
                self.effective_date,
                frozenset(self.price_dimensions.items()),
            )
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "sku": self.sku,
            "offerTermCode": self.offer_term_code,
            "effectiveDate": (
                self.effective_date.isoformat() if self.effective_date else None
            ),
            "priceDimensions": {
                code: dimension.to_dict()
                for code, dimension in self.price_dimensions.items()
            },
            "termAttributes": dict(self.attributes),
        }


@dataclass(frozen=True)
class FieldAnomaly:
    """An attribute that fell back to a default while being normalized."""

    sku: SKU
    attribute: str
    raw: str


# term type -> SKU -> offer key -> Term
Terms = Mapping[TermType, Mapping[SKU, Mapping[str, Term]]]


@dataclass(frozen=True, eq=False)
class PriceCatalog:
    """A fully decoded pricing document.

    ``products`` and every level of ``terms`` are copied into read-only
    mappings on construction, so a catalog never shares mutable state with
    the dicts it was built from. Catalogs compare and hash by identity.
    """

    format_version: str = ""
    disclaimer: str = ""
    version: str = ""
    publication_date: Optional[datetime] = None
    offer_code: str = ""
    products: Mapping[SKU, Product] = field(default_factory=dict)
    terms: Terms = field(default_factory=dict)
    attribute_list: Any = None
    anomalies: tuple[FieldAnomaly, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "products", _freeze(self.products))
        object.__setattr__(
            self,
            "terms",
            _freeze(
                {
                    term_type: _freeze(
                        {sku: _freeze(offers) for sku, offers in by_sku.items()}
                    )
                    for term_type, by_sku in self.terms.items()
                }
            ),
        )

    def iter_terms(self) -> Iterator[tuple[TermType, Term]]:
        """Yield (term type, term) for every term in the catalog."""
        for term_type, by_sku in self.terms.items():
            for terms in by_sku.values():
                for term in terms.values():
                    yield term_type, term

    def terms_for_sku(
        self, sku: SKU, term_type: TermType = TERM_TYPE_ON_DEMAND
    ) -> list[Term]:
        return list(self.terms.get(term_type, {}).get(sku, {}).values())

    def product_for(self, term: Term) -> Optional[Product]:
        return self.products.get(term.sku)


def _freeze(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))
