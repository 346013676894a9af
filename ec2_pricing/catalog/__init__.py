"""Typed model, decoder and normalizers for EC2 pricing documents."""

from ec2_pricing.catalog.decoder import decode_catalog
from ec2_pricing.catalog.linker import link_terms
from ec2_pricing.catalog.models import (
    TERM_TYPE_ON_DEMAND,
    TERM_TYPE_RESERVED,
    UNPARSEABLE,
    FieldAnomaly,
    InstanceProcessor,
    InstanceStorage,
    NetworkPerformance,
    PriceCatalog,
    PriceDimension,
    Product,
    ProductAttributes,
    Range,
    Term,
)

__all__ = [
    "decode_catalog",
    "link_terms",
    "TERM_TYPE_ON_DEMAND",
    "TERM_TYPE_RESERVED",
    "UNPARSEABLE",
    "FieldAnomaly",
    "InstanceProcessor",
    "InstanceStorage",
    "NetworkPerformance",
    "PriceCatalog",
    "PriceDimension",
    "Product",
    "ProductAttributes",
    "Range",
    "Term",
]
