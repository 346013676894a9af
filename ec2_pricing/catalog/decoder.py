"""Decode a raw pricing document into the typed catalog model."""

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from ec2_pricing.catalog import parser
from ec2_pricing.catalog.models import (
    FieldAnomaly,
    PriceCatalog,
    PriceDimension,
    Product,
    ProductAttributes,
    Term,
)
from ec2_pricing.errors import CatalogDecodeError

logger = logging.getLogger("ec2_pricing.catalog.decoder")

# Attributes copied verbatim: model field -> document field
TEXT_ATTRIBUTES = {
    "region": "regionCode",
    "instance_family": "instanceFamily",
    "instance_type": "instanceType",
    "operating_system": "operatingSystem",
    "license_model": "licenseModel",
    "tenancy": "tenancy",
    "capacity_status": "capacitystatus",
    "gpu_memory": "gpuMemory",
}

# Attributes run through a parser: model field -> (document field, parser)
PARSED_ATTRIBUTES: dict[str, tuple[str, Callable[[str], parser.Parsed]]] = {
    "current_generation": ("currentGeneration", parser.parse_bool),
    "size_factor": (
        "normalizationSizeFactor",
        lambda value: parser.parse_float(value, -1.0),
    ),
    "processor": ("physicalProcessor", parser.parse_processor),
    "processor_features": ("processorFeatures", parser.parse_processor_features),
    "clock_speed": ("clockSpeed", parser.parse_clock_speed),
    "vcpus": ("vcpu", lambda value: parser.parse_int(value, -1)),
    "gpus": ("gpu", lambda value: parser.parse_int(value, 0)),
    "memory_mib": ("memory", parser.parse_memory_mib),
    "storage": ("storage", parser.parse_storage),
    "network_performance": ("networkPerformance", parser.parse_network_performance),
    "dedicated_ebs_throughput": (
        "dedicatedEbsThroughput",
        parser.parse_network_performance,
    ),
    "enhanced_networking_supported": (
        "enhancedNetworkingSupported",
        parser.parse_bool,
    ),
}


def decode_catalog(document: Any) -> PriceCatalog:
    """Decode a parsed JSON pricing document.

    Attribute values that cannot be normalized never fail the decode; they
    are recorded in ``PriceCatalog.anomalies`` instead. Terms are returned
    unlinked, see ``ec2_pricing.catalog.linker.link_terms``.

    Args:
        document: The JSON object loaded from the price list file

    Returns:
        Decoded PriceCatalog

    Raises:
        CatalogDecodeError: If the document does not have the expected shape
    """
    _expect_mapping(document, "document")

    anomalies: list[FieldAnomaly] = []
    products = {
        sku: _decode_product(sku, raw, anomalies)
        for sku, raw in _optional_mapping(document.get("products"), "products").items()
    }

    terms: dict[str, dict[str, dict[str, Term]]] = {}
    for term_type, by_sku in _optional_mapping(document.get("terms"), "terms").items():
        terms[term_type] = {}
        for sku, offers in _optional_mapping(by_sku, f"terms.{term_type}").items():
            terms[term_type][sku] = {
                key: _decode_term(raw, f"terms.{term_type}.{sku}.{key}")
                for key, raw in _optional_mapping(
                    offers, f"terms.{term_type}.{sku}"
                ).items()
            }

    if anomalies:
        logger.debug(
            f"Normalized {len(products)} products with {len(anomalies)} defaulted attributes"
        )

    return PriceCatalog(
        format_version=_text(document, "formatVersion", "document"),
        disclaimer=_text(document, "disclaimer", "document"),
        version=_text(document, "version", "document"),
        publication_date=_timestamp(document, "publicationDate", "document"),
        offer_code=_text(document, "offerCode", "document"),
        products=products,
        terms=terms,
        attribute_list=document.get("attributeList"),
        anomalies=tuple(anomalies),
    )


def _decode_product(sku: str, raw: Any, anomalies: list[FieldAnomaly]) -> Product:
    where = f"products.{sku}"
    _expect_mapping(raw, where)
    raw_attributes = _optional_mapping(raw.get("attributes"), f"{where}.attributes")

    values: dict[str, Any] = {
        name: _text(raw_attributes, key, f"{where}.attributes")
        for name, key in TEXT_ATTRIBUTES.items()
    }
    for name, (key, parse) in PARSED_ATTRIBUTES.items():
        text = _text(raw_attributes, key, f"{where}.attributes")
        parsed = parse(text)
        values[name] = parsed.value
        # absent attributes are common for non-instance products
        if parsed.defaulted and text != "":
            anomalies.append(FieldAnomaly(sku=sku, attribute=key, raw=text))

    return Product(
        sku=_text(raw, "sku", where) or sku,
        family=_text(raw, "productFamily", where),
        attributes=ProductAttributes(**values),
    )


def _decode_term(raw: Any, where: str) -> Term:
    _expect_mapping(raw, where)
    dimensions = {
        code: _decode_price_dimension(dimension, f"{where}.priceDimensions.{code}")
        for code, dimension in _optional_mapping(
            raw.get("priceDimensions"), f"{where}.priceDimensions"
        ).items()
    }
    return Term(
        sku=_text(raw, "sku", where),
        offer_term_code=_text(raw, "offerTermCode", where),
        effective_date=_timestamp(raw, "effectiveDate", where),
        price_dimensions=dimensions,
        attributes=_optional_mapping(
            raw.get("termAttributes"), f"{where}.termAttributes"
        ),
    )


def _decode_price_dimension(raw: Any, where: str) -> PriceDimension:
    _expect_mapping(raw, where)
    prices = _optional_mapping(raw.get("pricePerUnit"), f"{where}.pricePerUnit")
    for currency, price in prices.items():
        if not isinstance(price, str):
            raise CatalogDecodeError(
                f"{where}.pricePerUnit.{currency}: expected a decimal string, "
                f"got {type(price).__name__}"
            )
    return PriceDimension(
        rate_code=_text(raw, "rateCode", where),
        description=_text(raw, "description", where),
        begin_range=_text(raw, "beginRange", where),
        end_range=_text(raw, "endRange", where),
        unit=_text(raw, "unit", where),
        price_per_unit=prices,
    )


def _expect_mapping(value: Any, where: str) -> dict:
    if not isinstance(value, dict):
        raise CatalogDecodeError(
            f"{where}: expected an object, got {type(value).__name__}"
        )
    return value


def _optional_mapping(value: Any, where: str) -> dict:
    # absent and null maps decode as empty
    if value is None:
        return {}
    return _expect_mapping(value, where)


def _text(raw: dict, key: str, where: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise CatalogDecodeError(
            f"{where}.{key}: expected a string, got {type(value).__name__}"
        )
    return value


def _timestamp(raw: dict, key: str, where: str) -> Optional[datetime]:
    value = _text(raw, key, where)
    if value == "":
        return None
    # fromisoformat only accepts a trailing "Z" from Python 3.11
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise CatalogDecodeError(f"{where}.{key}: invalid timestamp {value!r}") from e
