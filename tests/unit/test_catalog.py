"""Unit tests for catalog decoding and term linking."""

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from ec2_pricing.catalog import decode_catalog, link_terms
from ec2_pricing.catalog.models import (
    TERM_TYPE_ON_DEMAND,
    FieldAnomaly,
    InstanceProcessor,
    InstanceStorage,
    PriceCatalog,
    PriceDimension,
    Product,
    Range,
    Term,
)
from ec2_pricing.errors import CatalogDecodeError


def test_decode_catalog_metadata(sample_document):
    """Test document metadata is decoded."""
    catalog = decode_catalog(sample_document)

    assert catalog.format_version == "v1.0"
    assert catalog.offer_code == "AmazonEC2"
    assert catalog.version == "20230601194238"
    assert catalog.publication_date == datetime(2023, 6, 1, 19, 42, 38, tzinfo=timezone.utc)
    assert catalog.attribute_list == sample_document["attributeList"]


def test_decode_catalog_normalizes_attributes(sample_document):
    """Test product attributes are parsed into typed values."""
    catalog = decode_catalog(sample_document)
    attributes = catalog.products["SKU1"].attributes

    assert catalog.products["SKU1"].family == "Compute Instance"
    assert attributes.instance_type == "i3en.xlarge"
    assert attributes.capacity_status == "Used"
    assert attributes.current_generation is True
    assert attributes.size_factor == 8.0
    assert attributes.processor == InstanceProcessor(make="Intel", model="Xeon Platinum 8259CL")
    assert attributes.processor_features == (
        "Intel AVX",
        "Intel AVX2",
        "Intel AVX512",
        "Intel Turbo",
    )
    assert attributes.clock_speed == Range(unit="ghz", min=3.1, max=3.1)
    assert attributes.vcpus == 4
    assert attributes.gpus == 0
    assert attributes.memory_mib == 32768
    assert attributes.storage == InstanceStorage(amount=1, size_mb=2500, type="NVMe SSD")
    assert (attributes.network_performance.min, attributes.network_performance.max) == (0, 25)
    assert attributes.dedicated_ebs_throughput.max == 4.75
    assert attributes.enhanced_networking_supported is True


def test_decode_catalog_uses_defaults_for_missing_attributes(sample_document):
    """Test absent attributes get their defaults without anomalies."""
    catalog = decode_catalog(sample_document)
    attributes = catalog.products["SKU2"].attributes

    assert attributes.size_factor == -1.0
    assert attributes.processor_features == ()
    assert attributes.dedicated_ebs_throughput.is_set is False
    assert attributes.enhanced_networking_supported is False
    assert FieldAnomaly(sku="SKU2", attribute="normalizationSizeFactor", raw="") not in (
        catalog.anomalies
    )


def test_decode_catalog_records_anomalies(sample_document):
    """Test unparseable attributes are recorded instead of failing the load."""
    catalog = decode_catalog(sample_document)

    assert FieldAnomaly(sku="SKU2", attribute="gpu", raw="NA") in catalog.anomalies
    assert (
        FieldAnomaly(sku="SKU2", attribute="networkPerformance", raw="Blazing")
        in catalog.anomalies
    )
    assert catalog.products["SKU2"].attributes.network_performance.is_unparseable


def test_decode_catalog_terms_start_unlinked(sample_document):
    """Test decoded terms have no product until linked."""
    catalog = decode_catalog(sample_document)

    assert all(term.product is None for _, term in catalog.iter_terms())


def test_decode_catalog_rejects_wrong_shape(sample_document):
    """Test malformed documents raise CatalogDecodeError."""
    sample_document["products"] = ["SKU1"]

    with pytest.raises(CatalogDecodeError):
        decode_catalog(sample_document)


def test_decode_catalog_rejects_numeric_prices(sample_document):
    """Test prices must stay decimal strings."""
    dimensions = sample_document["terms"]["OnDemand"]["SKU1"]["SKU1.JRTCKXETXF"][
        "priceDimensions"
    ]
    dimensions["SKU1.JRTCKXETXF.6YS6EN2CT7"]["pricePerUnit"]["USD"] = 0.452

    with pytest.raises(CatalogDecodeError):
        decode_catalog(sample_document)


def test_decode_catalog_rejects_invalid_dates(sample_document):
    """Test unreadable timestamps raise CatalogDecodeError."""
    sample_document["publicationDate"] = "yesterday"

    with pytest.raises(CatalogDecodeError):
        decode_catalog(sample_document)


def test_link_terms_attaches_products(sample_document):
    """Test two of three terms are linked and the unknown SKU is left alone."""
    catalog = link_terms(decode_catalog(sample_document))
    terms = {term.sku: term for _, term in catalog.iter_terms()}

    assert len(terms) == 3
    assert terms["SKU1"].product is catalog.products["SKU1"]
    assert terms["SKU2"].product is catalog.products["SKU2"]
    assert terms["SKU9"].product is None
    assert sum(1 for term in terms.values() if term.product is not None) == 2


def test_link_terms_does_not_mutate_input():
    """Test linking returns a new catalog."""
    product = Product(sku="A")
    unlinked = PriceCatalog(
        products={"A": product},
        terms={TERM_TYPE_ON_DEMAND: {"A": {"A.X": Term(sku="A")}}},
    )

    linked = link_terms(unlinked)

    assert unlinked.terms[TERM_TYPE_ON_DEMAND]["A"]["A.X"].product is None
    assert linked.terms[TERM_TYPE_ON_DEMAND]["A"]["A.X"].product is product
    assert linked.product_for(linked.terms_for_sku("A")[0]) is product


def test_price_per_unit_round_trip(sample_document):
    """Test price strings are re-encoded byte for byte."""
    catalog = decode_catalog(sample_document)
    term = catalog.terms_for_sku("SKU2")[0]
    encoded = json.loads(json.dumps(term.to_dict()))

    raw = sample_document["terms"]["OnDemand"]["SKU2"]["SKU2.JRTCKXETXF"]
    assert encoded["priceDimensions"] == raw["priceDimensions"]


def test_price_dimension_decimal_price(sample_document):
    """Test prices can be read as Decimal without losing precision."""
    catalog = decode_catalog(sample_document)
    dimension = next(iter(catalog.terms_for_sku("SKU1")[0].price_dimensions.values()))

    assert dimension.price("USD") == Decimal("0.4520000000")
    assert dimension.price("EUR") is None


@pytest.mark.parametrize(
    "key", ["termAttributes", "priceDimensions", "pricePerUnit", "attributes"]
)
def test_decode_catalog_accepts_null_maps(sample_document, key):
    """Test a JSON null map decodes as an empty map instead of failing."""
    term = sample_document["terms"]["OnDemand"]["SKU1"]["SKU1.JRTCKXETXF"]
    if key == "pricePerUnit":
        term["priceDimensions"]["SKU1.JRTCKXETXF.6YS6EN2CT7"][key] = None
    elif key == "attributes":
        sample_document["products"]["SKU1"][key] = None
    else:
        term[key] = None

    catalog = decode_catalog(sample_document)

    decoded = catalog.terms_for_sku("SKU1")[0]
    if key == "termAttributes":
        assert dict(decoded.attributes) == {}
    elif key == "priceDimensions":
        assert dict(decoded.price_dimensions) == {}
    elif key == "pricePerUnit":
        dimension = decoded.price_dimensions["SKU1.JRTCKXETXF.6YS6EN2CT7"]
        assert dimension.price("USD") is None
    else:
        assert catalog.products["SKU1"].attributes.instance_type == ""


def test_decode_catalog_accepts_null_products_and_terms(sample_document):
    """Test null top-level products and terms give an empty catalog."""
    sample_document["products"] = None
    sample_document["terms"] = None

    catalog = decode_catalog(sample_document)

    assert dict(catalog.products) == {}
    assert list(catalog.iter_terms()) == []
    assert catalog.offer_code == "AmazonEC2"


def test_linked_catalog_is_read_only(sample_document):
    """Test a loaded catalog cannot be changed through its mappings."""
    catalog = link_terms(decode_catalog(sample_document))
    term = catalog.terms_for_sku("SKU1")[0]
    dimension = next(iter(term.price_dimensions.values()))

    with pytest.raises(TypeError):
        catalog.products["SKU1"] = None
    with pytest.raises(TypeError):
        catalog.terms[TERM_TYPE_ON_DEMAND]["SKU1"]["extra"] = term
    with pytest.raises(TypeError):
        dimension.price_per_unit["USD"] = "0"
    with pytest.raises(TypeError):
        del term.attributes["x"]
    with pytest.raises(AttributeError):
        term.price_dimensions.clear()

    assert dimension.price("USD") == Decimal("0.4520000000")


def test_catalog_does_not_share_state_with_its_inputs():
    """Test later changes to the source dicts do not leak into a catalog."""
    products = {"A": Product(sku="A")}
    prices = {"USD": "1.0"}
    dimension = PriceDimension(rate_code="A.X.Y", price_per_unit=prices)
    unlinked = PriceCatalog(
        products=products,
        terms={TERM_TYPE_ON_DEMAND: {"A": {"A.X": Term(sku="A")}}},
    )
    linked = link_terms(unlinked)

    products["B"] = Product(sku="B")
    prices["USD"] = "2.0"

    assert "B" not in unlinked.products
    assert "B" not in linked.products
    assert dimension.price("USD") == Decimal("1.0")


def test_terms_and_price_dimensions_are_hashable(sample_document):
    """Test terms can be hashed and used in sets."""
    catalog = link_terms(decode_catalog(sample_document))
    terms = [term for _, term in catalog.iter_terms()]

    assert len(set(terms)) == 3
    unlinked = decode_catalog(sample_document).terms_for_sku("SKU1")[0]
    linked = catalog.terms_for_sku("SKU1")[0]
    # the product reference does not take part in equality
    assert unlinked == linked
    assert hash(unlinked) == hash(linked)
    assert hash(catalog) == hash(catalog)
