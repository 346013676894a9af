"""Shared fixtures for unit tests."""

import io
import json

import pytest


@pytest.fixture
def sample_document():
    """A small price list with two products and three on-demand terms.

    One term references a SKU without a product.
    """
    return {
        "formatVersion": "v1.0",
        "disclaimer": "This pricing list is for informational purposes only.",
        "offerCode": "AmazonEC2",
        "version": "20230601194238",
        "publicationDate": "2023-06-01T19:42:38Z",
        "products": {
            "SKU1": {
                "sku": "SKU1",
                "productFamily": "Compute Instance",
                "attributes": {
                    "regionCode": "us-east-1",
                    "instanceFamily": "Storage optimized",
                    "instanceType": "i3en.xlarge",
                    "currentGeneration": "Yes",
                    "operatingSystem": "Linux",
                    "licenseModel": "No License required",
                    "tenancy": "Shared",
                    "capacitystatus": "Used",
                    "normalizationSizeFactor": "8",
                    "physicalProcessor": "Intel Xeon Platinum 8259CL",
                    "processorFeatures": "Intel AVX; Intel AVX2; Intel AVX512; Intel Turbo",
                    "clockSpeed": "3.1 GHz",
                    "vcpu": "4",
                    "memory": "32 GiB",
                    "storage": "1 x 2500 NVMe SSD",
                    "networkPerformance": "Up to 25 Gigabit",
                    "dedicatedEbsThroughput": "Up to 4750 Megabit",
                    "enhancedNetworkingSupported": "Yes",
                },
            },
            "SKU2": {
                "sku": "SKU2",
                "productFamily": "Compute Instance",
                "attributes": {
                    "regionCode": "us-east-1",
                    "instanceType": "m6g.medium",
                    "currentGeneration": "Yes",
                    "physicalProcessor": "AWS Graviton2 Processor",
                    "clockSpeed": "2.5 GHz",
                    "vcpu": "1",
                    "gpu": "NA",
                    "memory": "4 GiB",
                    "storage": "EBS Only",
                    "networkPerformance": "Blazing",
                    "enhancedNetworkingSupported": "No",
                },
            },
        },
        "terms": {
            "OnDemand": {
                "SKU1": {
                    "SKU1.JRTCKXETXF": {
                        "sku": "SKU1",
                        "offerTermCode": "JRTCKXETXF",
                        "effectiveDate": "2023-06-01T00:00:00Z",
                        "priceDimensions": {
                            "SKU1.JRTCKXETXF.6YS6EN2CT7": {
                                "rateCode": "SKU1.JRTCKXETXF.6YS6EN2CT7",
                                "description": "$0.452 per On Demand Linux i3en.xlarge Instance Hour",
                                "beginRange": "0",
                                "endRange": "Inf",
                                "unit": "Hrs",
                                "pricePerUnit": {"USD": "0.4520000000"},
                            }
                        },
                        "termAttributes": {},
                    }
                },
                "SKU2": {
                    "SKU2.JRTCKXETXF": {
                        "sku": "SKU2",
                        "offerTermCode": "JRTCKXETXF",
                        "effectiveDate": "2023-06-01T00:00:00Z",
                        "priceDimensions": {
                            "SKU2.JRTCKXETXF.6YS6EN2CT7": {
                                "rateCode": "SKU2.JRTCKXETXF.6YS6EN2CT7",
                                "description": "$0.0385 per On Demand Linux m6g.medium Instance Hour",
                                "beginRange": "0",
                                "endRange": "Inf",
                                "unit": "Hrs",
                                "pricePerUnit": {"USD": "0.0385000000", "CNY": "0.2700000000"},
                            }
                        },
                        "termAttributes": {},
                    }
                },
                "SKU9": {
                    "SKU9.JRTCKXETXF": {
                        "sku": "SKU9",
                        "offerTermCode": "JRTCKXETXF",
                        "effectiveDate": "2023-06-01T00:00:00Z",
                        "priceDimensions": {},
                        "termAttributes": {"LeaseContractLength": "1yr"},
                    }
                },
            }
        },
        "attributeList": {"instanceType": ["i3en.xlarge", "m6g.medium"]},
    }


@pytest.fixture
def sample_stream(sample_document):
    """The sample document as a byte stream."""
    return io.BytesIO(json.dumps(sample_document).encode("utf-8"))
