"""EC2 instance type and price list retrieval.

This package lists EC2 instance types, downloads the EC2 price list and
normalizes its free-text attributes into a typed, cross-referenced catalog.
"""

from ec2_pricing.aws.pricing import fetch_prices, load_prices, load_prices_data
from ec2_pricing.catalog.models import PriceCatalog
from ec2_pricing.retrieval import RetrievalResult, retrieve

__version__ = "0.1.0"

__all__ = [
    "fetch_prices",
    "load_prices",
    "load_prices_data",
    "PriceCatalog",
    "RetrievalResult",
    "retrieve",
]
