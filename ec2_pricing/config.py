"""Runtime configuration for EC2 pricing retrieval."""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    """Retrieval settings.

    Attributes:
        profile: AWS shared config profile, None for the default chain
        region: Region to list instance types and prices for, None to use the
            region boto3 resolves
        service_code: Price list service code
        currency: Price list currency code
        page_size: Page size hint for the paged AWS APIs
        http_timeout: Timeout in seconds for the price file download
        memory_log_interval: Seconds between memory usage log lines
    """

    profile: Optional[str] = None
    region: Optional[str] = None
    service_code: str = "AmazonEC2"
    currency: str = "USD"
    page_size: int = 100
    http_timeout: float = 300.0
    memory_log_interval: float = 10.0


def load_settings() -> Settings:
    """Build Settings from environment variables, falling back to defaults."""
    return Settings(
        profile=os.getenv("AWS_PROFILE") or None,
        region=os.getenv("AWS_REGION") or None,
        service_code=os.getenv("EC2_PRICING_SERVICE_CODE", "AmazonEC2"),
        currency=os.getenv("EC2_PRICING_CURRENCY", "USD"),
        page_size=int(os.getenv("EC2_PRICING_PAGE_SIZE", "100")),
        http_timeout=float(os.getenv("EC2_PRICING_HTTP_TIMEOUT", "300")),
        memory_log_interval=float(os.getenv("EC2_PRICING_MEMORY_LOG_INTERVAL", "10")),
    )
