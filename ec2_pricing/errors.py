"""Exception types raised by the EC2 pricing retrieval.

Transport and authentication failures from boto3/botocore and requests are
not wrapped; they propagate unmodified so callers can inspect the original
error.
"""

from typing import Optional


class PricingError(Exception):
    """Base class for errors raised by this package."""


class PaginationError(PricingError):
    """Raised when a paged API misbehaves while being drained."""


class RepeatedCursorError(PaginationError):
    """Raised when a paged API returns a cursor it already returned before."""

    def __init__(self, cursor: str, page: int):
        self.cursor = cursor
        self.page = page
        super().__init__(
            f"Pagination returned repeated cursor {cursor!r} on page {page}, "
            "which would lead to an infinite loop"
        )


class PageLimitExceededError(PaginationError):
    """Raised when a paged API does not finish within the page limit."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Too many pages to iterate (limit {limit})")


class RetrievalCancelledError(PricingError):
    """Raised when a shared cancellation signal stops a retrieval."""


class PriceFileHTTPError(PricingError):
    """Raised when the price list download answers with a 4xx or 5xx status."""

    def __init__(self, status_code: int, url: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        super().__init__(f"Got status code {status_code} fetching price file")


class CatalogDecodeError(PricingError):
    """Raised when a pricing document does not match the expected shape."""


class NoPriceListError(PricingError):
    """Raised when the price list listing returns no price lists."""

    def __init__(self, service_code: str, region: str, currency: str):
        self.service_code = service_code
        self.region = region
        self.currency = currency
        super().__init__(
            f"No price list found for {service_code} in {region} ({currency})"
        )
