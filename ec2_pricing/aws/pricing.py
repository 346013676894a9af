"""AWS price list retrieval and loading.

This module locates the current price list file through the AWS Pricing
API, downloads it from its signed URL and decodes it into a linked
PriceCatalog. A locally cached copy of the file can be loaded the same way.
"""

import io
import json
import logging
import threading
import time
from datetime import datetime
from typing import IO, Any, Optional

import requests
from botocore.exceptions import BotoCoreError, ClientError

from ec2_pricing.aws.pagination import check_cancelled, paginate
from ec2_pricing.catalog.decoder import decode_catalog
from ec2_pricing.catalog.linker import link_terms
from ec2_pricing.catalog.models import PriceCatalog
from ec2_pricing.errors import CatalogDecodeError, NoPriceListError, PriceFileHTTPError

logger = logging.getLogger("ec2_pricing.aws.pricing")

PRICE_LIST_FILE_FORMAT = "json"
DEFAULT_HTTP_TIMEOUT = 300.0
DOWNLOAD_CHUNK_SIZE = 1024 * 1024


def load_prices(
    pricing_client,
    when: datetime,
    region: str,
    service_code: str = "AmazonEC2",
    currency: str = "USD",
    page_size: int = 100,
    timeout: float = DEFAULT_HTTP_TIMEOUT,
    cancel_event: Optional[threading.Event] = None,
) -> PriceCatalog:
    """Load the price list in effect at ``when`` for a service and region.

    Args:
        pricing_client: Boto3 pricing client
        when: Effective date of the price list
        region: Region code, e.g. "us-east-1"
        service_code: Service code, e.g. "AmazonEC2"
        currency: Currency code, e.g. "USD"
        page_size: MaxResults hint per ListPriceLists call
        timeout: Download timeout in seconds
        cancel_event: Optional shared cancellation signal

    Returns:
        Linked PriceCatalog

    Raises:
        NoPriceListError: If no price list matches the filter
        PriceFileHTTPError: If the download answers with a 4xx/5xx status
        CatalogDecodeError: If the document cannot be decoded
        RetrievalCancelledError: If ``cancel_event`` is set before the
            catalog is loaded
    """
    listing = price_listing(
        pricing_client,
        when,
        region,
        service_code=service_code,
        currency=currency,
        page_size=page_size,
        cancel_event=cancel_event,
    )
    if not listing:
        raise NoPriceListError(service_code, region, currency)

    check_cancelled(cancel_event, "before resolving the price list URL")
    url = price_list_url(pricing_client, listing[0]["PriceListArn"])

    check_cancelled(cancel_event, "before downloading the price file")
    return fetch_prices(url, timeout=timeout, cancel_event=cancel_event)


def price_listing(
    pricing_client,
    when: datetime,
    region: str,
    service_code: str = "AmazonEC2",
    currency: str = "USD",
    page_size: int = 100,
    cancel_event: Optional[threading.Event] = None,
) -> list[dict[str, Any]]:
    """List the price list descriptors matching a service, region and date.

    Returns:
        PriceLists records as returned by ListPriceLists

    Raises:
        ClientError: If the Pricing API call fails
        BotoCoreError: If boto3 client error occurs
    """
    start = time.monotonic()
    results: list[dict[str, Any]] = []

    def fetch_page(next_token: Optional[str]) -> Optional[str]:
        request: dict[str, Any] = {
            "ServiceCode": service_code,
            "EffectiveDate": when,
            "RegionCode": region,
            "CurrencyCode": currency,
            "MaxResults": page_size,
        }
        if next_token:
            request["NextToken"] = next_token
        response = pricing_client.list_price_lists(**request)
        results.extend(response.get("PriceLists", []))
        logger.debug(f"Listed {len(results)} price lists so far")
        return response.get("NextToken")

    try:
        paginate(fetch_page, cancel_event=cancel_event)
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Failed to list price lists from AWS Pricing API: {e}")
        raise

    logger.debug(
        f"Listed {len(results)} price lists in {time.monotonic() - start:.2f}s",
        extra={"price_lists": len(results)},
    )
    return results


def price_list_url(pricing_client, price_list_arn: str) -> str:
    """Resolve the signed download URL of a price list's JSON file."""
    try:
        response = pricing_client.get_price_list_file_url(
            PriceListArn=price_list_arn,
            FileFormat=PRICE_LIST_FILE_FORMAT,
        )
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Failed to resolve price list URL for {price_list_arn}: {e}")
        raise

    url = response.get("Url") or ""
    logger.debug(f"Resolved price list URL for {price_list_arn}")
    return url


def fetch_prices(
    url: str,
    timeout: float = DEFAULT_HTTP_TIMEOUT,
    cancel_event: Optional[threading.Event] = None,
) -> PriceCatalog:
    """Download and load a price list file.

    The response body is read in chunks and always closed, also when the
    download is cancelled or decoding fails. ``cancel_event`` is checked
    after every chunk. No retry is attempted.

    Args:
        url: Signed price list file URL
        timeout: Connect/read timeout in seconds
        cancel_event: Optional shared cancellation signal

    Returns:
        Linked PriceCatalog

    Raises:
        PriceFileHTTPError: If the server answers with a 4xx/5xx status
        CatalogDecodeError: If the document cannot be decoded
        RetrievalCancelledError: If ``cancel_event`` is set during the download
        requests.RequestException: If the transport fails
    """
    start = time.monotonic()
    body = io.BytesIO()
    with requests.get(url, stream=True, timeout=timeout) as response:
        if 400 <= response.status_code < 600:
            logger.error(f"Price file download failed with status {response.status_code}")
            raise PriceFileHTTPError(response.status_code, url=url)

        size = response.headers.get("Content-Length")
        logger.debug(f"Downloading price file body ({size} bytes)")
        for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
            check_cancelled(cancel_event, "during the price file download")
            body.write(chunk)

    logger.debug(f"Downloaded price file in {time.monotonic() - start:.2f}s")
    body.seek(0)
    return load_prices_data(body)


def load_prices_file(path: str) -> PriceCatalog:
    """Load a locally cached price list file."""
    with open(path, "rb") as stream:
        return load_prices_data(stream)


def load_prices_data(stream: IO[bytes]) -> PriceCatalog:
    """Decode a price list document from a byte stream and link its terms.

    Raises:
        CatalogDecodeError: If the stream is not a valid pricing document
    """
    start = time.monotonic()
    try:
        document = json.load(stream)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise CatalogDecodeError(f"Price file is not valid JSON: {e}") from e

    catalog = link_terms(decode_catalog(document))

    if catalog.anomalies:
        logger.warning(
            f"{len(catalog.anomalies)} product attributes could not be parsed "
            "and were defaulted"
        )
    logger.debug(
        f"Loaded {len(catalog.products)} products in {time.monotonic() - start:.2f}s",
        extra={"products": len(catalog.products)},
    )
    return catalog
