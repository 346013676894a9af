"""Concurrent retrieval of instance types and prices.

Instance type listing and price catalog retrieval run as two independent
tasks sharing one cancellation event. The first task to fail sets the
event and its error is raised to the caller at once, without waiting for
the other task to wind down.
"""

import logging
import threading
import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from ec2_pricing.aws import ec2, pricing
from ec2_pricing.aws.client import AWSClients
from ec2_pricing.catalog.models import PriceCatalog
from ec2_pricing.config import Settings
from ec2_pricing.errors import RetrievalCancelledError

logger = logging.getLogger("ec2_pricing.retrieval")


@dataclass
class RetrievalResult:
    """Instance types and price catalog for one region."""

    region: str
    instance_types: list[dict[str, Any]]
    catalog: PriceCatalog


def retrieve(
    clients: AWSClients,
    settings: Optional[Settings] = None,
    when: Optional[datetime] = None,
    price_file: Optional[str] = None,
    cancel_event: Optional[threading.Event] = None,
) -> RetrievalResult:
    """Retrieve instance types and prices concurrently.

    Args:
        clients: EC2 and Pricing clients
        settings: Retrieval settings, defaults when None
        when: Price list effective date, now when None
        price_file: Load prices from this local file instead of AWS
        cancel_event: Event the caller can set to stop both tasks. A private
            event is used when None.

    Returns:
        RetrievalResult for ``clients.region``

    Raises:
        The first error raised by either task, in order of failure.
    """
    settings = settings or Settings()
    when = when or datetime.now(timezone.utc)
    cancel_event = cancel_event or threading.Event()
    start = time.monotonic()

    def list_instance_types() -> list[dict[str, Any]]:
        logger.info(f"Listing instance types in {clients.region}")
        return ec2.list_instance_types(
            clients.ec2, page_size=settings.page_size, cancel_event=cancel_event
        )

    def load_catalog() -> PriceCatalog:
        if price_file:
            logger.info(f"Loading prices from local file {price_file}")
            return pricing.load_prices_file(price_file)

        logger.info(f"Loading current prices for {clients.region} from AWS")
        catalog = pricing.load_prices(
            clients.pricing,
            when,
            clients.region,
            service_code=settings.service_code,
            currency=settings.currency,
            page_size=settings.page_size,
            timeout=settings.http_timeout,
            cancel_event=cancel_event,
        )
        if cancel_event.is_set():
            raise RetrievalCancelledError("Price retrieval cancelled")
        return catalog

    failures: list[Exception] = []
    failures_lock = threading.Lock()

    def run(task: Callable[[], Any]) -> Any:
        # recorded before the future completes, so failures is in completion order
        try:
            return task()
        except Exception as e:
            with failures_lock:
                failures.append(e)
            cancel_event.set()
            raise

    executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="retrieval")
    try:
        instance_types_future = executor.submit(run, list_instance_types)
        catalog_future = executor.submit(run, load_catalog)
        wait([instance_types_future, catalog_future], return_when=FIRST_EXCEPTION)
    finally:
        # after a failure the other task stops on its own at its next check
        executor.shutdown(wait=not failures, cancel_futures=True)

    if failures:
        error = failures[0]
        logger.error(f"Retrieval failed: {error}")
        raise error

    logger.info(f"Retrieved prices in {time.monotonic() - start:.2f}s")
    return RetrievalResult(
        region=clients.region,
        instance_types=instance_types_future.result(),
        catalog=catalog_future.result(),
    )
