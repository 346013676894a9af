"""Command line entry point: retrieve EC2 instance types and prices."""

import argparse
import logging
import sys
import time
from typing import Optional

from ec2_pricing.aws.client import create_clients
from ec2_pricing.config import load_settings
from ec2_pricing.monitoring import MemoryMonitor, log_memory_usage
from ec2_pricing.retrieval import retrieve

logger = logging.getLogger("ec2_pricing.cli")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the ec2-pricing command."""
    parser = argparse.ArgumentParser(
        prog="ec2-pricing",
        description="Retrieve the EC2 instance type catalog and price list.",
    )
    parser.add_argument("--profile", help="which aws profile to use")
    parser.add_argument(
        "--region",
        help="load prices for this specific region instead of the default region",
    )
    parser.add_argument(
        "--price-file",
        help="use a specific price file instead of downloading the latest one",
    )
    parser.add_argument("--service-code", help="price list service code")
    parser.add_argument("--currency", help="price list currency code")
    parser.add_argument("-v", "--verbose", action="store_true", help="verbose logging")
    return parser


def configure_logging(verbose: bool) -> None:
    """Configure root logging, at debug level when ``verbose`` is set."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s.%(msecs)03d - %(levelname)s - %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # boto's own debug output drowns ours
    for name in ("boto3", "botocore", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)


def main(argv: Optional[list[str]] = None) -> int:
    """Run a retrieval and print a summary.

    Command line flags override settings loaded from the environment.

    Args:
        argv: Command line arguments, ``sys.argv[1:]`` when None

    Returns:
        Process exit code: 0 on success, 1 if the retrieval failed
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    start = time.monotonic()

    settings = load_settings()
    if args.profile:
        settings.profile = args.profile
    if args.region:
        settings.region = args.region
    if args.service_code:
        settings.service_code = args.service_code
    if args.currency:
        settings.currency = args.currency

    try:
        with MemoryMonitor(interval=settings.memory_log_interval):
            clients = create_clients(settings.profile, settings.region)
            result = retrieve(clients, settings=settings, price_file=args.price_file)
    except Exception as e:
        logger.error(f"Failed to retrieve EC2 pricing: {e}", exc_info=args.verbose)
        return 1

    catalog = result.catalog
    print(f"region: {result.region}")
    print(f"instance types: {len(result.instance_types)}")
    print(f"products: {len(catalog.products)}")
    print(f"terms: {sum(1 for _ in catalog.iter_terms())}")
    print(f"defaulted attributes: {len(catalog.anomalies)}")

    log_memory_usage()
    logger.info(f"Done in {time.monotonic() - start:.2f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
