"""EC2 instance type listing."""

import logging
import threading
import time
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError

from ec2_pricing.aws.pagination import paginate

logger = logging.getLogger("ec2_pricing.aws.ec2")


def list_instance_types(
    ec2_client,
    page_size: int = 100,
    cancel_event: Optional[threading.Event] = None,
) -> list[dict[str, Any]]:
    """List every instance type offered in the client's region.

    Args:
        ec2_client: Boto3 EC2 client
        page_size: MaxResults hint per DescribeInstanceTypes call
        cancel_event: Optional shared cancellation signal

    Returns:
        InstanceTypes records as returned by DescribeInstanceTypes

    Raises:
        ClientError: If the EC2 API call fails
        BotoCoreError: If boto3 client error occurs
    """
    start = time.monotonic()
    results: list[dict[str, Any]] = []

    def fetch_page(next_token: Optional[str]) -> Optional[str]:
        request: dict[str, Any] = {"MaxResults": page_size}
        if next_token:
            request["NextToken"] = next_token
        response = ec2_client.describe_instance_types(**request)
        results.extend(response.get("InstanceTypes", []))
        logger.debug(f"Listed {len(results)} instance types so far")
        return response.get("NextToken")

    try:
        paginate(fetch_page, cancel_event=cancel_event)
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Failed to list instance types from EC2 API: {e}")
        raise

    logger.debug(
        f"Listed {len(results)} instance types in {time.monotonic() - start:.2f}s",
        extra={"instance_types": len(results)},
    )
    return results
