"""boto3 clients for the EC2 and Pricing APIs."""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import boto3

logger = logging.getLogger("ec2_pricing.aws.client")

# The Pricing API is only served from a few regions; us-east-1 is one of them
PRICING_API_REGION = "us-east-1"


@dataclass
class AWSClients:
    """EC2 and Pricing clients sharing one session."""

    region: str
    ec2: Any
    pricing: Any


def create_clients(
    profile: Optional[str] = None, region: Optional[str] = None
) -> AWSClients:
    """Create clients from a shared config profile and region.

    Args:
        profile: AWS profile name, None for the default credential chain
        region: Region for the EC2 client, None to use the profile's region

    Returns:
        AWSClients with the resolved region
    """
    session = boto3.Session(profile_name=profile, region_name=region)
    resolved_region = session.region_name or PRICING_API_REGION

    logger.debug(f"Creating AWS clients for region {resolved_region}")
    return AWSClients(
        region=resolved_region,
        ec2=session.client("ec2", region_name=resolved_region),
        pricing=session.client("pricing", region_name=PRICING_API_REGION),
    )
