"""AWS API access: paged listings, price list lookup and download.

This package wraps the boto3 EC2 and Pricing clients and the signed price
file download behind plain functions.
"""

from ec2_pricing.aws import client, ec2, pagination, pricing

__all__ = ["client", "ec2", "pagination", "pricing"]
