"""Batched launch-time lookup using the EC2 DescribeInstances API."""
import os
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..core.errors import InstanceLookupError
from ..core.logger import setup_logger

logger = setup_logger(__name__)

# DescribeInstances accepts at most 200 values per filter
MAX_FILTER_VALUES = 200


def describe_launch_times(
    instance_ids: Iterable[str],
    client: Any = None,
    region: Optional[str] = None,
) -> Dict[str, datetime]:
    """Resolve the launch time of every given instance.

    The ids are looked up through an ``instance-id`` filter rather than
    ``InstanceIds`` so that instances which disappeared since the ASGs were
    described are simply absent from the result instead of failing the call.

    Args:
        instance_ids: Instance ids to resolve; duplicates are ignored
        client: Optional boto3 ec2 client
        region: AWS region (defaults to AWS_REGION env var or us-east-1)

    Returns:
        Mapping of instance id to launch time for every instance found

    Raises:
        InstanceLookupError: If the AWS call fails
    """
    unique_ids = list(dict.fromkeys(instance_ids))
    if not unique_ids:
        return {}

    if client is None:
        region = region or os.environ.get("AWS_REGION", "us-east-1")
        client = boto3.client("ec2", region_name=region)

    launch_times: Dict[str, datetime] = {}
    try:
        paginator = client.get_paginator("describe_instances")
        for batch in _chunks(unique_ids, MAX_FILTER_VALUES):
            page_iterator = paginator.paginate(
                Filters=[{"Name": "instance-id", "Values": batch}]
            )
            for page in page_iterator:
                for reservation in page.get("Reservations", []):
                    for instance in reservation.get("Instances", []):
                        launch_times[instance["InstanceId"]] = instance["LaunchTime"]
    except (ClientError, BotoCoreError) as e:
        raise InstanceLookupError(f"AWS API error describing instances: {str(e)}") from e

    missing = [instance_id for instance_id in unique_ids if instance_id not in launch_times]
    if missing:
        logger.info(f"{len(missing)} candidate instances no longer exist: {missing}")

    logger.debug(f"Resolved launch times for {len(launch_times)} instances")
    return launch_times


def _chunks(items: List[str], size: int) -> Iterable[List[str]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]
