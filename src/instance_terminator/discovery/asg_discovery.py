"""Auto Scaling Group discovery using the DescribeAutoScalingGroups API."""
import os
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..core.errors import DiscoveryError
from ..core.logger import setup_logger
from ..core.models import AsgInstance, AutoScalingGroup

logger = setup_logger(__name__)


def list_auto_scaling_groups(client: Any = None, region: Optional[str] = None) -> List[AutoScalingGroup]:
    """Describe every Auto Scaling Group in the region.

    Args:
        client: Optional boto3 autoscaling client
        region: AWS region (defaults to AWS_REGION env var or us-east-1)

    Returns:
        List of groups with their tags, sizing and instance states

    Raises:
        DiscoveryError: If the AWS call fails
    """
    if client is None:
        region = region or os.environ.get("AWS_REGION", "us-east-1")
        client = boto3.client("autoscaling", region_name=region)

    groups: List[AutoScalingGroup] = []
    try:
        paginator = client.get_paginator("describe_auto_scaling_groups")
        for page in paginator.paginate():
            for group_info in page.get("AutoScalingGroups", []):
                groups.append(_parse_group(group_info))
    except (ClientError, BotoCoreError) as e:
        raise DiscoveryError(f"AWS API error describing Auto Scaling Groups: {str(e)}") from e

    logger.info(f"Discovered {len(groups)} Auto Scaling Groups")
    return groups


def _parse_group(group_info: Dict[str, Any]) -> AutoScalingGroup:
    """Convert one DescribeAutoScalingGroups entry into an AutoScalingGroup.

    Groups with no running instances come back without an ``Instances`` key.
    """
    return AutoScalingGroup(
        name=group_info["AutoScalingGroupName"],
        min_size=group_info.get("MinSize", 0),
        max_size=group_info.get("MaxSize", 0),
        desired_capacity=group_info.get("DesiredCapacity", 0),
        instances=[
            AsgInstance(
                instance_id=instance["InstanceId"],
                lifecycle_state=instance.get("LifecycleState", ""),
                health_status=instance.get("HealthStatus", ""),
            )
            for instance in group_info.get("Instances", [])
        ],
        tags={tag["Key"]: tag.get("Value", "") for tag in group_info.get("Tags", [])},
    )
