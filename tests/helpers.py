"""
Test helper utilities.

Fake AWS clients and response builders shared by the test modules.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock


def create_mock_lambda_context(
    function_name="instance-terminator",
    request_id="test-request-123",
):
    """
    Create a mock Lambda context object with proper attributes.

    Attributes are set to real values instead of MagicMock objects so that
    they serialize cleanly in JSON log lines.
    """
    context = MagicMock()
    context.function_name = function_name
    context.aws_request_id = request_id
    context.invoked_function_arn = (
        f"arn:aws:lambda:eu-west-1:123456789012:function:{function_name}"
    )
    return context


def launch_time(iso):
    """Parse an ISO timestamp the way botocore returns LaunchTime."""
    return datetime.fromisoformat(iso.replace("Z", "+00:00")).astimezone(timezone.utc)


def asg_instance(instance_id, lifecycle_state="InService", health_status="Healthy"):
    return {
        "InstanceId": instance_id,
        "AvailabilityZone": "eu-west-1b",
        "LifecycleState": lifecycle_state,
        "HealthStatus": health_status,
        "ProtectedFromScaleIn": False,
    }


def asg(name, desired_capacity=2, instances=None, tags=None):
    """Build one DescribeAutoScalingGroups entry.

    ``tags`` is a dict of tag key to value; a Name tag is always added.
    """
    group = {
        "AutoScalingGroupName": name,
        "MinSize": desired_capacity,
        "MaxSize": desired_capacity,
        "DesiredCapacity": desired_capacity,
        "Tags": [
            {
                "ResourceId": name,
                "ResourceType": "auto-scaling-group",
                "Key": key,
                "Value": value,
                "PropagateAtLaunch": True,
            }
            for key, value in {"Name": name, **(tags or {})}.items()
        ],
    }
    if instances is not None:
        group["Instances"] = instances
    return group


def reservations(launch_times):
    """Build a DescribeInstances page from a dict of instance id to ISO time."""
    return {
        "Reservations": [
            {
                "Groups": [],
                "Instances": [{
                    "InstanceId": instance_id,
                    "LaunchTime": launch_time(iso),
                    "State": {"Code": 16, "Name": "running"},
                }],
                "OwnerId": "123456789012",
            }
            for instance_id, iso in launch_times.items()
        ]
    }


def mock_autoscaling_client(groups):
    """Autoscaling client whose paginator returns ``groups`` in one page."""
    client = MagicMock()
    client.get_paginator.return_value.paginate.return_value = [
        {"AutoScalingGroups": groups}
    ]
    return client


def mock_ec2_client(launch_times):
    """EC2 client whose paginator returns only the filtered instances.

    Mirrors the instance-id filter: ids that are not in ``launch_times``
    are silently absent from the response.
    """
    client = MagicMock()

    def paginate(Filters):
        wanted = Filters[0]["Values"]
        return [reservations({
            instance_id: launch_times[instance_id]
            for instance_id in wanted
            if instance_id in launch_times
        })]

    client.get_paginator.return_value.paginate.side_effect = paginate
    return client
