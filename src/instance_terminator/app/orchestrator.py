"""One rotation pass over every tagged Auto Scaling Group."""
import os
from typing import Any, List, Optional

import boto3

from ..core.logger import setup_logger
from ..core.models import EligibilityResult, ResultEntry, TerminatorConfig
from ..discovery.asg_discovery import list_auto_scaling_groups
from ..discovery.instance_lookup import describe_launch_times
from .selection import build_groups, candidate_ids, check_eligibility, parse_tags, select_oldest
from .terminator import terminate_selections

logger = setup_logger(__name__)


def run(
    config: TerminatorConfig,
    autoscaling_client: Any = None,
    ec2_client: Any = None,
    region: Optional[str] = None,
) -> List[ResultEntry]:
    """Terminate at most one oldest healthy instance per termination group.

    ASGs without the eligibility tag are ignored entirely. Tagged ASGs that
    are too small or too degraded are reported and left alone. The rest are
    merged into groups, their candidates' launch times are fetched in one
    batch, and the oldest candidate of each group is terminated.

    Args:
        config: TerminatorConfig
        autoscaling_client: Optional boto3 autoscaling client
        ec2_client: Optional boto3 ec2 client
        region: AWS region (defaults to AWS_REGION env var or us-east-1)

    Returns:
        Result entries for skipped ASGs followed by one entry per group acted on

    Raises:
        DiscoveryError: If the ASGs cannot be described
        InstanceLookupError: If the launch times cannot be described
    """
    region = region or os.environ.get("AWS_REGION", "us-east-1")
    if autoscaling_client is None:
        autoscaling_client = boto3.client("autoscaling", region_name=region)

    asgs = list_auto_scaling_groups(client=autoscaling_client)

    report: List[ResultEntry] = []
    eligible: List[EligibilityResult] = []
    for asg in asgs:
        tag_info = parse_tags(asg.tags, config)
        if not tag_info.eligible:
            logger.debug(f"Skipping untagged Auto Scaling Group {asg.name}")
            continue

        result = check_eligibility(asg, tag_info, config)
        if result.ignored:
            logger.debug(f"Skipping Auto Scaling Group {asg.name} without instances")
            continue
        if result.eligible:
            eligible.append(result)
        else:
            logger.info(f"Skipping Auto Scaling Group {asg.name}: {result.skip}")
            report.append(ResultEntry.for_asg(asg.name, result.skip))

    groups = build_groups(eligible)
    logger.info(
        f"{len(eligible)} eligible Auto Scaling Groups in {len(groups)} termination groups"
    )
    if not groups:
        return report

    launch_times = describe_launch_times(
        candidate_ids(groups.values()), client=ec2_client, region=region
    )

    selections = []
    for group in groups.values():
        selection = select_oldest(group, launch_times)
        if selection is not None:
            selections.append(selection)

    report.extend(terminate_selections(
        autoscaling_client,
        selections,
        dry_run=config.dry_run,
        max_workers=config.max_workers,
    ))
    return report
