"""Tag parsing, eligibility checks, grouping and oldest-instance selection.

Everything in this module is pure: it works on already-described ASGs and
launch times and never talks to AWS.
"""
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional

from ..core.logger import setup_logger
from ..core.models import (
    AutoScalingGroup,
    Candidate,
    EligibilityResult,
    ExplicitGroup,
    GroupKey,
    ImplicitGroup,
    ResultKind,
    Selection,
    TagInfo,
    TerminationGroup,
    TerminatorConfig,
)

logger = setup_logger(__name__)


def parse_tags(tags: Mapping[str, str], config: TerminatorConfig) -> TagInfo:
    """Read the rotation flag and optional group name from an ASG's tags.

    The flag only counts when its value matches exactly; ``"True"`` or
    ``"yes"`` leave the ASG alone.
    """
    eligible = tags.get(config.eligibility_tag_key) == config.eligibility_tag_value
    return TagInfo(eligible=eligible, group_name=tags.get(config.group_tag_key))


def group_key_for(asg_name: str, tag_info: TagInfo) -> GroupKey:
    """Return the termination group an ASG belongs to."""
    if tag_info.group_name is not None:
        return ExplicitGroup(name=tag_info.group_name)
    return ImplicitGroup(asg_name=asg_name)


def check_eligibility(
    asg: AutoScalingGroup, tag_info: TagInfo, config: TerminatorConfig
) -> EligibilityResult:
    """Apply the sizing and health rules to an eligibility-tagged ASG.

    ASGs scaled to zero, or with no instances at all while large enough,
    are ignored without a reason. Otherwise the configured size is checked
    first; it does not depend on live instance state. Only InService and
    Healthy instances become candidates.
    """
    if asg.desired_capacity == 0:
        return EligibilityResult(asg_name=asg.name, tag_info=tag_info, ignored=True)

    if asg.desired_capacity < config.min_configured_size:
        return EligibilityResult(
            asg_name=asg.name, tag_info=tag_info, skip=ResultKind.TOO_FEW_INSTANCES
        )

    if not asg.instances:
        return EligibilityResult(asg_name=asg.name, tag_info=tag_info, ignored=True)

    healthy = [instance for instance in asg.instances if instance.is_in_service_and_healthy]
    if len(healthy) < config.min_healthy_instances:
        return EligibilityResult(
            asg_name=asg.name, tag_info=tag_info, skip=ResultKind.NOT_ENOUGH_HEALTHY
        )

    return EligibilityResult(
        asg_name=asg.name,
        tag_info=tag_info,
        candidates=[
            Candidate(instance_id=instance.instance_id, asg_name=asg.name)
            for instance in healthy
        ],
    )


def build_groups(eligible: Iterable[EligibilityResult]) -> Dict[GroupKey, TerminationGroup]:
    """Merge the candidates of eligible ASGs into termination groups.

    Groups keep the order in which they are first seen and candidates keep
    the order of their ASGs' instance lists.
    """
    groups: Dict[GroupKey, TerminationGroup] = {}
    for result in eligible:
        key = group_key_for(result.asg_name, result.tag_info)
        group = groups.setdefault(key, TerminationGroup(key=key))
        group.candidates.extend(result.candidates)
    return groups


def select_oldest(
    group: TerminationGroup, launch_times: Mapping[str, datetime]
) -> Optional[Selection]:
    """Pick the candidate with the earliest launch time.

    Candidates without a launch time are ignored. On equal launch times the
    first candidate in group order wins. Returns None when nothing is left.
    """
    oldest: Optional[Candidate] = None
    oldest_launch: Optional[datetime] = None

    for candidate in group.candidates:
        launch_time = launch_times.get(candidate.instance_id)
        if launch_time is None:
            continue
        if oldest_launch is None or launch_time < oldest_launch:
            oldest, oldest_launch = candidate, launch_time

    if oldest is None:
        logger.info(f"No candidate with a known launch time in group {group.key!r}")
        return None

    return Selection(key=group.key, candidate=oldest, launch_time=oldest_launch)


def candidate_ids(groups: Iterable[TerminationGroup]) -> List[str]:
    """Deduplicated instance ids across all groups, in group order."""
    return list(dict.fromkeys(
        candidate.instance_id for group in groups for candidate in group.candidates
    ))
