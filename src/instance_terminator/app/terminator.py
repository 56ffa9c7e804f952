"""Termination of the selected instance in each group."""
from concurrent.futures import ThreadPoolExecutor
from typing import Any, List, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from ..core.logger import log_with_context, setup_logger
from ..core.models import ResultEntry, ResultKind, Selection

logger = setup_logger(__name__)


def terminate_instance(client: Any, selection: Selection, dry_run: bool = False) -> ResultEntry:
    """Terminate one instance without decrementing its ASG's desired capacity.

    A failed call is reported as a TERMINATION_FAILED entry rather than
    raised, so sibling groups are unaffected. There are no retries; the
    next scheduled invocation picks the group up again.
    """
    instance_id = selection.candidate.instance_id
    context = {
        "instance_id": instance_id,
        "asg_name": selection.candidate.asg_name,
        "launch_time": selection.launch_time,
        "dry_run": dry_run,
        **selection.key.label,
    }

    if dry_run:
        log_with_context(logger, "info", "DRY RUN: Would terminate instance", **context)
        return ResultEntry.for_group(selection.key, ResultKind.WOULD_TERMINATE, instance_id)

    log_with_context(logger, "info", "Terminating instance", **context)
    try:
        client.terminate_instance_in_auto_scaling_group(
            InstanceId=instance_id,
            ShouldDecrementDesiredCapacity=False,
        )
    except (ClientError, BotoCoreError) as e:
        log_with_context(logger, "error", "Failed to terminate instance", error=str(e), **context)
        return ResultEntry.for_group(
            selection.key,
            ResultKind.TERMINATION_FAILED,
            instance_id,
            error=f"AWS API error: {str(e)}",
        )

    return ResultEntry.for_group(selection.key, ResultKind.INSTANCE_TERMINATED, instance_id)


def terminate_selections(
    client: Any,
    selections: Sequence[Selection],
    dry_run: bool = False,
    max_workers: int = 4,
) -> List[ResultEntry]:
    """Terminate the selected instance of every group concurrently.

    Args:
        client: boto3 autoscaling client
        selections: One selection per termination group
        dry_run: If True, only log actions without executing
        max_workers: Upper bound on concurrent termination requests

    Returns:
        One result entry per selection, in the order given
    """
    if not selections:
        return []

    logger.info(f"Terminating {len(selections)} instances (dry_run={dry_run})")

    workers = min(max_workers, len(selections))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = list(executor.map(
            lambda selection: terminate_instance(client, selection, dry_run),
            selections,
        ))

    failed = sum(1 for r in results if r.result == ResultKind.TERMINATION_FAILED.value)
    logger.info(f"Termination completed: {len(results) - failed}/{len(results)} successful")
    return results
