"""Lambda handler for the scheduled instance rotation."""
from typing import Any, Dict, List

from ..app.orchestrator import run
from ..core.config import get_config
from ..core.logger import log_with_context, setup_logger

logger = setup_logger(__name__)


def handler(event: Dict[str, Any], context: Any) -> List[Dict[str, str]]:
    """Lambda handler for terminating the oldest instance of each group.

    The event body is ignored; the function is meant to run on a schedule.

    Args:
        event: Lambda event object
        context: Lambda context object

    Returns:
        List of result entries, e.g.
        ``[{"autoscalingGroupName": "my-asg", "result": "instance terminated",
        "instanceId": "i-0123"}]``

    Raises:
        InstanceTerminatorError: If the ASGs or instances cannot be described.
            No partial report is returned in that case.
    """
    request_id = getattr(context, "aws_request_id", "local-test")

    try:
        log_with_context(logger, "info", "Instance terminator invoked", request_id=request_id)

        config = get_config()
        results = run(config)
    except Exception as e:
        logger.error(f"Instance terminator error: {str(e)}", exc_info=True)
        raise

    response = [entry.to_dict() for entry in results]
    log_with_context(
        logger,
        "info",
        "Instance terminator completed",
        request_id=request_id,
        dry_run=config.dry_run,
        results=response,
    )
    return response
