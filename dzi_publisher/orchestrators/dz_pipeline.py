"""Durable Functions orchestrator for the tile publishing job.

The HTTP trigger starts this orchestration and returns at once; the
orchestration runs the whole job as a single activity because the scratch
workspace is local to the worker that executes it. Nothing reads the
orchestration's return value: the status marker object is the job's only
contract with the outside world.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Generator

    import azure.durable_functions as df

logger = logging.getLogger("dzi_publisher.orchestrators.dz_pipeline")

ORCHESTRATOR_NAME = "dz_job_orchestrator"
RUN_JOB_ACTIVITY = "run_dz_job"


def orchestrator_function(
    context: df.DurableOrchestrationContext,
) -> Generator[Any, Any, dict[str, object]]:
    """Run one tile publishing job as a detached orchestration.

    Args:
        context: Durable Functions orchestration context.

    Input (via ``context.get_input``):
        A ``JobConfig.to_dict()`` payload.

    Returns:
        The ``JobResult.to_dict()`` of the activity.
    """
    job_input: dict[str, object] = context.get_input() or {}
    instance_id = context.instance_id

    if not context.is_replaying:
        logger.info(
            "Orchestrator started | instance=%s | image=%s | correlation_id=%s",
            instance_id,
            job_input.get("image_key", "<unknown>"),
            job_input.get("correlation_id", ""),
        )

    result = yield context.call_activity(RUN_JOB_ACTIVITY, job_input)

    if not context.is_replaying:
        state = result.get("state", "") if isinstance(result, dict) else ""
        logger.info(
            "Orchestrator completed | instance=%s | image=%s | state=%s",
            instance_id,
            job_input.get("image_key", "<unknown>"),
            state,
        )

    return result if isinstance(result, dict) else {}
