"""Azure Functions entry point — Deep Zoom Tile Publisher.

This module registers all Azure Functions (trigger, orchestrator, activity)
using the Python v2 programming model.

All business logic lives in the dzi_publisher package. This file is purely
the wiring layer between Azure Functions bindings and application code.
"""

from __future__ import annotations

import azure.durable_functions as df
import azure.functions as func

from dzi_publisher.core.handlers import handle_dz_files_request, handle_run_dz_job
from dzi_publisher.orchestrators.dz_pipeline import (
    ORCHESTRATOR_NAME,
    RUN_JOB_ACTIVITY,
    orchestrator_function,
)

app = func.FunctionApp()


# ---------------------------------------------------------------------------
# Trigger: HTTP request → Start Orchestration
# ---------------------------------------------------------------------------


@app.function_name("dz_files_trigger")
@app.route(route="dzfiles", methods=["GET", "POST"])
@app.durable_client_input(client_name="client")
async def dz_files_trigger(
    req: func.HttpRequest,
    client: df.DurableOrchestrationClient,
) -> func.HttpResponse:
    """HTTP trigger that accepts a tile publishing job and returns at once.

    See ``dzi_publisher.core.handlers.handle_dz_files_request``.
    """
    return await handle_dz_files_request(req, client)


# ---------------------------------------------------------------------------
# Orchestrator: Tile Publishing Job
# ---------------------------------------------------------------------------


@app.function_name(ORCHESTRATOR_NAME)
@app.orchestration_trigger(context_name="context")
def dz_job_orchestrator(context: df.DurableOrchestrationContext) -> object:
    """Durable Functions orchestrator for one tile publishing job.

    See ``dzi_publisher.orchestrators.dz_pipeline`` for implementation.
    """
    return orchestrator_function(context)


# ---------------------------------------------------------------------------
# Activities
# ---------------------------------------------------------------------------


@app.function_name(RUN_JOB_ACTIVITY)
@app.activity_trigger(input_name="activityInput")
def run_dz_job_activity(activityInput: str) -> dict[str, object]:  # noqa: N803
    """Durable Functions activity: run the whole tile publishing job.

    Input:
        JSON string (or dict when replaying) containing a
        ``JobConfig.to_dict()`` payload.

    Returns:
        ``JobResult.to_dict()``: ``state``, ``status_key``, ``container``,
        ``message``, ``uploaded``.
    """
    return handle_run_dz_job(activityInput)
