"""Request handlers behind the Azure Functions bindings.

``function_app.py`` registers the bindings and delegates here, so the
trigger and activity behaviour can be exercised with a mock request and a
mock durable client.

- **handle_dz_files_request**: validate a publishing request, start the
  orchestration, answer ``202`` with the status marker location.
- **handle_run_dz_job**: activity body; rebuild the ``JobConfig`` and run
  the job to completion.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import azure.functions as func

from dzi_publisher.core.config import ConfigValidationError, PipelineConfig
from dzi_publisher.core.exceptions import PipelineError
from dzi_publisher.core.ingress import build_job_config, deserialize_activity_input
from dzi_publisher.models.job import JobConfig
from dzi_publisher.orchestrators.dz_job import run_job
from dzi_publisher.orchestrators.dz_pipeline import ORCHESTRATOR_NAME
from dzi_publisher.sources.registry import create_source
from dzi_publisher.utils.blob_paths import build_status_key

if TYPE_CHECKING:
    import azure.durable_functions as df

logger = logging.getLogger("dzi_publisher.core.handlers")

CORRELATION_HEADER = "x-correlation-id"


def _json_response(body: dict[str, object], status_code: int) -> func.HttpResponse:
    return func.HttpResponse(
        json.dumps(body),
        status_code=status_code,
        mimetype="application/json",
    )


async def handle_dz_files_request(
    req: func.HttpRequest,
    client: df.DurableOrchestrationClient,
) -> func.HttpResponse:
    """Accept a tile publishing job and return at once.

    1. Resolve a ``JobConfig`` from the query string (and JSON body for SAS)
    2. Build the storage source once, so that unknown providers and
       missing credentials are rejected with ``400`` before any side effect
    3. Start the orchestrator and respond ``202`` with the status marker
       location; progress is only observable through that marker

    Invalid pipeline configuration answers ``500``.
    """
    try:
        config = PipelineConfig.from_env()
    except (ConfigValidationError, ValueError):
        logger.exception("Invalid pipeline configuration")
        return _json_response({"message": "Invalid pipeline configuration"}, 500)

    correlation_id = req.headers.get(CORRELATION_HEADER, "")

    try:
        job = build_job_config(
            dict(req.params),
            req.get_body(),
            default_provider=config.default_provider,
            correlation_id=correlation_id,
        )
        create_source(job.provider, job.source)
    except PipelineError as exc:
        exc.correlation_id = exc.correlation_id or correlation_id
        logger.warning(
            "Rejected dz files request | code=%s | error=%s | correlation_id=%s",
            exc.code,
            exc,
            correlation_id,
        )
        return _json_response(exc.to_error_dict(), 400)

    try:
        instance_id = await client.start_new(ORCHESTRATOR_NAME, client_input=job.to_dict())
    except Exception:
        logger.exception("Failed to start orchestrator for image=%s", job.image_key)
        raise

    status_key = build_status_key(job.image_key)
    logger.info(
        "Orchestrator started | instance_id=%s | provider=%s | image=%s | status=%s/%s",
        instance_id,
        job.provider,
        job.image_key,
        job.destination_container,
        status_key,
    )

    return _json_response(
        {"container": job.destination_container, "status_key": status_key},
        202,
    )


def handle_run_dz_job(activity_input: str | dict[str, Any]) -> dict[str, object]:
    """Run one tile publishing job from a Durable Functions activity input.

    Returns:
        ``JobResult.to_dict()``.

    Raises:
        ContractError: If the input is not a JSON object.
        ModelValidationError: If the payload is not a valid ``JobConfig``.
        SourceError: If the storage source cannot be created.
        StatusMarkerError: If the ``pending`` marker cannot be written.
    """
    job = JobConfig.from_dict(deserialize_activity_input(activity_input))

    logger.info(
        "run_dz_job activity started | provider=%s | image=%s | correlation_id=%s",
        job.provider,
        job.image_key,
        job.correlation_id,
    )

    result = run_job(job)

    logger.info(
        "run_dz_job activity completed | image=%s | state=%s | uploaded=%d",
        job.image_key,
        result.state.value,
        result.uploaded,
    )
    return result.to_dict()
