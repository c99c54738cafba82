"""Tile publishing job — sequence the stages and maintain the status marker.

State machine::

    PENDING → GENERATING → UPLOADING → OK
    PENDING → * → ERROR(message)

1. Resolve the storage source. Unknown providers and missing credentials
   fail here, before any side effect, and are raised to the caller.
2. Write ``pending`` to ``<imageDir>/<name>.txt``. If this write fails the
   status channel itself is unavailable: ``StatusMarkerError`` is raised
   to the caller and nothing else happens.
3. Create the scratch workspace, download the image, run the tiler,
   upload the results. Any failure writes the error text to the marker.
4. Write ``ok``.

The scratch workspace is removed on every exit path. Error marker writes
are best effort: a failure to write one is logged and goes no further.

``run_job`` is synchronous; detached execution is provided by the Durable
Functions wiring in ``dzi_publisher.orchestrators.dz_pipeline``.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from dzi_publisher.activities.generate_tiles import generate_tiles
from dzi_publisher.activities.upload_tiles import upload_tiles
from dzi_publisher.core.config import PipelineConfig
from dzi_publisher.core.exceptions import PipelineError, StatusMarkerError
from dzi_publisher.models.status import JobResult, JobState, JobStatus
from dzi_publisher.sources.base import SourceError
from dzi_publisher.sources.registry import create_source
from dzi_publisher.utils.blob_paths import build_status_key, split_image_key
from dzi_publisher.utils.workspace import scratch_workspace

if TYPE_CHECKING:
    from dzi_publisher.models.job import JobConfig
    from dzi_publisher.sources.base import StorageSource

logger = logging.getLogger("dzi_publisher.orchestrators.dz_job")


def run_job(
    job: JobConfig,
    *,
    pipeline_config: PipelineConfig | None = None,
    source: StorageSource | None = None,
) -> JobResult:
    """Run one tile publishing job to completion.

    Args:
        job: What to publish and where.
        pipeline_config: Process configuration; loaded from the
            environment when ``None``.
        source: Pre-built storage source; created from ``job.source``
            through the registry when ``None``.

    Returns:
        ``JobResult`` with ``JobState.OK`` or ``JobState.ERROR``. Every
        ``ERROR`` result has had its message written to the marker (best
        effort).

    Raises:
        SourceError: If the source cannot be created (unknown provider,
            missing credentials).
        StatusMarkerError: If the initial ``pending`` marker cannot be written.
    """
    config = pipeline_config or PipelineConfig.from_env()
    if source is None:
        source = create_source(job.provider, job.source)

    container = job.destination_container
    zone = job.region
    key_dir, base_name = split_image_key(job.image_key)
    status_key = build_status_key(job.image_key)

    logger.info(
        "Job started | provider=%s | container=%s | image=%s | dest=%s | correlation_id=%s",
        job.provider,
        job.container,
        job.image_key,
        container,
        job.correlation_id,
    )

    try:
        source.upload(JobStatus.PENDING.marker_body(), status_key, container, zone)
    except SourceError as exc:
        msg = f"Error creating status marker {container}/{status_key}: {exc}"
        logger.error("Job aborted | image=%s | error=%s", job.image_key, msg)
        raise StatusMarkerError(msg, correlation_id=job.correlation_id) from exc

    state = JobState.PENDING
    start_time = time.monotonic()

    try:
        with scratch_workspace(config.scratch_root) as scratch_dir:
            image_bytes = source.download(job.container, job.image_key, zone)

            state = JobState.GENERATING
            _log_transition(job, state)
            artifacts = generate_tiles(
                scratch_dir,
                image_bytes,
                base_name,
                tiler_binary=config.tiler_binary,
                timeout_seconds=config.tiler_timeout,
            )

            state = JobState.UPLOADING
            _log_transition(job, state)
            summary = upload_tiles(
                artifacts,
                key_dir,
                container,
                zone,
                source,
                max_workers=config.upload_max_workers,
            )
    except PipelineError as exc:
        logger.error(
            "Job failed | image=%s | state=%s | stage=%s | error=%s",
            job.image_key,
            state.value,
            exc.stage,
            exc,
        )
        return _fail(job, source, status_key, container, zone, str(exc))
    except Exception as exc:
        logger.exception("Job failed unexpectedly | image=%s | state=%s", job.image_key, state.value)
        return _fail(job, source, status_key, container, zone, f"{type(exc).__name__}: {exc}")

    try:
        source.upload(JobStatus.OK.marker_body(), status_key, container, zone)
    except SourceError as exc:
        msg = f"Error creating ok status marker: {exc}"
        logger.error("Job failed | image=%s | error=%s", job.image_key, msg)
        return _fail(job, source, status_key, container, zone, msg)

    logger.info(
        "Job completed | image=%s | files=%d | duration=%.2fs | correlation_id=%s",
        job.image_key,
        summary.total,
        time.monotonic() - start_time,
        job.correlation_id,
    )
    return JobResult(
        state=JobState.OK,
        status_key=status_key,
        container=container,
        uploaded=summary.total,
    )


def _log_transition(job: JobConfig, state: JobState) -> None:
    logger.info("Job state | image=%s | state=%s", job.image_key, state.value)


def _fail(
    job: JobConfig,
    source: StorageSource,
    status_key: str,
    container: str,
    zone: str | None,
    message: str,
) -> JobResult:
    """Write *message* to the status marker (best effort) and build the result."""
    try:
        source.upload(JobStatus.ERROR.marker_body(message), status_key, container, zone)
    except Exception:
        logger.exception(
            "Failed to write error status marker | container=%s | key=%s",
            container,
            status_key,
        )
    return JobResult(
        state=JobState.ERROR,
        status_key=status_key,
        container=container,
        message=message,
    )
