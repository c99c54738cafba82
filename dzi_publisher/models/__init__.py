"""Data models and schemas.

Defines the data structures used throughout the pipeline:
- JobConfig / SourceConfig: Immutable description of one publishing run
- TileArtifacts / UploadSummary: Locally generated files and what was published
- JobState / JobStatus / JobResult: Orchestrator states and status marker bodies
"""

from dzi_publisher.models.job import JobConfig, ModelValidationError, SourceConfig
from dzi_publisher.models.status import JobResult, JobState, JobStatus
from dzi_publisher.models.tiles import TileArtifacts, UploadSummary

__all__ = [
    "JobConfig",
    "JobResult",
    "JobState",
    "JobStatus",
    "ModelValidationError",
    "SourceConfig",
    "TileArtifacts",
    "UploadSummary",
]
