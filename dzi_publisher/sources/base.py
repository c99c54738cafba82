"""StorageSource abstract base class.

Defines the contract that every storage backend must implement. The
orchestrator and the upload fan-out interact exclusively with this
interface — they never know which concrete provider is behind it.

Operations (both whole-object, no streaming or partial results):
    ``download(container, key, zone)`` — return the full object body.
    ``upload(data, key, container, zone)`` — store *data*, overwriting.

``zone`` selects the region for providers with regional endpoints and is
ignored by the others. Any provider failure (network, auth, not found)
surfaces as a ``SourceError`` wrapping the native exception; callers only
distinguish success from failure.

Instances hold credentials but no job state, and must be safe to share
read-only across the concurrent upload tasks of one job.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from dzi_publisher.core.exceptions import PipelineError

if TYPE_CHECKING:
    from dzi_publisher.models.job import SourceConfig


class StorageSource(abc.ABC):
    """Abstract base class for storage backends.

    Concrete implementations must override ``download`` and ``upload``.
    The constructor receives a ``SourceConfig`` carrying the provider
    name, credentials, and default zone; it must not perform network I/O.

    Example usage::

        source = create_source("azure", SourceConfig(name="azure"))
        data = source.download("images", "slides/scan.tiff")
        source.upload(b"pending", "slides/scan.txt", "images")
    """

    def __init__(self, config: SourceConfig) -> None:
        self._config = config

    @property
    def name(self) -> str:
        """Return the provider name from configuration."""
        return self._config.name

    @property
    def config(self) -> SourceConfig:
        """Return the source configuration (read-only)."""
        return self._config

    def resolve_zone(self, zone: str | None) -> str | None:
        """Return *zone*, falling back to the configured zone."""
        return zone or self._config.zone or None

    # ------------------------------------------------------------------
    # Abstract methods: every source must implement these
    # ------------------------------------------------------------------

    @abc.abstractmethod
    def download(self, container: str, key: str, zone: str | None = None) -> bytes:
        """Download the full body of ``container/key``.

        Args:
            container: Container or bucket name.
            key: Provider-native object key (may contain ``/``).
            zone: Region override; ignored by providers without regions.

        Returns:
            The object body.

        Raises:
            SourceDownloadError: On any provider failure, including not found.
        """

    @abc.abstractmethod
    def upload(
        self,
        data: bytes,
        key: str,
        container: str,
        zone: str | None = None,
    ) -> None:
        """Store *data* at ``container/key``, replacing any existing object.

        Durable once it returns without raising.

        Args:
            data: Object body.
            key: Provider-native object key (may contain ``/``).
            container: Container or bucket name.
            zone: Region override; ignored by providers without regions.

        Raises:
            SourceUploadError: On any provider failure.
        """


# ---------------------------------------------------------------------------
# Source exceptions
# ---------------------------------------------------------------------------


class SourceError(PipelineError):
    """Base exception for storage source errors.

    Attributes:
        provider: Name of the provider that raised the error.
        message: Human-readable error description.
        retryable: Whether the caller could retry the operation.
    """

    default_stage = "source"
    default_code = "SOURCE_ERROR"

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        retryable: bool = False,
    ) -> None:
        self.provider = provider
        super().__init__(
            message,
            retryable=retryable,
            code=self.default_code,
            stage=self.default_stage,
        )

    def __str__(self) -> str:
        return f"[{self.provider}] {self.message}"


class SourceNotFoundError(SourceError):
    """No source is registered under the requested provider name."""

    default_code = "SOURCE_NOT_FOUND"

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(provider, message, retryable=False)


class SourceAuthError(SourceError):
    """Credentials are missing or rejected by the provider."""

    default_code = "SOURCE_AUTH_FAILED"

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(provider, message, retryable=False)


class SourceDownloadError(SourceError):
    """Error while downloading an object."""

    default_code = "SOURCE_DOWNLOAD_FAILED"


class SourceUploadError(SourceError):
    """Error while uploading an object."""

    default_code = "SOURCE_UPLOAD_FAILED"
