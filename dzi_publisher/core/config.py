"""Pipeline configuration loaded from environment variables.

Azure Functions app settings (or ``local.settings.json`` for local dev)
are the source of truth.

``from_env()`` raises ``ConfigValidationError`` if any value is out of
its valid range, so bad configuration is caught at startup rather than
halfway through a job.

``DZ_UPLOAD_MAX_WORKERS`` defaults to ``0``, which starts one upload
thread per tile file. Hosts publishing large images should cap it (e.g.
``64``) to stay under the process thread limit.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field

from dzi_publisher.core.constants import AZURE, DEFAULT_TILER_BINARY
from dzi_publisher.core.exceptions import PipelineError


class ConfigValidationError(PipelineError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    """Immutable process-level configuration.

    Loaded once per job and threaded through the orchestrator.

    Attributes:
        scratch_root: Directory under which per-job scratch workspaces are created.
        tiler_binary: Executable of the external tiling tool.
        tiler_timeout_seconds: Upper bound on one tiler run; ``0`` disables it.
        upload_max_workers: Concurrency cap for the upload fan-out;
            ``0`` runs every upload at once, one OS thread per tile file.
            A large pyramid holds tens of thousands of tiles, which can
            exceed the host's thread limit (``RuntimeError: can't start
            new thread``). Set ``DZ_UPLOAD_MAX_WORKERS`` (e.g. ``64``) on
            hosts that publish large images.
        default_provider: Provider used when the trigger does not name one.
    """

    scratch_root: str = field(default_factory=tempfile.gettempdir)
    tiler_binary: str = DEFAULT_TILER_BINARY
    tiler_timeout_seconds: float = 0.0
    upload_max_workers: int = 0
    default_provider: str = AZURE

    @classmethod
    def from_env(cls) -> PipelineConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range or a required
                string value is empty.
            ValueError: If a numeric environment variable cannot be
                parsed (e.g. ``DZ_UPLOAD_MAX_WORKERS=abc``).
        """
        config = cls(
            scratch_root=os.getenv("DZ_SCRATCH_ROOT") or tempfile.gettempdir(),
            tiler_binary=os.getenv("DZ_TILER_BINARY", DEFAULT_TILER_BINARY),
            tiler_timeout_seconds=float(os.getenv("DZ_TILER_TIMEOUT_SECONDS", "0")),
            upload_max_workers=int(os.getenv("DZ_UPLOAD_MAX_WORKERS", "0")),
            default_provider=os.getenv("DZ_DEFAULT_PROVIDER", AZURE),
        )
        _validate(config)
        return config

    @property
    def tiler_timeout(self) -> float | None:
        """Timeout to hand to ``subprocess.run`` (``None`` when disabled)."""
        return self.tiler_timeout_seconds or None


def _validate(config: PipelineConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if config.tiler_timeout_seconds < 0:
        raise ConfigValidationError(
            "DZ_TILER_TIMEOUT_SECONDS",
            config.tiler_timeout_seconds,
            "must be >= 0 (seconds, 0 disables the timeout)",
        )

    if config.upload_max_workers < 0:
        raise ConfigValidationError(
            "DZ_UPLOAD_MAX_WORKERS",
            config.upload_max_workers,
            "must be >= 0 (0 means one worker per file)",
        )

    if not config.tiler_binary:
        raise ConfigValidationError(
            "DZ_TILER_BINARY",
            config.tiler_binary,
            "must not be empty",
        )

    if not config.default_provider:
        raise ConfigValidationError(
            "DZ_DEFAULT_PROVIDER",
            config.default_provider,
            "must not be empty",
        )
