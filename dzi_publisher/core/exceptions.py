"""Unified pipeline exception taxonomy.

Every failure the tile publishing job can report derives from
``PipelineError``. The orchestrator writes ``str(error)`` into the error
status marker; the HTTP trigger returns ``to_error_dict()`` as the body of
a rejected request.

Categories
----------
``ValidationError``
    Bad input or model invariant. Never retryable.
``TransientError``
    Network hiccup or throttling. Retryable by default.
``PermanentError``
    Domain failure that will not go away on retry.
``ContractError``
    Malformed trigger payload or activity input. Never retryable.

Subclasses pick a category by inheritance and name their stage and code
through the ``default_stage`` / ``default_code`` class attributes.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for all pipeline-domain errors.

    Attributes:
        message: Human-readable error description.
        stage: Job stage that failed (``"generate_tiles"``, ``"source"``, ...).
        code: Machine-readable error code (``"UPLOAD_FAILED"``, ...).
        retryable: Whether repeating the operation could succeed.
        correlation_id: Trigger correlation identifier, if known.
    """

    default_stage: str = ""
    default_code: str = ""
    #: Used when ``retryable`` is not passed explicitly.
    default_retryable: bool = False

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool | None = None,
        correlation_id: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = self.default_retryable if retryable is None else retryable
        self.correlation_id = correlation_id

    @property
    def category(self) -> str:
        """Category name, by class first and by retry flag otherwise."""
        for cls, name in _CATEGORY_BY_CLASS:
            if isinstance(self, cls):
                return name
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "correlation_id": self.correlation_id,
        }


class ValidationError(PipelineError):
    """Input or domain-model validation failure."""


class TransientError(PipelineError):
    """Temporary failure that may succeed on retry."""

    default_retryable = True


class PermanentError(PipelineError):
    """Unrecoverable domain failure."""


class ContractError(PipelineError):
    """Malformed trigger payload or activity input."""


_CATEGORY_BY_CLASS: tuple[tuple[type[PipelineError], str], ...] = (
    (ContractError, "contract"),
    (ValidationError, "validation"),
    (TransientError, "transient"),
    (PermanentError, "permanent"),
)


# ---------------------------------------------------------------------------
# Job-level errors shared by the orchestrator and its helpers
# ---------------------------------------------------------------------------


class WorkspaceError(PermanentError):
    """Local scratch workspace could not be created."""

    default_stage = "workspace"
    default_code = "WORKSPACE_FAILED"


class StatusMarkerError(PipelineError):
    """The ``pending`` status marker could not be written.

    Raised to the caller of ``run_job``: with the status channel down
    there is nowhere else to report the failure.
    """

    default_stage = "status_marker"
    default_code = "STATUS_MARKER_FAILED"
