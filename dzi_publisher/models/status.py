"""Job status and orchestrator state models.

The status marker object is the only externally observable signal of a
job's progress. Its body is one of the literal strings ``pending`` or
``ok``, or an arbitrary error message.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from dzi_publisher.core.constants import STATUS_OK, STATUS_PENDING


class JobState(enum.Enum):
    """Orchestrator state machine.

    ``PENDING → GENERATING → UPLOADING → OK``, or any state ``→ ERROR``.
    """

    PENDING = "pending"
    GENERATING = "generating"
    UPLOADING = "uploading"
    OK = "ok"
    ERROR = "error"


class JobStatus(enum.Enum):
    """Status marker body kinds.

    ``ERROR`` has no fixed body; the marker carries the error text instead.
    """

    PENDING = STATUS_PENDING
    OK = STATUS_OK
    ERROR = "error"

    def marker_body(self, message: str = "") -> bytes:
        """Return the encoded marker body for this status."""
        if self is JobStatus.ERROR:
            return (message or "error").encode("utf-8")
        return self.value.encode("utf-8")


@dataclass(frozen=True, slots=True)
class JobResult:
    """Terminal outcome of one ``run_job`` call.

    Attributes:
        state: ``JobState.OK`` or ``JobState.ERROR``.
        status_key: Key of the status marker object.
        container: Container holding the status marker.
        message: Error text written to the marker (empty on success).
        uploaded: Number of files published.
    """

    state: JobState
    status_key: str
    container: str
    message: str = ""
    uploaded: int = 0

    @property
    def ok(self) -> bool:
        """Return ``True`` if the job finished successfully."""
        return self.state is JobState.OK

    def to_dict(self) -> dict[str, object]:
        """Serialise to a dict for the Durable Functions activity result."""
        return {
            "state": self.state.value,
            "status_key": self.status_key,
            "container": self.container,
            "message": self.message,
            "uploaded": self.uploaded,
        }
