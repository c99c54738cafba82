"""Typed models describing one tile publishing job.

- ``SourceConfig``: Provider identifier plus provider-specific auth fields
- ``JobConfig``: Immutable record of one run (source, destination, zone, auth)

Design notes:
- All models are frozen dataclasses; a job's configuration is read-only
  once the trigger has built it.
- Secrets are excluded from ``repr`` so that logging a config never leaks
  credentials.
- ``to_dict()`` omits the account key and the S3 secret. They are
  environment-sourced and re-resolved by the source inside the activity,
  so they never travel through the Durable Functions history. The SAS
  token is the exception: it arrives in the trigger payload and has no
  other route to the activity.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from dzi_publisher.core.exceptions import PipelineError

# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class ModelValidationError(ValueError, PipelineError):
    """Raised when a domain model is constructed with invalid field values.

    Attributes:
        model: Name of the model class that failed validation.
        field_name: The field that violated the invariant.
        value: The invalid value.
    """

    default_stage = "model_validation"
    default_code = "MODEL_VALIDATION_FAILED"

    def __init__(self, model: str, field_name: str, value: object, message: str) -> None:
        self.model = model
        self.field_name = field_name
        self.value = value
        formatted = f"{model}.{field_name}={value!r}: {message}"
        PipelineError.__init__(self, formatted)


# ---------------------------------------------------------------------------
# Source configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SourceConfig:
    """Configuration for one storage source.

    Empty credential fields mean "read from the environment"; each source
    documents which variables it falls back to.

    Attributes:
        name: Provider identifier (must match the source registry key).
        account_name: Azure storage account name.
        account_key: Azure shared key (``azure`` provider).
        sas_token: Azure SAS token, with or without the leading ``?``
            (``azure_sas`` provider).
        access_key_id: S3 access key id (``s3`` provider).
        secret_access_key: S3 secret access key (``s3`` provider).
        zone: Region for providers with regional endpoints.
        endpoint_url: Override for the service endpoint (Azurite,
            S3-compatible stores). Empty uses the provider default.
    """

    name: str
    account_name: str = ""
    account_key: str = field(default="", repr=False)
    sas_token: str = field(default="", repr=False)
    access_key_id: str = ""
    secret_access_key: str = field(default="", repr=False)
    zone: str = ""
    endpoint_url: str = ""

    def __post_init__(self) -> None:
        _check_non_empty("SourceConfig", "name", self.name)

    def to_dict(self) -> dict[str, str]:
        """Serialise to a dict, leaving out environment-sourced secrets."""
        return {
            "name": self.name,
            "account_name": self.account_name,
            "sas_token": self.sas_token,
            "access_key_id": self.access_key_id,
            "zone": self.zone,
            "endpoint_url": self.endpoint_url,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SourceConfig:
        """Construct from a dict produced by ``to_dict``."""
        return cls(
            name=str(data.get("name", "")),
            account_name=str(data.get("account_name", "")),
            account_key=str(data.get("account_key", "")),
            sas_token=str(data.get("sas_token", "")),
            access_key_id=str(data.get("access_key_id", "")),
            secret_access_key=str(data.get("secret_access_key", "")),
            zone=str(data.get("zone", "")),
            endpoint_url=str(data.get("endpoint_url", "")),
        )


# ---------------------------------------------------------------------------
# Job configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class JobConfig:
    """Immutable description of one tile publishing run.

    Attributes:
        source: Storage source configuration (provider + auth).
        container: Container/bucket holding the source image.
        image_key: Key of the source image within ``container``.
        temp_container: Destination container for tiles, index and status
            marker. Empty means "same as ``container``".
        zone: Region for regional providers; empty falls back to
            ``source.zone``.
        correlation_id: Trigger correlation identifier, used in logs.
    """

    source: SourceConfig
    container: str
    image_key: str
    temp_container: str = ""
    zone: str = ""
    correlation_id: str = ""

    def __post_init__(self) -> None:
        _check_non_empty("JobConfig", "container", self.container)
        _check_non_empty("JobConfig", "image_key", self.image_key)
        if self.image_key.endswith("/"):
            raise ModelValidationError(
                "JobConfig", "image_key", self.image_key, "must name an object, not a prefix"
            )

    @property
    def provider(self) -> str:
        """Return the provider identifier."""
        return self.source.name

    @property
    def destination_container(self) -> str:
        """Container that receives the generated artifacts and the marker."""
        return self.temp_container or self.container

    @property
    def region(self) -> str | None:
        """Effective zone/region, or ``None`` when the job has none."""
        return self.zone or self.source.zone or None

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a dict for passing to the Durable Functions activity."""
        return {
            "source": self.source.to_dict(),
            "container": self.container,
            "image_key": self.image_key,
            "temp_container": self.temp_container,
            "zone": self.zone,
            "correlation_id": self.correlation_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JobConfig:
        """Construct from a dict produced by ``to_dict``.

        Raises:
            ModelValidationError: If ``source`` is not a dict or required
                fields are missing.
        """
        source = data.get("source")
        if not isinstance(source, dict):
            raise ModelValidationError("JobConfig", "source", source, "must be a dict")
        return cls(
            source=SourceConfig.from_dict(source),
            container=str(data.get("container", "")),
            image_key=str(data.get("image_key", "")),
            temp_container=str(data.get("temp_container", "")),
            zone=str(data.get("zone", "")),
            correlation_id=str(data.get("correlation_id", "")),
        )


# ---------------------------------------------------------------------------
# Validation helpers (module-private)
# ---------------------------------------------------------------------------


def _check_non_empty(model: str, field_name: str, value: str) -> None:
    """Raise `ModelValidationError` if *value* is empty or blank."""
    if not value or not value.strip():
        raise ModelValidationError(model, field_name, value, "must not be empty")
