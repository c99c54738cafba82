"""Thin ingress boundary helpers for Azure Functions entrypoints.

Centralises the transport concerns so that ``function_app.py`` contains
only trigger bindings and handoff:

- **deserialize_activity_input** — normalises the JSON-string-or-dict
  payload that Durable Functions passes to activities (idempotent on
  replays).
- **build_job_config** — resolves a ``JobConfig`` from HTTP query
  parameters and, for SAS-token requests, the JSON request body.

Accepted request parameters (first match wins):

    provider        provider, storageProvider
    container       container, azureContainer, bucket
    image key       imageKey, azureBlobKey, s3key
    temp container  tempContainer
    zone            zone, region

When no provider is named it follows the request shape: ``azureSASToken=true``
selects ``azure_sas``, an ``s3key`` selects ``s3``, an ``azureBlobKey`` selects
``azure``; otherwise the configured default applies.

SAS-token body (JSON)::

    {"sasToken": "...", "accountName": "...", "container": "...",
     "imageKey": "...", "tempContainer": "..."}
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from dzi_publisher.core.constants import AZURE, AZURE_SAS, S3
from dzi_publisher.core.exceptions import ContractError
from dzi_publisher.models.job import JobConfig, ModelValidationError, SourceConfig

logger = logging.getLogger("dzi_publisher.core.ingress")

_PROVIDER_PARAMS = ("provider", "storageProvider")
_CONTAINER_PARAMS = ("container", "azureContainer", "bucket")
_IMAGE_KEY_PARAMS = ("imageKey", "azureBlobKey", "s3key")
_TEMP_CONTAINER_PARAMS = ("tempContainer",)
_ZONE_PARAMS = ("zone", "region")


# ---------------------------------------------------------------------------
# Activity input deserialisation
# ---------------------------------------------------------------------------


def deserialize_activity_input(raw: str | dict[str, Any] | object) -> dict[str, Any]:
    """Normalise Durable Functions activity input to a plain dict.

    During initial execution the activity input arrives as a JSON
    string; on orchestrator replay it may already be a ``dict``.

    Raises:
        ContractError: If *raw* is neither a JSON object string nor a dict.
    """
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except (json.JSONDecodeError, ValueError) as exc:
            msg = f"Activity input is not valid JSON: {exc}"
            raise ContractError(msg, stage="ingress", code="INVALID_JSON") from exc
        if not isinstance(parsed, dict):
            msg = f"Activity input JSON must be an object, got {type(parsed).__name__}"
            raise ContractError(msg, stage="ingress", code="INVALID_INPUT_TYPE")
        return parsed
    if isinstance(raw, dict):
        return raw
    msg = f"Unexpected activity input type: {type(raw).__name__}"
    raise ContractError(msg, stage="ingress", code="INVALID_INPUT_TYPE")


# ---------------------------------------------------------------------------
# Job configuration from an HTTP request
# ---------------------------------------------------------------------------


def _first(params: Mapping[str, str], names: tuple[str, ...]) -> str:
    for name in names:
        value = params.get(name)
        if value:
            return str(value).strip()
    return ""


def _infer_provider(params: Mapping[str, str]) -> str:
    """Pick the provider from the request shape when none is named."""
    if str(params.get("azureSASToken", "")).strip().lower() == "true":
        return AZURE_SAS
    if _first(params, ("s3key",)):
        return S3
    if _first(params, ("azureBlobKey",)):
        return AZURE
    return ""


def parse_sas_body(body: bytes | str | None) -> dict[str, str]:
    """Parse the JSON body of a SAS-token request.

    Raises:
        ContractError: If the body is empty, not JSON, or not an object.
    """
    if not body:
        msg = "SAS-token request requires a JSON body"
        raise ContractError(msg, stage="ingress", code="MISSING_BODY")
    try:
        parsed = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as exc:
        msg = f"Error parsing request to json: {exc}"
        raise ContractError(msg, stage="ingress", code="INVALID_JSON") from exc
    if not isinstance(parsed, dict):
        msg = f"Request JSON must be an object, got {type(parsed).__name__}"
        raise ContractError(msg, stage="ingress", code="INVALID_INPUT_TYPE")
    return {str(k): str(v) for k, v in parsed.items() if v is not None}


def build_job_config(
    params: Mapping[str, str],
    body: bytes | str | None = None,
    *,
    default_provider: str = "",
    correlation_id: str = "",
) -> JobConfig:
    """Resolve a ``JobConfig`` from request parameters.

    Provider credentials other than the SAS token are not taken from the
    request; the sources read them from the environment.

    Args:
        params: HTTP query parameters.
        body: Raw request body (only read for ``azure_sas``).
        default_provider: Provider used when the request names none.
        correlation_id: Invocation identifier propagated to logs.

    Returns:
        Validated ``JobConfig``.

    Raises:
        ContractError: If required fields are missing or the body is malformed.
    """
    provider = _first(params, _PROVIDER_PARAMS) or _infer_provider(params) or default_provider
    if not provider:
        msg = "Request does not name a storage provider"
        raise ContractError(msg, stage="ingress", code="MISSING_PROVIDER")

    container = _first(params, _CONTAINER_PARAMS)
    image_key = _first(params, _IMAGE_KEY_PARAMS)
    temp_container = _first(params, _TEMP_CONTAINER_PARAMS)
    zone = _first(params, _ZONE_PARAMS)
    source = SourceConfig(name=provider, zone=zone)

    if provider == AZURE_SAS:
        sas = parse_sas_body(body)
        container = sas.get("container", "") or container
        image_key = sas.get("imageKey", "") or image_key
        temp_container = sas.get("tempContainer", "") or temp_container
        source = SourceConfig(
            name=provider,
            account_name=sas.get("accountName", ""),
            sas_token=sas.get("sasToken", ""),
            zone=zone,
        )

    missing = [
        name
        for name, value in (("container", container), ("imageKey", image_key))
        if not value
    ]
    if missing:
        msg = f"Request missing required field(s): {', '.join(missing)}"
        raise ContractError(msg, stage="ingress", code="MISSING_JOB_FIELDS")

    try:
        job = JobConfig(
            source=source,
            container=container,
            image_key=image_key,
            temp_container=temp_container,
            zone=zone,
            correlation_id=correlation_id,
        )
    except ModelValidationError as exc:
        raise ContractError(str(exc), stage="ingress", code="INVALID_JOB_FIELDS") from exc

    logger.debug(
        "Built job config | provider=%s | container=%s | image=%s | correlation_id=%s",
        job.provider,
        job.container,
        job.image_key,
        correlation_id,
    )
    return job
