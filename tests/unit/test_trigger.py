"""Tests for the HTTP trigger and run_dz_job activity handlers.

Covers:
- 202 with the status marker location and the orchestrator input
- 400 with a structured error body, before any orchestration starts
- 500 on invalid pipeline configuration
- Activity input → run_job → JobResult dict

The handlers are called directly with a mock ``func.HttpRequest`` and an
``AsyncMock`` durable client, without the Functions runtime.
"""

from __future__ import annotations

import json
import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from dzi_publisher.core.exceptions import ContractError
from dzi_publisher.core.handlers import handle_dz_files_request, handle_run_dz_job
from dzi_publisher.models.job import JobConfig, SourceConfig
from dzi_publisher.models.status import JobResult, JobState
from dzi_publisher.orchestrators.dz_pipeline import ORCHESTRATOR_NAME

_S3_PARAMS = {
    "provider": "s3",
    "bucket": "images",
    "s3key": "slides/2024/scan.tiff",
    "tempContainer": "tiles",
    "region": "eu-west-1",
}


def _make_request(
    params: dict[str, str],
    body: bytes = b"",
    headers: dict[str, str] | None = None,
) -> MagicMock:
    """Create a mock ``func.HttpRequest``."""
    req = MagicMock()
    req.params = params
    req.headers = headers or {}
    req.get_body.return_value = body
    return req


def _make_client() -> AsyncMock:
    client = AsyncMock()
    client.start_new.return_value = "instance-123"
    return client


def _body(response: object) -> dict[str, object]:
    return json.loads(response.get_body())  # type: ignore[attr-defined]


class TestTriggerAccepts:
    """Valid requests start the orchestrator and answer 202."""

    @pytest.mark.asyncio()
    async def test_returns_202_with_status_location(self) -> None:
        client = _make_client()
        with (
            patch.dict(os.environ, {}, clear=True),
            patch("dzi_publisher.core.handlers.create_source"),
        ):
            response = await handle_dz_files_request(_make_request(_S3_PARAMS), client)

        assert response.status_code == 202
        assert response.mimetype == "application/json"
        assert _body(response) == {"container": "tiles", "status_key": "slides/2024/scan.txt"}

    @pytest.mark.asyncio()
    async def test_starts_orchestrator_with_job_dict(self) -> None:
        client = _make_client()
        with (
            patch.dict(os.environ, {}, clear=True),
            patch("dzi_publisher.core.handlers.create_source") as mock_create,
        ):
            await handle_dz_files_request(
                _make_request(_S3_PARAMS, headers={"x-correlation-id": "corr-9"}),
                client,
            )

        expected = JobConfig(
            source=SourceConfig(name="s3", zone="eu-west-1"),
            container="images",
            image_key="slides/2024/scan.tiff",
            temp_container="tiles",
            zone="eu-west-1",
            correlation_id="corr-9",
        )
        client.start_new.assert_awaited_once_with(
            ORCHESTRATOR_NAME, client_input=expected.to_dict()
        )
        mock_create.assert_called_once_with("s3", expected.source)

    @pytest.mark.asyncio()
    async def test_default_provider_from_environment(self) -> None:
        client = _make_client()
        params = {"container": "images", "imageKey": "scan.tiff"}
        with (
            patch.dict(os.environ, {"DZ_DEFAULT_PROVIDER": "s3"}, clear=True),
            patch("dzi_publisher.core.handlers.create_source"),
        ):
            response = await handle_dz_files_request(_make_request(params), client)

        assert response.status_code == 202
        assert client.start_new.call_args.kwargs["client_input"]["source"]["name"] == "s3"

    @pytest.mark.asyncio()
    async def test_sas_request_reads_body(self) -> None:
        client = _make_client()
        body = json.dumps(
            {
                "sasToken": "sv=2024&sig=abc",
                "accountName": "acct",
                "container": "images",
                "imageKey": "a/b.svs",
            }
        ).encode()
        with (
            patch.dict(os.environ, {}, clear=True),
            patch("dzi_publisher.sources.azure_sas.BlobServiceClient"),
        ):
            response = await handle_dz_files_request(
                _make_request({"azureSASToken": "true"}, body), client
            )

        assert response.status_code == 202
        assert _body(response) == {"container": "images", "status_key": "a/b.txt"}
        client_input = client.start_new.call_args.kwargs["client_input"]
        assert client_input["source"]["sas_token"] == "sv=2024&sig=abc"


class TestTriggerRejects:
    """Invalid requests answer 400 and start nothing."""

    @pytest.mark.asyncio()
    async def test_missing_fields(self) -> None:
        client = _make_client()
        with patch.dict(os.environ, {}, clear=True):
            response = await handle_dz_files_request(
                _make_request({"provider": "s3"}, headers={"x-correlation-id": "corr-1"}),
                client,
            )

        assert response.status_code == 400
        body = _body(response)
        assert body["code"] == "MISSING_JOB_FIELDS"
        assert body["category"] == "contract"
        assert body["correlation_id"] == "corr-1"
        client.start_new.assert_not_called()

    @pytest.mark.asyncio()
    async def test_unknown_provider(self) -> None:
        client = _make_client()
        params = {"provider": "gcs", "container": "c", "imageKey": "k.svs"}
        with patch.dict(os.environ, {}, clear=True):
            response = await handle_dz_files_request(_make_request(params), client)

        assert response.status_code == 400
        body = _body(response)
        assert body["code"] == "SOURCE_NOT_FOUND"
        assert "gcs" in str(body["message"])
        client.start_new.assert_not_called()

    @pytest.mark.asyncio()
    async def test_missing_credentials(self) -> None:
        client = _make_client()
        params = {"provider": "azure", "container": "c", "imageKey": "k.svs"}
        with patch.dict(os.environ, {}, clear=True):
            response = await handle_dz_files_request(_make_request(params), client)

        assert response.status_code == 400
        assert _body(response)["code"] == "SOURCE_AUTH_FAILED"
        client.start_new.assert_not_called()

    @pytest.mark.asyncio()
    async def test_malformed_sas_body(self) -> None:
        client = _make_client()
        with patch.dict(os.environ, {}, clear=True):
            response = await handle_dz_files_request(
                _make_request({"azureSASToken": "true"}, b"{oops"), client
            )

        assert response.status_code == 400
        assert _body(response)["code"] == "INVALID_JSON"
        client.start_new.assert_not_called()


class TestTriggerConfiguration:
    """Broken app settings answer 500."""

    @pytest.mark.asyncio()
    @pytest.mark.parametrize("workers", ["-1", "many"])
    async def test_invalid_config_returns_500(self, workers: str) -> None:
        client = _make_client()
        with patch.dict(os.environ, {"DZ_UPLOAD_MAX_WORKERS": workers}, clear=True):
            response = await handle_dz_files_request(_make_request(_S3_PARAMS), client)

        assert response.status_code == 500
        assert _body(response) == {"message": "Invalid pipeline configuration"}
        client.start_new.assert_not_called()


class TestRunDzJobActivity:
    """The activity rebuilds the job and returns the result dict."""

    def _job(self) -> JobConfig:
        return JobConfig(
            source=SourceConfig(name="s3", zone="eu-west-1"),
            container="images",
            image_key="slides/2024/scan.tiff",
            zone="eu-west-1",
        )

    def test_json_input_runs_job(self) -> None:
        job = self._job()
        result = JobResult(
            state=JobState.OK,
            status_key="slides/2024/scan.txt",
            container="images",
            uploaded=7,
        )
        with patch("dzi_publisher.core.handlers.run_job", return_value=result) as mock_run:
            output = handle_run_dz_job(json.dumps(job.to_dict()))

        mock_run.assert_called_once_with(job)
        assert output == {
            "state": "ok",
            "status_key": "slides/2024/scan.txt",
            "container": "images",
            "message": "",
            "uploaded": 7,
        }

    def test_dict_input_on_replay(self) -> None:
        job = self._job()
        result = JobResult(
            state=JobState.ERROR,
            status_key="slides/2024/scan.txt",
            container="images",
            message="Error creating dz files: boom",
        )
        with patch("dzi_publisher.core.handlers.run_job", return_value=result) as mock_run:
            output = handle_run_dz_job(job.to_dict())

        assert mock_run.call_args.args[0] == job
        assert output["state"] == "error"
        assert output["message"] == "Error creating dz files: boom"

    def test_invalid_input_raises_contract_error(self) -> None:
        with (
            patch("dzi_publisher.core.handlers.run_job") as mock_run,
            pytest.raises(ContractError),
        ):
            handle_run_dz_job("[1, 2]")
        mock_run.assert_not_called()
