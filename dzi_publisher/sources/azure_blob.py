"""Azure Blob Storage source with shared-key authentication.

Credentials come from ``SourceConfig`` or, when empty, from the
``AZURE_ACCOUNT_NAME`` and ``AZURE_ACCOUNT_KEY`` environment variables.
The service endpoint defaults to ``https://<account>.blob.core.windows.net``;
``SourceConfig.endpoint_url`` overrides it (e.g. Azurite).

The ``BlobServiceClient`` is built once per source and shared by every
upload task of the job; the SDK's clients are safe for concurrent use.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from azure.core.exceptions import (
    AzureError,
    ClientAuthenticationError,
    ResourceNotFoundError,
)
from azure.storage.blob import BlobServiceClient

from dzi_publisher.core.constants import AZURE_ACCOUNT_KEY_ENV, AZURE_ACCOUNT_NAME_ENV
from dzi_publisher.sources.base import (
    SourceAuthError,
    SourceDownloadError,
    SourceUploadError,
    StorageSource,
)

if TYPE_CHECKING:
    from dzi_publisher.models.job import SourceConfig

logger = logging.getLogger("dzi_publisher.sources.azure_blob")


def build_account_url(account_name: str, endpoint_url: str = "") -> str:
    """Return the blob service URL for *account_name*."""
    if endpoint_url:
        return endpoint_url.rstrip("/")
    return f"https://{account_name}.blob.core.windows.net"


def _is_retryable(exc: AzureError) -> bool:
    return not isinstance(exc, ResourceNotFoundError | ClientAuthenticationError)


class AzureBlobClientMixin:
    """Whole-object download/upload on top of a ``BlobServiceClient``.

    Shared by the shared-key and SAS-token sources, which differ only in
    how they authenticate the service client.
    """

    _service: BlobServiceClient
    name: str

    def download(self, container: str, key: str, zone: str | None = None) -> bytes:  # noqa: ARG002
        blob_client = self._service.get_blob_client(container=container, blob=key)
        try:
            data = blob_client.download_blob().readall()
        except AzureError as exc:
            msg = f"Error downloading blob {container}/{key}: {exc}"
            raise SourceDownloadError(self.name, msg, retryable=_is_retryable(exc)) from exc

        logger.debug(
            "Blob downloaded | provider=%s | container=%s | key=%s | size=%d",
            self.name,
            container,
            key,
            len(data),
        )
        return data

    def upload(
        self,
        data: bytes,
        key: str,
        container: str,
        zone: str | None = None,  # noqa: ARG002
    ) -> None:
        blob_client = self._service.get_blob_client(container=container, blob=key)
        try:
            blob_client.upload_blob(data, overwrite=True)
        except AzureError as exc:
            msg = f"Uploading blob {container}/{key} failed: {exc}"
            raise SourceUploadError(self.name, msg, retryable=_is_retryable(exc)) from exc

        logger.debug(
            "Blob uploaded | provider=%s | container=%s | key=%s | size=%d",
            self.name,
            container,
            key,
            len(data),
        )


class AzureBlobSource(AzureBlobClientMixin, StorageSource):
    """Shared-key authenticated Azure Blob Storage source (``azure``)."""

    def __init__(self, config: SourceConfig) -> None:
        super().__init__(config)
        account_name = config.account_name or os.getenv(AZURE_ACCOUNT_NAME_ENV, "")
        account_key = config.account_key or os.getenv(AZURE_ACCOUNT_KEY_ENV, "")
        if not account_name or not account_key:
            msg = (
                "Azure account name and key are required "
                f"(set {AZURE_ACCOUNT_NAME_ENV} and {AZURE_ACCOUNT_KEY_ENV})"
            )
            raise SourceAuthError(self.name, msg)

        self._service = BlobServiceClient(
            account_url=build_account_url(account_name, config.endpoint_url),
            credential={"account_name": account_name, "account_key": account_key},
        )
