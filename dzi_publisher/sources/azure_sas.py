"""Azure Blob Storage source authenticated with a SAS token.

The token and account name are supplied either per request (the trigger
copies them from the JSON body into ``SourceConfig``) or out of band via
the ``AZURE_SAS_TOKEN`` and ``AZURE_ACCOUNT_NAME`` environment variables.
The SDK appends the token to every blob URL; no account key is involved.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from azure.storage.blob import BlobServiceClient

from dzi_publisher.core.constants import AZURE_ACCOUNT_NAME_ENV, AZURE_SAS_TOKEN_ENV
from dzi_publisher.sources.azure_blob import AzureBlobClientMixin, build_account_url
from dzi_publisher.sources.base import SourceAuthError, StorageSource

if TYPE_CHECKING:
    from dzi_publisher.models.job import SourceConfig


class AzureSasSource(AzureBlobClientMixin, StorageSource):
    """SAS-token authenticated Azure Blob Storage source (``azure_sas``)."""

    def __init__(self, config: SourceConfig) -> None:
        super().__init__(config)
        account_name = config.account_name or os.getenv(AZURE_ACCOUNT_NAME_ENV, "")
        sas_token = (config.sas_token or os.getenv(AZURE_SAS_TOKEN_ENV, "")).lstrip("?")
        if not account_name or not sas_token:
            msg = (
                "Azure account name and SAS token are required "
                f"(pass accountName/sasToken or set {AZURE_ACCOUNT_NAME_ENV} "
                f"and {AZURE_SAS_TOKEN_ENV})"
            )
            raise SourceAuthError(self.name, msg)

        self._service = BlobServiceClient(
            account_url=build_account_url(account_name, config.endpoint_url),
            credential=sas_token,
        )
