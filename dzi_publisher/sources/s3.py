"""Region-scoped S3 source using boto3.

Static credentials come from ``SourceConfig`` or, when empty, from the
``S3_KEY`` and ``S3_KEY_SECRET`` environment variables. The region is the
per-call ``zone`` argument, falling back to ``SourceConfig.zone``.
``SourceConfig.endpoint_url`` targets S3-compatible stores.

One boto3 client is created per region and reused; boto3 clients are
thread-safe, but creating them from a shared session is not, so client
creation is serialised.
"""

from __future__ import annotations

import logging
import os
import threading
from typing import TYPE_CHECKING, Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from dzi_publisher.core.constants import S3_KEY_ENV, S3_KEY_SECRET_ENV
from dzi_publisher.sources.base import (
    SourceAuthError,
    SourceDownloadError,
    SourceUploadError,
    StorageSource,
)

if TYPE_CHECKING:
    from dzi_publisher.models.job import SourceConfig

logger = logging.getLogger("dzi_publisher.sources.s3")

_NON_RETRYABLE_CODES = frozenset(
    {"NoSuchKey", "NoSuchBucket", "AccessDenied", "InvalidAccessKeyId", "SignatureDoesNotMatch"}
)


def _is_retryable(exc: Exception) -> bool:
    if isinstance(exc, ClientError):
        code = exc.response.get("Error", {}).get("Code", "")
        return code not in _NON_RETRYABLE_CODES
    return True


class S3Source(StorageSource):
    """Keyed, region-scoped S3 source (``s3``)."""

    def __init__(self, config: SourceConfig) -> None:
        super().__init__(config)
        access_key_id = config.access_key_id or os.getenv(S3_KEY_ENV, "")
        secret_access_key = config.secret_access_key or os.getenv(S3_KEY_SECRET_ENV, "")
        if not access_key_id or not secret_access_key:
            msg = f"S3 access key and secret are required (set {S3_KEY_ENV} and {S3_KEY_SECRET_ENV})"
            raise SourceAuthError(self.name, msg)

        self._session = boto3.session.Session(
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
        )
        self._clients: dict[str | None, Any] = {}
        self._lock = threading.Lock()

    def _client(self, zone: str | None) -> Any:
        region = self.resolve_zone(zone)
        with self._lock:
            client = self._clients.get(region)
            if client is None:
                client = self._session.client(
                    "s3",
                    region_name=region,
                    endpoint_url=self.config.endpoint_url or None,
                )
                self._clients[region] = client
        return client

    def download(self, container: str, key: str, zone: str | None = None) -> bytes:
        try:
            response = self._client(zone).get_object(Bucket=container, Key=key)
            data: bytes = response["Body"].read()
        except (BotoCoreError, ClientError) as exc:
            msg = f"Failed to download s3://{container}/{key}: {exc}"
            raise SourceDownloadError(self.name, msg, retryable=_is_retryable(exc)) from exc

        logger.debug(
            "Object downloaded | bucket=%s | key=%s | size=%d",
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
        zone: str | None = None,
    ) -> None:
        try:
            self._client(zone).put_object(Bucket=container, Key=key, Body=data)
        except (BotoCoreError, ClientError) as exc:
            msg = f"Failed to upload s3://{container}/{key}: {exc}"
            raise SourceUploadError(self.name, msg, retryable=_is_retryable(exc)) from exc

        logger.debug(
            "Object uploaded | bucket=%s | key=%s | size=%d",
            container,
            key,
            len(data),
        )
