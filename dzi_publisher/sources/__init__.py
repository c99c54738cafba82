"""Storage sources.

Implements the pluggable storage backend pattern:
- StorageSource: Abstract base class (whole-object download/upload)
- AzureBlobSource: Azure Blob Storage, shared-key auth (``azure``)
- AzureSasSource: Azure Blob Storage, SAS-token auth (``azure_sas``)
- S3Source: Region-scoped S3 with static keys (``s3``)

The concrete source is selected by provider name through the registry;
concrete modules are imported lazily so that only the selected SDK loads.
"""

from dzi_publisher.sources.base import (
    SourceAuthError,
    SourceDownloadError,
    SourceError,
    SourceNotFoundError,
    SourceUploadError,
    StorageSource,
)
from dzi_publisher.sources.registry import (
    create_source,
    list_sources,
    register_source,
)

__all__ = [
    "SourceAuthError",
    "SourceDownloadError",
    "SourceError",
    "SourceNotFoundError",
    "SourceUploadError",
    "StorageSource",
    "create_source",
    "list_sources",
    "register_source",
]
