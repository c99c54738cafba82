"""Shared pipeline constants — single source of truth.

Centralises provider identifiers, status marker bodies, artifact file
extensions, and the environment variable names that sources read their
credentials from.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Storage provider identifiers
# ---------------------------------------------------------------------------

AZURE = "azure"
"""Azure Blob Storage with shared-key (account name + account key) auth."""

AZURE_SAS = "azure_sas"
"""Azure Blob Storage with a SAS token appended to every blob URL."""

S3 = "s3"
"""Region-scoped S3 (or S3-compatible) object storage with static keys."""

# ---------------------------------------------------------------------------
# Status marker bodies
# ---------------------------------------------------------------------------

STATUS_PENDING = "pending"
STATUS_OK = "ok"

# ---------------------------------------------------------------------------
# Artifact naming
# ---------------------------------------------------------------------------

STATUS_EXTENSION = ".txt"
INDEX_EXTENSION = ".dzi"
SOURCE_RASTER_EXTENSION = ".tiff"
TILES_DIR_SUFFIX = "_files"
SCRATCH_DIR_PREFIX = "dzFiles-"

DEFAULT_TILER_BINARY = "vips"
TILER_SUBCOMMAND = "dzsave"

# ---------------------------------------------------------------------------
# Credential environment variables
# ---------------------------------------------------------------------------

AZURE_ACCOUNT_NAME_ENV = "AZURE_ACCOUNT_NAME"
AZURE_ACCOUNT_KEY_ENV = "AZURE_ACCOUNT_KEY"
AZURE_SAS_TOKEN_ENV = "AZURE_SAS_TOKEN"
S3_KEY_ENV = "S3_KEY"
S3_KEY_SECRET_ENV = "S3_KEY_SECRET"
