"""Source registry — selects the storage backend by provider name.

The registry maps a provider identifier to a loader for the source class.
New backends are plugged in with ``register_source`` without touching the
orchestrator.

Usage::

    from dzi_publisher.sources.registry import create_source

    source = create_source("s3", SourceConfig(name="s3", zone="eu-west-1"))
    data = source.download("bucket", "images/scan.tiff")
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from dzi_publisher.core.constants import AZURE, AZURE_SAS, S3
from dzi_publisher.models.job import SourceConfig
from dzi_publisher.sources.base import SourceNotFoundError, StorageSource

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Lazy-import source registry
# ---------------------------------------------------------------------------

# Each entry maps a provider name to a callable that returns the source
# *class*. Imports are deferred so that an SDK (azure-storage-blob, boto3)
# is only loaded when its backend is selected.

_SOURCE_REGISTRY: dict[str, Callable[[], type[StorageSource]]] = {}
_registry_lock = threading.Lock()


def _register_builtin_sources() -> None:
    """Register the built-in storage sources.

    Called once on first registry access. Each registration is a lazy
    import thunk.
    """

    def _azure() -> type[StorageSource]:
        from dzi_publisher.sources.azure_blob import AzureBlobSource

        return AzureBlobSource

    def _azure_sas() -> type[StorageSource]:
        from dzi_publisher.sources.azure_sas import AzureSasSource

        return AzureSasSource

    def _s3() -> type[StorageSource]:
        from dzi_publisher.sources.s3 import S3Source

        return S3Source

    _SOURCE_REGISTRY[AZURE] = _azure
    _SOURCE_REGISTRY[AZURE_SAS] = _azure_sas
    _SOURCE_REGISTRY[S3] = _s3


def _ensure_registry() -> None:
    """Initialise the source registry once (idempotent)."""
    with _registry_lock:
        if not _SOURCE_REGISTRY:
            _register_builtin_sources()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def register_source(
    name: str,
    loader: Callable[[], type[StorageSource]],
) -> None:
    """Register a storage source under *name*.

    Intended to run at process start. Registering an existing name
    replaces the previous loader.

    Args:
        name: Provider name (e.g. ``"gcs"``).
        loader: A zero-argument callable that returns the source class.

    Raises:
        ValueError: If the name is empty.
    """
    if not name:
        msg = "Provider name must be non-empty"
        raise ValueError(msg)
    _ensure_registry()
    with _registry_lock:
        _SOURCE_REGISTRY[name] = loader
    logger.debug("Registered storage source: %s", name)


def create_source(
    name: str,
    config: SourceConfig | None = None,
) -> StorageSource:
    """Create a storage source for provider *name*.

    No network call is made for unknown providers.

    Args:
        name: Provider identifier (``"azure"``, ``"azure_sas"``, ``"s3"``, ...).
        config: Optional ``SourceConfig``. If ``None``, a config with just
            the provider name is used and credentials come from the
            environment.

    Returns:
        A configured ``StorageSource`` instance.

    Raises:
        SourceNotFoundError: If *name* is not registered or does not
            match ``config.name``.
        SourceAuthError: If the source cannot find usable credentials.
    """
    _ensure_registry()

    loader = _SOURCE_REGISTRY.get(name)
    if loader is None:
        available = ", ".join(sorted(_SOURCE_REGISTRY))
        msg = f"Unknown storage provider: {name!r}. Available: {available}"
        raise SourceNotFoundError(provider=name, message=msg)

    if config is None:
        config = SourceConfig(name=name)
    elif config.name != name:
        msg = f"SourceConfig.name {config.name!r} does not match requested provider {name!r}"
        raise SourceNotFoundError(provider=name, message=msg)

    source_cls = loader()
    logger.info("Creating storage source: %s", name)
    return source_cls(config)


def list_sources() -> list[str]:
    """Return the names of all registered storage sources."""
    _ensure_registry()
    return sorted(_SOURCE_REGISTRY)
