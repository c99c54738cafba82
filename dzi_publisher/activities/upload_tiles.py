"""Upload tiles — publish the generated index and every tile concurrently.

Walks the tile tree produced by the tiler and uploads each file as its
own task on a thread pool. The destination key of every file is its path
relative to the scratch root, prefixed with the source image's key
directory, so the tree's nesting is reproduced exactly:

    <scratch>/scan.dzi                  → <keyDir>scan.dzi
    <scratch>/scan_files/12/3_7.jpeg    → <keyDir>scan_files/12/3_7.jpeg

Semantics:
- The whole tree is enumerated before any upload starts, so a failing
  upload never cuts scheduling short.
- Every task runs to completion; there is no cancellation once the
  fan-out has started.
- If one or more tasks fail, a single ``UploadError`` carrying the first
  observed failure is raised after all tasks have finished.
- ``max_workers=0`` sizes the pool to the number of files (every upload
  in flight at once); a positive value caps concurrency without changing
  the result.
"""

from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import TYPE_CHECKING

from dzi_publisher.core.exceptions import PipelineError
from dzi_publisher.models.tiles import UploadSummary
from dzi_publisher.utils.blob_paths import build_index_key, build_tile_key

if TYPE_CHECKING:
    from dzi_publisher.models.tiles import TileArtifacts
    from dzi_publisher.sources.base import StorageSource

logger = logging.getLogger("dzi_publisher.activities.upload_tiles")


class UploadError(PipelineError):
    """Raised when the tile tree cannot be walked or any upload fails.

    Attributes:
        message: Human-readable error description.
        failed: Number of uploads that failed (0 for traversal errors).
        total: Number of uploads scheduled.
    """

    default_stage = "upload_tiles"
    default_code = "UPLOAD_FAILED"

    def __init__(self, message: str, *, failed: int = 0, total: int = 0) -> None:
        self.failed = failed
        self.total = total
        super().__init__(message, retryable=False)


def discover_upload_tasks(artifacts: TileArtifacts, key_dir: str) -> list[tuple[Path, str]]:
    """Enumerate ``(local path, destination key)`` pairs, index first.

    Tiles are listed in a stable (sorted) order. Only regular files are
    included.

    Raises:
        UploadError: If the tile directory is missing or unreadable.
    """
    tasks = [(artifacts.index_path, build_index_key(key_dir, artifacts.base_name))]

    def _raise(error: OSError) -> None:
        raise error

    try:
        for dirpath, dirnames, filenames in os.walk(artifacts.tiles_dir, onerror=_raise):
            dirnames.sort()
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                if not path.is_file():
                    continue
                tasks.append((path, build_tile_key(key_dir, artifacts.scratch_dir, path)))
    except OSError as exc:
        msg = f"Error walking tile directory {artifacts.tiles_dir}: {exc}"
        raise UploadError(msg) from exc

    return tasks


def _upload_file(
    source: StorageSource,
    path: Path,
    key: str,
    container: str,
    zone: str | None,
) -> str:
    try:
        data = path.read_bytes()
    except OSError as exc:
        msg = f"Error reading file: {path}: {exc}"
        raise UploadError(msg) from exc

    source.upload(data, key, container, zone)
    return key


def upload_tiles(
    artifacts: TileArtifacts,
    key_dir: str,
    container: str,
    zone: str | None,
    source: StorageSource,
    *,
    max_workers: int = 0,
) -> UploadSummary:
    """Upload the index file and every tile, concurrently.

    Args:
        artifacts: Location of the generated index and tile tree.
        key_dir: Destination key prefix (the image's key directory,
            ending in ``/`` or empty).
        container: Destination container.
        zone: Region passed through to the source.
        source: Storage source shared read-only by all upload tasks.
        max_workers: Concurrency cap; ``0`` runs every upload at once.

    Returns:
        ``UploadSummary`` listing every destination key, index first.

    Raises:
        UploadError: If the tile tree cannot be walked, or after all tasks
            have finished when at least one of them failed.
    """
    tasks = discover_upload_tasks(artifacts, key_dir)
    total = len(tasks)
    workers = max_workers if max_workers > 0 else total

    logger.info(
        "upload_tiles started | image=%s | files=%d | workers=%d | container=%s | key_dir=%s",
        artifacts.base_name,
        total,
        workers,
        container,
        key_dir,
    )

    start_time = time.monotonic()
    first_error: Exception | None = None
    failed = 0

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="dz-upload") as executor:
        futures = {
            executor.submit(_upload_file, source, path, key, container, zone): key
            for path, key in tasks
        }
        for future in as_completed(futures):
            try:
                future.result()
            except Exception as exc:  # noqa: BLE001
                failed += 1
                if first_error is None:
                    first_error = exc
                logger.warning(
                    "Tile upload failed | key=%s | container=%s | error=%s",
                    futures[future],
                    container,
                    exc,
                )

    duration = time.monotonic() - start_time

    if first_error is not None:
        logger.error(
            "upload_tiles failed | image=%s | failed=%d/%d | duration=%.2fs",
            artifacts.base_name,
            failed,
            total,
            duration,
        )
        msg = f"Error uploading dz files ({failed}/{total} failed): {first_error}"
        raise UploadError(msg, failed=failed, total=total) from first_error

    logger.info(
        "upload_tiles completed | image=%s | files=%d | duration=%.2fs",
        artifacts.base_name,
        total,
        duration,
    )
    return UploadSummary(container=container, keys=[key for _, key in tasks])
