"""Generate tiles — run the external Deep Zoom tiler over a source raster.

Writes the downloaded image bytes to ``<scratch>/<name>.tiff`` and runs

    vips dzsave <scratch>/<name>.tiff <scratch>/<name>

which produces ``<scratch>/<name>.dzi`` and the ``<scratch>/<name>_files/``
tile tree. The tiler is a black box: a non-zero exit status is the only
failure signal consumed, and the tile tree is never interpreted here.
"""

from __future__ import annotations

import logging
import subprocess
import time
from typing import TYPE_CHECKING

from dzi_publisher.core.constants import (
    DEFAULT_TILER_BINARY,
    SOURCE_RASTER_EXTENSION,
    TILER_SUBCOMMAND,
)
from dzi_publisher.core.exceptions import PipelineError
from dzi_publisher.models.tiles import TileArtifacts

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger("dzi_publisher.activities.generate_tiles")

#: Bytes of tiler stderr kept in error messages.
STDERR_TAIL_CHARS = 500


class TileGenerationError(PipelineError):
    """Raised when the source raster cannot be turned into tiles.

    Attributes:
        message: Human-readable error description.
        returncode: Tiler exit status, or ``None`` if it never ran to completion.
    """

    default_stage = "generate_tiles"
    default_code = "TILE_GENERATION_FAILED"

    def __init__(self, message: str, *, returncode: int | None = None) -> None:
        self.returncode = returncode
        super().__init__(message, retryable=False)


def build_tiler_command(tiler_binary: str, source_path: Path, output_prefix: Path) -> list[str]:
    """Return the argv for one tiler run."""
    return [tiler_binary, TILER_SUBCOMMAND, str(source_path), str(output_prefix)]


def generate_tiles(
    scratch_dir: Path,
    image_bytes: bytes,
    base_name: str,
    *,
    tiler_binary: str = DEFAULT_TILER_BINARY,
    timeout_seconds: float | None = None,
) -> TileArtifacts:
    """Persist *image_bytes* and run the tiler on it.

    Args:
        scratch_dir: Existing, job-exclusive working directory.
        image_bytes: Full body of the source raster.
        base_name: Image name without extension; names every output.
        tiler_binary: Tiler executable (default ``vips``).
        timeout_seconds: Kill the tiler after this long; ``None`` waits forever.

    Returns:
        ``TileArtifacts`` locating the index file and tile directory.

    Raises:
        TileGenerationError: If the raster cannot be written, the tiler is
            missing, times out, exits non-zero, or leaves no index/tile tree.
    """
    artifacts = TileArtifacts(scratch_dir=scratch_dir, base_name=base_name)
    source_path = scratch_dir / f"{base_name}{SOURCE_RASTER_EXTENSION}"

    try:
        source_path.write_bytes(image_bytes)
    except OSError as exc:
        msg = f"Error saving source raster to {source_path}: {exc}"
        raise TileGenerationError(msg) from exc

    command = build_tiler_command(tiler_binary, source_path, scratch_dir / base_name)
    logger.info(
        "generate_tiles started | image=%s | size=%d bytes | command=%s",
        base_name,
        len(image_bytes),
        " ".join(command),
    )

    start_time = time.monotonic()
    try:
        completed = subprocess.run(  # noqa: S603
            command,
            capture_output=True,
            text=True,
            check=False,
            timeout=timeout_seconds,
        )
    except FileNotFoundError as exc:
        msg = f"Tiler executable not found: {tiler_binary!r}"
        raise TileGenerationError(msg) from exc
    except subprocess.TimeoutExpired as exc:
        msg = f"Tiler timed out after {timeout_seconds}s for {base_name}"
        raise TileGenerationError(msg) from exc
    except OSError as exc:
        msg = f"Error running tiler {tiler_binary!r}: {exc}"
        raise TileGenerationError(msg) from exc

    duration = time.monotonic() - start_time

    if completed.returncode != 0:
        stderr_tail = (completed.stderr or "").strip()[-STDERR_TAIL_CHARS:]
        msg = f"Error creating dz files: tiler exited with status {completed.returncode}"
        if stderr_tail:
            msg = f"{msg}: {stderr_tail}"
        raise TileGenerationError(msg, returncode=completed.returncode)

    if not artifacts.index_path.is_file():
        msg = f"Tiler produced no index file at {artifacts.index_path}"
        raise TileGenerationError(msg, returncode=completed.returncode)

    if not artifacts.tiles_dir.is_dir():
        msg = f"Tiler produced no tile directory at {artifacts.tiles_dir}"
        raise TileGenerationError(msg, returncode=completed.returncode)

    logger.info(
        "generate_tiles completed | image=%s | duration=%.2fs",
        base_name,
        duration,
    )
    return artifacts
