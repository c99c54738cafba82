"""Per-job local scratch workspace.

Each job gets a uniquely named directory (``dzFiles-<random>``) under the
configured scratch root. The directory and everything the job wrote into
it are removed when the context exits, whether the job succeeded or not,
so repeated runs cannot exhaust local disk.
"""

from __future__ import annotations

import contextlib
import logging
import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from dzi_publisher.core.constants import SCRATCH_DIR_PREFIX
from dzi_publisher.core.exceptions import WorkspaceError

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger("dzi_publisher.utils.workspace")


@contextlib.contextmanager
def scratch_workspace(root: str | Path | None = None) -> Iterator[Path]:
    """Create a job-exclusive scratch directory and remove it on exit.

    Args:
        root: Parent directory. ``None`` uses the system temp directory.

    Yields:
        Path of the new, empty directory.

    Raises:
        WorkspaceError: If the directory cannot be created.
    """
    try:
        path = Path(tempfile.mkdtemp(prefix=SCRATCH_DIR_PREFIX, dir=root))
    except OSError as exc:
        msg = f"Error creating scratch workspace under {root or tempfile.gettempdir()}: {exc}"
        raise WorkspaceError(msg) from exc

    logger.debug("Scratch workspace created | path=%s", path)
    try:
        yield path
    finally:
        remove_workspace(path)


def remove_workspace(path: Path) -> None:
    """Delete *path* recursively, logging (not raising) on failure."""
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.warning("Failed to remove scratch workspace | path=%s | error=%s", path, exc)
        return
    logger.debug("Scratch workspace removed | path=%s", path)
