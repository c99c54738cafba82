"""Deterministic object key generation for published Deep Zoom artifacts.

Given a source image key ``<imageDir>/<name>.<ext>``, the job writes:

    <imageDir>/<name>.txt                 status marker
    <imageDir>/<name>.dzi                 Deep Zoom index
    <imageDir>/<name>_files/<level>/...   tiles, nested exactly as the tiler wrote them

Keys are provider-native paths and always use ``/`` separators regardless
of the local operating system.
"""

from __future__ import annotations

import posixpath
from typing import TYPE_CHECKING

from dzi_publisher.core.constants import INDEX_EXTENSION, STATUS_EXTENSION

if TYPE_CHECKING:
    from pathlib import Path


def split_image_key(image_key: str) -> tuple[str, str]:
    """Split an image key into its key directory and extension-less name.

    The directory keeps its trailing slash (or is empty for top-level keys)
    so that other keys can be built by plain concatenation.

    Examples:
        ``"slides/2024/scan.tiff"`` → ``("slides/2024/", "scan")``
        ``"scan.svs"`` → ``("", "scan")``
    """
    key_dir, filename = posixpath.split(image_key)
    if key_dir:
        key_dir += "/"
    base_name, _ext = posixpath.splitext(filename)
    return key_dir, base_name or filename


def build_status_key(image_key: str) -> str:
    """Return ``<imageDir>/<name>.txt`` for *image_key*."""
    key_dir, base_name = split_image_key(image_key)
    return f"{key_dir}{base_name}{STATUS_EXTENSION}"


def build_index_key(key_dir: str, base_name: str) -> str:
    """Return ``<keyDir><name>.dzi``."""
    return f"{key_dir}{base_name}{INDEX_EXTENSION}"


def build_tile_key(key_dir: str, scratch_dir: Path, tile_path: Path) -> str:
    """Map a local tile file to its destination key.

    The scratch-root prefix of *tile_path* is replaced by *key_dir*.

    Raises:
        ValueError: If *tile_path* does not live under *scratch_dir*.
    """
    relative = tile_path.relative_to(scratch_dir)
    return f"{key_dir}{relative.as_posix()}"
