"""Models for the locally generated Deep Zoom artifacts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from dzi_publisher.core.constants import INDEX_EXTENSION, TILES_DIR_SUFFIX

if TYPE_CHECKING:
    from pathlib import Path


@dataclass(frozen=True, slots=True)
class TileArtifacts:
    """Index file and tile tree produced by the tiler inside a scratch workspace.

    The tile tree's layout is owned by the tiler; nothing here interprets it.

    Attributes:
        scratch_dir: Root of the job's scratch workspace.
        base_name: Image name without extension (e.g. ``"slide"``).
    """

    scratch_dir: Path
    base_name: str

    @property
    def index_path(self) -> Path:
        """``<scratch>/<base>.dzi``."""
        return self.scratch_dir / f"{self.base_name}{INDEX_EXTENSION}"

    @property
    def tiles_dir(self) -> Path:
        """``<scratch>/<base>_files``."""
        return self.scratch_dir / f"{self.base_name}{TILES_DIR_SUFFIX}"


@dataclass(frozen=True, slots=True)
class UploadSummary:
    """Result of a completed upload fan-out.

    Attributes:
        container: Destination container.
        keys: Destination keys of every uploaded file, index first.
    """

    container: str
    keys: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Number of files uploaded (index + tiles)."""
        return len(self.keys)
