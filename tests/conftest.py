"""Shared pytest fixtures for the Deep Zoom Tile Publisher test suite."""

from __future__ import annotations

import subprocess
import threading
from collections.abc import Callable, Iterator
from pathlib import Path
from unittest.mock import patch

import pytest

from dzi_publisher.core.config import PipelineConfig
from dzi_publisher.models.job import JobConfig, SourceConfig
from dzi_publisher.models.tiles import TileArtifacts
from dzi_publisher.sources.base import SourceDownloadError, SourceUploadError, StorageSource

# ---------------------------------------------------------------------------
# In-memory storage source
# ---------------------------------------------------------------------------


class InMemorySource(StorageSource):
    """Dict-backed ``StorageSource`` that records every call.

    Attributes:
        objects: ``(container, key) → body`` store.
        uploads: Ordered log of ``(container, key, body)`` upload attempts.
        fail_uploads: Keys whose upload raises ``SourceUploadError``.
        fail_upload_bodies: Bodies whose upload raises (e.g. ``b"pending"``).
    """

    def __init__(self, config: SourceConfig | None = None) -> None:
        super().__init__(config or SourceConfig(name="memory"))
        self.objects: dict[tuple[str, str], bytes] = {}
        self.uploads: list[tuple[str, str, bytes]] = []
        self.downloads: list[tuple[str, str]] = []
        self.fail_uploads: set[str] = set()
        self.fail_upload_bodies: set[bytes] = set()
        self.zones: list[str | None] = []
        self._lock = threading.Lock()

    def download(self, container: str, key: str, zone: str | None = None) -> bytes:
        with self._lock:
            self.downloads.append((container, key))
            self.zones.append(zone)
            try:
                return self.objects[(container, key)]
            except KeyError as exc:
                raise SourceDownloadError(self.name, f"not found: {container}/{key}") from exc

    def upload(self, data: bytes, key: str, container: str, zone: str | None = None) -> None:
        with self._lock:
            self.uploads.append((container, key, data))
            self.zones.append(zone)
            if key in self.fail_uploads or data in self.fail_upload_bodies:
                raise SourceUploadError(self.name, f"simulated failure: {container}/{key}")
            self.objects[(container, key)] = data

    def marker_writes(self, status_key: str) -> list[bytes]:
        """Return every body written to *status_key*, in order."""
        return [body for _, key, body in self.uploads if key == status_key]


@pytest.fixture()
def memory_source() -> InMemorySource:
    """Return an empty in-memory storage source."""
    return InMemorySource()


# ---------------------------------------------------------------------------
# Job fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def job() -> JobConfig:
    """A job publishing ``slides/2024/scan.tiff`` from ``images``."""
    return JobConfig(
        source=SourceConfig(name="memory"),
        container="images",
        image_key="slides/2024/scan.tiff",
    )


@pytest.fixture()
def pipeline_config(tmp_path: Path) -> PipelineConfig:
    """Pipeline configuration with scratch space under ``tmp_path``."""
    scratch_root = tmp_path / "scratch"
    scratch_root.mkdir()
    return PipelineConfig(scratch_root=str(scratch_root))


# ---------------------------------------------------------------------------
# Fake tiler
# ---------------------------------------------------------------------------

#: Tile tree written by the fake tiler, relative to ``<prefix>_files``.
FAKE_TILES = (
    "0/0_0.jpeg",
    "1/0_0.jpeg",
    "2/0_0.jpeg",
    "2/0_1.jpeg",
    "2/1_0.jpeg",
    "2/1_1.jpeg",
)


def write_fake_pyramid(prefix: Path, tiles: tuple[str, ...] = FAKE_TILES) -> None:
    """Write ``<prefix>.dzi`` and ``<prefix>_files/<tiles>`` like ``vips dzsave``."""
    Path(f"{prefix}.dzi").write_text('<Image TileSize="254" Overlap="1" Format="jpeg"/>')
    tiles_dir = Path(f"{prefix}_files")
    for tile in tiles:
        tile_path = tiles_dir / tile
        tile_path.parent.mkdir(parents=True, exist_ok=True)
        tile_path.write_bytes(f"tile:{tile}".encode())


def _fake_run(command: list[str], **_kwargs: object) -> subprocess.CompletedProcess[str]:
    write_fake_pyramid(Path(command[3]))
    return subprocess.CompletedProcess(command, 0, stdout="", stderr="")


@pytest.fixture()
def fake_tiler() -> Iterator[object]:
    """Patch ``subprocess.run`` in the tile generator with a fake ``vips dzsave``."""
    with patch(
        "dzi_publisher.activities.generate_tiles.subprocess.run",
        side_effect=_fake_run,
    ) as mock_run:
        yield mock_run


@pytest.fixture()
def make_pyramid() -> Callable[..., TileArtifacts]:
    """Return a factory writing a fake pyramid into a scratch directory."""

    def _make(scratch_dir: Path, tiles: tuple[str, ...] = FAKE_TILES) -> TileArtifacts:
        write_fake_pyramid(scratch_dir / "scan", tiles)
        return TileArtifacts(scratch_dir=scratch_dir, base_name="scan")

    return _make
