"""Tests for destination key generation."""

from __future__ import annotations

from pathlib import Path

import pytest

from dzi_publisher.utils.blob_paths import (
    build_index_key,
    build_status_key,
    build_tile_key,
    split_image_key,
)


class TestSplitImageKey:
    """Image keys split into a slash-terminated directory and a bare name."""

    @pytest.mark.parametrize(
        ("image_key", "expected"),
        [
            ("slides/2024/scan.tiff", ("slides/2024/", "scan")),
            ("a/b.svs", ("a/", "b")),
            ("scan.svs", ("", "scan")),
            ("deep/path/name.with.dots.tif", ("deep/path/", "name.with.dots")),
            ("noext", ("", "noext")),
        ],
    )
    def test_split(self, image_key: str, expected: tuple[str, str]) -> None:
        assert split_image_key(image_key) == expected


class TestStatusKey:
    """The marker sits beside the image with a ``.txt`` extension."""

    def test_nested(self) -> None:
        assert build_status_key("a/b.svs") == "a/b.txt"

    def test_top_level(self) -> None:
        assert build_status_key("scan.tiff") == "scan.txt"


class TestIndexKey:
    def test_index_key(self) -> None:
        assert build_index_key("a/", "b") == "a/b.dzi"
        assert build_index_key("", "b") == "b.dzi"


class TestTileKey:
    """Tile keys mirror the local tree under the image's key directory."""

    def test_nested_tile(self, tmp_path: Path) -> None:
        tile = tmp_path / "b_files" / "12" / "3_7.jpeg"
        assert build_tile_key("a/", tmp_path, tile) == "a/b_files/12/3_7.jpeg"

    def test_top_level_tile(self, tmp_path: Path) -> None:
        tile = tmp_path / "b_files" / "0" / "0_0.jpeg"
        assert build_tile_key("", tmp_path, tile) == "b_files/0/0_0.jpeg"

    def test_outside_scratch_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            build_tile_key("a/", tmp_path / "scratch", tmp_path / "elsewhere" / "x.jpeg")
