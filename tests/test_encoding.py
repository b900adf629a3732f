"""Tile files on disk."""

import numpy as np
import pytest
from PIL import Image

from juliatiles.encoding import tile_path, write_tile
from juliatiles.errors import ConfigurationError, EncodingError
from juliatiles.tiles import TileIdentity

TILE = TileIdentity(2, 0, 1)


def _gradient(height=8, width=16):
    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    pixels[..., 0] = np.arange(width, dtype=np.uint8)[None, :] * 10
    pixels[..., 1] = np.arange(height, dtype=np.uint8)[:, None] * 20
    pixels[..., 2] = 200
    return pixels


@pytest.mark.parametrize("image_format", ["png", "bmp"])
def test_written_tile_matches_buffer(tmp_path, image_format):
    pixels = _gradient()
    path = write_tile(pixels, TILE, tmp_path, image_format)

    assert path == tmp_path / f"2-0-1.{image_format}"
    with Image.open(path) as image:
        assert image.mode == "RGB"
        assert image.size == (16, 8)
        # row 0 of the buffer is the top row of the file
        np.testing.assert_array_equal(np.asarray(image), pixels)


def test_no_temporary_files_left(tmp_path):
    write_tile(_gradient(), TILE, tmp_path, "png")
    assert [p.name for p in tmp_path.iterdir()] == ["2-0-1.png"]


def test_unwritable_destination(tmp_path):
    missing = tmp_path / "does" / "not" / "exist"
    with pytest.raises(EncodingError):
        write_tile(_gradient(), TILE, missing, "png")
    assert not missing.exists()


def test_malformed_buffer(tmp_path):
    with pytest.raises(EncodingError):
        write_tile(np.zeros((8, 16), dtype=np.uint8), TILE, tmp_path, "png")
    assert list(tmp_path.iterdir()) == []


def test_unknown_format(tmp_path):
    with pytest.raises(ConfigurationError):
        tile_path(tmp_path, TILE, "gif")
