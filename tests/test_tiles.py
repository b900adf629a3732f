"""Tile addressing."""

import pytest

from juliatiles.config import ImageGeometry
from juliatiles.errors import ConfigurationError
from juliatiles.tiles import TileIdentity, address_of, zoom_level


@pytest.mark.parametrize(
    "geometry,zoom",
    [
        (ImageGeometry(64, 64, 64, 64), 0),
        (ImageGeometry(32, 32, 16, 16), 1),
        (ImageGeometry(1024, 1024, 16, 16), 6),
        (ImageGeometry(1024, 48, 256, 16), 2),
    ],
)
def test_zoom_level(geometry, zoom):
    assert zoom_level(geometry) == zoom


def test_zoom_requires_power_of_two():
    with pytest.raises(ConfigurationError):
        zoom_level(ImageGeometry(96, 96, 16, 16))


def test_four_tiles():
    geometry = ImageGeometry(32, 32, 16, 16)
    tiles = [address_of(i, geometry) for i in range(geometry.total_blocks)]
    assert [(t.zoom, t.row, t.column) for t in tiles] == [(1, 0, 0), (1, 0, 1), (1, 1, 0), (1, 1, 1)]


@pytest.mark.parametrize("geometry", [ImageGeometry(256, 128, 16, 16), ImageGeometry(128, 256, 32, 8)], ids=str)
def test_round_trip(geometry):
    for index in range(geometry.total_blocks):
        tile = address_of(index, geometry)
        assert tile.block_index(geometry.blocks_per_line) == index
        assert tile.row * geometry.blocks_per_line + tile.column == index


def test_out_of_range_index():
    geometry = ImageGeometry(32, 32, 16, 16)
    with pytest.raises(ValueError):
        address_of(4, geometry)


def test_filename():
    assert TileIdentity(2, 0, 1).filename("png") == "2-0-1.png"
