"""Zoom/row/column addressing of rendered blocks."""

from __future__ import annotations

from dataclasses import dataclass

from .config import ImageGeometry
from .errors import ConfigurationError
from .partition import validate_geometry

__all__ = ["TileIdentity", "zoom_level", "address_of"]


@dataclass(frozen=True)
class TileIdentity:
    zoom: int
    row: int
    column: int

    def filename(self, extension: str) -> str:
        return f"{self.zoom}-{self.row}-{self.column}.{extension}"

    def block_index(self, blocks_per_line: int) -> int:
        return self.row * blocks_per_line + self.column


def zoom_level(geometry: ImageGeometry) -> int:
    """Pyramid level of a run, ``log2(width / block_width)``.

    The ratio has to be a power of two, otherwise the tiles do not belong
    to a well-defined zoom level.
    """
    validate_geometry(geometry)
    ratio = geometry.blocks_per_line
    if ratio & (ratio - 1):
        raise ConfigurationError(
            f"width / block_width = {ratio} is not a power of two, no integer zoom level.",
            geometry,
        )
    return ratio.bit_length() - 1


def address_of(block_index: int, geometry: ImageGeometry) -> TileIdentity:
    zoom = zoom_level(geometry)
    if not 0 <= block_index < geometry.total_blocks:
        raise ValueError(f"Block index {block_index} out of range [0, {geometry.total_blocks - 1}]")
    return TileIdentity(
        zoom=zoom,
        row=block_index // geometry.blocks_per_line,
        column=block_index % geometry.blocks_per_line,
    )
