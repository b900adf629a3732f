"""Tile image files: PNG/BMP encoding of finished pixel buffers."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import numpy as np
from PIL import Image

from .errors import ConfigurationError, EncodingError
from .tiles import TileIdentity

__all__ = ["IMAGE_FORMATS", "tile_extension", "tile_path", "write_tile"]

# extension -> Pillow format name
IMAGE_FORMATS = {"png": "PNG", "bmp": "BMP"}


def tile_extension(image_format: str) -> str:
    extension = image_format.lower()
    if extension not in IMAGE_FORMATS:
        raise ConfigurationError(
            f"Unknown image format {image_format!r}, choose one of {sorted(IMAGE_FORMATS)}."
        )
    return extension


def tile_path(output_dir: str | Path, tile: TileIdentity, image_format: str) -> Path:
    return Path(output_dir) / tile.filename(tile_extension(image_format))


def write_tile(
    pixels: np.ndarray,
    tile: TileIdentity,
    output_dir: str | Path,
    image_format: str = "png",
) -> Path:
    """Write one tile and return its path.

    ``pixels`` is a ``(height, width, 3)`` uint8 RGB buffer whose row 0 is the
    top row of the image file; Pillow stores BMP rows bottom-up itself. The
    file is first written next to its destination and then renamed into place,
    so a tile either exists complete or not at all.
    """
    path = tile_path(output_dir, tile, image_format)
    if pixels.ndim != 3 or pixels.shape[2] != 3 or pixels.dtype != np.uint8:
        raise EncodingError(
            f"Expected a (height, width, 3) uint8 buffer, got {pixels.shape} {pixels.dtype}", tile
        )

    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}-", suffix=".tmp", dir=path.parent)
        with os.fdopen(fd, "wb") as f:
            Image.fromarray(pixels).save(f, format=IMAGE_FORMATS[path.suffix[1:]])
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except (OSError, ValueError) as exc:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise EncodingError(f"Error during {path.suffix[1:].upper()} export of {path}: {exc}", tile) from exc

    return path
