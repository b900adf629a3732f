"""Static block partitioning of the image across nodes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List

from .config import ImageGeometry, PlaneWindow
from .errors import ConfigurationError

__all__ = [
    "BlockAssignment",
    "BlockBounds",
    "validate_geometry",
    "partition",
    "block_bounds",
    "assignment_bounds",
]


@dataclass(frozen=True)
class BlockAssignment:
    """Inclusive range of global block indices owned by one node."""

    first_block: int
    last_block: int

    def __len__(self) -> int:
        return self.last_block - self.first_block + 1

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.first_block, self.last_block + 1))

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and self.first_block <= index <= self.last_block

    def local_offset(self, index: int) -> int:
        if index not in self:
            raise ValueError(f"Block {index} is not owned by this assignment")
        return index - self.first_block


@dataclass(frozen=True)
class BlockBounds:
    """Sub-rectangle of the complex plane covered by one block."""

    min_r: float
    max_r: float
    min_i: float
    max_i: float


def validate_geometry(geometry: ImageGeometry) -> None:
    """Raise ``ConfigurationError`` unless the image splits into whole blocks."""
    if geometry.block_width <= 0 or geometry.block_height <= 0:
        raise ConfigurationError(
            "Block size cannot be 0, check your configuration.", geometry
        )
    if geometry.width <= 0 or geometry.height <= 0:
        raise ConfigurationError("Image size must be positive.", geometry)
    if geometry.width % geometry.block_width or geometry.height % geometry.block_height:
        raise ConfigurationError(
            f"Image size {geometry.width}x{geometry.height} is not compatible with block size "
            f"{geometry.block_width}x{geometry.block_height}. "
            "Please choose an image size multiple of the block size.",
            geometry,
        )


def partition(geometry: ImageGeometry, rank: int, node_count: int) -> BlockAssignment:
    """Compute the contiguous block range owned by ``rank`` out of ``node_count`` nodes.

    Blocks are split evenly; when the split is not exact every remaining
    block goes to the last rank.
    """
    validate_geometry(geometry)
    if node_count < 1:
        raise ConfigurationError(f"Node count must be at least 1, got {node_count}.")
    if not 0 <= rank < node_count:
        raise ConfigurationError(f"Rank {rank} out of range [0, {node_count - 1}].")

    total_blocks = geometry.total_blocks
    if node_count > total_blocks:
        raise ConfigurationError(
            f"{node_count} nodes for {total_blocks} blocks would leave nodes without work.",
            geometry,
        )

    blocks_per_node = total_blocks // node_count
    first_block = blocks_per_node * rank
    last_block = blocks_per_node * (rank + 1) - 1

    if total_blocks % node_count and rank == node_count - 1:
        last_block = total_blocks - 1

    return BlockAssignment(first_block, last_block)


def block_bounds(index: int, geometry: ImageGeometry, window: PlaneWindow) -> BlockBounds:
    """Plane rectangle of block ``index`` (row-major block numbering)."""
    rang_r = (window.max_real - window.min_real) / geometry.width
    rang_i = (window.max_imag - window.min_imag) / geometry.height

    block_x = index % geometry.blocks_per_line
    block_y = index // geometry.blocks_per_line

    return BlockBounds(
        min_r=window.min_real + rang_r * block_x * geometry.block_width,
        max_r=window.min_real + rang_r * (block_x + 1) * geometry.block_width,
        min_i=window.min_imag + rang_i * block_y * geometry.block_height,
        max_i=window.min_imag + rang_i * (block_y + 1) * geometry.block_height,
    )


def assignment_bounds(
    assignment: BlockAssignment,
    geometry: ImageGeometry,
    window: PlaneWindow,
) -> List[BlockBounds]:
    """Bounds of every owned block, indexed by local offset."""
    return [block_bounds(index, geometry, window) for index in assignment]
