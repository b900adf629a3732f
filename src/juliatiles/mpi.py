"""Per-node rendering loop and MPI bookkeeping."""

from __future__ import annotations

import socket
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .colors import is_rgb
from .config import RunConfig
from .encoding import tile_extension, write_tile
from .errors import EncodingError
from .partition import BlockBounds, assignment_bounds, partition
from .render import RenderParams, render_block, select_renderer
from .report import TileReport
from .tiles import address_of, zoom_level

__all__ = ["NodeContext", "mpi_node", "standalone_node", "render_node", "run_mpi_computation"]


@dataclass(frozen=True)
class NodeContext:
    """Identity of the process rendering a share of the image."""

    rank: int
    size: int
    hostname: str
    comm: Optional[Any] = None


def mpi_node() -> NodeContext:
    """Node identity taken from ``MPI.COMM_WORLD``."""
    from mpi4py import MPI

    comm = MPI.COMM_WORLD
    return NodeContext(comm.Get_rank(), comm.Get_size(), MPI.Get_processor_name(), comm)


def standalone_node(rank: int = 0, size: int = 1) -> NodeContext:
    """Node identity for a process launched without MPI."""
    return NodeContext(rank, size, socket.gethostname())


def _init_rank_stats() -> Dict[str, float]:
    return {
        "comp": 0.0,
        "write": 0.0,
        "tiles": 0.0,
    }


def _rank_log(rank: int, message: str) -> None:
    """Emit a progress message from a given rank."""
    print(f"[Rank {rank}] {message}", flush=True)


def _tile_record(
    node: NodeContext,
    block: int,
    row: int,
    column: int,
    zoom: int,
    bounds: BlockBounds,
    comp_time: float,
    write_time: float,
    path: Path,
) -> Dict[str, Any]:
    """Create a uniform tile metadata record."""
    return {
        "rank": node.rank,
        "hostname": node.hostname,
        "block": int(block),
        "zoom": int(zoom),
        "row": int(row),
        "column": int(column),
        "min_r": bounds.min_r,
        "max_r": bounds.max_r,
        "min_i": bounds.min_i,
        "max_i": bounds.max_i,
        "comp_time": comp_time,
        "write_time": write_time,
        "path": str(path),
    }


def render_node(config: RunConfig, node: NodeContext) -> Tuple[Dict[str, float], List[Dict[str, Any]]]:
    """Render and write every block owned by ``node``.

    All validation happens before the first tile is written: the geometry,
    the node count, the zoom level, the algorithm, the color mode and the
    image format.
    """
    geometry = config.geometry
    assignment = partition(geometry, node.rank, node.size)
    zoom = zoom_level(geometry)
    extension = tile_extension(config.image_format)
    renderer = select_renderer(config.algorithm)
    params = RenderParams.from_config(config)
    is_rgb(params.color_mode)

    _rank_log(
        node.rank,
        f"Dividing the ({geometry.width}x{geometry.height}) image in {geometry.total_blocks} "
        f"blocks of ({geometry.block_width}x{geometry.block_height}).",
    )
    _rank_log(node.rank, f"Node {node.rank}, {node.size} total nodes.")
    _rank_log(
        node.rank,
        f"Taking care of blocks {assignment.first_block} to {assignment.last_block} "
        f"({len(assignment)} blocks assigned).",
    )

    bounds = assignment_bounds(assignment, geometry, config.window)
    for block, block_bounds in zip(assignment, bounds):
        _rank_log(
            node.rank,
            f"Task for block {block} : minR {block_bounds.min_r:f}, maxR {block_bounds.max_r:f}, "
            f"minI {block_bounds.min_i:f}, maxI {block_bounds.max_i:f}.",
        )

    output_dir = Path(config.output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise EncodingError(f"Cannot create output directory {output_dir}: {exc}", output_dir) from exc

    stats = _init_rank_stats()
    records: List[Dict[str, Any]] = []

    for task, (block, block_bounds) in enumerate(zip(assignment, bounds)):
        comp_start = time.perf_counter()
        pixels = render_block(block_bounds, params, renderer)
        comp_time = time.perf_counter() - comp_start

        tile = address_of(block, geometry)
        write_start = time.perf_counter()
        path = write_tile(pixels, tile, output_dir, extension)
        write_time = time.perf_counter() - write_start
        del pixels

        _rank_log(
            node.rank,
            f"Task {task} ({tile.row},{tile.column}) done with success on {node.hostname}. "
            f"[{comp_time:.4f}s compute, {write_time:.4f}s write]",
        )
        stats["comp"] += comp_time
        stats["write"] += write_time
        stats["tiles"] += 1
        records.append(
            _tile_record(node, block, tile.row, tile.column, zoom, block_bounds, comp_time, write_time, path)
        )

    return stats, records


def run_mpi_computation(config: RunConfig, node: NodeContext) -> TileReport:
    """Render this node's tiles and collect run statistics on rank 0.

    Only per-tile metadata travels to rank 0; pixels never leave the node
    that rendered them.
    """
    start_time = time.perf_counter()
    stats, records = render_node(config, node)
    total_time = time.perf_counter() - start_time

    if node.comm is not None:
        all_stats = node.comm.gather(stats, root=0)
        all_records = node.comm.gather(records, root=0)
    else:
        all_stats, all_records = [stats], [records]

    if node.rank != 0 and node.comm is not None:
        return TileReport({}, None)

    ranks = list(range(len(all_stats))) if node.comm is not None else [node.rank]
    timing = _aggregate_timing(ranks, all_stats, total_time)
    tiles = [record for rank_records in all_records for record in rank_records]
    return TileReport(timing, tiles or None)


def _aggregate_timing(ranks: List[int], all_stats: List[Dict], total_time: float) -> Dict:
    """Aggregate wall-clock timing plus per-rank statistics."""
    rank_stats: List[Dict[str, float]] = []
    comp_total = 0.0
    write_total = 0.0
    total_tiles = 0

    for rank, stats in zip(ranks, all_stats):
        comp = float(stats.get("comp", 0.0))
        write = float(stats.get("write", 0.0))
        tiles = int(stats.get("tiles", 0))

        rank_stats.append(
            {
                "rank": int(rank),
                "comp_time": comp,
                "write_time": write,
                "tiles": tiles,
            }
        )

        comp_total += comp
        write_total += write
        total_tiles += tiles

    return {
        "wall_time": float(total_time),
        "comp_total": comp_total,
        "write_total": write_total,
        "total_tiles": total_tiles,
        "rank_stats": rank_stats,
    }
