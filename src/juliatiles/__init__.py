"""Julia tiles - block-partitioned Julia set rendering with MLflow tracking."""

__version__ = "1.0.0"

# Core geometry, kernels and config - lightweight, imported by every node
from .colors import colorize
from .config import ImageGeometry, PlaneWindow, RunConfig, default_run_config
from .errors import ConfigurationError, EncodingError, JuliaTilesError, ResourceError
from .escape import iterate
from .partition import BlockAssignment, BlockBounds, block_bounds, partition
from .render import RenderParams, render_block, select_renderer
from .report import TileReport
from .tiles import TileIdentity, address_of, zoom_level


# Conditional imports - only loaded when needed
def __getattr__(name):
    """Lazy loading of heavy modules."""
    if name == "run_mpi_computation":
        from .mpi import run_mpi_computation

        return run_mpi_computation
    elif name == "write_tile":
        from .encoding import write_tile

        return write_tile
    elif name == "load_sweep_configs":
        from .config import load_sweep_configs

        return load_sweep_configs
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ImageGeometry",
    "PlaneWindow",
    "RunConfig",
    "default_run_config",
    "JuliaTilesError",
    "ConfigurationError",
    "ResourceError",
    "EncodingError",
    "iterate",
    "colorize",
    "BlockAssignment",
    "BlockBounds",
    "partition",
    "block_bounds",
    "RenderParams",
    "render_block",
    "select_renderer",
    "TileIdentity",
    "address_of",
    "zoom_level",
    "TileReport",
    "run_mpi_computation",
    "write_tile",
    "load_sweep_configs",
]
