"""Structured results returned from a node run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class TileReport:
    """Container for outputs produced by ``run_mpi_computation``."""

    timing: Dict[str, Any]
    tiles: Optional[List[Dict[str, Any]]]

    @property
    def tile_count(self) -> int:
        return len(self.tiles) if self.tiles else 0

    def copy_tiles(self) -> Optional[List[Dict[str, Any]]]:
        if self.tiles is None:
            return None
        return [record.copy() for record in self.tiles]
