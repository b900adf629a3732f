"""Exception classes raised while partitioning, rendering and writing tiles."""

from __future__ import annotations

from typing import Any, Optional

__all__ = ["JuliaTilesError", "ConfigurationError", "ResourceError", "EncodingError"]


class JuliaTilesError(Exception):
    """Base class for every error raised by the tile renderer.

    Never raised directly. The message and the object whose handling failed
    (a geometry, a tile identity, a path...) are kept on the instance.
    """

    def __init__(self, msg: str, obj: Optional[Any] = None) -> None:
        super().__init__(msg)
        self.message = msg
        self._obj = obj

    def get_object(self) -> Optional[Any]:
        return self._obj


class ConfigurationError(JuliaTilesError, ValueError):
    """Invalid run configuration, detected before any tile is rendered."""


class ResourceError(JuliaTilesError, MemoryError):
    """A pixel buffer could not be allocated."""


class EncodingError(JuliaTilesError, OSError):
    """A finished tile could not be written to disk."""
