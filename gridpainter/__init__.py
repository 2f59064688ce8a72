"""gridpainter — paint a semantic grid over floor-plan images and export navigation data."""

from .coords import CoordinateSpace
from .errors import GridPainterError, SnapshotError
from .floors import Floor, FloorStore, PaintMode
from .state import AppState

__version__ = "0.1.0"

__all__ = [
    "AppState", "CoordinateSpace", "Floor", "FloorStore", "GridPainterError",
    "PaintMode", "SnapshotError",
]
