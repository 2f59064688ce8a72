"""
state.py — everything the editor would otherwise keep as globals:
the coordinate space, the floor store, the active tool colour and
the layer toggles.
"""
from dataclasses import dataclass, field

from .constants import (
    DEFAULT_LABEL_SIZE, MAX_LABEL_SIZE, MIN_LABEL_SIZE, WALKWAY_COLOR,
    is_hex_color, normalize_color,
)
from .coords import CoordinateSpace
from .floors import FloorStore, PaintMode


@dataclass
class AppState:
    coords: CoordinateSpace = field(default_factory=CoordinateSpace)
    floors: FloorStore = field(default_factory=FloorStore)
    paint_color: str = WALKWAY_COLOR
    grid_visible: bool = True
    labels_visible: bool = True
    background_visible: bool = True
    connections_visible: bool = True
    label_size: int = DEFAULT_LABEL_SIZE

    def set_paint_color(self, color: str) -> bool:
        if not is_hex_color(color):
            return False
        self.paint_color = normalize_color(color)
        return True

    def set_label_size(self, size: int) -> int:
        self.label_size = int(min(max(size, MIN_LABEL_SIZE), MAX_LABEL_SIZE))
        return self.label_size

    def paint_at_pixel(self, px, py, mode=PaintMode.CLICK):
        """Resolve a pointer position to a cell and paint/erase it with the tool colour."""
        row, col = self.coords.pixel_to_cell(px, py)
        return (row, col), self.floors.paint_cell(row, col, self.paint_color, mode)

    def reset_grid(self):
        """Zero the offsets, reset zoom and clear the current floor's cells."""
        self.coords.set_grid_offset(0, 0)
        self.coords.reset_view()
        self.floors.clear_all()

    def view_settings(self):
        return {
            **self.coords.to_dict(),
            "paintColor": self.paint_color,
            "gridVisible": self.grid_visible,
            "labelsVisible": self.labels_visible,
            "backgroundVisible": self.background_visible,
            "connectionsVisible": self.connections_visible,
            "labelSize": self.label_size,
        }
