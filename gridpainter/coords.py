"""
coords.py — pixel <-> world <-> grid-cell mapping.

    world_x = (px - canvas_offset.x) / zoom
    col     = floor((world_x - grid_offset.x) / grid_size)

and the same along y for rows.  Pan touches ``canvas_offset`` only, zoom
touches ``zoom`` only, so a cell keeps its world origin under any view change.
"""
import logging
import math
import sys
from typing import Tuple

import numpy as np

from .constants import (
    DEFAULT_CANVAS_H, DEFAULT_CANVAS_W, DEFAULT_GRID_SIZE, DEFAULT_ZOOM,
    MAX_GRID_SIZE, MAX_ZOOM, MIN_GRID_SIZE, MIN_ZOOM, ZOOM_STEP,
)

log = logging.getLogger(__name__)

CellKey = Tuple[int, int]

# rounding slack, in ulps of the operands, allowed when flooring onto the grid
SNAP_ULPS = 16


def cell_key(row: int, col: int) -> str:
    return f"{row},{col}"


def parse_cell_key(text: str) -> CellKey:
    row, col = text.split(",")
    return int(row), int(col)


def _floor_snapped(v: float, magnitude: float) -> int:
    """floor(v), except that a value within float rounding of an integer is that integer.

    ``magnitude`` is the size, in cells, of the largest operand that went into
    ``v``; the tolerance is a few ulps of it.  A point left of a grid line by
    more than rounding noise still floors down; a point closer than that is
    read as lying on the line, which is what lets a cell origin mapped to
    pixels and back land in the same cell at any zoom.
    """
    r = round(v)
    tol = SNAP_ULPS * sys.float_info.epsilon * (magnitude + abs(v))
    if abs(v - r) <= tol:
        return int(r)
    return math.floor(v)


def fit_to_bounds(img_w, img_h, max_w=DEFAULT_CANVAS_W, max_h=DEFAULT_CANVAS_H):
    """Display size of an ``img_w`` x ``img_h`` image scaled to fit the box."""
    if img_w <= 0 or img_h <= 0:
        raise ValueError(f"bad image size {img_w}x{img_h}")
    scale = min(max_w / img_w, max_h / img_h)
    return img_w * scale, img_h * scale


class CoordinateSpace:
    def __init__(self, grid_size=DEFAULT_GRID_SIZE, grid_offset=(0.0, 0.0),
                 canvas_offset=(0.0, 0.0), zoom=DEFAULT_ZOOM,
                 min_zoom=MIN_ZOOM, max_zoom=MAX_ZOOM):
        if grid_size <= 0:
            raise ValueError(f"grid_size must be >= {MIN_GRID_SIZE}, got {grid_size}")
        self.grid_size = int(min(max(grid_size, MIN_GRID_SIZE), MAX_GRID_SIZE))
        self.grid_offset = (float(grid_offset[0]), float(grid_offset[1]))
        self.canvas_offset = (float(canvas_offset[0]), float(canvas_offset[1]))
        self.min_zoom = min_zoom
        self.max_zoom = max_zoom
        self.zoom = self._clamp_zoom(zoom)

    def __repr__(self):
        return (f"CoordinateSpace(grid_size={self.grid_size}, grid_offset={self.grid_offset}, "
                f"canvas_offset={self.canvas_offset}, zoom={self.zoom})")

    def _clamp_zoom(self, z):
        return float(min(max(z, self.min_zoom), self.max_zoom))

    # ---------------- conversions ----------------
    def pixel_to_world(self, px, py):
        return ((px - self.canvas_offset[0]) / self.zoom,
                (py - self.canvas_offset[1]) / self.zoom)

    def world_to_pixel(self, wx, wy):
        return (wx * self.zoom + self.canvas_offset[0],
                wy * self.zoom + self.canvas_offset[1])

    def world_to_cell(self, wx, wy, slack=(0.0, 0.0)) -> CellKey:
        """Cell containing a world point.

        ``slack`` is the world-unit magnitude of whatever produced ``wx, wy``
        (see ``pixel_to_cell``) and only widens the rounding tolerance.
        """
        gs = self.grid_size
        gx, gy = self.grid_offset
        col = _floor_snapped((wx - gx) / gs, (abs(wx) + abs(gx) + slack[0]) / gs)
        row = _floor_snapped((wy - gy) / gs, (abs(wy) + abs(gy) + slack[1]) / gs)
        return row, col

    def pixel_to_cell(self, px, py) -> CellKey:
        ox, oy = self.canvas_offset
        slack = ((abs(px) + abs(ox)) / self.zoom, (abs(py) + abs(oy)) / self.zoom)
        return self.world_to_cell(*self.pixel_to_world(px, py), slack=slack)

    def cell_to_world_origin(self, row, col):
        """Top-left corner of a cell in world units."""
        return (col * self.grid_size + self.grid_offset[0],
                row * self.grid_size + self.grid_offset[1])

    def cell_to_pixel_origin(self, row, col):
        return self.world_to_pixel(*self.cell_to_world_origin(row, col))

    def cell_to_pixel_center(self, row, col):
        x, y = self.cell_to_world_origin(row, col)
        half = self.grid_size / 2
        return self.world_to_pixel(x + half, y + half)

    # ---------------- view changes ----------------
    def pan(self, dx, dy):
        self.canvas_offset = (self.canvas_offset[0] + dx, self.canvas_offset[1] + dy)

    def set_zoom(self, z):
        self.zoom = self._clamp_zoom(z)
        return self.zoom

    def zoom_in(self):
        return self.set_zoom(round(self.zoom + ZOOM_STEP, 6))

    def zoom_out(self):
        return self.set_zoom(round(self.zoom - ZOOM_STEP, 6))

    def reset_view(self):
        self.zoom = self._clamp_zoom(DEFAULT_ZOOM)
        self.canvas_offset = (0.0, 0.0)

    def set_grid_size(self, size) -> bool:
        if size is None or size <= 0:
            log.warning("Rejected grid size %r (must be >= %d)", size, MIN_GRID_SIZE)
            return False
        self.grid_size = int(min(max(size, MIN_GRID_SIZE), MAX_GRID_SIZE))
        return True

    def set_grid_offset(self, x, y):
        self.grid_offset = (float(x), float(y))

    def nudge_grid(self, dx, dy):
        self.grid_offset = (self.grid_offset[0] + dx, self.grid_offset[1] + dy)

    # ---------------- viewport helpers ----------------
    def visible_cell_range(self, width, height):
        """Inclusive (row0, row1, col0, col1) of cells overlapping the pixel viewport."""
        row0, col0 = self.pixel_to_cell(0, 0)
        row1, col1 = self.pixel_to_cell(width, height)
        return row0, row1, col0, col1

    def is_cell_visible(self, row, col, width, height):
        x, y = self.cell_to_pixel_origin(row, col)
        size = self.grid_size * self.zoom
        return x + size >= 0 and x <= width and y + size >= 0 and y <= height

    def grid_line_positions(self, width, height):
        """On-screen x positions of vertical lines and y positions of horizontal lines."""
        row0, row1, col0, col1 = self.visible_cell_range(width, height)
        step = self.grid_size * self.zoom
        ox, oy = self.cell_to_pixel_origin(row0, col0)
        xs = ox + step * np.arange(col1 - col0 + 2)
        ys = oy + step * np.arange(row1 - row0 + 2)
        return xs[(xs >= 0) & (xs <= width)], ys[(ys >= 0) & (ys <= height)]

    def to_dict(self):
        return {
            "gridSize": self.grid_size,
            "gridOffset": {"x": self.grid_offset[0], "y": self.grid_offset[1]},
            "canvasOffset": {"x": self.canvas_offset[0], "y": self.canvas_offset[1]},
            "zoom": self.zoom,
        }
