"""
render.py — OpenCV overlay of one floor: background, grid, painted cells,
labels, walkway connections and sharp-corner markers.

Everything is drawn in screen pixels through the floor's CoordinateSpace, so
pan and zoom only change where things land on screen, never the data.
"""
import logging

import cv2
import numpy as np

from . import connectivity
from .constants import DEFAULT_CANVAS_H, DEFAULT_CANVAS_W

log = logging.getLogger(__name__)

# ---------------- Appearance constants ----------------
EMPTY_BG        = 50                # grey level when no background image
GRID_COLOR      = (102, 102, 102)
GRID_ALPHA      = 0.7
CELL_ALPHA      = 0.5
DARK_TEXT       = (55, 41, 31)      # "#1f2937" in BGR
LIGHT_TEXT      = (255, 255, 255)
PRIMARY_COLOR   = (0, 215, 255)
PRIMARY_THICK   = 2
SECONDARY_COLOR = (0, 165, 255)
SECONDARY_THICK = 1
CORNER_COLOR    = (0, 0, 255)
CORNER_RADIUS   = 3
# -----------------------------------------------------


def hex_to_bgr(color: str):
    """'#rrggbb' -> (b, g, r) for OpenCV."""
    c = color.strip().lstrip("#")
    if len(c) != 6:
        raise ValueError(f"not a #rrggbb colour: {color!r}")
    r, g, b = int(c[0:2], 16), int(c[2:4], 16), int(c[4:6], 16)
    return b, g, r


def contrast_color(color: str):
    """Dark text on bright cells, white text on dark ones (perceived brightness > 128)."""
    b, g, r = hex_to_bgr(color)
    brightness = (r * 299 + g * 587 + b * 114) / 1000
    return DARK_TEXT if brightness > 128 else LIGHT_TEXT


def load_background(path):
    img = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if img is None:
        log.warning("Could not load background image %s", path)
    return img


def _draw_background(frame, coords, background):
    # world origin of the image is (0, 0); the view transform places it
    z = coords.zoom
    ox, oy = coords.canvas_offset
    M = np.float32([[z, 0, ox], [0, z, oy]])
    h, w = frame.shape[:2]
    return cv2.warpAffine(background, M, (w, h), dst=frame,
                          flags=cv2.INTER_LINEAR, borderMode=cv2.BORDER_TRANSPARENT)


def _draw_grid(frame, coords):
    h, w = frame.shape[:2]
    xs, ys = coords.grid_line_positions(w, h)
    lines = frame.copy()
    for x in xs:
        cv2.line(lines, (int(round(x)), 0), (int(round(x)), h), GRID_COLOR, 1)
    for y in ys:
        cv2.line(lines, (0, int(round(y))), (w, int(round(y))), GRID_COLOR, 1)
    return cv2.addWeighted(lines, GRID_ALPHA, frame, 1 - GRID_ALPHA, 0, dst=frame)


def _cell_rect(coords, row, col):
    x, y = coords.cell_to_pixel_origin(row, col)
    size = coords.grid_size * coords.zoom
    return (int(round(x)), int(round(y))), (int(round(x + size)) - 1, int(round(y + size)) - 1)


def _center(coords, cell):
    x, y = coords.cell_to_pixel_center(*cell)
    return int(round(x)), int(round(y))


def render_frame(state, size=(DEFAULT_CANVAS_W, DEFAULT_CANVAS_H), background=None):
    """Draw the current floor of ``state`` into a new BGR image of ``size`` (w, h)."""
    w, h = size
    coords = state.coords
    store = state.floors
    frame = np.full((h, w, 3), EMPTY_BG, dtype=np.uint8)

    if background is not None and state.background_visible:
        frame = _draw_background(frame, coords, background)
    if state.grid_visible:
        frame = _draw_grid(frame, coords)

    visible = [c for c in store.cells if coords.is_cell_visible(*c, w, h)]
    if visible:
        overlay = frame.copy()
        for cell in visible:
            p0, p1 = _cell_rect(coords, *cell)
            cv2.rectangle(overlay, p0, p1, hex_to_bgr(store.cells[cell]), -1)
        frame = cv2.addWeighted(overlay, CELL_ALPHA, frame, 1 - CELL_ALPHA, 0, dst=frame)

    if state.connections_visible:
        for a, b, kind in connectivity.connection_segments(store.cells):
            if not (coords.is_cell_visible(*a, w, h) or coords.is_cell_visible(*b, w, h)):
                continue
            if kind == "primary":
                cv2.line(frame, _center(coords, a), _center(coords, b),
                         PRIMARY_COLOR, PRIMARY_THICK, cv2.LINE_AA)
            else:
                cv2.line(frame, _center(coords, a), _center(coords, b),
                         SECONDARY_COLOR, SECONDARY_THICK, cv2.LINE_AA)
        for cell in connectivity.sharp_corners(store.cells):
            if coords.is_cell_visible(*cell, w, h):
                cv2.circle(frame, _center(coords, cell), CORNER_RADIUS, CORNER_COLOR, -1)

    if state.labels_visible:
        scale = state.label_size / 30.0
        for cell, labels in store.labels.items():
            if not coords.is_cell_visible(*cell, w, h):
                continue
            text = ", ".join(labels)
            color = store.cells.get(cell)
            fg = contrast_color(color) if color else LIGHT_TEXT
            shadow = (0, 0, 0) if fg == LIGHT_TEXT else (255, 255, 255)
            (tw, th), _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, scale, 1)
            cx, cy = _center(coords, cell)
            org = (cx - tw // 2, cy + th // 2)
            cv2.putText(frame, text, (org[0] + 1, org[1] + 1),
                        cv2.FONT_HERSHEY_SIMPLEX, scale, shadow, 1, cv2.LINE_AA)
            cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, fg, 1, cv2.LINE_AA)

    return frame


def save_frame(path, frame) -> bool:
    ok = cv2.imwrite(str(path), frame)
    if not ok:
        log.error("Could not write %s", path)
    return ok
