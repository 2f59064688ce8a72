#!/usr/bin/env python3
"""
editor.py — interactive multi-floor grid painter.

Features:
  • Left click paints the cell under the cursor; clicking a cell that already
    has the tool colour erases it.  Left drag paints (or erases) every cell the
    cursor crosses, decided by the first cell of the drag.
  • Middle drag pans the view; ',' / '.' zoom out / in.
  • Right click edits the labels of a cell (and its category on POI cells).
  • Each floor keeps its own cells, labels, presets and background image.

Controls:
  1-5: Walkway / POI / Elevator / Stairs / Escalator tool colour
  6-9, 0: plain palette colours
  [ / ]: previous / next floor
  N: new floor          D: delete current floor     R: rename current floor
  U: upload background  P: preset labels for the tool colour
  + / -: grid size      I/J/K/L: nudge grid up/left/down/right
  g: grid  l: labels  c: connections  b: background (toggles)
  Z: reset view         W: reset grid (clears the floor)
  S: save snapshot      X: export CSVs
  Q: quit
"""
import pathlib

import cv2

from . import export, render, snapshot
from .constants import NAVIGATION_COLORS, PALETTE_COLORS, POI, category_of, lookup_color
from .errors import SnapshotError
from .floors import PaintMode, floor_key
from .state import AppState

# ---------------- Appearance constants ----------------
WIN_NAME          = "gridpainter"
WIN_W, WIN_H      = 1280, 800
STATUS_COLOR      = (255, 255, 255)
NUDGE_STEP        = 1
GRID_STEP         = 1
# -----------------------------------------------------

COLOR_KEYS = {str(i + 1): c.key for i, c in enumerate(NAVIGATION_COLORS)}
COLOR_KEYS.update({k: c.key for k, c in zip("67890", PALETTE_COLORS)})

NUDGES = {"I": (0, -NUDGE_STEP), "J": (-NUDGE_STEP, 0),
          "K": (0, NUDGE_STEP), "L": (NUDGE_STEP, 0)}


class TkDialogs:
    """Modal prompts for the editor, one throwaway Tk root per prompt."""

    def _root(self):
        import tkinter as tk
        root = tk.Tk()
        root.withdraw()
        return root

    def ask_string(self, title, prompt, initial=""):
        from tkinter import simpledialog
        root = self._root()
        try:
            return simpledialog.askstring(title, prompt, initialvalue=initial, parent=root)
        finally:
            root.destroy()

    def ask_integer(self, title, prompt, initial=0):
        from tkinter import simpledialog
        root = self._root()
        try:
            return simpledialog.askinteger(title, prompt, initialvalue=initial, parent=root)
        finally:
            root.destroy()

    def ask_yes_no(self, title, prompt):
        from tkinter import messagebox
        root = self._root()
        try:
            return messagebox.askyesno(title, prompt, parent=root)
        finally:
            root.destroy()

    def ask_open_file(self, title):
        from tkinter import filedialog
        root = self._root()
        try:
            return filedialog.askopenfilename(
                title=title,
                filetypes=[("Image files", "*.png *.jpg *.jpeg *.bmp *.tif *.tiff")],
                parent=root,
            )
        finally:
            root.destroy()


class GridEditor:
    def __init__(self, state=None, snapshot_path=None, export_dir="export",
                 dialogs=None, size=(WIN_W, WIN_H)):
        self.state = state or AppState()
        self.snapshot_path = pathlib.Path(snapshot_path) if snapshot_path else None
        self.export_dir = pathlib.Path(export_dir)
        self.dialogs = dialogs or TkDialogs()
        self.size = size
        self.backgrounds = {}      # floor key -> BGR image
        self.last_cell = None      # last cell touched by the current drag
        self.pan_start = None      # (x, y, canvas_offset) while middle-dragging

    # ---------------- snapshot / export ----------------
    def load(self) -> bool:
        if not self.snapshot_path or not self.snapshot_path.exists():
            return False
        try:
            snapshot.load_snapshot(self.state, self.snapshot_path.read_text(encoding="utf-8"))
        except SnapshotError as e:
            print(f"Error reading snapshot: {e}")
            return False
        print(f"Loaded {self.snapshot_path}")
        return True

    def save(self) -> bool:
        if not self.snapshot_path:
            print("No snapshot path given; nothing saved")
            return False
        self.snapshot_path.write_text(snapshot.dump_snapshot(self.state), encoding="utf-8")
        print(f"Saved {self.snapshot_path}")
        return True

    def export(self):
        written = export.write_exports(self.state.floors, self.export_dir, scope="all")
        for path in written.values():
            print(f"Wrote {path}")
        return written

    def background(self):
        floor = self.state.floors.current
        if floor is None or not floor.image:
            return None
        if floor.key not in self.backgrounds:
            self.backgrounds[floor.key] = render.load_background(floor.image)
        return self.backgrounds[floor.key]

    # ---------------- drawing ----------------
    def frame(self):
        canvas = render.render_frame(self.state, self.size, self.background())
        floors = self.state.floors
        name = floors.current_key or "-"
        tool = lookup_color(self.state.paint_color).name
        status = f"Floor: {name}  Tool: {tool}  Zoom: {self.state.coords.zoom:.1f}"
        cv2.putText(canvas, status, (10, 20), cv2.FONT_HERSHEY_SIMPLEX, 0.6, STATUS_COLOR, 2)
        return canvas

    # ---------------- mouse ----------------
    def on_mouse(self, event, x, y, flags, param=None):
        state = self.state
        if event == cv2.EVENT_LBUTTONDOWN:
            cell, _ = state.paint_at_pixel(x, y, PaintMode.STROKE_START)
            self.last_cell = cell

        elif event == cv2.EVENT_MOUSEMOVE and self.pan_start is not None:
            px, py, (ox, oy) = self.pan_start
            state.coords.canvas_offset = (ox + x - px, oy + y - py)

        elif event == cv2.EVENT_MOUSEMOVE and (flags & cv2.EVENT_FLAG_LBUTTON) \
                and self.last_cell is not None:
            cell = state.coords.pixel_to_cell(x, y)
            if cell != self.last_cell:
                state.paint_at_pixel(x, y, PaintMode.STROKE_CONTINUE)
                self.last_cell = cell

        elif event == cv2.EVENT_LBUTTONUP:
            state.floors.end_stroke()
            self.last_cell = None

        elif event == cv2.EVENT_MBUTTONDOWN:
            self.pan_start = (x, y, state.coords.canvas_offset)

        elif event == cv2.EVENT_MBUTTONUP:
            self.pan_start = None

        elif event == cv2.EVENT_RBUTTONDOWN:
            self.edit_cell(*state.coords.pixel_to_cell(x, y))

    def edit_cell(self, row, col):
        floors = self.state.floors
        if floors.current_key is None:
            print("Create a floor first (N)")
            return
        text = self.dialogs.ask_string(
            "Labels", f"Labels for cell ({row}, {col}), comma separated:",
            ", ".join(floors.labels_at(row, col)))
        if text is not None:
            floors.set_labels(row, col, text)
        if category_of(floors.color_at(row, col)) == POI:
            cat = self.dialogs.ask_string(
                "POI category", "Category (shop, cafe, restroom, ...):",
                floors.poi_category_at(row, col) or "")
            if cat is not None and not floors.set_poi_category(row, col, cat):
                print(f"Unknown POI category: {cat}")

    # ---------------- floors ----------------
    def step_floor(self, delta):
        floors = self.state.floors
        keys = [f.key for f in floors.floors_sorted()]
        if not keys:
            return
        i = keys.index(floors.current_key) if floors.current_key in keys else 0
        i = max(0, min(len(keys) - 1, i + delta))
        floors.switch_floor(keys[i])
        self.last_cell = None

    def new_floor(self):
        name = self.dialogs.ask_string("New floor", "Floor name:")
        if not name:
            return False
        number = self.dialogs.ask_integer("New floor", "Floor number:", 0)
        if number is None:
            return False
        floors = self.state.floors
        if not floors.create_floor(name, number):
            print(f"Could not create floor {number}_{name}")
            return False
        floors.switch_floor(floor_key(number, name.strip()))
        return True

    def rename_floor(self):
        floors = self.state.floors
        cur = floors.current
        if cur is None:
            return False
        name = self.dialogs.ask_string("Rename floor", "Floor name:", cur.name)
        if not name:
            return False
        number = self.dialogs.ask_integer("Rename floor", "Floor number:", cur.number)
        if number is None:
            return False
        old_key = cur.key
        ok = floors.rename_floor(old_key, name, number)
        if ok and old_key in self.backgrounds:
            self.backgrounds[floors.current_key] = self.backgrounds.pop(old_key)
        return ok

    def delete_floor(self):
        floors = self.state.floors
        key = floors.current_key
        if key is None:
            return False
        if not self.dialogs.ask_yes_no("Delete floor", f"Delete floor {key}?"):
            return False
        self.backgrounds.pop(key, None)
        return floors.delete_floor(key)

    def upload_image(self):
        floors = self.state.floors
        if floors.current_key is None:
            print("Create a floor first (N)")
            return False
        path = self.dialogs.ask_open_file(f"Select image for floor {floors.current_key}")
        if not path:
            return False
        img = render.load_background(path)
        if img is None:
            print(f"Error: could not load image {path}")
            return False
        floors.set_floor_image(str(path))
        self.backgrounds[floors.current_key] = img
        print(f"Loaded image for floor {floors.current_key}: {path}")
        return True

    def edit_preset(self):
        floors = self.state.floors
        color = self.state.paint_color
        current = ", ".join(floors.presets.get(color, []))
        text = self.dialogs.ask_string(
            "Preset", f"Labels added on first paint with {lookup_color(color).name}:", current)
        if text is None:
            return False
        return floors.create_preset(color, text)

    # ---------------- keys ----------------
    def handle_key(self, k) -> bool:
        """Apply one key press; returns False when the editor should quit."""
        if k in (-1, 255):
            return True
        ch = chr(k)
        state = self.state
        coords = state.coords

        if ch == "Q":
            return False
        elif ch in COLOR_KEYS:
            state.set_paint_color(COLOR_KEYS[ch])
        elif ch == "[":
            self.step_floor(-1)
        elif ch == "]":
            self.step_floor(1)
        elif ch == ",":
            coords.zoom_out()
        elif ch == ".":
            coords.zoom_in()
        elif ch == "Z":
            coords.reset_view()
        elif ch == "+":
            coords.set_grid_size(coords.grid_size + GRID_STEP)
        elif ch == "-":
            coords.set_grid_size(coords.grid_size - GRID_STEP)
        elif ch in NUDGES:
            coords.nudge_grid(*NUDGES[ch])
        elif ch == "g":
            state.grid_visible = not state.grid_visible
        elif ch == "l":
            state.labels_visible = not state.labels_visible
        elif ch == "c":
            state.connections_visible = not state.connections_visible
        elif ch == "b":
            state.background_visible = not state.background_visible
        elif ch == "N":
            self.new_floor()
        elif ch == "R":
            self.rename_floor()
        elif ch == "D":
            self.delete_floor()
        elif ch == "U":
            self.upload_image()
        elif ch == "P":
            self.edit_preset()
        elif ch == "W":
            if self.dialogs.ask_yes_no("Reset grid", "Clear every cell on this floor?"):
                state.reset_grid()
        elif ch == "S":
            self.save()
        elif ch == "X":
            self.export()
        return True

    def run(self):
        self.load()
        cv2.namedWindow(WIN_NAME, cv2.WINDOW_NORMAL | cv2.WINDOW_KEEPRATIO)
        cv2.resizeWindow(WIN_NAME, *self.size)
        cv2.setMouseCallback(WIN_NAME, self.on_mouse)
        print(__doc__.split("Controls:", 1)[1])

        while True:
            cv2.imshow(WIN_NAME, self.frame())
            k = cv2.waitKey(20) & 0xFF
            if not self.handle_key(k):
                break
        cv2.destroyAllWindows()
