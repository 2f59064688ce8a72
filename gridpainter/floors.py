"""
floors.py — multi-floor cell store with paint / erase / label rules.

Each floor owns its own paint map, label map, colour presets and POI
categories.  The current floor's maps are held as a separate working set;
switching floors always flushes the working set back into the old floor
before loading the new one, so edits never leak across floors.

Paint strokes follow a small state machine:

    idle --stroke_start--> active(paint|erase) --end_stroke--> idle

The paint/erase decision is taken once when the stroke starts (erase when the
start cell already has the stroke colour) and replayed for every cell the
drag touches.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .constants import (
    CONNECTION_CATEGORIES, MAX_LABEL_LENGTH, POI, POI_CATEGORIES, WALKWAY,
    category_of, is_hex_color, lookup_color, normalize_color,
)

log = logging.getLogger(__name__)

CellKey = Tuple[int, int]

PAINT = "paint"
ERASE = "erase"


class PaintMode(str, Enum):
    CLICK = "click"
    STROKE_START = "stroke_start"
    STROKE_CONTINUE = "stroke_continue"


@dataclass
class StrokeState:
    action: Optional[str] = None

    @property
    def active(self) -> bool:
        return self.action is not None

    def begin(self, action: str):
        self.action = action

    def end(self):
        self.action = None


def floor_key(number: int, name: str) -> str:
    return f"{number}_{name}"


def normalize_labels(labels: Union[str, Iterable[str], None]) -> List[str]:
    """Strip, drop empties, truncate and de-duplicate (order kept).

    A plain string is split on commas.
    """
    if labels is None:
        return []
    if isinstance(labels, str):
        labels = labels.split(",")
    out: List[str] = []
    for lbl in labels:
        lbl = str(lbl).strip()[:MAX_LABEL_LENGTH]
        if lbl and lbl not in out:
            out.append(lbl)
    return out


@dataclass
class Floor:
    name: str
    number: int
    cells: Dict[CellKey, str] = field(default_factory=dict)
    labels: Dict[CellKey, List[str]] = field(default_factory=dict)
    presets: Dict[str, List[str]] = field(default_factory=dict)
    poi_categories: Dict[CellKey, str] = field(default_factory=dict)
    image: Optional[str] = None

    @property
    def key(self) -> str:
        return floor_key(self.number, self.name)

    @property
    def sort_key(self):
        return self.number, self.name

    def copy(self) -> "Floor":
        return Floor(
            name=self.name,
            number=self.number,
            cells=dict(self.cells),
            labels={k: list(v) for k, v in self.labels.items()},
            presets={k: list(v) for k, v in self.presets.items()},
            poi_categories=dict(self.poi_categories),
            image=self.image,
        )


class FloorStore:
    def __init__(self):
        self.floors: Dict[str, Floor] = {}
        self.current_key: Optional[str] = None
        self.stroke = StrokeState()
        # working set of the current floor
        self.cells: Dict[CellKey, str] = {}
        self.labels: Dict[CellKey, List[str]] = {}
        self.presets: Dict[str, List[str]] = {}
        self.poi_categories: Dict[CellKey, str] = {}

    # ---------------- working-set protocol ----------------
    def flush(self):
        """Write the working maps back into the current floor entry."""
        if self.current_key is None:
            return
        floor = self.floors[self.current_key]
        floor.cells = dict(self.cells)
        floor.labels = {k: list(v) for k, v in self.labels.items()}
        floor.presets = {k: list(v) for k, v in self.presets.items()}
        floor.poi_categories = dict(self.poi_categories)

    def _load(self, key: Optional[str]):
        self.current_key = key
        self.stroke.end()
        if key is None:
            self.cells, self.labels, self.presets, self.poi_categories = {}, {}, {}, {}
            return
        floor = self.floors[key]
        self.cells = dict(floor.cells)
        self.labels = {k: list(v) for k, v in floor.labels.items()}
        self.presets = {k: list(v) for k, v in floor.presets.items()}
        self.poi_categories = dict(floor.poi_categories)

    @property
    def current(self) -> Optional[Floor]:
        if self.current_key is None:
            return None
        self.flush()
        return self.floors[self.current_key]

    def get_floor(self, key: str) -> Optional[Floor]:
        self.flush()
        return self.floors.get(key)

    def floors_sorted(self) -> List[Floor]:
        self.flush()
        return sorted(self.floors.values(), key=lambda f: f.sort_key)

    def install(self, floors: Dict[str, Floor], current_key: Optional[str]):
        """Replace every floor at once (snapshot import)."""
        self.floors = dict(floors)
        if current_key not in self.floors:
            ordered = sorted(self.floors.values(), key=lambda f: f.sort_key)
            current_key = ordered[0].key if ordered else None
        self._load(current_key)

    # ---------------- floor operations ----------------
    def create_floor(self, name: str, number: int) -> bool:
        name = (name or "").strip()
        if not name:
            log.warning("Rejected floor with empty name")
            return False
        number = int(number)
        key = floor_key(number, name)
        if key in self.floors:
            log.warning("Floor %s already exists", key)
            return False
        self.floors[key] = Floor(name=name, number=number)
        log.info("Created floor %s", key)
        if self.current_key is None:
            self._load(key)
        return True

    def switch_floor(self, key: str) -> bool:
        if key not in self.floors:
            log.warning("No floor %s to switch to", key)
            return False
        if key == self.current_key:
            return True
        self.flush()
        self._load(key)
        log.debug("Switched to floor %s", key)
        return True

    def delete_floor(self, key: str) -> bool:
        if key not in self.floors:
            log.warning("No floor %s to delete", key)
            return False
        del self.floors[key]
        log.info("Deleted floor %s", key)
        if key == self.current_key:
            remaining = sorted(self.floors.values(), key=lambda f: f.sort_key)
            self._load(remaining[0].key if remaining else None)
        return True

    def rename_floor(self, old_key: str, new_name: str, new_number: int) -> bool:
        if old_key not in self.floors:
            log.warning("No floor %s to rename", old_key)
            return False
        new_name = (new_name or "").strip()
        if not new_name:
            log.warning("Rejected rename of %s to an empty name", old_key)
            return False
        new_number = int(new_number)
        new_key = floor_key(new_number, new_name)
        if new_key != old_key and new_key in self.floors:
            log.warning("Cannot rename %s: %s already exists", old_key, new_key)
            return False
        was_current = old_key == self.current_key
        if was_current:
            self.flush()
        floor = self.floors.pop(old_key)
        floor.name, floor.number = new_name, new_number
        self.floors[new_key] = floor
        if was_current:
            self.current_key = new_key
        log.info("Renamed floor %s -> %s", old_key, new_key)
        return True

    def set_floor_image(self, image: Optional[str], key: Optional[str] = None) -> bool:
        key = key or self.current_key
        if key not in self.floors:
            return False
        self.floors[key].image = image
        return True

    # ---------------- cell queries ----------------
    def color_at(self, row: int, col: int) -> Optional[str]:
        return self.cells.get((row, col))

    def labels_at(self, row: int, col: int) -> List[str]:
        return list(self.labels.get((row, col), []))

    def poi_category_at(self, row: int, col: int) -> Optional[str]:
        return self.poi_categories.get((row, col))

    # ---------------- cell mutations ----------------
    def _require_floor(self, what: str) -> bool:
        if self.current_key is None:
            log.warning("Cannot %s: no current floor", what)
            return False
        return True

    def _decide(self, cell: CellKey, color: str) -> str:
        return ERASE if self.cells.get(cell) == color else PAINT

    def paint_cell(self, row: int, col: int, color: str,
                   mode: Union[PaintMode, str] = PaintMode.CLICK) -> Optional[str]:
        """Paint or erase one cell; returns the action taken, None when rejected."""
        if not self._require_floor("paint"):
            return None
        color = normalize_color(color)
        if not is_hex_color(color):
            log.warning("Rejected colour %r (expected #rrggbb)", color)
            return None
        cell = (row, col)
        mode = PaintMode(mode)
        if mode is PaintMode.CLICK:
            action = self._decide(cell, color)
        elif mode is PaintMode.STROKE_START or not self.stroke.active:
            action = self._decide(cell, color)
            self.stroke.begin(action)
        else:
            action = self.stroke.action

        if action == ERASE:
            self.erase_cell(row, col)
        else:
            self._paint(cell, color)
        log.debug("%s %s on %s", action, cell, self.current_key)
        return action

    def end_stroke(self):
        self.stroke.end()

    def _paint(self, cell: CellKey, color: str):
        entry = lookup_color(color)
        first_paint = cell not in self.cells
        self.cells[cell] = color
        if entry.fixed_label == "":
            self.labels.pop(cell, None)
        elif first_paint and self.presets.get(color):
            merged = list(self.labels.get(cell, []))
            for lbl in self.presets[color]:
                if lbl not in merged:
                    merged.append(lbl)
            self.labels[cell] = merged
        if entry.category != POI:
            self.poi_categories.pop(cell, None)

    def erase_cell(self, row: int, col: int) -> bool:
        cell = (row, col)
        changed = cell in self.cells or cell in self.labels or cell in self.poi_categories
        self.cells.pop(cell, None)
        self.labels.pop(cell, None)
        self.poi_categories.pop(cell, None)
        return changed

    def set_labels(self, row: int, col: int, labels) -> bool:
        if not self._require_floor("label"):
            return False
        cell = (row, col)
        color = self.cells.get(cell)
        if color is not None and lookup_color(color).fixed_label == "":
            log.warning("%s cells carry no labels", lookup_color(color).name)
            return False
        labels = normalize_labels(labels)
        if labels:
            self.labels[cell] = labels
        else:
            self.labels.pop(cell, None)
        return True

    def set_poi_category(self, row: int, col: int, category: Optional[str]) -> bool:
        if not self._require_floor("set POI category"):
            return False
        cell = (row, col)
        if category_of(self.cells.get(cell)) != POI:
            log.warning("Ignoring POI category on non-POI cell %s", cell)
            return False
        category = (category or "").strip().lower()
        if not category:
            self.poi_categories.pop(cell, None)
            return True
        if category not in POI_CATEGORIES:
            log.warning("Unknown POI category %r", category)
            return False
        self.poi_categories[cell] = category
        return True

    def create_preset(self, color: str, labels) -> bool:
        if not self._require_floor("create preset"):
            return False
        color = normalize_color(color)
        if not is_hex_color(color):
            log.warning("Rejected preset colour %r (expected #rrggbb)", color)
            return False
        if lookup_color(color).fixed_label == "":
            log.warning("%s cells carry no labels; preset rejected", lookup_color(color).name)
            return False
        labels = normalize_labels(labels)
        if not labels:
            return self.remove_preset(color)
        self.presets[color] = labels
        return True

    def remove_preset(self, color: str) -> bool:
        return self.presets.pop(normalize_color(color), None) is not None

    def clear_painted(self):
        self.cells.clear()
        self.poi_categories.clear()

    def clear_labels(self):
        self.labels.clear()

    def clear_all(self):
        self.clear_painted()
        self.clear_labels()

    def stats(self) -> Dict[str, int]:
        cats = [category_of(c) for c in self.cells.values()]
        return {
            "painted": len(self.cells),
            "labeled": len(self.labels),
            "total": len(set(self.cells) | set(self.labels)),
            "walkways": cats.count(WALKWAY),
            "pois": cats.count(POI),
            "connections": sum(cats.count(c) for c in CONNECTION_CATEGORIES),
        }
