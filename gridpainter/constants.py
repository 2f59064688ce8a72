"""
constants.py — colour registry, grid/zoom limits and export vocabulary.
"""
import re
from dataclasses import dataclass
from typing import Optional

# ---------------- Grid / view limits ----------------
DEFAULT_GRID_SIZE = 20
MIN_GRID_SIZE     = 1
MAX_GRID_SIZE     = 500

DEFAULT_ZOOM = 1.0
MIN_ZOOM     = 0.1
MAX_ZOOM     = 10.0
ZOOM_STEP    = 0.1

DEFAULT_CANVAS_W, DEFAULT_CANVAS_H = 800, 600

MAX_LABEL_LENGTH   = 100
DEFAULT_LABEL_SIZE = 12
MIN_LABEL_SIZE     = 6
MAX_LABEL_SIZE     = 48
# ----------------------------------------------------

# Paint categories
WALKWAY   = "walkway"
POI       = "poi"
ELEVATOR  = "elevator"
STAIRS    = "stairs"
ESCALATOR = "escalator"
CUSTOM    = "custom"

CONNECTION_CATEGORIES = (ELEVATOR, STAIRS, ESCALATOR)
WALKABLE_CATEGORIES   = (WALKWAY, POI, ELEVATOR, STAIRS, ESCALATOR)


@dataclass(frozen=True)
class ColorEntry:
    key: str
    name: str
    category: str = CUSTOM
    # "" means the colour never carries labels; None means free labels
    fixed_label: Optional[str] = None


WALKWAY_COLOR   = "#16a34a"
POI_COLOR       = "#dc2626"
ELEVATOR_COLOR  = "#2563eb"
STAIRS_COLOR    = "#ea580c"
ESCALATOR_COLOR = "#7c3aed"

NAVIGATION_COLORS = [
    ColorEntry(WALKWAY_COLOR,   "Walkway",   WALKWAY, fixed_label=""),
    ColorEntry(POI_COLOR,       "POI",       POI),
    ColorEntry(ELEVATOR_COLOR,  "Elevator",  ELEVATOR),
    ColorEntry(STAIRS_COLOR,    "Stairs",    STAIRS),
    ColorEntry(ESCALATOR_COLOR, "Escalator", ESCALATOR),
]

# leftovers of the plain painting palette
PALETTE_COLORS = [
    ColorEntry("#059669", "Emerald"),
    ColorEntry("#db2777", "Pink"),
    ColorEntry("#0d9488", "Teal"),
    ColorEntry("#4f46e5", "Indigo"),
    ColorEntry("#ca8a04", "Yellow"),
    ColorEntry("#475569", "Slate"),
    ColorEntry("#1f2937", "Black"),
]

COLOR_REGISTRY = {c.key: c for c in NAVIGATION_COLORS + PALETTE_COLORS}


HEX_COLOR = re.compile(r"^#[0-9a-f]{6}$")


def normalize_color(color: str) -> str:
    return (color or "").strip().lower()


def is_hex_color(color: str) -> bool:
    return bool(HEX_COLOR.match(normalize_color(color)))


def lookup_color(color: str) -> ColorEntry:
    """Registry entry for ``color``; unknown colours become ad-hoc custom entries."""
    key = normalize_color(color)
    entry = COLOR_REGISTRY.get(key)
    if entry is None:
        return ColorEntry(key, key.upper())
    return entry


def category_of(color: Optional[str]) -> Optional[str]:
    if color is None:
        return None
    return lookup_color(color).category


POI_CATEGORIES = (
    "shop", "restaurant", "cafe", "restroom", "entrance", "exit",
    "information", "service", "parking", "atm", "pharmacy", "other",
)

TRAVEL_TIME_SECONDS = {ELEVATOR: 30, STAIRS: 60, ESCALATOR: 45}

NO_DATA_MESSAGE = "No data yet - paint a cell!"
SNAPSHOT_VERSION = 1
