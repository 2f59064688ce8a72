"""
export.py — navigation tables and the cells JSON.

Three CSV tables are built fresh from the floor store on every call:

  navigation.csv           one row per painted or labelled cell
  pois.csv                 one row per POI cell
  vertical_connections.csv one row per connection id across ALL floors

Rows are ordered by (floor_number, floor_name, row, col).  The full snapshot
lives in ``snapshot.py``.
"""
import csv
import io
import json
import logging
import time
import zipfile
from pathlib import Path
from typing import Dict, List, Optional

from .constants import (
    CONNECTION_CATEGORIES, NO_DATA_MESSAGE, POI, TRAVEL_TIME_SECONDS,
    WALKABLE_CATEGORIES, category_of, lookup_color,
)
from .coords import CoordinateSpace
from .floors import Floor, FloorStore

log = logging.getLogger(__name__)

NAVIGATION_FIELDS = ["row", "col", "floor_name", "floor_number", "walkable",
                     "connection_type", "connection_id"]
POI_FIELDS = ["poi_id", "name", "display_name", "row", "col", "floor_name",
              "floor_number", "category"]
VERTICAL_FIELDS = ["connection_id", "type", "floors", "travel_time_seconds",
                   "floor_numbers"]

SCOPES = ("current", "all")


# ---------------- helpers ----------------
def _scoped_floors(store: FloorStore, scope: str) -> List[Floor]:
    if scope not in SCOPES:
        raise ValueError(f"scope must be one of {SCOPES}, got {scope!r}")
    if scope == "all":
        return store.floors_sorted()
    cur = store.current
    return [cur] if cur is not None else []


def _iter_cells(floors: List[Floor]):
    for floor in floors:
        for cell in sorted(set(floor.cells) | set(floor.labels)):
            yield floor, cell


def _fmt(v):
    if isinstance(v, bool):
        return "true" if v else "false"
    return v


def _to_csv(fields: List[str], rows: List[Dict]) -> str:
    buf = io.StringIO()
    w = csv.writer(buf, lineterminator="\n")
    w.writerow(fields)
    for r in rows:
        w.writerow([_fmt(r[f]) for f in fields])
    return buf.getvalue()


# ---------------- navigation table ----------------
def navigation_rows(store: FloorStore, scope: str = "current") -> List[Dict]:
    rows = []
    for floor, (row, col) in _iter_cells(_scoped_floors(store, scope)):
        cat = category_of(floor.cells.get((row, col)))
        labels = floor.labels.get((row, col), [])
        conn_type = cat if cat in CONNECTION_CATEGORIES else ""
        rows.append({
            "row": row,
            "col": col,
            "floor_name": floor.name,
            "floor_number": floor.number,
            "walkable": cat in WALKABLE_CATEGORIES,
            "connection_type": conn_type,
            "connection_id": labels[0] if (conn_type and labels) else "",
        })
    return rows


def navigation_csv(store: FloorStore, scope: str = "current") -> str:
    return _to_csv(NAVIGATION_FIELDS, navigation_rows(store, scope))


# ---------------- POI table ----------------
def poi_rows(store: FloorStore, scope: str = "current") -> List[Dict]:
    rows = []
    n = 0
    for floor, cell in _iter_cells(_scoped_floors(store, scope)):
        if category_of(floor.cells.get(cell)) != POI:
            continue
        n += 1
        labels = floor.labels.get(cell, [])
        name = labels[0] if labels else f"POI_{n}"
        display = labels[1] if len(labels) > 1 else name
        rows.append({
            "poi_id": f"POI_{n:03d}",
            "name": name,
            "display_name": display,
            "row": cell[0],
            "col": cell[1],
            "floor_name": floor.name,
            "floor_number": floor.number,
            "category": floor.poi_categories.get(cell, ""),
        })
    return rows


def poi_csv(store: FloorStore, scope: str = "current") -> str:
    return _to_csv(POI_FIELDS, poi_rows(store, scope))


# ---------------- vertical connections ----------------
def vertical_connection_rows(store: FloorStore) -> List[Dict]:
    """Group connection cells of every floor by their first label."""
    groups: Dict[str, Dict] = {}
    for floor, cell in _iter_cells(store.floors_sorted()):
        cat = category_of(floor.cells.get(cell))
        labels = floor.labels.get(cell, [])
        if cat not in CONNECTION_CATEGORIES or not labels:
            continue
        g = groups.setdefault(labels[0], {"type": cat, "floors": []})
        if (floor.name, floor.number) not in g["floors"]:
            g["floors"].append((floor.name, floor.number))

    rows = []
    for cid in sorted(groups):
        g = groups[cid]
        rows.append({
            "connection_id": cid,
            "type": g["type"],
            "floors": ",".join(name for name, _ in g["floors"]),
            "travel_time_seconds": TRAVEL_TIME_SECONDS[g["type"]],
            "floor_numbers": ",".join(str(num) for _, num in g["floors"]),
        })
    return rows


def vertical_connections_csv(store: FloorStore) -> str:
    return _to_csv(VERTICAL_FIELDS, vertical_connection_rows(store))


def unlabeled_connections(store: FloorStore) -> List[Dict]:
    """Connection cells that contribute to no group because they carry no label."""
    out = []
    for floor, cell in _iter_cells(store.floors_sorted()):
        cat = category_of(floor.cells.get(cell))
        if cat in CONNECTION_CATEGORIES and not floor.labels.get(cell):
            out.append({"floor": floor.key, "row": cell[0], "col": cell[1], "type": cat})
    return out


def write_exports(store: FloorStore, out_dir, scope: str = "all",
                  zip_name: Optional[str] = None) -> Dict[str, Path]:
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    tables = {
        "navigation": (out_dir / "navigation.csv", navigation_csv(store, scope)),
        "pois": (out_dir / "pois.csv", poi_csv(store, scope)),
        "vertical_connections": (out_dir / "vertical_connections.csv",
                                 vertical_connections_csv(store)),
    }
    written = {}
    for name, (path, text) in tables.items():
        with path.open("w", newline="", encoding="utf-8") as f:
            f.write(text)
        written[name] = path
    if zip_name:
        zip_path = out_dir / zip_name
        with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as z:
            for path in list(written.values()):
                z.write(path, arcname=path.name)
        written["zip"] = zip_path
    log.info("Wrote %d export files to %s", len(written), out_dir)
    return written


# ---------------- per-floor cell listing ----------------
def cells_json(store: FloorStore, coords: CoordinateSpace, now: Optional[float] = None) -> str:
    floor = store.current
    cells = sorted(set(floor.cells) | set(floor.labels)) if floor else []
    if not cells:
        return json.dumps({"message": NO_DATA_MESSAGE}, indent=2)

    t = time.localtime(now)
    coordinates = []
    for row, col in cells:
        color = floor.cells.get((row, col))
        labels = floor.labels.get((row, col), [])
        coordinates.append({
            "row": row,
            "col": col,
            "coordinate": f"({row}, {col})",
            "color": color.upper() if color else None,
            "colorName": lookup_color(color).name if color else None,
            "labels": labels,
            "poiCategory": floor.poi_categories.get((row, col)),
            "isPainted": color is not None,
            "hasLabel": bool(labels),
        })
    data = {
        "info": {
            "floor": {"name": floor.name, "number": floor.number},
            "totalCells": len(cells),
            "paintedCells": len(floor.cells),
            "labeledCells": len(floor.labels),
            "gridSize": coords.grid_size,
            "gridOffset": {"x": coords.grid_offset[0], "y": coords.grid_offset[1]},
            "exportDate": time.strftime("%Y-%m-%d", t),
            "exportTime": time.strftime("%H:%M:%S", t),
        },
        "coordinates": coordinates,
    }
    return json.dumps(data, indent=2, ensure_ascii=False)
