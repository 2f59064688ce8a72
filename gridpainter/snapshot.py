"""
snapshot.py — full JSON dump of every floor plus the view settings.

The document is parsed into pydantic models.  Any defect (bad JSON, wrong
types, a floor key that is not ``number_name``, a bad cell key or colour, a
POI category outside the vocabulary or on a non-POI cell) raises
SnapshotError before anything is installed.
"""
import logging
from typing import Dict, List, Optional

from pydantic import (
    BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator,
)

from .constants import (
    DEFAULT_GRID_SIZE, DEFAULT_LABEL_SIZE, DEFAULT_ZOOM, POI, POI_CATEGORIES,
    SNAPSHOT_VERSION, WALKWAY_COLOR, category_of, is_hex_color, lookup_color,
    normalize_color,
)
from .coords import CoordinateSpace, cell_key, parse_cell_key
from .errors import SnapshotError
from .floors import Floor, floor_key, normalize_labels

log = logging.getLogger(__name__)


def _cell_map(d):
    return {cell_key(*k): d[k] for k in sorted(d)}


def _canonical_cells(value):
    """Re-key a ``{"row,col": ...}`` map in canonical form; bad keys raise ValueError."""
    out = {}
    for key, v in value.items():
        try:
            out[cell_key(*parse_cell_key(key))] = v
        except ValueError:
            raise ValueError(f"bad cell key {key!r} (expected 'row,col')")
    return out


def _check_color(color):
    if not is_hex_color(color):
        raise ValueError(f"bad colour {color!r} (expected #rrggbb)")
    return normalize_color(color)


class Offset(BaseModel):
    model_config = ConfigDict(strict=True)

    x: float = 0.0
    y: float = 0.0


class SnapshotApp(BaseModel):
    """View settings and the current floor."""
    model_config = ConfigDict(strict=True, populate_by_name=True)

    grid_size: int = Field(DEFAULT_GRID_SIZE, alias="gridSize", gt=0)
    grid_offset: Offset = Field(default_factory=Offset, alias="gridOffset")
    canvas_offset: Offset = Field(default_factory=Offset, alias="canvasOffset")
    zoom: float = Field(DEFAULT_ZOOM, gt=0)
    paint_color: str = Field(WALKWAY_COLOR, alias="paintColor")
    grid_visible: bool = Field(True, alias="gridVisible")
    labels_visible: bool = Field(True, alias="labelsVisible")
    background_visible: bool = Field(True, alias="backgroundVisible")
    connections_visible: bool = Field(True, alias="connectionsVisible")
    label_size: int = Field(DEFAULT_LABEL_SIZE, alias="labelSize")
    current_floor: Optional[str] = Field(None, alias="currentFloor")

    @field_validator("paint_color")
    @classmethod
    def check_paint_color(cls, value):
        return _check_color(value)

    @classmethod
    def from_state(cls, state) -> "SnapshotApp":
        coords = state.coords
        return cls(
            grid_size=coords.grid_size,
            grid_offset=Offset(x=coords.grid_offset[0], y=coords.grid_offset[1]),
            canvas_offset=Offset(x=coords.canvas_offset[0], y=coords.canvas_offset[1]),
            zoom=coords.zoom,
            paint_color=state.paint_color,
            grid_visible=state.grid_visible,
            labels_visible=state.labels_visible,
            background_visible=state.background_visible,
            connections_visible=state.connections_visible,
            label_size=state.label_size,
            current_floor=state.floors.current_key,
        )

    def to_coords(self) -> CoordinateSpace:
        return CoordinateSpace(
            grid_size=self.grid_size,
            grid_offset=(self.grid_offset.x, self.grid_offset.y),
            canvas_offset=(self.canvas_offset.x, self.canvas_offset.y),
            zoom=self.zoom,
        )


class SnapshotFloor(BaseModel):
    model_config = ConfigDict(strict=True, populate_by_name=True)

    name: str
    number: int
    image: Optional[str] = None
    cells: Dict[str, str] = Field(default_factory=dict)
    labels: Dict[str, List[str]] = Field(default_factory=dict)
    presets: Dict[str, List[str]] = Field(default_factory=dict)
    poi_categories: Dict[str, str] = Field(default_factory=dict, alias="poiCategories")

    @field_validator("name")
    @classmethod
    def check_name(cls, value):
        if not value.strip():
            raise ValueError("floor name is empty")
        return value

    @field_validator("cells")
    @classmethod
    def check_cells(cls, value):
        return {k: _check_color(c) for k, c in _canonical_cells(value).items()}

    @field_validator("labels")
    @classmethod
    def check_labels(cls, value):
        return _canonical_cells(value)

    @field_validator("presets")
    @classmethod
    def check_presets(cls, value):
        return {_check_color(c): labels for c, labels in value.items()}

    @field_validator("poi_categories")
    @classmethod
    def check_poi_categories(cls, value):
        out = {}
        for k, cat in _canonical_cells(value).items():
            cat = cat.strip().lower()
            if cat not in POI_CATEGORIES:
                raise ValueError(f"unknown POI category {cat!r} at {k}")
            out[k] = cat
        return out

    @model_validator(mode="after")
    def check_cell_rules(self):
        for k in self.poi_categories:
            if category_of(self.cells.get(k)) != POI:
                raise ValueError(f"POI category on non-POI cell {k}")
        for k, labels in self.labels.items():
            color = self.cells.get(k)
            if labels and color and lookup_color(color).fixed_label == "":
                raise ValueError(f"labels on {lookup_color(color).name} cell {k}")
        for color, labels in self.presets.items():
            if labels and lookup_color(color).fixed_label == "":
                raise ValueError(f"preset on {lookup_color(color).name}")
        return self

    @classmethod
    def from_floor(cls, floor: Floor) -> "SnapshotFloor":
        return cls(
            name=floor.name,
            number=floor.number,
            image=floor.image,
            cells=_cell_map(floor.cells),
            labels=_cell_map(floor.labels),
            presets={c: list(v) for c, v in sorted(floor.presets.items())},
            poi_categories=_cell_map(floor.poi_categories),
        )

    def to_floor(self) -> Floor:
        labels = {parse_cell_key(k): normalize_labels(v) for k, v in self.labels.items()}
        presets = {c: normalize_labels(v) for c, v in self.presets.items()}
        return Floor(
            name=self.name,
            number=self.number,
            cells={parse_cell_key(k): c for k, c in self.cells.items()},
            labels={k: v for k, v in labels.items() if v},
            presets={c: v for c, v in presets.items() if v},
            poi_categories={parse_cell_key(k): c for k, c in self.poi_categories.items()},
            image=self.image,
        )


class Snapshot(BaseModel):
    model_config = ConfigDict(strict=True)

    version: int = SNAPSHOT_VERSION
    app: SnapshotApp = Field(default_factory=SnapshotApp)
    floors: Dict[str, SnapshotFloor]

    @field_validator("floors")
    @classmethod
    def check_floor_keys(cls, value):
        for key, floor in value.items():
            expected = floor_key(floor.number, floor.name)
            if key != expected:
                raise ValueError(f"floor key {key!r} does not match {expected!r}")
        return value


def dump_snapshot(state) -> str:
    snap = Snapshot(
        app=SnapshotApp.from_state(state),
        floors={f.key: SnapshotFloor.from_floor(f) for f in state.floors.floors_sorted()},
    )
    return snap.model_dump_json(indent=2, by_alias=True)


def load_snapshot(state, text):
    """Replace ``state`` with the snapshot in ``text``; raises SnapshotError and
    leaves ``state`` untouched when the snapshot is malformed."""
    try:
        snap = Snapshot.model_validate_json(text)
    except ValidationError as e:
        raise SnapshotError(f"invalid snapshot: {e}") from e

    app = snap.app
    floors = {key: f.to_floor() for key, f in snap.floors.items()}
    state.coords = app.to_coords()
    state.floors.install(floors, app.current_floor)
    state.set_paint_color(app.paint_color)
    state.set_label_size(app.label_size)
    state.grid_visible = app.grid_visible
    state.labels_visible = app.labels_visible
    state.background_visible = app.background_visible
    state.connections_visible = app.connections_visible
    log.info("Loaded snapshot with %d floors", len(floors))
    return state
