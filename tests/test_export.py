"""
Tests for the CSV tables and the per-floor cell listing.
"""
import csv
import io
import json
import zipfile

import pytest

from gridpainter import export
from gridpainter.constants import (
    ELEVATOR_COLOR, NO_DATA_MESSAGE, POI_COLOR, STAIRS_COLOR, WALKWAY_COLOR,
)
from gridpainter.state import AppState


def build_state():
    state = AppState()
    store = state.floors
    store.create_floor("Ground", 0)
    store.create_floor("First", 1)

    store.paint_cell(0, 0, WALKWAY_COLOR)
    store.paint_cell(0, 1, ELEVATOR_COLOR)
    store.set_labels(0, 1, ["E1"])
    store.paint_cell(2, 3, POI_COLOR)
    store.set_labels(2, 3, ["Cafe Nero", "Nero"])
    store.set_poi_category(2, 3, "cafe")
    store.paint_cell(5, 5, "#059669")
    store.set_labels(6, 6, ["note"])
    store.paint_cell(7, 7, STAIRS_COLOR)          # no label: no connection group

    store.switch_floor("1_First")
    store.paint_cell(3, 3, ELEVATOR_COLOR)
    store.set_labels(3, 3, ["E1"])
    store.paint_cell(4, 4, STAIRS_COLOR)
    store.set_labels(4, 4, ["S1"])
    store.paint_cell(1, 1, POI_COLOR)
    store.switch_floor("0_Ground")
    return state


def test_navigation_csv_current_floor():
    state = build_state()
    assert export.navigation_csv(state.floors).splitlines() == [
        "row,col,floor_name,floor_number,walkable,connection_type,connection_id",
        "0,0,Ground,0,true,,",
        "0,1,Ground,0,true,elevator,E1",
        "2,3,Ground,0,true,,",
        "5,5,Ground,0,false,,",
        "6,6,Ground,0,false,,",
        "7,7,Ground,0,true,stairs,",
    ]


def test_navigation_csv_all_floors_ordered():
    state = build_state()
    rows = export.navigation_rows(state.floors, scope="all")
    keys = [(r["floor_number"], r["row"], r["col"]) for r in rows]
    assert keys == sorted(keys)
    assert {r["floor_name"] for r in rows} == {"Ground", "First"}
    with pytest.raises(ValueError):
        export.navigation_rows(state.floors, scope="everything")


def test_csv_quoting():
    state = AppState()
    state.floors.create_floor("Main", 0)
    state.floors.paint_cell(0, 0, ELEVATOR_COLOR)
    state.floors.set_labels(0, 0, ["Lift, North"])
    text = export.navigation_csv(state.floors)
    assert '"Lift, North"' in text
    rows = list(csv.DictReader(io.StringIO(text)))
    assert rows[0]["connection_id"] == "Lift, North"


def test_poi_rows():
    state = build_state()
    rows = export.poi_rows(state.floors, scope="all")
    assert rows == [
        {"poi_id": "POI_001", "name": "Cafe Nero", "display_name": "Nero",
         "row": 2, "col": 3, "floor_name": "Ground", "floor_number": 0,
         "category": "cafe"},
        {"poi_id": "POI_002", "name": "POI_2", "display_name": "POI_2",
         "row": 1, "col": 1, "floor_name": "First", "floor_number": 1,
         "category": ""},
    ]
    assert export.poi_csv(state.floors).splitlines()[0] == (
        "poi_id,name,display_name,row,col,floor_name,floor_number,category")


def test_vertical_connections_span_all_floors():
    state = build_state()
    assert export.vertical_connections_csv(state.floors).splitlines() == [
        "connection_id,type,floors,travel_time_seconds,floor_numbers",
        'E1,elevator,"Ground,First",30,"0,1"',
        "S1,stairs,First,60,1",
    ]
    assert export.unlabeled_connections(state.floors) == [
        {"floor": "0_Ground", "row": 7, "col": 7, "type": "stairs"},
    ]


def test_export_is_deterministic():
    a = AppState()
    a.floors.create_floor("G", 0)
    for cell in [(3, 1), (0, 0), (2, 2)]:
        a.floors.paint_cell(*cell, WALKWAY_COLOR)
    b = AppState()
    b.floors.create_floor("G", 0)
    for cell in [(2, 2), (3, 1), (0, 0)]:
        b.floors.paint_cell(*cell, WALKWAY_COLOR)
    assert export.navigation_csv(a.floors) == export.navigation_csv(b.floors)
    assert export.navigation_csv(a.floors) == export.navigation_csv(a.floors)


def test_empty_store_exports_headers_only():
    state = AppState()
    assert export.navigation_csv(state.floors) == (
        "row,col,floor_name,floor_number,walkable,connection_type,connection_id\n")
    assert export.vertical_connection_rows(state.floors) == []


def test_write_exports(tmp_path):
    state = build_state()
    written = export.write_exports(state.floors, tmp_path / "out", scope="all",
                                   zip_name="nav.zip")
    for name in ("navigation", "pois", "vertical_connections"):
        assert written[name].exists()
    with zipfile.ZipFile(written["zip"]) as z:
        assert sorted(z.namelist()) == [
            "navigation.csv", "pois.csv", "vertical_connections.csv"]


def test_cells_json():
    state = AppState()
    state.floors.create_floor("G", 0)
    assert json.loads(export.cells_json(state.floors, state.coords)) == {
        "message": NO_DATA_MESSAGE}

    state.floors.paint_cell(1, 2, WALKWAY_COLOR)
    state.floors.set_labels(4, 4, ["note"])
    data = json.loads(export.cells_json(state.floors, state.coords, now=0))
    assert data["info"]["totalCells"] == 2
    assert data["info"]["paintedCells"] == 1
    assert data["info"]["labeledCells"] == 1
    assert data["info"]["gridSize"] == 20
    first, second = data["coordinates"]
    assert first["coordinate"] == "(1, 2)"
    assert first["color"] == "#16A34A"
    assert first["colorName"] == "Walkway"
    assert first["isPainted"] and not first["hasLabel"]
    assert second["color"] is None and second["labels"] == ["note"]
