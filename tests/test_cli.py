"""
CLI sub-commands run against snapshot files on disk.
"""
import matplotlib

matplotlib.use("Agg")

import pytest  # noqa: E402

from gridpainter import cli, snapshot as snapshot_io  # noqa: E402
from gridpainter.constants import ELEVATOR_COLOR, WALKWAY_COLOR  # noqa: E402
from gridpainter.state import AppState  # noqa: E402


@pytest.fixture
def snapshot(tmp_path):
    state = AppState()
    state.floors.create_floor("Ground", 0)
    for cell in [(0, 0), (0, 1), (1, 1), (5, 5)]:
        state.floors.paint_cell(*cell, WALKWAY_COLOR)
    state.floors.paint_cell(0, 2, ELEVATOR_COLOR)
    state.floors.create_floor("First", 1)
    path = tmp_path / "plan.json"
    path.write_text(snapshot_io.dump_snapshot(state), encoding="utf-8")
    return path


def test_export_command(snapshot, tmp_path, capsys):
    out = tmp_path / "out"
    assert cli.main(["export", str(snapshot), "--out", str(out),
                     "--zip", "nav.zip", "--cells-json"]) == 0
    for name in ("navigation.csv", "pois.csv", "vertical_connections.csv",
                 "nav.zip", "cells.json"):
        assert (out / name).exists()
    text = capsys.readouterr().out
    assert "Wrote" in text
    assert "unlabelled elevator cell (0, 2)" in text


def test_stats_command(snapshot, capsys):
    assert cli.main(["stats", str(snapshot)]) == 0
    text = capsys.readouterr().out
    assert "Floor 0_Ground: 5 painted" in text
    assert "walkway components: [3, 1]" in text
    assert "Floor 1_First: 0 painted" in text


def test_render_command(snapshot, tmp_path):
    out = tmp_path / "ground.png"
    assert cli.main(["render", str(snapshot), "--floor", "0_Ground",
                     "--out", str(out), "--width", "200", "--height", "100"]) == 0
    assert out.exists()
    assert cli.main(["render", str(snapshot), "--floor", "7_Nope",
                     "--out", str(out)]) == 1


def test_plot_command(snapshot, tmp_path):
    out = tmp_path / "preview.png"
    assert cli.main(["plot", str(snapshot), "--save", str(out)]) == 0
    assert out.exists()


def test_bad_inputs(tmp_path, capsys):
    assert cli.main(["stats", str(tmp_path / "missing.json")]) == 1
    bad = tmp_path / "bad.json"
    bad.write_text("{", encoding="utf-8")
    assert cli.main(["stats", str(bad)]) == 1
    assert "Error reading snapshot" in capsys.readouterr().out


def test_command_is_required():
    with pytest.raises(SystemExit):
        cli.main([])
