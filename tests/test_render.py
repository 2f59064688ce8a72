"""
Smoke tests for the OpenCV overlay and the matplotlib preview.
"""
import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402

from gridpainter import render, visualize  # noqa: E402
from gridpainter.constants import POI_COLOR, WALKWAY_COLOR  # noqa: E402
from gridpainter.state import AppState  # noqa: E402


def bare_state():
    state = AppState()
    state.grid_visible = False
    state.connections_visible = False
    state.floors.create_floor("G", 0)
    return state


def test_hex_to_bgr():
    assert render.hex_to_bgr("#16a34a") == (0x4a, 0xa3, 0x16)
    assert render.hex_to_bgr("#FFFFFF") == (255, 255, 255)


def test_contrast_color():
    assert render.contrast_color("#ffffff") == render.DARK_TEXT
    assert render.contrast_color("#000000") == render.LIGHT_TEXT
    assert render.contrast_color(WALKWAY_COLOR) == render.LIGHT_TEXT


def test_empty_frame():
    state = bare_state()
    frame = render.render_frame(state, (320, 240))
    assert frame.shape == (240, 320, 3)
    assert frame.dtype == np.uint8
    assert (frame == render.EMPTY_BG).all()


def test_painted_cell_is_blended():
    state = bare_state()
    state.floors.paint_cell(1, 1, POI_COLOR)
    state.floors.paint_cell(100, 100, POI_COLOR)   # far outside the viewport
    frame = render.render_frame(state, (320, 240))
    b, g, r = render.hex_to_bgr(POI_COLOR)
    expected = np.array([(b + 50) / 2, (g + 50) / 2, (r + 50) / 2])
    assert np.abs(frame[30, 30].astype(float) - expected).max() <= 1
    assert (frame[5, 5] == render.EMPTY_BG).all()


def test_background_follows_view():
    state = bare_state()
    bg = np.full((10, 10, 3), 255, dtype=np.uint8)
    frame = render.render_frame(state, (100, 100), bg)
    assert (frame[5, 5] == 255).all()
    assert (frame[50, 50] == render.EMPTY_BG).all()

    state.coords.pan(40, 40)
    frame = render.render_frame(state, (100, 100), bg)
    assert (frame[5, 5] == render.EMPTY_BG).all()
    assert (frame[45, 45] == 255).all()

    state.background_visible = False
    frame = render.render_frame(state, (100, 100), bg)
    assert (frame[45, 45] == render.EMPTY_BG).all()


def test_full_layers_render(tmp_path):
    state = AppState()
    state.floors.create_floor("G", 0)
    for cell in [(0, 0), (0, 1), (1, 1), (2, 2)]:
        state.floors.paint_cell(*cell, WALKWAY_COLOR)
    state.floors.paint_cell(3, 3, POI_COLOR)
    state.floors.set_labels(3, 3, ["Shop"])
    frame = render.render_frame(state)
    assert frame.shape == (600, 800, 3)
    out = tmp_path / "frame.png"
    assert render.save_frame(out, frame)
    assert out.exists()


def test_make_axes_grid():
    fig, axes = visualize.make_axes(1)
    assert len(axes) == 1
    plt.close(fig)
    fig, axes = visualize.make_axes(5)
    assert len(axes) == 6
    plt.close(fig)


def test_plot_floors_saves_png(tmp_path, capsys):
    state = AppState()
    state.floors.create_floor("G", 0)
    state.floors.create_floor("Upper", 1)
    for cell in [(0, 0), (0, 1), (1, 2)]:
        state.floors.paint_cell(*cell, WALKWAY_COLOR)
    state.floors.set_labels(4, 4, ["note"])
    out = tmp_path / "preview.png"
    fig = visualize.plot_floors(state.floors, annotate=True, save=str(out))
    plt.close(fig)
    assert out.exists()
    assert "Saved to" in capsys.readouterr().out
