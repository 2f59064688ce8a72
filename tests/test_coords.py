"""
Tests for the pixel <-> world <-> cell mapping and view limits.
"""
import pytest

from gridpainter.coords import CoordinateSpace, cell_key, fit_to_bounds, parse_cell_key


def test_default_mapping():
    cs = CoordinateSpace()
    assert cs.pixel_to_cell(0, 0) == (0, 0)
    assert cs.pixel_to_cell(19.9, 19.9) == (0, 0)
    assert cs.pixel_to_cell(20, 0) == (0, 1)
    assert cs.pixel_to_cell(0, 45) == (2, 0)
    assert cs.pixel_to_cell(-1, -1) == (-1, -1)


def test_mapping_with_offsets_and_zoom():
    cs = CoordinateSpace(grid_size=10, grid_offset=(5, 5), canvas_offset=(10, 10), zoom=2)
    # pixel 20 -> world 5 -> exactly on the grid origin
    assert cs.pixel_to_world(20, 20) == (5, 5)
    assert cs.pixel_to_cell(20, 20) == (0, 0)
    assert cs.pixel_to_cell(19.9, 20) == (0, -1)
    assert cs.cell_to_world_origin(1, 2) == (25, 15)
    assert cs.cell_to_pixel_origin(1, 2) == (60, 40)


@pytest.mark.parametrize("zoom", [0.1, 0.3, 0.7, 1.0, 1.3, 2.5, 10.0])
@pytest.mark.parametrize("grid_offset", [(0, 0), (3.7, -11.2)])
def test_cell_origin_round_trip(zoom, grid_offset):
    cs = CoordinateSpace(grid_size=20, grid_offset=grid_offset,
                         canvas_offset=(13.5, -7.25), zoom=zoom)
    for row in range(-5, 6):
        for col in range(-5, 6):
            assert cs.pixel_to_cell(*cs.cell_to_pixel_origin(row, col)) == (row, col)
            assert cs.pixel_to_cell(*cs.cell_to_pixel_center(row, col)) == (row, col)


def test_view_changes_keep_cell_world_origin():
    cs = CoordinateSpace(grid_size=25, grid_offset=(4, 9))
    before = cs.cell_to_world_origin(3, -2)
    cs.pan(120, -35)
    cs.set_zoom(3.4)
    cs.zoom_out()
    assert cs.cell_to_world_origin(3, -2) == before


def test_zoom_is_clamped():
    cs = CoordinateSpace()
    assert cs.set_zoom(100) == 10
    assert cs.zoom_in() == 10
    assert cs.set_zoom(0.01) == pytest.approx(0.1)
    assert cs.zoom_out() == pytest.approx(0.1)
    cs.set_zoom(1.0)
    assert cs.zoom_in() == pytest.approx(1.1)


def test_reset_view():
    cs = CoordinateSpace(grid_offset=(3, 3))
    cs.pan(10, 10)
    cs.set_zoom(4)
    cs.reset_view()
    assert cs.zoom == 1.0
    assert cs.canvas_offset == (0.0, 0.0)
    assert cs.grid_offset == (3.0, 3.0)


def test_grid_size_limits():
    with pytest.raises(ValueError):
        CoordinateSpace(grid_size=0)
    cs = CoordinateSpace(grid_size=20)
    assert cs.set_grid_size(0) is False
    assert cs.set_grid_size(-5) is False
    assert cs.grid_size == 20
    assert cs.set_grid_size(1000) is True
    assert cs.grid_size == 500


def test_nudge_grid():
    cs = CoordinateSpace()
    cs.nudge_grid(1, -2)
    cs.nudge_grid(1, 0)
    assert cs.grid_offset == (2.0, -2.0)


def test_fit_to_bounds():
    assert fit_to_bounds(1600, 1200) == (800, 600)
    assert fit_to_bounds(400, 300) == (800, 600)
    assert fit_to_bounds(1000, 200) == pytest.approx((800, 160))
    with pytest.raises(ValueError):
        fit_to_bounds(0, 10)


def test_cell_key_text_form():
    assert cell_key(3, -2) == "3,-2"
    assert parse_cell_key("3,-2") == (3, -2)
    with pytest.raises(ValueError):
        parse_cell_key("a,b")


def test_grid_lines_cover_viewport():
    cs = CoordinateSpace()
    xs, ys = cs.grid_line_positions(800, 600)
    assert xs[0] == 0 and xs[-1] == 800
    assert len(xs) == 41
    assert len(ys) == 31


def test_visibility():
    cs = CoordinateSpace()
    assert cs.visible_cell_range(800, 600) == (0, 30, 0, 40)
    assert cs.is_cell_visible(0, 0, 800, 600)
    assert not cs.is_cell_visible(100, 100, 800, 600)
    assert not cs.is_cell_visible(-2, 0, 800, 600)


def test_point_just_left_of_grid_line_stays_in_its_cell():
    cs = CoordinateSpace(grid_size=20)
    assert cs.pixel_to_cell(19.99999999, 0) == (0, 0)
    assert cs.pixel_to_cell(20, 0) == (0, 1)
    cs = CoordinateSpace(grid_size=20, canvas_offset=(13.5, 0), zoom=0.3)
    x, _ = cs.cell_to_pixel_origin(0, 3)
    assert cs.pixel_to_cell(x - 1e-6, 0) == (0, 2)
    assert cs.pixel_to_cell(x, 0) == (0, 3)
