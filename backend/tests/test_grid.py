"""
Tests for grid-to-pixel mapping.
"""
import pytest
from app.core.schemas import GridPosition
from app.services.grid import grid_to_pixels


@pytest.mark.unit
def test_first_cell_on_default_canvas():
    pos = grid_to_pixels(GridPosition(row=0, col=0), 4, 4)

    # (1920 - 2*20 - 3*16) / 4 and (1080 - 2*20 - 3*16) / 4
    assert (pos.x, pos.y, pos.width, pos.height) == (20, 20, 458, 248)


@pytest.mark.unit
def test_spanned_cell_absorbs_gaps():
    pos = grid_to_pixels(GridPosition(row=1, col=2, row_span=2, col_span=2), 4, 4)

    assert pos.x == 20 + 2 * (458 + 16)
    assert pos.y == 20 + 1 * (248 + 16)
    assert pos.width == 2 * 458 + 16
    assert pos.height == 2 * 248 + 16


@pytest.mark.unit
def test_adjacent_cells_are_separated_by_gap():
    left = grid_to_pixels(GridPosition(row=0, col=0), 3, 3, 1200, 800, padding=10, gap=8)
    right = grid_to_pixels(GridPosition(row=0, col=1), 3, 3, 1200, 800, padding=10, gap=8)

    assert right.x - (left.x + left.width) == pytest.approx(8)


@pytest.mark.unit
def test_full_span_fills_canvas_inside_padding():
    pos = grid_to_pixels(GridPosition(row=0, col=0, row_span=7, col_span=6), 6, 7)

    assert pos.x == 20
    assert pos.x + pos.width == pytest.approx(1920 - 20)
    assert pos.y + pos.height == pytest.approx(1080 - 20)


@pytest.mark.unit
def test_out_of_grid_cells_are_not_clipped():
    pos = grid_to_pixels(GridPosition(row=0, col=4), 4, 4)
    assert pos.x + pos.width > 1920


@pytest.mark.unit
def test_scaling_canvas_padding_and_gap_scales_horizontally():
    cell = GridPosition(row=1, col=2, col_span=2)
    base = grid_to_pixels(cell, 4, 4, 1920, 1080, padding=20, gap=16)
    doubled = grid_to_pixels(cell, 4, 4, 3840, 1080, padding=40, gap=32)

    assert doubled.x == pytest.approx(2 * base.x)
    assert doubled.width == pytest.approx(2 * base.width)
