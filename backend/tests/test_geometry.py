"""
Tests for alignment, distribution, size matching, box selection and snapping.
"""
import pytest
from app.core.schemas import Position, SelectionRect, Visual
from app.services.geometry import (
    align_visuals_horizontal,
    align_visuals_vertical,
    distribute_visuals_horizontal,
    distribute_visuals_vertical,
    get_selection_bounds,
    get_visuals_in_selection_box,
    match_height,
    match_size,
    match_width,
    snap_position_to_grid,
    snap_to_grid,
)


def _visual(visual_id, x, y, width, height):
    return Visual(id=visual_id, type='kpi-card', position=Position(x=x, y=y, width=width, height=height))


@pytest.fixture
def trio():
    return [
        _visual('a', 0, 0, 100, 50),
        _visual('b', 300, 100, 200, 100),
        _visual('c', 120, 40, 50, 20),
    ]


def _xs(visuals):
    return {v.id: v.position.x for v in visuals}


def _ys(visuals):
    return {v.id: v.position.y for v in visuals}


@pytest.mark.unit
def test_selection_bounds(trio):
    bounds = get_selection_bounds(trio)

    assert (bounds.left, bounds.top, bounds.right, bounds.bottom) == (0, 0, 500, 200)
    assert (bounds.width, bounds.height) == (500, 200)
    assert (bounds.center_x, bounds.center_y) == (250, 100)


@pytest.mark.unit
def test_selection_bounds_empty():
    bounds = get_selection_bounds([])
    assert bounds.width == 0 and bounds.center_x == 0


@pytest.mark.unit
def test_align_left_center_right(trio):
    assert set(_xs(align_visuals_horizontal(trio, 'left')).values()) == {0}
    assert _xs(align_visuals_horizontal(trio, 'center')) == {'a': 200, 'b': 150, 'c': 225}
    assert _xs(align_visuals_horizontal(trio, 'right')) == {'a': 400, 'b': 300, 'c': 450}


@pytest.mark.unit
def test_align_top_middle_bottom(trio):
    assert set(_ys(align_visuals_vertical(trio, 'top')).values()) == {0}
    assert _ys(align_visuals_vertical(trio, 'middle')) == {'a': 75, 'b': 50, 'c': 90}
    assert _ys(align_visuals_vertical(trio, 'bottom')) == {'a': 150, 'b': 100, 'c': 180}


@pytest.mark.unit
def test_align_keeps_sizes_and_input(trio):
    aligned = align_visuals_horizontal(trio, 'left')

    assert [v.position.width for v in aligned] == [100, 200, 50]
    assert trio[1].position.x == 300


@pytest.mark.unit
def test_align_single_visual_is_noop():
    single = [_visual('a', 10, 10, 100, 100)]
    assert align_visuals_horizontal(single, 'right') == single
    assert align_visuals_vertical(single, 'bottom') == single


@pytest.mark.unit
def test_distribute_horizontal_equalizes_gaps(trio):
    result = distribute_visuals_horizontal(trio)

    assert [v.id for v in result] == ['a', 'c', 'b']
    assert _xs(result) == {'a': 0, 'c': 175, 'b': 300}
    gaps = [
        result[i + 1].position.x - (result[i].position.x + result[i].position.width)
        for i in range(len(result) - 1)
    ]
    assert gaps == [pytest.approx(75), pytest.approx(75)]


@pytest.mark.unit
def test_distribute_vertical_anchors_ends(trio):
    result = distribute_visuals_vertical(trio)

    assert [v.id for v in result] == ['a', 'c', 'b']
    # span 200, occupied 170, gap 15
    assert _ys(result) == {'a': 0, 'c': 65, 'b': 100}


@pytest.mark.unit
def test_distribute_needs_three(trio):
    pair = trio[:2]
    assert distribute_visuals_horizontal(pair) == pair
    assert distribute_visuals_vertical(pair) == pair


@pytest.mark.unit
def test_match_sizes(trio):
    assert {v.position.width for v in match_width(trio)} == {200}
    assert {v.position.width for v in match_width(trio, 120)} == {120}
    assert {v.position.height for v in match_height(trio)} == {100}
    assert {(v.position.width, v.position.height) for v in match_size(trio)} == {(200, 100)}
    assert match_size(trio[:1]) == trio[:1]


@pytest.mark.unit
def test_selection_box_partial_overlap_and_touching(trio):
    assert get_visuals_in_selection_box(trio, SelectionRect(x=90, y=0, width=20, height=10)) == ['a']
    # Touching the right edge of "a" counts
    assert get_visuals_in_selection_box(trio, SelectionRect(x=100, y=0, width=5, height=5)) == ['a']
    assert get_visuals_in_selection_box(trio, SelectionRect(x=600, y=600, width=10, height=10)) == []


@pytest.mark.unit
def test_selection_box_negative_drag(trio):
    rect = SelectionRect(x=500, y=200, width=-400, height=-200)
    assert get_visuals_in_selection_box(trio, rect) == ['a', 'b', 'c']


@pytest.mark.unit
@pytest.mark.parametrize("value,expected", [(0, 0), (9, 0), (10, 20), (29, 20), (31, 40), (-9, 0), (-11, -20)])
def test_snap_to_grid(value, expected):
    assert snap_to_grid(value) == expected


@pytest.mark.unit
def test_snap_position_keeps_size():
    snapped = snap_position_to_grid(Position(x=33, y=47, width=123, height=77), 25)
    assert (snapped.x, snapped.y, snapped.width, snapped.height) == (25, 50, 123, 77)
