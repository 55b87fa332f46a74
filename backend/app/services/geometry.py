"""
Geometry operations on placed visuals.

Alignment, distribution and size matching use the bounding box of the whole
selected set as their reference frame. Every function returns new Visual
objects and leaves its input untouched; selections that are too small for an
operation are returned unchanged.
"""
import math
from typing import Dict, List, Literal, Optional

from app.core.schemas import Position, SelectionBounds, SelectionRect, Visual

HorizontalAlignment = Literal['left', 'center', 'right']
VerticalAlignment = Literal['top', 'middle', 'bottom']

DEFAULT_SNAP_GRID = 20


def _moved(visual: Visual, **changes) -> Visual:
    return visual.model_copy(update={'position': visual.position.model_copy(update=changes)})


def get_selection_bounds(visuals: List[Visual]) -> SelectionBounds:
    if not visuals:
        return SelectionBounds()

    left = min(v.position.x for v in visuals)
    top = min(v.position.y for v in visuals)
    right = max(v.position.x + v.position.width for v in visuals)
    bottom = max(v.position.y + v.position.height for v in visuals)

    return SelectionBounds(
        left=left,
        top=top,
        right=right,
        bottom=bottom,
        width=right - left,
        height=bottom - top,
        center_x=left + (right - left) / 2,
        center_y=top + (bottom - top) / 2,
    )


def align_visuals_horizontal(visuals: List[Visual], alignment: HorizontalAlignment) -> List[Visual]:
    """Set every x to the selection's left edge, center line or right edge."""
    if len(visuals) < 2:
        return visuals

    bounds = get_selection_bounds(visuals)
    targets = {
        'left': lambda v: bounds.left,
        'center': lambda v: bounds.center_x - v.position.width / 2,
        'right': lambda v: bounds.right - v.position.width,
    }
    target = targets[alignment]
    return [_moved(v, x=target(v)) for v in visuals]


def align_visuals_vertical(visuals: List[Visual], alignment: VerticalAlignment) -> List[Visual]:
    """Set every y to the selection's top edge, middle line or bottom edge."""
    if len(visuals) < 2:
        return visuals

    bounds = get_selection_bounds(visuals)
    targets = {
        'top': lambda v: bounds.top,
        'middle': lambda v: bounds.center_y - v.position.height / 2,
        'bottom': lambda v: bounds.bottom - v.position.height,
    }
    target = targets[alignment]
    return [_moved(v, y=target(v)) for v in visuals]


def _distribute(visuals: List[Visual], start: str, size: str) -> List[Visual]:
    if len(visuals) < 3:
        return visuals

    ordered = sorted(visuals, key=lambda v: getattr(v.position, start))
    first, last = ordered[0], ordered[-1]

    span = getattr(last.position, start) + getattr(last.position, size) - getattr(first.position, start)
    occupied = sum(getattr(v.position, size) for v in ordered)
    gap = (span - occupied) / (len(ordered) - 1)

    result = [first]
    cursor = getattr(first.position, start) + getattr(first.position, size) + gap
    for visual in ordered[1:-1]:
        result.append(_moved(visual, **{start: cursor}))
        cursor += getattr(visual.position, size) + gap
    result.append(last)
    return result


def distribute_visuals_horizontal(visuals: List[Visual]) -> List[Visual]:
    """
    Space visuals evenly along x. The leftmost and rightmost stay anchored;
    the result is ordered left to right.
    """
    return _distribute(visuals, 'x', 'width')


def distribute_visuals_vertical(visuals: List[Visual]) -> List[Visual]:
    """Space visuals evenly along y, anchoring the top and bottom ones."""
    return _distribute(visuals, 'y', 'height')


def match_width(visuals: List[Visual], reference_width: Optional[float] = None) -> List[Visual]:
    if len(visuals) < 2:
        return visuals

    target = reference_width if reference_width is not None else max(v.position.width for v in visuals)
    return [_moved(v, width=target) for v in visuals]


def match_height(visuals: List[Visual], reference_height: Optional[float] = None) -> List[Visual]:
    if len(visuals) < 2:
        return visuals

    target = reference_height if reference_height is not None else max(v.position.height for v in visuals)
    return [_moved(v, height=target) for v in visuals]


def match_size(visuals: List[Visual], reference_size: Optional[float] = None) -> List[Visual]:
    """Give every element the same width and height; the largest of each unless a size is given."""
    if len(visuals) < 2:
        return visuals

    if reference_size is not None:
        width = height = reference_size
    else:
        width = max(v.position.width for v in visuals)
        height = max(v.position.height for v in visuals)
    return [_moved(v, width=width, height=height) for v in visuals]


def normalize_rect(rect: SelectionRect) -> Dict[str, float]:
    """Edges of a drag rectangle whose width/height may be negative."""
    return {
        'left': min(rect.x, rect.x + rect.width),
        'top': min(rect.y, rect.y + rect.height),
        'right': max(rect.x, rect.x + rect.width),
        'bottom': max(rect.y, rect.y + rect.height),
    }


def get_visuals_in_selection_box(visuals: List[Visual], selection_box: SelectionRect) -> List[str]:
    """
    Ids of visuals touching the selection box. Partial overlap counts;
    touching edges count as overlap.
    """
    box = normalize_rect(selection_box)
    selected = []

    for visual in visuals:
        pos = visual.position
        disjoint = (
            pos.x + pos.width < box['left']
            or pos.x > box['right']
            or pos.y + pos.height < box['top']
            or pos.y > box['bottom']
        )
        if not disjoint:
            selected.append(visual.id)

    return selected


def snap_to_grid(value: float, grid_size: float = DEFAULT_SNAP_GRID) -> float:
    # Halves round up, matching how the canvas snaps while dragging
    return math.floor(value / grid_size + 0.5) * grid_size


def snap_position_to_grid(position: Position, grid_size: float = DEFAULT_SNAP_GRID) -> Position:
    return position.model_copy(update={
        'x': snap_to_grid(position.x, grid_size),
        'y': snap_to_grid(position.y, grid_size),
    })
