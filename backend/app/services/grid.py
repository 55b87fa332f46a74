"""
Grid-to-pixel mapping for layout suggestions.
"""
from app.core.schemas import GridPosition, Position

DEFAULT_CANVAS_WIDTH = 1920
DEFAULT_CANVAS_HEIGHT = 1080
DEFAULT_PADDING = 20
DEFAULT_GAP = 16


def grid_to_pixels(
    grid_pos: GridPosition,
    grid_columns: int,
    grid_rows: int,
    canvas_width: float = DEFAULT_CANVAS_WIDTH,
    canvas_height: float = DEFAULT_CANVAS_HEIGHT,
    padding: float = DEFAULT_PADDING,
    gap: float = DEFAULT_GAP,
) -> Position:
    """
    Convert a grid cell into an absolute pixel rectangle.

    Cells are uniform: the canvas minus padding on both sides and the gaps
    between cells is split evenly. Spanned cells absorb the gaps they cover,
    so grid-adjacent cells never overlap. The result is not clipped; a cell
    outside the declared grid maps outside the canvas.
    """
    cell_width = (canvas_width - padding * 2 - gap * (grid_columns - 1)) / grid_columns
    cell_height = (canvas_height - padding * 2 - gap * (grid_rows - 1)) / grid_rows

    return Position(
        x=padding + grid_pos.col * (cell_width + gap),
        y=padding + grid_pos.row * (cell_height + gap),
        width=grid_pos.col_span * cell_width + (grid_pos.col_span - 1) * gap,
        height=grid_pos.row_span * cell_height + (grid_pos.row_span - 1) * gap,
    )
