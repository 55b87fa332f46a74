import logging
from typing import Any, Dict, List
from fastapi import APIRouter, HTTPException, Request
from app.core.config import get_settings
from app.core.errors import ErrorCodes, api_error, get_error_response
from app.core.rate_limit import analysis_rate_limit, limiter
from app.core.sanitization import sanitize_for_logging, validate_column_name
from app.core.schemas import (
    DataAnalysisResult,
    DatasetRequest,
    GridPixelsRequest,
    LayoutSuggestion,
    Position,
)
from app.services.analyzer import analyze_dataset
from app.services.grid import grid_to_pixels
from app.services.layout_generator import generate_layouts

logger = logging.getLogger(__name__)

router = APIRouter()


def validate_dataset(rows: List[Dict[str, Any]], request: Request) -> None:
    """Reject datasets over the row limit or with unusable column names."""
    settings = get_settings()
    correlation_id = getattr(request.state, 'correlation_id', None)

    if len(rows) > settings.max_dataset_rows:
        raise api_error(
            400,
            ErrorCodes.INVALID_DATASET,
            f"Maximum is {settings.max_dataset_rows} rows. Your dataset has {len(rows)}.",
            correlation_id,
        )

    if rows:
        bad = [name for name in rows[0] if not validate_column_name(name)]
        if bad:
            logger.warning(f"Rejected dataset with invalid column names: {sanitize_for_logging(bad)}")
            raise api_error(
                400,
                ErrorCodes.INVALID_DATASET,
                f"Invalid column names: {sanitize_for_logging(bad, max_length=200)}",
                correlation_id,
            )


@router.get("/health")
async def health_check():
    return {"status": "ok"}


@router.post("/analyze", response_model=DataAnalysisResult)
@limiter.limit(analysis_rate_limit)
async def analyze(request: Request, body: DatasetRequest):
    """
    Analyze a dataset given as a list of row objects.

    Rate limited per IP address (RATE_LIMIT_PER_MINUTE).
    """
    validate_dataset(body.rows, request)
    try:
        return analyze_dataset(body.rows)
    except HTTPException:
        raise
    except Exception as e:
        correlation_id = getattr(request.state, 'correlation_id', 'unknown')
        logger.error(f"Unexpected error analyzing dataset: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=get_error_response(ErrorCodes.UNKNOWN_ERROR, correlation_id=correlation_id),
        )


@router.post("/layouts", response_model=List[LayoutSuggestion])
async def layouts(analysis: DataAnalysisResult):
    return generate_layouts(analysis)


@router.post("/grid/pixels", response_model=Position)
async def grid_pixels(body: GridPixelsRequest):
    """Map a grid cell of a layout to a pixel rectangle on the canvas."""
    settings = get_settings()
    canvas_width = body.canvas.width if body.canvas else settings.canvas_width
    canvas_height = body.canvas.height if body.canvas else settings.canvas_height

    return grid_to_pixels(
        body.position,
        body.grid_columns,
        body.grid_rows,
        canvas_width,
        canvas_height,
        settings.grid_padding if body.padding is None else body.padding,
        settings.grid_gap if body.gap is None else body.gap,
    )
