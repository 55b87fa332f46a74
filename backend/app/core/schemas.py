from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict, Union, Literal

ColumnDataType = Literal['number', 'text', 'date', 'boolean', 'category']
ColumnRole = Literal['metric', 'dimension', 'time', 'identifier', 'filter']
Cardinality = Literal['low', 'medium', 'high']
DateGranularity = Literal['year', 'quarter', 'month', 'week', 'day']
DataQuality = Literal['good', 'medium', 'poor']

VisualType = Literal[
    'kpi-card',
    'line-chart',
    'bar-chart',
    'pie-chart',
    'data-table',
    'slicer',
    'gauge',
    'funnel',
    'treemap',
    'matrix',
]

LayoutStyle = Literal['executive', 'detailed', 'compact', 'presentation']
Priority = Literal['primary', 'secondary', 'supporting']


class ColumnStatistics(BaseModel):
    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0
    sum: float = 0.0


class ColumnAnalysis(BaseModel):
    name: str
    data_type: ColumnDataType
    role: ColumnRole
    unique_count: int
    total_count: int
    cardinality: Cardinality  # low < 10, medium < 50, high >= 50
    sample_values: List[Any] = []
    statistics: Optional[ColumnStatistics] = None  # only for number columns
    is_time_series: bool = False
    date_granularity: Optional[DateGranularity] = None


class DataAnalysisResult(BaseModel):
    total_rows: int
    total_columns: int
    columns: List[ColumnAnalysis]
    metrics: List[ColumnAnalysis]
    dimensions: List[ColumnAnalysis]
    time_columns: List[ColumnAnalysis]
    filter_columns: List[ColumnAnalysis]
    suggested_title: str
    data_quality: DataQuality
    warnings: List[str] = []


class GridPosition(BaseModel):
    row: int = Field(ge=0)
    col: int = Field(ge=0)
    row_span: int = Field(default=1, ge=1)
    col_span: int = Field(default=1, ge=1)


# Field mappings: logical role -> column name(s) or a literal bound value
DataBinding = Dict[str, Union[str, List[str], float, int, None]]


class VisualSuggestion(BaseModel):
    id: str
    type: VisualType
    title: str
    reason: str  # why this visual was suggested
    confidence: int = Field(ge=0, le=100)
    position: GridPosition
    data_binding: DataBinding = {}
    priority: Priority


class LayoutSuggestion(BaseModel):
    id: str
    name: str
    description: str
    style: LayoutStyle
    grid_columns: int
    grid_rows: int
    visuals: List[VisualSuggestion]
    estimated_build_time: str  # "2 minutes"


class Position(BaseModel):
    x: float
    y: float
    width: float
    height: float


class CanvasSize(BaseModel):
    width: float = 1920
    height: float = 1080


class Visual(BaseModel):
    id: str
    type: VisualType
    position: Position
    data: Dict[str, Any] = {}
    style: Dict[str, Any] = {}
    conditional_formatting: Optional[List[Dict[str, Any]]] = None


class ProjectSnapshot(BaseModel):
    visuals: List[Visual]
    timestamp: float


class SelectionRect(BaseModel):
    """Drag rectangle; width/height go negative when dragging up or left."""
    x: float
    y: float
    width: float
    height: float


class SelectionBounds(BaseModel):
    left: float = 0
    top: float = 0
    right: float = 0
    bottom: float = 0
    width: float = 0
    height: float = 0
    center_x: float = 0
    center_y: float = 0


# API request/response models

class DatasetRequest(BaseModel):
    rows: List[Dict[str, Any]]


class GridPixelsRequest(BaseModel):
    position: GridPosition
    grid_columns: int = Field(ge=1)
    grid_rows: int = Field(ge=1)
    canvas: Optional[CanvasSize] = None
    padding: Optional[float] = Field(default=None, ge=0)
    gap: Optional[float] = Field(default=None, ge=0)


class ProjectUpdateRequest(BaseModel):
    project_name: Optional[str] = Field(default=None, max_length=200)
    canvas_size: Optional[CanvasSize] = None


class SelectLayoutRequest(BaseModel):
    layout_id: str


class AddVisualRequest(BaseModel):
    type: VisualType
    x: Optional[float] = None
    y: Optional[float] = None


class UpdateVisualRequest(BaseModel):
    position: Optional[Dict[str, float]] = None
    data: Optional[Dict[str, Any]] = None
    style: Optional[Dict[str, Any]] = None
    conditional_formatting: Optional[List[Dict[str, Any]]] = None


class SelectionRequest(BaseModel):
    ids: List[str]
    additive: bool = False


class SelectionBoxRequest(BaseModel):
    rect: SelectionRect
    additive: bool = False


class AlignRequest(BaseModel):
    alignment: Literal['left', 'center', 'right', 'top', 'middle', 'bottom']


class DistributeRequest(BaseModel):
    axis: Literal['horizontal', 'vertical']


class MatchSizeRequest(BaseModel):
    dimension: Literal['width', 'height', 'both']
    value: Optional[float] = Field(default=None, gt=0)


class SnapRequest(BaseModel):
    grid_size: Optional[float] = Field(default=None, gt=0)


class ProjectResponse(BaseModel):
    id: str
    project_name: str
    visuals: List[Visual]
    selected_visual_ids: List[str]
    canvas_size: CanvasSize
    can_undo: bool
    can_redo: bool
    analysis_result: Optional[DataAnalysisResult] = None
    layout_suggestions: List[LayoutSuggestion] = []
    selected_layout_id: Optional[str] = None


class HistoryResponse(BaseModel):
    visuals: Optional[List[Visual]] = None
    can_undo: bool
    can_redo: bool
