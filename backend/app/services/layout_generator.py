"""
Dashboard layout generator.

Turns a DataAnalysisResult into several independent LayoutSuggestion
variants. Each style is a fixed template that slots the available metrics,
dimensions, time columns and filter columns into grid cells. Confidence
values are fixed per template position and only used for display.
"""
import logging
from typing import List

from app.core.performance import track_performance
from app.core.schemas import (
    ColumnAnalysis,
    DataAnalysisResult,
    DataBinding,
    GridPosition,
    LayoutSuggestion,
    Priority,
    VisualSuggestion,
    VisualType,
)
from app.services.analyzer import format_column_name

logger = logging.getLogger(__name__)


class _VisualList:
    """Collects suggestions for one layout and numbers their ids."""

    def __init__(self, layout_id: str):
        self.layout_id = layout_id
        self.visuals: List[VisualSuggestion] = []

    def add(
        self,
        visual_type: VisualType,
        title: str,
        reason: str,
        confidence: int,
        position: tuple,
        data_binding: DataBinding,
        priority: Priority,
    ) -> None:
        row, col, row_span, col_span = position
        self.visuals.append(VisualSuggestion(
            id=f"{self.layout_id}-{len(self.visuals) + 1}",
            type=visual_type,
            title=title,
            reason=reason,
            confidence=confidence,
            position=GridPosition(row=row, col=col, row_span=row_span, col_span=col_span),
            data_binding=data_binding,
            priority=priority,
        ))


def _format_total(metric: ColumnAnalysis) -> str:
    if metric.statistics is None:
        return 'N/A'
    total = metric.statistics.sum
    if float(total).is_integer():
        return f"{int(total):,}"
    return f"{total:,.2f}"


def _first_with_cardinality(columns: List[ColumnAnalysis], cardinality: str):
    return next((c for c in columns if c.cardinality == cardinality), None)


def generate_executive_layout(analysis: DataAnalysisResult) -> LayoutSuggestion:
    """KPIs up front, one main chart and a distribution. Management overview."""
    visuals = _VisualList('executive')
    metrics, dimensions = analysis.metrics, analysis.dimensions

    # Row 0: KPI cards for the top metrics
    for index, metric in enumerate(metrics[:4]):
        visuals.add(
            'kpi-card',
            format_column_name(metric.name),
            f"Key metric: {metric.name} ({_format_total(metric)} total)",
            95,
            (0, index, 1, 1),
            {'field': metric.name, 'aggregation': 'SUM'},
            'primary',
        )

    # Rows 1-2 left: trend if a time column exists, otherwise comparison
    if analysis.time_columns and metrics:
        visuals.add(
            'line-chart',
            f"{format_column_name(metrics[0].name)} Trend",
            f"Time series detected: {analysis.time_columns[0].name}",
            90,
            (1, 0, 2, 2),
            {'xAxis': analysis.time_columns[0].name, 'series': [metrics[0].name]},
            'primary',
        )
    elif dimensions and metrics:
        visuals.add(
            'bar-chart',
            f"{format_column_name(metrics[0].name)} by {format_column_name(dimensions[0].name)}",
            f"Compare {metrics[0].name} across {dimensions[0].name}",
            85,
            (1, 0, 2, 2),
            {'category': dimensions[0].name, 'value': metrics[0].name},
            'primary',
        )

    # Rows 1-2 right: proportion, preferably over a low-cardinality dimension
    if dimensions and metrics:
        dimension = _first_with_cardinality(dimensions, 'low') or dimensions[0]
        visuals.add(
            'pie-chart',
            f"{format_column_name(metrics[0].name)} Distribution",
            f"Show proportion by {dimension.name}",
            80,
            (1, 2, 2, 2),
            {'category': dimension.name, 'value': metrics[0].name},
            'secondary',
        )

    if analysis.filter_columns:
        filter_col = analysis.filter_columns[0]
        visuals.add(
            'slicer',
            format_column_name(filter_col.name),
            f"Filter by {filter_col.name} ({filter_col.unique_count} values)",
            85,
            (0, 3, 1, 1),
            {'field': filter_col.name},
            'supporting',
        )

    return LayoutSuggestion(
        id='executive',
        name='Executive Summary',
        description='Clean overview with KPIs and key charts. Best for management dashboards.',
        style='executive',
        grid_columns=4,
        grid_rows=4,
        visuals=visuals.visuals,
        estimated_build_time='30 seconds',
    )


def generate_detailed_layout(analysis: DataAnalysisResult) -> LayoutSuggestion:
    """Comprehensive view: KPIs, trend, comparison, matrix, treemap, slicers and a table."""
    visuals = _VisualList('detailed')
    metrics, dimensions = analysis.metrics, analysis.dimensions

    for index, metric in enumerate(metrics[:5]):
        visuals.add(
            'kpi-card',
            format_column_name(metric.name),
            f"Metric summary for {metric.name}",
            95,
            (0, index, 1, 1),
            {'field': metric.name, 'aggregation': 'SUM'},
            'primary' if index < 3 else 'secondary',
        )

    if analysis.time_columns and metrics:
        visuals.add(
            'line-chart',
            f"{format_column_name(metrics[0].name)} Over Time",
            f"Trend analysis using {analysis.time_columns[0].name}",
            90,
            (1, 0, 2, 3),
            {'xAxis': analysis.time_columns[0].name, 'series': [m.name for m in metrics[:2]]},
            'primary',
        )

    if dimensions and metrics:
        visuals.add(
            'bar-chart',
            f"{format_column_name(metrics[0].name)} by {format_column_name(dimensions[0].name)}",
            f"Comparison across {dimensions[0].name}",
            85,
            (1, 3, 2, 2),
            {'category': dimensions[0].name, 'value': metrics[0].name},
            'primary',
        )

    # Cross-tab needs two dimensions
    if len(dimensions) >= 2 and metrics:
        visuals.add(
            'matrix',
            f"{format_column_name(metrics[0].name)} Matrix",
            f"Cross-tabulation of {dimensions[0].name} x {dimensions[1].name}",
            75,
            (3, 0, 2, 3),
            {
                'rowFields': [dimensions[0].name],
                'columnFields': [dimensions[1].name],
                'valueField': metrics[0].name,
            },
            'secondary',
        )

    if dimensions and metrics:
        dimension = _first_with_cardinality(dimensions, 'medium') or dimensions[0]
        visuals.add(
            'treemap',
            f"{format_column_name(dimension.name)} Breakdown",
            f"Hierarchical view of {metrics[0].name} by {dimension.name}",
            70,
            (3, 3, 2, 2),
            {'categoryField': dimension.name, 'valueField': metrics[0].name},
            'secondary',
        )

    # Slicers stack down the right-hand column
    for index, filter_col in enumerate(analysis.filter_columns[:2]):
        visuals.add(
            'slicer',
            format_column_name(filter_col.name),
            f"Filter control for {filter_col.name}",
            85,
            (index, 5, 1, 1),
            {'field': filter_col.name},
            'supporting',
        )

    table_columns = [c.name for c in dimensions[:2] + metrics[:3]]
    visuals.add(
        'data-table',
        'Detailed Data',
        'Full data access for drill-down analysis',
        90,
        (5, 0, 2, 5),
        {'columns': table_columns},
        'supporting',
    )

    return LayoutSuggestion(
        id='detailed',
        name='Detailed Analysis',
        description='Comprehensive view with multiple charts, matrix, and data table.',
        style='detailed',
        grid_columns=6,
        grid_rows=7,
        visuals=visuals.visuals,
        estimated_build_time='1 minute',
    )


def generate_compact_layout(analysis: DataAnalysisResult) -> LayoutSuggestion:
    visuals = _VisualList('compact')
    metrics, dimensions = analysis.metrics, analysis.dimensions

    for index, metric in enumerate(metrics[:3]):
        visuals.add(
            'kpi-card',
            format_column_name(metric.name),
            f"Top metric: {metric.name}",
            95,
            (0, index, 1, 1),
            {'field': metric.name, 'aggregation': 'SUM'},
            'primary',
        )

    if analysis.time_columns and metrics:
        visuals.add(
            'line-chart',
            f"{format_column_name(metrics[0].name)} Trend",
            'Primary trend visualization',
            90,
            (1, 0, 2, 3),
            {'xAxis': analysis.time_columns[0].name, 'series': [metrics[0].name]},
            'primary',
        )
    elif dimensions and metrics:
        visuals.add(
            'bar-chart',
            f"{format_column_name(metrics[0].name)} by {format_column_name(dimensions[0].name)}",
            'Primary comparison visualization',
            85,
            (1, 0, 2, 3),
            {'category': dimensions[0].name, 'value': metrics[0].name},
            'primary',
        )

    return LayoutSuggestion(
        id='compact',
        name='Compact View',
        description='Minimal dashboard with essential KPIs and one main chart.',
        style='compact',
        grid_columns=3,
        grid_rows=3,
        visuals=visuals.visuals,
        estimated_build_time='15 seconds',
    )


def generate_presentation_layout(analysis: DataAnalysisResult) -> LayoutSuggestion:
    """Large visuals for meetings. Only offered when at least two metrics exist."""
    visuals = _VisualList('presentation')
    metrics, dimensions = analysis.metrics, analysis.dimensions

    for index, metric in enumerate(metrics[:2]):
        visuals.add(
            'kpi-card',
            format_column_name(metric.name),
            f"Headline metric: {metric.name}",
            95,
            (0, index * 2, 1, 2),
            {'field': metric.name, 'aggregation': 'SUM'},
            'primary',
        )

    # Gauge against the observed maximum of the first metric
    if len(metrics) >= 2:
        observed_max = metrics[0].statistics.max if metrics[0].statistics else 0
        visuals.add(
            'gauge',
            f"{format_column_name(metrics[0].name)} Progress",
            'Visual progress indicator',
            80,
            (1, 0, 2, 2),
            {'field': metrics[0].name, 'minValue': 0, 'maxValue': observed_max or 100},
            'primary',
        )

    if analysis.time_columns and metrics:
        visuals.add(
            'line-chart',
            f"{format_column_name(metrics[0].name)} Performance",
            'Main presentation visual',
            90,
            (1, 2, 2, 2),
            {'xAxis': analysis.time_columns[0].name, 'series': [metrics[0].name]},
            'primary',
        )

    stage_dimension = _first_with_cardinality(dimensions, 'low')
    if stage_dimension and metrics:
        visuals.add(
            'funnel',
            f"{format_column_name(stage_dimension.name)} Funnel",
            'Conversion/flow visualization',
            70,
            (3, 0, 2, 4),
            {'stageField': stage_dimension.name, 'valueField': metrics[0].name},
            'secondary',
        )

    return LayoutSuggestion(
        id='presentation',
        name='Presentation Mode',
        description='Large visuals optimized for meetings and screen sharing.',
        style='presentation',
        grid_columns=4,
        grid_rows=5,
        visuals=visuals.visuals,
        estimated_build_time='45 seconds',
    )


@track_performance("generate_layouts")
def generate_layouts(analysis: DataAnalysisResult) -> List[LayoutSuggestion]:
    """
    Generate every applicable layout style for an analysis.

    Executive, detailed and compact are always produced; presentation is
    added when the analysis has at least two metrics. Visuals whose inputs
    are missing are omitted rather than failing the layout.

    Args:
        analysis: Result of analyze_dataset

    Returns:
        Layout suggestions in display order
    """
    layouts = [
        generate_executive_layout(analysis),
        generate_detailed_layout(analysis),
        generate_compact_layout(analysis),
    ]

    if len(analysis.metrics) >= 2:
        layouts.append(generate_presentation_layout(analysis))

    logger.info(
        f"Generated {len(layouts)} layout suggestions: "
        + ", ".join(f"{l.id} ({len(l.visuals)} visuals)" for l in layouts)
    )
    return layouts
