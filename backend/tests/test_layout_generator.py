"""
Tests for layout generation.
"""
import pytest
from app.core.schemas import ColumnAnalysis, ColumnStatistics, DataAnalysisResult
from app.services.analyzer import analyze_dataset, empty_analysis
from app.services.classifier import KeywordRoleClassifier
from app.services.layout_generator import (
    generate_compact_layout,
    generate_detailed_layout,
    generate_executive_layout,
    generate_layouts,
    generate_presentation_layout,
)


def _column(name, role, cardinality='medium', data_type='text', total=None):
    statistics = None
    if total is not None:
        data_type = 'number'
        statistics = ColumnStatistics(min=1, max=total / 2, avg=total / 4, sum=total)
    return ColumnAnalysis(
        name=name,
        data_type=data_type,
        role=role,
        unique_count=5,
        total_count=20,
        cardinality=cardinality,
        statistics=statistics,
    )


def _analysis(metrics=(), dimensions=(), time_columns=(), filter_columns=()):
    columns = list(metrics) + list(dimensions) + list(time_columns) + list(filter_columns)
    return DataAnalysisResult(
        total_rows=20,
        total_columns=len(columns),
        columns=columns,
        metrics=list(metrics),
        dimensions=list(dimensions),
        time_columns=list(time_columns),
        filter_columns=list(filter_columns),
        suggested_title='Test',
        data_quality='good',
    )


@pytest.fixture
def full_analysis():
    return _analysis(
        metrics=[_column(f"m{i}", 'metric', total=1000 * (i + 1)) for i in range(6)],
        dimensions=[_column('Region', 'dimension', 'low'), _column('Product', 'dimension', 'medium')],
        time_columns=[_column('Date', 'time', data_type='date')],
        filter_columns=[_column('Status', 'filter', 'low'), _column('Channel', 'filter', 'low')],
    )


def _by_type(layout, visual_type):
    return [v for v in layout.visuals if v.type == visual_type]


@pytest.mark.unit
def test_style_set_depends_on_metric_count(full_analysis):
    assert [l.style for l in generate_layouts(full_analysis)] == [
        'executive', 'detailed', 'compact', 'presentation'
    ]

    one_metric = _analysis(metrics=[_column('Sales', 'metric', total=10)])
    assert [l.style for l in generate_layouts(one_metric)] == ['executive', 'detailed', 'compact']


@pytest.mark.unit
def test_generation_is_idempotent(full_analysis):
    assert generate_layouts(full_analysis) == generate_layouts(full_analysis)


@pytest.mark.unit
def test_suggestion_ids_are_unique_within_layout(full_analysis):
    for layout in generate_layouts(full_analysis):
        ids = [v.id for v in layout.visuals]
        assert len(ids) == len(set(ids))
        assert all(i.startswith(f"{layout.id}-") for i in ids)


@pytest.mark.unit
def test_positions_are_within_declared_grid(full_analysis):
    for layout in generate_layouts(full_analysis):
        for visual in layout.visuals:
            pos = visual.position
            assert pos.col + pos.col_span <= layout.grid_columns
            assert pos.row + pos.row_span <= layout.grid_rows
            assert 0 <= visual.confidence <= 100


@pytest.mark.unit
def test_executive_layout(full_analysis):
    layout = generate_executive_layout(full_analysis)

    assert (layout.grid_columns, layout.grid_rows) == (4, 4)
    assert layout.estimated_build_time == '30 seconds'

    kpis = _by_type(layout, 'kpi-card')
    assert [k.data_binding['field'] for k in kpis] == ['m0', 'm1', 'm2', 'm3']
    assert [(k.position.row, k.position.col) for k in kpis] == [(0, 0), (0, 1), (0, 2), (0, 3)]
    assert kpis[0].reason == 'Key metric: m0 (1,000 total)'
    assert kpis[0].title == 'M0'

    line = _by_type(layout, 'line-chart')[0]
    assert line.data_binding == {'xAxis': 'Date', 'series': ['m0']}
    assert (line.position.row_span, line.position.col_span) == (2, 2)
    assert _by_type(layout, 'bar-chart') == []

    pie = _by_type(layout, 'pie-chart')[0]
    assert pie.data_binding == {'category': 'Region', 'value': 'm0'}
    assert pie.priority == 'secondary'

    slicer = _by_type(layout, 'slicer')[0]
    assert slicer.data_binding == {'field': 'Status'}
    assert (slicer.position.row, slicer.position.col) == (0, 3)


@pytest.mark.unit
def test_executive_falls_back_to_bar_chart_without_time():
    analysis = _analysis(
        metrics=[_column('Sales', 'metric', total=10)],
        dimensions=[_column('Region', 'dimension', 'medium')],
    )
    layout = generate_executive_layout(analysis)

    bar = _by_type(layout, 'bar-chart')[0]
    assert bar.title == 'Sales by Region'
    assert bar.data_binding == {'category': 'Region', 'value': 'Sales'}
    # No low-cardinality dimension: the pie uses the first dimension
    assert _by_type(layout, 'pie-chart')[0].data_binding['category'] == 'Region'


@pytest.mark.unit
def test_detailed_layout(full_analysis):
    layout = generate_detailed_layout(full_analysis)

    assert (layout.grid_columns, layout.grid_rows) == (6, 7)
    kpis = _by_type(layout, 'kpi-card')
    assert len(kpis) == 5
    assert [k.priority for k in kpis] == ['primary', 'primary', 'primary', 'secondary', 'secondary']

    assert _by_type(layout, 'line-chart')[0].data_binding['series'] == ['m0', 'm1']

    matrix = _by_type(layout, 'matrix')[0]
    assert matrix.data_binding == {'rowFields': ['Region'], 'columnFields': ['Product'], 'valueField': 'm0'}

    treemap = _by_type(layout, 'treemap')[0]
    assert treemap.data_binding['categoryField'] == 'Product'

    slicers = _by_type(layout, 'slicer')
    assert [(s.position.row, s.position.col) for s in slicers] == [(0, 5), (1, 5)]

    table = _by_type(layout, 'data-table')[0]
    assert table.data_binding == {'columns': ['Region', 'Product', 'm0', 'm1', 'm2']}
    assert (table.position.row, table.position.col_span) == (5, 5)


@pytest.mark.unit
def test_detailed_layout_always_has_table():
    layout = generate_detailed_layout(empty_analysis())
    assert [v.type for v in layout.visuals] == ['data-table']
    assert layout.visuals[0].data_binding == {'columns': []}


@pytest.mark.unit
def test_compact_layout(full_analysis):
    layout = generate_compact_layout(full_analysis)
    assert [v.type for v in layout.visuals] == ['kpi-card', 'kpi-card', 'kpi-card', 'line-chart']
    assert layout.estimated_build_time == '15 seconds'


@pytest.mark.unit
def test_presentation_layout(full_analysis):
    layout = generate_presentation_layout(full_analysis)

    kpis = _by_type(layout, 'kpi-card')
    assert [(k.position.col, k.position.col_span) for k in kpis] == [(0, 2), (2, 2)]

    gauge = _by_type(layout, 'gauge')[0]
    assert gauge.data_binding == {'field': 'm0', 'minValue': 0, 'maxValue': 500}

    funnel = _by_type(layout, 'funnel')[0]
    assert funnel.data_binding == {'stageField': 'Region', 'valueField': 'm0'}


@pytest.mark.unit
def test_empty_analysis_still_produces_layouts():
    layouts = generate_layouts(empty_analysis())

    assert [l.id for l in layouts] == ['executive', 'detailed', 'compact']
    assert layouts[0].visuals == []
    assert layouts[2].visuals == []


@pytest.mark.unit
def test_end_to_end_month_revenue_region(sales_rows):
    layouts = generate_layouts(analyze_dataset(sales_rows))
    executive = layouts[0]
    assert [v.type for v in executive.visuals] == ['kpi-card', 'line-chart', 'slicer']

    preferred = analyze_dataset(sales_rows, KeywordRoleClassifier(prefer_dimension_keywords=True))
    executive = generate_layouts(preferred)[0]
    assert [v.type for v in executive.visuals] == ['kpi-card', 'line-chart', 'pie-chart']
