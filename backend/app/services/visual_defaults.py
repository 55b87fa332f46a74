"""
Per-type visual defaults and conversion of layout suggestions into placed
visuals.
"""
import copy
import uuid
from typing import Any, Dict, Optional

from app.core.schemas import CanvasSize, LayoutSuggestion, Visual, VisualSuggestion, VisualType
from app.services.grid import DEFAULT_GAP, DEFAULT_PADDING, grid_to_pixels

CHART_COLORS = [
    '#52B788',  # Green (primary)
    '#3B82F6',  # Blue
    '#F59E0B',  # Amber
    '#EF4444',  # Red
    '#8B5CF6',  # Purple
    '#06B6D4',  # Cyan
    '#EC4899',  # Pink
    '#84CC16',  # Lime
]

SERIES_COLORS = CHART_COLORS[:4]


def get_chart_color(index: int) -> str:
    return CHART_COLORS[index % len(CHART_COLORS)]


VISUAL_DEFAULTS: Dict[str, Dict[str, Any]] = {
    'kpi-card': {
        'position': {'x': 50, 'y': 50, 'width': 250, 'height': 150},
        'data': {'field': None, 'aggregation': 'SUM', 'format': 'number', 'decimals': 0, 'prefix': '', 'suffix': ''},
        'style': {'title': 'KPI Card', 'showTrend': False, 'trendField': None, 'icon': None},
        'conditional_formatting': [],
    },
    'line-chart': {
        'position': {'x': 50, 'y': 50, 'width': 500, 'height': 300},
        'data': {'xAxis': {'field': None, 'type': 'category'}, 'series': []},
        'style': {
            'title': 'Line Chart',
            'showGrid': True,
            'showLegend': True,
            'legendPosition': 'bottom',
            'curved': True,
            'showDataLabels': False,
        },
    },
    'bar-chart': {
        'position': {'x': 50, 'y': 50, 'width': 500, 'height': 300},
        'data': {'category': {'field': None}, 'values': []},
        'style': {
            'title': 'Bar Chart',
            'orientation': 'vertical',
            'stacked': False,
            'showGrid': True,
            'showLegend': True,
            'showDataLabels': False,
        },
    },
    'pie-chart': {
        'position': {'x': 50, 'y': 50, 'width': 350, 'height': 350},
        'data': {'category': {'field': None}, 'value': {'field': None, 'aggregation': 'SUM'}},
        'style': {
            'title': 'Pie Chart',
            'donut': False,
            'innerRadius': 0,
            'showLabels': True,
            'showPercent': True,
            'showLegend': True,
            'colors': list(CHART_COLORS),
        },
    },
    'data-table': {
        'position': {'x': 50, 'y': 50, 'width': 600, 'height': 400},
        'data': {'columns': []},
        'style': {'title': 'Data Table', 'pageSize': 10, 'showPagination': True, 'striped': True, 'compact': False},
    },
    'slicer': {
        'position': {'x': 50, 'y': 50, 'width': 200, 'height': 250},
        'data': {'field': None},
        'style': {
            'title': 'Slicer',
            'displayMode': 'list',
            'multiSelect': True,
            'searchable': True,
            'showSelectAll': True,
        },
    },
    'gauge': {
        'position': {'x': 50, 'y': 50, 'width': 300, 'height': 250},
        'data': {'field': None, 'minValue': 0, 'maxValue': 100, 'aggregation': 'SUM'},
        'style': {
            'title': 'Gauge',
            'showValue': True,
            'showPercent': True,
            'colorRanges': [
                {'from': 0, 'to': 33, 'color': '#EF4444'},
                {'from': 33, 'to': 66, 'color': '#F59E0B'},
                {'from': 66, 'to': 100, 'color': '#52B788'},
            ],
        },
    },
    'funnel': {
        'position': {'x': 50, 'y': 50, 'width': 400, 'height': 300},
        'data': {'stageField': None, 'valueField': None},
        'style': {'title': 'Funnel', 'showLabels': True, 'showPercent': True, 'showConversion': True},
    },
    'treemap': {
        'position': {'x': 50, 'y': 50, 'width': 450, 'height': 350},
        'data': {'categoryField': None, 'valueField': None},
        'style': {
            'title': 'Treemap',
            'showLabels': True,
            'showValues': True,
            'labelPosition': 'center',
            'valueFormat': 'number',
            'colorPalette': list(CHART_COLORS),
        },
    },
    'matrix': {
        'position': {'x': 50, 'y': 50, 'width': 500, 'height': 400},
        'data': {'rowFields': [], 'columnFields': [], 'valueField': None, 'aggregation': 'SUM'},
        'style': {
            'title': 'Matrix',
            'showRowTotals': True,
            'showColumnTotals': True,
            'showGrandTotal': True,
            'heatmapEnabled': False,
            'heatmapColors': {'low': '#3B82F6', 'mid': '#8B5CF6', 'high': '#EC4899'},
            'alternateRowColors': True,
            'alternateRowColor': 'rgba(255,255,255,0.02)',
            'compact': False,
        },
    },
}


def new_visual_id() -> str:
    return uuid.uuid4().hex[:12]


def get_visual_defaults(visual_type: VisualType) -> Dict[str, Any]:
    """Fresh copy of the defaults for a visual type."""
    return copy.deepcopy(VISUAL_DEFAULTS[visual_type])


def create_default_visual(
    visual_type: VisualType,
    x: Optional[float] = None,
    y: Optional[float] = None,
    visual_id: Optional[str] = None,
) -> Visual:
    defaults = get_visual_defaults(visual_type)
    position = defaults['position']
    if x is not None:
        position['x'] = x
    if y is not None:
        position['y'] = y

    return Visual(
        id=visual_id or new_visual_id(),
        type=visual_type,
        position=position,
        data=defaults['data'],
        style=defaults['style'],
        conditional_formatting=defaults.get('conditional_formatting'),
    )


def _list(value) -> list:
    return value if isinstance(value, list) else []


def map_data_binding(visual_type: VisualType, binding: Dict[str, Any]) -> Dict[str, Any]:
    """Translate a suggestion's flat data binding into the data shape of a visual type."""
    if visual_type == 'kpi-card':
        return {
            'field': binding.get('field'),
            'aggregation': binding.get('aggregation') or 'SUM',
            'format': 'number',
            'decimals': 0,
        }

    if visual_type == 'line-chart':
        return {
            'xAxis': {'field': binding.get('xAxis'), 'type': 'category'},
            'series': [
                {'field': field, 'aggregation': 'SUM', 'color': SERIES_COLORS[i % len(SERIES_COLORS)], 'label': field}
                for i, field in enumerate(_list(binding.get('series')))
            ],
        }

    if visual_type == 'bar-chart':
        return {
            'category': {'field': binding.get('category')},
            'values': [{
                'field': binding.get('value'),
                'aggregation': 'SUM',
                'color': CHART_COLORS[0],
                'label': binding.get('value') or 'Value',
            }],
        }

    if visual_type == 'pie-chart':
        return {
            'category': {'field': binding.get('category')},
            'value': {'field': binding.get('value'), 'aggregation': 'SUM'},
        }

    if visual_type == 'slicer':
        return {'field': binding.get('field')}

    if visual_type == 'data-table':
        return {
            'columns': [
                {'field': field, 'label': field, 'align': 'left'}
                for field in _list(binding.get('columns'))
            ],
        }

    if visual_type == 'gauge':
        return {
            'field': binding.get('field'),
            'minValue': binding.get('minValue') or 0,
            'maxValue': binding.get('maxValue') or 100,
            'aggregation': 'SUM',
        }

    if visual_type == 'funnel':
        return {'stageField': binding.get('stageField'), 'valueField': binding.get('valueField')}

    if visual_type == 'treemap':
        return {'categoryField': binding.get('categoryField'), 'valueField': binding.get('valueField')}

    if visual_type == 'matrix':
        return {
            'rowFields': _list(binding.get('rowFields')),
            'columnFields': _list(binding.get('columnFields')),
            'valueField': binding.get('valueField'),
            'aggregation': 'SUM',
        }

    return dict(binding)


def build_visual(
    suggestion: VisualSuggestion,
    layout: LayoutSuggestion,
    canvas: Optional[CanvasSize] = None,
    padding: float = DEFAULT_PADDING,
    gap: float = DEFAULT_GAP,
    visual_id: Optional[str] = None,
) -> Visual:
    """
    Place a suggestion on the canvas.

    Fills id, pixel position and the style title; data and style are
    shallow-merged over the defaults of the visual type.
    """
    canvas = canvas or CanvasSize()
    defaults = get_visual_defaults(suggestion.type)

    position = grid_to_pixels(
        suggestion.position,
        layout.grid_columns,
        layout.grid_rows,
        canvas.width,
        canvas.height,
        padding,
        gap,
    )

    return Visual(
        id=visual_id or new_visual_id(),
        type=suggestion.type,
        position=position,
        data={**defaults['data'], **map_data_binding(suggestion.type, suggestion.data_binding)},
        style={**defaults['style'], 'title': suggestion.title},
        conditional_formatting=defaults.get('conditional_formatting'),
    )
