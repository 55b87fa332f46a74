"""
Column classification service.

Inspects a single column of a row-oriented dataset and infers its data type,
cardinality, semantic role, summary statistics and time-series nature using
deterministic heuristics.
"""
import logging
import re
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from app.core.schemas import (
    Cardinality,
    ColumnAnalysis,
    ColumnDataType,
    ColumnRole,
    ColumnStatistics,
    DateGranularity,
)

logger = logging.getLogger(__name__)

TYPE_SAMPLE_SIZE = 100
PATTERN_SAMPLE_SIZE = 10
TYPE_THRESHOLD = 0.9

IDENTIFIER_PATTERNS = ['id', '_id', 'key', 'code', 'uuid', 'guid']

TIME_PATTERNS = ['date', 'time', 'month', 'year', 'quarter', 'week', 'day', 'period']

METRIC_PATTERNS = [
    'revenue', 'sales', 'amount', 'total', 'sum', 'count', 'quantity',
    'price', 'cost', 'profit', 'margin', 'value', 'budget', 'actual',
    'target', 'rate', 'percent', 'ratio', 'score', 'units', 'volume',
]

DIMENSION_PATTERNS = [
    'region', 'country', 'city', 'state', 'category', 'type', 'status',
    'product', 'customer', 'segment', 'channel', 'department', 'team',
    'name', 'group', 'class', 'brand', 'vendor', 'supplier',
]

BOOLEAN_TOKENS = {'true', 'false', 'yes', 'no', '0', '1'}

# Values that look like time periods: 2024, Q1 2024, Jan..., 1/1/2024, 2024-01-01
YEAR_RE = re.compile(r'^\d{4}$')
QUARTER_RE = re.compile(r'^Q[1-4]\s*\d{4}$', re.IGNORECASE)
QUARTER_PREFIX_RE = re.compile(r'^Q[1-4]', re.IGNORECASE)
MONTH_RE = re.compile(r'^(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)', re.IGNORECASE)
SLASH_DATE_RE = re.compile(r'^\d{1,2}/\d{1,2}/\d{2,4}$')
ISO_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')

TIME_VALUE_PATTERNS = [YEAR_RE, QUARTER_RE, MONTH_RE, SLASH_DATE_RE, ISO_DATE_RE]


def _name_matches(name: str, patterns: List[str]) -> bool:
    name_lower = name.lower()
    return any(p in name_lower for p in patterns)


class ColumnRoleClassifier(ABC):
    """Strategy that assigns a semantic role to an already typed column."""

    @abstractmethod
    def classify(
        self,
        name: str,
        data_type: ColumnDataType,
        cardinality: Cardinality,
        values: pd.Series,
    ) -> ColumnRole:
        """Return the role for the column. Must be deterministic."""


class KeywordRoleClassifier(ColumnRoleClassifier):
    """
    English keyword heuristics over the column name, combined with data type
    and cardinality.

    Rules are evaluated in order and the first match wins:
    identifier, time, named metric, high-cardinality numeric, low-cardinality
    text filter, dimension keyword, type-based default.

    With ``prefer_dimension_keywords=True`` the dimension keyword rule is
    evaluated before the low-cardinality filter rule, so a "Region" column
    with four values becomes a dimension instead of a filter.
    """

    def __init__(self, prefer_dimension_keywords: bool = False):
        self.prefer_dimension_keywords = prefer_dimension_keywords

    def classify(self, name, data_type, cardinality, values):
        if _name_matches(name, IDENTIFIER_PATTERNS) and cardinality == 'high':
            return 'identifier'

        if _name_matches(name, TIME_PATTERNS) or data_type == 'date':
            return 'time'

        if data_type == 'number' and _name_matches(name, METRIC_PATTERNS):
            return 'metric'

        # High-cardinality numerics are treated as continuous measures
        if data_type == 'number' and cardinality == 'high':
            return 'metric'

        if self.prefer_dimension_keywords and _name_matches(name, DIMENSION_PATTERNS):
            return 'dimension'

        if cardinality == 'low' and data_type == 'text':
            return 'filter'

        if _name_matches(name, DIMENSION_PATTERNS):
            return 'dimension'

        if data_type == 'number':
            return 'metric'
        return 'dimension'


def display_value(value: Any) -> str:
    """Render a cell the way a spreadsheet shows it (2024.0 -> '2024')."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (float, np.floating)) and np.isfinite(value) and float(value).is_integer():
        return str(int(value))
    if isinstance(value, (datetime, pd.Timestamp)):
        return value.isoformat()
    return str(value).strip()


def to_numbers(values: pd.Series) -> pd.Series:
    """
    Coerce values to floats; unparseable, blank, boolean and non-finite
    values become NaN.
    """
    def _prepare(v):
        if isinstance(v, (bool, np.bool_)):
            return None
        if isinstance(v, (int, float, np.number)):
            return v
        text = str(v).strip()
        return text or None

    numeric = pd.to_numeric(values.map(_prepare), errors='coerce').astype(float)
    return numeric.where(np.isfinite(numeric))


def to_dates(values: pd.Series) -> pd.Series:
    """
    Coerce values to UTC timestamps. Bare numbers are never dates; strings
    must contain a digit. Years outside (1900, 2100) become NaT.
    """
    def _prepare(v):
        if isinstance(v, (bool, np.bool_, int, float, np.number)):
            return None
        if isinstance(v, (datetime, date)):
            return pd.Timestamp(v).isoformat()
        text = str(v).strip()
        if not any(ch.isdigit() for ch in text):
            return None
        return text

    prepared = values.map(_prepare)
    if prepared.isna().all():
        return pd.Series(pd.NaT, index=values.index, dtype='datetime64[ns, UTC]')

    parsed = pd.to_datetime(prepared, errors='coerce', utc=True, format='mixed')
    in_range = (parsed.dt.year > 1900) & (parsed.dt.year < 2100)
    return parsed.where(in_range)


def detect_data_type(values: pd.Series) -> ColumnDataType:
    """Detect the type of a non-null value series from its first 100 entries."""
    if values.empty:
        return 'text'

    sample = values.head(TYPE_SAMPLE_SIZE)
    size = len(sample)

    if to_numbers(sample).notna().sum() / size >= TYPE_THRESHOLD:
        return 'number'

    if to_dates(sample).notna().sum() / size >= TYPE_THRESHOLD:
        return 'date'

    bool_count = sum(
        1 for v in sample
        if isinstance(v, (bool, np.bool_)) or display_value(v).lower() in BOOLEAN_TOKENS
    )
    if bool_count / size >= TYPE_THRESHOLD:
        return 'boolean'

    return 'text'


def detect_cardinality(unique_count: int) -> Cardinality:
    if unique_count < 10:
        return 'low'
    if unique_count < 50:
        return 'medium'
    return 'high'


def is_time_series_column(name: str, role: ColumnRole, values: pd.Series) -> bool:
    if role == 'time' or _name_matches(name, TIME_PATTERNS):
        return True

    sample = [display_value(v) for v in values.head(PATTERN_SAMPLE_SIZE)]
    return any(p.search(v) for v in sample for p in TIME_VALUE_PATTERNS)


def detect_date_granularity(values: pd.Series) -> DateGranularity:
    """
    Granularity from textual patterns first (quarter, year, month), then
    from the span in days between the earliest and latest parseable date.
    """
    sample = [display_value(v) for v in values.head(PATTERN_SAMPLE_SIZE)]

    if any(QUARTER_PREFIX_RE.search(v) for v in sample):
        return 'quarter'
    if any(YEAR_RE.search(v) for v in sample):
        return 'year'
    if any(MONTH_RE.search(v) for v in sample):
        return 'month'

    dates = to_dates(values).dropna()
    if len(dates) >= 2:
        days = (dates.max() - dates.min()).total_seconds() / 86400

        if days > 365 * 2:
            return 'year'
        if days > 180:
            return 'quarter'
        if days > 60:
            return 'month'
        if days > 14:
            return 'week'

    return 'day'


def calculate_statistics(values: pd.Series) -> ColumnStatistics:
    nums = to_numbers(values).dropna()
    if nums.empty:
        return ColumnStatistics()

    return ColumnStatistics(
        min=float(nums.min()),
        max=float(nums.max()),
        avg=float(nums.mean()),
        sum=float(nums.sum()),
    )


def column_values(name: str, rows: List[Dict[str, Any]]) -> pd.Series:
    """All cells of a column as an object series; missing keys are None."""
    return pd.Series([row.get(name) for row in rows], dtype=object)


def analyze_column(
    name: str,
    rows: List[Dict[str, Any]],
    role_classifier: Optional[ColumnRoleClassifier] = None,
) -> ColumnAnalysis:
    """
    Classify one column of a dataset.

    Args:
        name: Column name (a key of the first row)
        rows: Full dataset as a list of row mappings
        role_classifier: Role strategy, defaults to KeywordRoleClassifier

    Returns:
        ColumnAnalysis for the column. Null and unparseable values are
        excluded from counts and statistics; this function does not raise
        on bad data.
    """
    role_classifier = role_classifier or KeywordRoleClassifier()

    series = column_values(name, rows)
    values = series[series.notna()].reset_index(drop=True)
    uniques = pd.unique(values)

    data_type = detect_data_type(values)
    cardinality = detect_cardinality(len(uniques))
    role = role_classifier.classify(name, data_type, cardinality, values)

    statistics = calculate_statistics(values) if data_type == 'number' else None

    is_time_series = is_time_series_column(name, role, values)
    granularity = detect_date_granularity(values) if is_time_series else None

    return ColumnAnalysis(
        name=name,
        data_type=data_type,
        role=role,
        unique_count=len(uniques),
        total_count=len(values),
        cardinality=cardinality,
        sample_values=list(uniques[:5]),
        statistics=statistics,
        is_time_series=is_time_series,
        date_granularity=granularity,
    )
