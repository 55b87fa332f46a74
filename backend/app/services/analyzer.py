"""
Dataset analysis service.

Runs the column classifier over every column of a dataset and aggregates the
results into a single DataAnalysisResult with role partitions, a suggested
dashboard title, a data quality grade and advisory warnings.
"""
import logging
import re
from typing import Any, Dict, List, Optional

from app.core.performance import track_performance
from app.core.sanitization import sanitize_for_logging
from app.core.schemas import ColumnAnalysis, DataAnalysisResult, DataQuality
from app.services.classifier import ColumnRoleClassifier, analyze_column, column_values

logger = logging.getLogger(__name__)


def format_column_name(name: str) -> str:
    """
    Turn a raw column name into a display title.

    Underscores become spaces, camelCase is split and every word is
    title-cased: "total_revenue" -> "Total Revenue", "unitPrice" -> "Unit Price".
    """
    spaced = re.sub(r'([A-Z])', r' \1', name.replace('_', ' '))
    return ' '.join(word.capitalize() for word in spaced.split())


def empty_analysis() -> DataAnalysisResult:
    return DataAnalysisResult(
        total_rows=0,
        total_columns=0,
        columns=[],
        metrics=[],
        dimensions=[],
        time_columns=[],
        filter_columns=[],
        suggested_title='Empty Dashboard',
        data_quality='poor',
        warnings=['No data provided'],
    )


def generate_title(metrics: List[ColumnAnalysis], dimensions: List[ColumnAnalysis]) -> str:
    if not metrics and not dimensions:
        return 'Data Dashboard'

    if metrics and dimensions:
        return f"{format_column_name(metrics[0].name)} by {format_column_name(dimensions[0].name)}"

    if metrics:
        return f"{format_column_name(metrics[0].name)} Analysis"

    return f"{format_column_name(dimensions[0].name)} Dashboard"


def assess_data_quality(rows: List[Dict[str, Any]], columns: List[ColumnAnalysis]) -> DataQuality:
    """
    Score the dataset out of 100 and bucket it.

    Penalties: half the average null fraction (as a percentage), 30 points
    under 10 rows or 15 under 50 rows, and 30 points when fewer than two
    non-identifier columns exist. >= 70 is good, >= 40 medium, else poor.
    """
    score = 100.0

    if columns:
        null_fraction = sum(
            float(column_values(col.name, rows).isna().mean()) for col in columns
        ) / len(columns)
        score -= null_fraction * 50

    if len(rows) < 10:
        score -= 30
    elif len(rows) < 50:
        score -= 15

    useful_columns = [c for c in columns if c.role != 'identifier']
    if len(useful_columns) < 2:
        score -= 30

    if score >= 70:
        return 'good'
    if score >= 40:
        return 'medium'
    return 'poor'


def generate_warnings(columns: List[ColumnAnalysis], row_count: int) -> List[str]:
    warnings = []

    if not any(c.role == 'metric' for c in columns):
        warnings.append('No numeric columns found for metrics. Consider adding value columns.')

    if not any(c.role == 'dimension' for c in columns):
        warnings.append('No categorical columns found. Charts may be limited.')

    if row_count < 10:
        warnings.append('Very few data rows. Dashboard may look sparse.')

    high_card_dimensions = [c.name for c in columns if c.role == 'dimension' and c.cardinality == 'high']
    if high_card_dimensions:
        warnings.append(f"High cardinality in: {', '.join(high_card_dimensions)}. Consider filtering.")

    return warnings


@track_performance("analyze_dataset")
def analyze_dataset(
    rows: List[Dict[str, Any]],
    role_classifier: Optional[ColumnRoleClassifier] = None,
) -> DataAnalysisResult:
    """
    Analyze a row-oriented dataset.

    Only the keys of the first row are treated as the column set. An empty
    dataset yields the canonical empty result instead of an error.
    """
    if not rows:
        logger.info("Analysis requested for an empty dataset")
        return empty_analysis()

    column_names = list(rows[0].keys())
    columns = [analyze_column(name, rows, role_classifier) for name in column_names]

    metrics = [c for c in columns if c.role == 'metric']
    dimensions = [c for c in columns if c.role == 'dimension']
    time_columns = [c for c in columns if c.role == 'time']
    filter_columns = [c for c in columns if c.role == 'filter']

    result = DataAnalysisResult(
        total_rows=len(rows),
        total_columns=len(column_names),
        columns=columns,
        metrics=metrics,
        dimensions=dimensions,
        time_columns=time_columns,
        filter_columns=filter_columns,
        suggested_title=generate_title(metrics, dimensions),
        data_quality=assess_data_quality(rows, columns),
        warnings=generate_warnings(columns, len(rows)),
    )

    logger.info(
        f"Analyzed dataset: {result.total_rows} rows, {result.total_columns} columns, "
        f"quality={result.data_quality}, title='{sanitize_for_logging(result.suggested_title)}'"
    )
    for col in columns:
        logger.debug(
            f"Column {sanitize_for_logging(str(col.name))}: type={col.data_type} "
            f"role={col.role} cardinality={col.cardinality}"
        )

    return result
