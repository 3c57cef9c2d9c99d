"""
Temporal Analysis - Bias score trend over monthly periods.

Detects date-like columns, buckets records into YYYY-MM periods, reruns
profiling + aggregation + metrics on each period and classifies the
resulting bias-score sequence as improving, worsening or stable.
"""

import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from shared.config import AnalysisConfig, DEFAULT_CONFIG
from shared.constants import DATE_SAMPLE_SIZE, TREND_THRESHOLD
from shared.logging import get_logger

from .bias_flags import compute_overall_metrics
from .column_profiler import profile_columns
from .dataset import CellValue, Dataset, ValueKind
from .group_aggregator import aggregate_groups
from .metrics_engine import compute_fairness_metrics

logger = get_logger(__name__)

# YYYY-MM or YYYY-MM-DD at the start of a string (time suffix allowed)
DATE_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})(?:-(\d{1,2}))?(?:$|[T\s])")


def looks_like_date(cell: CellValue) -> bool:
    if cell.kind is ValueKind.DATE:
        return True
    if cell.kind is ValueKind.TEXT:
        return DATE_PATTERN.match(cell.text) is not None
    return False


def detect_date_columns(dataset: Dataset) -> List[str]:
    """Columns where any of the first 5 sampled values looks like a date."""
    return [
        column for column in dataset.columns
        if any(looks_like_date(c) for c in dataset.sample_values(column, DATE_SAMPLE_SIZE))
    ]


def period_of(cell: CellValue) -> Optional[str]:
    """'YYYY-MM' period of a cell, or None when it is not a valid date."""
    if cell.kind is ValueKind.DATE:
        value = cell.raw
        if isinstance(value, (datetime, date)):
            return f"{value.year:04d}-{value.month:02d}"
        return None

    if cell.kind is ValueKind.TEXT:
        match = DATE_PATTERN.match(cell.text)
        if match:
            year, month = int(match.group(1)), int(match.group(2))
            if 1 <= month <= 12:
                return f"{year:04d}-{month:02d}"
    return None


def bucket_by_period(dataset: Dataset, column: str) -> Dict[str, Dataset]:
    """Chronologically sorted period -> sub-dataset; undated records are dropped."""
    buckets: Dict[str, list] = {}
    for record in dataset:
        period = period_of(record.value(column))
        if period is not None:
            buckets.setdefault(period, []).append(record)

    return {period: dataset.subset(buckets[period]) for period in sorted(buckets)}


def _half_averages(scores: Sequence[float]) -> Tuple[float, float]:
    """
    Averages of the first floor(n/2) and the last floor(n/2) scores.

    For odd n the middle score belongs to neither half.
    """
    n = len(scores)
    first = scores[: n // 2]
    second = scores[(n + 1) // 2:]
    return float(np.mean(first)), float(np.mean(second))


def classify_trend(scores: Sequence[float]) -> str:
    """
    Classify a chronological bias-score sequence.

    Example:
        >>> classify_trend([0.4, 0.35, 0.3, 0.2, 0.15, 0.1])
        'improving'
        >>> classify_trend([0.2])
        'insufficient_data'
    """
    if len(scores) < 2:
        return "insufficient_data"

    first_avg, second_avg = _half_averages(scores)
    change = first_avg - second_avg

    if change > TREND_THRESHOLD:
        return "improving"
    if change < -TREND_THRESHOLD:
        return "worsening"
    return "stable"


def period_bias_score(
    dataset: Dataset,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> Optional[Dict[str, Any]]:
    """
    Rerun profiling, aggregation and metrics on one period.

    Returns:
        Dictionary with the period's overall bias score, or None when the
        period has no protected attribute
    """
    profile = profile_columns(dataset, config)
    if not profile.protected_attributes:
        return None

    metrics = {}
    for attribute in profile.protected_attributes:
        groups = aggregate_groups(dataset, attribute, profile.target_columns, config)
        metrics[attribute] = compute_fairness_metrics(
            groups, attribute, profile.target_columns, config
        )

    overall = compute_overall_metrics(metrics)
    return {
        "record_count": len(dataset),
        "protected_attributes": list(profile.protected_attributes),
        "overall_bias_score": overall.overall_bias_score,
    }


def analyze_temporal_trends(
    dataset: Dataset,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> Dict[str, Dict[str, Any]]:
    """
    Temporal bias analysis for every detected date column.

    Args:
        dataset: Dataset snapshot
        config: Analysis configuration

    Returns:
        Dictionary mapping date column -> {'periods', 'trend',
        'first_half_average', 'second_half_average'}
    """
    results = {}

    for column in detect_date_columns(dataset):
        periods = []
        for period, subset in bucket_by_period(dataset, column).items():
            scored = period_bias_score(subset, config)
            if scored is None:
                logger.debug(f"Period {period} of '{column}' has no protected attribute")
                continue
            periods.append({"period": period, **scored})

        scores = [p["overall_bias_score"] for p in periods]
        trend = classify_trend(scores)

        first_avg = second_avg = None
        if len(scores) >= 2:
            first_avg, second_avg = _half_averages(scores)

        results[column] = {
            "periods": periods,
            "trend": trend,
            "first_half_average": first_avg,
            "second_half_average": second_avg,
        }
        logger.info(f"Temporal trend for '{column}': {trend} over {len(periods)} period(s)")

    return results
