"""
Correlation Analysis - Proxy-bias risk of non-protected features.

Computes the Pearson correlation between each protected attribute and each
column that is neither protected nor a target, over record pairs where both
values are numbers, and buckets the strength into a risk level.
"""

from typing import Any, Dict, Sequence

import numpy as np

from shared.constants import CORRELATION_RECOMMENDATIONS, CORRELATION_RISK_THRESHOLDS
from shared.logging import get_logger, log_bias_detection
from shared.schemas import ColumnProfileSummary

from .dataset import Dataset

logger = get_logger(__name__)


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson r of two equal-length samples.

    0.0 with fewer than 2 pairs or zero variance in either sample.
    """
    if len(x) < 2 or len(x) != len(y):
        return 0.0

    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if np.std(x) == 0 or np.std(y) == 0:
        return 0.0

    return float(np.corrcoef(x, y)[0, 1])


def paired_numeric_values(dataset: Dataset, column_a: str, column_b: str):
    """Values of two columns for records where both are numbers."""
    xs, ys = [], []
    for record in dataset:
        a, b = record.value(column_a), record.value(column_b)
        if a.is_number and b.is_number:
            xs.append(a.number)
            ys.append(b.number)
    return xs, ys


def correlation_risk(correlation: float) -> str:
    strength = abs(correlation)
    if strength > CORRELATION_RISK_THRESHOLDS["high"]:
        return "HIGH"
    if strength > CORRELATION_RISK_THRESHOLDS["medium"]:
        return "MEDIUM"
    return "LOW"


def analyze_feature_correlations(
    dataset: Dataset,
    profile: ColumnProfileSummary,
) -> Dict[str, Dict[str, Dict[str, Any]]]:
    """
    Proxy-risk report for every (protected attribute, feature) pair.

    Args:
        dataset: Dataset snapshot
        profile: Column profile (protected and target lists)

    Returns:
        Dictionary mapping attribute -> feature -> {'correlation', 'risk_level',
        'recommendation', 'n_pairs'}
    """
    excluded = set(profile.protected_attributes) | set(profile.target_columns)
    features = [c for c in profile.all_columns if c not in excluded]

    results = {}
    for attribute in profile.protected_attributes:
        report = {}
        for feature in features:
            xs, ys = paired_numeric_values(dataset, attribute, feature)
            correlation = pearson_correlation(xs, ys)
            risk = correlation_risk(correlation)
            report[feature] = {
                "correlation": correlation,
                "risk_level": risk,
                "recommendation": CORRELATION_RECOMMENDATIONS[risk],
                "n_pairs": len(xs),
            }

        proxies = [f for f, r in report.items() if r["risk_level"] == "HIGH"]
        log_bias_detection(logger, f"proxy ({attribute})", bool(proxies), "HIGH", proxies)
        results[attribute] = report

    return results
