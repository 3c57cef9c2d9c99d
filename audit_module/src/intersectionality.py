"""
Intersectionality Analysis - Fairness across combinations of protected attributes.

Handles analysis of fairness when considering multiple demographic dimensions
simultaneously (e.g., gender x race). Composite groups are keyed
'value1_value2' and results are keyed 'attr1_x_attr2'.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple, TypeVar

from shared.config import AnalysisConfig, DEFAULT_CONFIG
from shared.constants import INTERSECTION_SEPARATOR
from shared.logging import get_logger

from .dataset import Dataset
from .group_aggregator import aggregate_groups
from .metrics_engine import compute_fairness_metrics

logger = get_logger(__name__)

T = TypeVar("T")


def combinations(items: Sequence[T], k: int) -> List[Tuple[T, ...]]:
    """
    All k-element subsets of a sequence, in input order.

    Each head element is followed by every (k-1)-subset of the items after it.

    Example:
        >>> combinations(["gender", "race", "age"], 2)
        [('gender', 'race'), ('gender', 'age'), ('race', 'age')]
    """
    if k == 0:
        return [()]
    if k < 0 or k > len(items):
        return []

    result = []
    for index, head in enumerate(items):
        for tail in combinations(items[index + 1:], k - 1):
            result.append((head,) + tail)
    return result


def intersection_key(attributes: Sequence[str]) -> str:
    return INTERSECTION_SEPARATOR.join(attributes)


def analyze_intersection(
    dataset: Dataset,
    attributes: Sequence[str],
    target_columns: Sequence[str],
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> Dict[str, Any]:
    """
    Aggregation and core metrics over composite groups of several attributes.

    Returns:
        Dictionary with 'attributes', 'groups', 'metrics', 'max_bias_severity'
    """
    key = intersection_key(attributes)
    groups = aggregate_groups(dataset, attributes, target_columns, config)
    metrics = compute_fairness_metrics(groups, key, target_columns, config)

    severities = [m.bias_severity for m in metrics.values()]
    max_severity: Optional[float] = max(severities) if severities else None

    return {
        "attributes": list(attributes),
        "groups": groups,
        "metrics": metrics,
        "n_groups": len(groups),
        "max_bias_severity": max_severity,
    }


def analyze_intersectional_bias(
    dataset: Dataset,
    protected_attributes: Sequence[str],
    target_columns: Sequence[str],
    config: AnalysisConfig = DEFAULT_CONFIG,
    size: int = 2,
) -> Dict[str, Dict[str, Any]]:
    """
    Intersectional analysis over every attribute combination of a given size.

    Requires at least `size` protected attributes; returns an empty map
    otherwise.

    Args:
        dataset: Dataset snapshot
        protected_attributes: Profiled protected attributes
        target_columns: Target columns
        config: Analysis configuration
        size: Number of attributes per combination

    Returns:
        Dictionary mapping 'attr1_x_attr2' -> intersection analysis

    Example:
        >>> results = analyze_intersectional_bias(dataset, ["gender", "race"], ["approved"])
        >>> results["gender_x_race"]["metrics"]["approved"].disparate_impact
    """
    if len(protected_attributes) < size:
        logger.info(
            f"Intersectional analysis skipped: {len(protected_attributes)} protected "
            f"attribute(s), {size} required"
        )
        return {}

    results = {}
    for combo in combinations(list(protected_attributes), size):
        results[intersection_key(combo)] = analyze_intersection(
            dataset, combo, target_columns, config
        )

    logger.info(f"Intersectional analysis: {len(results)} combination(s) analyzed")
    return results
