"""
Group Aggregator - Partition records by attribute values.

Computes per-group counts, percentages and per-target descriptive statistics.
Groups of one attribute (or attribute combination) partition the dataset
exactly: every record lands in one group and percentages sum to 100.
"""

from typing import Dict, List, Optional, Sequence, Union

import numpy as np

from shared.config import AnalysisConfig, DEFAULT_CONFIG
from shared.constants import COMPOSITE_KEY_SEPARATOR, UNKNOWN_GROUP
from shared.logging import get_logger
from shared.schemas import GroupAnalysis, TargetStats
from shared.validation import safe_divide

from .dataset import Dataset, Record

logger = get_logger(__name__)

AttributeSpec = Union[str, Sequence[str]]


def median(values: Sequence[float]) -> float:
    """
    Median of a sequence.

    Average of the two middle elements for even lengths, 0.0 when empty.

    Example:
        >>> median([1, 2, 3]), median([1, 2, 3, 4])
        (2.0, 2.5)
    """
    if len(values) == 0:
        return 0.0
    return float(np.median(np.asarray(values, dtype=float)))


def sample_std(values: Sequence[float]) -> float:
    """Sample standard deviation (n-1 denominator), 0.0 when n < 2."""
    if len(values) < 2:
        return 0.0
    return float(np.std(np.asarray(values, dtype=float), ddof=1))


def positive_rate(values: Sequence[float], threshold: float = 0.5) -> float:
    """Fraction of values strictly above the decision threshold."""
    if len(values) == 0:
        return 0.0
    arr = np.asarray(values, dtype=float)
    return float(np.mean(arr > threshold))


def describe_values(
    values: Sequence[float],
    decision_threshold: float = 0.5,
) -> Optional[TargetStats]:
    """
    Descriptive statistics of a numeric sample.

    Returns:
        TargetStats, or None for an empty sample
    """
    if len(values) == 0:
        return None

    return TargetStats(
        count=len(values),
        mean=float(np.mean(np.asarray(values, dtype=float))),
        median=median(values),
        std=sample_std(values),
        positive_rate=positive_rate(values, decision_threshold),
    )


def _as_attribute_list(attributes: AttributeSpec) -> List[str]:
    if isinstance(attributes, str):
        return [attributes]
    return list(attributes)


def group_key(record: Record, attributes: AttributeSpec) -> str:
    """
    Group name of a record.

    Single attributes use the trimmed text of the value; combinations join
    the component keys with '_'. Empty values become 'Unknown'.
    """
    parts = []
    for attribute in _as_attribute_list(attributes):
        cell = record.value(attribute)
        parts.append(UNKNOWN_GROUP if cell.is_empty or not cell.text else cell.text)
    return COMPOSITE_KEY_SEPARATOR.join(parts)


def partition_records(dataset: Dataset, attributes: AttributeSpec) -> Dict[str, List[Record]]:
    """Split records by group key, preserving first-appearance order."""
    partitions: Dict[str, List[Record]] = {}
    for record in dataset:
        partitions.setdefault(group_key(record, attributes), []).append(record)
    return partitions


def aggregate_groups(
    dataset: Dataset,
    attributes: AttributeSpec,
    target_columns: Sequence[str],
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> Dict[str, GroupAnalysis]:
    """
    Aggregate records into groups with per-target statistics.

    A target with no numeric values inside a group has no stats entry for
    that group.

    Args:
        dataset: Dataset snapshot
        attributes: Attribute name, or a sequence of names for composite groups
        target_columns: Target columns to describe
        config: Analysis configuration (decision threshold)

    Returns:
        Dictionary mapping group key -> GroupAnalysis

    Example:
        >>> groups = aggregate_groups(dataset, "gender", ["approved"])
        >>> groups["Female"].target_stats["approved"].positive_rate
        0.6
    """
    total = len(dataset)
    groups: Dict[str, GroupAnalysis] = {}

    for key, members in partition_records(dataset, attributes).items():
        target_stats = {}
        for target in target_columns:
            values = [r.number(target) for r in members if r.value(target).is_number]
            stats = describe_values(values, config.decision_threshold)
            if stats is not None:
                target_stats[target] = stats

        groups[key] = GroupAnalysis(
            key=key,
            members=tuple(members),
            count=len(members),
            percentage=safe_divide(len(members), total) * 100,
            target_stats=target_stats,
        )

    logger.debug(
        f"Aggregated {total} records into {len(groups)} groups by {attributes}"
    )
    return groups
