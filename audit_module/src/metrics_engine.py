"""
Metrics Engine - Core fairness metrics computation.

Implements disparate impact, statistical parity difference, equal opportunity
and bias severity from aggregated group statistics. Outcome values are read
through the fixed binary decision cutoff (value > 0.5 is a positive outcome).

Equal opportunity uses the group positive rate as a true-positive-rate proxy,
which makes it numerically identical to statistical parity. When a
'<target>_actual' ground-truth column is present the true TPR gap is used.
"""

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
from sklearn.metrics import confusion_matrix

from shared.config import AnalysisConfig, DEFAULT_CONFIG
from shared.constants import ACTUAL_COLUMN_SUFFIX
from shared.logging import get_logger, log_metric
from shared.schemas import FairnessMetricSet, GroupAnalysis
from shared.validation import safe_divide

from .dataset import Record

logger = get_logger(__name__)


# ----------------------------------------------------------------------
# Predicted / actual outcomes
# ----------------------------------------------------------------------

def actual_column_for(target: str) -> str:
    return f"{target}{ACTUAL_COLUMN_SUFFIX}"


def has_actual_column(records: Iterable[Record], target: str) -> bool:
    """Whether any record carries a numeric ground-truth value for the target."""
    actual = actual_column_for(target)
    return any(record.value(actual).is_number for record in records)


def outcome_pairs(
    records: Iterable[Record],
    target: str,
    threshold: float = 0.5,
    require_actual: bool = False,
) -> List[Tuple[int, int]]:
    """
    (actual, predicted) binary outcomes per record.

    predicted = target value > threshold. actual comes from the
    '<target>_actual' column when the record has a numeric value there,
    otherwise from the target column itself. Records without a numeric
    target value are skipped, and with `require_actual` so are records
    without a numeric ground-truth value.
    """
    actual_column = actual_column_for(target)
    pairs = []
    for record in records:
        predicted = record.number(target)
        if predicted is None:
            continue
        actual = record.number(actual_column)
        if actual is None:
            if require_actual:
                continue
            actual = predicted
        pairs.append((int(actual > threshold), int(predicted > threshold)))
    return pairs


def confusion_counts(pairs: Sequence[Tuple[int, int]]) -> Dict[str, int]:
    """
    Confusion matrix counts of (actual, predicted) pairs.

    Returns:
        Dictionary with 'tn', 'fp', 'fn', 'tp'
    """
    if len(pairs) == 0:
        return {"tn": 0, "fp": 0, "fn": 0, "tp": 0}

    y_true = np.array([p[0] for p in pairs])
    y_pred = np.array([p[1] for p in pairs])
    tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[0, 1]).ravel()
    return {"tn": int(tn), "fp": int(fp), "fn": int(fn), "tp": int(tp)}


# ----------------------------------------------------------------------
# Core metrics
# ----------------------------------------------------------------------

def disparate_impact(rates: Iterable[float]) -> float:
    """
    Ratio of the lowest to the highest positive rate.

    0.0 when there are no rates or the highest rate is 0.
    """
    rates = list(rates)
    if not rates:
        return 0.0
    return safe_divide(min(rates), max(rates))


def statistical_parity_difference(rates: Iterable[float]) -> float:
    """Gap between the highest and lowest positive rate."""
    rates = list(rates)
    if not rates:
        return 0.0
    return max(rates) - min(rates)


def bias_severity(disparate_impact_value: float, parity_difference: float) -> float:
    """max(|1 - disparate impact|, statistical parity difference)."""
    return max(abs(1.0 - disparate_impact_value), parity_difference)


def positive_rates_for_target(
    groups: Mapping[str, GroupAnalysis],
    target: str,
) -> Dict[str, float]:
    """Group -> positive rate, skipping groups without data for the target."""
    return {
        key: group.target_stats[target].positive_rate
        for key, group in groups.items()
        if target in group.target_stats
    }


def true_positive_rates(
    groups: Mapping[str, GroupAnalysis],
    target: str,
    threshold: float = 0.5,
) -> Dict[str, float]:
    """
    Group -> TPR against the ground-truth column, for groups with actual positives.

    Only records with a numeric '<target>_actual' value are counted.
    """
    rates = {}
    for key, group in groups.items():
        pairs = outcome_pairs(group.members, target, threshold, require_actual=True)
        counts = confusion_counts(pairs)
        if counts["tp"] + counts["fn"] > 0:
            rates[key] = safe_divide(counts["tp"], counts["tp"] + counts["fn"])
    return rates


def compute_metric_set(
    groups: Mapping[str, GroupAnalysis],
    attribute: str,
    target: str,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> Optional[FairnessMetricSet]:
    """
    Core metrics for one (attribute, target) pair.

    Returns:
        FairnessMetricSet, or None when fewer than 2 groups have data
    """
    rates = positive_rates_for_target(groups, target)
    if len(rates) < 2:
        logger.debug(
            f"Skipping {attribute}/{target}: {len(rates)} group(s) with target data"
        )
        return None

    di = disparate_impact(rates.values())
    spd = statistical_parity_difference(rates.values())

    # TPR proxy: identical to statistical parity without ground truth
    equal_opportunity = statistical_parity_difference(rates.values())
    source = "positive_rate_proxy"

    all_members = (r for g in groups.values() for r in g.members)
    if has_actual_column(all_members, target):
        tprs = true_positive_rates(groups, target, config.decision_threshold)
        if len(tprs) >= 2:
            equal_opportunity = statistical_parity_difference(tprs.values())
            source = "true_positive_rate"

    severity = bias_severity(di, spd)

    context = {"attribute": attribute, "target": target}
    log_metric(logger, "disparate_impact", di, context)
    log_metric(logger, "statistical_parity_diff", spd, context)
    log_metric(logger, "bias_severity", severity, context)

    return FairnessMetricSet(
        attribute=attribute,
        target=target,
        disparate_impact=di,
        statistical_parity_diff=spd,
        equal_opportunity=equal_opportunity,
        bias_severity=severity,
        positive_rates=rates,
        equal_opportunity_source=source,
    )


def compute_fairness_metrics(
    groups: Mapping[str, GroupAnalysis],
    attribute: str,
    target_columns: Sequence[str],
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> Dict[str, FairnessMetricSet]:
    """
    Core metrics for every target of one attribute.

    Targets with fewer than 2 groups of data are left out, so an attribute
    without any qualifying target yields an empty map.

    Args:
        groups: Group analysis for the attribute
        attribute: Attribute (or composite attribute) name
        target_columns: Target columns
        config: Analysis configuration

    Returns:
        Dictionary mapping target -> FairnessMetricSet
    """
    metrics = {}
    for target in target_columns:
        metric_set = compute_metric_set(groups, attribute, target, config)
        if metric_set is not None:
            metrics[target] = metric_set
    return metrics


def interpret_metric_set(metric_set: FairnessMetricSet,
                         config: AnalysisConfig = DEFAULT_CONFIG) -> str:
    """
    Human-readable interpretation of a metric set.

    Example:
        >>> interpret_metric_set(metrics["gender"]["approved"])
        'gender/approved: UNFAIR (disparate impact=0.667, parity difference=0.300) ...'
    """
    is_fair = (
        metric_set.disparate_impact >= config.disparate_impact_threshold
        and metric_set.statistical_parity_diff <= config.statistical_parity_threshold
    )
    status = "FAIR" if is_fair else "UNFAIR"

    rate_summary = ", ".join(f"{g}: {r:.3f}" for g, r in metric_set.positive_rates.items())

    interpretation = (
        f"{metric_set.attribute}/{metric_set.target}: {status} "
        f"(disparate impact={metric_set.disparate_impact:.3f}, "
        f"parity difference={metric_set.statistical_parity_diff:.3f}). "
        f"Positive rates: {rate_summary}. "
    )
    if is_fair:
        interpretation += "Groups receive positive outcomes at similar rates."
    else:
        interpretation += "Significant disparity in positive outcome rates across groups."
    return interpretation
