"""
Bias Flags - Threshold metrics into flags and recommendations.

Flags:
- DISPARATE_IMPACT (HIGH) when disparate impact < threshold (0.8)
- STATISTICAL_PARITY (HIGH above 0.2, else MEDIUM) when parity difference > threshold (0.1)
- EQUAL_OPPORTUNITY (MEDIUM) when a ground-truth TPR gap > threshold (0.1)

Recommendations:
- DATA_BALANCING (HIGH) for under-represented groups
- THRESHOLD_ADJUSTMENT (MEDIUM) for every disparate impact flag
- MODEL_RETRAINING (HIGH) when the overall bias score exceeds 0.3
"""

from typing import Dict, List, Mapping

import numpy as np

from shared.config import AnalysisConfig, DEFAULT_CONFIG
from shared.constants import (
    HIGH_PARITY_DIFFERENCE,
    RETRAINING_BIAS_SCORE,
    RISK_LEVEL_THRESHOLDS,
    UNDERREPRESENTED_GROUP_RATIO,
)
from shared.logging import get_logger, log_bias_detection
from shared.schemas import (
    BiasFlag,
    FairnessMetricSet,
    GroupAnalysis,
    OverallMetrics,
    Recommendation,
)
from shared.validation import safe_divide

logger = get_logger(__name__)

MetricsByAttribute = Mapping[str, Mapping[str, FairnessMetricSet]]


def generate_flags(
    metrics: MetricsByAttribute,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> List[BiasFlag]:
    """
    Flags for every (attribute, target) metric set crossing a threshold.

    Args:
        metrics: attribute -> target -> FairnessMetricSet
        config: Analysis configuration (thresholds)

    Returns:
        List of BiasFlag, in attribute/target order
    """
    flags = []

    for attribute, by_target in metrics.items():
        for target, m in by_target.items():
            if m.disparate_impact < config.disparate_impact_threshold:
                flags.append(BiasFlag(
                    type="DISPARATE_IMPACT",
                    severity="HIGH",
                    attribute=attribute,
                    target=target,
                    value=m.disparate_impact,
                    threshold=config.disparate_impact_threshold,
                    message=(
                        f"Disparate impact of {m.disparate_impact:.3f} for '{attribute}' "
                        f"on '{target}' is below {config.disparate_impact_threshold}"
                    ),
                ))

            if m.statistical_parity_diff > config.statistical_parity_threshold:
                severity = "HIGH" if m.statistical_parity_diff > HIGH_PARITY_DIFFERENCE else "MEDIUM"
                flags.append(BiasFlag(
                    type="STATISTICAL_PARITY",
                    severity=severity,
                    attribute=attribute,
                    target=target,
                    value=m.statistical_parity_diff,
                    threshold=config.statistical_parity_threshold,
                    message=(
                        f"Positive rates for '{attribute}' on '{target}' differ by "
                        f"{m.statistical_parity_diff:.1%} "
                        f"(threshold {config.statistical_parity_threshold:.1%})"
                    ),
                ))

            # The proxy duplicates statistical parity, so only ground truth is flagged
            if (m.equal_opportunity_source == "true_positive_rate"
                    and m.equal_opportunity > config.equal_opportunity_threshold):
                flags.append(BiasFlag(
                    type="EQUAL_OPPORTUNITY",
                    severity="MEDIUM",
                    attribute=attribute,
                    target=target,
                    value=m.equal_opportunity,
                    threshold=config.equal_opportunity_threshold,
                    message=(
                        f"True positive rates for '{attribute}' on '{target}' differ by "
                        f"{m.equal_opportunity:.1%}"
                    ),
                ))

    for attribute in metrics:
        affected = sorted({f.target for f in flags if f.attribute == attribute})
        severity = "HIGH" if any(
            f.severity == "HIGH" for f in flags if f.attribute == attribute
        ) else "MEDIUM"
        log_bias_detection(logger, attribute, bool(affected), severity, affected)

    return flags


def underrepresented_groups(groups: Mapping[str, GroupAnalysis]) -> List[GroupAnalysis]:
    """
    Groups that are small relative to the rest of the partition.

    A group is under-represented when its count is below half the average
    group size, or below half the largest group's count. The second rule
    goes beyond the plain half-average rule and flags more groups: with
    counts 100/100/45 the average is about 81.7, so only the largest-group
    rule flags the group of 45.
    """
    if len(groups) < 2:
        return []

    counts = [g.count for g in groups.values()]
    average = float(np.mean(counts))
    largest = max(counts)

    return [
        g for g in groups.values()
        if g.count < UNDERREPRESENTED_GROUP_RATIO * average
        or g.count < UNDERREPRESENTED_GROUP_RATIO * largest
    ]


def compute_overall_metrics(metrics: MetricsByAttribute) -> OverallMetrics:
    """
    Averages over every (attribute, target) pair.

    The most and least biased attributes are those holding the maximum and
    minimum bias severity of any of their targets.
    """
    metric_sets = [m for by_target in metrics.values() for m in by_target.values()]
    if not metric_sets:
        return OverallMetrics()

    most = max(metric_sets, key=lambda m: m.bias_severity)
    least = min(metric_sets, key=lambda m: m.bias_severity)

    return OverallMetrics(
        average_disparate_impact=float(np.mean([m.disparate_impact for m in metric_sets])),
        average_statistical_parity_diff=float(
            np.mean([m.statistical_parity_diff for m in metric_sets])
        ),
        average_bias_severity=float(np.mean([m.bias_severity for m in metric_sets])),
        pair_count=len(metric_sets),
        most_biased_attribute=most.attribute,
        most_biased_severity=most.bias_severity,
        least_biased_attribute=least.attribute,
        least_biased_severity=least.bias_severity,
    )


def generate_recommendations(
    group_analyses: Mapping[str, Mapping[str, GroupAnalysis]],
    flags: List[BiasFlag],
    overall: OverallMetrics,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> List[Recommendation]:
    """
    Mitigation recommendations from group sizes, flags and the overall score.

    Args:
        group_analyses: attribute -> group key -> GroupAnalysis
        flags: Flags raised for the analysis
        overall: Overall metrics
        config: Analysis configuration

    Returns:
        List of Recommendation
    """
    recommendations = []

    for attribute, groups in group_analyses.items():
        average = safe_divide(sum(g.count for g in groups.values()), len(groups))
        for group in underrepresented_groups(groups):
            recommendations.append(Recommendation(
                type="DATA_BALANCING",
                priority="HIGH",
                attribute=attribute,
                action=f"Collect more data or oversample group '{group.key}' of '{attribute}'",
                details=(
                    f"Group '{group.key}' has {group.count} records "
                    f"({group.percentage:.1f}%), average group size is {average:.1f}"
                ),
            ))

    for flag in flags:
        if flag.type != "DISPARATE_IMPACT":
            continue
        recommendations.append(Recommendation(
            type="THRESHOLD_ADJUSTMENT",
            priority="MEDIUM",
            attribute=flag.attribute,
            action=f"Adjust decision thresholds per '{flag.attribute}' group for '{flag.target}'",
            details=(
                f"Disparate impact {flag.value:.3f} is below {flag.threshold}; "
                f"group-specific thresholds can equalize positive rates"
            ),
        ))

    if overall.overall_bias_score > RETRAINING_BIAS_SCORE:
        recommendations.append(Recommendation(
            type="MODEL_RETRAINING",
            priority="HIGH",
            attribute=None,
            action="Retrain the model with fairness constraints or reweighted data",
            details=(
                f"Overall bias score {overall.overall_bias_score:.3f} exceeds "
                f"{RETRAINING_BIAS_SCORE}"
            ),
        ))

    logger.info(f"Generated {len(recommendations)} recommendation(s)")
    return recommendations


def risk_level(bias_score: float) -> str:
    """Bucket an overall bias score into LOW / MEDIUM / HIGH."""
    if bias_score > RISK_LEVEL_THRESHOLDS["HIGH"]:
        return "HIGH"
    if bias_score > RISK_LEVEL_THRESHOLDS["MEDIUM"]:
        return "MEDIUM"
    return "LOW"
