"""
Advanced Metrics - Extended fairness notions per (attribute, target).

Implements equalized odds, calibration, individual fairness, counterfactual
fairness and treatment equality. Ground truth is read from a
'<target>_actual' column when present; otherwise the target column is its
own ground truth (documented fallback).

Pairwise comparisons are capped to deterministic record prefixes
(config.individual_fairness_limit / config.counterfactual_limit) so their
cost stays bounded regardless of dataset size.
"""

import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from shared.config import AnalysisConfig, DEFAULT_CONFIG
from shared.constants import CALIBRATION_BINS, EXTENDED_METRIC_THRESHOLDS
from shared.logging import get_logger, log_metric
from shared.schemas import GroupAnalysis
from shared.validation import safe_divide

from .dataset import Dataset, Record
from .metrics_engine import actual_column_for, confusion_counts, outcome_pairs

logger = get_logger(__name__)


def record_similarity(a: Record, b: Record, exclude: Iterable[str] = ()) -> float:
    """
    Similarity of two records over their shared, non-excluded fields.

    Numeric pairs contribute 1 - |a-b| / max(|a|, |b|, 1), equal text
    contributes 1, anything else 0. The result is the mean contribution,
    or 0.0 when no field is compared.

    Example:
        >>> a = Record.from_raw({"income": 100, "city": "Oslo"})
        >>> b = Record.from_raw({"income": 80, "city": "Oslo"})
        >>> record_similarity(a, b)
        0.9
    """
    excluded = set(exclude)
    fields = [c for c in a if c in b and c not in excluded]
    if not fields:
        return 0.0

    total = 0.0
    for column in fields:
        x, y = a[column], b[column]
        if x.is_number and y.is_number:
            scale = max(abs(x.number), abs(y.number), 1.0)
            total += 1.0 - abs(x.number - y.number) / scale
        elif not x.is_empty and not y.is_empty and x.text == y.text:
            total += 1.0

    return total / len(fields)


def _scored_outcomes(
    records: Iterable[Record],
    target: str,
    threshold: float,
) -> List[Tuple[float, int]]:
    """(score, actual) per record with a numeric score."""
    actual_column = actual_column_for(target)
    results = []
    for record in records:
        score = record.number(target)
        if score is None:
            continue
        actual = record.number(actual_column)
        if actual is None:
            actual = score
        results.append((score, int(actual > threshold)))
    return results


def _spread(values: Sequence[float]) -> float:
    return max(values) - min(values) if values else 0.0


def equalized_odds(
    groups: Mapping[str, GroupAnalysis],
    target: str,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> Dict[str, Any]:
    """
    TPR and FPR per group and their cross-group gaps.

    satisfies = both gaps below 0.1.
    """
    group_rates = {}
    for key, group in groups.items():
        pairs = outcome_pairs(group.members, target, config.decision_threshold)
        if not pairs:
            continue
        counts = confusion_counts(pairs)
        group_rates[key] = {
            "tpr": safe_divide(counts["tp"], counts["tp"] + counts["fn"]),
            "fpr": safe_divide(counts["fp"], counts["fp"] + counts["tn"]),
        }

    tpr_difference = _spread([r["tpr"] for r in group_rates.values()])
    fpr_difference = _spread([r["fpr"] for r in group_rates.values()])
    limit = EXTENDED_METRIC_THRESHOLDS["equalized_odds"]

    return {
        "group_rates": group_rates,
        "tpr_difference": tpr_difference,
        "fpr_difference": fpr_difference,
        "satisfies": tpr_difference < limit and fpr_difference < limit,
    }


def calibration(
    groups: Mapping[str, GroupAnalysis],
    target: str,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> Dict[str, Any]:
    """
    Calibration error per group and the cross-group spread.

    Scores are bucketed into ten 0.1-wide bins; in each non-empty bin the
    mean score is compared with the observed positive rate. A group's error
    is the mean absolute gap over its bins.
    """
    group_errors = {}
    for key, group in groups.items():
        scored = _scored_outcomes(group.members, target, config.decision_threshold)
        if not scored:
            continue

        scores = np.array([s for s, _ in scored], dtype=float)
        actuals = np.array([a for _, a in scored], dtype=float)
        bins = np.clip(np.floor(scores * CALIBRATION_BINS), 0, CALIBRATION_BINS - 1)

        gaps = []
        for b in np.unique(bins):
            in_bin = bins == b
            gaps.append(abs(float(np.mean(scores[in_bin])) - float(np.mean(actuals[in_bin]))))
        group_errors[key] = float(np.mean(gaps))

    max_difference = _spread(list(group_errors.values()))

    return {
        "group_calibration_errors": group_errors,
        "max_calibration_difference": max_difference,
        "well_calibrated": max_difference < EXTENDED_METRIC_THRESHOLDS["calibration"],
    }


def individual_fairness(
    dataset: Dataset,
    target: str,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> Dict[str, Any]:
    """
    Outcome gaps between similar individuals.

    Only the first `config.individual_fairness_limit` records are compared
    (a tractability bound, not a sample). Pairs with similarity > 0.8
    contribute their absolute outcome difference to the average.
    """
    excluded = (target, actual_column_for(target))
    records = [
        r for r in dataset.records[:config.individual_fairness_limit]
        if r.value(target).is_number
    ]

    differences = []
    compared = 0
    for i in range(len(records)):
        for j in range(i + 1, len(records)):
            compared += 1
            similarity = record_similarity(records[i], records[j], excluded)
            if similarity > EXTENDED_METRIC_THRESHOLDS["individual_similarity"]:
                differences.append(abs(records[i].number(target) - records[j].number(target)))

    average = float(np.mean(differences)) if differences else 0.0

    return {
        "average_outcome_difference": average,
        "similar_pairs": len(differences),
        "compared_pairs": compared,
        "records_considered": len(records),
        "fairness_violations": average > EXTENDED_METRIC_THRESHOLDS["individual_outcome_gap"],
    }


def _most_similar(record: Record, candidates: Sequence[Record],
                  excluded: Sequence[str]) -> Tuple[Optional[Record], float]:
    best, best_similarity = None, -math.inf
    for candidate in candidates:
        similarity = record_similarity(record, candidate, excluded)
        if similarity > best_similarity:
            best, best_similarity = candidate, similarity
    return best, best_similarity


def counterfactual_fairness(
    groups: Mapping[str, GroupAnalysis],
    attribute: str,
    target: str,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> Dict[str, Any]:
    """
    Nearest-neighbour counterfactual check across every pair of groups.

    For each of the first `config.counterfactual_limit` records of one group,
    the most similar record (ignoring the protected attribute) among the first
    `config.counterfactual_limit` of the other group is found. Matches with
    similarity > 0.7 are comparisons; an outcome gap > 0.1 is a violation.
    score = 1 - violations / comparisons (1.0 without comparisons).
    """
    limit = config.counterfactual_limit
    excluded = (attribute, target, actual_column_for(target))

    prefixes = {
        key: [r for r in group.members[:limit] if r.value(target).is_number]
        for key, group in groups.items()
    }
    keys = list(prefixes)

    comparisons = 0
    violations = 0
    for i in range(len(keys)):
        for j in range(i + 1, len(keys)):
            candidates = prefixes[keys[j]]
            if not candidates:
                continue
            for record in prefixes[keys[i]]:
                match, similarity = _most_similar(record, candidates, excluded)
                if similarity <= EXTENDED_METRIC_THRESHOLDS["counterfactual_similarity"]:
                    continue
                comparisons += 1
                gap = abs(record.number(target) - match.number(target))
                if gap > EXTENDED_METRIC_THRESHOLDS["counterfactual_outcome_gap"]:
                    violations += 1

    score = 1.0 - safe_divide(violations, comparisons) if comparisons else 1.0

    return {
        "score": score,
        "violations": violations,
        "comparisons": comparisons,
    }


def treatment_equality(
    groups: Mapping[str, GroupAnalysis],
    target: str,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> Dict[str, Any]:
    """
    False-positive / false-negative ratio per group.

    errorRatio = FP/FN, infinite when FN=0 and FP>0, 1.0 when both are 0.
    satisfies = spread of the finite ratios below 0.1.
    """
    group_errors = {}
    for key, group in groups.items():
        pairs = outcome_pairs(group.members, target, config.decision_threshold)
        if not pairs:
            continue
        counts = confusion_counts(pairs)
        fp, fn = counts["fp"], counts["fn"]
        if fn > 0:
            ratio = fp / fn
        elif fp > 0:
            ratio = math.inf
        else:
            ratio = 1.0
        group_errors[key] = {
            "false_positives": fp,
            "false_negatives": fn,
            "error_ratio": ratio,
        }

    finite = [g["error_ratio"] for g in group_errors.values() if math.isfinite(g["error_ratio"])]
    spread = _spread(finite)

    return {
        "group_errors": group_errors,
        "ratio_difference": spread,
        "satisfies": spread < EXTENDED_METRIC_THRESHOLDS["treatment_equality"],
    }


def compute_advanced_metrics(
    dataset: Dataset,
    groups: Mapping[str, GroupAnalysis],
    attribute: str,
    target: str,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> Dict[str, Any]:
    """
    All extended metrics for one (attribute, target) pair.

    Returns:
        Dictionary with 'equalized_odds', 'calibration', 'individual_fairness',
        'counterfactual_fairness', 'treatment_equality'
    """
    results = {
        "equalized_odds": equalized_odds(groups, target, config),
        "calibration": calibration(groups, target, config),
        "individual_fairness": individual_fairness(dataset, target, config),
        "counterfactual_fairness": counterfactual_fairness(groups, attribute, target, config),
        "treatment_equality": treatment_equality(groups, target, config),
    }

    context = {"attribute": attribute, "target": target}
    log_metric(logger, "counterfactual_score", results["counterfactual_fairness"]["score"], context)
    log_metric(
        logger, "calibration_spread",
        results["calibration"]["max_calibration_difference"], context,
    )

    return results
