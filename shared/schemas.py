"""
Data schemas for the fairness audit.
Defines dataclasses for structured data exchange between analysis stages.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


def _serialize(value: Any) -> Any:
    """Convert nested result values into JSON-friendly structures."""
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, dict):
        return {str(k): _serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    if isinstance(value, float) and math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


class ErrorKind(Enum):
    """Kinds of analysis failure reported to callers."""

    INSUFFICIENT_DATA = "InsufficientData"
    NO_PROTECTED_ATTRIBUTES = "NoProtectedAttributes"
    COMPUTATION_ERROR = "ComputationError"
    CONFIGURATION_ERROR = "ConfigurationError"


@dataclass(frozen=True)
class ColumnProfile:
    """Roles detected for a single column."""

    name: str
    is_protected: bool
    is_target: bool
    is_numeric: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "is_protected": self.is_protected,
            "is_target": self.is_target,
            "is_numeric": self.is_numeric,
        }


@dataclass(frozen=True)
class ColumnProfileSummary:
    """Column profiles plus the derived role lists."""

    profiles: Tuple[ColumnProfile, ...]
    protected_attributes: Tuple[str, ...]
    target_columns: Tuple[str, ...]
    numeric_columns: Tuple[str, ...]
    all_columns: Tuple[str, ...]
    # True when targets came from the numeric-column fallback (low confidence)
    targets_are_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profiles": [p.to_dict() for p in self.profiles],
            "protected_attributes": list(self.protected_attributes),
            "target_columns": list(self.target_columns),
            "numeric_columns": list(self.numeric_columns),
            "all_columns": list(self.all_columns),
            "targets_are_fallback": self.targets_are_fallback,
        }


@dataclass(frozen=True)
class TargetStats:
    """Descriptive statistics of one target column within one group."""

    count: int
    mean: float
    median: float
    std: float
    positive_rate: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "mean": self.mean,
            "median": self.median,
            "std": self.std,
            "positive_rate": self.positive_rate,
        }


@dataclass(frozen=True)
class GroupAnalysis:
    """One group of a partition by attribute value (or value combination)."""

    key: str
    members: Tuple[Any, ...]
    count: int
    percentage: float
    target_stats: Dict[str, TargetStats] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "count": self.count,
            "percentage": self.percentage,
            "target_stats": _serialize(self.target_stats),
        }


@dataclass(frozen=True)
class FairnessMetricSet:
    """Core fairness metrics for one (attribute, target) pair."""

    attribute: str
    target: str
    disparate_impact: float
    statistical_parity_diff: float
    equal_opportunity: float
    bias_severity: float
    positive_rates: Dict[str, float] = field(default_factory=dict)
    # 'positive_rate_proxy' unless a ground-truth column was available
    equal_opportunity_source: str = "positive_rate_proxy"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attribute": self.attribute,
            "target": self.target,
            "disparate_impact": self.disparate_impact,
            "statistical_parity_diff": self.statistical_parity_diff,
            "equal_opportunity": self.equal_opportunity,
            "bias_severity": self.bias_severity,
            "positive_rates": dict(self.positive_rates),
            "equal_opportunity_source": self.equal_opportunity_source,
        }


@dataclass(frozen=True)
class SignificanceTestResult:
    """Outcome of one hypothesis test."""

    test_name: str
    statistic: float
    p_value: Optional[float]
    degrees_of_freedom: Optional[float]
    significant: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "test_name": self.test_name,
            "statistic": self.statistic,
            "p_value": self.p_value,
            "degrees_of_freedom": self.degrees_of_freedom,
            "significant": self.significant,
        }


@dataclass(frozen=True)
class BiasFlag:
    """A fairness metric that crossed its threshold."""

    type: str  # 'DISPARATE_IMPACT', 'STATISTICAL_PARITY', 'EQUAL_OPPORTUNITY'
    severity: str  # 'LOW', 'MEDIUM', 'HIGH'
    attribute: str
    target: str
    value: float
    threshold: float
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "severity": self.severity,
            "attribute": self.attribute,
            "target": self.target,
            "value": self.value,
            "threshold": self.threshold,
            "message": self.message,
        }


@dataclass(frozen=True)
class Recommendation:
    """Suggested mitigation derived from flags and group sizes."""

    type: str  # 'DATA_BALANCING', 'THRESHOLD_ADJUSTMENT', 'MODEL_RETRAINING'
    priority: str
    action: str
    details: str
    attribute: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "priority": self.priority,
            "attribute": self.attribute,
            "action": self.action,
            "details": self.details,
        }


@dataclass(frozen=True)
class OverallMetrics:
    """Averages across every (attribute, target) metric set."""

    average_disparate_impact: float = 0.0
    average_statistical_parity_diff: float = 0.0
    average_bias_severity: float = 0.0
    pair_count: int = 0
    most_biased_attribute: Optional[str] = None
    most_biased_severity: Optional[float] = None
    least_biased_attribute: Optional[str] = None
    least_biased_severity: Optional[float] = None

    @property
    def overall_bias_score(self) -> float:
        return self.average_bias_severity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "average_disparate_impact": self.average_disparate_impact,
            "average_statistical_parity_diff": self.average_statistical_parity_diff,
            "average_bias_severity": self.average_bias_severity,
            "overall_bias_score": self.overall_bias_score,
            "pair_count": self.pair_count,
            "most_biased_attribute": self.most_biased_attribute,
            "most_biased_severity": self.most_biased_severity,
            "least_biased_attribute": self.least_biased_attribute,
            "least_biased_severity": self.least_biased_severity,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Root record handed to reporting collaborators."""

    total_records: int
    total_groups: int
    protected_attributes: Tuple[str, ...]
    target_columns: Tuple[str, ...]
    group_analyses: Dict[str, Dict[str, GroupAnalysis]]
    metrics: Dict[str, Dict[str, FairnessMetricSet]]
    overall_metrics: OverallMetrics
    flags: Tuple[BiasFlag, ...]
    recommendations: Tuple[Recommendation, ...]
    targets_are_fallback: bool = False
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def overall_bias_score(self) -> float:
        return self.overall_metrics.overall_bias_score

    def flags_of_type(self, flag_type: str) -> List[BiasFlag]:
        return [f for f in self.flags if f.type == flag_type]

    def recommendations_of_type(self, rec_type: str) -> List[Recommendation]:
        return [r for r in self.recommendations if r.type == rec_type]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "total_records": self.total_records,
            "total_groups": self.total_groups,
            "protected_attributes": list(self.protected_attributes),
            "target_columns": list(self.target_columns),
            "targets_are_fallback": self.targets_are_fallback,
            "group_analyses": _serialize(self.group_analyses),
            "metrics": _serialize(self.metrics),
            "overall_metrics": self.overall_metrics.to_dict(),
            "flags": [f.to_dict() for f in self.flags],
            "recommendations": [r.to_dict() for r in self.recommendations],
        }


@dataclass(frozen=True)
class ExtendedAnalysisResult:
    """Core result plus tests, extended metrics, intersections, time and proxies."""

    base: AnalysisResult
    statistical_tests: Dict[str, Dict[str, Dict[str, Optional[SignificanceTestResult]]]]
    advanced_metrics: Dict[str, Dict[str, Dict[str, Any]]]
    intersectional_bias: Dict[str, Dict[str, Any]]
    temporal_analysis: Dict[str, Dict[str, Any]]
    feature_importance: Dict[str, Dict[str, Dict[str, Any]]]

    def to_dict(self) -> Dict[str, Any]:
        result = self.base.to_dict()
        result.update({
            "statistical_tests": _serialize(self.statistical_tests),
            "advanced_metrics": _serialize(self.advanced_metrics),
            "intersectional_bias": _serialize(self.intersectional_bias),
            "temporal_analysis": _serialize(self.temporal_analysis),
            "feature_importance": _serialize(self.feature_importance),
        })
        return result


@dataclass(frozen=True)
class AnalysisError:
    """Error value returned instead of a result."""

    kind: ErrorKind
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message}


@dataclass(frozen=True)
class AnalysisOutcome:
    """Either a result or an error, never both."""

    result: Optional[Any] = None
    error: Optional[AnalysisError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        if self.error is not None:
            return {"ok": False, "error": self.error.to_dict()}
        return {"ok": True, "result": self.result.to_dict()}
