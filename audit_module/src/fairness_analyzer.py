"""
Fairness Analyzer - Assemble the full analysis into one result record.

Runs profiling, group aggregation, core metrics, flags and recommendations
(and optionally significance tests, extended metrics, intersectional,
temporal and proxy-correlation analysis) over one immutable dataset snapshot.

analyze_dataset()/analyze_dataset_extended() raise audit module exceptions;
run_analysis() returns an AnalysisOutcome carrying either the result or an
error value, for callers that surface errors themselves.
"""

from typing import Any, Dict, List, Optional

from shared.config import AnalysisConfig, DEFAULT_CONFIG
from shared.logging import get_logger, log_config_validation, PipelineLogger
from shared.schemas import (
    AnalysisOutcome,
    AnalysisResult,
    ColumnProfileSummary,
    ExtendedAnalysisResult,
)

from .advanced_metrics import compute_advanced_metrics
from .bias_flags import compute_overall_metrics, generate_flags, generate_recommendations
from .column_profiler import profile_columns
from .correlation_analysis import analyze_feature_correlations
from .dataset import Dataset
from .exceptions import (
    ComputationError,
    ConfigurationError,
    FairnessModuleError,
    InsufficientDataError,
    NoProtectedAttributesError,
    error_from_exception,
)
from .group_aggregator import aggregate_groups
from .intersectionality import analyze_intersectional_bias
from .metrics_engine import compute_fairness_metrics, interpret_metric_set
from .statistical_tests import run_significance_tests
from .temporal_analysis import analyze_temporal_trends

logger = get_logger(__name__)

MIN_RECORDS = 2


def _check_config(config: AnalysisConfig) -> None:
    errors = config.validate()
    if errors:
        log_config_validation(logger, "AnalysisConfig", errors)
        raise ConfigurationError(f"Invalid configuration: {errors}")


def _check_dataset(dataset: Dataset) -> None:
    if len(dataset) < MIN_RECORDS:
        raise InsufficientDataError(
            f"Dataset has {len(dataset)} record(s), at least {MIN_RECORDS} required"
        )


def _profile(dataset: Dataset, config: AnalysisConfig) -> ColumnProfileSummary:
    profile = profile_columns(dataset, config)
    if not profile.protected_attributes:
        raise NoProtectedAttributesError(
            "No protected attribute columns detected; check the configured "
            f"keywords against columns {list(dataset.columns)}"
        )
    return profile


def _build_result(
    dataset: Dataset,
    profile: ColumnProfileSummary,
    config: AnalysisConfig,
) -> AnalysisResult:
    targets = profile.target_columns
    records = {"records": len(dataset)}

    with PipelineLogger(logger, "group aggregation", records) as stage:
        group_analyses = {
            attribute: aggregate_groups(dataset, attribute, targets, config)
            for attribute in profile.protected_attributes
        }
        stage.record(groups=sum(len(groups) for groups in group_analyses.values()))

    with PipelineLogger(logger, "fairness metrics", records) as stage:
        metrics = {
            attribute: compute_fairness_metrics(groups, attribute, targets, config)
            for attribute, groups in group_analyses.items()
        }
        stage.record(pairs=sum(len(by_target) for by_target in metrics.values()))

    overall = compute_overall_metrics(metrics)
    flags = generate_flags(metrics, config)
    recommendations = generate_recommendations(group_analyses, flags, overall, config)

    return AnalysisResult(
        total_records=len(dataset),
        total_groups=sum(len(groups) for groups in group_analyses.values()),
        protected_attributes=profile.protected_attributes,
        target_columns=targets,
        group_analyses=group_analyses,
        metrics=metrics,
        overall_metrics=overall,
        flags=tuple(flags),
        recommendations=tuple(recommendations),
        targets_are_fallback=profile.targets_are_fallback,
    )


def _build_extended(
    dataset: Dataset,
    profile: ColumnProfileSummary,
    base: AnalysisResult,
    config: AnalysisConfig,
) -> ExtendedAnalysisResult:
    statistical_tests: Dict[str, Dict[str, Any]] = {}
    advanced_metrics: Dict[str, Dict[str, Any]] = {}
    records = {"records": len(dataset)}

    with PipelineLogger(logger, "significance tests and extended metrics", records):
        for attribute, groups in base.group_analyses.items():
            statistical_tests[attribute] = {}
            advanced_metrics[attribute] = {}
            for target in base.target_columns:
                statistical_tests[attribute][target] = run_significance_tests(
                    groups, target, config
                )
                advanced_metrics[attribute][target] = compute_advanced_metrics(
                    dataset, groups, attribute, target, config
                )

    with PipelineLogger(logger, "intersectional analysis", records):
        intersectional = analyze_intersectional_bias(
            dataset, base.protected_attributes, base.target_columns, config
        )

    with PipelineLogger(logger, "temporal analysis", records):
        temporal = analyze_temporal_trends(dataset, config)

    with PipelineLogger(logger, "feature correlation", records):
        feature_importance = analyze_feature_correlations(dataset, profile)

    return ExtendedAnalysisResult(
        base=base,
        statistical_tests=statistical_tests,
        advanced_metrics=advanced_metrics,
        intersectional_bias=intersectional,
        temporal_analysis=temporal,
        feature_importance=feature_importance,
    )


def _analyze(dataset: Dataset, config: AnalysisConfig, extended: bool):
    _check_config(config)
    _check_dataset(dataset)

    try:
        with PipelineLogger(logger, "column profiling", {"records": len(dataset)}) as stage:
            profile = _profile(dataset, config)
            stage.record(
                protected=len(profile.protected_attributes),
                targets=len(profile.target_columns),
            )

        base = _build_result(dataset, profile, config)
        if not extended:
            return base
        return _build_extended(dataset, profile, base, config)

    except FairnessModuleError:
        raise
    except Exception as exc:
        raise ComputationError(f"{type(exc).__name__}: {exc}") from exc


def analyze_dataset(
    dataset: Dataset,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> AnalysisResult:
    """
    Core fairness analysis of a dataset.

    Args:
        dataset: Dataset snapshot
        config: Analysis configuration

    Returns:
        AnalysisResult

    Raises:
        InsufficientDataError: Fewer than 2 records
        NoProtectedAttributesError: No protected attribute detected
        ConfigurationError: Invalid configuration
        ComputationError: Any unexpected failure inside a stage
    """
    return _analyze(dataset, config, extended=False)


def analyze_dataset_extended(
    dataset: Dataset,
    config: AnalysisConfig = DEFAULT_CONFIG,
) -> ExtendedAnalysisResult:
    """Core analysis plus tests, extended metrics, intersections, time and proxies."""
    return _analyze(dataset, config, extended=True)


def run_analysis(
    dataset: Dataset,
    config: AnalysisConfig = DEFAULT_CONFIG,
    extended: bool = False,
) -> AnalysisOutcome:
    """
    Analyze a dataset and return a result-or-error value.

    Example:
        >>> outcome = run_analysis(dataset)
        >>> if not outcome.ok:
        ...     print(outcome.error.kind, outcome.error.message)
    """
    try:
        result = _analyze(dataset, config, extended)
    except Exception as exc:
        error = error_from_exception(exc)
        logger.error(f"Analysis failed [{error.kind.value}]: {error.message}")
        return AnalysisOutcome(error=error)

    return AnalysisOutcome(result=result)


class FairnessAnalyzer:
    """
    Fairness analysis bound to one configuration.

    Args:
        config: Analysis configuration (defaults when None)
        **overrides: Per-instance overrides of config fields

    Example:
        >>> analyzer = FairnessAnalyzer(disparate_impact_threshold=0.9)
        >>> result = analyzer.analyze(Dataset.from_csv("loans.csv"))
        >>> for line in analyzer.interpret(result):
        ...     print(line)
    """

    def __init__(self, config: Optional[AnalysisConfig] = None, **overrides: Any):
        config = config or DEFAULT_CONFIG
        self.config = config.with_overrides(**overrides) if overrides else config

    def profile(self, dataset: Dataset) -> ColumnProfileSummary:
        return profile_columns(dataset, self.config)

    def analyze(self, dataset: Dataset) -> AnalysisResult:
        return analyze_dataset(dataset, self.config)

    def analyze_extended(self, dataset: Dataset) -> ExtendedAnalysisResult:
        return analyze_dataset_extended(dataset, self.config)

    def run(self, dataset: Dataset, extended: bool = False) -> AnalysisOutcome:
        return run_analysis(dataset, self.config, extended)

    def interpret(self, result: AnalysisResult) -> List[str]:
        """Human-readable interpretation of every metric set."""
        return [
            interpret_metric_set(metric_set, self.config)
            for by_target in result.metrics.values()
            for metric_set in by_target.values()
        ]
