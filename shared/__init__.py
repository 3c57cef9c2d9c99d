"""
Shared utilities for the fairness audit.

Provides common schemas, constants, configuration, logging, and validation
used across the analysis stages.
"""

from shared.schemas import (
    ErrorKind,
    ColumnProfile,
    ColumnProfileSummary,
    TargetStats,
    GroupAnalysis,
    FairnessMetricSet,
    SignificanceTestResult,
    BiasFlag,
    Recommendation,
    OverallMetrics,
    AnalysisResult,
    ExtendedAnalysisResult,
    AnalysisError,
    AnalysisOutcome,
)

from shared.config import AnalysisConfig, DEFAULT_CONFIG

from shared.constants import (
    PROTECTED_ATTRIBUTE_KEYWORDS,
    TARGET_KEYWORDS,
    DEMOGRAPHIC_KEYWORDS,
    DECISION_THRESHOLD,
    UNKNOWN_GROUP,
    SEVERITY_LEVELS,
)

from shared.logging import (
    get_logger,
    log_metric,
    log_pipeline_stage,
    log_bias_detection,
    PipelineLogger,
)

from shared.validation import (
    ValidationError,
    coerce_number,
    is_empty,
    safe_divide,
)

__version__ = "0.1.0"

__all__ = [
    # Schemas
    "ErrorKind",
    "ColumnProfile",
    "ColumnProfileSummary",
    "TargetStats",
    "GroupAnalysis",
    "FairnessMetricSet",
    "SignificanceTestResult",
    "BiasFlag",
    "Recommendation",
    "OverallMetrics",
    "AnalysisResult",
    "ExtendedAnalysisResult",
    "AnalysisError",
    "AnalysisOutcome",
    # Config
    "AnalysisConfig",
    "DEFAULT_CONFIG",
    # Constants
    "PROTECTED_ATTRIBUTE_KEYWORDS",
    "TARGET_KEYWORDS",
    "DEMOGRAPHIC_KEYWORDS",
    "DECISION_THRESHOLD",
    "UNKNOWN_GROUP",
    "SEVERITY_LEVELS",
    # Logging
    "get_logger",
    "log_metric",
    "log_pipeline_stage",
    "log_bias_detection",
    "PipelineLogger",
    # Validation
    "ValidationError",
    "coerce_number",
    "is_empty",
    "safe_divide",
]
