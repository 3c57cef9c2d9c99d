"""Audit Module Source - Core Implementation"""

from .dataset import CellValue, Dataset, Record, ValueKind
from .column_profiler import profile_columns
from .group_aggregator import aggregate_groups, median, sample_std
from .metrics_engine import (
    bias_severity,
    compute_fairness_metrics,
    disparate_impact,
    statistical_parity_difference,
)
from .advanced_metrics import compute_advanced_metrics, record_similarity
from .statistical_tests import run_significance_tests
from .intersectionality import analyze_intersectional_bias, combinations
from .temporal_analysis import analyze_temporal_trends, classify_trend
from .correlation_analysis import analyze_feature_correlations
from .bias_flags import compute_overall_metrics, generate_flags, generate_recommendations
from .fairness_analyzer import (
    FairnessAnalyzer,
    analyze_dataset,
    analyze_dataset_extended,
    run_analysis,
)
from .history import append_history_row, build_history_row
from .config_loader import load_config, save_config
from .exceptions import (
    ComputationError,
    ConfigurationError,
    FairnessModuleError,
    InsufficientDataError,
    NoProtectedAttributesError,
)

__all__ = [
    'CellValue',
    'Dataset',
    'Record',
    'ValueKind',
    'profile_columns',
    'aggregate_groups',
    'median',
    'sample_std',
    'bias_severity',
    'compute_fairness_metrics',
    'disparate_impact',
    'statistical_parity_difference',
    'compute_advanced_metrics',
    'record_similarity',
    'run_significance_tests',
    'analyze_intersectional_bias',
    'combinations',
    'analyze_temporal_trends',
    'classify_trend',
    'analyze_feature_correlations',
    'compute_overall_metrics',
    'generate_flags',
    'generate_recommendations',
    'FairnessAnalyzer',
    'analyze_dataset',
    'analyze_dataset_extended',
    'run_analysis',
    'append_history_row',
    'build_history_row',
    'load_config',
    'save_config',
    'ComputationError',
    'ConfigurationError',
    'FairnessModuleError',
    'InsufficientDataError',
    'NoProtectedAttributesError',
]
