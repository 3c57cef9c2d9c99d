"""
Constants for the fairness audit.
Central location for keyword lists, thresholds, bounds and cutoffs.
"""

# Header keywords that mark a column as a protected attribute
PROTECTED_ATTRIBUTE_KEYWORDS = frozenset({
    "gender",
    "sex",
    "race",
    "ethnicity",
    "age",
    "religion",
    "disability",
    "nationality",
    "marital",
    "orientation",
})

# Fallback demographic keywords, checked after the configured ones
DEMOGRAPHIC_KEYWORDS = (
    "male",
    "female",
    "black",
    "white",
    "asian",
    "hispanic",
    "latino",
    "young",
    "senior",
    "minority",
    "ethnic",
    "citizen",
)

# Header keywords that mark a column as a model outcome
TARGET_KEYWORDS = frozenset({
    "prediction",
    "predicted",
    "score",
    "label",
    "outcome",
    "approved",
    "decision",
    "result",
    "target",
    "hired",
    "accepted",
})

# Characters stripped from headers for the second keyword match
HEADER_SEPARATORS = ("_", "-", " ", ".")

# Sampling limits
PROFILE_SAMPLE_SIZE = 10
DATE_SAMPLE_SIZE = 5
FALLBACK_TARGET_COUNT = 2

# Group key used for missing / empty attribute values
UNKNOWN_GROUP = "Unknown"
COMPOSITE_KEY_SEPARATOR = "_"
INTERSECTION_SEPARATOR = "_x_"

# Suffix of an optional ground-truth column paired with a target
ACTUAL_COLUMN_SUFFIX = "_actual"

# Binary decision cutoff applied to outcome values
DECISION_THRESHOLD = 0.5

# Fairness thresholds
DISPARATE_IMPACT_THRESHOLD = 0.8
STATISTICAL_PARITY_THRESHOLD = 0.1
EQUAL_OPPORTUNITY_THRESHOLD = 0.1
HIGH_PARITY_DIFFERENCE = 0.2
RETRAINING_BIAS_SCORE = 0.3
UNDERREPRESENTED_GROUP_RATIO = 0.5

# Extended metric thresholds
EXTENDED_METRIC_THRESHOLDS = {
    "equalized_odds": 0.1,
    "calibration": 0.1,
    "individual_similarity": 0.8,
    "individual_outcome_gap": 0.1,
    "counterfactual_similarity": 0.7,
    "counterfactual_outcome_gap": 0.1,
    "treatment_equality": 0.1,
}
CALIBRATION_BINS = 10

# Tractability bounds on pairwise record comparisons (deterministic prefixes)
INDIVIDUAL_FAIRNESS_LIMIT = 100
COUNTERFACTUAL_LIMIT = 50

# Significance testing
SIGNIFICANCE_LEVEL = 0.05
T_CRITICAL_VALUE = 1.96
KS_CRITICAL_DIFFERENCE = 0.05
T_TEST_MIN_SAMPLES = 2
KS_TEST_MIN_SAMPLES = 5

# Chi-square p-value lookup for df=1: (critical value, p-value), strongest first.
# The per-df increment extrapolates each critical value linearly for df > 1.
CHI_SQUARE_CRITICAL_VALUES = (
    (10.83, 0.001, 2.6),
    (6.63, 0.01, 2.2),
    (3.84, 0.05, 1.9),
    (2.71, 0.1, 1.7),
)
CHI_SQUARE_DEFAULT_P_VALUE = 0.5

# Temporal analysis
TREND_THRESHOLD = 0.05
TREND_LABELS = ("improving", "worsening", "stable", "insufficient_data")

# Proxy correlation risk buckets
CORRELATION_RISK_THRESHOLDS = {
    "high": 0.3,
    "medium": 0.1,
}
CORRELATION_RECOMMENDATIONS = {
    "HIGH": "Strong proxy risk: consider removing or transforming this feature",
    "MEDIUM": "Moderate proxy risk: monitor this feature for indirect discrimination",
    "LOW": "Low proxy risk: no action required",
}

# Overall risk level of an analysis (used for the history row)
RISK_LEVEL_THRESHOLDS = {
    "HIGH": 0.3,
    "MEDIUM": 0.1,
}

SEVERITY_LEVELS = ["LOW", "MEDIUM", "HIGH"]

FLAG_TYPES = ["DISPARATE_IMPACT", "STATISTICAL_PARITY", "EQUAL_OPPORTUNITY"]

RECOMMENDATION_TYPES = ["DATA_BALANCING", "THRESHOLD_ADJUSTMENT", "MODEL_RETRAINING"]

# History sink columns, one row per analysis
HISTORY_COLUMNS = [
    "timestamp",
    "total_records",
    "total_groups",
    "overall_bias_score",
    "flag_count",
    "risk_level",
]
