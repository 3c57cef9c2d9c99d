"""
Tests for shared utilities: validation, logging helpers and result schemas.
"""

import logging
import math

import numpy as np
import pytest

from shared.constants import FLAG_TYPES, RECOMMENDATION_TYPES, SEVERITY_LEVELS, TREND_LABELS
from shared.logging import PipelineLogger, get_logger, log_bias_detection
from shared.schemas import SignificanceTestResult, _serialize
from shared.validation import (
    coerce_number,
    is_empty,
    safe_divide,
    validate_keywords,
    validate_positive_int,
    validate_threshold,
)
from audit_module.src.fairness_analyzer import analyze_dataset
from audit_module.src.temporal_analysis import classify_trend


class TestValidation:
    """Test coercion and config field validators."""

    @pytest.mark.parametrize("raw,expected", [
        (3, 3.0),
        ("4.5", 4.5),
        (" 7 ", 7.0),
        (True, 1.0),
        (np.int64(2), 2.0),
    ])
    def test_coerce_number(self, raw, expected):
        assert coerce_number(raw) == expected

    @pytest.mark.parametrize("raw", [None, "abc", "", float("nan"), float("inf"), [1]])
    def test_coerce_non_number(self, raw):
        assert coerce_number(raw) is None

    def test_is_empty(self):
        assert is_empty(None)
        assert is_empty("  ")
        assert is_empty(np.nan)
        assert not is_empty(0)
        assert not is_empty("x")

    def test_validate_threshold(self):
        assert validate_threshold("t", 0.5) == []
        assert validate_threshold("t", 1.0) == []
        assert len(validate_threshold("t", 0)) == 1
        assert len(validate_threshold("t", 1.2)) == 1
        assert len(validate_threshold("t", "0.5")) == 1

    def test_validate_positive_int(self):
        assert validate_positive_int("n", 5) == []
        assert len(validate_positive_int("n", 0)) == 1
        assert len(validate_positive_int("n", 2.5)) == 1

    def test_validate_keywords(self):
        assert validate_keywords("k", ["gender"]) == []
        assert len(validate_keywords("k", "gender")) == 1
        assert len(validate_keywords("k", ["", "race"])) == 1

    def test_safe_divide(self):
        assert safe_divide(1, 2) == 0.5
        assert safe_divide(1, 0) == 0.0
        assert safe_divide(1, 0, default=1.0) == 1.0


class TestLogging:
    """Test logging helpers."""

    def test_get_logger_no_duplicate_handlers(self):
        first = get_logger("audit.test")
        second = get_logger("audit.test")
        assert first is second
        assert len(second.handlers) == 1

    def test_bias_detection_warning(self, caplog):
        logger = logging.getLogger("audit.test.bias")
        with caplog.at_level(logging.INFO, logger="audit.test.bias"):
            log_bias_detection(logger, "gender", True, "HIGH", ["approved"])
            log_bias_detection(logger, "race", False, "MEDIUM", [])

        assert "BIAS DETECTED [HIGH]" in caplog.text
        assert "race - no significant bias" in caplog.text

    def test_pipeline_logger_reraises(self, caplog):
        logger = logging.getLogger("audit.test.stage")
        with caplog.at_level(logging.INFO, logger="audit.test.stage"):
            with pytest.raises(ValueError):
                with PipelineLogger(logger, "metrics"):
                    raise ValueError("bad")

        assert "STAGE [FAILED]: metrics" in caplog.text
        assert "error=ValueError: bad" in caplog.text

    def test_pipeline_logger_details(self, caplog):
        logger = logging.getLogger("audit.test.details")
        with caplog.at_level(logging.INFO, logger="audit.test.details"):
            with PipelineLogger(logger, "grouping", {"records": 12}) as stage:
                stage.record(groups=3)

        started, completed = caplog.messages
        assert started == "STAGE [STARTED]: grouping - records=12"
        assert completed.startswith("STAGE [COMPLETED]: grouping - records=12, groups=3")
        assert "duration_seconds=" in completed

    def test_analysis_stages_report_record_counts(self, caplog, loan_dataset):
        with caplog.at_level(logging.INFO, logger="audit_module.src.fairness_analyzer"):
            analyze_dataset(loan_dataset)

        completed = [m for m in caplog.messages if m.startswith("STAGE [COMPLETED]")]
        assert any("group aggregation - records=100, groups=2" in m for m in completed)
        assert any("fairness metrics - records=100, pairs=1" in m for m in completed)


class TestSchemas:
    """Test result serialization and vocabularies."""

    def test_serialize_infinity(self):
        assert _serialize({"ratio": math.inf}) == {"ratio": "Infinity"}
        assert _serialize((1, 2)) == [1, 2]

    def test_test_result_to_dict(self):
        result = SignificanceTestResult("ks_test", 0.3, 0.01, None, True)
        assert result.to_dict()["degrees_of_freedom"] is None

    def test_result_vocabulary(self, loan_dataset):
        result = analyze_dataset(loan_dataset)

        assert all(f.type in FLAG_TYPES for f in result.flags)
        assert all(f.severity in SEVERITY_LEVELS for f in result.flags)
        assert all(r.type in RECOMMENDATION_TYPES for r in result.recommendations)

    def test_trend_vocabulary(self):
        for scores in ([0.5, 0.1], [0.1, 0.5], [0.2, 0.2], []):
            assert classify_trend(scores) in TREND_LABELS
