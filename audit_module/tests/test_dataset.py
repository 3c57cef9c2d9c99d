"""
Tests for the dataset snapshot and column profiling.

Tests cell typing, record access, data sources and heuristic column roles.
"""

from datetime import datetime

import numpy as np
import pandas as pd
import pytest

from shared.config import AnalysisConfig
from shared.validation import ValidationError
from audit_module.src.dataset import (
    CellValue,
    Dataset,
    Record,
    ValueKind,
    normalize_column_name,
)
from audit_module.src.column_profiler import (
    header_matches,
    is_numeric_column,
    is_protected_column,
    is_target_column,
    profile_columns,
)


# ============================================================================
# Cell Typing Tests
# ============================================================================

class TestCellValue:
    """Test one-time resolution of raw cells into tagged values."""

    def test_numbers(self):
        assert CellValue.from_raw(3).kind is ValueKind.NUMBER
        assert CellValue.from_raw(3).number == 3.0
        assert CellValue.from_raw(np.float64(0.25)).number == 0.25

    def test_numeric_string_is_number(self):
        cell = CellValue.from_raw("  12.5 ")
        assert cell.is_number
        assert cell.number == 12.5

    def test_boolean_is_number(self):
        assert CellValue.from_raw(True).number == 1.0
        assert CellValue.from_raw(False).number == 0.0

    def test_text(self):
        cell = CellValue.from_raw("  Female ")
        assert cell.kind is ValueKind.TEXT
        assert cell.number is None
        assert cell.text == "Female"

    @pytest.mark.parametrize("raw", [None, "", "   ", np.nan, pd.NaT])
    def test_empty(self, raw):
        assert CellValue.from_raw(raw).is_empty

    def test_date(self):
        cell = CellValue.from_raw(datetime(2024, 3, 15))
        assert cell.kind is ValueKind.DATE
        assert cell.text.startswith("2024-03-15")

    def test_non_finite_is_text_not_number(self):
        assert not CellValue.from_raw("inf").is_number

    def test_integral_float_text(self):
        """1.0 and 1 must group together."""
        assert CellValue.from_raw(1.0).text == "1"
        assert CellValue.from_raw(1).text == "1"


# ============================================================================
# Record / Dataset Tests
# ============================================================================

class TestRecord:
    """Test read-only record access."""

    def test_missing_column_reads_empty(self):
        record = Record.from_raw({"gender": "Male"})
        assert record.value("income").is_empty
        assert record.number("income") is None

    def test_column_names_normalized(self):
        record = Record.from_raw({" Gender ": "Male"})
        assert "gender" in record
        assert normalize_column_name("  Approved") == "approved"

    def test_read_only(self):
        record = Record.from_raw({"gender": "Male"})
        with pytest.raises(TypeError):
            record["gender"] = CellValue.from_raw("Female")


class TestDataset:
    """Test dataset construction from the supported sources."""

    def test_from_records_columns_in_first_appearance_order(self):
        dataset = Dataset.from_records([
            {"Gender": "Male", "Approved": 1},
            {"Gender": "Female", "Income": 100, "Approved": 0},
        ])
        assert dataset.columns == ("gender", "approved", "income")
        assert len(dataset) == 2

    def test_from_rows_pads_short_rows(self):
        dataset = Dataset.from_rows(["Gender", "Approved"], [["Male"], ["Female", 1]])
        assert dataset[0].value("approved").is_empty
        assert dataset[1].number("approved") == 1.0

    def test_from_rows_rejects_long_rows(self):
        with pytest.raises(ValidationError, match="Row 1"):
            Dataset.from_rows(["Gender"], [["Male"], ["Female", 1]])

    def test_from_records_rejects_non_mapping_rows(self):
        with pytest.raises(ValidationError, match="mapping"):
            Dataset.from_records([{"gender": "Male"}, ["Female", 1]])

    def test_from_dataframe_missing_values(self):
        df = pd.DataFrame({"Gender": ["M", "F"], "Score": [0.1, np.nan]})
        dataset = Dataset.from_dataframe(df)
        assert dataset.columns == ("gender", "score")
        assert dataset[0].number("score") == pytest.approx(0.1)
        assert dataset[1].value("score").is_empty

    def test_from_csv(self, tmp_path):
        path = tmp_path / "loans.csv"
        pd.DataFrame({"gender": ["Male", "Female"], "approved": [1, 0]}).to_csv(
            path, index=False
        )
        dataset = Dataset.from_csv(path)
        assert len(dataset) == 2
        assert dataset[1].value("gender").text == "Female"

    def test_slice_returns_dataset(self, loan_dataset):
        head = loan_dataset[:5]
        assert isinstance(head, Dataset)
        assert len(head) == 5
        assert head.columns == loan_dataset.columns

    def test_sample_values_skips_empty(self):
        dataset = Dataset.from_records([{"a": None}, {"a": 1}, {"a": 2}, {"a": 3}])
        samples = dataset.sample_values("a", 2)
        assert [c.number for c in samples] == [1.0, 2.0]

    def test_numeric_values(self):
        dataset = Dataset.from_records([{"a": 1}, {"a": "x"}, {"a": "2"}])
        assert dataset.numeric_values("a") == [1.0, 2.0]


# ============================================================================
# Column Profiler Tests
# ============================================================================

class TestHeaderMatching:
    """Test keyword matching against headers."""

    def test_substring_case_insensitive(self):
        assert header_matches("Applicant_Gender", ["gender"])
        assert not header_matches("income", ["gender"])

    def test_separators_stripped(self):
        assert header_matches("applicant-race", ["applicant_race"])
        assert header_matches("isFemale", ["female"])

    def test_protected_uses_demographic_fallback(self):
        assert is_protected_column("is_senior")
        config = AnalysisConfig(use_demographic_fallback=False)
        assert not is_protected_column("is_senior", config)

    def test_custom_keywords(self):
        config = AnalysisConfig(protected_attribute_keywords=["region"])
        assert is_protected_column("home_region", config)

    def test_actual_column_is_not_target(self):
        assert is_target_column("approved")
        assert not is_target_column("approved_actual")


class TestProfileColumns:
    """Test column role detection."""

    def test_loan_dataset_roles(self, loan_dataset):
        profile = profile_columns(loan_dataset)

        assert profile.protected_attributes == ("gender",)
        assert profile.target_columns == ("approved",)
        assert "income" in profile.numeric_columns
        assert "gender" not in profile.numeric_columns
        assert not profile.targets_are_fallback

    def test_fallback_to_last_two_numeric_columns(self):
        dataset = Dataset.from_records([
            {"gender": "Male", "x": 1, "y": 2, "z": 3},
            {"gender": "Female", "x": 4, "y": 5, "z": 6},
        ])
        profile = profile_columns(dataset)

        assert profile.target_columns == ("y", "z")
        assert profile.targets_are_fallback
        assert [p.name for p in profile.profiles if p.is_target] == ["y", "z"]

    def test_no_protected_attribute_is_not_an_error(self):
        dataset = Dataset.from_records([{"income": 1, "approved": 1}])
        profile = profile_columns(dataset)
        assert profile.protected_attributes == ()

    def test_numeric_requires_all_samples(self):
        dataset = Dataset.from_records([{"a": 1, "b": 1}, {"a": "x", "b": None}])
        assert not is_numeric_column(dataset, "a")
        assert is_numeric_column(dataset, "b")
        assert not is_numeric_column(dataset, "missing")
