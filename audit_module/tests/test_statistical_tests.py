"""
Tests for significance tests between groups.

Tests the chi-square statistic and its lookup p-value, the Welch t-test,
the two-sample KS test, and their "not applicable" preconditions.
"""

import numpy as np
import pytest

from audit_module.src.dataset import Dataset
from audit_module.src.group_aggregator import aggregate_groups
from audit_module.src.statistical_tests import (
    build_contingency_table,
    chi_square_p_value,
    chi_square_statistic,
    chi_square_test,
    ks_statistic,
    ks_test,
    run_significance_tests,
    t_test,
    welch_degrees_of_freedom,
    welch_t_statistic,
)


def _groups(samples):
    """Aggregate {'group': [values]} into groups on a 'score' target."""
    rows = [
        {"gender": key, "score": value}
        for key, values in samples.items()
        for value in values
    ]
    return aggregate_groups(Dataset.from_records(rows), "gender", ["score"])


@pytest.fixture
def loan_groups(loan_dataset):
    return aggregate_groups(loan_dataset, "gender", ["approved"])


# ============================================================================
# Chi-Square Tests
# ============================================================================

class TestChiSquare:
    """Test chi-square statistic, lookup p-value and test wrapper."""

    def test_statistic(self):
        assert chi_square_statistic(np.array([[90, 10], [60, 40]])) == pytest.approx(24.0)

    def test_independent_table(self):
        assert chi_square_statistic(np.array([[50, 50], [50, 50]])) == pytest.approx(0.0)

    def test_empty_table(self):
        assert chi_square_statistic(np.zeros((2, 2))) == 0.0

    def test_zero_expected_cells_skipped(self):
        """All-positive column totals leave the negative column with expected 0."""
        assert chi_square_statistic(np.array([[5, 0], [7, 0]])) == pytest.approx(0.0)

    @pytest.mark.parametrize("statistic,p_value", [
        (24.0, 0.001),
        (8.0, 0.01),
        (5.0, 0.05),
        (3.0, 0.1),
        (1.0, 0.5),
    ])
    def test_p_value_lookup_df1(self, statistic, p_value):
        assert chi_square_p_value(statistic, 1) == p_value

    def test_p_value_lookup_extrapolates_for_higher_df(self):
        # df=2 critical values: 13.43, 8.83, 5.74, 4.41
        assert chi_square_p_value(5.0, 2) == 0.1
        assert chi_square_p_value(6.0, 2) == 0.05
        assert chi_square_p_value(14.0, 2) == 0.001

    def test_contingency_table(self):
        table = build_contingency_table({"a": [1, 1, 0], "b": [0, 0.4, 0.6]})
        assert table.tolist() == [[2, 1], [1, 2]]

    def test_loan_groups_significant(self, loan_groups):
        result = chi_square_test(loan_groups, "approved")

        assert result.test_name == "chi_square"
        assert result.degrees_of_freedom == 1
        assert result.statistic > 10.83
        assert result.p_value == 0.001
        assert result.significant

    def test_single_group_not_applicable(self):
        assert chi_square_test(_groups({"a": [1, 0, 1]}), "score") is None


# ============================================================================
# Welch T-Test Tests
# ============================================================================

class TestTTest:
    """Test Welch t statistic and fixed critical-value decision."""

    def test_equal_constant_samples(self):
        assert welch_t_statistic([1, 1, 1], [1, 1, 1]) == 0.0
        assert welch_degrees_of_freedom([1, 1, 1], [1, 1, 1]) is None

    def test_statistic_sign(self):
        assert welch_t_statistic([5, 6, 7], [1, 2, 3]) > 0
        assert welch_t_statistic([1, 2, 3], [5, 6, 7]) < 0

    def test_loan_groups_significant(self, loan_groups):
        result = t_test(loan_groups, "approved")

        assert abs(result.statistic) > 1.96
        assert result.significant
        assert 0.0 <= result.p_value <= 1.0
        assert result.degrees_of_freedom > 0

    def test_similar_groups_not_significant(self):
        groups = _groups({"a": [0.4, 0.5, 0.6, 0.5], "b": [0.45, 0.55, 0.5, 0.5]})
        result = t_test(groups, "score")
        assert not result.significant

    def test_requires_exactly_two_groups(self):
        groups = _groups({"a": [1, 2], "b": [1, 2], "c": [1, 2]})
        assert t_test(groups, "score") is None

    def test_third_group_without_numeric_values(self):
        groups = _groups({"a": [1, 2, 3], "b": [2, 3, 4], "c": ["n/a", "n/a"]})

        assert len(groups) == 3
        assert t_test(groups, "score") is None

    def test_requires_two_samples_per_group(self):
        groups = _groups({"a": [1], "b": [1, 2, 3]})
        assert t_test(groups, "score") is None


# ============================================================================
# Kolmogorov-Smirnov Tests
# ============================================================================

class TestKSTest:
    """Test KS statistic and preconditions."""

    def test_identical_samples(self):
        assert ks_statistic([1, 2, 3, 4, 5], [1, 2, 3, 4, 5]) == 0.0

    def test_disjoint_samples(self):
        assert ks_statistic([1, 2, 3, 4, 5], [6, 7, 8, 9, 10]) == 1.0

    def test_loan_groups(self, loan_groups):
        result = ks_test(loan_groups, "approved")

        assert result.statistic == pytest.approx(0.3)
        assert result.significant
        assert result.degrees_of_freedom is None

    def test_third_group_without_numeric_values(self):
        groups = _groups({
            "a": [1, 2, 3, 4, 5],
            "b": [3, 4, 5, 6, 7],
            "c": ["n/a"] * 5,
        })
        assert ks_test(groups, "score") is None

    def test_requires_five_samples(self):
        groups = _groups({"a": [1, 2, 3, 4], "b": [1, 2, 3, 4, 5]})
        assert ks_test(groups, "score") is None


class TestRunSignificanceTests:
    """Test the per-target test bundle."""

    def test_all_tests_present(self, loan_groups):
        results = run_significance_tests(loan_groups, "approved")

        assert set(results) == {"chi_square", "t_test", "ks_test"}
        assert all(r.significant for r in results.values())

    def test_three_groups(self):
        np.random.seed(0)
        groups = _groups({k: list(np.random.uniform(0, 1, 10)) for k in "abc"})
        results = run_significance_tests(groups, "score")

        assert results["chi_square"] is not None
        assert results["chi_square"].degrees_of_freedom == 2
        assert results["t_test"] is None
        assert results["ks_test"] is None
