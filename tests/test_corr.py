"""
Tests for the correlation and covariance assembly module.
"""

import pytest
import numpy as np
import sys
import os
from scipy import stats as scipy_stats

# Add the parent directory to the path to import the module
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from factorstats.math.corr import (
    calculate_correlation_matrix, calculate_covariance_matrix,
    check_dimensions, significance_matrix
)
from factorstats.math.errors import DimensionMismatchError, InsufficientDataError
from factorstats.math.stats import correlation_p_value
from factorstats.models import CorrelationMatrix


@pytest.fixture
def survey_data():
    """Thirty observations of three correlated survey items."""
    rng = np.random.RandomState(42)
    base = rng.normal(size=30)
    return np.column_stack([
        base + rng.normal(scale=0.5, size=30),
        -base + rng.normal(scale=0.8, size=30),
        rng.normal(size=30) * 3.0 + 10.0,
    ])


NAMES = ['q1', 'q2', 'q3']


class TestCorrelationAssembly:
    """Tests for calculate_correlation_matrix."""

    def test_named_values(self, survey_data):
        """Cells are addressable by variable name."""
        result = calculate_correlation_matrix(survey_data, NAMES)
        expected = np.corrcoef(survey_data, rowvar=False)

        assert isinstance(result, CorrelationMatrix)
        assert result.variable_order == NAMES
        for i, row in enumerate(NAMES):
            for j, col in enumerate(NAMES):
                assert np.isclose(result.correlations[row][col], expected[i, j])
                assert result.value(row, col) == result.correlations[row][col]

    def test_square_keys(self, survey_data):
        """Both key levels are exactly the variable names."""
        result = calculate_correlation_matrix(survey_data, NAMES)

        assert list(result.correlations.keys()) == NAMES
        for row in NAMES:
            assert list(result.correlations[row].keys()) == NAMES

    def test_diagonal(self, survey_data):
        """The correlation diagonal is exactly one."""
        result = calculate_correlation_matrix(survey_data, NAMES)
        for name in NAMES:
            assert result.value(name, name) == 1.0

    def test_no_significance_by_default(self, survey_data):
        """Without significance the p-value maps are empty."""
        result = calculate_correlation_matrix(survey_data, NAMES)

        assert result.sig_values == {name: {} for name in NAMES}
        assert not result.has_significance()
        assert result.significance('q1', 'q2') is None

    def test_significance(self, survey_data):
        """P-values follow the one-tailed Fisher z test."""
        result = calculate_correlation_matrix(survey_data, NAMES, significance=True)
        n = survey_data.shape[0]

        assert result.has_significance()
        for row in NAMES:
            assert result.significance(row, row) == 0.0
            for col in NAMES:
                if row != col:
                    expected = correlation_p_value(result.value(row, col), n)
                    assert result.significance(row, col) == expected
                    assert 0.0 <= result.significance(row, col) <= 1.0

    def test_significance_against_t_distribution(self, survey_data):
        """The q1/q2 p-value agrees with scipy's t distribution."""
        result = calculate_correlation_matrix(survey_data, NAMES, significance=True)
        n = survey_data.shape[0]
        t = np.arctanh(result.value('q1', 'q2')) * np.sqrt(n - 3)

        assert np.isclose(result.significance('q1', 'q2'), scipy_stats.t.sf(t, n - 2))

    def test_significance_with_three_observations(self):
        """Three observations still give correlations; p-values fall back to 0.5."""
        data = np.array([[1.0, 2.0], [2.0, 1.0], [3.0, 5.0]])

        plain = calculate_correlation_matrix(data, ['a', 'b'])
        result = calculate_correlation_matrix(data, ['a', 'b'], significance=True)

        assert result.correlations == plain.correlations
        assert result.significance('a', 'b') == 0.5
        assert result.significance('b', 'a') == 0.5
        assert result.significance('a', 'a') == 0.0

    def test_covariance_significance_with_three_observations(self):
        """The covariance assembler follows the same fallback."""
        data = np.array([[1.0, 2.0], [2.0, 1.0], [3.0, 5.0]])

        result = calculate_covariance_matrix(data, ['a', 'b'], significance=True)

        assert result.significance('a', 'b') == 0.5
        assert result.significance('b', 'b') == 0.0

    def test_significance_with_two_observations(self):
        """Two observations are the minimum for a significance matrix."""
        data = np.array([[1.0, 2.0], [2.0, 5.0]])

        result = calculate_correlation_matrix(data, ['a', 'b'], significance=True)

        assert np.isclose(result.value('a', 'b'), 1.0)
        assert result.significance('a', 'b') == 0.5

    def test_insufficient_data(self):
        """A single observation fails."""
        with pytest.raises(InsufficientDataError):
            calculate_correlation_matrix(np.array([[1.0, 2.0]]), ['a', 'b'])

    def test_dimension_mismatch(self, survey_data):
        """Too few names for the columns fails the dimension check."""
        with pytest.raises(DimensionMismatchError):
            calculate_correlation_matrix(survey_data, ['q1', 'q2'])

    def test_zero_variance_variable(self):
        """A constant variable gets 1 with itself, 0 with the rest."""
        data = np.array([
            [1.0, 4.0, 2.0],
            [2.0, 4.0, 1.0],
            [3.0, 4.0, 4.0],
            [4.0, 4.0, 3.0],
            [5.0, 4.0, 6.0],
        ])

        result = calculate_correlation_matrix(data, ['a', 'flat', 'c'], significance=True)

        assert result.value('flat', 'flat') == 1.0
        assert result.value('flat', 'a') == 0.0
        assert result.value('c', 'flat') == 0.0
        assert np.isclose(result.significance('flat', 'a'), 0.5)

    def test_to_named_matrix(self, survey_data):
        """The dense view follows the variable order."""
        result = calculate_correlation_matrix(survey_data, NAMES)
        nmat = result.to_named_matrix()

        assert nmat.rownames() == NAMES
        assert np.allclose(nmat.values, np.corrcoef(survey_data, rowvar=False))
        assert result.to_named_matrix() is nmat
        assert result.value('q1', 'q3') == nmat.get('q1', 'q3')
        with pytest.raises(KeyError):
            result.value('q1', 'q9')

    def test_json_round_trip(self, survey_data):
        """Results serialise and reload without loss of structure."""
        result = calculate_correlation_matrix(survey_data, NAMES, significance=True)
        reloaded = CorrelationMatrix.model_validate_json(result.model_dump_json())

        assert reloaded.variable_order == NAMES
        assert reloaded.correlations == result.correlations


class TestCovarianceAssembly:
    """Tests for calculate_covariance_matrix."""

    def test_named_values(self, survey_data):
        """Covariances are addressable by variable name."""
        result = calculate_covariance_matrix(survey_data, NAMES)
        expected = np.cov(survey_data, rowvar=False, ddof=1)

        for i, row in enumerate(NAMES):
            for j, col in enumerate(NAMES):
                assert np.isclose(result.value(row, col), expected[i, j])

    def test_diagonal_is_variance(self, survey_data):
        """The covariance diagonal holds the sample variances."""
        result = calculate_covariance_matrix(survey_data, NAMES)
        variances = np.var(survey_data, axis=0, ddof=1)

        for j, name in enumerate(NAMES):
            assert np.isclose(result.value(name, name), variances[j])

    def test_conversion_matches_correlation(self, survey_data):
        """cov_ij / sqrt(cov_ii * cov_jj) reproduces the correlation cell."""
        cov = calculate_covariance_matrix(survey_data, NAMES)
        corr = calculate_correlation_matrix(survey_data, NAMES)

        for row in NAMES:
            for col in NAMES:
                converted = cov.value(row, col) / np.sqrt(cov.value(row, row) * cov.value(col, col))
                assert np.isclose(converted, corr.value(row, col))

    def test_significance_matches_correlation(self, survey_data):
        """Both entry points report p-values on the same test."""
        cov = calculate_covariance_matrix(survey_data, NAMES, significance=True)
        corr = calculate_correlation_matrix(survey_data, NAMES, significance=True)

        for row in NAMES:
            for col in NAMES:
                assert np.isclose(cov.significance(row, col), corr.significance(row, col))

    def test_zero_variance_significance(self):
        """A constant variable is tested as uncorrelated."""
        data = np.array([
            [1.0, 4.0],
            [2.0, 4.0],
            [3.0, 4.0],
            [5.0, 4.0],
        ])

        result = calculate_covariance_matrix(data, ['a', 'flat'], significance=True)

        assert result.value('flat', 'flat') == 0.0
        assert np.isclose(result.significance('a', 'flat'), 0.5)

    def test_insufficient_data(self):
        """A single observation fails."""
        with pytest.raises(InsufficientDataError):
            calculate_covariance_matrix(np.array([[1.0, 2.0]]), ['a', 'b'])


class TestHelpers:
    """Tests for the assembly helpers."""

    def test_check_dimensions(self):
        """Only an n x n matrix passes for n names."""
        check_dimensions(np.eye(2), ['a', 'b'])
        with pytest.raises(DimensionMismatchError):
            check_dimensions(np.eye(3), ['a', 'b'])
        with pytest.raises(DimensionMismatchError):
            check_dimensions(np.ones((2, 3)), ['a', 'b'])

    def test_significance_matrix_diagonal(self):
        """The p-value diagonal is zero."""
        corr = np.array([[1.0, 0.3], [0.3, 1.0]])
        sig = significance_matrix(corr, 20, lambda m, i, j: float(m[i, j]))

        assert np.array_equal(np.diag(sig), [0.0, 0.0])
        assert sig[0, 1] == sig[1, 0]
