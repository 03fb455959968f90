"""
Correlation and covariance matrix assembly for factorstats.

This module turns the dense matrices from factorstats.math.matrix into
variable-name keyed results, optionally with one-tailed significance values
for every pair of variables.
"""

import logging
import numpy as np
from typing import Callable, List, Optional

from factorstats.math.errors import DimensionMismatchError
from factorstats.math.matrix import (
    CORRELATION, COVARIANCE, as_data_matrix, calculate_matrix,
    covariance_to_correlation, zero_variance_columns
)
from factorstats.math.named_matrix import NamedMatrix, square_named_matrix
from factorstats.math.stats import pair_p_value
from factorstats.models import CorrelationMatrix

logger = logging.getLogger(__name__)


def check_dimensions(matrix: np.ndarray, var_names: List[str]) -> None:
    """
    Check that a computed matrix is square with one row per variable.

    Args:
        matrix: Computed matrix
        var_names: Variable names

    Raises:
        DimensionMismatchError: If the shapes disagree
    """
    n_vars = len(var_names)
    if matrix.shape != (n_vars, n_vars):
        raise DimensionMismatchError(
            f"Matrix dimensions {matrix.shape[0]}x{matrix.shape[1]} "
            f"don't match variable count {n_vars}"
        )


def significance_matrix(matrix: np.ndarray,
                        n_observations: int,
                        to_correlation: Callable[[np.ndarray, int, int], float]) -> np.ndarray:
    """
    Compute the p-value of every cell of a square matrix.

    Args:
        matrix: Correlation or covariance matrix
        n_observations: Number of observations the matrix was built from
        to_correlation: Maps (matrix, i, j) to the correlation coefficient tested

    Returns:
        Square array of one-tailed p-values with a zero diagonal
    """
    if n_observations <= 3:
        logger.warning(
            f"Only {n_observations} observations; off-diagonal p-values are 0.5"
        )

    n_vars = matrix.shape[0]
    sig = np.zeros((n_vars, n_vars))
    for i in range(n_vars):
        for j in range(n_vars):
            sig[i, j] = pair_p_value(to_correlation(matrix, i, j), n_observations, i, j)
    return sig


def _direct_correlation(matrix: np.ndarray, i: int, j: int) -> float:
    return float(matrix[i, j])


def _assemble(matrix: NamedMatrix,
              sig: Optional[NamedMatrix] = None) -> CorrelationMatrix:
    names = matrix.rownames()
    sig_values = sig.to_nested_dict() if sig is not None else {name: {} for name in names}
    return CorrelationMatrix(
        correlations=matrix.to_nested_dict(),
        sig_values=sig_values,
        variable_order=names
    )


def _build(data_matrix,
           var_names: List[str],
           matrix_type: str,
           significance: bool,
           to_correlation: Callable[[np.ndarray, int, int], float]) -> CorrelationMatrix:
    data = as_data_matrix(data_matrix)
    matrix = calculate_matrix(data, matrix_type)
    check_dimensions(matrix, var_names)

    flat = zero_variance_columns(data)
    if flat:
        logger.warning(f"Variables with zero variance: {[var_names[j] for j in flat]}")

    named = square_named_matrix(matrix, var_names)
    sig = None
    if significance:
        sig = square_named_matrix(
            significance_matrix(matrix, data.shape[0], to_correlation),
            var_names
        )

    logger.info(f"Assembled {matrix_type} matrix for {len(var_names)} variables")
    return _assemble(named, sig)


def calculate_correlation_matrix(data_matrix,
                                 var_names: List[str],
                                 significance: bool = False) -> CorrelationMatrix:
    """
    Compute the Pearson correlation matrix keyed by variable name.

    Args:
        data_matrix: Data with observations in rows and variables in columns
        var_names: Variable names aligned with the columns
        significance: Whether to compute one-tailed p-values

    Returns:
        CorrelationMatrix with correlations and (optionally) p-values

    Raises:
        InsufficientDataError: If there are fewer than two observations
        DimensionMismatchError: If the matrix does not match var_names
    """
    return _build(data_matrix, var_names, CORRELATION, significance, _direct_correlation)


def calculate_covariance_matrix(data_matrix,
                                var_names: List[str],
                                significance: bool = False) -> CorrelationMatrix:
    """
    Compute the sample covariance matrix keyed by variable name.

    P-values are computed on the correlation implied by each covariance,
    so they match those of calculate_correlation_matrix.

    Args:
        data_matrix: Data with observations in rows and variables in columns
        var_names: Variable names aligned with the columns
        significance: Whether to compute one-tailed p-values

    Returns:
        CorrelationMatrix whose values are covariances

    Raises:
        InsufficientDataError: If there are fewer than two observations
        DimensionMismatchError: If the matrix does not match var_names
    """
    return _build(data_matrix, var_names, COVARIANCE, significance, covariance_to_correlation)
