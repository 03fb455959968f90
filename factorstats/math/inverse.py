"""
Inverse and anti-image matrices of the correlation matrix.

The anti-image matrices are derived from the inverse correlation matrix:
their off-diagonal cells are the negated partial covariances and partial
correlations of each pair of variables given all the others.
"""

import logging
import numpy as np
from typing import List

from factorstats.math.errors import SingularMatrixError
from factorstats.math.matrix import CORRELATION, calculate_matrix
from factorstats.math.corr import check_dimensions
from factorstats.math.named_matrix import square_named_matrix
from factorstats.models import AntiImageMatrices, InverseCorrelationMatrix

logger = logging.getLogger(__name__)


def invert_matrix(matrix: np.ndarray) -> np.ndarray:
    """
    Invert a square matrix, refusing rank-deficient input.

    Args:
        matrix: Square matrix

    Returns:
        The inverse matrix

    Raises:
        SingularMatrixError: If the matrix has no inverse
    """
    n = matrix.shape[0]
    if np.linalg.matrix_rank(matrix) < n:
        raise SingularMatrixError("Could not invert correlation matrix")
    try:
        return np.linalg.inv(matrix)
    except np.linalg.LinAlgError as e:
        raise SingularMatrixError("Could not invert correlation matrix") from e


def _inverse_correlation(data_matrix, var_names: List[str]) -> np.ndarray:
    corr = calculate_matrix(data_matrix, CORRELATION)
    check_dimensions(corr, var_names)
    return invert_matrix(corr)


def anti_image_covariance(inverse: np.ndarray) -> np.ndarray:
    """
    Anti-image covariance from an inverse correlation matrix.

    Diagonal cells are 1 / A_ii, off-diagonal cells -A_ij / (A_ii * A_jj).

    Args:
        inverse: Inverse correlation matrix A

    Returns:
        Anti-image covariance matrix
    """
    d = np.diag(inverse)
    result = -inverse / np.outer(d, d)
    np.fill_diagonal(result, 1.0 / d)
    return result


def anti_image_correlation(inverse: np.ndarray) -> np.ndarray:
    """
    Anti-image correlation from an inverse correlation matrix.

    Diagonal cells are 1.0, off-diagonal cells -A_ij / sqrt(A_ii * A_jj).

    Args:
        inverse: Inverse correlation matrix A

    Returns:
        Anti-image correlation matrix
    """
    d = np.diag(inverse)
    result = -inverse / np.sqrt(np.outer(d, d))
    np.fill_diagonal(result, 1.0)
    return result


def calculate_inverse_correlation_matrix(data_matrix,
                                         var_names: List[str]) -> InverseCorrelationMatrix:
    """
    Compute the inverse of the correlation matrix keyed by variable name.

    Args:
        data_matrix: Data with observations in rows and variables in columns
        var_names: Variable names aligned with the columns

    Returns:
        InverseCorrelationMatrix

    Raises:
        InsufficientDataError: If there are fewer than two observations
        SingularMatrixError: If the correlation matrix has no inverse
    """
    inverse = _inverse_correlation(data_matrix, var_names)
    logger.info(f"Inverted correlation matrix for {len(var_names)} variables")

    return InverseCorrelationMatrix(
        inverse_correlations=square_named_matrix(inverse, var_names).to_nested_dict(),
        variable_order=list(var_names)
    )


def calculate_anti_image_matrices(data_matrix,
                                  var_names: List[str]) -> AntiImageMatrices:
    """
    Compute the anti-image covariance and correlation matrices.

    Args:
        data_matrix: Data with observations in rows and variables in columns
        var_names: Variable names aligned with the columns

    Returns:
        AntiImageMatrices

    Raises:
        InsufficientDataError: If there are fewer than two observations
        SingularMatrixError: If the correlation matrix has no inverse
    """
    inverse = _inverse_correlation(data_matrix, var_names)

    return AntiImageMatrices(
        anti_image_covariance=square_named_matrix(
            anti_image_covariance(inverse), var_names
        ).to_nested_dict(),
        anti_image_correlation=square_named_matrix(
            anti_image_correlation(inverse), var_names
        ).to_nested_dict(),
        variable_order=list(var_names)
    )


def calculate_determinant(data_matrix, var_names: List[str]) -> float:
    """
    Determinant of the correlation matrix.

    A value at or near zero flags collinear variables; no error is raised.

    Args:
        data_matrix: Data with observations in rows and variables in columns
        var_names: Variable names aligned with the columns

    Returns:
        The determinant

    Raises:
        InsufficientDataError: If there are fewer than two observations
    """
    corr = calculate_matrix(data_matrix, CORRELATION)
    check_dimensions(corr, var_names)
    det = float(np.linalg.det(corr))
    if np.isclose(det, 0.0):
        logger.warning("Correlation matrix determinant is close to zero")
    return det
