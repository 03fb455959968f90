"""
Correlation and covariance matrix computation.

This module builds the square matrix that every later stage consumes. The
formulas are the textbook Pearson and Bessel-corrected sample covariance
estimators, evaluated cell by cell over centered columns.
"""

import logging
import numpy as np
from typing import List

from factorstats.math.errors import InsufficientDataError

logger = logging.getLogger(__name__)

CORRELATION = 'correlation'
COVARIANCE = 'covariance'
MATRIX_TYPES = (CORRELATION, COVARIANCE)


def as_data_matrix(data_matrix) -> np.ndarray:
    """
    Coerce input data to a 2-D float array (rows = observations).

    Args:
        data_matrix: Array-like data

    Returns:
        2-D numpy array of floats
    """
    data = np.asarray(data_matrix, dtype=float)
    if data.ndim == 1:
        data = data.reshape(-1, 1)
    if data.ndim != 2:
        raise ValueError(f"Data matrix must be 2-dimensional, got {data.ndim} dimensions")
    return data


def column_means(data: np.ndarray) -> np.ndarray:
    """
    Compute column means by simple summation divided by the row count.

    Args:
        data: 2-D data array

    Returns:
        Vector of column means
    """
    return np.sum(data, axis=0) / data.shape[0]


def zero_variance_columns(data: np.ndarray) -> List[int]:
    """
    Find the columns whose centered sum of squares is exactly zero.

    Args:
        data: 2-D data array

    Returns:
        List of column positions
    """
    centered = data - column_means(data)
    return [j for j in range(data.shape[1]) if np.sum(centered[:, j] * centered[:, j]) == 0.0]


def calculate_matrix(data_matrix, matrix_type: str = CORRELATION) -> np.ndarray:
    """
    Compute a correlation or covariance matrix from a data matrix.

    For correlations, a pair whose denominator is exactly zero (one of the
    columns has no variation) is set to 1.0 on the diagonal and 0.0 elsewhere.

    Args:
        data_matrix: Data with observations in rows and variables in columns
        matrix_type: 'correlation' or 'covariance'

    Returns:
        Square numpy array of shape (n_variables, n_variables)

    Raises:
        InsufficientDataError: If there are fewer than two observations
        ValueError: If matrix_type is not recognised
    """
    if matrix_type not in MATRIX_TYPES:
        raise ValueError(f"Unknown matrix type: {matrix_type}")

    data = as_data_matrix(data_matrix)
    n_rows, n_cols = data.shape

    if n_rows < 2:
        raise InsufficientDataError("Not enough data to calculate matrix")

    centered = data - column_means(data)
    result = np.zeros((n_cols, n_cols))

    if matrix_type == CORRELATION:
        for i in range(n_cols):
            dx = centered[:, i]
            for j in range(n_cols):
                dy = centered[:, j]
                sum_xy = np.sum(dx * dy)
                sum_x2 = np.sum(dx * dx)
                sum_y2 = np.sum(dy * dy)

                # Separate roots keep large and tiny magnitudes in range
                denominator = np.sqrt(sum_x2) * np.sqrt(sum_y2)
                if not np.isfinite(denominator):
                    logger.warning(f"Non-finite denominator for variables {i} and {j}")
                if i == j or not denominator > 0.0:
                    result[i, j] = 1.0 if i == j else 0.0
                else:
                    result[i, j] = sum_xy / denominator
    else:
        for i in range(n_cols):
            dx = centered[:, i]
            for j in range(n_cols):
                result[i, j] = np.sum(dx * centered[:, j]) / (n_rows - 1)

    logger.debug(f"Computed {n_cols}x{n_cols} {matrix_type} matrix from {n_rows} observations")
    return result


def covariance_to_correlation(covariance: np.ndarray, i: int, j: int) -> float:
    """
    Convert one covariance cell to a correlation coefficient.

    Args:
        covariance: Square covariance matrix
        i: Row position
        j: Column position

    Returns:
        cov_ij / (std_i * std_j), or 0.0 if either standard deviation is zero
    """
    std_i = np.sqrt(covariance[i, i])
    std_j = np.sqrt(covariance[j, j])
    if std_i > 0.0 and std_j > 0.0:
        return float(covariance[i, j] / (std_i * std_j))
    return 0.0
