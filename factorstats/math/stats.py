"""
Statistical functions for the factorstats math module.

This module provides the univariate descriptive statistics and the
significance test used for correlation coefficients.
"""

import math
import numpy as np
from typing import List
from scipy.special import betainc

from factorstats.math.errors import InsufficientDataError
from factorstats.math.matrix import as_data_matrix
from factorstats.models import DescriptiveStatistic


SINGLE_PASS = 'single-pass'
TWO_PASS = 'two-pass'
WELFORD = 'welford'
VARIANCE_METHODS = (SINGLE_PASS, TWO_PASS, WELFORD)

# Keeps the Fisher transform away from ln(0)
R_CLAMP = 0.99999


def incomplete_beta(a: float, b: float, x: float) -> float:
    """
    Regularized incomplete beta function I_x(a, b).

    Args:
        a: First shape parameter (> 0)
        b: Second shape parameter (> 0)
        x: Upper integration limit in [0, 1]

    Returns:
        Value in [0, 1]
    """
    return float(betainc(a, b, x))


def single_pass_variance(values: np.ndarray) -> float:
    """
    Sample variance from running sums of x and x squared.

    Args:
        values: 1-D array of observations

    Returns:
        Sample variance with Bessel's correction
    """
    n = len(values)
    total = 0.0
    total_sq = 0.0
    for x in values:
        total += x
        total_sq += x * x
    variance = (total_sq - total * total / n) / (n - 1)
    # Cancellation can push an exact zero slightly negative
    return max(variance, 0.0)


def two_pass_variance(values: np.ndarray) -> float:
    """
    Sample variance from the centered sum of squares.

    Args:
        values: 1-D array of observations

    Returns:
        Sample variance with Bessel's correction
    """
    n = len(values)
    mean = np.sum(values) / n
    deviations = values - mean
    return float(np.sum(deviations * deviations) / (n - 1))


def welford_variance(values: np.ndarray) -> float:
    """
    Sample variance using Welford's online update.

    Args:
        values: 1-D array of observations

    Returns:
        Sample variance with Bessel's correction
    """
    mean = 0.0
    m2 = 0.0
    for count, x in enumerate(values, start=1):
        delta = x - mean
        mean += delta / count
        m2 += delta * (x - mean)
    return m2 / (len(values) - 1)


_VARIANCE_FUNCTIONS = {
    SINGLE_PASS: single_pass_variance,
    TWO_PASS: two_pass_variance,
    WELFORD: welford_variance,
}


def calculate_descriptive_statistics(data_matrix,
                                     var_names: List[str],
                                     variance_method: str = SINGLE_PASS) -> List[DescriptiveStatistic]:
    """
    Compute mean, standard deviation and sample size for every variable.

    Args:
        data_matrix: Data with observations in rows and variables in columns
        var_names: Variable names aligned with the columns
        variance_method: 'single-pass', 'two-pass' or 'welford'

    Returns:
        One DescriptiveStatistic per variable, in var_names order

    Raises:
        InsufficientDataError: If there are fewer than two observations
        ValueError: If the variance method is unknown or the names do not
            match the columns
    """
    if variance_method not in _VARIANCE_FUNCTIONS:
        raise ValueError(f"Unknown variance method: {variance_method}")

    data = as_data_matrix(data_matrix)
    n_rows, n_cols = data.shape

    if len(var_names) != n_cols:
        raise ValueError(f"Got {len(var_names)} variable names for {n_cols} columns")
    if n_rows < 2:
        raise InsufficientDataError("Not enough data to calculate descriptive statistics")

    variance_fn = _VARIANCE_FUNCTIONS[variance_method]
    stats = []
    for j, name in enumerate(var_names):
        column = data[:, j]
        mean = float(np.sum(column) / n_rows)
        std_dev = math.sqrt(variance_fn(column))
        stats.append(DescriptiveStatistic(
            variable=name,
            mean=mean,
            std_deviation=std_dev,
            analysis_n=n_rows
        ))

    return stats


def fisher_z(r: float) -> float:
    """
    Fisher z-transformation of a correlation coefficient.

    Args:
        r: Correlation coefficient, clamped to [-0.99999, 0.99999]

    Returns:
        0.5 * ln((1 + r) / (1 - r))
    """
    r = max(-R_CLAMP, min(R_CLAMP, r))
    return 0.5 * math.log((1.0 + r) / (1.0 - r))


def correlation_t_statistic(r: float, n: int) -> float:
    """
    Test statistic for a correlation: Fisher z divided by its standard error.

    With three or fewer observations the standard error 1 / sqrt(n - 3) is
    infinite and the statistic is 0.0.

    Args:
        r: Correlation coefficient
        n: Sample size (at least 2)

    Returns:
        z * sqrt(n - 3), or 0.0 when n <= 3

    Raises:
        InsufficientDataError: If n < 2
    """
    if n < 2:
        raise InsufficientDataError(
            f"Not enough data to test a correlation, got {n} observations"
        )
    if n <= 3:
        return 0.0
    se = 1.0 / math.sqrt(n - 3)
    return fisher_z(r) / se


def correlation_p_value(r: float, n: int) -> float:
    """
    One-tailed p-value for a correlation coefficient.

    The Fisher-transformed coefficient is referred to a t distribution with
    n - 2 degrees of freedom through the regularized incomplete beta function.
    Double the result for a two-tailed value. A zero statistic, which
    includes every sample of three or fewer observations, gives 0.5.

    Args:
        r: Correlation coefficient
        n: Sample size (at least 2)

    Returns:
        One-tailed p-value in [0, 1]

    Raises:
        InsufficientDataError: If n < 2
    """
    t = correlation_t_statistic(r, n)
    if t == 0.0:
        return 0.5
    df = float(n - 2)
    x = df / (df + t * t)
    beta = 0.5 * incomplete_beta(0.5 * df, 0.5, x)
    return beta if t > 0.0 else 1.0 - beta


def pair_p_value(r: float, n: int, i: int, j: int) -> float:
    """
    P-value for matrix cell (i, j); diagonal cells are 0.0 by definition.
    """
    if i == j:
        return 0.0
    return correlation_p_value(r, n)
