"""
Error types raised by the factorstats math functions.
"""


class MatrixStatsError(ValueError):
    """Base class for failures of a matrix statistics computation."""


class InsufficientDataError(MatrixStatsError):
    """Raised when there are too few observations to estimate a statistic."""


class DimensionMismatchError(MatrixStatsError):
    """Raised when a computed matrix does not match the variable count."""


class SingularMatrixError(MatrixStatsError):
    """Raised when the correlation matrix has no inverse."""
