"""
Factorstats package for factor analysis descriptives.

Computes correlation, covariance, inverse and anti-image matrices,
descriptive statistics and correlation significance for the stage that
precedes factor extraction.
"""

__version__ = '0.1.0'

from factorstats.math.errors import (
    MatrixStatsError, InsufficientDataError, DimensionMismatchError, SingularMatrixError
)
from factorstats.math.matrix import calculate_matrix
from factorstats.math.stats import calculate_descriptive_statistics, correlation_p_value
from factorstats.math.corr import calculate_correlation_matrix, calculate_covariance_matrix
from factorstats.math.inverse import (
    calculate_inverse_correlation_matrix, calculate_anti_image_matrices, calculate_determinant
)
from factorstats.models import (
    CorrelationMatrix, InverseCorrelationMatrix, AntiImageMatrices,
    DescriptiveStatistic, DescriptivesResult
)
from factorstats.analysis import FactorDescriptives, run_descriptives
from factorstats.components.config import Config, ConfigManager
