"""
Descriptives stage of a factor analysis.

This module runs the statistics selected in the configuration over a
dataset and gathers them, together with any stage failures, into a single
DescriptivesResult.
"""

import logging
import time
import pandas as pd
from typing import Any, Callable, List, Optional

from factorstats.components.config import Config, ConfigManager
from factorstats.math.corr import calculate_correlation_matrix, calculate_covariance_matrix
from factorstats.math.errors import MatrixStatsError
from factorstats.math.inverse import (
    calculate_anti_image_matrices, calculate_determinant,
    calculate_inverse_correlation_matrix
)
from factorstats.math.stats import calculate_descriptive_statistics
from factorstats.models import DescriptivesResult
from factorstats.utils.data import extract_data_matrix

logger = logging.getLogger(__name__)


class FactorDescriptives:
    """
    Computes the descriptive matrices that precede factor extraction.
    """

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize the analysis.

        Args:
            config: Configuration; the shared instance is used when omitted
        """
        self.config = config or ConfigManager.get_config()

    def _run_stage(self, name: str, fn: Callable[[], Any], errors: List[str]) -> Any:
        """
        Run one stage, recording its error message instead of raising.

        Args:
            name: Stage name used in logs
            fn: Zero-argument callable computing the stage
            errors: List collecting failure messages

        Returns:
            The stage result, or None if it failed
        """
        try:
            return fn()
        except MatrixStatsError as e:
            logger.error(f"Stage {name} failed: {e}")
            errors.append(f"{name}: {e}")
            return None

    def run(self, frame: pd.DataFrame) -> DescriptivesResult:
        """
        Run every configured stage over a dataset.

        Args:
            frame: Dataset with one column per variable

        Returns:
            DescriptivesResult with the requested stages filled in
        """
        start_time = time.time()

        data, var_names = extract_data_matrix(frame, self.config.get('variables'))
        result = DescriptivesResult(
            variable_order=var_names,
            n_observations=data.shape[0]
        )
        errors = result.errors
        enabled = self.config.descriptive_enabled
        significance = enabled('significance')

        if enabled('univariate'):
            result.descriptive_statistics = self._run_stage(
                'descriptive_statistics',
                lambda: calculate_descriptive_statistics(
                    data, var_names, self.config.get('variance-method')
                ),
                errors
            )

        if self.config.get('descriptives.correlation-matrix'):
            result.correlation_matrix = self._run_stage(
                'correlation_matrix',
                lambda: calculate_correlation_matrix(data, var_names, significance),
                errors
            )

        if enabled('covariance'):
            result.covariance_matrix = self._run_stage(
                'covariance_matrix',
                lambda: calculate_covariance_matrix(data, var_names, significance),
                errors
            )

        if enabled('determinant'):
            result.determinant = self._run_stage(
                'determinant',
                lambda: calculate_determinant(data, var_names),
                errors
            )

        if enabled('inverse'):
            result.inverse_correlation_matrix = self._run_stage(
                'inverse_correlation_matrix',
                lambda: calculate_inverse_correlation_matrix(data, var_names),
                errors
            )

        if enabled('anti-image'):
            result.anti_image_matrices = self._run_stage(
                'anti_image_matrices',
                lambda: calculate_anti_image_matrices(data, var_names),
                errors
            )

        logger.info(
            f"Descriptives for {len(var_names)} variables finished in "
            f"{time.time() - start_time:.2f}s with {len(errors)} errors"
        )
        return result


def run_descriptives(frame: pd.DataFrame, config: Optional[Config] = None) -> DescriptivesResult:
    """
    Convenience wrapper around FactorDescriptives.run.

    Args:
        frame: Dataset with one column per variable
        config: Optional configuration

    Returns:
        DescriptivesResult
    """
    return FactorDescriptives(config).run(frame)
