"""
Result models for factorstats.

Every matrix result is keyed by variable name and carries the variable order
it was built from, so consumers can render tables by name or by position.
Single-cell lookups go through a NamedMatrix built on first use.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, PrivateAttr

from factorstats.math.named_matrix import NamedMatrix, from_nested_dict


NestedMatrix = Dict[str, Dict[str, float]]


class DescriptiveStatistic(BaseModel):
    """Univariate descriptive statistics for one variable."""

    variable: str
    mean: float
    std_deviation: float
    analysis_n: int


class CorrelationMatrix(BaseModel):
    """
    Correlation or covariance matrix with optional one-tailed p-values.

    `sig_values` has one inner mapping per variable; the inner mappings are
    empty when significance was not requested.
    """

    correlations: NestedMatrix
    sig_values: NestedMatrix = Field(default_factory=dict)
    variable_order: List[str]

    _named: Optional[NamedMatrix] = PrivateAttr(default=None)

    def value(self, row: str, col: str) -> float:
        return self.to_named_matrix().get(row, col)

    def significance(self, row: str, col: str) -> Optional[float]:
        """Return the p-value for a pair, or None when it was not computed."""
        return self.sig_values.get(row, {}).get(col)

    def has_significance(self) -> bool:
        return any(self.sig_values.get(name) for name in self.variable_order)

    def to_named_matrix(self) -> NamedMatrix:
        if self._named is None:
            self._named = from_nested_dict(self.correlations, self.variable_order)
        return self._named


class InverseCorrelationMatrix(BaseModel):
    """Inverse of a correlation matrix."""

    inverse_correlations: NestedMatrix
    variable_order: List[str]

    _named: Optional[NamedMatrix] = PrivateAttr(default=None)

    def value(self, row: str, col: str) -> float:
        return self.to_named_matrix().get(row, col)

    def to_named_matrix(self) -> NamedMatrix:
        if self._named is None:
            self._named = from_nested_dict(self.inverse_correlations, self.variable_order)
        return self._named


class AntiImageMatrices(BaseModel):
    """Anti-image covariance and correlation matrices."""

    anti_image_covariance: NestedMatrix
    anti_image_correlation: NestedMatrix
    variable_order: List[str]

    _named: Optional[Dict[str, NamedMatrix]] = PrivateAttr(default=None)

    def covariance(self, row: str, col: str) -> float:
        return self.to_named_matrices()['covariance'].get(row, col)

    def correlation(self, row: str, col: str) -> float:
        return self.to_named_matrices()['correlation'].get(row, col)

    def to_named_matrices(self) -> Dict[str, NamedMatrix]:
        if self._named is None:
            self._named = {
                'covariance': from_nested_dict(self.anti_image_covariance, self.variable_order),
                'correlation': from_nested_dict(self.anti_image_correlation, self.variable_order),
            }
        return self._named


class DescriptivesResult(BaseModel):
    """
    Everything one descriptives run produced.

    Stages that were not requested, or that failed, are None. Failure
    messages are collected in `errors`.
    """

    variable_order: List[str]
    n_observations: int
    descriptive_statistics: Optional[List[DescriptiveStatistic]] = None
    correlation_matrix: Optional[CorrelationMatrix] = None
    covariance_matrix: Optional[CorrelationMatrix] = None
    determinant: Optional[float] = None
    inverse_correlation_matrix: Optional[InverseCorrelationMatrix] = None
    anti_image_matrices: Optional[AntiImageMatrices] = None
    errors: List[str] = Field(default_factory=list)
