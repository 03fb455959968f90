"""
Named Matrix implementation for the factorstats math module.

This module provides a data structure for matrices with named rows and columns.
Statistics are computed on dense numpy arrays and wrapped in a NamedMatrix,
which keeps a name -> position lookup next to the dense storage so that results
can be addressed by variable name without nested dictionaries.
"""

import numpy as np
import pandas as pd
from typing import List, Dict, Union, Optional, Any


class IndexHash:
    """
    Maintains an ordered index of names with fast lookup.
    """

    def __init__(self, names: Optional[List[Any]] = None):
        """
        Initialize an IndexHash with optional initial names.

        Args:
            names: Optional list of initial names

        Raises:
            ValueError: If the names are not unique
        """
        self._names = [] if names is None else list(names)
        self._index_hash = {name: idx for idx, name in enumerate(self._names)}
        if len(self._index_hash) != len(self._names):
            raise ValueError("Index names must be unique")

    def get_names(self) -> List[Any]:
        """Return the ordered list of names."""
        return self._names.copy()

    def index(self, name: Any) -> Optional[int]:
        """
        Get the index for a given name, or None if not found.

        Args:
            name: The name to look up

        Returns:
            The index if found, None otherwise
        """
        return self._index_hash.get(name)

    def __len__(self) -> int:
        """Return the number of names in the index."""
        return len(self._names)


class NamedMatrix:
    """
    A matrix with named rows and columns.

    The dense values live in a pandas DataFrame; lookups by name go through
    the row and column IndexHash objects and hit the numpy array positionally.
    """

    def __init__(self,
                 matrix: Optional[Union[np.ndarray, pd.DataFrame]] = None,
                 rownames: Optional[List[Any]] = None,
                 colnames: Optional[List[Any]] = None):
        """
        Initialize a NamedMatrix with optional initial data.

        Args:
            matrix: Initial matrix data (numpy array or pandas DataFrame)
            rownames: List of row names
            colnames: List of column names
        """
        if isinstance(matrix, pd.DataFrame):
            self._matrix = matrix.copy()
            if rownames is not None:
                self._matrix.index = rownames
            if colnames is not None:
                self._matrix.columns = colnames
        elif matrix is None:
            self._matrix = pd.DataFrame(
                index=[] if rownames is None else list(rownames),
                columns=[] if colnames is None else list(colnames),
                dtype=float
            )
        else:
            matrix = np.asarray(matrix)
            rows = rownames if rownames is not None else range(matrix.shape[0])
            cols = colnames if colnames is not None else range(matrix.shape[1])
            self._matrix = pd.DataFrame(
                matrix,
                index=list(rows),
                columns=list(cols)
            )

        self._row_index = IndexHash(self._matrix.index)
        self._col_index = IndexHash(self._matrix.columns)

    @property
    def matrix(self) -> pd.DataFrame:
        """Get the underlying DataFrame."""
        return self._matrix

    @property
    def values(self) -> np.ndarray:
        """Get the matrix as a numpy array."""
        return self._matrix.values

    @property
    def shape(self):
        """Get the (rows, columns) shape of the matrix."""
        return self._matrix.shape

    def rownames(self) -> List[Any]:
        """Get the list of row names."""
        return self._row_index.get_names()

    def colnames(self) -> List[Any]:
        """Get the list of column names."""
        return self._col_index.get_names()

    def get(self, row: Any, col: Any) -> float:
        """
        Get a single value by row and column name.

        Args:
            row: Row name
            col: Column name

        Returns:
            The value at (row, col)
        """
        i = self._row_index.index(row)
        j = self._col_index.index(col)
        if i is None:
            raise KeyError(f"Row name '{row}' not found")
        if j is None:
            raise KeyError(f"Column name '{col}' not found")
        return float(self.values[i, j])

    def to_nested_dict(self) -> Dict[Any, Dict[Any, float]]:
        """
        Convert the matrix to a row name -> (column name -> value) mapping.

        Returns:
            Nested dictionary view of the matrix
        """
        colnames = self.colnames()
        return {
            row: {col: float(value) for col, value in zip(colnames, row_values)}
            for row, row_values in zip(self.rownames(), self.values)
        }

    def __repr__(self) -> str:
        """
        String representation of the NamedMatrix.
        """
        return f"NamedMatrix(rows={len(self.rownames())}, cols={len(self.colnames())})"

    def __str__(self) -> str:
        """
        Human-readable string representation.
        """
        return (f"NamedMatrix with {len(self.rownames())} rows and "
                f"{len(self.colnames())} columns\n{self._matrix}")


# Utility functions

def create_named_matrix(matrix_data: Optional[Union[np.ndarray, List[List[Any]]]] = None,
                        rownames: Optional[List[Any]] = None,
                        colnames: Optional[List[Any]] = None) -> NamedMatrix:
    """
    Create a NamedMatrix from data.

    Args:
        matrix_data: Initial matrix data (numpy array or nested lists)
        rownames: List of row names
        colnames: List of column names

    Returns:
        A new NamedMatrix
    """
    if matrix_data is not None and not isinstance(matrix_data, np.ndarray):
        matrix_data = np.array(matrix_data, dtype=float)
    return NamedMatrix(matrix_data, rownames, colnames)


def square_named_matrix(matrix_data: Union[np.ndarray, List[List[Any]]],
                        names: List[Any]) -> NamedMatrix:
    """
    Create a square NamedMatrix that uses the same names for rows and columns.

    Args:
        matrix_data: Square matrix data
        names: Names for both rows and columns

    Returns:
        A new NamedMatrix
    """
    return create_named_matrix(matrix_data, names, names)


def from_nested_dict(nested: Dict[Any, Dict[Any, float]],
                     names: List[Any]) -> NamedMatrix:
    """
    Build a square NamedMatrix from a nested mapping in the given name order.

    Args:
        nested: Row name -> (column name -> value) mapping
        names: Ordered names used for rows and columns

    Returns:
        A new NamedMatrix
    """
    values = np.array([[nested[row][col] for col in names] for row in names], dtype=float)
    return square_named_matrix(values.reshape(len(names), len(names)), names)
