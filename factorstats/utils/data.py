"""
Data extraction for factorstats.

Turns a tabular dataset into the dense numeric matrix and aligned variable
names that the math functions expect.
"""

import logging
import numpy as np
import pandas as pd
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


def select_variables(frame: pd.DataFrame,
                     variables: Optional[List[str]] = None) -> List[str]:
    """
    Resolve which columns take part in the analysis.

    Args:
        frame: Source dataset
        variables: Requested variable names, or None for every numeric column

    Returns:
        Ordered list of variable names

    Raises:
        KeyError: If a requested variable is not a column of the frame
        ValueError: If a variable is requested twice
    """
    if not variables:
        return [str(col) for col in frame.select_dtypes(include=[np.number]).columns]

    if len(set(variables)) != len(variables):
        raise ValueError(f"Duplicate variable names in {variables}")

    missing = [name for name in variables if name not in frame.columns]
    if missing:
        raise KeyError(f"Variables not found in dataset: {missing}")

    return list(variables)


def extract_data_matrix(frame: pd.DataFrame,
                        variables: Optional[List[str]] = None) -> Tuple[np.ndarray, List[str]]:
    """
    Extract a complete numeric data matrix from a dataset.

    Values are coerced to numbers; rows with any missing or non-numeric value
    in the selected variables are dropped listwise.

    Args:
        frame: Source dataset
        variables: Variable names to extract, in order (all numeric columns
            when omitted)

    Returns:
        Tuple of (data matrix with observations in rows, variable names)
    """
    names = select_variables(frame, variables)
    numeric = frame[names].apply(pd.to_numeric, errors='coerce')

    complete = numeric.dropna(axis=0, how='any')
    dropped = len(numeric) - len(complete)
    if dropped:
        logger.warning(f"Dropped {dropped} incomplete rows out of {len(numeric)}")

    logger.info(f"Extracted {len(complete)} observations of {len(names)} variables")
    return complete.to_numpy(dtype=float), names
