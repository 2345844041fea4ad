"""
Quantile threshold construction.

Each predictor's training outputs are cut into `categories` bands of (nearly)
equal population. Cut points are taken by nearest rank from the sorted
outputs, never interpolated, so every threshold is a value the predictor
actually produced.
"""

import logging

import numpy as np

from ensemble.errors import OracleConfigError

logger = logging.getLogger(__name__)


def quantile_thresholds(outputs: np.ndarray, categories: int) -> np.ndarray:
    """
    Nearest-rank cut points for one predictor.

    Threshold i-1 (i = 1..categories-1) is the sorted output at rank
    floor(i / categories * (n - 1)). The result is non-decreasing; repeated
    values are kept, which simply merges bands.
    """
    if categories < 2:
        raise OracleConfigError(f"categories must be at least 2, got {categories}")

    values = np.sort(np.asarray(outputs, dtype=float).ravel())
    n = len(values)
    if n < 1:
        raise OracleConfigError("Cannot build thresholds from an empty output set")

    thresholds = np.empty(categories - 1)
    for i in range(1, categories):
        frac = i / categories
        thresholds[i - 1] = values[int(frac * (n - 1))]

    return thresholds


def build_threshold_table(outputs: np.ndarray, categories: int) -> np.ndarray:
    """
    Threshold table for every predictor.

    outputs shape: (ncases, npredictors)
    Returns shape: (npredictors, categories - 1)
    """
    outputs = np.asarray(outputs, dtype=float)
    if outputs.ndim != 2:
        raise OracleConfigError(
            f"Expected a (cases, predictors) output matrix, got shape {outputs.shape}"
        )

    table = np.vstack([
        quantile_thresholds(outputs[:, j], categories)
        for j in range(outputs.shape[1])
    ])

    # Collapsed bands are expected with small or discrete output sets
    for j, row in enumerate(table):
        distinct = len(np.unique(row))
        if distinct < len(row):
            logger.debug(
                f"Predictor {j}: {len(row) - distinct} duplicate thresholds, "
                f"{distinct + 1} effective categories"
            )

    table.flags.writeable = False
    return table
