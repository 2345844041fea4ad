"""
Region indexing for the joint output space of several predictors.

Each predictor output is quantized into a category digit using that
predictor's thresholds; the digits form a mixed-radix number (base =
categories, predictor 0 is the least significant digit) which identifies
the region.
"""

from typing import List, Sequence

import numpy as np

from ensemble.errors import OracleConfigError

DEFAULT_MAX_REGIONS = 1_000_000


def region_count(categories: int, predictors: int) -> int:
    """Total number of regions, categories ** predictors"""
    if categories < 2:
        raise OracleConfigError(f"categories must be at least 2, got {categories}")
    if predictors < 1:
        raise OracleConfigError(f"predictors must be at least 1, got {predictors}")
    return categories ** predictors


def check_region_budget(
    categories: int,
    predictors: int,
    max_regions: int = DEFAULT_MAX_REGIONS
) -> int:
    """Return the region count, refusing configurations above max_regions"""
    n_regions = region_count(categories, predictors)
    if n_regions > max_regions:
        raise OracleConfigError(
            f"{categories} categories ** {predictors} predictors = {n_regions} regions "
            f"exceeds the limit of {max_regions}"
        )
    return n_regions


def encode_region(digits: Sequence[int], categories: int) -> int:
    """Mixed-radix encoding, first digit least significant"""
    region_id = 0
    multiplier = 1
    for k in digits:
        if not 0 <= k < categories:
            raise ValueError(f"Digit {k} outside [0, {categories})")
        region_id += int(k) * multiplier
        multiplier *= categories
    return region_id


def decode_region(region_id: int, categories: int, predictors: int) -> List[int]:
    """Inverse of encode_region"""
    n_regions = region_count(categories, predictors)
    if not 0 <= region_id < n_regions:
        raise ValueError(f"Region {region_id} outside [0, {n_regions})")

    digits = []
    for _ in range(predictors):
        region_id, k = divmod(region_id, categories)
        digits.append(k)
    return digits


def category_of(thresholds: np.ndarray, value: float) -> int:
    """
    Category digit of one output given that predictor's ascending thresholds.

    value <= thresholds[0] gives 0, value > thresholds[-1] gives
    len(thresholds), otherwise the smallest j with value <= thresholds[j].
    A value equal to a threshold belongs to the lower band.
    """
    return int(np.searchsorted(thresholds, value, side="left"))


class RegionIndexer:
    """
    Maps predictor output vectors to region ids through a threshold table.

    The same instance serves the training pass and inference so both phases
    quantize with one rule.
    """

    def __init__(self, thresholds: np.ndarray):
        thresholds = np.asarray(thresholds, dtype=float)
        if thresholds.ndim != 2 or thresholds.shape[1] < 1:
            raise OracleConfigError(
                f"Threshold table must be (predictors, categories - 1), got {thresholds.shape}"
            )
        self.thresholds = thresholds
        self.n_predictors = thresholds.shape[0]
        self.categories = thresholds.shape[1] + 1
        self.n_regions = region_count(self.categories, self.n_predictors)

    def digits(self, outputs: Sequence[float]) -> List[int]:
        if len(outputs) != self.n_predictors:
            raise ValueError(
                f"Expected {self.n_predictors} predictor outputs, got {len(outputs)}"
            )
        return [
            category_of(self.thresholds[j], outputs[j])
            for j in range(self.n_predictors)
        ]

    def region_of(self, outputs: Sequence[float]) -> int:
        return encode_region(self.digits(outputs), self.categories)

    def regions_of(self, outputs: np.ndarray) -> np.ndarray:
        """Region ids for a (cases, predictors) matrix of outputs"""
        outputs = np.asarray(outputs, dtype=float)
        if outputs.ndim != 2 or outputs.shape[1] != self.n_predictors:
            raise ValueError(
                f"Expected a (cases, {self.n_predictors}) output matrix, got {outputs.shape}"
            )
        return np.array([self.region_of(row) for row in outputs], dtype=np.int64)
