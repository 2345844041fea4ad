"""
Per-region win tallies and winner reduction.
"""

import logging
from typing import Dict, List, Optional

import numpy as np

logger = logging.getLogger(__name__)


def best_predictor(outputs: np.ndarray, target: float) -> int:
    """Index of the predictor with the smallest absolute error, first on ties"""
    errors = np.abs(np.asarray(outputs, dtype=float) - target)
    return int(np.argmin(errors))


class WinnerTable:
    """
    Counts, for every region, how often each predictor was the most accurate.

    Regions that never received a training case keep the default winner 0.
    That default is a real coverage gap and is reported through
    observed_counts(), unseen_regions() and coverage().
    """

    def __init__(self, n_regions: int, n_predictors: int):
        self.n_regions = n_regions
        self.n_predictors = n_predictors
        self.counts = np.zeros((n_regions, n_predictors), dtype=np.int64)
        self.winners: Optional[np.ndarray] = None

    def record(self, region_id: int, outputs: np.ndarray, target: float) -> int:
        """Credit the best predictor for one training case; returns its index"""
        if self.winners is not None:
            raise RuntimeError("Winner table is already finalized")
        winner = best_predictor(outputs, target)
        self.counts[region_id, winner] += 1
        return winner

    def merge(self, other: "WinnerTable") -> "WinnerTable":
        """Add the counts of a partial table built over other cases"""
        if self.winners is not None:
            raise RuntimeError("Winner table is already finalized")
        if other.counts.shape != self.counts.shape:
            raise ValueError(
                f"Cannot merge tables of shape {other.counts.shape} into {self.counts.shape}"
            )
        self.counts += other.counts
        return self

    def finalize(self) -> np.ndarray:
        """
        Reduce each region to its most frequent winner.

        argmax returns the first maximum, so ties go to the lowest index and
        all-zero rows go to predictor 0.
        """
        winners = np.argmax(self.counts, axis=1).astype(np.int64)
        winners.flags.writeable = False
        self.counts.flags.writeable = False
        self.winners = winners

        unseen = self.n_regions - int(np.count_nonzero(self.observed_counts()))
        logger.info(
            f"Winner table finalized: {self.n_regions} regions, "
            f"{unseen} without training cases"
        )
        return winners

    def winner(self, region_id: int) -> int:
        if self.winners is None:
            raise RuntimeError("Winner table is not finalized")
        return int(self.winners[region_id])

    def observed_counts(self) -> np.ndarray:
        """Number of training cases that landed in each region"""
        return self.counts.sum(axis=1)

    def unseen_regions(self) -> List[int]:
        return [int(r) for r in np.flatnonzero(self.observed_counts() == 0)]

    def coverage(self) -> float:
        """Fraction of regions that saw at least one training case"""
        return float(np.count_nonzero(self.observed_counts())) / self.n_regions

    def winner_distribution(self) -> Dict[int, int]:
        """How many regions each predictor owns"""
        if self.winners is None:
            raise RuntimeError("Winner table is not finalized")
        totals = np.bincount(self.winners, minlength=self.n_predictors)
        return {i: int(n) for i, n in enumerate(totals)}
