"""
After-the-Fact Oracle

Combines several trained scalar predictors of the same target. During
training the oracle looks at where each case falls in the joint space of the
predictors' quantized outputs and, with the true target in hand, records
which predictor was closest. At inference the same region lookup picks the
predictor that won most often there and returns its output.

Features:
- Nearest-rank quantile bands per predictor
- Mixed-radix region ids shared by training and inference
- Win tallies with coverage diagnostics for sparse regions
- Read-only state after construction, safe for concurrent predict calls

The number of regions is categories ** predictors. With more than a couple
of categories most regions see few or no training cases; those fall back to
predictor 0.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from ensemble.errors import (
    NotTrainedError,
    OracleConfigError,
    OracleInputError,
    PredictorOutputError,
)
from ensemble.regions import DEFAULT_MAX_REGIONS, RegionIndexer, check_region_budget
from ensemble.thresholds import build_threshold_table
from ensemble.winners import WinnerTable

logger = logging.getLogger(__name__)


class Predictor:
    """Interface for the models being combined"""

    def predict(self, inputs: np.ndarray) -> float:
        """Return a scalar prediction for one input vector"""
        raise NotImplementedError


class EstimatorPredictor(Predictor):
    """Wraps an estimator whose predict() takes a 2-D batch (scikit-learn style)"""

    def __init__(self, estimator: Any):
        self.estimator = estimator

    def predict(self, inputs: np.ndarray) -> float:
        batch = np.asarray(inputs, dtype=float).reshape(1, -1)
        return float(np.ravel(self.estimator.predict(batch))[0])


class AfterFactOracle:
    """
    Oracle that selects, per output region, the predictor that won most often
    on the training set.

    training_set is row-major: ncases rows of ninputs inputs followed by the
    true target, flat or already shaped (ncases, ninputs + 1). Passing None
    creates an untrained oracle; call fit() before predict().
    """

    def __init__(
        self,
        ncases: int,
        ninputs: int,
        training_set: Optional[Sequence[float]],
        predictors: Sequence[Predictor],
        categories: int = 2,
        max_regions: int = DEFAULT_MAX_REGIONS
    ):
        if ncases < 1:
            raise OracleConfigError(f"ncases must be at least 1, got {ncases}")
        if ninputs < 1:
            raise OracleConfigError(f"ninputs must be at least 1, got {ninputs}")

        self.ncases = ncases
        self.ninputs = ninputs
        self.predictors = list(predictors)
        self.categories = categories
        self.max_regions = max_regions

        # Validated before anything proportional to it is allocated
        self.n_regions = check_region_budget(categories, len(self.predictors), max_regions)

        self.thresholds: Optional[np.ndarray] = None
        self.indexer: Optional[RegionIndexer] = None
        self.winner_table: Optional[WinnerTable] = None
        self.training_mse: Optional[np.ndarray] = None
        self._fitted = False

        if self.n_regions > ncases:
            logger.warning(
                f"{self.n_regions} regions for {ncases} training cases; "
                f"many regions will default to predictor 0"
            )

        if training_set is not None:
            self.fit(training_set)

    @property
    def n_predictors(self) -> int:
        return len(self.predictors)

    @property
    def is_fitted(self) -> bool:
        return self._fitted

    def _training_rows(self, training_set: Sequence[float]) -> np.ndarray:
        rows = np.asarray(training_set, dtype=float)
        width = self.ninputs + 1
        if rows.ndim == 1:
            if rows.size != self.ncases * width:
                raise OracleConfigError(
                    f"Training set has {rows.size} values, expected "
                    f"{self.ncases} cases x {width} = {self.ncases * width}"
                )
            rows = rows.reshape(self.ncases, width)
        elif rows.shape != (self.ncases, width):
            raise OracleConfigError(
                f"Training set shape {rows.shape} does not match ({self.ncases}, {width})"
            )

        if not np.all(np.isfinite(rows[:, -1])):
            raise PredictorOutputError("Training targets must be finite")
        return rows

    def _evaluate(self, inputs: np.ndarray) -> np.ndarray:
        """Outputs of every predictor for one input vector, in a fresh buffer"""
        outputs = np.empty(self.n_predictors)
        for j, predictor in enumerate(self.predictors):
            value = np.asarray(predictor.predict(inputs), dtype=float)
            if value.size != 1:
                raise PredictorOutputError(
                    f"Predictor {j} returned {value.size} values, expected a scalar"
                )
            outputs[j] = value.reshape(-1)[0]
            if not np.isfinite(outputs[j]):
                raise PredictorOutputError(f"Predictor {j} returned {outputs[j]}")
        return outputs

    def fit(self, training_set: Sequence[float]) -> "AfterFactOracle":
        """Run the training pass: thresholds, region assignment, win tallies"""
        self._fitted = False
        rows = self._training_rows(training_set)
        inputs, targets = rows[:, :self.ninputs], rows[:, self.ninputs]

        outputs = np.vstack([self._evaluate(x) for x in inputs])

        thresholds = build_threshold_table(outputs, self.categories)
        indexer = RegionIndexer(thresholds)

        table = WinnerTable(self.n_regions, self.n_predictors)
        for row_outputs, region_id, target in zip(outputs, indexer.regions_of(outputs), targets):
            table.record(int(region_id), row_outputs, target)
        table.finalize()

        self.thresholds = thresholds
        self.indexer = indexer
        self.winner_table = table
        self.training_mse = np.mean((outputs - targets[:, None]) ** 2, axis=0)
        self._fitted = True

        logger.info(
            f"Oracle trained on {self.ncases} cases with {self.n_predictors} predictors, "
            f"{self.categories} categories, coverage {table.coverage():.1%}"
        )
        return self

    def _check_input(self, inputs: Sequence[float]) -> np.ndarray:
        if not self._fitted:
            raise NotTrainedError("Oracle not trained")
        x = np.asarray(inputs, dtype=float).ravel()
        if x.size < self.ninputs:
            raise OracleInputError(f"Expected {self.ninputs} inputs, got {x.size}")
        return x[:self.ninputs]

    def select(self, inputs: Sequence[float]) -> Tuple[float, int, int]:
        """
        Prediction with its provenance.

        Returns: (prediction, winning predictor index, region id)
        """
        x = self._check_input(inputs)
        outputs = self._evaluate(x)
        region_id = self.indexer.region_of(outputs)
        winner = self.winner_table.winner(region_id)
        return float(outputs[winner]), winner, region_id

    def predict(self, inputs: Sequence[float]) -> float:
        """Output of the predictor that owns this input's region"""
        return self.select(inputs)[0]

    def predict_many(self, inputs: np.ndarray) -> np.ndarray:
        """
        predict() for each row of a (cases, ninputs) array.

        A 1-D array is accepted only for single-input oracles, as one case per value.
        """
        batch = np.asarray(inputs, dtype=float)
        if batch.ndim == 1:
            if self.ninputs != 1:
                raise OracleInputError(
                    f"Expected a (cases, {self.ninputs}) array, got shape {batch.shape}"
                )
            batch = batch.reshape(-1, 1)
        if batch.ndim != 2 or batch.shape[1] < self.ninputs:
            raise OracleInputError(
                f"Expected a (cases, {self.ninputs}) array, got shape {batch.shape}"
            )
        return np.array([self.predict(row) for row in batch])

    def region_of(self, inputs: Sequence[float]) -> int:
        """Region the predictors place this input in"""
        x = self._check_input(inputs)
        return self.indexer.region_of(self._evaluate(x))

    def statistics(self) -> Dict[str, Any]:
        """Training summary and coverage diagnostics"""
        if not self._fitted:
            raise NotTrainedError("Oracle not trained")

        observed = self.winner_table.observed_counts()
        stats = {
            "ncases": self.ncases,
            "predictors": self.n_predictors,
            "categories": self.categories,
            "regions": self.n_regions,
            "observed_regions": int(np.count_nonzero(observed)),
            "unseen_regions": int(np.count_nonzero(observed == 0)),
            "coverage": self.winner_table.coverage(),
            "max_cases_per_region": int(observed.max()),
            "winner_distribution": self.winner_table.winner_distribution(),
            "training_mse": [float(m) for m in self.training_mse],
            "thresholds": self.thresholds.tolist(),
        }
        return stats

    def winners(self) -> List[int]:
        """Winning predictor per region id"""
        if not self._fitted:
            raise NotTrainedError("Oracle not trained")
        return [int(w) for w in self.winner_table.winners]
