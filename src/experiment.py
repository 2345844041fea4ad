"""
Oracle experiment harness.

Each trial draws a fresh synthetic dataset, trains the baseline networks,
builds an after-the-fact oracle over them and measures mean squared error on
a held-out test set ten times the training size. Errors are averaged over
trials and the oracle is compared with the mean error of the raw models.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple
from dataclasses import dataclass, field
import pandas as pd
import numpy as np
import torch
from scipy import stats
from sklearn.metrics import mean_squared_error

from ensemble import AfterFactOracle, DEFAULT_MAX_REGIONS
from src.data.synthetic import NINPUTS, generate_cases, training_sets_for
from src.predict import TorchPredictor, predict_batch
from src.train import train_baselines

logger = logging.getLogger(__name__)


@dataclass
class ExperimentConfig:
    """Parameters of a repeated oracle experiment"""
    nsamples: int
    categories: int
    nmodels: int
    ntries: int
    std: float
    test_multiplier: int = 10
    seed: Optional[int] = None
    max_regions: int = DEFAULT_MAX_REGIONS
    model: Dict[str, Any] = field(default_factory=dict)

    def validate(self):
        errors = []
        if self.nsamples <= 0:
            errors.append("nsamples must be positive")
        if self.categories <= 1:
            errors.append("categories must be at least 2")
        if self.nmodels <= 0:
            errors.append("nmodels must be positive")
        if self.ntries <= 0:
            errors.append("ntries must be positive")
        if self.std < 0.0:
            errors.append("std must not be negative")
        if self.test_multiplier <= 0:
            errors.append("test_multiplier must be positive")
        return errors


@dataclass
class TrialResult:
    """Test-set errors from one trial"""
    trial: int
    raw_errors: List[float]
    oracle_error: float
    coverage: float

    @property
    def mean_raw_error(self) -> float:
        return float(np.mean(self.raw_errors))


@dataclass
class ExperimentResult:
    """Accumulated results over all completed trials"""
    config: ExperimentConfig
    trials: List[TrialResult] = field(default_factory=list)
    interrupted: bool = False

    @property
    def completed(self) -> int:
        return len(self.trials)

    @property
    def raw_errors(self) -> List[float]:
        """Per-model error averaged over trials"""
        if not self.trials:
            return []
        return [float(e) for e in np.mean([t.raw_errors for t in self.trials], axis=0)]

    @property
    def mean_raw_error(self) -> float:
        return float(np.mean(self.raw_errors)) if self.trials else float("nan")

    @property
    def oracle_error(self) -> float:
        return float(np.mean([t.oracle_error for t in self.trials])) if self.trials else float("nan")

    def paired_test(self) -> Optional[Tuple[float, float]]:
        """Paired t-test of oracle error against mean raw error, per trial"""
        if self.completed < 2:
            return None
        oracle = [t.oracle_error for t in self.trials]
        raw = [t.mean_raw_error for t in self.trials]
        if np.allclose(oracle, raw):
            return None
        result = stats.ttest_rel(oracle, raw)
        return float(result.statistic), float(result.pvalue)

    def to_dataframe(self) -> pd.DataFrame:
        rows = []
        for t in self.trials:
            row = {"trial": t.trial}
            for i, e in enumerate(t.raw_errors):
                row[f"model_{i}_mse"] = e
            row["mean_raw_mse"] = t.mean_raw_error
            row["oracle_mse"] = t.oracle_error
            row["coverage"] = t.coverage
            rows.append(row)
        return pd.DataFrame(rows)


def run_trial(config: ExperimentConfig, trial: int, rng: np.random.Generator) -> TrialResult:
    """Train the baselines and the oracle on fresh data and score them"""
    cases = generate_cases(config.nsamples, config.std, rng)
    test = generate_cases(config.test_multiplier * config.nsamples, config.std, rng)
    X_test, y_test = test[:, :NINPUTS], test[:, NINPUTS]

    models = train_baselines(training_sets_for(cases, config.nmodels, rng), cfg=config.model)
    raw_errors = [
        float(mean_squared_error(y_test, predict_batch(model, X_test)))
        for model in models
    ]

    predictors = [TorchPredictor(model, NINPUTS) for model in models]
    oracle = AfterFactOracle(
        config.nsamples,
        NINPUTS,
        cases,
        predictors,
        categories=config.categories,
        max_regions=config.max_regions
    )
    oracle_error = float(mean_squared_error(y_test, oracle.predict_many(X_test)))

    return TrialResult(
        trial=trial,
        raw_errors=raw_errors,
        oracle_error=oracle_error,
        coverage=oracle.winner_table.coverage()
    )


def run_experiment(
    config: ExperimentConfig,
    on_trial: Optional[Callable[[ExperimentResult], None]] = None
) -> ExperimentResult:
    """
    Run all trials. Ctrl-C between or during a trial stops the run and keeps
    the trials already completed.
    """
    errors = config.validate()
    if errors:
        raise ValueError("; ".join(errors))

    rng = np.random.default_rng(config.seed)
    if config.seed is not None:
        torch.manual_seed(config.seed)

    result = ExperimentResult(config=config)
    logger.info(
        f"Starting {config.ntries} trials: {config.nsamples} samples, "
        f"{config.nmodels} models, {config.categories} categories"
    )

    for trial in range(config.ntries):
        try:
            result.trials.append(run_trial(config, trial, rng))
        except KeyboardInterrupt:
            logger.warning(f"Interrupted after {result.completed} completed trials")
            result.interrupted = True
            break
        if on_trial:
            on_trial(result)

    return result


def format_progress(result: ExperimentResult) -> str:
    """Running averages after the latest trial"""
    raw = "  ".join(f"{e:.4f}" for e in result.raw_errors)
    lines = [
        f"Did {result.completed:5d}    Raw errors:  {raw}",
        f"       Mean raw error = {result.mean_raw_error:8.5f}",
        f"      AfterFact error = {result.oracle_error:8.5f}",
    ]
    return "\n".join(lines)


def print_results(result: ExperimentResult):
    """Print experiment summary in readable format"""
    print("\n" + "=" * 50)
    print("AFTER-THE-FACT ORACLE RESULTS")
    print("=" * 50)
    print(f"Trials completed:  {result.completed} of {result.config.ntries}"
          + (" (interrupted)" if result.interrupted else ""))
    print(f"Regions:           {result.config.categories ** result.config.nmodels}")
    print("-" * 50)
    for i, e in enumerate(result.raw_errors):
        print(f"Model {i} MSE:       {e:.5f}")
    print(f"Mean raw MSE:      {result.mean_raw_error:.5f}")
    print(f"Oracle MSE:        {result.oracle_error:.5f}")
    test = result.paired_test()
    if test:
        print(f"Paired t-test:     t={test[0]:.3f}, p={test[1]:.4f}")
    print("=" * 50)
