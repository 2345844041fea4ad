"""
After-the-fact oracle ensemble: per-region selection among trained predictors.
"""

from ensemble.after_fact import (
    AfterFactOracle,
    EstimatorPredictor,
    Predictor,
)
from ensemble.errors import (
    NotTrainedError,
    OracleConfigError,
    OracleError,
    OracleInputError,
    PredictorOutputError,
)
from ensemble.regions import (
    DEFAULT_MAX_REGIONS,
    RegionIndexer,
    category_of,
    check_region_budget,
    decode_region,
    encode_region,
    region_count,
)
from ensemble.thresholds import build_threshold_table, quantile_thresholds
from ensemble.winners import WinnerTable, best_predictor

__all__ = [
    "AfterFactOracle",
    "EstimatorPredictor",
    "Predictor",
    "NotTrainedError",
    "OracleConfigError",
    "OracleError",
    "OracleInputError",
    "PredictorOutputError",
    "DEFAULT_MAX_REGIONS",
    "RegionIndexer",
    "category_of",
    "check_region_budget",
    "decode_region",
    "encode_region",
    "region_count",
    "build_threshold_table",
    "quantile_thresholds",
    "WinnerTable",
    "best_predictor",
]
