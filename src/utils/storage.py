"""
Local storage for experiment reports: parquet (pyarrow) when available,
CSV otherwise.
"""
import logging
from pathlib import Path
import pandas as pd

logger = logging.getLogger(__name__)


def ensure_dir(path:Path):
    path.mkdir(parents=True, exist_ok=True)


def save_dataframe(df, path:Path):
    """Write df and return the path actually written"""
    path = Path(path)
    ensure_dir(path.parent)
    if path.suffix == '.csv':
        df.to_csv(path, index=False)
        return path
    try:
        df.to_parquet(path)
    except ImportError:
        logger.warning('No parquet engine installed; writing CSV instead')
        path = path.with_suffix('.csv')
        df.to_csv(path, index=False)
    return path


def load_dataframe(path:Path):
    path = Path(path)
    if path.suffix == '.parquet' and path.exists():
        return pd.read_parquet(path)
    elif path.with_suffix('.csv').exists():
        return pd.read_csv(path.with_suffix('.csv'))
    raise FileNotFoundError(path)
