"""Evaluation data loading."""

from pathlib import Path

import numpy as np
import pandas as pd
import structlog

from explain_bridge.config.base import DataConfig, DataFormat
from explain_bridge.exceptions import ColumnNotFoundError, InvalidDataError

logger = structlog.get_logger(__name__)


def read_frame(source: str | Path, fmt: DataFormat | str = DataFormat.CSV) -> pd.DataFrame:
    """Read a CSV or parquet file into a DataFrame."""
    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    fmt = DataFormat(fmt)
    if fmt == DataFormat.CSV:
        return pd.read_csv(path)
    elif fmt == DataFormat.PARQUET:
        return pd.read_parquet(path)
    raise InvalidDataError(f"Unsupported data format: {fmt}")


def load_dataset(
    config: DataConfig,
) -> tuple[pd.DataFrame, np.ndarray | None, np.ndarray | None]:
    """Load evaluation data and split off target and weights.

    Returns:
        Tuple of (features, y, weights). y and weights are None when not
        configured.
    """
    logger.info("Loading data", source=config.source, format=config.format.value)
    frame = read_frame(config.source, config.format)
    columns = list(frame.columns)

    for column in (config.target_column, config.weights_column, *(config.feature_columns or [])):
        if column is not None and column not in frame.columns:
            raise ColumnNotFoundError(column, columns)

    y = frame[config.target_column].to_numpy() if config.target_column else None
    weights = frame[config.weights_column].to_numpy() if config.weights_column else None

    if config.feature_columns:
        features = frame[config.feature_columns]
    else:
        excluded = [c for c in (config.target_column, config.weights_column) if c]
        features = frame.drop(columns=excluded)

    logger.info("Data loaded", rows=len(features), columns=len(features.columns))
    return features, y, weights
