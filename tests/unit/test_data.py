"""Tests for evaluation data loading."""

import pytest

from explain_bridge.config.base import DataConfig
from explain_bridge.data import load_dataset
from explain_bridge.exceptions import ColumnNotFoundError


@pytest.fixture
def data_path(tmp_path, sample_regression_data):
    frame = sample_regression_data.assign(weight=1.0)
    path = tmp_path / "data.csv"
    frame.to_csv(path, index=False)
    return path


def test_splits_target_and_weights(data_path):
    config = DataConfig(source=str(data_path), target_column="target", weights_column="weight")
    X, y, weights = load_dataset(config)

    assert list(X.columns) == ["feature_1", "feature_2"]
    assert len(y) == len(X)
    assert weights.tolist() == [1.0] * len(X)


def test_explicit_feature_columns(data_path):
    config = DataConfig(source=str(data_path), feature_columns=["feature_2"])
    X, y, weights = load_dataset(config)

    assert list(X.columns) == ["feature_2"]
    assert y is None
    assert weights is None


def test_parquet(tmp_path, sample_regression_data):
    path = tmp_path / "data.parquet"
    sample_regression_data.to_parquet(path, index=False)

    X, y, _ = load_dataset(DataConfig(source=str(path), format="parquet", target_column="target"))
    assert len(X) == len(sample_regression_data)


def test_missing_column(data_path):
    with pytest.raises(ColumnNotFoundError) as exc_info:
        load_dataset(DataConfig(source=str(data_path), target_column="survived"))
    assert exc_info.value.details["column"] == "survived"


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_dataset(DataConfig(source=str(tmp_path / "missing.csv")))
