"""Pytest configuration and shared fixtures."""

import pickle
import tempfile
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
from sklearn.linear_model import LinearRegression, LogisticRegression


class StringParamsModel:
    """Model describing itself through a plain string attribute."""

    def __init__(self, listing: str, **attributes):
        self.get_params = listing
        for name, value in attributes.items():
            setattr(self, name, value)

    def predict(self, data):
        return np.full(len(data), 0.5)


class OpaqueModel:
    """Model without any introspection attribute."""

    def predict(self, data):
        return np.zeros(len(data))


@pytest.fixture(scope="session")
def temp_dir():
    """Create a temporary directory for test artifacts."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_regression_data():
    """Generate sample regression dataset."""
    np.random.seed(42)
    n_samples = 100

    X1 = np.random.randn(n_samples)
    X2 = np.random.randn(n_samples)
    noise = np.random.randn(n_samples) * 0.1

    return pd.DataFrame({
        "feature_1": X1,
        "feature_2": X2,
        "target": 2 * X1 + 3 * X2 + noise,
    })


@pytest.fixture
def sample_classification_data():
    """Generate sample binary classification dataset."""
    np.random.seed(42)
    n_samples = 100

    X1 = np.random.randn(n_samples)
    X2 = np.random.randn(n_samples)

    return pd.DataFrame({
        "feature_1": X1,
        "feature_2": X2,
        "target": (X1 + X2 > 0).astype(int),
    })


@pytest.fixture
def regression_model(sample_regression_data):
    """LinearRegression fitted on the regression data."""
    X = sample_regression_data[["feature_1", "feature_2"]]
    return LinearRegression(fit_intercept=False).fit(X, sample_regression_data["target"])


@pytest.fixture
def classification_model(sample_classification_data):
    """LogisticRegression fitted on the classification data."""
    X = sample_classification_data[["feature_1", "feature_2"]]
    return LogisticRegression(C=0.5).fit(X, sample_classification_data["target"])


@pytest.fixture
def regression_model_path(tmp_path, regression_model):
    """Pickle the regression model and return its path."""
    path = tmp_path / "linear.pkl"
    with open(path, "wb") as f:
        pickle.dump(regression_model, f)
    return path


@pytest.fixture
def classification_model_path(tmp_path, classification_model):
    """Pickle the classification model and return its path."""
    path = tmp_path / "logreg.pkl"
    with open(path, "wb") as f:
        pickle.dump(classification_model, f)
    return path


@pytest.fixture
def string_params_model():
    """Synthetic model whose listing values differ from its live attributes."""
    return StringParamsModel("Foo(a=1, b=2)", a=10, b=20)


@pytest.fixture
def opaque_model():
    return OpaqueModel()


@pytest.fixture
def fake_venv(tmp_path):
    """Virtualenv-like layout for the running interpreter."""
    import sys

    prefix = tmp_path / "venv"
    site_packages = (
        prefix / "lib" / f"python{sys.version_info[0]}.{sys.version_info[1]}" / "site-packages"
    )
    site_packages.mkdir(parents=True)
    return prefix


@pytest.fixture
def restore_sys_path():
    """Undo sys.path changes made by environment activation."""
    import sys

    saved = list(sys.path)
    yield
    sys.path[:] = saved


@pytest.fixture
def make_string_model():
    """Factory for synthetic models with a string parameter listing."""
    return StringParamsModel
