"""Pytest fixtures for integration tests."""

import pytest
import yaml
from typer.testing import CliRunner


@pytest.fixture
def cli_runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def regression_data_path(tmp_path, sample_regression_data):
    """Save regression data to CSV and return path."""
    path = tmp_path / "regression.csv"
    sample_regression_data.to_csv(path, index=False)
    return path


@pytest.fixture
def bridge_config_dict(regression_model_path, regression_data_path):
    """Bridge configuration for the pickled regression model."""
    return {
        "name": "integration_linear",
        "description": "Integration test explainer",
        "model_path": str(regression_model_path),
        "data": {
            "source": str(regression_data_path),
            "format": "csv",
            "target_column": "target",
        },
        "explain": {
            "label": "linear",
            "verbose": False,
            "colorize": False,
        },
    }


@pytest.fixture
def bridge_config_path(tmp_path, bridge_config_dict):
    """Save bridge config to YAML and return path."""
    path = tmp_path / "bridge.yaml"
    with open(path, "w") as f:
        yaml.dump(bridge_config_dict, f, default_flow_style=False)
    return path


@pytest.fixture
def invalid_yaml_path(tmp_path):
    """Create an invalid YAML file for error testing."""
    path = tmp_path / "invalid.yaml"
    with open(path, "w") as f:
        f.write("name: test\n  invalid_indent: true")
    return path


@pytest.fixture
def missing_column_config_path(tmp_path, bridge_config_dict):
    """Create config with non-existent target column."""
    bridge_config_dict["data"]["target_column"] = "nonexistent_column"
    path = tmp_path / "missing_column.yaml"
    with open(path, "w") as f:
        yaml.dump(bridge_config_dict, f, default_flow_style=False)
    return path
