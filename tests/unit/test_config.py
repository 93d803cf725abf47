"""Tests for configuration loading and validation."""

import pytest
import yaml
from pydantic import ValidationError

from explain_bridge.config.base import (
    BridgeConfig,
    DataConfig,
    DataFormat,
    EnvironmentConfig,
    ExplainConfig,
    MljarConfig,
    ParamExtractionConfig,
)
from explain_bridge.exceptions import InvalidYAMLError


class TestEnvironmentConfig:
    """Tests for EnvironmentConfig validation."""

    def test_defaults_to_current_interpreter(self):
        config = EnvironmentConfig()
        assert config.yml is None
        assert config.condaenv is None
        assert config.env is None

    def test_rejects_non_yml_descriptor(self):
        with pytest.raises(ValidationError):
            EnvironmentConfig(yml="environment.txt")


class TestExplainConfig:
    """Tests for explainer options."""

    def test_default_values(self):
        config = ExplainConfig()
        assert config.verbose is True
        assert config.precalculate is True
        assert config.colorize is True
        assert config.type is None

    def test_invalid_type(self):
        with pytest.raises(ValidationError):
            ExplainConfig(type="clustering")


class TestParamExtractionConfig:
    """Tests for parameter extraction options."""

    def test_default_values(self):
        config = ParamExtractionConfig()
        assert config.introspection_attribute == "get_params"
        assert config.strict is True
        assert config.param_names is None


class TestMljarConfig:
    """Tests for mljar credentials."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("MLJAR_TOKEN", "abc")
        assert MljarConfig.from_env().token == "abc"

    def test_from_env_missing(self, monkeypatch):
        monkeypatch.delenv("MLJAR_TOKEN", raising=False)
        assert MljarConfig.from_env().token is None


class TestBridgeConfig:
    """Tests for the complete configuration."""

    def test_valid_config(self):
        config = BridgeConfig.model_validate({
            "name": "gbm",
            "model_path": "models/gbm.pkl",
            "environment": {"yml": "environment.yml"},
            "data": {"source": "data/test.csv", "target_column": "survived"},
            "explain": {"type": "classification"},
        })
        assert config.name == "gbm"
        assert config.data.format == DataFormat.CSV
        assert config.explain.type.value == "classification"

    def test_extra_fields_rejected(self):
        with pytest.raises(ValidationError):
            BridgeConfig.model_validate({"name": "x", "model_path": "m.pkl", "unknown_field": 1})

    def test_target_cannot_be_feature(self):
        with pytest.raises(ValidationError):
            BridgeConfig(
                name="x",
                model_path="m.pkl",
                data=DataConfig(source="d.csv", target_column="y", feature_columns=["a", "y"]),
            )


class TestLoadConfig:
    """Tests for loading configs from YAML."""

    def test_load_with_env_vars(self, tmp_path, monkeypatch):
        monkeypatch.setenv("MODEL_DIR", "/models")
        monkeypatch.delenv("DATA_DIR", raising=False)
        path = tmp_path / "bridge.yaml"
        path.write_text(yaml.dump({
            "name": "gbm",
            "model_path": "${MODEL_DIR}/gbm.pkl",
            "data": {"source": "${DATA_DIR:-data}/test.csv"},
        }))

        config = BridgeConfig.from_yaml(path)

        assert config.model_path == "/models/gbm.pkl"
        assert config.data.source == str(tmp_path / "data" / "test.csv")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            BridgeConfig.from_yaml(tmp_path / "missing.yaml")

    def test_wrong_suffix(self, tmp_path):
        path = tmp_path / "bridge.json"
        path.write_text("{}")
        with pytest.raises(ValueError):
            BridgeConfig.from_yaml(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(ValueError):
            BridgeConfig.from_yaml(path)

    def test_relative_paths_resolved_against_config_dir(self, tmp_path):
        config_dir = tmp_path / "configs"
        config_dir.mkdir()
        path = config_dir / "bridge.yaml"
        path.write_text(yaml.dump({
            "name": "gbm",
            "model_path": "models/gbm.pkl",
            "environment": {"yml": "environment.yml"},
            "data": {"source": "data/test.csv"},
        }))

        config = BridgeConfig.from_yaml(path)

        assert config.model_path == str(config_dir / "models" / "gbm.pkl")
        assert config.environment.yml == str(config_dir / "environment.yml")
        assert config.data.source == str(config_dir / "data" / "test.csv")

    def test_named_conda_env_left_untouched(self, tmp_path):
        path = tmp_path / "bridge.yaml"
        path.write_text(yaml.dump({
            "name": "gbm",
            "model_path": "/abs/gbm.pkl",
            "environment": {"condaenv": "pickled"},
        }))

        config = BridgeConfig.from_yaml(path)

        assert config.model_path == "/abs/gbm.pkl"
        assert config.environment.condaenv == "pickled"

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("name: test\n  invalid_indent: true")
        with pytest.raises(InvalidYAMLError):
            BridgeConfig.from_yaml(path)

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(InvalidYAMLError):
            BridgeConfig.from_yaml(path)
