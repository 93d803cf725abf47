"""Configuration models using Pydantic, loadable from YAML."""

import os
import re
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from explain_bridge.exceptions import InvalidYAMLError

_ENV_REFERENCE = re.compile(r"\$\{(\w+)(?::-([^}]*))?\}")


def _expand_env(value: Any) -> Any:
    """Substitute ${VAR} and ${VAR:-default} references in every string value."""
    if isinstance(value, dict):
        return {key: _expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    if isinstance(value, str):
        return _ENV_REFERENCE.sub(
            lambda m: os.environ.get(m.group(1), m.group(2) or ""), value
        )
    return value


def _anchor(path: str | None, base_dir: Path) -> str | None:
    if path is None or Path(path).is_absolute():
        return path
    return str(base_dir / path)


class ModelKind(str, Enum):
    """Supported model task types."""

    CLASSIFICATION = "classification"
    REGRESSION = "regression"


class DataFormat(str, Enum):
    """Supported data formats."""

    CSV = "csv"
    PARQUET = "parquet"


class ModelInfo(BaseModel):
    """Metadata describing where a model comes from."""

    package: str | None = Field(default=None, description="Package the model class lives in")
    version: str | None = Field(default=None, description="Installed version of that package")
    type: ModelKind | None = Field(default=None, description="classification or regression")


class EnvironmentConfig(BaseModel):
    """Runtime environment the model should be deserialized in."""

    yml: str | None = Field(
        default=None, description="Conda environment descriptor to recreate the env from"
    )
    condaenv: str | None = Field(
        default=None,
        description="With yml: conda installation root. Without yml: name of an existing conda env",
    )
    env: str | None = Field(default=None, description="Path to a python virtual environment")

    @field_validator("yml")
    @classmethod
    def validate_yml(cls, v: str | None) -> str | None:
        if v is not None and Path(v).suffix.lower() not in (".yml", ".yaml"):
            raise ValueError(f"Expected a .yml environment file, got: {v}")
        return v


class DataConfig(BaseModel):
    """Evaluation data source configuration."""

    source: str = Field(..., description="Path to the evaluation data")
    format: DataFormat = Field(default=DataFormat.CSV)
    target_column: str | None = Field(default=None, description="Target column (becomes y)")
    weights_column: str | None = Field(default=None, description="Sampling weights column")
    feature_columns: list[str] | None = Field(
        default=None, description="Feature columns (None = everything but target and weights)"
    )


class ExplainConfig(BaseModel):
    """Options forwarded unchanged to the explainer constructor."""

    label: str | None = Field(default=None, description="Model label (default: class name)")
    verbose: bool = Field(default=True)
    precalculate: bool = Field(default=True, description="Compute y_hat and residuals eagerly")
    colorize: bool = Field(default=True)
    model_info: ModelInfo | None = Field(default=None)
    type: ModelKind | None = Field(default=None)


class ParamExtractionConfig(BaseModel):
    """How constructor parameters are recovered from a model."""

    introspection_attribute: str = Field(default="get_params")
    strict: bool = Field(
        default=True, description="Raise on unrecoverable names instead of degrading"
    )
    param_names: list[str] | None = Field(
        default=None, description="Explicit parameter names (skips listing parsing)"
    )
    show_all: bool = Field(
        default=True, description="Render every sklearn parameter, not only changed ones"
    )


class MljarConfig(BaseModel):
    """mljar platform access configuration."""

    token: str | None = Field(default=None, description="mljar API token")
    token_env_var: str = Field(default="MLJAR_TOKEN")

    @classmethod
    def from_env(cls, env_var: str = "MLJAR_TOKEN") -> "MljarConfig":
        """Build a config reading the token from the process environment."""
        return cls(token=os.environ.get(env_var), token_env_var=env_var)


class BridgeConfig(BaseModel):
    """Complete configuration for explaining a pickled scikit-learn model."""

    name: str = Field(..., description="Run name for identification")
    description: str = Field(default="")
    model_path: str = Field(..., description="Path to the pickled model")
    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)
    data: DataConfig | None = Field(default=None)
    explain: ExplainConfig = Field(default_factory=ExplainConfig)
    params: ParamExtractionConfig = Field(default_factory=ParamExtractionConfig)

    @model_validator(mode="after")
    def validate_data_columns(self) -> "BridgeConfig":
        if self.data is not None and self.data.feature_columns:
            for column in (self.data.target_column, self.data.weights_column):
                if column is not None and column in self.data.feature_columns:
                    raise ValueError(f"Column '{column}' cannot also be a feature column")
        return self

    @classmethod
    def from_yaml(cls, path: str | Path) -> "BridgeConfig":
        """Load a bridge configuration from a YAML file.

        ${VAR} and ${VAR:-default} references are substituted from the process
        environment. Relative ``model_path``, ``data.source``,
        ``environment.yml`` and ``environment.env`` are resolved against the
        directory of the config file.

        Raises:
            FileNotFoundError: If the file does not exist.
            InvalidYAMLError: If the file is not a YAML mapping.
            ValidationError: If the content does not match the schema.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        if path.suffix.lower() not in (".yaml", ".yml"):
            raise ValueError(f"Expected YAML file, got: {path.suffix}")

        try:
            raw = yaml.safe_load(path.read_text())
        except yaml.YAMLError as e:
            raise InvalidYAMLError(str(path), str(e)) from e
        if raw is None:
            raise ValueError(f"Empty config file: {path}")
        if not isinstance(raw, dict):
            raise InvalidYAMLError(str(path), "top level must be a mapping")

        config = cls.model_validate(_expand_env(raw))
        return config.anchored_at(path.parent)

    def anchored_at(self, base_dir: Path) -> "BridgeConfig":
        """Copy with relative file paths resolved against ``base_dir``."""
        environment = self.environment.model_copy(
            update={
                "yml": _anchor(self.environment.yml, base_dir),
                "env": _anchor(self.environment.env, base_dir),
            }
        )
        data = self.data
        if data is not None:
            data = data.model_copy(update={"source": _anchor(data.source, base_dir)})
        return self.model_copy(
            update={
                "model_path": _anchor(self.model_path, base_dir),
                "environment": environment,
                "data": data,
            }
        )

    model_config = {"extra": "forbid"}
