"""Configuration models."""

from explain_bridge.config.base import (
    BridgeConfig,
    DataConfig,
    EnvironmentConfig,
    ExplainConfig,
    MljarConfig,
    ModelInfo,
    ModelKind,
    ParamExtractionConfig,
)

__all__ = [
    "BridgeConfig",
    "DataConfig",
    "EnvironmentConfig",
    "ExplainConfig",
    "MljarConfig",
    "ModelInfo",
    "ModelKind",
    "ParamExtractionConfig",
]
