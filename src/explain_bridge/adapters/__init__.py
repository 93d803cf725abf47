"""Adapters turning foreign models into explainers."""

from explain_bridge.adapters.mljar import explain_mljar
from explain_bridge.adapters.scikitlearn import (
    explain_scikitlearn,
    explain_scikitlearn_from_config,
)

__all__ = ["explain_mljar", "explain_scikitlearn", "explain_scikitlearn_from_config"]
