"""explain-bridge - Explainers for models built outside the native toolchain."""

from explain_bridge.adapters import explain_mljar, explain_scikitlearn
from explain_bridge.bridge import ForeignModelHandle, load_object
from explain_bridge.environment import prepare_env
from explain_bridge.explainer import Explainer, explain
from explain_bridge.params import PARAMS_NOT_AVAILABLE, ParamSet, extract_params, print_param_set

__version__ = "0.1.0"
__all__ = [
    "Explainer",
    "ForeignModelHandle",
    "PARAMS_NOT_AVAILABLE",
    "ParamSet",
    "explain",
    "explain_mljar",
    "explain_scikitlearn",
    "extract_params",
    "load_object",
    "prepare_env",
    "print_param_set",
]
