"""Explainers for scikit-learn models exported from Python via pickle.

The model may have been built in another environment; the matching conda or
virtual environment is prepared first because pickles only load when both the
Python and the library versions agree with the ones they were saved with.

Exporting the environment of the training session::

    conda env export > environment.yml

If an environment with the name in the .yml header already exists it is
activated unchanged. Remove it (``conda env remove --name myenv``) to have it
recreated.
"""

from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd
import structlog

from explain_bridge.bridge import load_object
from explain_bridge.config.base import BridgeConfig, ModelInfo, ModelKind
from explain_bridge.data import load_dataset
from explain_bridge.environment import EnvironmentProvisioner
from explain_bridge.explainer import Explainer, PredictFunction, ResidualFunction, explain
from explain_bridge.params import extract_params

logger = structlog.get_logger(__name__)


def explain_scikitlearn(
    path: str | Path,
    yml: str | Path | None = None,
    condaenv: str | None = None,
    env: str | Path | None = None,
    data: pd.DataFrame | np.ndarray | None = None,
    y: Any = None,
    weights: Any = None,
    predict_function: PredictFunction | None = None,
    residual_function: ResidualFunction | None = None,
    label: str | None = None,
    verbose: bool = True,
    precalculate: bool = True,
    colorize: bool = True,
    model_info: ModelInfo | dict | None = None,
    type: ModelKind | str | None = None,
    *,
    strict_params: bool = True,
    param_names: list[str] | None = None,
    introspection_attribute: str = "get_params",
    show_all_params: bool = True,
    provisioner: EnvironmentProvisioner | None = None,
) -> Explainer:
    """Create an explainer from a pickled scikit-learn model.

    Args:
        path: Pickle (or .joblib) file. Can be used alone when the active
            Python and library versions match the pickle's.
        yml: Conda environment descriptor the env is recreated from.
        condaenv: With ``yml``, the conda installation root. Without it, the
            name of an existing conda env.
        env: Path to a python virtual environment.
        data: Evaluation data passed to the explainer.
        y: Target vector passed to the explainer.
        weights: Sampling weights, same length as ``data``.
        predict_function: Custom ``f(model, data)``; default when None.
        residual_function: Custom ``f(model, data, y)``; default when None.
        label: Model label; class name when None.
        verbose: Print diagnostic messages.
        precalculate: Compute predictions and residuals eagerly.
        colorize: Colour diagnostic messages.
        model_info: Package, version and type of the model.
        type: ``classification`` or ``regression``.
        strict_params: Abort when parameter names cannot be recovered instead
            of falling back to "Params not available". Names are parsed from
            the model's repr, so estimators with tuple, list or dict valued
            parameters (``MLPClassifier(hidden_layer_sizes=(100,))``) or
            nested estimators (``Pipeline``) fail in strict mode. Pass
            ``param_names`` for those, or set this to False.
        param_names: Explicit parameter names; skips listing parsing.
        introspection_attribute: Attribute listing the constructor params.
        show_all_params: Include parameters left at their defaults.
        provisioner: Environment provisioner (default: conda via PATH).

    Returns:
        Explainer with the model's parameters in ``param_set``.
    """
    provisioner = provisioner or EnvironmentProvisioner()
    provisioner.prepare(yml=yml, condaenv=condaenv, env=env)

    model = load_object(path)
    params = extract_params(
        model,
        introspection_attribute=introspection_attribute,
        strict=strict_params,
        param_names=param_names,
        show_all=show_all_params,
    )

    explainer = explain(
        model,
        data=data,
        y=y,
        weights=weights,
        predict_function=predict_function,
        residual_function=residual_function,
        label=label,
        verbose=verbose,
        precalculate=precalculate,
        colorize=colorize,
        model_info=model_info,
        type=type,
    )
    explainer.param_set = params
    return explainer


def explain_scikitlearn_from_config(
    config: BridgeConfig,
    provisioner: EnvironmentProvisioner | None = None,
) -> Explainer:
    """Run :func:`explain_scikitlearn` from a validated configuration."""
    data = y = weights = None
    if config.data is not None:
        data, y, weights = load_dataset(config.data)

    logger.info("Explaining model", name=config.name, model_path=config.model_path)
    return explain_scikitlearn(
        config.model_path,
        yml=config.environment.yml,
        condaenv=config.environment.condaenv,
        env=config.environment.env,
        data=data,
        y=y,
        weights=weights,
        label=config.explain.label,
        verbose=config.explain.verbose,
        precalculate=config.explain.precalculate,
        colorize=config.explain.colorize,
        model_info=config.explain.model_info,
        type=config.explain.type,
        strict_params=config.params.strict,
        param_names=config.params.param_names,
        introspection_attribute=config.params.introspection_attribute,
        show_all_params=config.params.show_all,
        provisioner=provisioner,
    )
