"""Generic explainer record and its constructor.

An :class:`Explainer` pairs a model with evaluation data, predictions and
residuals so downstream comparison tooling can treat every model the same way,
whether it is a native estimator or a :class:`ForeignModelHandle`.
"""

import importlib.metadata
import sys
from dataclasses import dataclass
from typing import Any, Callable

import numpy as np
import pandas as pd
import structlog
from rich.console import Console

from explain_bridge.bridge import ForeignModelHandle
from explain_bridge.config.base import ModelInfo, ModelKind
from explain_bridge.exceptions import InvalidDataError, ModelPredictionError
from explain_bridge.params import ParamSet

logger = structlog.get_logger(__name__)

PredictFunction = Callable[[Any, Any], Any]
ResidualFunction = Callable[[Any, Any, Any], Any]


@dataclass
class Explainer:
    """Uniform wrapper around a model and its evaluation data."""

    model: Any
    predict_function: PredictFunction
    residual_function: ResidualFunction
    label: str
    model_class: str
    model_info: ModelInfo
    model_type: ModelKind
    data: pd.DataFrame | np.ndarray | None = None
    y: np.ndarray | None = None
    weights: np.ndarray | None = None
    y_hat: np.ndarray | None = None
    residuals: np.ndarray | None = None
    param_set: ParamSet | str | None = None

    def predict(self, data: Any) -> np.ndarray:
        """Predict with the explainer's predict function."""
        return np.asarray(self.predict_function(self.model, data))

    def residual(self, data: Any, y: Any) -> np.ndarray:
        """Compute residuals with the explainer's residual function."""
        return np.asarray(self.residual_function(self.model, data, y))


def _has(model: Any, name: str) -> bool:
    if isinstance(model, ForeignModelHandle):
        return model.has(name)
    return hasattr(model, name)


def _call(model: Any, name: str, *args: Any) -> Any:
    if isinstance(model, ForeignModelHandle):
        return model.call(name, *args)
    return getattr(model, name)(*args)


def _get(model: Any, name: str) -> Any:
    if isinstance(model, ForeignModelHandle):
        return model.get(name)
    return getattr(model, name)


def _describe(model: Any) -> tuple[str, str]:
    """Return (module, class name) of the underlying model."""
    if isinstance(model, ForeignModelHandle):
        return model.module, model.class_name
    return type(model).__module__, type(model).__name__


def _package_version(package: str) -> str | None:
    distributions = importlib.metadata.packages_distributions().get(package, [])
    for dist in distributions:
        try:
            return importlib.metadata.version(dist)
        except importlib.metadata.PackageNotFoundError:
            continue
    module = sys.modules.get(package)
    return getattr(module, "__version__", None)


def _infer_type(model: Any) -> ModelKind:
    if _has(model, "predict_proba"):
        return ModelKind.CLASSIFICATION
    return ModelKind.REGRESSION


def _resolve_model_info(
    model: Any, model_info: ModelInfo | dict | None, type: ModelKind | str | None
) -> ModelInfo:
    if isinstance(model_info, dict):
        model_info = ModelInfo.model_validate(model_info)

    if model_info is None:
        module, _ = _describe(model)
        package = module.split(".")[0]
        model_info = ModelInfo(package=package, version=_package_version(package))

    if type is not None:
        model_type = ModelKind(type)
    elif model_info.type is not None:
        model_type = model_info.type
    else:
        model_type = _infer_type(model)

    return model_info.model_copy(update={"type": model_type})


def default_predict_function(model_type: ModelKind) -> PredictFunction:
    """Predict function used when the caller supplies none.

    Classifiers with ``predict_proba`` return the positive class probability
    (binary) or the full probability matrix (multiclass); everything else
    returns ``predict``.
    """

    def yhat(model: Any, data: Any) -> np.ndarray:
        if model_type == ModelKind.CLASSIFICATION and _has(model, "predict_proba"):
            proba = np.asarray(_call(model, "predict_proba", data))
            if proba.ndim == 2 and proba.shape[1] == 2:
                return proba[:, 1]
            return proba
        return np.asarray(_call(model, "predict", data))

    return yhat


def default_residual_function(
    predict_function: PredictFunction, model_type: ModelKind | None = None
) -> ResidualFunction:
    """Response residuals ``y - y_hat``.

    For a probability matrix the residual is ``1 - p(true class)``. For a binary
    classifier predicting the positive class probability it is
    ``1[y == classes_[1]] - y_hat``, whatever the label values are.
    """

    def residual(model: Any, data: Any, y: Any) -> np.ndarray:
        y_hat = np.asarray(predict_function(model, data))
        y = np.asarray(y)
        if y_hat.ndim == 2:
            if _has(model, "classes_"):
                classes = np.asarray(_get(model, "classes_"))
                index = np.searchsorted(classes, y)
            else:
                index = y.astype(int)
            return 1 - y_hat[np.arange(len(y)), index]
        if model_type == ModelKind.CLASSIFICATION and _has(model, "classes_"):
            classes = np.asarray(_get(model, "classes_"))
            if len(classes) == 2:
                return (y == classes[1]).astype(float) - y_hat
        return y - y_hat

    return residual


def _as_vector(name: str, values: Any, n_rows: int | None) -> np.ndarray | None:
    if values is None:
        return None
    vector = np.asarray(values)
    if vector.ndim == 2 and vector.shape[1] == 1:
        vector = vector.ravel()
    if vector.ndim != 1:
        raise InvalidDataError(f"{name} must be one-dimensional", {"shape": vector.shape})
    if n_rows is not None and len(vector) != n_rows:
        raise InvalidDataError(
            f"{name} has {len(vector)} elements but data has {n_rows} rows",
            {"name": name, "length": len(vector), "rows": n_rows},
        )
    return vector


def explain(
    model: Any,
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
) -> Explainer:
    """Create an explainer for any model with a predict capability.

    Args:
        model: Native estimator or ForeignModelHandle.
        data: Evaluation data without the target column.
        y: Target vector, same length as ``data``.
        weights: Sampling weights, same length as ``data``.
        predict_function: ``f(model, data)`` returning predictions.
        residual_function: ``f(model, data, y)`` returning residuals.
        label: Model name. Defaults to the model class name.
        verbose: Print diagnostic messages.
        precalculate: Compute ``y_hat`` and ``residuals`` now.
        colorize: Colour diagnostic messages.
        model_info: Package, version and type of the model.
        type: ``classification`` or ``regression``.

    Returns:
        The explainer record.
    """
    console = Console(no_color=not colorize, highlight=False, quiet=not verbose)
    console.print("[bold]Preparation of a new explainer is initiated[/]")

    module, model_class = _describe(model)
    n_rows = len(data) if data is not None else None

    if data is None:
        console.print("  -> data              : [yellow]not specified[/]")
    else:
        n_cols = data.shape[1] if getattr(data, "ndim", 1) == 2 else 1
        console.print(f"  -> data              : {n_rows} rows {n_cols} cols")

    y = _as_vector("y", y, n_rows)
    weights = _as_vector("weights", weights, n_rows)
    if y is not None:
        console.print(f"  -> target variable   : {len(y)} values")
    if weights is not None:
        console.print(f"  -> sampling weights  : {len(weights)} values")

    label = label or model_class
    info = _resolve_model_info(model, model_info, type)
    console.print(f"  -> model label       : {label}")
    console.print(
        f"  -> model_info        : package {info.package}, ver. {info.version}, "
        f"task {info.type.value}"
    )

    if predict_function is None:
        predict_function = default_predict_function(info.type)
        console.print("  -> predict function  : default")
    if residual_function is None:
        residual_function = default_residual_function(predict_function, info.type)
        console.print("  -> residual function : difference between y and yhat (default)")

    explainer = Explainer(
        model=model,
        predict_function=predict_function,
        residual_function=residual_function,
        label=label,
        model_class=f"{module}.{model_class}",
        model_info=info,
        model_type=info.type,
        data=data,
        y=y,
        weights=weights,
    )

    if precalculate and data is not None:
        try:
            explainer.y_hat = explainer.predict(data)
            if y is not None:
                explainer.residuals = explainer.residual(data, y)
        except ModelPredictionError:
            raise
        except Exception as e:
            raise ModelPredictionError(
                f"Precalculation failed for {label}: {e}", {"label": label}
            ) from e
        console.print(f"  -> predicted values  : {len(explainer.y_hat)} values")
        if explainer.residuals is not None:
            console.print(f"  -> residuals         : {len(explainer.residuals)} values")

    console.print("[green]A new explainer has been created![/]")
    logger.debug(
        "Explainer created",
        label=label,
        model_class=explainer.model_class,
        type=info.type.value,
        precalculated=explainer.y_hat is not None,
    )
    return explainer
