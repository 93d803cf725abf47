"""Explainers for models trained on the mljar platform."""

from pathlib import Path
from typing import Any, Callable

import pandas as pd
import structlog
from rich.console import Console

from explain_bridge.config.base import MljarConfig
from explain_bridge.exceptions import DefaultDataError, MissingCredentialError
from explain_bridge.explainer import Explainer, PredictFunction, ResidualFunction, explain

logger = structlog.get_logger(__name__)

MLJAR_DOCS_URL = "https://github.com/mljar/mljar-api-python/blob/master/README.md"
DEFAULT_TARGET_COLUMN = "target"

DatasetFetcher = Callable[[Any], "str | Path | pd.DataFrame"]


def _default_data(model: Any, dataset_fetcher: DatasetFetcher | None) -> pd.DataFrame:
    if dataset_fetcher is None:
        raise DefaultDataError(
            "Extracting default data failed",
            {"reason": "no dataset fetcher configured"},
        )
    try:
        dataset = dataset_fetcher(model)
        if isinstance(dataset, pd.DataFrame):
            return dataset
        return pd.read_csv(dataset)
    except Exception as e:
        raise DefaultDataError("Extracting default data failed", {"error": str(e)}) from e


def explain_mljar(
    model: Any,
    project_title: str,
    data: pd.DataFrame | None = None,
    y: Any = None,
    predict_function: PredictFunction | None = None,
    residual_function: ResidualFunction | None = None,
    label: str | None = None,
    verbose: bool = True,
    precalculate: bool = True,
    *,
    config: MljarConfig | None = None,
    dataset_fetcher: DatasetFetcher | None = None,
    **kwargs: Any,
) -> Explainer:
    """Create an explainer from an mljar model.

    Args:
        model: Model returned by the mljar client.
        project_title: Project the model was built in. Without it predictions
            are unreachable.
        data: Data used for fitting, without the target column. Fetched with
            ``dataset_fetcher`` when None.
        y: Target vector. Taken from the fetched data's ``target`` column when
            None.
        predict_function: Custom ``f(model, data)``.
        residual_function: Custom ``f(model, data, y)``.
        label: Model label; class name when None.
        verbose: Print diagnostic messages.
        precalculate: Compute predictions and residuals eagerly.
        config: mljar access configuration; read from ``MLJAR_TOKEN`` when None.
        dataset_fetcher: ``f(model)`` returning a CSV path or a DataFrame with
            the project's default dataset.
        **kwargs: Forwarded to :func:`explain`.

    Raises:
        MissingCredentialError: If no API token is configured.
        DefaultDataError: If default data is needed and cannot be fetched.
    """
    config = config or MljarConfig.from_env()
    if not config.token:
        raise MissingCredentialError(config.token_env_var, docs_url=MLJAR_DOCS_URL)

    if data is None:
        console = Console(
            no_color=not kwargs.get("colorize", True), highlight=False, quiet=not verbose
        )
        console.print("  -> data              : [yellow]not specified, trying extract default...[/]")
        logger.info("Fetching default data", project=project_title)
        data = _default_data(model, dataset_fetcher)
        if y is None and DEFAULT_TARGET_COLUMN in data.columns:
            y = data[DEFAULT_TARGET_COLUMN]
            data = data.drop(columns=[DEFAULT_TARGET_COLUMN])
        logger.info("Default data extracted", rows=len(data))

    model.project = project_title

    return explain(
        model,
        data=data,
        y=y,
        predict_function=predict_function,
        residual_function=residual_function,
        label=label,
        verbose=verbose,
        precalculate=precalculate,
        **kwargs,
    )
