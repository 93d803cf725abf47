"""Command-line interface for explain-bridge."""

from functools import wraps
from pathlib import Path
from typing import Any, Callable, Optional

import numpy as np
import structlog
import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from explain_bridge.config.base import BridgeConfig
from explain_bridge.exceptions import (
    BridgeError,
    ColumnNotFoundError,
    EnvironmentMismatchError,
    InvalidYAMLError,
    ModelFileNotFoundError,
    ParameterExtractionError,
)
from explain_bridge.params import ParamSet

app = typer.Typer(
    name="xbridge",
    help="explain-bridge - Explainers for pickled and platform-trained models",
    add_completion=False,
)
console = Console()

structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.dev.ConsoleRenderer(colors=True),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
)


def handle_cli_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to catch and format errors for CLI output.

    Provides user-friendly error messages instead of raw stack traces.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except FileNotFoundError as e:
            console.print(f"[bold red]File not found:[/] {e}")
            console.print("[dim]Suggestion: Check path and ensure file exists[/]")
            raise typer.Exit(1)
        except ValidationError as e:
            console.print("[bold red]Configuration validation failed:[/]")
            for error in e.errors():
                loc = " -> ".join(str(x) for x in error["loc"])
                console.print(f"  [yellow]{loc}:[/] {error['msg']}")
            raise typer.Exit(1)
        except InvalidYAMLError as e:
            console.print(f"[bold red]Invalid YAML:[/] {e.message}")
            if "parse_error" in e.details:
                console.print(f"[dim]Parse error: {e.details['parse_error']}[/]")
            raise typer.Exit(1)
        except ModelFileNotFoundError as e:
            console.print(f"[bold red]Model error:[/] {e.message}")
            for suggestion in e.details.get("suggestions", []):
                console.print(f"[dim]  - {suggestion}[/]")
            raise typer.Exit(1)
        except EnvironmentMismatchError as e:
            console.print(f"[bold red]Environment mismatch:[/] {e.message}")
            console.print(
                "[dim]Recreate the training environment (conda env export > environment.yml) "
                "and pass it with --yml[/]"
            )
            raise typer.Exit(1)
        except ParameterExtractionError as e:
            console.print(f"[bold red]Parameter extraction failed:[/] {e.message}")
            console.print(
                "[dim]Rerun with --lenient, or list the names under params.param_names "
                "in the config[/]"
            )
            raise typer.Exit(1)
        except ColumnNotFoundError as e:
            console.print(f"[bold red]Column error:[/] {e.message}")
            if "suggestion" in e.details:
                console.print(f"[dim]{e.details['suggestion']}[/]")
            raise typer.Exit(1)
        except BridgeError as e:
            console.print(f"[bold red]Error:[/] {e.message}")
            if e.details:
                console.print(f"[dim]Details: {e.details}[/]")
            raise typer.Exit(1)

    return wrapper


def _params_table(param_set: ParamSet) -> Table:
    table = Table(title="Model Parameters")
    table.add_column("Parameter", style="cyan")
    table.add_column("Value", style="green")
    for name, value in param_set.items():
        table.add_row(name, "NULL" if value is None else str(value))
    return table


@app.command()
@handle_cli_errors
def explain(
    config_path: Path = typer.Argument(..., help="Path to bridge YAML config"),
    lenient: bool = typer.Option(
        False, "--lenient", help="Fall back to 'Params not available' on extraction errors"
    ),
    no_precalculate: bool = typer.Option(
        False, "--no-precalculate", help="Skip computing predictions and residuals"
    ),
) -> None:
    """Build an explainer for a pickled scikit-learn model."""
    from explain_bridge.adapters.scikitlearn import explain_scikitlearn_from_config

    console.print(f"[bold blue]Loading config:[/] {config_path}")
    config = BridgeConfig.from_yaml(config_path)

    if lenient:
        config.params.strict = False
    if no_precalculate:
        config.explain.precalculate = False

    explainer = explain_scikitlearn_from_config(config)

    console.print("\n[bold green]Explainer ready![/]")
    table = Table(title=f"Explainer: {explainer.label}")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Model class", explainer.model_class)
    table.add_row("Package", f"{explainer.model_info.package} {explainer.model_info.version}")
    table.add_row("Task", explainer.model_type.value)
    if explainer.data is not None:
        table.add_row("Rows", str(len(explainer.data)))
    if explainer.y_hat is not None:
        table.add_row("Mean prediction", f"{float(np.mean(explainer.y_hat)):.4f}")
    if explainer.residuals is not None:
        rmse = float(np.sqrt(np.mean(np.square(explainer.residuals))))
        table.add_row("Residual RMSE", f"{rmse:.4f}")
    console.print(table)

    if isinstance(explainer.param_set, ParamSet):
        console.print(_params_table(explainer.param_set))
    else:
        console.print(f"[yellow]{explainer.param_set}[/]")


@app.command()
@handle_cli_errors
def params(
    model_path: Path = typer.Argument(..., help="Path to the pickled model"),
    attribute: str = typer.Option(
        "get_params", "--attribute", "-a", help="Introspection attribute"
    ),
    lenient: bool = typer.Option(
        False,
        "--lenient",
        help="Print 'Params not available' instead of failing on unparseable models "
        "(e.g. MLPClassifier, Pipeline)",
    ),
    changed_only: bool = typer.Option(
        False, "--changed-only", help="Only list parameters that differ from defaults"
    ),
) -> None:
    """Print the constructor parameters of a pickled model.

    Names are parsed from the model's repr. Models with tuple, list or dict
    valued parameters (MLPClassifier, Pipeline) cannot be parsed reliably and
    fail unless --lenient is given; the Python API accepts explicit
    param_names instead.
    """
    from explain_bridge.bridge import load_object
    from explain_bridge.params import extract_params, print_param_set

    model = load_object(model_path)
    param_set = extract_params(
        model,
        introspection_attribute=attribute,
        strict=not lenient,
        show_all=not changed_only,
    )
    print_param_set(param_set)


@app.command()
@handle_cli_errors
def validate(
    config_path: Path = typer.Argument(..., help="Path to bridge YAML config"),
) -> None:
    """Validate a bridge configuration file."""
    console.print(f"[bold blue]Validating:[/] {config_path}")

    config = BridgeConfig.from_yaml(config_path)
    console.print("[bold green]Valid configuration![/]")
    console.print(f"  Name: {config.name}")
    console.print(f"  Model: {config.model_path}")
    if config.environment.yml:
        console.print(f"  Environment file: {config.environment.yml}")
    elif config.environment.condaenv:
        console.print(f"  Conda env: {config.environment.condaenv}")
    elif config.environment.env:
        console.print(f"  Virtualenv: {config.environment.env}")
    if config.data is not None:
        console.print(f"  Data: {config.data.source}")


@app.command()
@handle_cli_errors
def init(
    name: str = typer.Argument(..., help="Run name"),
    model_path: str = typer.Option("path/to/model.pkl", "--model", "-m", help="Pickled model"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output path"),
) -> None:
    """Generate a starter configuration file."""
    template = {
        "name": name,
        "description": f"{name} explainer",
        "model_path": model_path,
        "environment": {
            "yml": None,
            "condaenv": None,
            "env": None,
        },
        "data": {
            "source": "path/to/data.csv",
            "format": "csv",
            "target_column": "target",
        },
        "explain": {
            "label": name,
            "verbose": True,
            "precalculate": True,
            "colorize": True,
        },
        "params": {
            "introspection_attribute": "get_params",
            "strict": True,
        },
    }

    output_path = output or Path(f"configs/{name}.yaml")
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        yaml.dump(template, f, default_flow_style=False, sort_keys=False)

    console.print(f"[bold green]Config created:[/] {output_path}")


if __name__ == "__main__":
    app()
