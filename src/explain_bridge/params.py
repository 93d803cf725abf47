"""Recovering constructor parameters from a foreign model.

The model describes itself only through its introspection attribute
(``get_params`` for scikit-learn), whose string form looks like
``ClassName(p1=v1, p2=v2, ...)``. Parameter *names* are parsed from that
string; *values* are always re-read live from the model by name.
"""

import contextlib
import sys
from typing import Any, TextIO

import structlog

from explain_bridge.bridge import ForeignModelHandle
from explain_bridge.exceptions import ParameterExtractionError

logger = structlog.get_logger(__name__)

PARAMS_NOT_AVAILABLE = "Params not available"


class ParamSet(dict):
    """Constructor parameters of a model, in declaration order."""

    def __str__(self) -> str:
        return "".join(_format_entry(name, value) for name, value in self.items())


def _format_entry(name: str, value: Any) -> str:
    if value is None:
        return f"{name}: NULL\n"
    return f"{name}: {value}\n"


def parse_param_names(listing: str) -> list[str]:
    """Parse parameter names out of a ``ClassName(p1=v1, ...)`` listing.

    Every space and newline is removed from each comma separated token, the
    token is cut at its first ``=`` and the class name is stripped from the
    first one. Values containing commas (dicts, tuples) produce bogus names;
    callers validate names against the model.

    Raises:
        ParameterExtractionError: If the listing has no opening parenthesis.
    """
    names = []
    for token in listing.split(","):
        token = token.replace("\n", "").replace(" ", "")
        names.append(token.split("=", 1)[0])

    head = names[0].split("(")
    if len(head) < 2:
        raise ParameterExtractionError(
            "Malformed parameter listing: no '(' before the first parameter",
            {"listing": listing},
        )
    names[0] = head[1]
    return names


def _render_listing(handle: ForeignModelHandle, attribute: Any, show_all: bool) -> str:
    context = contextlib.nullcontext()
    if show_all and handle.module.startswith("sklearn"):
        import sklearn

        context = sklearn.config_context(print_changed_only=False)
    with context:
        return str(attribute)


def _collect(handle: ForeignModelHandle, names: list[str]) -> ParamSet:
    unknown = [name for name in names if not name or not handle.has(name)]
    if unknown:
        raise ParameterExtractionError(
            f"{handle.class_name} has no attribute(s) {unknown}",
            {"unknown": unknown, "names": names},
        )
    return ParamSet((name, handle.get(name)) for name in names)


def extract_params(
    handle: ForeignModelHandle,
    introspection_attribute: str = "get_params",
    strict: bool = True,
    param_names: list[str] | None = None,
    show_all: bool = True,
) -> ParamSet | str:
    """Build the parameter set of a model.

    Args:
        handle: Handle to the loaded model.
        introspection_attribute: Attribute whose string form lists the
            constructor parameters.
        strict: Raise when a recovered name cannot be looked up. When False
            the result degrades to ``PARAMS_NOT_AVAILABLE`` instead.
        param_names: Explicit parameter names; skips listing parsing.
        show_all: Render every scikit-learn parameter, not only the ones that
            differ from their defaults.

    Returns:
        ParamSet, or ``PARAMS_NOT_AVAILABLE`` when the model cannot describe
        itself. Never a partial mapping.

    Raises:
        ParameterExtractionError: In strict mode, for malformed listings or
            names the model does not have.
    """
    try:
        if param_names is not None:
            params = _collect(handle, list(param_names))
        else:
            try:
                attribute = handle.get(introspection_attribute)
            except Exception as e:
                logger.warning(
                    "Params not available",
                    model_class=handle.class_name,
                    attribute=introspection_attribute,
                    error=str(e),
                )
                return PARAMS_NOT_AVAILABLE

            listing = _render_listing(handle, attribute, show_all)
            params = _collect(handle, parse_param_names(listing))
    except ParameterExtractionError as e:
        if strict:
            raise
        logger.warning("Parameter extraction failed", error=e.message, **e.details)
        return PARAMS_NOT_AVAILABLE

    logger.debug("Parameters extracted", model_class=handle.class_name, count=len(params))
    return params


def print_param_set(param_set: ParamSet | str, file: TextIO | None = None) -> None:
    """Print one ``name: value`` line per parameter (``NULL`` for None)."""
    out = file if file is not None else sys.stdout
    if isinstance(param_set, str):
        out.write(f"{param_set}\n")
        return
    for name, value in param_set.items():
        out.write(_format_entry(name, value))
