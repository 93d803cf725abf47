"""Loading serialized models and wrapping them in an opaque handle."""

import pickle
import warnings
from pathlib import Path
from typing import Any

import joblib
import structlog
from sklearn.exceptions import InconsistentVersionWarning

from explain_bridge.exceptions import (
    EnvironmentMismatchError,
    ModelDeserializationError,
    ModelFileNotFoundError,
    ModelPredictionError,
)

logger = structlog.get_logger(__name__)


class ForeignModelHandle:
    """Opaque reference to a model deserialized from another runtime.

    Attributes and methods are reached by name only; nothing is assumed about
    the wrapped object's type.

    Example:
        handle = load_object("gbm.pkl")
        handle.get("n_estimators")
        handle.call("predict", X)
    """

    def __init__(self, obj: Any, source: str | None = None) -> None:
        self._obj = obj
        self.source = source

    @property
    def obj(self) -> Any:
        """The wrapped object."""
        return self._obj

    @property
    def class_name(self) -> str:
        return type(self._obj).__name__

    @property
    def module(self) -> str:
        return type(self._obj).__module__

    def has(self, name: str) -> bool:
        return hasattr(self._obj, name)

    def get(self, name: str) -> Any:
        """Look an attribute up by name. Raises AttributeError if absent."""
        return getattr(self._obj, name)

    def set(self, name: str, value: Any) -> None:
        setattr(self._obj, name, value)

    def call(self, name: str, *args: Any, **kwargs: Any) -> Any:
        method = self.get(name)
        if not callable(method):
            raise TypeError(f"'{self.class_name}.{name}' is not callable")
        return method(*args, **kwargs)

    def predict(self, data: Any) -> Any:
        try:
            return self.call("predict", data)
        except AttributeError as e:
            raise ModelPredictionError(
                f"{self.class_name} has no predict method", {"source": self.source}
            ) from e

    def __repr__(self) -> str:
        return f"ForeignModelHandle({self.class_name}, source={self.source!r})"


def _deserialize(path: Path) -> Any:
    if path.suffix.lower() == ".joblib":
        return joblib.load(path)
    with open(path, "rb") as f:
        return pickle.load(f)


def load_object(path: str | Path) -> ForeignModelHandle:
    """Deserialize a model file into a :class:`ForeignModelHandle`.

    ``.joblib`` files are read with joblib, anything else with pickle.

    Args:
        path: Path to the serialized model.

    Returns:
        Handle to the loaded model.

    Raises:
        ModelFileNotFoundError: If the file does not exist.
        EnvironmentMismatchError: If the active libraries do not match the ones
            the model was serialized with.
        ModelDeserializationError: If the payload cannot be read.
    """
    path = Path(path)
    if not path.exists():
        raise ModelFileNotFoundError(str(path))

    logger.info("Loading model", path=str(path))

    with warnings.catch_warnings():
        warnings.simplefilter("error", InconsistentVersionWarning)
        try:
            obj = _deserialize(path)
        except InconsistentVersionWarning as e:
            raise EnvironmentMismatchError(
                f"Model was pickled with {e.estimator_name} from scikit-learn "
                f"{e.original_sklearn_version}, active version is {e.current_sklearn_version}",
                {
                    "path": str(path),
                    "original_version": e.original_sklearn_version,
                    "current_version": e.current_sklearn_version,
                },
            ) from e
        except (ImportError, AttributeError) as e:
            raise EnvironmentMismatchError(
                f"Cannot unpickle {path}: {e}. Library versions of the active "
                "environment probably differ from the ones the model was saved with",
                {"path": str(path), "error": str(e)},
            ) from e
        except (pickle.UnpicklingError, EOFError, ValueError, TypeError) as e:
            raise ModelDeserializationError(
                f"Cannot deserialize {path}: {e}", {"path": str(path)}
            ) from e

    handle = ForeignModelHandle(obj, source=str(path))
    logger.info("Model loaded", model_class=handle.class_name, module=handle.module)
    return handle
