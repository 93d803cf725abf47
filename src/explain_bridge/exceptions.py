"""Domain-specific exception hierarchy for explain-bridge.

Provides granular error handling organized by domain:
- Configuration errors
- Runtime environment errors
- Model errors
- Data errors
"""


class BridgeError(Exception):
    """Base exception for all explain-bridge errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(BridgeError):
    """Base class for configuration-related errors."""


class InvalidYAMLError(ConfigurationError):
    """Raised when YAML parsing fails.

    Example:
        raise InvalidYAMLError("config.yaml", "mapping values not allowed here")
    """

    def __init__(self, path: str, parse_error: str):
        message = f"Invalid YAML in {path}"
        super().__init__(
            message,
            {"path": path, "parse_error": parse_error, "suggestion": "Validate YAML syntax"},
        )


class MissingCredentialError(ConfigurationError):
    """Raised when a required credential (API token) is not configured.

    Example:
        raise MissingCredentialError(
            "MLJAR_TOKEN",
            docs_url="https://github.com/mljar/mljar-api-python/blob/master/README.md",
        )
    """

    def __init__(self, credential: str, docs_url: str | None = None):
        message = (
            f"In order to use this function it is necessary to set {credential}. "
            "Pass it explicitly or add it to your environment variables."
        )
        if docs_url:
            message += f" For more info see {docs_url}"
        super().__init__(message, {"credential": credential, "docs_url": docs_url})


# =============================================================================
# Runtime Environment Errors
# =============================================================================


class RuntimeEnvironmentError(BridgeError):
    """Base class for errors while preparing the model's runtime environment."""


class EnvironmentProvisioningError(RuntimeEnvironmentError):
    """Raised when a conda or virtual environment cannot be created or found."""


class EnvironmentMismatchError(RuntimeEnvironmentError):
    """Raised when the active runtime does not match the one a model was pickled in."""


# =============================================================================
# Model Errors
# =============================================================================


class ModelError(BridgeError):
    """Base class for model-related errors."""


class ModelFileNotFoundError(ModelError):
    """Raised when a serialized model file does not exist."""

    def __init__(self, path: str):
        super().__init__(
            f"Model file not found: {path}",
            {
                "path": path,
                "suggestions": [
                    f"Check that the path exists: {path}",
                    "Use absolute path or path relative to current directory",
                ],
            },
        )


class ModelDeserializationError(ModelError):
    """Raised when a serialized model cannot be read."""


class ParameterExtractionError(ModelError):
    """Raised when constructor parameters cannot be recovered from a model."""


class ModelPredictionError(ModelError):
    """Raised when model prediction fails."""


# =============================================================================
# Data Errors
# =============================================================================


class DataError(BridgeError):
    """Base class for data-related errors."""


class InvalidDataError(DataError):
    """Raised when data format or content is invalid."""


class DefaultDataError(DataError):
    """Raised when default data cannot be retrieved for a platform model."""


class ColumnNotFoundError(DataError):
    """Raised when a required column is missing from dataset.

    Example:
        raise ColumnNotFoundError("target", ["feature1", "feature2", "label"])
    """

    def __init__(self, column: str, available_columns: list[str]):
        message = f"Column '{column}' not found in dataset"
        shown_columns = available_columns[:10]
        suffix = f"... ({len(available_columns) - 10} more)" if len(available_columns) > 10 else ""
        super().__init__(
            message,
            {
                "column": column,
                "available_columns": available_columns,
                "suggestion": f"Available columns: {shown_columns}{suffix}",
            },
        )