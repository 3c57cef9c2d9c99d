"""
Custom Exceptions - Error handling for the Audit Module.

Each exception carries an ErrorKind so the analysis entry point can turn it
into an explicit error value for the reporting layer.
"""

from shared.schemas import AnalysisError, ErrorKind


class FairnessModuleError(Exception):
    """Base exception for all audit module errors."""

    kind = ErrorKind.COMPUTATION_ERROR

    def to_error(self) -> AnalysisError:
        return AnalysisError(kind=self.kind, message=str(self))


class InsufficientDataError(FairnessModuleError):
    """
    Raised when the dataset is too small to analyze.

    Example:
        >>> if len(dataset) < 2:
        ...     raise InsufficientDataError(
        ...         f"Dataset has {len(dataset)} records, at least 2 required"
        ...     )
    """

    kind = ErrorKind.INSUFFICIENT_DATA


class NoProtectedAttributesError(FairnessModuleError):
    """
    Raised when column profiling finds no protected-attribute column.

    Usually means the configured keywords do not match the dataset headers.
    """

    kind = ErrorKind.NO_PROTECTED_ATTRIBUTES


class ComputationError(FairnessModuleError):
    """
    Raised when an analysis stage fails unexpectedly.

    Wraps the underlying exception message for diagnostics.
    """

    kind = ErrorKind.COMPUTATION_ERROR


class ConfigurationError(FairnessModuleError):
    """
    Raised when configuration parameters are invalid or incompatible.

    Example:
        >>> errors = config.validate()
        >>> if errors:
        ...     raise ConfigurationError(f"Invalid configuration: {errors}")
    """

    kind = ErrorKind.CONFIGURATION_ERROR


def error_from_exception(exc: Exception) -> AnalysisError:
    """
    Convert any exception into an AnalysisError value.

    Audit module errors keep their kind, anything else becomes a
    COMPUTATION_ERROR carrying the exception type and message.
    """
    if isinstance(exc, FairnessModuleError):
        return exc.to_error()
    return AnalysisError(
        kind=ErrorKind.COMPUTATION_ERROR,
        message=f"{type(exc).__name__}: {exc}",
    )
