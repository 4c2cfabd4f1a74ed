# feature_effects/utils/exceptions.py
"""Custom exception hierarchy for feature_effects package.

Every failure raised by the package derives from ``FeatureEffectsError`` and
carries an error code plus a context dictionary identifying the offending
feature, grid value or adapter call.
"""

from typing import Any, Optional, Dict, List


class FeatureEffectsError(Exception):
    """Base exception for all feature_effects package errors.

    Provides common functionality for error codes and structured
    context used by callers to identify what failed.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        """Initialize FeatureEffectsError.

        Args:
            message: Human-readable error message
            error_code: Optional error code for programmatic handling
            context: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def __str__(self) -> str:
        """Return string representation of error."""
        base_msg = self.message
        if self.error_code:
            base_msg = f"[{self.error_code}] {base_msg}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg = f"{base_msg} (Context: {context_str})"
        return base_msg


class ConfigurationError(FeatureEffectsError):
    """Raised when configuration or call arguments are invalid.

    This exception is raised for issues with:
    - Invalid parameter values
    - Malformed configuration files
    - Unsupported feature counts for an effect request
    """
    pass


class DataValidationError(FeatureEffectsError):
    """Raised when input rows cannot form a consistent dataset."""
    pass


class NotFoundError(FeatureEffectsError):
    """Raised when a feature name or row index does not exist."""
    pass


class InsufficientDataError(FeatureEffectsError):
    """Raised when a feature has no usable values to build a grid from."""
    pass


class InvalidCenterError(FeatureEffectsError):
    """Raised when an ICE centering anchor cannot be resolved to a grid point."""
    pass


class ContractViolationError(FeatureEffectsError):
    """Raised when a model adapter breaks its batched prediction contract.

    This exception is raised when an adapter:
    - Returns a prediction sequence of the wrong length or shape
    - Returns non-finite values (NaN, inf)
    - Fails while predicting a batch
    """
    pass


class ComputationCancelledError(FeatureEffectsError):
    """Raised when a caller cancels a running effect computation."""
    pass


# Utility functions for error handling
def handle_and_reraise(
    exception: Exception,
    error_class: type,
    message: str,
    error_code: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> None:
    """Handle an exception and re-raise as a feature_effects exception.

    Args:
        exception: Original exception that was caught
        error_class: FeatureEffectsError subclass to raise
        message: Custom error message
        error_code: Optional error code
        context: Optional error context

    Raises:
        error_class: The specified feature_effects exception
    """
    if context is None:
        context = {}

    context["original_error"] = str(exception)
    context["original_error_type"] = type(exception).__name__

    raise error_class(message, error_code, context) from exception


def validate_parameter(
    param_name: str,
    param_value: Any,
    valid_values: Optional[List[Any]] = None,
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
    required: bool = False
) -> None:
    """Validate a parameter value and raise ConfigurationError if invalid.

    Args:
        param_name: Name of the parameter being validated
        param_value: Value to validate
        valid_values: List of valid values (if applicable)
        min_value: Minimum allowed value (for numeric parameters)
        max_value: Maximum allowed value (for numeric parameters)
        required: Whether the parameter is required (cannot be None)

    Raises:
        ConfigurationError: If validation fails
    """
    if required and param_value is None:
        raise ConfigurationError(
            f"Parameter '{param_name}' is required but was not provided",
            error_code="PARAM_REQUIRED",
            context={"parameter": param_name}
        )

    if param_value is None:
        return

    if valid_values is not None and param_value not in valid_values:
        raise ConfigurationError(
            f"Parameter '{param_name}' must be one of {valid_values}, got {param_value}",
            error_code="PARAM_INVALID_VALUE",
            context={"parameter": param_name, "value": param_value, "valid_values": valid_values}
        )

    if min_value is not None and param_value < min_value:
        raise ConfigurationError(
            f"Parameter '{param_name}' must be >= {min_value}, got {param_value}",
            error_code="PARAM_TOO_SMALL",
            context={"parameter": param_name, "value": param_value, "min_value": min_value}
        )

    if max_value is not None and param_value > max_value:
        raise ConfigurationError(
            f"Parameter '{param_name}' must be <= {max_value}, got {param_value}",
            error_code="PARAM_TOO_LARGE",
            context={"parameter": param_name, "value": param_value, "max_value": max_value}
        )


def create_error_context(**kwargs: Any) -> Dict[str, Any]:
    """Create an error context dictionary with standardized keys.

    Args:
        **kwargs: Key-value pairs to include in context

    Returns:
        Dictionary with error context information
    """
    context = {}
    for key, value in kwargs.items():
        # Complex objects are stringified so the context stays printable
        if hasattr(value, '__dict__') or hasattr(value, '__slots__'):
            context[key] = str(value)
        else:
            context[key] = value

    return context
