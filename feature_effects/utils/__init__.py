"""Feature Effects - Utility Components.

Shared logging, timing and exception utilities.

Example:
    >>> from feature_effects.utils import get_logger, timer
    >>> logger = get_logger(__name__)
"""

from .logger import (
    get_logger,
    configure_logging,
    set_log_level,
    temporary_log_level
)
from .timer import (
    timer,
    timed_operation,
    get_performance_stats,
    reset_performance_stats
)
from .exceptions import (
    FeatureEffectsError,
    ConfigurationError,
    DataValidationError,
    NotFoundError,
    InsufficientDataError,
    InvalidCenterError,
    ContractViolationError,
    ComputationCancelledError,
    handle_and_reraise,
    validate_parameter,
    create_error_context
)

__all__ = [
    # Logging utilities
    'get_logger',
    'configure_logging',
    'set_log_level',
    'temporary_log_level',

    # Timing utilities
    'timer',
    'timed_operation',
    'get_performance_stats',
    'reset_performance_stats',

    # Exceptions
    'FeatureEffectsError',
    'ConfigurationError',
    'DataValidationError',
    'NotFoundError',
    'InsufficientDataError',
    'InvalidCenterError',
    'ContractViolationError',
    'ComputationCancelledError',
    'handle_and_reraise',
    'validate_parameter',
    'create_error_context'
]
